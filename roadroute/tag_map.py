"""A small lookup table for string tags such as those of map elements."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import Any

_CHAR_HASH_COUNT = 16
_MAX_ENTRY_COUNT = 1 << 16

_CHAR_HASH = {
    code: value
    for value, letter in enumerate("etaoinshr", start=7)
    for code in (ord(letter), ord(letter.upper()))
}


def _char_hash(byte: int) -> int:
    return _CHAR_HASH.get(byte, byte % 7)


def _compute_hash(key: str) -> int:
    data = key.encode("utf-8")
    if not data:
        return 0
    last = len(data) - 1
    return (
        _char_hash(data[0]) * _CHAR_HASH_COUNT + _char_hash(data[last])
    ) * _CHAR_HASH_COUNT + _char_hash(data[last // 2])


class TagMap:
    """Maps tag keys to values; for repeated keys the first pair wins."""

    def __init__(self) -> None:
        self._entries: list[tuple[str, str]] = []
        self._lookup: dict[str, str] = {}

    def build(self, pairs: Iterable[tuple[str, str]]) -> None:
        """Replace the content with the given key/value pairs."""
        pairs = [(key, value) for key, value in pairs]
        if len(pairs) > _MAX_ENTRY_COUNT:
            raise ValueError(f"a tag map holds at most {_MAX_ENTRY_COUNT} entries")
        order = sorted(range(len(pairs)), key=lambda i: (_compute_hash(pairs[i][0]), i))
        self._entries = [pairs[i] for i in order]
        self._lookup = {}
        for key, value in self._entries:
            self._lookup.setdefault(key, value)

    def clear(self) -> None:
        self._entries = []
        self._lookup = {}

    def get(self, key: str, default: Any = None) -> Any:
        return self._lookup.get(key, default)

    def __getitem__(self, key: str) -> str:
        return self._lookup[key]

    def __contains__(self, key: object) -> bool:
        return key in self._lookup

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[tuple[str, str]]:
        return iter(self._entries)