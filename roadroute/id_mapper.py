"""Maps the set positions of a bit vector to dense local ids and back."""

from __future__ import annotations

from collections.abc import Iterable
from itertools import accumulate, compress
from typing import Any


class LocalIDMapper:
    """Maps every global id whose bit is set to its rank among the set bits."""

    def __init__(self, bits: Iterable[Any]) -> None:
        self._bits = tuple(bool(b) for b in bits)
        self._rank = [0, *accumulate(map(int, self._bits))]

    def global_id_count(self) -> int:
        return len(self._bits)

    def local_id_count(self) -> int:
        return self._rank[-1]

    def is_global_id_mapped(self, global_id: int) -> bool:
        return 0 <= global_id < len(self._bits) and self._bits[global_id]

    def to_local(self, global_id: int) -> int:
        """Return the local id of ``global_id``; raise if it is not mapped."""
        if not 0 <= global_id < len(self._bits):
            raise IndexError(f"global id {global_id} is out of bounds")
        if not self._bits[global_id]:
            raise KeyError(f"global id {global_id} is not mapped")
        return self._rank[global_id]

    def get_local(self, global_id: int, default: Any = None) -> Any:
        """Return the local id of ``global_id``, or ``default`` if it is not mapped."""
        if not self.is_global_id_mapped(global_id):
            return default
        return self._rank[global_id]


class IDMapper(LocalIDMapper):
    """A :class:`LocalIDMapper` that can also map local ids back to global ids."""

    def __init__(self, bits: Iterable[Any]) -> None:
        super().__init__(bits)
        self._global_ids = list(compress(range(len(self._bits)), self._bits))

    def to_global(self, local_id: int) -> int:
        if not 0 <= local_id < len(self._global_ids):
            raise IndexError(f"local id {local_id} is out of bounds")
        return self._global_ids[local_id]