"""Permutations of index vectors and their application to sequences.

Applying a permutation ``p`` to a sequence ``v`` yields ``[v[p[0]], v[p[1]], ...]``.
Applying ``p`` to the *elements* of ``v`` yields ``[p[v[0]], p[v[1]], ...]``.
"""

from __future__ import annotations

import random
from collections.abc import Sequence
from typing import TypeVar

T = TypeVar("T")

INVALID_ID = 0xFFFFFFFF


def is_permutation(p: Sequence[int]) -> bool:
    """Return True if ``p`` holds every number in ``range(len(p))`` exactly once."""
    return sorted(p) == list(range(len(p)))


def _require_permutation(p: Sequence[int], name: str = "p") -> None:
    if not is_permutation(p):
        raise ValueError(f"{name} must be a permutation")


def _require_same_size(p: Sequence[int], v: Sequence) -> None:
    if len(p) != len(v):
        raise ValueError("permutation and vector must have the same size")


def chain_permutation_first_left_then_right(p: Sequence[int], q: Sequence[int]) -> list[int]:
    """Return ``r`` with ``r[i] = p[q[i]]``."""
    _require_permutation(p, "p")
    _require_permutation(q, "q")
    if len(p) != len(q):
        raise ValueError("p and q must permute the same number of objects")
    return [p[x] for x in q]


def chain_permutation_first_right_then_left(p: Sequence[int], q: Sequence[int]) -> list[int]:
    """Return ``r`` with ``r[i] = q[p[i]]``."""
    return chain_permutation_first_left_then_right(q, p)


def apply_permutation(p: Sequence[int], v: Sequence[T]) -> list[T]:
    """Return ``[v[p[0]], v[p[1]], ...]``."""
    _require_permutation(p)
    _require_same_size(p, v)
    return [v[i] for i in p]


def apply_inverse_permutation(p: Sequence[int], v: Sequence[T]) -> list[T]:
    """Return ``r`` with ``r[p[i]] = v[i]``."""
    _require_permutation(p)
    _require_same_size(p, v)
    result: list = [None] * len(v)
    for target, value in zip(p, v):
        result[target] = value
    return result


def apply_permutation_to_elements_of(p: Sequence[int], v: Sequence[int]) -> list[int]:
    """Return ``[p[v[0]], p[v[1]], ...]``."""
    _require_permutation(p)
    if any(not 0 <= x < len(p) for x in v):
        raise ValueError("v has an out of bounds element")
    return [p[x] for x in v]


def apply_permutation_to_possibly_invalid_elements_of(p: Sequence[int], v: Sequence[int]) -> list[int]:
    """Like :func:`apply_permutation_to_elements_of`, but keeps ``INVALID_ID`` elements."""
    _require_permutation(p)
    if any(not (0 <= x < len(p) or x == INVALID_ID) for x in v):
        raise ValueError("v has an out of bounds element")
    return [x if x == INVALID_ID else p[x] for x in v]


def invert_permutation(p: Sequence[int]) -> list[int]:
    """Return the inverse permutation of ``p``."""
    _require_permutation(p)
    inverse = [0] * len(p)
    for i, x in enumerate(p):
        inverse[x] = i
    return inverse


def identity_permutation(n: int) -> list[int]:
    """Return ``[0, 1, ..., n-1]``."""
    if n < 0:
        raise ValueError("permutation size must not be negative")
    return list(range(n))


def random_permutation(n: int, rng: random.Random | None = None) -> list[int]:
    """Return a uniformly random permutation of ``n`` elements."""
    result = identity_permutation(n)
    (rng if rng is not None else random).shuffle(result)
    return result