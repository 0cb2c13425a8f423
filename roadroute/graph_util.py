"""Helpers for graphs stored as first_out/head arrays."""

from __future__ import annotations

from bisect import bisect_left
from collections.abc import Sequence

from .permutation import INVALID_ID, invert_permutation


def _check_node(first_out: Sequence[int], node: int) -> None:
    if not 0 <= node < len(first_out) - 1:
        raise IndexError(f"node id {node} is out of bounds")


def find_arc_or_return_invalid(first_out: Sequence[int], head: Sequence[int], x: int, y: int) -> int:
    """Return the first arc from ``x`` to ``y``, or ``INVALID_ID`` if there is none."""
    _check_node(first_out, x)
    _check_node(first_out, y)
    try:
        return head.index(y, first_out[x], first_out[x + 1])
    except ValueError:
        return INVALID_ID


def find_arc(first_out: Sequence[int], head: Sequence[int], x: int, y: int) -> int:
    """Return the first arc from ``x`` to ``y``; raise KeyError if there is none."""
    arc = find_arc_or_return_invalid(first_out, head, x, y)
    if arc == INVALID_ID:
        raise KeyError(f"no arc from {x} to {y}")
    return arc


def find_arc_or_return_invalid_given_sorted_head(
    first_out: Sequence[int], head: Sequence[int], x: int, y: int
) -> int:
    """Binary search for an arc from ``x`` to ``y`` in sorted heads."""
    _check_node(first_out, x)
    _check_node(first_out, y)
    begin, end = first_out[x], first_out[x + 1]
    heads = head[begin:end]
    if any(a > b for a, b in zip(heads, heads[1:])):
        raise ValueError("heads are not sorted")
    pos = bisect_left(head, y, begin, end)
    if pos == end or head[pos] != y:
        return INVALID_ID
    return pos


def find_arc_given_sorted_head(first_out: Sequence[int], head: Sequence[int], x: int, y: int) -> int:
    """Binary search for an arc from ``x`` to ``y``; raise KeyError if there is none."""
    arc = find_arc_or_return_invalid_given_sorted_head(first_out, head, x, y)
    if arc == INVALID_ID:
        raise KeyError(f"no arc from {x} to {y}")
    return arc


def convert_node_path_to_arc_path(
    first_out: Sequence[int], head: Sequence[int], path: Sequence[int]
) -> list[int]:
    """Turn a sequence of nodes into the sequence of arcs joining them."""
    return [find_arc(first_out, head, x, y) for x, y in zip(path, path[1:])]


def convert_arc_path_to_node_path(source: int, head: Sequence[int], path: Sequence[int]) -> list[int]:
    """Turn a sequence of arcs starting at ``source`` into a sequence of nodes."""
    if not path:
        return []
    return [source, *(head[arc] for arc in path)]


def invert_vector(tail: Sequence[int], node_count: int) -> list[int]:
    """Build the first_out array from a sorted tail array."""
    tail = list(tail)
    if any(a > b for a, b in zip(tail, tail[1:])):
        raise ValueError("tail must be sorted")
    if tail and not 0 <= tail[0] <= tail[-1] < node_count:
        raise ValueError("tail contains an out of bounds element")
    return [bisect_left(tail, x) for x in range(node_count + 1)]


def invert_inverse_vector(first_out: Sequence[int]) -> list[int]:
    """Build the tail array from a first_out array."""
    tail: list[int] = []
    for node, (begin, end) in enumerate(zip(first_out, first_out[1:])):
        if end < begin:
            raise ValueError("first_out must be non-decreasing")
        tail.extend([node] * (end - begin))
    return tail


def stable_sort_permutation(keys: Sequence) -> list[int]:
    """Return ``p`` such that ``[keys[i] for i in p]`` is stably sorted."""
    return sorted(range(len(keys)), key=keys.__getitem__)


def _check_keys(values: Sequence[int], count: int, name: str) -> None:
    if any(not 0 <= x < count for x in values):
        raise ValueError(f"{name} contains a key out of range")


def compute_sort_permutation_first_by_left_then_by_right(
    a_count: int, a: Sequence[int], b_count: int, b: Sequence[int]
) -> list[int]:
    """Return the stable permutation sorting index pairs by ``a`` then by ``b``."""
    if len(a) != len(b):
        raise ValueError("a and b must have the same size")
    _check_keys(a, a_count, "a")
    _check_keys(b, b_count, "b")
    return sorted(range(len(a)), key=lambda i: (a[i], b[i]))


def compute_inverse_sort_permutation_first_by_left_then_by_right(
    a_count: int, a: Sequence[int], b_count: int, b: Sequence[int]
) -> list[int]:
    """Return the inverse of the permutation sorting by ``a`` then by ``b``."""
    return invert_permutation(compute_sort_permutation_first_by_left_then_by_right(a_count, a, b_count, b))


def compute_sort_permutation_first_by_tail_then_by_head(
    node_count: int, tail: Sequence[int], head: Sequence[int]
) -> list[int]:
    """Return the permutation sorting arcs by tail then by head."""
    return compute_sort_permutation_first_by_left_then_by_right(node_count, tail, node_count, head)


def compute_inverse_sort_permutation_first_by_tail_then_by_head(
    node_count: int, tail: Sequence[int], head: Sequence[int]
) -> list[int]:
    """Return the inverse of the permutation sorting arcs by tail then by head."""
    return compute_inverse_sort_permutation_first_by_left_then_by_right(node_count, tail, node_count, head)