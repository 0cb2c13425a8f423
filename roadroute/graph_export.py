"""Text exports of graphs stored as first_out/head arrays."""

from __future__ import annotations

from collections.abc import Iterator, Sequence

_SVG_SIZE = 300


def _arcs(first_out: Sequence[int]) -> Iterator[tuple[int, int]]:
    """Yield (tail, arc) for every arc of the graph."""
    if not first_out:
        raise ValueError("first_out must not be empty")
    for node, (begin, end) in enumerate(zip(first_out, first_out[1:])):
        for arc in range(begin, end):
            yield node, arc


def graph_to_dot(first_out: Sequence[int], head: Sequence[int], weight: Sequence[int]) -> str:
    """Render the graph in Graphviz dot format with weights as arc labels."""
    body = "".join(f'{x} -> {head[xy]}[label="{weight[xy]}"];\n' for x, xy in _arcs(first_out))
    return "digraph G{" + body + "}\n"


def _scale(values: Sequence[float], name: str) -> list[float]:
    if not values:
        raise ValueError(f"{name} must not be empty")
    low, high = min(values), max(values)
    if high == low:
        raise ValueError(f"{name} must span a nonzero range")
    return [(v - low) * _SVG_SIZE / (high - low) for v in values]


def _num(value: float) -> str:
    return f"{value:g}"


def graph_to_svg(
    first_out: Sequence[int],
    head: Sequence[int],
    latitude: Sequence[float],
    longitude: Sequence[float],
) -> str:
    """Draw every arc as a line in a 300x300 SVG image."""
    y = _scale(list(latitude), "latitude")
    x = _scale(list(longitude), "longitude")
    lines = [
        '<svg xmlns="http://www.w3.org/2000/svg" xmlns:xlink="http://www.w3.org/1999/xlink" '
        f'viewBox="0 0 {_SVG_SIZE} {_SVG_SIZE}">\n'
    ]
    for a, arc in _arcs(first_out):
        b = head[arc]
        lines.append(
            f'<line x1="{_num(x[a])}" y1="{_num(_SVG_SIZE - y[a])}" '
            f'x2="{_num(x[b])}" y2="{_num(_SVG_SIZE - y[b])}" style="stroke:#000000;"/>\n'
        )
    lines.append("</svg>\n")
    return "".join(lines)


def graph_to_dimacs(first_out: Sequence[int], head: Sequence[int], weight: Sequence[int]) -> str:
    """Render the graph in the DIMACS shortest-path format with one-based node ids."""
    if not first_out:
        raise ValueError("first_out must not be empty")
    node_count = len(first_out) - 1
    arc_count = len(head)
    if first_out[0] != 0:
        raise ValueError("The first element of first out must be 0.")
    if first_out[-1] != arc_count:
        raise ValueError("The last element of first out must be the arc count.")
    if not head:
        raise ValueError("The head vector must not be empty.")
    if max(head) >= node_count:
        raise ValueError("The head vector contains an out-of-bounds node id.")
    if len(weight) != arc_count:
        raise ValueError("The weight vector must be as long as the number of arcs")
    lines = [f"p sp {node_count} {arc_count}\n"]
    lines.extend(f"a {x + 1} {head[xy] + 1} {weight[xy]}\n" for x, xy in _arcs(first_out))
    return "".join(lines)