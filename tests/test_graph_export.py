import re

import pytest

from roadroute.graph_export import graph_to_dimacs, graph_to_dot, graph_to_svg

FIRST_OUT = [0, 2, 3, 3]
HEAD = [1, 2, 2]
WEIGHT = [7, 4, 9]


def test_dot_worked_example():
    assert graph_to_dot([0, 1, 1], [1], [5]) == 'digraph G{0 -> 1[label="5"];\n}\n'


def test_dot_empty_graph():
    assert graph_to_dot([0, 0], [], []) == "digraph G{}\n"


def test_dot_rejects_empty_first_out():
    with pytest.raises(ValueError):
        graph_to_dot([], [], [])


def test_svg_structure():
    text = graph_to_svg(FIRST_OUT, HEAD, [49.0, 49.5, 50.0], [8.0, 9.0, 8.5])
    assert text.startswith("<svg")
    assert text.endswith("</svg>\n")
    assert text.count("<line ") == len(HEAD)


def test_svg_coordinates_within_viewbox():
    text = graph_to_svg(FIRST_OUT, HEAD, [49.0, 49.5, 50.0], [8.0, 9.0, 8.5])
    coordinates = [float(v) for v in re.findall(r'[xy][12]="([^"]+)"', text)]
    assert len(coordinates) == 4 * len(HEAD)
    assert all(0.0 <= c <= 300.0 for c in coordinates)


def test_svg_lowest_latitude_is_at_bottom():
    text = graph_to_svg([0, 1, 1], [1], [10.0, 20.0], [5.0, 6.0])
    assert 'x1="0" y1="300"' in text
    assert 'x2="300" y2="0"' in text


def test_svg_rejects_degenerate_extent():
    with pytest.raises(ValueError):
        graph_to_svg([0, 1, 1], [1], [10.0, 10.0], [5.0, 6.0])


def test_dimacs_output():
    text = graph_to_dimacs(FIRST_OUT, HEAD, WEIGHT)
    lines = text.splitlines()
    assert lines[0] == "p sp 3 3"
    assert lines[1:] == ["a 1 2 7", "a 1 3 4", "a 2 3 9"]


@pytest.mark.parametrize(
    "first_out, head, weight",
    [
        ([], [], []),
        ([1, 1], [0], [1]),
        ([0, 1], [0, 0], [1, 1]),
        ([0, 0], [], []),
        ([0, 1, 1], [5], [1]),
        ([0, 1, 1], [1], [1, 2]),
    ],
)
def test_dimacs_validation(first_out, head, weight):
    with pytest.raises(ValueError):
        graph_to_dimacs(first_out, head, weight)