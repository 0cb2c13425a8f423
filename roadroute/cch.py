"""Construction of customizable contraction hierarchies (CCH).

A CCH is built from a node order and the arc list of an input graph alone;
arc weights are brought in later by a metric. The upward graph is a chordal
supergraph of the symmetric input graph in which every arc points from a
lower ranked node to a higher ranked one.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager
from itertools import compress
from typing import NamedTuple

from .graph_util import compute_sort_permutation_first_by_tail_then_by_head, invert_vector
from .id_mapper import LocalIDMapper
from .permutation import INVALID_ID, apply_permutation_to_elements_of, invert_permutation

LogMessage = Callable[[str], None]


class Triangle(NamedTuple):
    """A triangle {x, y, z} of the upward graph with ranks x < y < z.

    The bottom arc is x->y, the mid arc is x->z and the top arc is y->z.
    """

    bottom_arc: int
    mid_arc: int
    top_arc: int
    bottom_node: int
    mid_node: int
    top_node: int


def compute_chordal_supergraph(
    node_count: int, tail: Sequence[int], head: Sequence[int]
) -> tuple[list[tuple[int, int]], int]:
    """Eliminate the nodes in id order and return the upward arcs and a treewidth bound.

    Only arcs with ``tail < head`` are looked at. The arcs are returned as
    ``(tail, head)`` pairs sorted by tail, then by head. The second value is the
    largest upward degree, an upper bound on the treewidth of the graph.
    """
    if len(tail) != len(head):
        raise ValueError("tail and head must have the same size")
    upper: list[set[int]] = [set() for _ in range(node_count)]
    for x, y in zip(tail, head):
        if not (0 <= x < node_count and 0 <= y < node_count):
            raise ValueError(f"arc ({x}, {y}) has an out of bounds node id")
        if x < y:
            upper[x].add(y)

    arcs: list[tuple[int, int]] = []
    max_upward_degree = 0
    for x in range(node_count):
        neighbors = sorted(upper[x])
        if not neighbors:
            continue
        lowest = neighbors[0]
        upper[lowest].update(neighbors[1:])
        arcs.extend((x, y) for y in neighbors)
        max_upward_degree = max(max_upward_degree, len(neighbors))
    return arcs, max_upward_degree


def _check_arc(cch: CustomizableContractionHierarchy, xy: int) -> tuple[int, int]:
    if not 0 <= xy < len(cch.up_head):
        raise IndexError(f"cch arc {xy} is out of bounds")
    return cch.up_tail[xy], cch.up_head[xy]


def upper_triangles_of_arc(cch: CustomizableContractionHierarchy, xy: int) -> Iterator[Triangle]:
    """Yield the triangles whose bottom arc is ``xy``."""
    x, y = _check_arc(cch, xy)
    up_head = cch.up_head
    x_arc, x_end = xy + 1, cch.up_first_out[x + 1]
    y_arc, y_end = cch.up_first_out[y], cch.up_first_out[y + 1]
    while x_arc != x_end and y_arc != y_end:
        if up_head[x_arc] < up_head[y_arc]:
            x_arc += 1
        elif up_head[x_arc] > up_head[y_arc]:
            y_arc += 1
        else:
            yield Triangle(xy, x_arc, y_arc, x, y, up_head[x_arc])
            x_arc += 1
            y_arc += 1


def intermediate_triangles_of_arc(cch: CustomizableContractionHierarchy, xy: int) -> Iterator[Triangle]:
    """Yield the triangles whose mid arc is ``xy``."""
    x, y = _check_arc(cch, xy)
    up_head, down_head = cch.up_head, cch.down_head
    x_arc, x_end = cch.up_first_out[x], xy
    y_down, y_end = cch.down_first_out[y], cch.down_first_out[y + 1]
    while x_arc != x_end and y_down != y_end:
        if up_head[x_arc] < down_head[y_down]:
            x_arc += 1
        elif up_head[x_arc] > down_head[y_down]:
            y_down += 1
        else:
            yield Triangle(x_arc, xy, cch.down_to_up[y_down], x, up_head[x_arc], y)
            x_arc += 1
            y_down += 1


def lower_triangles_of_arc(cch: CustomizableContractionHierarchy, xy: int) -> Iterator[Triangle]:
    """Yield the triangles whose top arc is ``xy``."""
    x, y = _check_arc(cch, xy)
    down_head = cch.down_head
    x_down, x_end = cch.down_first_out[x], cch.down_first_out[x + 1]
    y_down, y_end = cch.down_first_out[y], cch.down_first_out[y + 1]
    while x_down != x_end and y_down != y_end:
        if down_head[x_down] < down_head[y_down]:
            x_down += 1
        elif down_head[x_down] > down_head[y_down]:
            y_down += 1
        else:
            yield Triangle(
                cch.down_to_up[x_down], cch.down_to_up[y_down], xy, down_head[x_down], x, y
            )
            x_down += 1
            y_down += 1


@contextmanager
def _stage(log: LogMessage | None, start: str, finish: str) -> Iterator[None]:
    if log is None:
        yield
        return
    log(start)
    began = time.perf_counter()
    yield
    log(f"{finish}, needed {int((time.perf_counter() - began) * 1e6)}musec")


class CustomizableContractionHierarchy:
    """The metric independent part of a customizable contraction hierarchy.

    Node ids inside the hierarchy are ranks; ``order[rank]`` gives the input
    node and ``rank[node]`` the rank of an input node.
    """

    def __init__(
        self,
        order: Sequence[int],
        tail: Sequence[int],
        head: Sequence[int],
        log_message: LogMessage | None = None,
        filter_always_inf_arcs: bool = False,
    ) -> None:
        log = log_message
        self.order = list(order)
        tail = list(tail)
        head = list(head)
        if len(tail) != len(head):
            raise ValueError("tail and head must have the same size")
        node_count = len(self.order)
        input_arc_count = len(tail)

        if log:
            log("Building CCH")
            log(f"Input graph has {node_count} nodes and {input_arc_count} arcs")

        self.rank = invert_permutation(self.order)

        with _stage(log, "Start reordering nodes according to order", "Finished reordering nodes"):
            ranked_tail = apply_permutation_to_elements_of(self.rank, tail)
            ranked_head = apply_permutation_to_elements_of(self.rank, head)

        with _stage(log, "Start building chordal supergraph", "Finished building chordal supergraph"):
            edges = sorted({(min(t, h), max(t, h)) for t, h in zip(ranked_tail, ranked_head) if t != h})
            arcs, treewidth_bound = compute_chordal_supergraph(
                node_count, [a for a, _ in edges], [b for _, b in edges]
            )
            if len(arcs) >= INVALID_ID:
                if log:
                    log("CCH Construction aborted because chordal supergraph contains 2^32 or more arcs")
                raise RuntimeError("CCH must contain at most 2^32-1 arcs")
            if log:
                log(f"The treewidth of the input graph is bounded by {treewidth_bound}")
            arcs.sort()
            self.up_tail = [x for x, _ in arcs]
            self.up_head = [y for _, y in arcs]
            self.up_first_out = invert_vector(self.up_tail, node_count)

        cch_arc_count = len(arcs)
        if log:
            log(f"Chordal supergraph contains {cch_arc_count} arcs")

        with _stage(log, "Start computing mapping from input arcs to CCH arcs", "Finished computing mapping"):
            arc_index = {arc: i for i, arc in enumerate(arcs)}
            self.input_arc_to_cch_arc: list[int] = []
            self.is_input_arc_upward: list[bool] = []
            for t, h in zip(ranked_tail, ranked_head):
                if t < h:
                    self.input_arc_to_cch_arc.append(arc_index[(t, h)])
                    self.is_input_arc_upward.append(True)
                elif t > h:
                    self.input_arc_to_cch_arc.append(arc_index[(h, t)])
                    self.is_input_arc_upward.append(False)
                else:
                    self.input_arc_to_cch_arc.append(INVALID_ID)
                    self.is_input_arc_upward.append(False)

        with _stage(log, "Start computing elimination tree", "Finished computing elimination tree"):
            self.elimination_tree_parent = [
                self.up_head[begin] if begin != end else INVALID_ID
                for begin, end in zip(self.up_first_out, self.up_first_out[1:])
            ]

        if log and node_count:
            self._log_search_space_statistics(log)

        if not filter_always_inf_arcs:
            if log:
                log("Not filtering upward arcs")
        else:
            self._filter_always_inf_arcs(log, node_count)

        with _stage(log, "Start computing downward arcs", "Finished computing downward arcs"):
            self.down_to_up = compute_sort_permutation_first_by_tail_then_by_head(
                node_count, self.up_head, self.up_tail
            )
            self.down_head = [self.up_tail[a] for a in self.down_to_up]
            self.down_first_out = invert_vector([self.up_head[a] for a in self.down_to_up], node_count)

        with _stage(log, "Start computing mapping from CCH arcs to input arcs", "Finished computing mapping"):
            self._map_cch_arcs_to_input_arcs()

        if log:
            log(f"{self.does_cch_arc_have_input_arc_mapper.local_id_count()} cch arcs have an input arc")
            log(
                f"{self.does_cch_arc_have_extra_input_arc_mapper.local_id_count()}"
                " cch arcs have two or more input arcs"
            )

    def _log_search_space_statistics(self, log: LogMessage) -> None:
        node_count = self.node_count()
        nodes_in_search_space = [0] * node_count
        arcs_in_search_space = [0] * node_count
        for x in reversed(range(node_count)):
            parent = self.elimination_tree_parent[x]
            if parent != INVALID_ID:
                nodes_in_search_space[x] = 1 + nodes_in_search_space[parent]
                degree = self.up_first_out[x + 1] - self.up_first_out[x]
                arcs_in_search_space[x] = degree + arcs_in_search_space[parent]
            else:
                nodes_in_search_space[x] = 1
        log(f"The average number of nodes in a search space is {sum(nodes_in_search_space) // node_count}")
        log(f"The maximum number of nodes in a search space is {max(nodes_in_search_space)}")
        log(f"The average number of arcs in a search space is {sum(arcs_in_search_space) // node_count}")
        log(f"The maximum number of arcs in a search space is {max(arcs_in_search_space)}")

    def _filter_always_inf_arcs(self, log: LogMessage | None, node_count: int) -> None:
        """Drop upward arcs whose weight is infinite under every metric."""
        cch_arc_count = len(self.up_head)
        with _stage(log, "Start filtering upward arcs", "Finished filtering upward arcs"):
            can_forward = [False] * cch_arc_count
            can_backward = [False] * cch_arc_count
            for arc, upward in zip(self.input_arc_to_cch_arc, self.is_input_arc_upward):
                if arc != INVALID_ID:
                    (can_forward if upward else can_backward)[arc] = True

            triangle_count = 0
            for a in range(cch_arc_count):
                for t in upper_triangles_of_arc(self, a):
                    if not can_forward[t.top_arc] and can_backward[t.bottom_arc] and can_forward[t.mid_arc]:
                        can_forward[t.top_arc] = True
                    if not can_backward[t.top_arc] and can_forward[t.bottom_arc] and can_backward[t.mid_arc]:
                        can_backward[t.top_arc] = True
                    triangle_count += 1

            keep = [f or b for f, b in zip(can_forward, can_backward)]
            self.up_head = list(compress(self.up_head, keep))
            self.up_tail = list(compress(self.up_tail, keep))
            self.up_first_out = invert_vector(self.up_tail, node_count)

            mapper = LocalIDMapper(keep)
            self.input_arc_to_cch_arc = [
                arc if arc == INVALID_ID else mapper.to_local(arc) for arc in self.input_arc_to_cch_arc
            ]

        if log:
            log(f"The number of arcs decreased from {cch_arc_count} to {mapper.local_id_count()}")
            log(
                f"The number of triangles before filtering was {triangle_count}."
                " (The value after filtering was not determined.)"
            )

    def _map_cch_arcs_to_input_arcs(self) -> None:
        cch_arc_count = len(self.up_head)
        self.does_cch_arc_have_input_arc = [False] * cch_arc_count
        for arc in self.input_arc_to_cch_arc:
            if arc != INVALID_ID:
                self.does_cch_arc_have_input_arc[arc] = True
        self.does_cch_arc_have_input_arc_mapper = LocalIDMapper(self.does_cch_arc_have_input_arc)

        with_input_count = self.does_cch_arc_have_input_arc_mapper.local_id_count()
        self.forward_input_arc_of_cch = [INVALID_ID] * with_input_count
        self.backward_input_arc_of_cch = [INVALID_ID] * with_input_count
        self.does_cch_arc_have_extra_input_arc = [False] * cch_arc_count

        extra_forward: list[tuple[int, int]] = []
        extra_backward: list[tuple[int, int]] = []
        for input_arc, (cch_arc, upward) in enumerate(zip(self.input_arc_to_cch_arc, self.is_input_arc_upward)):
            if cch_arc == INVALID_ID:
                continue
            i = self.does_cch_arc_have_input_arc_mapper.to_local(cch_arc)
            first, extra = (
                (self.forward_input_arc_of_cch, extra_forward)
                if upward
                else (self.backward_input_arc_of_cch, extra_backward)
            )
            if first[i] == INVALID_ID:
                first[i] = input_arc
            else:
                self.does_cch_arc_have_extra_input_arc[cch_arc] = True
                extra.append((cch_arc, input_arc))

        self.does_cch_arc_have_extra_input_arc_mapper = LocalIDMapper(self.does_cch_arc_have_extra_input_arc)
        extra_count = self.does_cch_arc_have_extra_input_arc_mapper.local_id_count()

        def group(pairs: list[tuple[int, int]]) -> tuple[list[int], list[int]]:
            local = [(self.does_cch_arc_have_extra_input_arc_mapper.to_local(c), a) for c, a in pairs]
            local.sort(key=lambda pair: pair[0])
            return invert_vector([c for c, _ in local], extra_count), [a for _, a in local]

        self.first_extra_forward_input_arc_of_cch, self.extra_forward_input_arc_of_cch = group(extra_forward)
        self.first_extra_backward_input_arc_of_cch, self.extra_backward_input_arc_of_cch = group(extra_backward)

    def node_count(self) -> int:
        return len(self.order)

    def cch_arc_count(self) -> int:
        return len(self.up_head)

    def input_arc_count(self) -> int:
        return len(self.input_arc_to_cch_arc)