"""Shortest path queries on a customized CCH metric.

A query runs an upward search from every source and from every target along
the elimination tree of the hierarchy. Sources and targets may carry an
initial distance. With pinned targets (or pinned sources) one side is fixed
and many queries from changing sources (or to changing targets) can be
answered in one pass each.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from enum import Enum, auto

from .cch import CustomizableContractionHierarchy, lower_triangles_of_arc
from .cch_metric import INF_WEIGHT, CustomizableContractionHierarchyMetric
from .graph_util import find_arc_given_sorted_head
from .permutation import INVALID_ID


class _State(Enum):
    INITIALIZED = auto()
    RUN = auto()
    SOURCE_PINNED = auto()
    SOURCE_RUN = auto()
    TARGET_PINNED = auto()
    TARGET_RUN = auto()


def _ancestors(parent: Sequence[int], x: int, stop_at: int = INVALID_ID) -> Iterator[int]:
    """Yield ``x`` and its elimination tree ancestors, stopping before ``stop_at``."""
    while x != stop_at:
        if x == INVALID_ID:
            raise RuntimeError("stop_at is not an ancestor of the start node")
        yield x
        x = parent[x]


def _relax_outgoing_arcs(
    cch: CustomizableContractionHierarchy,
    weight: Sequence[int],
    distance: list[int],
    predecessor: list[int] | None,
    x: int,
) -> None:
    up_head = cch.up_head
    dx = distance[x]
    for xy in range(cch.up_first_out[x], cch.up_first_out[x + 1]):
        y = up_head[xy]
        candidate = dx + weight[xy]
        if candidate < distance[y]:
            distance[y] = candidate
            if predecessor is not None:
                predecessor[y] = x


def _relax_incoming_arcs(
    cch: CustomizableContractionHierarchy,
    weight: Sequence[int],
    distance: list[int],
    x: int,
) -> None:
    up_head = cch.up_head
    for xy in range(cch.up_first_out[x], cch.up_first_out[x + 1]):
        y = up_head[xy]
        candidate = distance[y] + weight[xy]
        if candidate < distance[x]:
            distance[x] = candidate


class CustomizableContractionHierarchyQuery:
    """Answers distance and path queries on a customized metric."""

    def __init__(self, metric: CustomizableContractionHierarchyMetric) -> None:
        self._attach(metric)

    def _attach(self, metric: CustomizableContractionHierarchyMetric) -> None:
        cch = metric.cch
        n = cch.node_count()
        self.cch = cch
        self.metric = metric
        self.forward_tentative_distance = [INF_WEIGHT] * n
        self.backward_tentative_distance = [INF_WEIGHT] * n
        self.forward_predecessor_node = [INVALID_ID] * n
        self.backward_predecessor_node = [INVALID_ID] * n
        self.in_forward_search_space = [False] * n
        self.in_backward_search_space = [False] * n
        self.source_node: list[int] = []
        self.source_elimination_tree_end: list[int] = []
        self.target_node: list[int] = []
        self.target_elimination_tree_end: list[int] = []
        self.shortest_path_meeting_node = INVALID_ID
        self._state = _State.INITIALIZED

    def _require(self, *states: _State) -> None:
        if self._state not in states:
            allowed = ", ".join(s.name.lower() for s in states)
            raise RuntimeError(
                f"operation not allowed in state {self._state.name.lower()}; expected {allowed}"
            )

    def _check_node(self, node: int) -> None:
        if not 0 <= node < self.cch.node_count():
            raise IndexError(f"node id {node} is out of bounds")

    # -- resetting -------------------------------------------------------

    def _reset_source_list(
        self, nodes: list[int], ends: list[int], in_space: list[bool], distance: list[int]
    ) -> None:
        parent = self.cch.elimination_tree_parent
        for node, end in zip(nodes, ends):
            for x in _ancestors(parent, node, end):
                in_space[x] = False
                distance[x] = INF_WEIGHT
        nodes.clear()
        ends.clear()

    def _reset_target_distances(self, nodes: list[int], ends: list[int], distance: list[int]) -> None:
        parent = self.cch.elimination_tree_parent
        for node, end in zip(reversed(nodes), reversed(ends)):
            for x in _ancestors(parent, node, end):
                distance[x] = INF_WEIGHT

    def reset(
        self, metric: CustomizableContractionHierarchyMetric | None = None
    ) -> CustomizableContractionHierarchyQuery:
        """Forget all sources and targets and, optionally, switch to another metric."""
        if metric is not None:
            if metric.cch is not self.cch:
                self._attach(metric)
                return self
            self.metric = metric

        if self._state in (_State.TARGET_PINNED, _State.TARGET_RUN):
            self._reset_target_distances(
                self.target_node, self.target_elimination_tree_end, self.forward_tentative_distance
            )
        elif self._state in (_State.SOURCE_PINNED, _State.SOURCE_RUN):
            self._reset_target_distances(
                self.source_node, self.source_elimination_tree_end, self.backward_tentative_distance
            )
        self._reset_source_list(
            self.source_node,
            self.source_elimination_tree_end,
            self.in_forward_search_space,
            self.forward_tentative_distance,
        )
        self._reset_source_list(
            self.target_node,
            self.target_elimination_tree_end,
            self.in_backward_search_space,
            self.backward_tentative_distance,
        )
        self._state = _State.INITIALIZED
        return self

    def reset_source(self) -> CustomizableContractionHierarchyQuery:
        """Forget the sources while keeping the pinned targets."""
        self._require(_State.TARGET_PINNED, _State.TARGET_RUN)
        self._reset_source_list(
            self.source_node,
            self.source_elimination_tree_end,
            self.in_forward_search_space,
            self.forward_tentative_distance,
        )
        self._reset_target_distances(
            self.target_node, self.target_elimination_tree_end, self.forward_tentative_distance
        )
        self._state = _State.TARGET_PINNED
        return self

    def reset_target(self) -> CustomizableContractionHierarchyQuery:
        """Forget the targets while keeping the pinned sources."""
        self._require(_State.SOURCE_PINNED, _State.SOURCE_RUN)
        self._reset_source_list(
            self.target_node,
            self.target_elimination_tree_end,
            self.in_backward_search_space,
            self.backward_tentative_distance,
        )
        self._reset_target_distances(
            self.source_node, self.source_elimination_tree_end, self.backward_tentative_distance
        )
        self._state = _State.SOURCE_PINNED
        return self

    # -- adding sources and targets --------------------------------------

    def _add(
        self,
        external: int,
        distance_to_node: int,
        distance: list[int],
        predecessor: list[int],
        in_space: list[bool],
        nodes: list[int],
        ends: list[int],
    ) -> None:
        self._check_node(external)
        if distance_to_node < 0:
            raise ValueError("distance must not be negative")
        s = self.cch.rank[external]
        if distance[s] != INF_WEIGHT:
            distance[s] = min(distance[s], distance_to_node)
            return
        nodes.append(s)
        distance[s] = distance_to_node
        predecessor[s] = INVALID_ID
        for x in _ancestors(self.cch.elimination_tree_parent, s):
            if in_space[x]:
                ends.append(x)
                break
            in_space[x] = True
        if len(ends) != len(nodes):
            ends.append(INVALID_ID)

    def add_source(self, node: int, distance: int = 0) -> CustomizableContractionHierarchyQuery:
        """Add a source node reached with the given initial distance."""
        self._require(_State.INITIALIZED, _State.TARGET_PINNED)
        self._add(
            node,
            distance,
            self.forward_tentative_distance,
            self.forward_predecessor_node,
            self.in_forward_search_space,
            self.source_node,
            self.source_elimination_tree_end,
        )
        return self

    def add_target(self, node: int, distance: int = 0) -> CustomizableContractionHierarchyQuery:
        """Add a target node with the given distance from it to the destination."""
        self._require(_State.INITIALIZED, _State.SOURCE_PINNED)
        self._add(
            node,
            distance,
            self.backward_tentative_distance,
            self.backward_predecessor_node,
            self.in_backward_search_space,
            self.target_node,
            self.target_elimination_tree_end,
        )
        return self

    # -- plain queries ---------------------------------------------------

    def run(self) -> CustomizableContractionHierarchyQuery:
        """Search from all sources and targets and find the shortest path."""
        self._require(_State.INITIALIZED)
        cch, metric = self.cch, self.metric
        parent = cch.elimination_tree_parent

        for node, end in zip(reversed(self.source_node), reversed(self.source_elimination_tree_end)):
            for x in _ancestors(parent, node, end):
                _relax_outgoing_arcs(
                    cch, metric.forward, self.forward_tentative_distance, self.forward_predecessor_node, x
                )

        self.shortest_path_meeting_node = INVALID_ID
        shortest = INF_WEIGHT
        for node, end in zip(reversed(self.target_node), reversed(self.target_elimination_tree_end)):
            for x in _ancestors(parent, node, end):
                _relax_outgoing_arcs(
                    cch, metric.backward, self.backward_tentative_distance, self.backward_predecessor_node, x
                )
                if self.in_forward_search_space[x]:
                    length = self.forward_tentative_distance[x] + self.backward_tentative_distance[x]
                    if length < shortest:
                        shortest = length
                        self.shortest_path_meeting_node = x

        self._state = _State.RUN
        return self

    def get_distance(self) -> int:
        """Return the shortest distance, or ``INF_WEIGHT`` if there is no path."""
        self._require(_State.RUN)
        meeting = self.shortest_path_meeting_node
        if meeting == INVALID_ID:
            return INF_WEIGHT
        return self.forward_tentative_distance[meeting] + self.backward_tentative_distance[meeting]

    def _follow(self, predecessor: list[int]) -> int:
        x = self.shortest_path_meeting_node
        if x == INVALID_ID:
            return INVALID_ID
        while predecessor[x] != INVALID_ID:
            x = predecessor[x]
        return self.cch.order[x]

    def get_used_source(self) -> int:
        """Return the source at which the shortest path starts, or ``INVALID_ID``."""
        self._require(_State.RUN)
        return self._follow(self.forward_predecessor_node)

    def get_used_target(self) -> int:
        """Return the target at which the shortest path ends, or ``INVALID_ID``."""
        self._require(_State.RUN)
        return self._follow(self.backward_predecessor_node)

    # -- path unpacking --------------------------------------------------

    def _unpack_arc(self, is_forward: bool, x: int, y: int, xy: int) -> Iterator[tuple[int, int, bool]]:
        """Yield (node, cch arc, is forward) for the original segments of an arc."""
        cch = self.cch
        forward, backward = self.metric.forward, self.metric.backward
        stack = [(is_forward, x, y, xy)]
        while stack:
            fwd, x, y, xy = stack.pop()
            triangle = None
            for t in lower_triangles_of_arc(cch, xy):
                if fwd:
                    fits = forward[t.top_arc] == backward[t.bottom_arc] + forward[t.mid_arc]
                else:
                    fits = backward[t.top_arc] == forward[t.bottom_arc] + backward[t.mid_arc]
                if fits:
                    triangle = t
                    break
            if triangle is None:
                yield (x, xy, True) if fwd else (y, xy, False)
                continue
            bottom = triangle.bottom_node
            if fwd:
                first = (False, bottom, x, triangle.bottom_arc)
                second = (True, bottom, y, triangle.mid_arc)
            else:
                first = (False, bottom, y, triangle.mid_arc)
                second = (True, bottom, x, triangle.bottom_arc)
            stack.append(second)
            stack.append(first)

    def _unpack_shortest_path(self) -> tuple[list[tuple[int, int, bool]], int]:
        meeting = self.shortest_path_meeting_node
        if meeting == INVALID_ID:
            return [], INVALID_ID
        cch = self.cch
        segments: list[tuple[int, int, bool]] = []

        up_path = [meeting]
        x = meeting
        while self.forward_predecessor_node[x] != INVALID_ID:
            x = self.forward_predecessor_node[x]
            up_path.append(x)
        for lower, upper in zip(reversed(up_path), reversed(up_path[:-1])):
            arc = find_arc_given_sorted_head(cch.up_first_out, cch.up_head, lower, upper)
            segments.extend(self._unpack_arc(True, lower, upper, arc))

        x = meeting
        y = self.backward_predecessor_node[x]
        while y != INVALID_ID:
            arc = find_arc_given_sorted_head(cch.up_first_out, cch.up_head, y, x)
            segments.extend(self._unpack_arc(False, y, x, arc))
            x = y
            y = self.backward_predecessor_node[y]
        return segments, x

    def get_node_path(self) -> list[int]:
        """Return the nodes of the shortest path, or an empty list if there is none."""
        self._require(_State.RUN)
        segments, last = self._unpack_shortest_path()
        order = self.cch.order
        path = [order[node] for node, _, _ in segments]
        if last != INVALID_ID:
            path.append(order[last])
        return path

    def _original_arc(self, cch_arc: int, is_forward: bool) -> int:
        """Return an input arc of ``cch_arc`` with the same weight, or ``INVALID_ID``."""
        cch = self.cch
        if not cch.does_cch_arc_have_input_arc[cch_arc]:
            return INVALID_ID
        weights = self.metric._require_weights()
        i = cch.does_cch_arc_have_input_arc_mapper.to_local(cch_arc)
        if is_forward:
            first = cch.forward_input_arc_of_cch[i]
            value = self.metric.forward[cch_arc]
            starts, extras = cch.first_extra_forward_input_arc_of_cch, cch.extra_forward_input_arc_of_cch
        else:
            first = cch.backward_input_arc_of_cch[i]
            value = self.metric.backward[cch_arc]
            starts, extras = cch.first_extra_backward_input_arc_of_cch, cch.extra_backward_input_arc_of_cch
        if first == INVALID_ID:
            return INVALID_ID
        if weights[first] == value:
            return first
        if cch.does_cch_arc_have_extra_input_arc[cch_arc]:
            j = cch.does_cch_arc_have_extra_input_arc_mapper.to_local(cch_arc)
            for arc in extras[starts[j] : starts[j + 1]]:
                if weights[arc] == value:
                    return arc
        return INVALID_ID

    def get_arc_path(self) -> list[int]:
        """Return the input arcs of the shortest path, or an empty list if there is none."""
        self._require(_State.RUN)
        segments, _ = self._unpack_shortest_path()
        path = []
        for _, cch_arc, is_forward in segments:
            arc = self._original_arc(cch_arc, is_forward)
            if arc == INVALID_ID:
                raise RuntimeError(f"cch arc {cch_arc} has no input arc of matching weight")
            path.append(arc)
        return path

    # -- pinned queries --------------------------------------------------

    def _pin(self, external_nodes: Iterable[int], in_space: list[bool]) -> tuple[list[int], list[int]]:
        external_nodes = list(external_nodes)
        for node in external_nodes:
            self._check_node(node)
        parent = self.cch.elimination_tree_parent
        nodes: list[int] = []
        ends: list[int] = []
        for external in external_nodes:
            node = self.cch.rank[external]
            end = INVALID_ID
            for x in _ancestors(parent, node):
                if in_space[x]:
                    end = x
                    break
                in_space[x] = True
            nodes.append(node)
            ends.append(end)
        return nodes, ends

    def pin_targets(self, targets: Iterable[int]) -> CustomizableContractionHierarchyQuery:
        """Fix the targets of the following one-to-many queries."""
        self._require(_State.INITIALIZED)
        self.target_node, self.target_elimination_tree_end = self._pin(targets, self.in_backward_search_space)
        self._state = _State.TARGET_PINNED
        return self

    def pin_sources(self, sources: Iterable[int]) -> CustomizableContractionHierarchyQuery:
        """Fix the sources of the following many-to-one queries."""
        self._require(_State.INITIALIZED)
        self.source_node, self.source_elimination_tree_end = self._pin(sources, self.in_forward_search_space)
        self._state = _State.SOURCE_PINNED
        return self

    def _run_to_pinned(
        self,
        forward_weight: Sequence[int],
        backward_weight: Sequence[int],
        distance: list[int],
        source_node: list[int],
        source_end: list[int],
        target_node: list[int],
        target_end: list[int],
    ) -> None:
        cch = self.cch
        parent = cch.elimination_tree_parent
        for node, end in zip(reversed(source_node), reversed(source_end)):
            for x in _ancestors(parent, node, end):
                _relax_outgoing_arcs(cch, forward_weight, distance, None, x)

        stack: list[int] = []
        for node, end in zip(reversed(target_node), reversed(target_end)):
            stack.extend(_ancestors(parent, node, end))
        while stack:
            _relax_incoming_arcs(cch, backward_weight, distance, stack.pop())

    def run_to_pinned_targets(self) -> CustomizableContractionHierarchyQuery:
        """Compute the distances from the current sources to all pinned targets."""
        self._require(_State.TARGET_PINNED)
        self._run_to_pinned(
            self.metric.forward,
            self.metric.backward,
            self.forward_tentative_distance,
            self.source_node,
            self.source_elimination_tree_end,
            self.target_node,
            self.target_elimination_tree_end,
        )
        self._state = _State.TARGET_RUN
        return self

    def run_to_pinned_sources(self) -> CustomizableContractionHierarchyQuery:
        """Compute the distances from all pinned sources to the current targets."""
        self._require(_State.SOURCE_PINNED)
        self._run_to_pinned(
            self.metric.backward,
            self.metric.forward,
            self.backward_tentative_distance,
            self.target_node,
            self.target_elimination_tree_end,
            self.source_node,
            self.source_elimination_tree_end,
        )
        self._state = _State.SOURCE_RUN
        return self

    def get_distances_to_targets(self) -> list[int]:
        """Return the distance to every pinned target, in pinning order."""
        self._require(_State.TARGET_RUN)
        return [self.forward_tentative_distance[t] for t in self.target_node]

    def get_distances_to_sources(self) -> list[int]:
        """Return the distance from every pinned source, in pinning order."""
        self._require(_State.SOURCE_RUN)
        return [self.backward_tentative_distance[s] for s in self.source_node]