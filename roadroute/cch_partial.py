"""Parallel-ready and incremental customization of a CCH metric.

:class:`CustomizableContractionHierarchyParallelization` groups the upward
arcs into levels. All arcs of one level can be processed independently of
each other, so a level can be customized in any order.

:class:`CustomizableContractionHierarchyPartialCustomization` updates an
already customized metric after a few input weights have changed. It only
revisits the arcs whose weights can be affected.
"""

from __future__ import annotations

import heapq
import os
from collections.abc import Iterator

from .cch import (
    CustomizableContractionHierarchy,
    intermediate_triangles_of_arc,
    lower_triangles_of_arc,
    upper_triangles_of_arc,
)
from .cch_metric import CustomizableContractionHierarchyMetric
from .graph_util import invert_vector, stable_sort_permutation
from .permutation import INVALID_ID


class IDSetMinQueue:
    """A set of ids in ``range(id_count)`` that hands out its smallest id first."""

    def __init__(self, id_count: int) -> None:
        if id_count < 0:
            raise ValueError("id count must not be negative")
        self._id_count = id_count
        self._heap: list[int] = []
        self._members: set[int] = set()

    def id_count(self) -> int:
        return self._id_count

    def push(self, item: int) -> None:
        """Add ``item``; adding an id that is already present does nothing."""
        if not 0 <= item < self._id_count:
            raise IndexError(f"id {item} is out of bounds")
        if item not in self._members:
            self._members.add(item)
            heapq.heappush(self._heap, item)

    def peek(self) -> int:
        if not self._heap:
            raise IndexError("peek from an empty queue")
        return self._heap[0]

    def pop(self) -> int:
        if not self._heap:
            raise IndexError("pop from an empty queue")
        item = heapq.heappop(self._heap)
        self._members.discard(item)
        return item

    def clear(self) -> None:
        self._heap.clear()
        self._members.clear()

    def empty(self) -> bool:
        return not self._heap

    def __contains__(self, item: object) -> bool:
        return item in self._members

    def __len__(self) -> int:
        return len(self._heap)

    def __iter__(self) -> Iterator[int]:
        return iter(sorted(self._heap))


def _check_metric(cch: CustomizableContractionHierarchy, metric: CustomizableContractionHierarchyMetric) -> None:
    if metric.cch is not cch:
        raise ValueError("metric belongs to a different hierarchy")
    metric._require_weights()


class CustomizableContractionHierarchyParallelization:
    """Orders the upward arcs of a CCH by levels of independent work."""

    def __init__(self, cch: CustomizableContractionHierarchy) -> None:
        self.cch = cch
        node_count = cch.node_count()

        lock = [end - begin for begin, end in zip(cch.down_first_out, cch.down_first_out[1:])]
        node_level = [0] * node_count
        current = [x for x in range(node_count) if lock[x] == 0]
        level_count = 0
        while current:
            following: list[int] = []
            for x in current:
                node_level[x] = level_count
                for xy in range(cch.up_first_out[x], cch.up_first_out[x + 1]):
                    y = cch.up_head[xy]
                    lock[y] -= 1
                    if lock[y] == 0:
                        following.append(y)
            level_count += 1
            current = following

        arc_level: list[int] = []
        self.arcs_ordered_by_level: list[int] = []
        for x in stable_sort_permutation(node_level):
            for xy in range(cch.up_first_out[x], cch.up_first_out[x + 1]):
                arc_level.append(node_level[x])
                self.arcs_ordered_by_level.append(xy)

        self.level_count = level_count
        self.first_arc_of_level = invert_vector(arc_level, level_count)

    def customize(
        self, metric: CustomizableContractionHierarchyMetric, thread_count: int | None = None
    ) -> CustomizableContractionHierarchyParallelization:
        """Customize ``metric`` level by level.

        ``thread_count`` defaults to the number of processors; with one thread
        the plain sequential customization of the metric is used.
        """
        _check_metric(self.cch, metric)
        if thread_count is None:
            thread_count = os.cpu_count() or 1
        if thread_count < 1:
            raise ValueError("thread count must be at least 1")

        if thread_count == 1:
            metric.customize()
            return self

        metric._extract_initial_metric()
        for begin, end in zip(self.first_arc_of_level, self.first_arc_of_level[1:]):
            for arc in self.arcs_ordered_by_level[begin:end]:
                for t in upper_triangles_of_arc(self.cch, arc):
                    metric._relax_lower_triangle(t.bottom_arc, t.mid_arc, t.top_arc)
        return self


class CustomizableContractionHierarchyPartialCustomization:
    """Repairs a customized metric after some input weights changed."""

    def __init__(self, cch: CustomizableContractionHierarchy) -> None:
        self.cch = cch
        self.queue = IDSetMinQueue(cch.cch_arc_count())

    def reset(
        self, cch: CustomizableContractionHierarchy | None = None
    ) -> CustomizableContractionHierarchyPartialCustomization:
        """Forget all pending updates and, optionally, switch to another hierarchy."""
        if cch is not None and cch.cch_arc_count() != self.queue.id_count():
            self.queue = IDSetMinQueue(cch.cch_arc_count())
        else:
            self.queue.clear()
        if cch is not None:
            self.cch = cch
        return self

    def update_arc(self, input_arc: int) -> CustomizableContractionHierarchyPartialCustomization:
        """Mark the input arc ``input_arc`` as having a changed weight."""
        if not 0 <= input_arc < self.cch.input_arc_count():
            raise IndexError(f"input arc {input_arc} is out of bounds")
        cch_arc = self.cch.input_arc_to_cch_arc[input_arc]
        if cch_arc != INVALID_ID:
            self.queue.push(cch_arc)
        return self

    def customize(
        self, metric: CustomizableContractionHierarchyMetric
    ) -> CustomizableContractionHierarchyPartialCustomization:
        """Propagate the marked changes through ``metric``."""
        _check_metric(self.cch, metric)
        cch = self.cch
        forward, backward = metric.forward, metric.backward

        while not self.queue.empty():
            xy = self.queue.pop()
            old_forward, old_backward = forward[xy], backward[xy]

            metric._extract_initial_arc(xy)
            for t in lower_triangles_of_arc(cch, xy):
                metric._relax_lower_triangle(t.bottom_arc, t.mid_arc, t.top_arc)

            new_forward, new_backward = forward[xy], backward[xy]
            if old_forward == new_forward and old_backward == new_backward:
                continue

            for t in intermediate_triangles_of_arc(cch, xy):
                bottom, top = t.bottom_arc, t.top_arc
                if (
                    backward[bottom] + old_forward == forward[top]
                    or forward[bottom] + old_backward == backward[top]
                    or backward[bottom] + new_forward < forward[top]
                    or forward[bottom] + new_backward < backward[top]
                ):
                    self.queue.push(top)

            for t in upper_triangles_of_arc(cch, xy):
                mid, top = t.mid_arc, t.top_arc
                if (
                    forward[mid] + old_backward == forward[top]
                    or backward[mid] + old_forward == backward[top]
                    or forward[mid] + new_backward < forward[top]
                    or backward[mid] + new_forward < backward[top]
                ):
                    self.queue.push(top)
        return self