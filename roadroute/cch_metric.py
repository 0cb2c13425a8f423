"""Arc weights of a customizable contraction hierarchy and their customization.

A metric attaches one weight per input arc to a
:class:`~roadroute.cch.CustomizableContractionHierarchy`. Customizing it
computes, for every upward arc ``x -> y``, a forward weight (from ``x`` to
``y``) and a backward weight (from ``y`` to ``x``). Each weight is the length
of a shortest path between the two nodes whose inner nodes all rank below
both ends.
"""

from __future__ import annotations

from collections.abc import Sequence

from .cch import CustomizableContractionHierarchy
from .permutation import INVALID_ID

INF_WEIGHT = 2147483647
"""The weight of an arc or path that does not exist."""


def _checked_weights(cch: CustomizableContractionHierarchy, input_weight: Sequence[int]) -> list[int]:
    weights = list(input_weight)
    if len(weights) != cch.input_arc_count():
        raise ValueError(
            f"Input weight vector has the wrong size: expected {cch.input_arc_count()}, got {len(weights)}"
        )
    if any(w < 0 for w in weights):
        raise ValueError("Input weights must not be negative")
    return weights


class CustomizableContractionHierarchyMetric:
    """Forward and backward weights of every arc of a CCH."""

    def __init__(
        self,
        cch: CustomizableContractionHierarchy,
        input_weight: Sequence[int] | None = None,
    ) -> None:
        self.cch = cch
        self.forward = [INF_WEIGHT] * cch.cch_arc_count()
        self.backward = [INF_WEIGHT] * cch.cch_arc_count()
        self.input_weight: list[int] | None = (
            None if input_weight is None else _checked_weights(cch, input_weight)
        )

    def reset(
        self,
        input_weight: Sequence[int],
        cch: CustomizableContractionHierarchy | None = None,
    ) -> CustomizableContractionHierarchyMetric:
        """Attach new input weights and, optionally, another hierarchy."""
        target = self.cch if cch is None else cch
        weights = _checked_weights(target, input_weight)
        if target.cch_arc_count() != len(self.forward):
            self.forward = [INF_WEIGHT] * target.cch_arc_count()
            self.backward = [INF_WEIGHT] * target.cch_arc_count()
        self.cch = target
        self.input_weight = weights
        return self

    def _require_weights(self) -> list[int]:
        if self.input_weight is None:
            raise RuntimeError("Metric must be connected to a weight vector")
        return self.input_weight

    def _extract_initial_arc(self, cch_arc: int) -> None:
        """Set the weights of one arc to those of its cheapest input arcs."""
        cch = self.cch
        weights = self._require_weights()
        if not cch.does_cch_arc_have_input_arc[cch_arc]:
            self.forward[cch_arc] = INF_WEIGHT
            self.backward[cch_arc] = INF_WEIGHT
            return

        i = cch.does_cch_arc_have_input_arc_mapper.to_local(cch_arc)
        forward_arc = cch.forward_input_arc_of_cch[i]
        backward_arc = cch.backward_input_arc_of_cch[i]
        forward = INF_WEIGHT if forward_arc == INVALID_ID else weights[forward_arc]
        backward = INF_WEIGHT if backward_arc == INVALID_ID else weights[backward_arc]

        if cch.does_cch_arc_have_extra_input_arc[cch_arc]:
            j = cch.does_cch_arc_have_extra_input_arc_mapper.to_local(cch_arc)
            first_forward = cch.first_extra_forward_input_arc_of_cch
            first_backward = cch.first_extra_backward_input_arc_of_cch
            forward = min(
                [forward]
                + [weights[a] for a in cch.extra_forward_input_arc_of_cch[first_forward[j] : first_forward[j + 1]]]
            )
            backward = min(
                [backward]
                + [
                    weights[a]
                    for a in cch.extra_backward_input_arc_of_cch[first_backward[j] : first_backward[j + 1]]
                ]
            )

        self.forward[cch_arc] = forward
        self.backward[cch_arc] = backward

    def _extract_initial_metric(self) -> None:
        for cch_arc in range(self.cch.cch_arc_count()):
            self._extract_initial_arc(cch_arc)

    def _relax_lower_triangle(self, bottom_arc: int, mid_arc: int, top_arc: int) -> None:
        """Shorten the top arc of a triangle through its bottom node."""
        forward, backward = self.forward, self.backward
        via_forward = backward[bottom_arc] + forward[mid_arc]
        if via_forward < forward[top_arc]:
            forward[top_arc] = via_forward
        via_backward = forward[bottom_arc] + backward[mid_arc]
        if via_backward < backward[top_arc]:
            backward[top_arc] = via_backward

    def customize(self) -> CustomizableContractionHierarchyMetric:
        """Compute the weights of all arcs from the input weights."""
        self._require_weights()
        self._extract_initial_metric()

        cch = self.cch
        up_first_out, up_head = cch.up_first_out, cch.up_head
        down_first_out, down_head, down_to_up = cch.down_first_out, cch.down_head, cch.down_to_up
        arc_id_cache = [0] * cch.node_count()

        for x in range(cch.node_count()):
            for xz in range(up_first_out[x], up_first_out[x + 1]):
                arc_id_cache[up_head[xz]] = xz

            for xy_down in range(down_first_out[x], down_first_out[x + 1]):
                yx_up = down_to_up[xy_down]
                y = down_head[xy_down]
                for yz_up in reversed(range(up_first_out[y], up_first_out[y + 1])):
                    z = up_head[yz_up]
                    if z <= x:
                        break
                    self._relax_lower_triangle(yx_up, yz_up, arc_id_cache[z])
        return self