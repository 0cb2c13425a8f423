import random

import pytest

from roadroute.cch import CustomizableContractionHierarchy
from roadroute.cch_metric import CustomizableContractionHierarchyMetric
from roadroute.cch_partial import (
    CustomizableContractionHierarchyParallelization,
    CustomizableContractionHierarchyPartialCustomization,
    IDSetMinQueue,
)

ORDER = [2, 0, 4, 1, 3, 5]
TAIL = [0, 1, 2, 3, 4, 0, 1, 5, 2, 3, 2]
HEAD = [1, 2, 3, 4, 0, 2, 3, 0, 5, 1, 2]
LOOP_ARC = 10


def make_cch():
    return CustomizableContractionHierarchy(ORDER, TAIL, HEAD)


def random_weights(rng):
    return [rng.randint(1, 50) for _ in TAIL]


# IDSetMinQueue


def test_queue_sequence_from_source():
    q = IDSetMinQueue(100)
    assert q.id_count() == 100
    assert q.empty()

    for x in (3, 8, 77, 2, 15, 66):
        q.push(x)

    assert 77 in q
    assert 78 not in q

    for expected in (2, 3, 8, 15, 66, 77):
        assert q.peek() == expected
        assert q.pop() == expected

    assert q.empty()

    q.push(77)
    q.push(2)
    q.push(15)
    assert q.peek() == 2
    assert q.pop() == 2
    assert q.peek() == 15
    assert q.pop() == 15

    q.push(3)
    q.push(8)
    assert q.peek() == 3
    assert q.pop() == 3
    assert q.peek() == 8
    assert q.pop() == 8

    q.clear()
    assert q.empty()
    assert len(q) == 0


def test_queue_small_reuse():
    q = IDSetMinQueue(5)
    q.push(4)
    assert q.pop() == 4
    assert len(q) == 0


def test_queue_push_is_idempotent():
    q = IDSetMinQueue(10)
    q.push(3)
    q.push(3)
    assert len(q) == 1
    assert q.pop() == 3
    assert q.empty()


def test_queue_out_of_bounds_push():
    q = IDSetMinQueue(5)
    with pytest.raises(IndexError):
        q.push(5)


def test_queue_empty_pop_and_peek():
    q = IDSetMinQueue(5)
    with pytest.raises(IndexError):
        q.pop()
    with pytest.raises(IndexError):
        q.peek()


def test_queue_clear_removes_membership():
    q = IDSetMinQueue(10)
    q.push(7)
    q.clear()
    assert 7 not in q


# Parallelization


def test_level_order_covers_every_arc_once():
    cch = make_cch()
    par = CustomizableContractionHierarchyParallelization(cch)
    assert sorted(par.arcs_ordered_by_level) == list(range(cch.cch_arc_count()))
    assert par.first_arc_of_level[0] == 0
    assert par.first_arc_of_level[-1] == cch.cch_arc_count()


def test_levels_respect_arc_dependencies():
    cch = make_cch()
    par = CustomizableContractionHierarchyParallelization(cch)
    level_of_node = {}
    for level, (begin, end) in enumerate(zip(par.first_arc_of_level, par.first_arc_of_level[1:])):
        for arc in par.arcs_ordered_by_level[begin:end]:
            level_of_node[cch.up_tail[arc]] = level
    for arc in range(cch.cch_arc_count()):
        y = cch.up_head[arc]
        if y in level_of_node:
            assert level_of_node[cch.up_tail[arc]] < level_of_node[y]


@pytest.mark.parametrize("thread_count", [1, 2, 4])
def test_parallel_customization_matches_sequential(thread_count):
    cch = make_cch()
    weights = random_weights(random.Random(1))
    reference = CustomizableContractionHierarchyMetric(cch, weights).customize()
    metric = CustomizableContractionHierarchyMetric(cch, weights)
    CustomizableContractionHierarchyParallelization(cch).customize(metric, thread_count)
    assert metric.forward == reference.forward
    assert metric.backward == reference.backward


def test_parallel_customization_rejects_zero_threads():
    cch = make_cch()
    metric = CustomizableContractionHierarchyMetric(cch, [1] * len(TAIL))
    with pytest.raises(ValueError):
        CustomizableContractionHierarchyParallelization(cch).customize(metric, 0)


def test_parallel_customization_rejects_foreign_metric():
    cch = make_cch()
    other = make_cch()
    metric = CustomizableContractionHierarchyMetric(other, [1] * len(TAIL))
    with pytest.raises(ValueError):
        CustomizableContractionHierarchyParallelization(cch).customize(metric, 2)


# Partial customization


@pytest.mark.parametrize("seed", range(8))
def test_partial_customization_matches_full(seed):
    rng = random.Random(seed)
    cch = make_cch()
    weights = random_weights(rng)
    metric = CustomizableContractionHierarchyMetric(cch, weights).customize()
    partial = CustomizableContractionHierarchyPartialCustomization(cch)

    for _ in range(5):
        changed = rng.sample(range(len(TAIL)), 3)
        for arc in changed:
            weights[arc] = rng.randint(1, 50)
        metric.reset(weights)
        for arc in changed:
            partial.update_arc(arc)
        partial.customize(metric)

        reference = CustomizableContractionHierarchyMetric(cch, weights).customize()
        assert metric.forward == reference.forward
        assert metric.backward == reference.backward
        assert len(partial.queue) == 0


def test_partial_customization_without_updates_keeps_metric():
    cch = make_cch()
    weights = random_weights(random.Random(3))
    metric = CustomizableContractionHierarchyMetric(cch, weights).customize()
    before = (list(metric.forward), list(metric.backward))
    CustomizableContractionHierarchyPartialCustomization(cch).customize(metric)
    assert (metric.forward, metric.backward) == before


def test_update_of_loop_arc_is_ignored():
    cch = make_cch()
    partial = CustomizableContractionHierarchyPartialCustomization(cch)
    partial.update_arc(LOOP_ARC)
    assert len(partial.queue) == 0
    partial.update_arc(0)
    assert len(partial.queue) == 1


def test_update_arc_out_of_bounds():
    partial = CustomizableContractionHierarchyPartialCustomization(make_cch())
    with pytest.raises(IndexError):
        partial.update_arc(len(TAIL))


def test_reset_clears_pending_updates():
    cch = make_cch()
    partial = CustomizableContractionHierarchyPartialCustomization(cch)
    partial.update_arc(0).update_arc(1)
    partial.reset()
    assert len(partial.queue) == 0


def test_reset_to_other_hierarchy():
    cch = make_cch()
    smaller = CustomizableContractionHierarchy([0, 1], [0], [1])
    partial = CustomizableContractionHierarchyPartialCustomization(cch)
    partial.reset(smaller)
    assert partial.cch is smaller
    assert partial.queue.id_count() == smaller.cch_arc_count()


def test_partial_customization_rejects_foreign_metric():
    cch = make_cch()
    metric = CustomizableContractionHierarchyMetric(make_cch(), [1] * len(TAIL))
    with pytest.raises(ValueError):
        CustomizableContractionHierarchyPartialCustomization(cch).customize(metric)


def test_partial_customization_requires_weights():
    cch = make_cch()
    metric = CustomizableContractionHierarchyMetric(cch)
    with pytest.raises(RuntimeError):
        CustomizableContractionHierarchyPartialCustomization(cch).customize(metric)