import random

import pytest

from roadroute.id_mapper import IDMapper, LocalIDMapper

BITS = [False, True, True, False, True, False]


def test_counts():
    mapper = LocalIDMapper(BITS)
    assert mapper.global_id_count() == len(BITS)
    assert mapper.local_id_count() == sum(BITS)


def test_local_ids_are_dense_and_ordered():
    mapper = LocalIDMapper(BITS)
    mapped = [g for g, b in enumerate(BITS) if b]
    assert [mapper.to_local(g) for g in mapped] == list(range(len(mapped)))


def test_is_global_id_mapped():
    mapper = LocalIDMapper(BITS)
    assert [mapper.is_global_id_mapped(g) for g in range(len(BITS))] == BITS
    assert mapper.is_global_id_mapped(100) is False
    assert mapper.is_global_id_mapped(-1) is False


def test_to_local_errors():
    mapper = LocalIDMapper(BITS)
    with pytest.raises(KeyError):
        mapper.to_local(0)
    with pytest.raises(IndexError):
        mapper.to_local(len(BITS))


def test_get_local_default():
    mapper = LocalIDMapper(BITS)
    assert mapper.get_local(0) is None
    assert mapper.get_local(99, -1) == -1
    assert mapper.get_local(2) == mapper.to_local(2)


def test_round_trip_large():
    rng = random.Random(2024)
    bits = [rng.random() < 0.3 for _ in range(3000)]
    mapper = IDMapper(bits)
    assert mapper.local_id_count() == sum(bits)
    for local in range(mapper.local_id_count()):
        assert mapper.to_local(mapper.to_global(local)) == local
    for g, b in enumerate(bits):
        if b:
            assert mapper.to_global(mapper.to_local(g)) == g


def test_to_global_out_of_bounds():
    mapper = IDMapper(BITS)
    with pytest.raises(IndexError):
        mapper.to_global(sum(BITS))
    with pytest.raises(IndexError):
        mapper.to_global(-1)


def test_empty_mapper():
    mapper = IDMapper([])
    assert mapper.local_id_count() == 0
    assert mapper.get_local(0, "none") == "none"