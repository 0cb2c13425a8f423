import random

import pytest

from roadroute.geo_position_to_node import GeoPositionToNode, geo_dist


@pytest.fixture
def points():
    rng = random.Random(7)
    latitude = [48.0 + rng.random() for _ in range(300)]
    longitude = [8.0 + rng.random() for _ in range(300)]
    return latitude, longitude


def _queries():
    rng = random.Random(11)
    return [(47.8 + rng.random() * 1.4, 7.8 + rng.random() * 1.4) for _ in range(25)]


def test_geo_dist_same_point_is_zero():
    assert geo_dist(49.0, 8.4, 49.0, 8.4) == 0.0


def test_geo_dist_is_symmetric():
    assert geo_dist(49.0, 8.4, 48.1, 11.5) == pytest.approx(geo_dist(48.1, 11.5, 49.0, 8.4))


def test_geo_dist_one_degree_of_latitude():
    assert geo_dist(0.0, 0.0, 1.0, 0.0) == pytest.approx(111195.1, abs=1.0)


def test_point_count(points):
    assert GeoPositionToNode(*points).point_count() == 300


def test_mismatched_lengths_raise():
    with pytest.raises(ValueError):
        GeoPositionToNode([1.0, 2.0], [1.0])


def test_negative_radius_raises(points):
    index = GeoPositionToNode(*points)
    with pytest.raises(ValueError):
        index.find_nearest_neighbor_within_radius(48.5, 8.5, -1.0)
    with pytest.raises(ValueError):
        index.find_all_nodes_within_radius(48.5, 8.5, -1.0)


@pytest.mark.parametrize("query", _queries())
def test_nearest_neighbor_matches_brute_force(points, query):
    latitude, longitude = points
    index = GeoPositionToNode(latitude, longitude)
    result = index.find_nearest_neighbor_within_radius(query[0], query[1], 1e7)
    best = min(geo_dist(query[0], query[1], lat, lon) for lat, lon in zip(latitude, longitude))
    assert result.distance == best
    assert geo_dist(query[0], query[1], latitude[result.id], longitude[result.id]) == best


def test_nearest_neighbor_outside_radius_is_none(points):
    index = GeoPositionToNode(*points)
    assert index.find_nearest_neighbor_within_radius(10.0, 10.0, 100.0) is None


def test_exact_point_is_found(points):
    latitude, longitude = points
    index = GeoPositionToNode(latitude, longitude)
    result = index.find_nearest_neighbor_within_radius(latitude[42], longitude[42], 0.0)
    assert result.id == 42
    assert result.distance == 0.0


@pytest.mark.parametrize("query", _queries()[:10])
@pytest.mark.parametrize("radius", [500.0, 5000.0, 20000.0])
def test_find_all_matches_brute_force(points, query, radius):
    latitude, longitude = points
    index = GeoPositionToNode(latitude, longitude)
    found = index.find_all_nodes_within_radius(query[0], query[1], radius)
    expected = {
        i for i, (lat, lon) in enumerate(zip(latitude, longitude))
        if geo_dist(query[0], query[1], lat, lon) <= radius
    }
    assert {r.id for r in found} == expected
    assert len(found) == len(expected)
    for r in found:
        assert r.distance == geo_dist(query[0], query[1], latitude[r.id], longitude[r.id])


def test_empty_index():
    index = GeoPositionToNode([], [])
    assert index.point_count() == 0
    assert index.find_nearest_neighbor_within_radius(0.0, 0.0, 1e7) is None
    assert index.find_all_nodes_within_radius(0.0, 0.0, 1e7) == []