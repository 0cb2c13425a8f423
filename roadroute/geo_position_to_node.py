"""Nearest-neighbour search over geographic points with a vantage-point tree."""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass

EARTH_RADIUS = 6371000.785
"""Earth radius in metres used for all distance computations."""

_MAX_POINTS_PER_LEAF = 8


def geo_dist(latitude_a: float, longitude_a: float, latitude_b: float, longitude_b: float) -> float:
    """Return the great-circle distance in metres between two points given in degrees."""
    lat_a = math.radians(latitude_a)
    lat_b = math.radians(latitude_b)
    dlat = lat_b - lat_a
    dlon = math.radians(longitude_b) - math.radians(longitude_a)
    a = math.sin(dlat * 0.5) ** 2 + math.sin(dlon * 0.5) ** 2 * math.cos(lat_a) * math.cos(lat_b)
    a = min(max(a, 0.0), 1.0)
    return EARTH_RADIUS * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


@dataclass(frozen=True)
class NearestNeighborResult:
    """A point id and its distance in metres to the query position."""

    id: int
    distance: float


def _build_tree(points: list[tuple[float, float, int]], begin: int, end: int) -> None:
    if end - begin <= _MAX_POINTS_PER_LEAF:
        return
    pivot_lat, pivot_lon, _ = points[begin]
    mid = begin + (end - begin) // 2
    points[begin + 1 : end] = sorted(
        points[begin + 1 : end],
        key=lambda p: geo_dist(pivot_lat, pivot_lon, p[0], p[1]),
    )
    _build_tree(points, begin, mid)
    _build_tree(points, mid, end)


def _check_radius(radius: float) -> None:
    if not radius >= 0.0:
        raise ValueError("radius must be positive")


class GeoPositionToNode:
    """Finds the points closest to a geographic position."""

    def __init__(self, latitude: Sequence[float], longitude: Sequence[float]) -> None:
        latitude = list(latitude)
        longitude = list(longitude)
        if len(latitude) != len(longitude):
            raise ValueError("latitude and longitude must have the same length")
        points = [(lat, lon, point_id) for point_id, (lat, lon) in enumerate(zip(latitude, longitude))]
        _build_tree(points, 0, len(points))
        self._positions = [(lat, lon) for lat, lon, _ in points]
        self._ids = [point_id for _, _, point_id in points]

    def point_count(self) -> int:
        return len(self._ids)

    def _leaf(self, begin: int, end: int):
        return zip(self._positions[begin:end], self._ids[begin:end])

    def _split(self, begin: int, end: int, latitude: float, longitude: float) -> tuple[int, float, float]:
        pivot_lat, pivot_lon = self._positions[begin]
        mid = begin + (end - begin) // 2
        pivot_query = geo_dist(pivot_lat, pivot_lon, latitude, longitude)
        mid_lat, mid_lon = self._positions[mid]
        pivot_boundary = geo_dist(pivot_lat, pivot_lon, mid_lat, mid_lon)
        return mid, pivot_query, pivot_boundary

    def find_nearest_neighbor_within_radius(
        self, latitude: float, longitude: float, radius: float
    ) -> NearestNeighborResult | None:
        """Return the closest point within ``radius`` metres, or None if there is none."""
        _check_radius(radius)
        best_id: int | None = None
        best_distance = radius

        def search(begin: int, end: int) -> None:
            nonlocal best_id, best_distance
            if end - begin <= _MAX_POINTS_PER_LEAF:
                for (lat, lon), point_id in self._leaf(begin, end):
                    distance = geo_dist(latitude, longitude, lat, lon)
                    if distance <= best_distance:
                        best_id, best_distance = point_id, distance
                return
            mid, pivot_query, pivot_boundary = self._split(begin, end, latitude, longitude)
            if pivot_query >= pivot_boundary:
                search(mid, end)
                if pivot_query - pivot_boundary < best_distance:
                    search(begin, mid)
            else:
                search(begin, mid)
                if pivot_boundary - pivot_query < best_distance:
                    search(mid, end)

        search(0, len(self._ids))
        if best_id is None:
            return None
        return NearestNeighborResult(best_id, best_distance)

    def find_all_nodes_within_radius(
        self, latitude: float, longitude: float, radius: float
    ) -> list[NearestNeighborResult]:
        """Return every point within ``radius`` metres of the position."""
        _check_radius(radius)
        result: list[NearestNeighborResult] = []

        def search(begin: int, end: int) -> None:
            if end - begin <= _MAX_POINTS_PER_LEAF:
                for (lat, lon), point_id in self._leaf(begin, end):
                    distance = geo_dist(latitude, longitude, lat, lon)
                    if distance <= radius:
                        result.append(NearestNeighborResult(point_id, distance))
                return
            mid, pivot_query, pivot_boundary = self._split(begin, end, latitude, longitude)
            if pivot_query - pivot_boundary <= radius:
                search(begin, mid)
            if pivot_boundary - pivot_query <= radius:
                search(mid, end)

        search(0, len(self._ids))
        return result