"""Great-circle geometry and route point helpers."""

from __future__ import annotations

import math

from bike_weather.models.location import Coordinates
from bike_weather.models.route import RoutePoint


EARTH_RADIUS_KM = 6371.0

# Roads and paths are longer than the straight line between two points
CYCLING_DETOUR_FACTOR = 1.15

# Minutes per km at an average cycling speed of 15 km/h
MINUTES_PER_KM = 4

FALLBACK_POINT_COUNT = 5


def haversine_km(
    lat1: float, lng1: float, lat2: float, lng2: float
) -> float:
    """Great-circle distance between two coordinates in kilometres."""
    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1))
        * math.cos(math.radians(lat2))
        * math.sin(d_lng / 2) ** 2
    )
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def total_distance_km(points: list[RoutePoint]) -> float:
    """Sum of great-circle distances between consecutive points."""
    return sum(
        haversine_km(a.lat, a.lng, b.lat, b.lng)
        for a, b in zip(points, points[1:])
    )


def estimate_cycling_distance_km(start: Coordinates, end: Coordinates) -> float:
    """Straight-line distance padded for real-world detours."""
    return haversine_km(start.lat, start.lng, end.lat, end.lng) * CYCLING_DETOUR_FACTOR


def estimate_duration_minutes(distance_km: float) -> int:
    return round(distance_km * MINUTES_PER_KM)


def points_with_progress(coordinates: list[tuple[float, float]]) -> list[RoutePoint]:
    """Turn (lat, lng) pairs into route points with index-based progress."""
    if len(coordinates) == 1:
        lat, lng = coordinates[0]
        return [RoutePoint(lat=lat, lng=lng, progress=0)]
    last = len(coordinates) - 1
    return [
        RoutePoint(lat=lat, lng=lng, progress=i / last)
        for i, (lat, lng) in enumerate(coordinates)
    ]


def straight_line_route(
    start: Coordinates,
    end: Coordinates,
    count: int = FALLBACK_POINT_COUNT,
) -> list[RoutePoint]:
    """Evenly spaced points on the straight line from start to end."""
    points: list[RoutePoint] = []
    for i in range(count):
        progress = i / (count - 1)
        points.append(
            RoutePoint(
                lat=start.lat + (end.lat - start.lat) * progress,
                lng=start.lng + (end.lng - start.lng) * progress,
                progress=progress,
            )
        )
    return points


def simplify_route(points: list[RoutePoint], target_count: int) -> list[RoutePoint]:
    """Reduce a dense route to roughly `target_count` points.

    The first and last points are always kept. Intermediate points are picked
    by walking the cumulative great-circle distance and keeping a point each
    time it passes another of `target_count - 1` equal segments. Progress is
    recomputed from the final index positions.
    """
    if len(points) <= target_count:
        return points

    simplified = [points[0]]
    segment_km = total_distance_km(points) / (target_count - 1)

    travelled = 0.0
    next_mark = segment_km
    for previous, point in zip(points, points[1:-1]):
        travelled += haversine_km(previous.lat, previous.lng, point.lat, point.lng)
        if travelled >= next_mark and len(simplified) < target_count - 1:
            simplified.append(point)
            next_mark += segment_km

    simplified.append(points[-1])

    last = len(simplified) - 1
    return [
        point.model_copy(update={"progress": i / last})
        for i, point in enumerate(simplified)
    ]
