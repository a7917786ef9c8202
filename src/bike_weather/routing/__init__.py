"""Cycling routes and route point sampling."""

from bike_weather.routing.geometry import (
    estimate_cycling_distance_km,
    estimate_duration_minutes,
    haversine_km,
    simplify_route,
    straight_line_route,
    total_distance_km,
)
from bike_weather.routing.providers import (
    GraphHopperProvider,
    OpenRouteServiceProvider,
    RouteError,
    RouteProvider,
)
from bike_weather.routing.sampler import RouteSampler

__all__ = [
    "haversine_km",
    "total_distance_km",
    "simplify_route",
    "straight_line_route",
    "estimate_cycling_distance_km",
    "estimate_duration_minutes",
    "RouteError",
    "RouteProvider",
    "OpenRouteServiceProvider",
    "GraphHopperProvider",
    "RouteSampler",
]
