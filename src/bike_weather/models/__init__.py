"""Domain models for route weather planning."""

from bike_weather.models.location import Coordinates, LocationInfo, SearchResult
from bike_weather.models.provider import ProviderConfig, ProviderDescriptor
from bike_weather.models.recommendation import (
    BikeRating,
    DepartureOption,
    OverallRating,
    PointResult,
    Recommendation,
    RouteSummary,
    RouteWeatherReport,
    Severity,
)
from bike_weather.models.route import Route, RoutePoint
from bike_weather.models.weather import (
    ProviderComparison,
    WeatherForecast,
    WeatherSample,
)

__all__ = [
    # Location
    "Coordinates",
    "LocationInfo",
    "SearchResult",
    # Provider
    "ProviderConfig",
    "ProviderDescriptor",
    # Route
    "Route",
    "RoutePoint",
    # Weather
    "ProviderComparison",
    "WeatherForecast",
    "WeatherSample",
    # Recommendation
    "BikeRating",
    "DepartureOption",
    "OverallRating",
    "PointResult",
    "Recommendation",
    "RouteSummary",
    "RouteWeatherReport",
    "Severity",
]
