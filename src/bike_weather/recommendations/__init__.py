"""Scoring, departure generation and recommendations."""

from bike_weather.recommendations.alignment import align, hours_needed
from bike_weather.recommendations.departures import (
    DepartureOptionGenerator,
    overall_rating,
    route_alerts,
    summarize,
)
from bike_weather.recommendations.planner import RouteWeatherPlanner, RouteWeatherRequest
from bike_weather.recommendations.scoring import score_sample
from bike_weather.recommendations.synthesizer import (
    best_index,
    find_worsening,
    preferred_index,
    recommend,
)

__all__ = [
    "align",
    "hours_needed",
    "score_sample",
    "DepartureOptionGenerator",
    "overall_rating",
    "route_alerts",
    "summarize",
    "best_index",
    "find_worsening",
    "preferred_index",
    "recommend",
    "RouteWeatherPlanner",
    "RouteWeatherRequest",
]
