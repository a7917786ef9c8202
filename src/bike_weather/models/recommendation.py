"""Rating and recommendation models for departure planning."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from bike_weather.models.location import Coordinates
from bike_weather.models.provider import ProviderDescriptor
from bike_weather.models.route import RoutePoint
from bike_weather.models.weather import WeatherSample


class Severity(str, Enum):
    """Severity level for recommendations."""

    INFO = "info"
    GOOD = "good"
    CAUTION = "caution"
    WARNING = "warning"


class BikeRating(BaseModel):
    """Cycling suitability of a single weather sample."""

    score: float = Field(..., ge=1, le=10, description="1 = awful, 10 = perfect")
    factors: list[str] = Field(
        default_factory=list, description="Labels of every band that fired"
    )


class PointResult(BaseModel):
    """Weather and rating at one route point for one departure."""

    point: RoutePoint
    weather: WeatherSample
    rating: BikeRating
    provider: str | None = Field(
        default=None, description="Id of the provider that served the sample"
    )


class OverallRating(BaseModel):
    """Route-wide rating for a departure option."""

    score: float = Field(..., ge=1, le=10)
    summary: str
    alerts: list[str] = Field(default_factory=list)


class DepartureOption(BaseModel):
    """One candidate departure time with its along-route weather."""

    departure_time: datetime
    arrival_time: datetime
    point_results: list[PointResult] = Field(default_factory=list)
    overall_rating: OverallRating

    @property
    def score(self) -> float:
        return self.overall_rating.score


class Recommendation(BaseModel):
    """The single recommended departure across all options."""

    best_index: int = Field(..., ge=0)
    label: str = Field(..., description="Short headline, e.g. 'Go now'")
    recommendation: str = Field(..., description="What the rider should do")
    reasoning: str = Field(..., description="Quantitative justification")
    severity: Severity = Severity.INFO

    minutes_to_best: int = 0
    score_difference: float = 0.0
    preferred_index: int | None = None
    worsening_time_minutes: int | None = None
    worsening_score: float | None = None


class RouteSummary(BaseModel):
    """Route details echoed back with a plan."""

    start: Coordinates
    end: Coordinates
    distance_km: float
    estimated_travel_time_minutes: int
    routing_service: str
    point_count: int


class RouteWeatherReport(BaseModel):
    """Everything a consumer needs to pick a departure time."""

    route: RouteSummary
    departure_options: list[DepartureOption]
    recommendation: Recommendation
    available_providers: list[ProviderDescriptor]
    generated_at: datetime
