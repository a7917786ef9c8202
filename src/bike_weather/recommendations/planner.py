"""Route weather planning facade.

Ties the pieces together for one request: sample the route, generate
departure options along it, and pick a recommendation.
"""

from __future__ import annotations

import logging
from datetime import datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, Field, field_validator

from bike_weather.models.location import Coordinates
from bike_weather.models.recommendation import RouteSummary, RouteWeatherReport
from bike_weather.models.weather import utcnow
from bike_weather.providers.registry import ProviderRegistry
from bike_weather.recommendations.departures import (
    DEFAULT_INTERVAL_MINUTES,
    DepartureOptionGenerator,
)
from bike_weather.recommendations.synthesizer import PREFERRED_TIME_PATTERN, recommend
from bike_weather.routing.sampler import RouteSampler

logger = logging.getLogger(__name__)


class RouteWeatherRequest(BaseModel):
    """A request to plan departures along a route."""

    start: Coordinates
    end: Coordinates
    departure_intervals: int = Field(
        default=8, ge=1, le=96, description="Number of departure times to evaluate"
    )
    estimated_travel_time_minutes: int = Field(default=30, ge=1, le=600)
    preferred_provider: str | None = Field(
        default=None, description="Weather provider id to try first"
    )
    preferred_departure_time: str | None = Field(
        default=None, description="Preferred local departure time (HH:MM)"
    )
    timezone: str | None = Field(
        default=None, description="IANA timezone for the preferred time (default UTC)"
    )

    @field_validator("preferred_departure_time")
    @classmethod
    def validate_preferred_time(cls, v: str | None) -> str | None:
        if v is None or v == "":
            return None
        match = PREFERRED_TIME_PATTERN.match(v.strip())
        if not match or int(match.group("hour")) > 23 or int(match.group("minute")) > 59:
            raise ValueError("preferred_departure_time must be HH:MM")
        return v.strip()

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str | None) -> str | None:
        if not v:
            return None
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {v}") from e
        return v


class RouteWeatherPlanner:
    """Plans departures for a route using the registry and a route sampler.

    Example:
        ```python
        planner = RouteWeatherPlanner(registry, RouteSampler())
        report = await planner.plan(RouteWeatherRequest(
            start=Coordinates(lat=55.67, lng=12.56),
            end=Coordinates(lat=55.70, lng=12.60),
        ))
        print(report.recommendation.recommendation)
        ```
    """

    def __init__(
        self,
        registry: ProviderRegistry,
        sampler: RouteSampler,
        interval_minutes: int = DEFAULT_INTERVAL_MINUTES,
        max_concurrency: int = 4,
    ):
        self.registry = registry
        self.sampler = sampler
        self.interval_minutes = interval_minutes
        self.generator = DepartureOptionGenerator(registry, max_concurrency=max_concurrency)

    async def plan(
        self, request: RouteWeatherRequest, now: datetime | None = None
    ) -> RouteWeatherReport:
        """Build the full report for a request.

        Raises:
            AllProvidersFailedError: If weather for any route point is unavailable
        """
        now = now or utcnow()
        if request.timezone:
            now = now.astimezone(ZoneInfo(request.timezone))

        route = await self.sampler.get_route(request.start, request.end)
        logger.info(
            f"Planning {request.departure_intervals} departures over "
            f"{len(route.points)} points ({route.service})"
        )

        options = await self.generator.generate(
            route.points,
            departure_interval_count=request.departure_intervals,
            travel_time_minutes=request.estimated_travel_time_minutes,
            interval_minutes=self.interval_minutes,
            preferred_provider=request.preferred_provider,
            now=now,
        )
        recommendation = recommend(
            options,
            preferred_departure_time=request.preferred_departure_time,
            interval_minutes=self.interval_minutes,
        )

        return RouteWeatherReport(
            route=RouteSummary(
                start=request.start,
                end=request.end,
                distance_km=round(route.distance_km, 1),
                estimated_travel_time_minutes=request.estimated_travel_time_minutes,
                routing_service=route.service,
                point_count=len(route.points),
            ),
            departure_options=options,
            recommendation=recommendation,
            available_providers=self.registry.available_providers(),
            generated_at=utcnow(),
        )
