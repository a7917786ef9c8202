"""Departure option generation.

For each candidate departure the rider is assumed to move along the route at
constant speed, so route point `p` is reached at

    departure + travel_time * p.progress

The forecast for that point is aligned to that instant and scored. A
departure's overall score is the mean of its point scores.

Each route point's hourly forecast is fetched once, sized to cover the
latest instant any departure reaches it, and shared by every departure.
Fetches run concurrently, bounded by a semaphore. A failed fetch is not
skipped: it propagates and fails the whole generation.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta

from bike_weather.models.recommendation import (
    DepartureOption,
    OverallRating,
    PointResult,
)
from bike_weather.models.route import RoutePoint
from bike_weather.models.weather import WeatherSample, round1, utcnow
from bike_weather.providers.base import ProviderError
from bike_weather.providers.registry import FallbackResult, ProviderRegistry
from bike_weather.recommendations.alignment import align, hours_needed
from bike_weather.recommendations.scoring import score_sample

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_MINUTES = 15

# Route-wide alert predicates, checked against every point
RAIN_ALERT_MM = 1
WIND_ALERT_KPH = 25
COLD_ALERT_C = 5
HEAT_ALERT_C = 28
UV_ALERT = 7


def summarize(score: float) -> str:
    if score >= 8:
        return "Excellent biking conditions"
    elif score >= 6:
        return "Good biking conditions"
    elif score >= 4:
        return "Fair biking conditions - be prepared"
    return "Challenging biking conditions"


def route_alerts(samples: list[WeatherSample]) -> list[str]:
    """Alerts that apply if any point on the route meets the condition."""
    alerts = []
    if any(s.precipitation_mm > RAIN_ALERT_MM for s in samples):
        alerts.append("Rain expected - bring rain gear")
    if any(s.wind_speed_kph > WIND_ALERT_KPH for s in samples):
        alerts.append("Strong winds - ride carefully")
    if any(s.temperature_c < COLD_ALERT_C for s in samples):
        alerts.append("Cold weather - dress warmly")
    if any(s.temperature_c > HEAT_ALERT_C for s in samples):
        alerts.append("Hot weather - stay hydrated")
    if any(s.uv_index > UV_ALERT for s in samples):
        alerts.append("High UV - wear sunscreen")
    return alerts


def overall_rating(point_results: list[PointResult]) -> OverallRating:
    scores = [result.rating.score for result in point_results]
    score = round1(sum(scores) / len(scores))
    return OverallRating(
        score=score,
        summary=summarize(score),
        alerts=route_alerts([result.weather for result in point_results]),
    )


class DepartureOptionGenerator:
    """Builds scored departure options from the registry's forecasts.

    Example:
        ```python
        generator = DepartureOptionGenerator(registry, max_concurrency=4)
        options = await generator.generate(
            route_points, departure_interval_count=8, travel_time_minutes=30
        )
        for option in options:
            print(option.departure_time, option.score)
        ```
    """

    def __init__(self, registry: ProviderRegistry, max_concurrency: int = 4):
        self.registry = registry
        self.max_concurrency = max(1, max_concurrency)

    async def generate(
        self,
        route_points: list[RoutePoint],
        departure_interval_count: int,
        travel_time_minutes: int,
        interval_minutes: int = DEFAULT_INTERVAL_MINUTES,
        preferred_provider: str | None = None,
        now: datetime | None = None,
    ) -> list[DepartureOption]:
        """Generate one option per departure slot, earliest first.

        Args:
            route_points: Points along the route with progress 0..1
            departure_interval_count: Number of departures to evaluate
            travel_time_minutes: Expected time to ride the whole route
            interval_minutes: Spacing between departures
            preferred_provider: Provider id to try first
            now: Time of the first departure (defaults to the current time)

        Raises:
            AllProvidersFailedError: If any point's forecast cannot be fetched
        """
        if not route_points:
            raise ValueError("Route has no points")

        now = now or utcnow()
        interval = timedelta(minutes=interval_minutes)
        travel = timedelta(minutes=travel_time_minutes)

        last_instant = now + interval * (departure_interval_count - 1) + travel
        hours = hours_needed(last_instant, now)

        forecasts = await self._fetch_forecasts(route_points, hours, preferred_provider)

        options = []
        for i in range(departure_interval_count):
            departure = now + interval * i
            point_results = []
            for point, forecast in zip(route_points, forecasts):
                sample = align(forecast.data, departure + travel * point.progress)
                point_results.append(
                    PointResult(
                        point=point,
                        weather=sample,
                        rating=score_sample(sample),
                        provider=forecast.provider_id,
                    )
                )
            options.append(
                DepartureOption(
                    departure_time=departure,
                    arrival_time=departure + travel,
                    point_results=point_results,
                    overall_rating=overall_rating(point_results),
                )
            )

        logger.debug(
            f"Generated {len(options)} departure options over {len(route_points)} points"
        )
        return options

    async def _fetch_forecasts(
        self,
        route_points: list[RoutePoint],
        hours: int,
        preferred_provider: str | None,
    ) -> list[FallbackResult[list[WeatherSample]]]:
        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def fetch(point: RoutePoint) -> FallbackResult[list[WeatherSample]]:
            async with semaphore:
                result = await self.registry.get_hourly_forecast(
                    point.lat, point.lng, hours=hours, preferred=preferred_provider
                )
            if not result.data:
                raise ProviderError(
                    f"Empty forecast at {point.lat},{point.lng}",
                    provider=result.provider_id,
                )
            return result

        return await asyncio.gather(*(fetch(point) for point in route_points))
