"""Route sampling with a straight-line fallback."""

from __future__ import annotations

import logging

from bike_weather.models.location import Coordinates
from bike_weather.models.route import Route, RoutePoint
from bike_weather.routing.geometry import (
    estimate_cycling_distance_km,
    estimate_duration_minutes,
    straight_line_route,
)
from bike_weather.routing.providers import RouteProvider

logger = logging.getLogger(__name__)

FALLBACK_SERVICE = "fallback"


class RouteSampler:
    """Produces route points for weather sampling.

    Route providers are tried in the order given. Unconfigured providers are
    skipped. If none succeeds the route is a 5-point straight line between
    start and end, so sampling never fails.
    """

    def __init__(self, providers: list[RouteProvider] | None = None):
        self.providers = providers or []

    async def get_route(self, start: Coordinates, end: Coordinates) -> Route:
        """Get a route with distance and duration estimates."""
        for provider in self.providers:
            if not provider.configured:
                logger.debug(f"Skipping {provider.name}: no API key")
                continue
            try:
                route = await provider.get_route(start, end)
            except Exception as e:
                logger.warning(f"{provider.name} routing failed: {e}")
                continue
            logger.info(f"Fetched route from {provider.name} with {len(route.points)} points")
            return route

        logger.info(f"Using straight-line route from {start} to {end}")
        return self.fallback_route(start, end)

    async def sample(self, start: Coordinates, end: Coordinates) -> list[RoutePoint]:
        """Get just the route points."""
        route = await self.get_route(start, end)
        return route.points

    @staticmethod
    def fallback_route(start: Coordinates, end: Coordinates) -> Route:
        distance_km = estimate_cycling_distance_km(start, end)
        return Route(
            points=straight_line_route(start, end),
            distance_km=distance_km,
            duration_estimate_min=estimate_duration_minutes(distance_km),
            service=FALLBACK_SERVICE,
        )

    async def aclose(self) -> None:
        for provider in self.providers:
            await provider.aclose()
