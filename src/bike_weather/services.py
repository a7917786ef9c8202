"""Process-wide service wiring.

Builds the provider registry, route sampler and planner from settings. The
API builds one `Services` per process in its lifespan; the CLI builds one per
command.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from bike_weather.config import Settings
from bike_weather.providers.registry import ProviderRegistry, default_providers
from bike_weather.recommendations.planner import RouteWeatherPlanner
from bike_weather.routing.providers import GraphHopperProvider, OpenRouteServiceProvider
from bike_weather.routing.sampler import RouteSampler

logger = logging.getLogger(__name__)


@dataclass
class Services:
    """The long-lived objects shared by request handlers."""

    settings: Settings
    registry: ProviderRegistry
    sampler: RouteSampler
    planner: RouteWeatherPlanner

    async def start(self) -> None:
        """Initialize providers from settings (idempotent)."""
        await self.registry.initialize(self.settings.provider_configs())
        available = [d.id for d in self.registry.available_providers()]
        if not available:
            logger.warning("No weather providers configured; set at least one API key")

    async def aclose(self) -> None:
        await self.registry.aclose()
        await self.sampler.aclose()

    async def __aenter__(self) -> Services:
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()


def build_services(settings: Settings) -> Services:
    """Construct services without touching the network."""
    timeout = settings.http_timeout_seconds
    registry = ProviderRegistry(
        default_providers(user_agent=settings.user_agent, timeout=timeout)
    )
    route_options = dict(
        sample_points=settings.route_sample_points,
        timeout=timeout,
        user_agent=settings.user_agent,
    )
    sampler = RouteSampler(
        [
            OpenRouteServiceProvider(settings.openrouteservice_api_key, **route_options),
            GraphHopperProvider(settings.graphhopper_api_key, **route_options),
        ]
    )
    planner = RouteWeatherPlanner(
        registry,
        sampler,
        interval_minutes=settings.departure_interval_minutes,
        max_concurrency=settings.max_concurrent_requests,
    )
    return Services(settings=settings, registry=registry, sampler=sampler, planner=planner)
