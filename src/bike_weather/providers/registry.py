"""Provider registry and fallback selection.

The registry owns one adapter per known provider, records which of them are
available, and runs operations against them in fallback order until one
succeeds.

## Fallback Order

After `initialize()`, the fallback order is every available provider sorted
ascending by configured priority (ties keep registration order). A preferred
provider, when given, is tried first and the rest follow in fallback order:

    fallback order: [b, a, c]
    resolve("a")  -> [a, b, c]
    resolve()     -> [b, a, c]

## Lifecycle

The registry is meant to be built once per process. `initialize()` is
idempotent and guarded by a lock: concurrent callers either run the single
initialization or wait for it and return. Pass `force=True` to re-read a new
set of credentials.

Example:
    ```python
    registry = ProviderRegistry()
    await registry.initialize({
        "weatherapi": ProviderConfig(api_key="...", priority=1),
        "openweathermap": ProviderConfig(api_key="...", priority=2),
    })
    result = await registry.get_hourly_forecast(55.67, 12.56, hours=6)
    print(result.provider_id, len(result.data))
    ```
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from bike_weather.models.location import SearchResult
from bike_weather.models.provider import ProviderConfig, ProviderDescriptor
from bike_weather.models.weather import ProviderComparison, WeatherForecast, WeatherSample
from bike_weather.providers.base import ProviderError, WeatherProvider
from bike_weather.providers.openweathermap import OpenWeatherMapProvider
from bike_weather.providers.tomorrow import TomorrowProvider
from bike_weather.providers.weatherapi import WeatherAPIProvider

logger = logging.getLogger(__name__)

T = TypeVar("T")


class AllProvidersFailedError(ProviderError):
    """Raised when no provider in the fallback chain produced a result."""

    def __init__(self, errors: list[str]):
        if errors:
            message = f"All weather providers failed: {', '.join(errors)}"
        else:
            message = "No weather providers available"
        super().__init__(message, provider="all")
        self.errors = errors


@dataclass
class FallbackResult(Generic[T]):
    """Data from the first provider that succeeded."""

    data: T
    provider_id: str
    errors: list[str] = field(default_factory=list)


def default_providers(
    user_agent: str | None = None,
    timeout: float = 10.0,
) -> list[WeatherProvider]:
    """Build one adapter per supported provider, in default order."""
    return [
        WeatherAPIProvider(user_agent=user_agent, timeout=timeout),
        OpenWeatherMapProvider(user_agent=user_agent, timeout=timeout),
        TomorrowProvider(user_agent=user_agent, timeout=timeout),
    ]


class ProviderRegistry:
    """Tracks provider availability and runs operations with fallback."""

    def __init__(self, providers: list[WeatherProvider] | None = None):
        """Initialize the registry.

        Args:
            providers: Adapters to manage (defaults to every supported provider)
        """
        if providers is None:
            providers = default_providers()
        self._providers: dict[str, WeatherProvider] = {p.id: p for p in providers}
        self._fallback_order: list[str] = list(self._providers)
        self._initialized = False
        self._init_lock = asyncio.Lock()

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def fallback_order(self) -> list[str]:
        return list(self._fallback_order)

    def get_provider(self, provider_id: str) -> WeatherProvider | None:
        return self._providers.get(provider_id)

    def descriptors(self) -> list[ProviderDescriptor]:
        """Describe every registered provider."""
        return [provider.descriptor() for provider in self._providers.values()]

    def available_providers(self) -> list[ProviderDescriptor]:
        """Describe the providers that can currently be used."""
        return [d for d in self.descriptors() if d.available]

    async def initialize(
        self,
        configs: Mapping[str, ProviderConfig | dict[str, Any]],
        force: bool = False,
    ) -> None:
        """Initialize providers from configuration and compute fallback order.

        A provider is initialized when its config is enabled and has a
        credential. Failures are logged and leave that provider unavailable;
        they never abort initialization of the others.

        Args:
            configs: Provider id -> config (ProviderConfig or plain dict)
            force: Re-initialize even if already done
        """
        if self._initialized and not force:
            return

        async with self._init_lock:
            if self._initialized and not force:
                return

            parsed = {
                provider_id: ProviderConfig.model_validate(config)
                for provider_id, config in configs.items()
            }

            await asyncio.gather(
                *(
                    self._initialize_provider(provider, parsed.get(provider_id))
                    for provider_id, provider in self._providers.items()
                )
            )

            available = [pid for pid, p in self._providers.items() if p.available]
            self._fallback_order = sorted(
                available, key=lambda pid: parsed[pid].priority
            )
            self._initialized = True

        logger.info(f"Weather provider fallback order: {self._fallback_order}")

    async def _initialize_provider(
        self,
        provider: WeatherProvider,
        config: ProviderConfig | None,
    ) -> None:
        if config is None or not config.enabled or not config.api_key:
            provider.available = False
            logger.info(f"{provider.name} not configured, marking unavailable")
            return

        try:
            await provider.initialize(config.api_key)
        except Exception as e:
            logger.warning(f"Failed to initialize {provider.name}: {e}")
            provider.available = False
            return

        if provider.available:
            logger.info(f"Initialized {provider.name} provider")

    def resolve(self, preferred: str | None = None) -> list[str]:
        """Return provider ids in the order they should be tried."""
        if not preferred:
            return list(self._fallback_order)
        return [preferred] + [pid for pid in self._fallback_order if pid != preferred]

    async def with_fallback(
        self,
        operation: Callable[[WeatherProvider], Awaitable[T]],
        preferred: str | None = None,
        accept: Callable[[T], bool] | None = None,
    ) -> FallbackResult[T]:
        """Run an operation against providers until one succeeds.

        Args:
            operation: Coroutine function taking a provider
            preferred: Provider id to try first
            accept: Optional check on the result; a rejected result counts
                as a failure and the next provider is tried

        Returns:
            FallbackResult with the data, the provider id that produced it,
            and the failure messages of providers tried before it

        Raises:
            AllProvidersFailedError: If every candidate failed or none is available
        """
        errors: list[str] = []

        for provider_id in self.resolve(preferred):
            provider = self._providers.get(provider_id)
            if provider is None or not provider.available:
                logger.debug(f"Skipping provider {provider_id}: not available")
                continue

            try:
                data = await operation(provider)
            except Exception as e:
                errors.append(f"{provider.name}: {e}")
                logger.warning(f"{provider.name} failed, trying next provider: {e}")
                continue

            if accept is not None and not accept(data):
                errors.append(f"{provider.name}: no results")
                logger.info(f"{provider.name} returned no results, trying next provider")
                continue

            return FallbackResult(data=data, provider_id=provider_id, errors=errors)

        raise AllProvidersFailedError(errors)

    async def get_current_weather(
        self, lat: float, lon: float, preferred: str | None = None
    ) -> FallbackResult[WeatherSample]:
        return await self.with_fallback(
            lambda provider: provider.get_current_weather(lat, lon), preferred
        )

    async def get_hourly_forecast(
        self,
        lat: float,
        lon: float,
        hours: int = 24,
        preferred: str | None = None,
    ) -> FallbackResult[list[WeatherSample]]:
        return await self.with_fallback(
            lambda provider: provider.get_hourly_forecast(lat, lon, hours), preferred
        )

    async def get_forecast(
        self, lat: float, lon: float, preferred: str | None = None
    ) -> FallbackResult[WeatherForecast]:
        return await self.with_fallback(
            lambda provider: provider.get_forecast(lat, lon), preferred
        )

    async def search_location(
        self, query: str, preferred: str | None = None
    ) -> FallbackResult[list[SearchResult]]:
        """Search for a place; an empty result moves on to the next provider."""
        return await self.with_fallback(
            lambda provider: provider.search_location(query),
            preferred,
            accept=lambda results: len(results) > 0,
        )

    async def compare_providers(self, lat: float, lon: float) -> ProviderComparison:
        """Fetch current conditions from every available provider at once."""
        comparison = ProviderComparison()
        available = [p for p in self._providers.values() if p.available]

        async def fetch(provider: WeatherProvider) -> None:
            try:
                comparison.current[provider.id] = await provider.get_current_weather(lat, lon)
            except Exception as e:
                logger.warning(f"{provider.name} comparison fetch failed: {e}")
                comparison.current[provider.id] = None
                comparison.errors[provider.id] = str(e)

        await asyncio.gather(*(fetch(provider) for provider in available))
        return comparison

    async def aclose(self) -> None:
        """Close every provider's HTTP client."""
        for provider in self._providers.values():
            await provider.aclose()
