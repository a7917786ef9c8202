"""Pytest fixtures for bike weather planner tests.

This module provides test fixtures that ensure:
1. No external API calls are made (weather or routing providers)
2. Isolated test environment with controlled configuration
3. Deterministic clocks for departure planning
"""

import os
from collections.abc import Callable
from datetime import datetime, timedelta, timezone

import pytest

# Clear provider credentials BEFORE importing application modules so that a
# developer's real keys never leak into tests
for _name in (
    "WEATHERAPI_API_KEY",
    "OPENWEATHERMAP_API_KEY",
    "TOMORROW_API_KEY",
    "OPENROUTESERVICE_API_KEY",
    "GRAPHHOPPER_API_KEY",
):
    os.environ.pop(_name, None)
os.environ.setdefault("ENVIRONMENT", "development")

from bike_weather.models.location import Coordinates, SearchResult
from bike_weather.models.weather import WeatherForecast, WeatherSample, LocationInfo
from bike_weather.providers.base import ProviderError, WeatherProvider


# =============================================================================
# Test Isolation Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def reset_settings_cache():
    """Reset settings cache before each test to ensure clean state."""
    from bike_weather.config import get_settings
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


# =============================================================================
# Fake Provider
# =============================================================================


class FakeProvider(WeatherProvider):
    """In-memory provider that serves generated samples.

    `factory(time)` builds the sample for each requested hour. Set `error` to
    make every call raise it.
    """

    base_url = "memory://"

    def __init__(
        self,
        provider_id: str = "fake",
        name: str = "Fake",
        factory: Callable[[datetime], WeatherSample] | None = None,
        start: datetime | None = None,
        error: Exception | None = None,
        search_results: list[SearchResult] | None = None,
    ):
        super().__init__()
        self.id = provider_id
        self.name = name
        self.factory = factory or (lambda time: make_weather_sample(time=time))
        self.start = start
        self.error = error
        self.search_results = search_results or []
        self.calls: list[tuple] = []

    def _check(self) -> None:
        if self.error is not None:
            raise self.error

    def _start(self) -> datetime:
        start = self.start or datetime.now(timezone.utc)
        return start.replace(minute=0, second=0, microsecond=0)

    async def get_current_weather(self, lat: float, lon: float) -> WeatherSample:
        self.calls.append(("current", lat, lon))
        self._check()
        return self.factory(self._start())

    async def get_hourly_forecast(
        self, lat: float, lon: float, hours: int = 24
    ) -> list[WeatherSample]:
        self.calls.append(("hourly", lat, lon, hours))
        self._check()
        start = self._start()
        return [self.factory(start + timedelta(hours=i)) for i in range(hours)]

    async def get_forecast(self, lat: float, lon: float) -> WeatherForecast:
        self.calls.append(("forecast", lat, lon))
        self._check()
        return WeatherForecast(
            location=LocationInfo.from_coordinates(lat, lon),
            provider=self.id,
            current=self.factory(self._start()),
            hourly=await self.get_hourly_forecast(lat, lon, 24),
        )

    async def search_location(self, query: str) -> list[SearchResult]:
        self.calls.append(("search", query))
        self._check()
        return self.search_results


def make_weather_sample(**overrides) -> WeatherSample:
    """Ideal cycling weather unless overridden."""
    values = {
        "time": datetime(2026, 6, 1, 8, 0, tzinfo=timezone.utc),
        "temperature_c": 18.0,
        "feels_like_c": 18.0,
        "humidity_percent": 55,
        "wind_speed_kph": 5.0,
        "wind_direction": "SW",
        "precipitation_mm": 0.0,
        "rain_chance_percent": 0,
        "visibility_km": 10.0,
        "uv_index": 3,
        "pressure_hpa": 1015,
        "condition": "Sunny",
    }
    values.update(overrides)
    return WeatherSample(**values)


# =============================================================================
# Data Fixtures
# =============================================================================


@pytest.fixture
def now() -> datetime:
    """Fixed planning clock, on the hour."""
    return datetime(2026, 6, 1, 8, 0, tzinfo=timezone.utc)


@pytest.fixture
def sample_factory() -> Callable[..., WeatherSample]:
    return make_weather_sample


@pytest.fixture
def ideal_sample() -> WeatherSample:
    return make_weather_sample()


@pytest.fixture
def copenhagen() -> Coordinates:
    return Coordinates(lat=55.67, lng=12.56)


@pytest.fixture
def copenhagen_north() -> Coordinates:
    return Coordinates(lat=55.70, lng=12.60)


@pytest.fixture
def fake_provider(now: datetime) -> FakeProvider:
    """Initialized fake provider serving ideal weather."""
    provider = FakeProvider(start=now)
    provider.available = True
    provider.api_key = "test"
    return provider


@pytest.fixture
def failing_provider() -> FakeProvider:
    provider = FakeProvider(
        provider_id="broken",
        name="Broken",
        error=ProviderError("Broken error: 500 Internal Server Error", provider="broken"),
    )
    provider.available = True
    provider.api_key = "test"
    return provider
