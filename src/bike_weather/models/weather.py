"""Weather sample and forecast models.

## Canonical Units (metric)
- Temperature: Celsius (°C)
- Wind speed and gusts: kilometres per hour (km/h)
- Wind direction: 16-point compass string (N, NNE, ... NNW)
- Pressure: hectopascals (hPa)
- Precipitation: millimetres (mm)
- Rain chance, humidity: percentage (0-100)
- Visibility: kilometres (km)

Every provider adapter translates its native response into these units
before a `WeatherSample` is built.
"""

from __future__ import annotations

import math
from datetime import datetime, timezone

from pydantic import BaseModel, Field

from bike_weather.models.location import LocationInfo


COMPASS_POINTS = [
    "N", "NNE", "NE", "ENE", "E", "ESE", "SE", "SSE",
    "S", "SSW", "SW", "WSW", "W", "WNW", "NW", "NNW",
]


def wind_direction(degrees: float) -> str:
    """Convert a bearing in degrees to a 16-point compass direction."""
    index = math.floor(degrees / 22.5 + 0.5) % 16
    return COMPASS_POINTS[index]


def mps_to_kmh(speed: float) -> float:
    return speed * 3.6


def kelvin_to_celsius(kelvin: float) -> float:
    return kelvin - 273.15


def round1(value: float) -> float:
    """Round half-up to one decimal place."""
    return math.floor(value * 10 + 0.5) / 10


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_time(value: str | int | float | None) -> datetime:
    """Parse an ISO string or Unix timestamp, falling back to now.

    A sample's time must always be a valid instant, so anything that cannot
    be parsed is replaced with the current time.
    """
    if value is None or value == "":
        return utcnow()
    try:
        if isinstance(value, (int, float)):
            return datetime.fromtimestamp(value, tz=timezone.utc)
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (TypeError, ValueError, OverflowError, OSError):
        return utcnow()
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class WeatherSample(BaseModel):
    """Normalized weather at one instant and location."""

    time: datetime = Field(..., description="Instant this sample describes")

    # Temperature
    temperature_c: float = Field(..., description="Temperature in Celsius")
    feels_like_c: float = Field(..., description="Feels-like temperature in Celsius")
    humidity_percent: float = Field(default=0, ge=0, le=100)

    # Wind
    wind_speed_kph: float = Field(default=0, ge=0, description="Sustained wind in km/h")
    wind_direction: str = Field(default="N", description="16-point compass direction")
    wind_gust_kph: float | None = Field(
        default=None, ge=0, description="Wind gusts in km/h, if reported"
    )

    # Precipitation
    precipitation_mm: float = Field(default=0, ge=0, description="Precipitation amount in mm")
    rain_chance_percent: float = Field(default=0, ge=0, le=100)

    visibility_km: float = Field(default=10, ge=0)
    uv_index: float = Field(default=0, ge=0)
    pressure_hpa: float = Field(default=1013)

    condition: str = Field(default="", description="Provider condition text")
    description: str | None = Field(default=None, description="Longer condition text")
    icon: str | None = Field(default=None, description="Icon URL")
    is_day: bool = True

    @property
    def effective_wind_kph(self) -> float:
        """Gust speed when reported, otherwise sustained wind."""
        if self.wind_gust_kph is not None:
            return self.wind_gust_kph
        return self.wind_speed_kph


class WeatherForecast(BaseModel):
    """Current conditions plus hourly outlook for a location."""

    location: LocationInfo
    provider: str = Field(..., description="Id of the provider that produced it")
    current: WeatherSample | None = None
    hourly: list[WeatherSample] = Field(default_factory=list)
    daily: list[WeatherSample] | None = None


class ProviderComparison(BaseModel):
    """Current conditions from every available provider side by side."""

    current: dict[str, WeatherSample | None] = Field(default_factory=dict)
    errors: dict[str, str] = Field(default_factory=dict)
