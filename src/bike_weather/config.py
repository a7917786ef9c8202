"""Application configuration.

Configuration is loaded from environment variables using pydantic-settings.
API keys should be provided via environment variables or a local `.env`
file, never committed config files.

## Weather Providers

Each provider is enabled by setting its key. Lower priority values are tried
first; a provider without a key is never used.

- WEATHERAPI_API_KEY, WEATHERAPI_PRIORITY (default 1), WEATHERAPI_ENABLED
- OPENWEATHERMAP_API_KEY, OPENWEATHERMAP_PRIORITY (default 2), OPENWEATHERMAP_ENABLED
- TOMORROW_API_KEY, TOMORROW_PRIORITY (default 3), TOMORROW_ENABLED

## Routing

- OPENROUTESERVICE_API_KEY: OpenRouteService key (tried first)
- GRAPHHOPPER_API_KEY: GraphHopper key

Without either key, routes are straight lines between start and end.

## Example .env file

```
WEATHERAPI_API_KEY=your-weatherapi-key
OPENWEATHERMAP_API_KEY=your-openweathermap-key
OPENROUTESERVICE_API_KEY=your-ors-key
LOG_LEVEL=INFO
```
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from bike_weather.models.provider import ProviderConfig


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Bike Weather Planner"
    app_version: str = "0.1.0"
    debug: bool = False
    environment: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    allowed_origins: list[str] = Field(
        default=["http://localhost:5173", "http://localhost:8000"],
        description="CORS allowed origins",
    )

    # Weather providers
    weatherapi_api_key: str | None = None
    weatherapi_priority: int = 1
    weatherapi_enabled: bool = True

    openweathermap_api_key: str | None = None
    openweathermap_priority: int = 2
    openweathermap_enabled: bool = True

    tomorrow_api_key: str | None = None
    tomorrow_priority: int = 3
    tomorrow_enabled: bool = True

    # Routing
    openrouteservice_api_key: str | None = None
    graphhopper_api_key: str | None = None
    route_sample_points: int = Field(default=12, ge=2, le=50)

    # HTTP
    http_timeout_seconds: float = Field(default=10.0, gt=0, le=120)
    user_agent: str = Field(
        default="bike-weather-planner/0.1.0",
        description="User-Agent sent to upstream APIs",
    )
    max_concurrent_requests: int = Field(
        default=4, ge=1, le=32, description="Simultaneous upstream weather fetches"
    )

    # Departure planning
    default_departure_intervals: int = Field(default=8, ge=1, le=96)
    departure_interval_minutes: int = Field(default=15, ge=1, le=120)
    default_travel_time_minutes: int = Field(default=30, ge=1, le=600)

    @field_validator(
        "weatherapi_api_key",
        "openweathermap_api_key",
        "tomorrow_api_key",
        "openrouteservice_api_key",
        "graphhopper_api_key",
        mode="before",
    )
    @classmethod
    def blank_key_is_missing(cls, v: str | None) -> str | None:
        """Treat empty or whitespace-only keys as not configured."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    def provider_configs(self) -> dict[str, ProviderConfig]:
        """Per-provider configuration for the registry."""
        return {
            "weatherapi": ProviderConfig(
                api_key=self.weatherapi_api_key,
                priority=self.weatherapi_priority,
                enabled=self.weatherapi_enabled,
            ),
            "openweathermap": ProviderConfig(
                api_key=self.openweathermap_api_key,
                priority=self.openweathermap_priority,
                enabled=self.openweathermap_enabled,
            ),
            "tomorrow": ProviderConfig(
                api_key=self.tomorrow_api_key,
                priority=self.tomorrow_priority,
                enabled=self.tomorrow_enabled,
            ),
        }


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Settings are loaded once and cached. To reload, clear the cache:
    ```python
    get_settings.cache_clear()
    ```
    """
    return Settings()


def get_settings_uncached() -> Settings:
    """Get fresh settings without caching.

    Useful for testing when environment variables change.
    """
    return Settings()
