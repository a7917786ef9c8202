"""Weather data providers."""

from bike_weather.providers.base import (
    AuthenticationError,
    MalformedResponseError,
    ProviderError,
    ProviderUnavailableError,
    RateLimitError,
    WeatherProvider,
)
from bike_weather.providers.openweathermap import OpenWeatherMapProvider
from bike_weather.providers.registry import (
    AllProvidersFailedError,
    FallbackResult,
    ProviderRegistry,
    default_providers,
)
from bike_weather.providers.tomorrow import TomorrowProvider
from bike_weather.providers.weatherapi import WeatherAPIProvider

__all__ = [
    "WeatherProvider",
    "ProviderError",
    "RateLimitError",
    "AuthenticationError",
    "MalformedResponseError",
    "ProviderUnavailableError",
    "AllProvidersFailedError",
    "FallbackResult",
    "ProviderRegistry",
    "default_providers",
    "WeatherAPIProvider",
    "OpenWeatherMapProvider",
    "TomorrowProvider",
]
