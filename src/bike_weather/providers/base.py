"""Base weather provider abstraction.

This module defines the interface every weather provider adapter implements
and the error types they raise.

## Canonical Data Format

All adapters translate their API responses into `WeatherSample` values (see
`bike_weather.models.weather` for the canonical metric units). Scoring and
alignment only ever see canonical samples, so nothing downstream branches on
the provider.

## Lifecycle

1. Construct the adapter (no network I/O).
2. `await provider.initialize(api_key)` - marks the provider available when a
   non-empty key is supplied. Never raises; failures leave it unavailable.
3. Call `get_current_weather`, `get_hourly_forecast`, `get_forecast` or
   `search_location`.
4. `await provider.aclose()` (or use `async with`) to release the HTTP client.

## Failure Semantics

Any non-success HTTP status, network failure or unexpected payload raises a
`ProviderError` subclass. An adapter never returns partial data.

## Supported Providers

### WeatherAPI (weatherapi.com)
- Endpoint: https://api.weatherapi.com/v1
- Auth: `key` query parameter
- Native units: metric (°C, km/h, mm, km)

### OpenWeatherMap (openweathermap.org)
- Endpoint: https://api.openweathermap.org/data/2.5
- Auth: `appid` query parameter
- Native units: standard (Kelvin, m/s, metres), 3-hour forecast steps

### Tomorrow.io (tomorrow.io)
- Endpoint: https://api.tomorrow.io/v4
- Auth: `apikey` query parameter
- Native units: metric with wind in m/s
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import httpx
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from bike_weather.models.location import SearchResult
from bike_weather.models.provider import ProviderDescriptor
from bike_weather.models.weather import WeatherForecast, WeatherSample

logger = logging.getLogger(__name__)


def coalesce(*values: Any) -> Any:
    """Return the first value that is not None."""
    return next((value for value in values if value is not None), None)


class ProviderError(Exception):
    """Base exception for weather provider errors."""

    def __init__(
        self,
        message: str,
        provider: str,
        status_code: int | None = None,
        response_body: str | None = None,
    ):
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code
        self.response_body = response_body


class RateLimitError(ProviderError):
    """Raised when provider rate limit is exceeded."""

    def __init__(
        self,
        provider: str,
        retry_after: int | None = None,
        status_code: int | None = None,
    ):
        super().__init__(
            f"Rate limit exceeded for {provider}",
            provider=provider,
            status_code=status_code,
        )
        self.retry_after = retry_after


class AuthenticationError(ProviderError):
    """Raised when authentication fails."""

    pass


class MalformedResponseError(ProviderError):
    """Raised when a response cannot be parsed into canonical samples."""

    pass


class ProviderUnavailableError(ProviderError):
    """Raised when a provider is used before a credential was accepted."""

    pass


class WeatherProvider(ABC):
    """Abstract base class for weather provider adapters.

    Attributes:
        id: Stable identifier used in configuration and fallback ordering
        name: Human-readable provider name used in messages
        base_url: Base URL for the API
        available: True once initialized with a non-empty credential

    Example:
        ```python
        class MyProvider(WeatherProvider):
            id = "my_provider"
            name = "My Provider"
            base_url = "https://api.example.com"

            async def get_current_weather(self, lat, lon):
                data = await self._get_json(f"{self.base_url}/now", {...})
                with self._translating():
                    return self._to_sample(data)
        ```
    """

    id: str
    name: str
    base_url: str

    def __init__(
        self,
        user_agent: str | None = None,
        timeout: float = 10.0,
    ):
        """Initialize the provider.

        Args:
            user_agent: User-Agent string for requests
            timeout: Request timeout in seconds
        """
        self.api_key = ""
        self.available = False
        self.user_agent = user_agent or "bike-weather-planner/0.1.0"
        self.timeout = timeout
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> WeatherProvider:
        """Enter async context manager."""
        self._client = httpx.AsyncClient(timeout=self.timeout)
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Exit async context manager."""
        await self.aclose()

    async def aclose(self) -> None:
        """Close the HTTP client if one was opened."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def initialize(self, api_key: str | None) -> None:
        """Store the credential and mark the provider available.

        A missing or empty key leaves the provider unavailable. Errors from
        provider-specific setup are logged and also leave it unavailable.
        """
        self.api_key = api_key or ""
        self.available = bool(self.api_key)
        if not self.available:
            return

        try:
            await self._on_initialize()
        except Exception as e:
            logger.warning(f"Failed to initialize {self.name}: {e}")
            self.available = False

    async def _on_initialize(self) -> None:
        """Provider-specific setup hook, run after a key is accepted."""
        return None

    def descriptor(self) -> ProviderDescriptor:
        return ProviderDescriptor(
            id=self.id, display_name=self.name, available=self.available
        )

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    def _get_default_headers(self) -> dict[str, str]:
        """Get default headers for requests."""
        return {
            "User-Agent": self.user_agent,
            "Accept": "application/json",
        }

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type((httpx.TimeoutException, httpx.NetworkError)),
        reraise=True,
    )
    async def _fetch(
        self,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Fetch data from the API with retry logic.

        Args:
            url: Full URL to fetch
            params: Query parameters
            headers: Additional headers

        Returns:
            HTTP response

        Raises:
            RateLimitError: If rate limit is exceeded
            AuthenticationError: If the key is rejected
            ProviderError: For any other non-success status
        """
        client = self._get_client()
        request_headers = self._get_default_headers()
        if headers:
            request_headers.update(headers)

        response = await client.get(url, params=params, headers=request_headers)

        if response.status_code == 429:
            retry_after = response.headers.get("Retry-After")
            raise RateLimitError(
                self.id,
                retry_after=int(retry_after) if retry_after and retry_after.isdigit() else None,
                status_code=429,
            )

        if response.status_code in (401, 403):
            raise AuthenticationError(
                f"{self.name} rejected the API key ({response.status_code})",
                provider=self.id,
                status_code=response.status_code,
                response_body=response.text,
            )

        if response.status_code >= 400:
            raise ProviderError(
                f"{self.name} error: {response.status_code} {response.reason_phrase}".rstrip(),
                provider=self.id,
                status_code=response.status_code,
                response_body=response.text,
            )

        return response

    async def _get_json(
        self,
        url: str,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """Fetch a URL and decode its JSON body.

        Network failures that survive the retries are converted to
        `ProviderError` so callers only deal with one exception family.
        """
        if not self.available:
            raise ProviderUnavailableError(
                f"{self.name} is not initialized", provider=self.id
            )

        try:
            response = await self._fetch(url, params=params)
        except httpx.HTTPError as e:
            raise ProviderError(
                f"{self.name} request failed: {e.__class__.__name__}",
                provider=self.id,
            ) from e

        try:
            return response.json()
        except ValueError as e:
            raise MalformedResponseError(
                f"Failed to parse response: {e}",
                provider=self.id,
                response_body=response.text,
            ) from e

    @contextmanager
    def _translating(self) -> Iterator[None]:
        """Turn shape errors raised while translating into MalformedResponseError."""
        try:
            yield
        except (KeyError, IndexError, TypeError, ValueError, AttributeError) as e:
            raise MalformedResponseError(
                f"Unexpected {self.name} response: {e.__class__.__name__}: {e}",
                provider=self.id,
            ) from e

    @abstractmethod
    async def get_current_weather(self, lat: float, lon: float) -> WeatherSample:
        """Get current conditions at a location.

        Raises:
            ProviderError: If conditions cannot be retrieved
        """
        pass

    @abstractmethod
    async def get_hourly_forecast(
        self,
        lat: float,
        lon: float,
        hours: int = 24,
    ) -> list[WeatherSample]:
        """Get hourly samples, ascending by time, at most `hours` long.

        The list may be shorter when the upstream horizon is limited.

        Raises:
            ProviderError: If the forecast cannot be retrieved
        """
        pass

    @abstractmethod
    async def get_forecast(self, lat: float, lon: float) -> WeatherForecast:
        """Get current conditions plus the next 24 hours.

        Raises:
            ProviderError: If the forecast cannot be retrieved
        """
        pass

    @abstractmethod
    async def search_location(self, query: str) -> list[SearchResult]:
        """Search for places matching a free-text query.

        Providers without geocoding return an empty list.
        """
        pass
