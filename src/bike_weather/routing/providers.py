"""Cycling route providers.

Each provider asks an external routing service for a bike route and returns a
`Route` whose geometry has been simplified to a small number of sample
points. Weather is fetched once per point, so a dense polyline with hundreds
of vertices would be wasteful.

## Services

| Service           | Request                                          | Geometry                         |
|-------------------|--------------------------------------------------|----------------------------------|
| OpenRouteService  | POST /v2/directions/cycling-regular/geojson      | features[0].geometry.coordinates |
| GraphHopper       | GET /api/1/route?vehicle=bike&points_encoded=false | paths[0].points.coordinates    |

Both return coordinates in `[lng, lat]` order.

Any failure (missing key, HTTP error, malformed JSON) is raised as
`RouteError`; `RouteSampler` catches it and moves on.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

import httpx

from bike_weather.models.location import Coordinates
from bike_weather.models.route import Route
from bike_weather.routing.geometry import (
    estimate_duration_minutes,
    points_with_progress,
    simplify_route,
    total_distance_km,
)

logger = logging.getLogger(__name__)

DEFAULT_SAMPLE_POINTS = 12


class RouteError(Exception):
    """Raised when a routing service cannot produce a route."""

    def __init__(self, message: str, service: str, status_code: int | None = None):
        super().__init__(message)
        self.service = service
        self.status_code = status_code


class RouteProvider(ABC):
    """Abstract base class for routing services."""

    name: str

    def __init__(
        self,
        api_key: str | None = None,
        sample_points: int = DEFAULT_SAMPLE_POINTS,
        timeout: float = 10.0,
        user_agent: str | None = None,
    ):
        self.api_key = api_key or ""
        self.sample_points = sample_points
        self.timeout = timeout
        self.user_agent = user_agent or "bike-weather-planner/0.1.0"
        self._client: httpx.AsyncClient | None = None

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    async def __aenter__(self) -> RouteProvider:
        self._client = httpx.AsyncClient(timeout=self.timeout)
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def get_route(self, start: Coordinates, end: Coordinates) -> Route:
        """Fetch a cycling route between two coordinates.

        Raises:
            RouteError: If the service is not configured or the request fails
        """
        if not self.configured:
            raise RouteError(f"{self.name} API key not configured", service=self.name)

        try:
            response = await self._request(start, end)
        except httpx.HTTPError as e:
            raise RouteError(
                f"{self.name} request failed: {e.__class__.__name__}", service=self.name
            ) from e

        if response.status_code >= 400:
            raise RouteError(
                f"{self.name} API error: {response.status_code}",
                service=self.name,
                status_code=response.status_code,
            )

        try:
            coordinates = self._extract_coordinates(response.json())
            dense = points_with_progress([(lat, lng) for lng, lat, *_ in coordinates])
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise RouteError(
                f"Unexpected {self.name} response: {e.__class__.__name__}: {e}",
                service=self.name,
            ) from e

        if len(dense) < 2:
            raise RouteError(f"{self.name} returned an empty route", service=self.name)

        distance_km = total_distance_km(dense)
        return Route(
            points=simplify_route(dense, self.sample_points),
            distance_km=distance_km,
            duration_estimate_min=estimate_duration_minutes(distance_km),
            service=self.name,
        )

    @abstractmethod
    async def _request(self, start: Coordinates, end: Coordinates) -> httpx.Response:
        """Send the routing request."""
        pass

    @abstractmethod
    def _extract_coordinates(self, data: Any) -> list[list[float]]:
        """Pull the `[lng, lat]` coordinate list out of a response body."""
        pass


class OpenRouteServiceProvider(RouteProvider):
    """OpenRouteService cycling directions (free tier: 2000 requests/day)."""

    name = "OpenRouteService"
    url = "https://api.openrouteservice.org/v2/directions/cycling-regular/geojson"

    async def _request(self, start: Coordinates, end: Coordinates) -> httpx.Response:
        body = {
            "coordinates": [[start.lng, start.lat], [end.lng, end.lat]],
            "preference": "recommended",
            "instructions": False,
            "geometry_simplify": True,
        }
        return await self._get_client().post(
            self.url,
            json=body,
            headers={
                "Authorization": self.api_key,
                "Content-Type": "application/json",
                "User-Agent": self.user_agent,
            },
        )

    def _extract_coordinates(self, data: Any) -> list[list[float]]:
        return data["features"][0]["geometry"]["coordinates"]


class GraphHopperProvider(RouteProvider):
    """GraphHopper bike routing."""

    name = "GraphHopper"
    url = "https://graphhopper.com/api/1/route"

    async def _request(self, start: Coordinates, end: Coordinates) -> httpx.Response:
        params = [
            ("point", f"{start.lat},{start.lng}"),
            ("point", f"{end.lat},{end.lng}"),
            ("vehicle", "bike"),
            ("locale", "en"),
            ("instructions", "false"),
            ("calc_points", "true"),
            ("points_encoded", "false"),
            ("key", self.api_key),
        ]
        return await self._get_client().get(
            self.url, params=params, headers={"User-Agent": self.user_agent}
        )

    def _extract_coordinates(self, data: Any) -> list[list[float]]:
        return data["paths"][0]["points"]["coordinates"]
