"""Location models for route weather planning."""

from __future__ import annotations

import re
from typing import Self

from pydantic import BaseModel, Field


# Regex for parsing lat/long coordinates: "latitude,longitude"
# Supports optional +/- prefix for both values
COORDINATE_PATTERN = re.compile(
    r"^(?P<lat>[-+]?\d*\.?\d+)\s*,\s*(?P<lng>[-+]?\d*\.?\d+)$"
)


class Coordinates(BaseModel):
    """Geographic coordinates (latitude/longitude).

    Latitude:
        - Negative (-) = south of equator
        - Positive (+) = north of equator
        - Range: -90 to +90

    Longitude:
        - Negative (-) = west of prime meridian
        - Positive (+) = east of prime meridian
        - Range: -180 to +180
    """

    lat: float = Field(..., ge=-90, le=90, description="Latitude in decimal degrees")
    lng: float = Field(..., ge=-180, le=180, description="Longitude in decimal degrees")

    @classmethod
    def from_string(cls, value: str) -> Self:
        """Parse coordinates from string format 'latitude,longitude'.

        Examples:
            '55.6761,12.5683' -> Copenhagen
            '-33.8688,151.2093' -> Sydney
            '+51.5074,-0.1278' -> London
        """
        match = COORDINATE_PATTERN.match(value.strip())
        if not match:
            raise ValueError(
                f"Invalid coordinate format: '{value}'. "
                "Expected format: 'latitude,longitude' (e.g., '55.6761,12.5683')"
            )
        return cls(
            lat=float(match.group("lat")),
            lng=float(match.group("lng")),
        )

    def __str__(self) -> str:
        return f"{self.lat},{self.lng}"


class LocationInfo(BaseModel):
    """Resolved location a forecast belongs to."""

    name: str = Field(..., description="Place name reported by the provider")
    lat: float = Field(..., ge=-90, le=90)
    lon: float = Field(..., ge=-180, le=180)
    country: str | None = None
    region: str | None = None

    @classmethod
    def from_coordinates(cls, lat: float, lon: float) -> Self:
        """Build a placeholder location named after its coordinates."""
        return cls(name=f"{lat:.2f}, {lon:.2f}", lat=lat, lon=lon)


class SearchResult(BaseModel):
    """A place returned by a provider's location search."""

    name: str
    lat: float
    lon: float
    country: str | None = None
    region: str | None = None
