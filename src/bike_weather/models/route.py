"""Route models."""

from __future__ import annotations

from pydantic import BaseModel, Field


class RoutePoint(BaseModel):
    """A coordinate with its normalized position along a route."""

    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)
    progress: float = Field(..., ge=0, le=1, description="0 at start, 1 at end")


class Route(BaseModel):
    """An ordered set of route points with distance and duration estimates."""

    points: list[RoutePoint] = Field(default_factory=list)
    distance_km: float = Field(..., ge=0)
    duration_estimate_min: int = Field(..., ge=0)
    service: str = Field(default="fallback", description="Routing service used")
