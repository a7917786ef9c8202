"""Route and departure planning routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from bike_weather.api.dependencies import get_planner, get_sampler
from bike_weather.models.location import Coordinates
from bike_weather.models.recommendation import RouteWeatherReport
from bike_weather.models.route import Route
from bike_weather.recommendations.planner import RouteWeatherPlanner, RouteWeatherRequest
from bike_weather.routing.sampler import RouteSampler

router = APIRouter()


class BikeRouteRequest(BaseModel):
    """Start and end of a route."""

    start: Coordinates
    end: Coordinates


@router.post("/route-weather", response_model=RouteWeatherReport)
async def route_weather(
    body: RouteWeatherRequest,
    planner: RouteWeatherPlanner = Depends(get_planner),
) -> RouteWeatherReport:
    """Score departure times along a route and recommend one."""
    return await planner.plan(body)


@router.post("/bike-route", response_model=Route)
async def bike_route(
    body: BikeRouteRequest,
    sampler: RouteSampler = Depends(get_sampler),
) -> Route:
    """Get a cycling route, falling back to a straight line."""
    return await sampler.get_route(body.start, body.end)
