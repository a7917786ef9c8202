"""Weather lookup routes.

Thin wrappers over the provider registry. Each response names the provider
that answered and lists the failures of any providers tried before it.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from bike_weather.api.dependencies import get_registry
from bike_weather.models.location import SearchResult
from bike_weather.models.provider import ProviderDescriptor
from bike_weather.models.weather import ProviderComparison, WeatherForecast, WeatherSample
from bike_weather.providers.registry import ProviderRegistry

router = APIRouter()

MIN_QUERY_LENGTH = 2


class LocationRequest(BaseModel):
    """A coordinate and an optional provider to try first."""

    lat: float = Field(..., ge=-90, le=90)
    lon: float = Field(..., ge=-180, le=180)
    provider: str | None = None


class ComparisonRequest(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lon: float = Field(..., ge=-180, le=180)


class SearchRequest(BaseModel):
    query: str = ""
    provider: str | None = None


class CurrentWeatherResponse(BaseModel):
    provider: str
    weather: WeatherSample
    errors: list[str] = Field(default_factory=list)


class ForecastResponse(BaseModel):
    provider: str
    forecast: WeatherForecast
    errors: list[str] = Field(default_factory=list)


class SearchResponse(BaseModel):
    provider: str
    results: list[SearchResult]
    errors: list[str] = Field(default_factory=list)


@router.get("/providers", response_model=list[ProviderDescriptor])
async def list_providers(
    registry: ProviderRegistry = Depends(get_registry),
) -> list[ProviderDescriptor]:
    """List every provider and whether it is available."""
    return registry.descriptors()


@router.post("/current-weather", response_model=CurrentWeatherResponse)
async def current_weather(
    body: LocationRequest,
    registry: ProviderRegistry = Depends(get_registry),
) -> CurrentWeatherResponse:
    result = await registry.get_current_weather(body.lat, body.lon, preferred=body.provider)
    return CurrentWeatherResponse(
        provider=result.provider_id, weather=result.data, errors=result.errors
    )


@router.post("/weather", response_model=ForecastResponse)
async def forecast(
    body: LocationRequest,
    registry: ProviderRegistry = Depends(get_registry),
) -> ForecastResponse:
    """Current conditions plus hourly forecast for a location."""
    result = await registry.get_forecast(body.lat, body.lon, preferred=body.provider)
    return ForecastResponse(
        provider=result.provider_id, forecast=result.data, errors=result.errors
    )


@router.post("/search", response_model=SearchResponse)
async def search(
    body: SearchRequest,
    registry: ProviderRegistry = Depends(get_registry),
) -> SearchResponse:
    """Search for places by name."""
    query = body.query.strip()
    if len(query) < MIN_QUERY_LENGTH:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Query must be at least {MIN_QUERY_LENGTH} characters",
        )
    result = await registry.search_location(query, preferred=body.provider)
    return SearchResponse(
        provider=result.provider_id, results=result.data, errors=result.errors
    )


@router.post("/weather-comparison", response_model=ProviderComparison)
async def weather_comparison(
    body: ComparisonRequest,
    registry: ProviderRegistry = Depends(get_registry),
) -> ProviderComparison:
    """Current conditions from every available provider."""
    return await registry.compare_providers(body.lat, body.lon)
