"""FastAPI application and routes.

This module provides the REST API for the bike weather planner.

## API Structure

- /health - Liveness check
- /api/providers - Weather providers and their availability
- /api/route-weather - Scored departure options and a recommendation
- /api/bike-route - Cycling route between two points
- /api/current-weather, /api/weather - Conditions and forecast for a point
- /api/search - Place search
- /api/weather-comparison - Current conditions from every provider

## Errors

- 400/422 for invalid input
- 502 when every weather provider failed
"""

from bike_weather.api.app import create_app

__all__ = ["create_app"]
