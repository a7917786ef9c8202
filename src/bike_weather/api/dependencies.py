"""FastAPI dependencies for the shared services.

The services live on `app.state` for the lifetime of the process. Tests
replace these dependencies through `app.dependency_overrides`.

## Usage

```python
from fastapi import Depends
from bike_weather.api.dependencies import get_registry

@router.get("/providers")
async def providers(registry: ProviderRegistry = Depends(get_registry)):
    return registry.descriptors()
```
"""

from __future__ import annotations

from fastapi import HTTPException, Request, status

from bike_weather.providers.registry import ProviderRegistry
from bike_weather.recommendations.planner import RouteWeatherPlanner
from bike_weather.routing.sampler import RouteSampler
from bike_weather.services import Services


def get_services(request: Request) -> Services:
    services = getattr(request.app.state, "services", None)
    if services is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service is starting up",
        )
    return services


def get_registry(request: Request) -> ProviderRegistry:
    return get_services(request).registry


def get_sampler(request: Request) -> RouteSampler:
    return get_services(request).sampler


def get_planner(request: Request) -> RouteWeatherPlanner:
    return get_services(request).planner
