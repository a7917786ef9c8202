"""Tests for the HTTP API."""

import asyncio

import pytest
from fastapi.testclient import TestClient

from bike_weather.api import create_app
from bike_weather.api.dependencies import get_planner, get_registry, get_sampler
from bike_weather.models.location import SearchResult
from bike_weather.models.provider import ProviderConfig
from bike_weather.providers.registry import ProviderRegistry
from bike_weather.recommendations.planner import RouteWeatherPlanner
from bike_weather.routing.sampler import RouteSampler
from conftest import FakeProvider

ROUTE = {
    "start": {"lat": 55.67, "lng": 12.56},
    "end": {"lat": 55.70, "lng": 12.60},
}


def client_for(*providers: FakeProvider) -> TestClient:
    registry = ProviderRegistry(list(providers))
    asyncio.run(
        registry.initialize(
            {p.id: ProviderConfig(api_key="k", priority=i) for i, p in enumerate(providers)}
        )
    )
    sampler = RouteSampler()

    app = create_app()
    app.dependency_overrides[get_registry] = lambda: registry
    app.dependency_overrides[get_sampler] = lambda: sampler
    app.dependency_overrides[get_planner] = lambda: RouteWeatherPlanner(registry, sampler)
    return TestClient(app)


@pytest.fixture
def client() -> TestClient:
    copenhagen = SearchResult(name="Copenhagen", lat=55.68, lon=12.57, country="Denmark")
    return client_for(FakeProvider(search_results=[copenhagen]))


@pytest.fixture
def broken_client(failing_provider) -> TestClient:
    return client_for(failing_provider)


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestRouteWeather:
    """Tests for POST /api/route-weather."""

    def test_plan(self, client):
        response = client.post(
            "/api/route-weather",
            json={**ROUTE, "departure_intervals": 4, "estimated_travel_time_minutes": 20},
        )

        assert response.status_code == 200
        data = response.json()
        assert len(data["departure_options"]) == 4
        assert data["departure_options"][0]["overall_rating"]["score"] == 10
        assert data["recommendation"]["best_index"] == 0
        assert data["recommendation"]["label"] == "Go now"
        assert data["route"]["routing_service"] == "fallback"
        assert data["available_providers"] == [
            {"id": "fake", "display_name": "Fake", "available": True}
        ]

    def test_invalid_intervals(self, client):
        response = client.post("/api/route-weather", json={**ROUTE, "departure_intervals": 0})
        assert response.status_code == 422

    def test_invalid_coordinates(self, client):
        response = client.post(
            "/api/route-weather", json={"start": {"lat": 91, "lng": 0}, "end": ROUTE["end"]}
        )
        assert response.status_code == 422

    def test_provider_failure_is_bad_gateway(self, broken_client):
        response = broken_client.post("/api/route-weather", json=ROUTE)

        assert response.status_code == 502
        assert response.json()["detail"].startswith("All weather providers failed: Broken:")


class TestBikeRoute:
    def test_straight_line_fallback(self, client):
        response = client.post("/api/bike-route", json=ROUTE)

        assert response.status_code == 200
        data = response.json()
        assert data["service"] == "fallback"
        assert [p["progress"] for p in data["points"]] == [0, 0.25, 0.5, 0.75, 1]


class TestWeather:
    """Tests for the weather lookup endpoints."""

    def test_providers(self, client):
        response = client.get("/api/providers")
        assert response.status_code == 200
        assert response.json() == [{"id": "fake", "display_name": "Fake", "available": True}]

    def test_current_weather(self, client):
        response = client.post("/api/current-weather", json={"lat": 55.67, "lon": 12.56})

        assert response.status_code == 200
        data = response.json()
        assert data["provider"] == "fake"
        assert data["weather"]["temperature_c"] == 18.0
        assert data["errors"] == []

    def test_forecast(self, client):
        response = client.post("/api/weather", json={"lat": 55.67, "lon": 12.56, "provider": "fake"})

        assert response.status_code == 200
        assert len(response.json()["forecast"]["hourly"]) == 24

    def test_search(self, client):
        response = client.post("/api/search", json={"query": "Copen"})

        assert response.status_code == 200
        assert response.json()["results"][0]["name"] == "Copenhagen"

    @pytest.mark.parametrize("query", ["", "a", " b "])
    def test_short_search_query(self, client, query):
        response = client.post("/api/search", json={"query": query})
        assert response.status_code == 400

    def test_comparison(self, client):
        response = client.post("/api/weather-comparison", json={"lat": 55.67, "lon": 12.56})

        assert response.status_code == 200
        assert response.json()["current"]["fake"]["temperature_c"] == 18.0

    def test_current_weather_failure(self, broken_client):
        response = broken_client.post("/api/current-weather", json={"lat": 0, "lon": 0})
        assert response.status_code == 502


class TestLifespan:
    """Tests for the app with its real, unconfigured services."""

    def test_no_keys_configured(self):
        with TestClient(create_app()) as client:
            providers = client.get("/api/providers").json()
            assert {p["id"] for p in providers} == {"weatherapi", "openweathermap", "tomorrow"}
            assert not any(p["available"] for p in providers)

            response = client.post("/api/route-weather", json=ROUTE)
            assert response.status_code == 502
            assert response.json()["detail"] == "No weather providers available"

    def test_services_missing_before_startup(self):
        client = TestClient(create_app())
        assert client.get("/api/providers").status_code == 503
