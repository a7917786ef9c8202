"""WeatherAPI.com provider.

## API Documentation Summary
Source: https://www.weatherapi.com/docs/

## Endpoints
- Current: https://api.weatherapi.com/v1/current.json?key=KEY&q=LAT,LON
- Forecast: https://api.weatherapi.com/v1/forecast.json?key=KEY&q=LAT,LON&days=N
- Search: https://api.weatherapi.com/v1/search.json?key=KEY&q=QUERY

## Authentication
- API key in the `key` query parameter

## Response Format (forecast.json, trimmed)
```json
{
  "location": {"name": "Copenhagen", "region": "Hovedstaden", "country": "Denmark",
               "lat": 55.67, "lon": 12.58, "tz_id": "Europe/Copenhagen"},
  "current": {"temp_c": 12.0, "wind_kph": 14.4, "condition": {"text": "Sunny", ...}, ...},
  "forecast": {
    "forecastday": [
      {"date_epoch": 1718409600,
       "day": {"avgtemp_c": 14.2, "maxwind_kph": 20.2, ...},
       "hour": [{"time_epoch": 1718409600, "time": "2024-06-15 00:00", ...}, ...]}
    ]
  }
}
```
Hourly entries start at local midnight of the first day.

## Variable Translation (WeatherAPI -> Canonical)
| WeatherAPI Field | Canonical Field | Notes |
|------------------|-----------------|-------|
| temp_c / avgtemp_c | temperature_c | Direct |
| feelslike_c | feels_like_c | Falls back to temperature |
| humidity / avghumidity | humidity_percent | Direct |
| wind_kph / maxwind_kph | wind_speed_kph | Already km/h |
| wind_dir | wind_direction | Already compass; else from wind_degree |
| gust_kph | wind_gust_kph | Already km/h |
| precip_mm / totalprecip_mm | precipitation_mm | Direct |
| chance_of_rain / daily_chance_of_rain | rain_chance_percent | Direct |
| vis_km / avgvis_km | visibility_km | Direct |
| uv | uv_index | Direct |
| pressure_mb | pressure_hpa | 1 mb = 1 hPa |
| condition.text | condition | Direct |
| condition.icon | icon | Protocol-relative, prefixed with https: |
| is_day | is_day | 1/0 -> bool |
"""

from __future__ import annotations

import math
from datetime import datetime
from typing import Any

from bike_weather.models.location import LocationInfo, SearchResult
from bike_weather.models.weather import (
    WeatherForecast,
    WeatherSample,
    parse_time,
    utcnow,
    wind_direction,
)
from bike_weather.providers.base import WeatherProvider, coalesce


def _icon_url(icon: str | None) -> str | None:
    if not icon:
        return None
    if icon.startswith("//"):
        return f"https:{icon}"
    return icon


class WeatherAPIProvider(WeatherProvider):
    """WeatherAPI.com provider.

    Example:
        ```python
        provider = WeatherAPIProvider()
        await provider.initialize("your-api-key")
        samples = await provider.get_hourly_forecast(55.67, 12.56, hours=6)
        ```
    """

    id = "weatherapi"
    name = "WeatherAPI"
    base_url = "https://api.weatherapi.com/v1"

    max_forecast_days = 14

    async def get_current_weather(self, lat: float, lon: float) -> WeatherSample:
        data = await self._get_json(
            f"{self.base_url}/current.json",
            params={"key": self.api_key, "q": f"{lat},{lon}", "aqi": "no"},
        )
        with self._translating():
            return self._to_sample(data["current"], utcnow())

    async def get_hourly_forecast(
        self,
        lat: float,
        lon: float,
        hours: int = 24,
    ) -> list[WeatherSample]:
        # One extra day because hours before the current one are dropped
        days = min(self.max_forecast_days, math.ceil(hours / 24) + 1)
        data = await self._get_forecast_payload(lat, lon, days)
        with self._translating():
            return self._hourly_samples(data, hours)

    async def get_forecast(self, lat: float, lon: float) -> WeatherForecast:
        data = await self._get_forecast_payload(lat, lon, days=3)
        with self._translating():
            location = data["location"]
            return WeatherForecast(
                location=LocationInfo(
                    name=location["name"],
                    lat=location["lat"],
                    lon=location["lon"],
                    country=location.get("country"),
                    region=location.get("region"),
                ),
                provider=self.id,
                current=self._to_sample(data["current"], utcnow()),
                hourly=self._hourly_samples(data, 24),
                daily=[
                    self._to_sample(day["day"], parse_time(day.get("date_epoch")))
                    for day in data["forecast"]["forecastday"]
                ],
            )

    async def search_location(self, query: str) -> list[SearchResult]:
        data = await self._get_json(
            f"{self.base_url}/search.json",
            params={"key": self.api_key, "q": query},
        )
        with self._translating():
            return [
                SearchResult(
                    name=item["name"],
                    lat=item["lat"],
                    lon=item["lon"],
                    country=item.get("country"),
                    region=item.get("region"),
                )
                for item in data
            ]

    async def _get_forecast_payload(
        self, lat: float, lon: float, days: int
    ) -> dict[str, Any]:
        return await self._get_json(
            f"{self.base_url}/forecast.json",
            params={
                "key": self.api_key,
                "q": f"{lat},{lon}",
                "days": days,
                "aqi": "no",
                "alerts": "no",
            },
        )

    def _hourly_samples(self, data: dict[str, Any], hours: int) -> list[WeatherSample]:
        """Flatten forecast days into hourly samples from the current hour on."""
        current_hour = utcnow().replace(minute=0, second=0, microsecond=0)
        samples: list[WeatherSample] = []

        for day in data["forecast"]["forecastday"]:
            for hour in day["hour"]:
                time = parse_time(hour.get("time_epoch"))
                if time < current_hour:
                    continue
                samples.append(self._to_sample(hour, time))
                if len(samples) >= hours:
                    return samples

        return samples

    def _to_sample(self, data: dict[str, Any], time: datetime) -> WeatherSample:
        """Translate a current, hourly or daily block to a sample.

        Daily blocks use the avg/max/total field names, so each field falls
        back to its daily counterpart.
        """
        condition = data.get("condition") or {}
        temperature = coalesce(data.get("temp_c"), data.get("avgtemp_c"), 0)

        direction = data.get("wind_dir")
        if not direction:
            degrees = data.get("wind_degree")
            direction = wind_direction(degrees) if degrees is not None else "N"

        return WeatherSample(
            time=time,
            temperature_c=temperature,
            feels_like_c=coalesce(data.get("feelslike_c"), temperature),
            humidity_percent=coalesce(data.get("humidity"), data.get("avghumidity"), 0),
            wind_speed_kph=coalesce(data.get("wind_kph"), data.get("maxwind_kph"), 0),
            wind_direction=direction,
            wind_gust_kph=data.get("gust_kph"),
            precipitation_mm=coalesce(data.get("precip_mm"), data.get("totalprecip_mm"), 0),
            rain_chance_percent=coalesce(
                data.get("chance_of_rain"), data.get("daily_chance_of_rain"), 0
            ),
            visibility_km=coalesce(data.get("vis_km"), data.get("avgvis_km"), 10),
            uv_index=coalesce(data.get("uv"), 0),
            pressure_hpa=coalesce(data.get("pressure_mb"), 1013),
            condition=condition.get("text", ""),
            icon=_icon_url(condition.get("icon")),
            is_day=bool(coalesce(data.get("is_day"), 1)),
        )
