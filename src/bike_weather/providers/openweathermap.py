"""OpenWeatherMap provider.

## API Documentation Summary
Source: https://openweathermap.org/current
Source: https://openweathermap.org/forecast5
Source: https://openweathermap.org/api/geocoding-api

## Endpoints
- Current: https://api.openweathermap.org/data/2.5/weather?lat=..&lon=..&appid=KEY
- Forecast: https://api.openweathermap.org/data/2.5/forecast?lat=..&lon=..&appid=KEY
- Geocoding: https://api.openweathermap.org/geo/1.0/direct?q=QUERY&limit=5&appid=KEY

## Units
Requests use the default "standard" unit system: Kelvin, m/s and metres.

## Granularity
The free forecast is in 3-hour steps. Two hourly samples are interpolated
between each pair of steps: numeric fields linearly, categorical fields
(condition, description, icon, is_day) taken from the nearer step.

## Variable Translation (OpenWeatherMap -> Canonical)
| OWM Field | Canonical Field | Notes |
|-----------|-----------------|-------|
| dt | time | Unix seconds |
| main.temp | temperature_c | Kelvin - 273.15 |
| main.feels_like | feels_like_c | Kelvin - 273.15 |
| main.humidity | humidity_percent | Direct |
| main.pressure | pressure_hpa | Direct |
| wind.speed | wind_speed_kph | m/s x 3.6 |
| wind.gust | wind_gust_kph | m/s x 3.6 |
| wind.deg | wind_direction | Degrees -> 16-point compass |
| rain.1h / rain.3h (+ snow) | precipitation_mm | 3h totals divided by 3 |
| pop | rain_chance_percent | 0-1 x 100 |
| visibility | visibility_km | metres / 1000 |
| weather[0].main | condition | Direct |
| weather[0].description | description | Direct |
| weather[0].icon | icon, is_day | Icon URL; suffix 'd' = day |
| (none) | uv_index | Not in the free tier, always 0 |
"""

from __future__ import annotations

import asyncio
from typing import Any

from bike_weather.models.location import LocationInfo, SearchResult
from bike_weather.models.weather import (
    WeatherForecast,
    WeatherSample,
    kelvin_to_celsius,
    mps_to_kmh,
    parse_time,
    wind_direction,
)
from bike_weather.providers.base import WeatherProvider, coalesce


STEP_HOURS = 3


def _precipitation_per_hour(entry: dict[str, Any]) -> float:
    """Sum rain and snow, normalizing 3-hour totals to an hourly amount."""
    total = 0.0
    for key in ("rain", "snow"):
        block = entry.get(key) or {}
        if block.get("1h") is not None:
            total += block["1h"]
        elif block.get("3h") is not None:
            total += block["3h"] / STEP_HOURS
    return total


def _lerp_bearing(start: float, end: float, ratio: float) -> float:
    """Interpolate between two bearings along the shortest arc."""
    delta = (end - start + 180) % 360 - 180
    return (start + delta * ratio) % 360


class OpenWeatherMapProvider(WeatherProvider):
    """OpenWeatherMap 2.5 provider with hourly interpolation.

    Example:
        ```python
        provider = OpenWeatherMapProvider()
        await provider.initialize("your-api-key")
        samples = await provider.get_hourly_forecast(55.67, 12.56, hours=6)
        ```
    """

    id = "openweathermap"
    name = "OpenWeatherMap"
    base_url = "https://api.openweathermap.org/data/2.5"
    geo_url = "https://api.openweathermap.org/geo/1.0"
    icon_url = "https://openweathermap.org/img/w/{icon}.png"

    async def get_current_weather(self, lat: float, lon: float) -> WeatherSample:
        data = await self._get_current_payload(lat, lon)
        with self._translating():
            return self._to_sample(data)

    async def get_hourly_forecast(
        self,
        lat: float,
        lon: float,
        hours: int = 24,
    ) -> list[WeatherSample]:
        data = await self._get_json(
            f"{self.base_url}/forecast",
            params={"lat": lat, "lon": lon, "appid": self.api_key},
        )
        with self._translating():
            return self._hourly_samples(data["list"], hours)

    async def get_forecast(self, lat: float, lon: float) -> WeatherForecast:
        current_data, hourly = await asyncio.gather(
            self._get_current_payload(lat, lon),
            self.get_hourly_forecast(lat, lon, 24),
        )
        with self._translating():
            name = current_data.get("name")
            if name:
                location = LocationInfo(
                    name=name,
                    lat=lat,
                    lon=lon,
                    country=(current_data.get("sys") or {}).get("country"),
                )
            else:
                location = LocationInfo.from_coordinates(lat, lon)

            return WeatherForecast(
                location=location,
                provider=self.id,
                current=self._to_sample(current_data),
                hourly=hourly,
            )

    async def search_location(self, query: str) -> list[SearchResult]:
        data = await self._get_json(
            f"{self.geo_url}/direct",
            params={"q": query, "limit": 5, "appid": self.api_key},
        )
        with self._translating():
            return [
                SearchResult(
                    name=item["name"],
                    lat=item["lat"],
                    lon=item["lon"],
                    country=item.get("country"),
                    region=item.get("state"),
                )
                for item in data
            ]

    async def _get_current_payload(self, lat: float, lon: float) -> dict[str, Any]:
        return await self._get_json(
            f"{self.base_url}/weather",
            params={"lat": lat, "lon": lon, "appid": self.api_key},
        )

    def _hourly_samples(
        self, entries: list[dict[str, Any]], hours: int
    ) -> list[WeatherSample]:
        """Expand 3-hour steps into hourly samples."""
        steps = [self._to_sample(entry) for entry in entries]
        bearings = [
            coalesce((entry.get("wind") or {}).get("deg"), 0) for entry in entries
        ]

        samples: list[WeatherSample] = []
        for i, step in enumerate(steps):
            if len(samples) >= hours:
                break
            samples.append(step)
            if i + 1 == len(steps):
                break
            for j in range(1, STEP_HOURS):
                if len(samples) >= hours:
                    break
                samples.append(
                    self._interpolate(
                        step,
                        steps[i + 1],
                        bearings[i],
                        bearings[i + 1],
                        j / STEP_HOURS,
                    )
                )

        return samples

    def _interpolate(
        self,
        before: WeatherSample,
        after: WeatherSample,
        bearing_before: float,
        bearing_after: float,
        ratio: float,
    ) -> WeatherSample:
        """Build a sample between two steps.

        Categorical fields come from the nearer step (ratio < 0.5 = before).
        """

        def lerp(start: float, end: float) -> float:
            return start + (end - start) * ratio

        nearer = before if ratio < 0.5 else after

        gust = None
        if before.wind_gust_kph is not None or after.wind_gust_kph is not None:
            gust = lerp(before.effective_wind_kph, after.effective_wind_kph)

        return nearer.model_copy(
            update={
                "time": before.time + (after.time - before.time) * ratio,
                "temperature_c": lerp(before.temperature_c, after.temperature_c),
                "feels_like_c": lerp(before.feels_like_c, after.feels_like_c),
                "humidity_percent": round(
                    lerp(before.humidity_percent, after.humidity_percent)
                ),
                "wind_speed_kph": lerp(before.wind_speed_kph, after.wind_speed_kph),
                "wind_direction": wind_direction(
                    _lerp_bearing(bearing_before, bearing_after, ratio)
                ),
                "wind_gust_kph": gust,
                "precipitation_mm": lerp(before.precipitation_mm, after.precipitation_mm),
                "rain_chance_percent": lerp(
                    before.rain_chance_percent, after.rain_chance_percent
                ),
                "visibility_km": lerp(before.visibility_km, after.visibility_km),
                "pressure_hpa": lerp(before.pressure_hpa, after.pressure_hpa),
            }
        )

    def _to_sample(self, data: dict[str, Any]) -> WeatherSample:
        main = data["main"]
        wind = data.get("wind") or {}
        weather = (data.get("weather") or [{}])[0]
        icon = weather.get("icon")

        temperature = kelvin_to_celsius(main["temp"])
        gust = wind.get("gust")

        return WeatherSample(
            time=parse_time(data.get("dt")),
            temperature_c=temperature,
            feels_like_c=(
                kelvin_to_celsius(main["feels_like"])
                if main.get("feels_like") is not None
                else temperature
            ),
            humidity_percent=coalesce(main.get("humidity"), 0),
            wind_speed_kph=mps_to_kmh(coalesce(wind.get("speed"), 0)),
            wind_direction=wind_direction(coalesce(wind.get("deg"), 0)),
            wind_gust_kph=mps_to_kmh(gust) if gust is not None else None,
            precipitation_mm=_precipitation_per_hour(data),
            rain_chance_percent=coalesce(data.get("pop"), 0) * 100,
            visibility_km=coalesce(data.get("visibility"), 10000) / 1000,
            uv_index=0,
            pressure_hpa=coalesce(main.get("pressure"), 1013),
            condition=weather.get("main", ""),
            description=weather.get("description"),
            icon=self.icon_url.format(icon=icon) if icon else None,
            is_day=icon.endswith("d") if icon else True,
        )
