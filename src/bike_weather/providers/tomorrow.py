"""Tomorrow.io provider.

## API Documentation Summary
Source: https://docs.tomorrow.io/reference/realtime-weather
Source: https://docs.tomorrow.io/reference/post-timelines
Source: https://docs.tomorrow.io/reference/weather-codes

## Endpoints
- Realtime: https://api.tomorrow.io/v4/weather/realtime?location=LAT,LON&apikey=KEY
- Timelines: https://api.tomorrow.io/v4/timelines?location=LAT,LON&fields=..&timesteps=1h

## Response Format
Realtime:
```json
{"data": {"time": "2024-06-15T12:00:00Z", "values": {"temperature": 18.2, ...}}}
```
Timelines:
```json
{"data": {"timelines": [{"timestep": "1h",
  "intervals": [{"startTime": "2024-06-15T12:00:00Z", "values": {...}}]}]}}
```

## Variable Translation (Tomorrow.io metric -> Canonical)
| Tomorrow.io Field | Canonical Field | Notes |
|-------------------|-----------------|-------|
| temperature | temperature_c | Direct |
| temperatureApparent | feels_like_c | Falls back to temperature |
| humidity | humidity_percent | Direct |
| windSpeed | wind_speed_kph | m/s x 3.6 |
| windGust | wind_gust_kph | m/s x 3.6 |
| windDirection | wind_direction | Degrees -> 16-point compass |
| precipitationIntensity | precipitation_mm | mm/h |
| precipitationProbability | rain_chance_percent | Direct |
| visibility | visibility_km | Already km |
| uvIndex | uv_index | Direct |
| pressureSurfaceLevel | pressure_hpa | Direct |
| weatherCode | condition | See WEATHER_CODES |

Tomorrow.io has no geocoding, so `search_location` always returns an empty
list and the registry moves on to the next provider.
"""

from __future__ import annotations

import asyncio
from datetime import timedelta
from typing import Any

from bike_weather.models.location import LocationInfo, SearchResult
from bike_weather.models.weather import (
    WeatherForecast,
    WeatherSample,
    mps_to_kmh,
    parse_time,
    utcnow,
    wind_direction,
)
from bike_weather.providers.base import WeatherProvider, coalesce


WEATHER_CODES: dict[int, str] = {
    0: "Unknown",
    1000: "Clear",
    1001: "Cloudy",
    1100: "Mostly Clear",
    1101: "Partly Cloudy",
    1102: "Mostly Cloudy",
    2000: "Fog",
    2100: "Light Fog",
    3000: "Light Wind",
    3001: "Wind",
    3002: "Strong Wind",
    4000: "Drizzle",
    4001: "Rain",
    4200: "Light Rain",
    4201: "Heavy Rain",
    5000: "Snow",
    5001: "Flurries",
    5100: "Light Snow",
    5101: "Heavy Snow",
    6000: "Freezing Drizzle",
    6001: "Freezing Rain",
    6200: "Light Freezing Rain",
    6201: "Heavy Freezing Rain",
    7000: "Ice Pellets",
    7101: "Heavy Ice Pellets",
    7102: "Light Ice Pellets",
    8000: "Thunderstorm",
}

TIMELINE_FIELDS = [
    "temperature",
    "temperatureApparent",
    "humidity",
    "windSpeed",
    "windDirection",
    "windGust",
    "precipitationIntensity",
    "precipitationProbability",
    "weatherCode",
    "visibility",
    "uvIndex",
    "pressureSurfaceLevel",
]


class TomorrowProvider(WeatherProvider):
    """Tomorrow.io v4 provider.

    Example:
        ```python
        provider = TomorrowProvider()
        await provider.initialize("your-api-key")
        current = await provider.get_current_weather(55.67, 12.56)
        ```
    """

    id = "tomorrow"
    name = "Tomorrow.io"
    base_url = "https://api.tomorrow.io/v4"

    async def get_current_weather(self, lat: float, lon: float) -> WeatherSample:
        data = await self._get_json(
            f"{self.base_url}/weather/realtime",
            params={
                "location": f"{lat},{lon}",
                "apikey": self.api_key,
                "units": "metric",
            },
        )
        with self._translating():
            realtime = data["data"]
            return self._to_sample(realtime["values"], realtime.get("time"))

    async def get_hourly_forecast(
        self,
        lat: float,
        lon: float,
        hours: int = 24,
    ) -> list[WeatherSample]:
        start = utcnow()
        end = start + timedelta(hours=hours)
        data = await self._get_json(
            f"{self.base_url}/timelines",
            params={
                "location": f"{lat},{lon}",
                "fields": ",".join(TIMELINE_FIELDS),
                "timesteps": "1h",
                "startTime": start.isoformat(),
                "endTime": end.isoformat(),
                "apikey": self.api_key,
                "units": "metric",
            },
        )

        with self._translating():
            intervals = data["data"]["timelines"][0]["intervals"]
            return [
                self._to_sample(interval.get("values") or {}, interval.get("startTime"))
                for interval in intervals[:hours]
            ]

    async def get_forecast(self, lat: float, lon: float) -> WeatherForecast:
        current, hourly = await asyncio.gather(
            self.get_current_weather(lat, lon),
            self.get_hourly_forecast(lat, lon, 24),
        )
        return WeatherForecast(
            location=LocationInfo.from_coordinates(lat, lon),
            provider=self.id,
            current=current,
            hourly=hourly,
        )

    async def search_location(self, query: str) -> list[SearchResult]:
        return []

    def _to_sample(self, values: dict[str, Any], time: str | None) -> WeatherSample:
        temperature = coalesce(values.get("temperature"), 0)
        gust = values.get("windGust")
        condition = WEATHER_CODES.get(coalesce(values.get("weatherCode"), 0), "Unknown")

        return WeatherSample(
            time=parse_time(time),
            temperature_c=temperature,
            feels_like_c=coalesce(values.get("temperatureApparent"), temperature),
            humidity_percent=coalesce(values.get("humidity"), 0),
            wind_speed_kph=mps_to_kmh(coalesce(values.get("windSpeed"), 0)),
            wind_direction=wind_direction(coalesce(values.get("windDirection"), 0)),
            wind_gust_kph=mps_to_kmh(gust) if gust is not None else None,
            precipitation_mm=coalesce(values.get("precipitationIntensity"), 0),
            rain_chance_percent=coalesce(values.get("precipitationProbability"), 0),
            visibility_km=coalesce(values.get("visibility"), 10),
            uv_index=coalesce(values.get("uvIndex"), 0),
            pressure_hpa=coalesce(values.get("pressureSurfaceLevel"), 1013),
            condition=condition,
            description=condition,
        )
