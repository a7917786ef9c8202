"""Forecast alignment: pick the sample nearest a target instant."""

from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone

from bike_weather.models.weather import WeatherSample


def align(samples: list[WeatherSample], target: datetime) -> WeatherSample:
    """Return the sample whose time is closest to `target`.

    Ties go to the earliest sample in the list. Samples are never
    extrapolated: if the whole series lies before `target`, the last one is
    still returned.

    Raises:
        ValueError: If `samples` is empty
    """
    if not samples:
        raise ValueError("Cannot align an empty forecast")
    return min(samples, key=lambda sample: abs(sample.time - target))


def hours_needed(target: datetime, now: datetime) -> int:
    """Forecast horizon in hours required to cover `target`.

    Hourly series start at the top of the current hour, so the horizon is
    counted from there rather than from `now`.
    """
    hour_start = now.astimezone(timezone.utc).replace(minute=0, second=0, microsecond=0)
    ahead = (target - hour_start) / timedelta(hours=1)
    return max(0, math.ceil(ahead)) + 1
