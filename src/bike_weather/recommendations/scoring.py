"""Bike-suitability scoring for a single weather sample.

Every sample starts at 10 and loses points per category. Within a category
the first matching band applies; categories are independent and their
penalties add up. The running score is rounded to one decimal after every
adjustment and clamped to [1, 10] at the end.

| Category      | Bands                                                          |
|---------------|----------------------------------------------------------------|
| Temperature   | <-5: -4, <0: -3, <5: -2, <10: -1, >35: -3, >30: -2, >25: -1    |
| Wind (km/h)   | >50: -3, >35: -2, >25: -1, >20: -0.5 (gusts when reported)     |
| Snow          | snow/sleet/blizzard in condition: -5, rain is not scored       |
| Rain          | mm >5: 4, >2: 3, >0.5: 2, >0.1: 1; at <=0.1 mm chance          |
|               | >80%: 1.5, >60%: 1, >40%: 0.5; capped at 4                     |
| Visibility    | <0.5 km: -4, <1: -3, <5: -1                                    |
| UV            | >=11: -0.5; >=8 and >=6 are noted without a penalty            |
| Bonus         | 15-24 °C, wind <10 (gusts), rain chance <10%, no rain: +1      |
"""

from __future__ import annotations

from bike_weather.models.recommendation import BikeRating
from bike_weather.models.weather import WeatherSample, round1

BASE_SCORE = 10.0
MIN_SCORE = 1.0
MAX_SCORE = 10.0

MAX_RAIN_IMPACT = 4.0

SNOW_KEYWORDS = ("snow", "sleet", "blizzard")

# (exclusive bound, penalty, factor) evaluated in order
COLD_BANDS = [
    (-5, 4, "Freezing temperature"),
    (0, 3, "Very cold temperature"),
    (5, 2, "Cold temperature"),
    (10, 1, "Cool temperature"),
]
HEAT_BANDS = [
    (35, 3, "Extreme heat"),
    (30, 2, "Very hot temperature"),
    (25, 1, "Hot temperature"),
]
WIND_BANDS = [
    (50, 3, "Dangerous wind"),
    (35, 2, "Very strong wind"),
    (25, 1, "Strong wind"),
    (20, 0.5, "Moderate wind"),
]
RAIN_AMOUNT_BANDS = [
    (5, 4, "Heavy rain"),
    (2, 3, "Moderate rain"),
    (0.5, 2, "Light rain"),
    (0.1, 1, "Drizzle"),
]
RAIN_CHANCE_BANDS = [
    (80, 1.5, "Rain very likely"),
    (60, 1, "High chance of rain"),
    (40, 0.5, "Moderate chance of rain"),
]
VISIBILITY_BANDS = [
    (0.5, 4, "Very poor visibility"),
    (1, 3, "Poor visibility"),
    (5, 1, "Reduced visibility"),
]


def _below(value: float, bands: list[tuple[float, float, str]]) -> tuple[float, str] | None:
    for bound, penalty, factor in bands:
        if value < bound:
            return penalty, factor
    return None


def _above(value: float, bands: list[tuple[float, float, str]]) -> tuple[float, str] | None:
    for bound, penalty, factor in bands:
        if value > bound:
            return penalty, factor
    return None


def is_snowy(condition: str) -> bool:
    text = condition.lower()
    return any(keyword in text for keyword in SNOW_KEYWORDS)


def score_sample(sample: WeatherSample) -> BikeRating:
    """Rate how suitable one weather sample is for cycling.

    Pure and deterministic; only the normalized sample is consulted.
    """
    score = BASE_SCORE
    factors: list[str] = []

    def penalize(hit: tuple[float, str] | None) -> None:
        nonlocal score
        if hit is None:
            return
        penalty, factor = hit
        score = round1(score - penalty)
        factors.append(factor)

    # Temperature
    temperature = sample.temperature_c
    penalize(_below(temperature, COLD_BANDS) or _above(temperature, HEAT_BANDS))

    # Wind
    penalize(_above(sample.effective_wind_kph, WIND_BANDS))

    # Precipitation
    if is_snowy(sample.condition):
        penalize((5, "Snow or sleet"))
    else:
        rain_impact = 0.0
        amount = _above(sample.precipitation_mm, RAIN_AMOUNT_BANDS)
        if amount:
            rain_impact += amount[0]
            factors.append(amount[1])
        if sample.precipitation_mm <= 0.1:
            chance = _above(sample.rain_chance_percent, RAIN_CHANCE_BANDS)
            if chance:
                rain_impact += chance[0]
                factors.append(chance[1])
        score = round1(score - min(rain_impact, MAX_RAIN_IMPACT))

    # Visibility
    penalize(_below(sample.visibility_km, VISIBILITY_BANDS))

    # UV
    if sample.uv_index >= 11:
        penalize((0.5, "Extreme UV"))
    elif sample.uv_index >= 8:
        factors.append("Very high UV - wear sunscreen")
    elif sample.uv_index >= 6:
        factors.append("High UV - wear sunscreen")

    # Bonus
    if (
        15 <= sample.temperature_c <= 24
        and sample.effective_wind_kph < 10
        and sample.rain_chance_percent < 10
        and sample.precipitation_mm == 0
    ):
        score = round1(score + 1)
        factors.append("Perfect biking weather!")

    return BikeRating(score=max(MIN_SCORE, min(MAX_SCORE, score)), factors=factors)
