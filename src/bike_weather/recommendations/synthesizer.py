"""Recommendation synthesis across departure options.

Picks one departure out of a series of scored options and explains it.

## Without a preferred time

| Situation                                        | Label              | Severity |
|--------------------------------------------------|--------------------|----------|
| Conditions worsen soon and now scores >= 6       | Leave soon         | warning  |
| Best option is now                               | Go now             | good     |
| Best is less than 0.5 better than now            | Leave now          | info     |
| Best is 0.5-1.5 better                           | Consider waiting   | info     |
| Best is 1.5 or more better                       | Wait               | good     |

In the last two rows, if the worsening happens before the best option the
label becomes "Leave now" instead: the rider would have to sit through the
bad spell to reach the better one.

"Worsening" is the first option within the next 15 intervals whose score is
at least 1.5 below the current one.

## With a preferred time

Rules are checked in order: preferred is the best option; preferred is at
least 1.0 better than now; preferred is within 0.5 of the best; preferred is
at least 1.0 worse than now; otherwise a neutral comparison.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from bike_weather.models.recommendation import DepartureOption, Recommendation, Severity
from bike_weather.models.weather import round1

DEFAULT_INTERVAL_MINUTES = 15

WORSENING_DROP = 1.5
WORSENING_SCAN_LIMIT = 16
URGENT_MIN_SCORE = 6

SLIGHT_IMPROVEMENT = 0.5
CLEAR_IMPROVEMENT = 1.5

PREFERRED_GAIN = 1.0
PREFERRED_NEAR_BEST = 0.5
PREFERRED_LOSS = -1.0

PREFERRED_TIME_PATTERN = re.compile(r"^(?P<hour>\d{1,2}):(?P<minute>\d{2})$")


@dataclass
class Worsening:
    """The first option that is materially worse than leaving now."""

    index: int
    minutes: int
    score: float


def best_index(options: list[DepartureOption]) -> int:
    """Index of the highest score; the earliest one wins ties."""
    best = 0
    for i, option in enumerate(options):
        if option.score > options[best].score:
            best = i
    return best


def find_worsening(
    options: list[DepartureOption], interval_minutes: int = DEFAULT_INTERVAL_MINUTES
) -> Worsening | None:
    now_score = options[0].score
    for i in range(1, min(len(options), WORSENING_SCAN_LIMIT)):
        if round1(now_score - options[i].score) >= WORSENING_DROP:
            return Worsening(
                index=i, minutes=i * interval_minutes, score=options[i].score
            )
    return None


def preferred_index(
    preferred_time: str,
    start: datetime,
    option_count: int,
    interval_minutes: int = DEFAULT_INTERVAL_MINUTES,
) -> int:
    """Map an "HH:MM" wall-clock time to the nearest departure index.

    The time is read in `start`'s timezone. A time more than half an interval
    before `start` is taken to mean the next day. The result is clamped to
    the available options.

    Raises:
        ValueError: If the time is not a valid "HH:MM" string
    """
    match = PREFERRED_TIME_PATTERN.match(preferred_time.strip())
    if not match:
        raise ValueError(f"Invalid preferred departure time: {preferred_time!r}")
    hour, minute = int(match.group("hour")), int(match.group("minute"))
    if hour > 23 or minute > 59:
        raise ValueError(f"Invalid preferred departure time: {preferred_time!r}")

    target = start.replace(hour=hour, minute=minute, second=0, microsecond=0)
    # Same-zone subtraction ignores offset changes (DST), so compare in UTC
    elapsed = target.astimezone(timezone.utc) - start.astimezone(timezone.utc)
    if elapsed < -timedelta(minutes=interval_minutes / 2):
        target += timedelta(days=1)
        elapsed = target.astimezone(timezone.utc) - start.astimezone(timezone.utc)

    offset = elapsed / timedelta(minutes=interval_minutes)
    index = math.floor(offset + 0.5)
    return max(0, min(option_count - 1, index))


def _fmt(score: float) -> str:
    return f"{score:.1f}/10"


def recommend(
    options: list[DepartureOption],
    preferred_departure_time: str | None = None,
    interval_minutes: int = DEFAULT_INTERVAL_MINUTES,
) -> Recommendation:
    """Choose a departure and explain the choice.

    Args:
        options: Departure options, earliest first; options[0] is "now"
        preferred_departure_time: Optional "HH:MM" the rider would like to leave
        interval_minutes: Spacing between options

    Raises:
        ValueError: If there are no options or the preferred time is invalid
    """
    if not options:
        raise ValueError("No departure options to recommend from")

    best = best_index(options)
    now_score = options[0].score
    best_score = options[best].score
    minutes_to_best = best * interval_minutes
    score_difference = round1(best_score - now_score)
    worsening = find_worsening(options, interval_minutes)

    fields = {
        "best_index": best,
        "minutes_to_best": minutes_to_best,
        "score_difference": score_difference,
        "worsening_time_minutes": worsening.minutes if worsening else None,
        "worsening_score": worsening.score if worsening else None,
    }

    if preferred_departure_time:
        index = preferred_index(
            preferred_departure_time,
            options[0].departure_time,
            len(options),
            interval_minutes,
        )
        return Recommendation(
            preferred_index=index,
            **fields,
            **_with_preference(options, index, best, interval_minutes),
        )

    return Recommendation(
        **fields,
        **_without_preference(
            now_score, best_score, best, minutes_to_best, score_difference,
            worsening, (len(options) - 1) * interval_minutes,
        ),
    )


def _with_preference(
    options: list[DepartureOption],
    index: int,
    best: int,
    interval_minutes: int,
) -> dict:
    now_score = options[0].score
    preferred_score = options[index].score
    best_score = options[best].score
    preferred_minutes = index * interval_minutes
    when = options[index].departure_time.strftime("%H:%M")
    gain = round1(preferred_score - now_score)

    reasoning = (
        f"Leaving at {when} scores {_fmt(preferred_score)} compared with "
        f"{_fmt(now_score)} now, {preferred_minutes} minutes later."
    )

    if index == best:
        return {
            "label": "Optimal",
            "recommendation": f"Your preferred time ({when}) is the best time to leave",
            "reasoning": reasoning,
            "severity": Severity.GOOD,
        }
    if gain >= PREFERRED_GAIN:
        return {
            "label": "Wait for your time",
            "recommendation": f"Wait for your preferred time ({when}), conditions improve",
            "reasoning": reasoning,
            "severity": Severity.GOOD,
        }
    if round1(best_score - preferred_score) <= PREFERRED_NEAR_BEST:
        return {
            "label": "Good choice",
            "recommendation": f"Your preferred time ({when}) works well",
            "reasoning": reasoning,
            "severity": Severity.GOOD,
        }
    if gain <= PREFERRED_LOSS:
        return {
            "label": "Leave now instead",
            "recommendation": (
                f"Conditions are worse at {when}, consider leaving now instead"
            ),
            "reasoning": reasoning,
            "severity": Severity.CAUTION,
        }
    best_when = options[best].departure_time.strftime("%H:%M")
    return {
        "label": "Your choice",
        "recommendation": (
            f"Your preferred time ({when}) is similar to leaving now; "
            f"the best time is {best_when} ({_fmt(best_score)})"
        ),
        "reasoning": reasoning,
        "severity": Severity.INFO,
    }


def _without_preference(
    now_score: float,
    best_score: float,
    best: int,
    minutes_to_best: int,
    improvement: float,
    worsening: Worsening | None,
    horizon_minutes: int,
) -> dict:
    if worsening and now_score >= URGENT_MIN_SCORE:
        return {
            "label": "Leave soon",
            "recommendation": f"Leave now, conditions worsen in {worsening.minutes} minutes",
            "reasoning": (
                f"The score drops from {_fmt(now_score)} now to "
                f"{_fmt(worsening.score)} in {worsening.minutes} minutes."
            ),
            "severity": Severity.WARNING,
        }

    if best == 0:
        return {
            "label": "Go now",
            "recommendation": "Go now, this is the best time to ride",
            "reasoning": (
                f"Current conditions score {_fmt(now_score)}, the best of the "
                f"next {horizon_minutes} minutes."
            ),
            "severity": Severity.GOOD,
        }

    waiting = (
        f"The score goes from {_fmt(now_score)} now to {_fmt(best_score)} "
        f"in {minutes_to_best} minutes."
    )
    worsens_first = worsening is not None and worsening.index < best

    if improvement < SLIGHT_IMPROVEMENT:
        recommendation = "Leave now, waiting brings no real benefit"
        if worsening:
            recommendation += f" and conditions worsen in {worsening.minutes} minutes"
        return {
            "label": "Leave now",
            "recommendation": recommendation,
            "reasoning": waiting,
            "severity": Severity.CAUTION if worsening else Severity.INFO,
        }

    if worsens_first:
        return {
            "label": "Leave now",
            "recommendation": (
                f"Leave now, conditions worsen in {worsening.minutes} minutes "
                f"before they improve"
            ),
            "reasoning": waiting,
            "severity": Severity.CAUTION,
        }

    if improvement < CLEAR_IMPROVEMENT:
        return {
            "label": "Consider waiting",
            "recommendation": (
                f"Consider waiting {minutes_to_best} minutes for slightly better conditions"
            ),
            "reasoning": waiting,
            "severity": Severity.INFO,
        }

    return {
        "label": "Wait",
        "recommendation": f"Wait {minutes_to_best} minutes for better conditions",
        "reasoning": waiting,
        "severity": Severity.GOOD,
    }
