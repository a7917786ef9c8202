"""Tests for the recommendation synthesizer."""

from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from bike_weather.models.recommendation import DepartureOption, OverallRating, Severity
from bike_weather.recommendations.departures import summarize
from bike_weather.recommendations.synthesizer import (
    best_index,
    find_worsening,
    preferred_index,
    recommend,
)


@pytest.fixture
def make_options(now):
    """Build departure options with the given overall scores, 15 minutes apart."""

    def build(scores: list[float]) -> list[DepartureOption]:
        return [
            DepartureOption(
                departure_time=now + timedelta(minutes=15 * i),
                arrival_time=now + timedelta(minutes=15 * i + 30),
                overall_rating=OverallRating(score=score, summary=summarize(score)),
            )
            for i, score in enumerate(scores)
        ]

    return build


class TestBestIndex:
    def test_first_maximum_wins(self, make_options):
        assert best_index(make_options([7, 9, 9, 8])) == 1

    def test_single_option(self, make_options):
        assert best_index(make_options([3])) == 0


class TestFindWorsening:
    """Tests for deterioration detection."""

    def test_drop_of_two_at_one_hour(self, make_options):
        options = make_options([8, 8, 8, 8] + [6] * 12)
        worsening = find_worsening(options)
        assert worsening.index == 4
        assert worsening.minutes == 60
        assert worsening.score == 6

    def test_drop_must_be_at_least_one_and_a_half(self, make_options):
        assert find_worsening(make_options([8, 6.6, 7])) is None
        assert find_worsening(make_options([7.6, 6.1])).index == 1

    def test_scan_stops_after_fifteen_intervals(self, make_options):
        assert find_worsening(make_options([8] * 16 + [2])) is None


class TestRecommendWithoutPreference:
    """Tests for the no-preference decision rules."""

    def test_deterioration_from_good_conditions_is_urgent(self, make_options):
        recommendation = recommend(make_options([8, 8, 8, 8] + [6] * 12))

        assert recommendation.label == "Leave soon"
        assert recommendation.severity == Severity.WARNING
        assert recommendation.worsening_time_minutes == 60
        assert recommendation.worsening_score == 6
        assert "60 minutes" in recommendation.recommendation
        assert "8.0/10" in recommendation.reasoning
        assert "6.0/10" in recommendation.reasoning

    def test_go_now_when_now_is_best(self, make_options):
        recommendation = recommend(make_options([10, 10, 10, 10]))

        assert recommendation.best_index == 0
        assert recommendation.label == "Go now"
        assert recommendation.severity == Severity.GOOD
        assert recommendation.minutes_to_best == 0
        assert recommendation.score_difference == 0
        assert recommendation.worsening_time_minutes is None
        assert "10.0/10" in recommendation.reasoning
        assert "45 minutes" in recommendation.reasoning

    def test_small_improvement_means_leave_now(self, make_options):
        recommendation = recommend(make_options([5, 5.3, 5.2]))

        assert recommendation.best_index == 1
        assert recommendation.label == "Leave now"
        assert recommendation.severity == Severity.INFO
        assert recommendation.score_difference == 0.3

    def test_small_improvement_mentions_worsening(self, make_options):
        recommendation = recommend(make_options([5, 5.2, 3.4]))

        assert recommendation.label == "Leave now"
        assert recommendation.severity == Severity.CAUTION
        assert "worsen in 30 minutes" in recommendation.recommendation

    def test_moderate_improvement_suggests_waiting(self, make_options):
        recommendation = recommend(make_options([5, 6, 5.5]))

        assert recommendation.label == "Consider waiting"
        assert recommendation.minutes_to_best == 15
        assert recommendation.score_difference == 1.0
        assert "15 minutes" in recommendation.recommendation

    def test_large_improvement_recommends_waiting(self, make_options):
        recommendation = recommend(make_options([4, 4.5, 6]))

        assert recommendation.label == "Wait"
        assert recommendation.severity == Severity.GOOD
        assert recommendation.recommendation == "Wait 30 minutes for better conditions"
        assert recommendation.reasoning == (
            "The score goes from 4.0/10 now to 6.0/10 in 30 minutes."
        )

    def test_worsening_before_best_means_leave_now(self, make_options):
        """Test waiting is not advised when conditions dip before improving."""
        recommendation = recommend(make_options([5, 3, 7]))

        assert recommendation.best_index == 2
        assert recommendation.label == "Leave now"
        assert recommendation.severity == Severity.CAUTION
        assert recommendation.worsening_time_minutes == 15

    def test_interval_minutes_scales_times(self, make_options):
        recommendation = recommend(make_options([4, 4.5, 6]), interval_minutes=30)
        assert recommendation.minutes_to_best == 60

    def test_no_options(self):
        with pytest.raises(ValueError):
            recommend([])


class TestRecommendWithPreference:
    """Tests for the preferred-time decision rules (options start at 08:00)."""

    def test_preferred_is_best(self, make_options):
        recommendation = recommend(make_options([5, 6, 8]), preferred_departure_time="08:30")

        assert recommendation.preferred_index == 2
        assert recommendation.label == "Optimal"
        assert "08:30" in recommendation.recommendation

    def test_preferred_materially_better_than_now(self, make_options):
        recommendation = recommend(make_options([5, 6.5, 8]), preferred_departure_time="08:15")

        assert recommendation.preferred_index == 1
        assert recommendation.label == "Wait for your time"
        assert recommendation.severity == Severity.GOOD

    def test_preferred_close_to_best(self, make_options):
        recommendation = recommend(make_options([7, 7.2, 7.5]), preferred_departure_time="08:15")
        assert recommendation.label == "Good choice"

    def test_preferred_materially_worse_than_now(self, make_options):
        recommendation = recommend(make_options([8, 9, 6.5]), preferred_departure_time="08:30")

        assert recommendation.label == "Leave now instead"
        assert recommendation.severity == Severity.CAUTION

    def test_neutral_preference(self, make_options):
        recommendation = recommend(make_options([6, 6.3, 8]), preferred_departure_time="08:15")

        assert recommendation.label == "Your choice"
        assert recommendation.severity == Severity.INFO
        assert "08:30" in recommendation.recommendation

    def test_reasoning_has_both_scores_and_delay(self, make_options):
        recommendation = recommend(make_options([5, 6.5, 8]), preferred_departure_time="08:15")
        assert recommendation.reasoning == (
            "Leaving at 08:15 scores 6.5/10 compared with 5.0/10 now, 15 minutes later."
        )


class TestPreferredIndex:
    """Tests for mapping HH:MM to an option index."""

    @pytest.mark.parametrize(
        "time,expected",
        [
            ("08:00", 0),
            ("07:55", 0),
            ("08:20", 1),
            ("08:23", 2),
            ("23:00", 2),
            ("07:00", 2),
        ],
    )
    def test_nearest_index_clamped(self, now, time, expected):
        assert preferred_index(time, now, option_count=3) == expected

    @pytest.mark.parametrize("time", ["8h30", "24:00", "12:60", ""])
    def test_invalid_times(self, now, time):
        with pytest.raises(ValueError):
            preferred_index(time, now, option_count=3)

    def test_daylight_saving_change_uses_elapsed_time(self):
        """Test the clocks going back add an hour between start and target."""
        # 2026-10-25: 03:00 CEST becomes 02:00 CET in Copenhagen
        start = datetime(2026, 10, 25, 1, 30, tzinfo=ZoneInfo("Europe/Copenhagen"))
        assert preferred_index("04:30", start, option_count=20) == 16
