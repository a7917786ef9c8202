"""Tests for forecast alignment."""

from datetime import timedelta

import pytest

from bike_weather.recommendations.alignment import align, hours_needed


@pytest.fixture
def three_hours(now, sample_factory):
    """Samples at T, T+1h and T+2h with distinguishable temperatures."""
    return [
        sample_factory(time=now + timedelta(hours=i), temperature_c=10 + i)
        for i in range(3)
    ]


class TestAlign:
    """Tests for nearest-sample selection."""

    def test_picks_nearest_sample(self, now, three_hours):
        """Test T+40min selects T+1h (20 min away) over T and T+2h."""
        chosen = align(three_hours, now + timedelta(minutes=40))
        assert chosen.time == now + timedelta(hours=1)

    def test_exact_match(self, now, three_hours):
        assert align(three_hours, now + timedelta(hours=2)) is three_hours[2]

    def test_tie_goes_to_first_sample(self, now, three_hours):
        """Test T+30min is equidistant from T and T+1h and picks T."""
        chosen = align(three_hours, now + timedelta(minutes=30))
        assert chosen is three_hours[0]

    def test_target_past_series_returns_last(self, now, three_hours):
        """Test no extrapolation or error past the forecast horizon."""
        chosen = align(three_hours, now + timedelta(days=3))
        assert chosen is three_hours[-1]

    def test_target_before_series_returns_first(self, now, three_hours):
        assert align(three_hours, now - timedelta(hours=5)) is three_hours[0]

    def test_empty_series_raises(self, now):
        with pytest.raises(ValueError):
            align([], now)


class TestHoursNeeded:
    """Tests for forecast horizon sizing."""

    @pytest.mark.parametrize(
        "minutes_ahead,expected",
        [(0, 1), (20, 2), (60, 2), (61, 3), (125, 4)],
    )
    def test_covers_target_plus_one(self, now, minutes_ahead, expected):
        assert hours_needed(now + timedelta(minutes=minutes_ahead), now) == expected

    def test_past_target_needs_one_hour(self, now):
        assert hours_needed(now - timedelta(hours=2), now) == 1

    def test_counts_from_top_of_current_hour(self, now):
        """Test a mid-hour clock still covers a target late in the last hour."""
        mid_hour = now + timedelta(minutes=45)
        assert hours_needed(mid_hour + timedelta(hours=2), mid_hour) == 4
