"""Tests for location, weather and route models."""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from bike_weather.models.location import Coordinates, LocationInfo
from bike_weather.models.route import RoutePoint
from bike_weather.models.weather import (
    kelvin_to_celsius,
    mps_to_kmh,
    parse_time,
    round1,
    wind_direction,
)


class TestCoordinates:
    """Tests for Coordinates model."""

    def test_valid_coordinates(self):
        """Test creating valid coordinates."""
        coords = Coordinates(lat=55.6761, lng=12.5683)
        assert coords.lat == 55.6761
        assert coords.lng == 12.5683

    def test_invalid_latitude(self):
        """Test latitude out of range."""
        with pytest.raises(ValidationError):
            Coordinates(lat=91, lng=0)

    def test_invalid_longitude(self):
        """Test longitude out of range."""
        with pytest.raises(ValidationError):
            Coordinates(lat=0, lng=-181)

    def test_from_string(self):
        """Test parsing 'lat,lng' strings."""
        coords = Coordinates.from_string("-33.8688, 151.2093")
        assert (coords.lat, coords.lng) == (-33.8688, 151.2093)

    def test_from_string_invalid(self):
        """Test parsing rejects other formats."""
        with pytest.raises(ValueError, match="Invalid coordinate format"):
            Coordinates.from_string("Copenhagen")

    def test_str_round_trips(self):
        coords = Coordinates(lat=55.67, lng=12.56)
        assert Coordinates.from_string(str(coords)) == coords


class TestLocationInfo:
    def test_from_coordinates_names_location(self):
        """Test placeholder name is the rounded coordinates."""
        location = LocationInfo.from_coordinates(55.6761, 12.5683)
        assert location.name == "55.68, 12.57"


class TestRoutePoint:
    def test_progress_bounds(self):
        """Test progress must lie in [0, 1]."""
        with pytest.raises(ValidationError):
            RoutePoint(lat=0, lng=0, progress=1.5)


class TestWindDirection:
    """Tests for degree to compass conversion."""

    @pytest.mark.parametrize(
        "degrees,expected",
        [(0, "N"), (11.2, "N"), (11.25, "NNE"), (90, "E"), (202.5, "SSW"), (348.75, "N"), (359, "N")],
    )
    def test_compass_points(self, degrees: float, expected: str):
        assert wind_direction(degrees) == expected


class TestUnitConversions:
    def test_mps_to_kmh(self):
        assert mps_to_kmh(10) == pytest.approx(36.0)

    def test_kelvin_to_celsius(self):
        assert kelvin_to_celsius(273.15) == pytest.approx(0.0)

    def test_round1_rounds_half_up(self):
        """Test halves round away from zero for positive values."""
        assert round1(8.25) == 8.3
        assert round1(7.45) == 7.5
        assert round1(9.04) == 9.0


class TestParseTime:
    """Tests for parse_time fallback behavior."""

    def test_unix_timestamp(self):
        assert parse_time(0) == datetime(1970, 1, 1, tzinfo=timezone.utc)

    def test_iso_with_z_suffix(self):
        parsed = parse_time("2026-06-01T08:00:00Z")
        assert parsed == datetime(2026, 6, 1, 8, tzinfo=timezone.utc)

    def test_naive_iso_is_utc(self):
        assert parse_time("2026-06-01T08:00:00").tzinfo is not None

    @pytest.mark.parametrize("value", [None, "", "not a time"])
    def test_unparseable_becomes_now(self, value):
        """Test anything unparseable is replaced with the current time."""
        before = datetime.now(timezone.utc)
        parsed = parse_time(value)
        assert before <= parsed <= datetime.now(timezone.utc)


class TestWeatherSample:
    def test_effective_wind_prefers_gust(self, sample_factory):
        assert sample_factory(wind_speed_kph=10, wind_gust_kph=30).effective_wind_kph == 30

    def test_effective_wind_without_gust(self, sample_factory):
        assert sample_factory(wind_speed_kph=10).effective_wind_kph == 10

    def test_rain_chance_bounds(self, sample_factory):
        with pytest.raises(ValidationError):
            sample_factory(rain_chance_percent=120)
