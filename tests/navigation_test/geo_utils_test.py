"""Geodesy primitives against fixed reference values."""
from __future__ import annotations

import pytest

from ar_navigation.geo_utils import (
    distance_meters,
    format_distance,
    initial_bearing_degrees,
    normalize_bearing,
    normalize_relative_angle,
)
from ar_navigation.models import GeoPoint


class TestDistance:
    def test_identical_points_are_zero(self):
        p = GeoPoint(27.70, 85.30)
        assert distance_meters(p, p) == 0.0

    def test_one_degree_latitude_at_equator(self):
        d = distance_meters(GeoPoint(0.0, 0.0), GeoPoint(1.0, 0.0))
        # Spherical earth: R * pi / 180
        assert d == pytest.approx(111_194.9, abs=1.0)
        assert d == pytest.approx(111_320, rel=2e-3)

    def test_symmetric(self):
        a, b = GeoPoint(27.70, 85.30), GeoPoint(27.71, 85.33)
        assert distance_meters(a, b) == pytest.approx(distance_meters(b, a))

    def test_short_distance_at_kathmandu(self):
        d = distance_meters(GeoPoint(27.7000, 85.3000), GeoPoint(27.7001, 85.3001))
        assert 14.0 < d < 15.5


class TestBearing:
    @pytest.mark.parametrize(
        "target, expected",
        [
            (GeoPoint(1.0, 0.0), 0.0),
            (GeoPoint(0.0, 1.0), 90.0),
            (GeoPoint(-1.0, 0.0), 180.0),
            (GeoPoint(0.0, -1.0), 270.0),
        ],
    )
    def test_cardinal_directions(self, target, expected):
        assert initial_bearing_degrees(GeoPoint(0.0, 0.0), target) == pytest.approx(expected)

    def test_identical_points_give_zero(self):
        p = GeoPoint(27.70, 85.30)
        assert initial_bearing_degrees(p, p) == 0.0

    def test_result_is_in_range(self):
        b = initial_bearing_degrees(GeoPoint(10.0, 10.0), GeoPoint(9.0, 9.999))
        assert 0.0 <= b < 360.0


class TestNormalisation:
    @pytest.mark.parametrize(
        "raw, expected",
        [(0, 0), (360, 0), (-90, 270), (725, 5), (-1e-17, 0.0)],
    )
    def test_bearing(self, raw, expected):
        assert normalize_bearing(raw) == pytest.approx(expected)

    @pytest.mark.parametrize(
        "raw, expected",
        [(0, 0), (180, 180), (-180, 180), (190, -170), (-190, 170), (540, 180), (359, -1), (-721, -1)],
    )
    def test_relative_angle(self, raw, expected):
        assert normalize_relative_angle(raw) == pytest.approx(expected)


class TestFormatDistance:
    def test_metres_below_one_kilometre(self):
        assert format_distance(254.4) == "In 254 meters"

    def test_kilometres_above(self):
        assert format_distance(1530.0) == "In 1.5 km"
