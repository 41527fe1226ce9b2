from __future__ import annotations

import math

import numpy as np

from brewstop.directory.distance import (
    EARTH_RADIUS_MILES,
    UNKNOWN_DISTANCE_LABEL,
    format_distance,
    haversine_distance,
)

NYC = (40.7128, -74.0060)
OAKWOOD = (40.758, -73.9855)
LONDON = (51.5074, -0.1278)


# ── Haversine ────────────────────────────────────────────────────────────


class TestHaversine:
    def test_same_point_is_zero(self):
        assert haversine_distance(*NYC, *NYC) == 0.0
        assert haversine_distance(*LONDON, *LONDON) == 0.0

    def test_symmetric(self):
        for a, b in [(NYC, OAKWOOD), (NYC, LONDON), (OAKWOOD, LONDON)]:
            assert haversine_distance(*a, *b) == haversine_distance(*b, *a)

    def test_oakwood_from_nyc(self):
        d = haversine_distance(*NYC, *OAKWOOD)
        assert 5.1 < d < 5.4

    def test_radius_is_configurable(self):
        d = haversine_distance(*NYC, *OAKWOOD, radius=EARTH_RADIUS_MILES)
        assert 3.2 < d < 3.4

    def test_scalar_input_returns_float(self):
        assert isinstance(haversine_distance(*NYC, *OAKWOOD), float)

    def test_vectorised_matches_scalar(self):
        lats = np.array([OAKWOOD[0], LONDON[0]])
        lons = np.array([OAKWOOD[1], LONDON[1]])
        result = haversine_distance(NYC[0], NYC[1], lats, lons)
        assert result.shape == (2,)
        assert math.isclose(result[0], haversine_distance(*NYC, *OAKWOOD))
        assert math.isclose(result[1], haversine_distance(*NYC, *LONDON))

    def test_nan_propagates(self):
        assert math.isnan(haversine_distance(float("nan"), -74.0, *NYC))
        assert math.isnan(haversine_distance(*NYC, 40.0, float("nan")))


# ── Formatting ───────────────────────────────────────────────────────────


class TestFormatDistance:
    def test_under_a_tenth(self):
        assert format_distance(0.0) == "<0.1 mi"
        assert format_distance(0.099) == "<0.1 mi"

    def test_one_decimal(self):
        assert format_distance(0.1) == "0.1 mi"
        assert format_distance(1.24) == "1.2 mi"
        assert format_distance(12.0) == "12.0 mi"

    def test_non_finite_uses_fallback(self):
        assert format_distance(float("nan")) == UNKNOWN_DISTANCE_LABEL
        assert format_distance(float("inf")) == UNKNOWN_DISTANCE_LABEL
        assert format_distance(None) == UNKNOWN_DISTANCE_LABEL
