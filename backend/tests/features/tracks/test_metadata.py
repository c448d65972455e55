"""
Tests for the track metadata aggregator.
"""

from datetime import datetime, timedelta, timezone

import pytest

from track_insight.features.tracks import GeoPoint, Track, compute_track_metadata, hours_between
from track_insight.shared.geo import distance_km


# =============================================================================
# Test Data
# =============================================================================

T0 = datetime(2024, 1, 5, 9, 0, tzinfo=timezone.utc)

# 0.009 degrees of latitude ~ 1.0008 km
STEP_DEG = 0.009


def point(steps: float, minutes=None, elevation=None) -> GeoPoint:
    """Point `steps` lat steps north of the origin, `minutes` after T0."""
    return GeoPoint(
        lat=steps * STEP_DEG,
        lon=0.0,
        elevation=elevation,
        timestamp=T0 + timedelta(minutes=minutes) if minutes is not None else None,
    )


def track(*points: GeoPoint) -> Track:
    return Track.from_points("test", points)


# =============================================================================
# Tests
# =============================================================================

class TestEmptyAndTiny:
    """Degenerate inputs."""

    def test_none_track(self):
        assert compute_track_metadata(None) is None

    def test_empty_track(self):
        assert compute_track_metadata(track()) is None

    def test_single_point(self):
        meta = compute_track_metadata(track(point(0, 0, 100)))
        assert meta.cumulative_distance_km == (0.0,)
        assert meta.total_distance_km == 0.0
        assert meta.max_speed_kmh == 0.0
        assert meta.avg_speed_kmh == 0.0
        assert meta.total_elapsed == "0s"


class TestCumulativeDistance:
    """Cumulative distance index."""

    def test_starts_at_zero_and_is_non_decreasing(self):
        t = track(point(0), point(1), point(1), point(3), point(2))
        cumulative = compute_track_metadata(t).cumulative_distance_km
        assert len(cumulative) == len(t)
        assert cumulative[0] == 0.0
        assert all(b >= a for a, b in zip(cumulative, cumulative[1:]))

    def test_last_value_is_sum_of_segments(self):
        t = track(point(0), point(1), point(0.5), point(4))
        meta = compute_track_metadata(t)
        expected = sum(distance_km(a, b) for a, b in zip(t.points, t.points[1:]))
        assert meta.cumulative_distance_km[-1] == pytest.approx(expected, rel=1e-12)
        assert meta.total_distance_km == meta.cumulative_distance_km[-1]


class TestElevation:
    """Elevation statistics."""

    def test_min_max_ignore_missing(self):
        t = track(point(0, elevation=120), point(1), point(2, elevation=80), point(3, elevation=150))
        meta = compute_track_metadata(t)
        assert meta.has_elevation is True
        assert meta.min_elevation == 80
        assert meta.max_elevation == 150

    def test_all_zero_is_not_elevation(self):
        t = track(point(0, elevation=0), point(1, elevation=0))
        meta = compute_track_metadata(t)
        assert meta.has_elevation is False
        assert meta.min_elevation == 0
        assert meta.max_elevation == 0

    def test_no_elevation_defaults_to_zero(self):
        meta = compute_track_metadata(track(point(0), point(1)))
        assert meta.has_elevation is False
        assert (meta.min_elevation, meta.max_elevation) == (0.0, 0.0)


class TestSpeedAndTime:
    """Speed and elapsed-time statistics."""

    def test_max_and_avg_speed(self):
        # 1 step/min (~60 km/h) then 2 steps/min (~120 km/h)
        t = track(point(0, 0), point(1, 1), point(3, 2))
        meta = compute_track_metadata(t)
        assert meta.has_time is True
        assert meta.max_speed_kmh == pytest.approx(distance_km(t.points[1], t.points[2]) * 60)
        assert meta.avg_speed_kmh == pytest.approx(meta.total_distance_km / (2 / 60))

    def test_glitch_speed_rejected(self):
        """A jump of ~100 km in one minute (~6000 km/h) never counts."""
        t = track(point(0, 0), point(1, 1), point(100, 2))
        meta = compute_track_metadata(t)
        assert meta.max_speed_kmh == pytest.approx(distance_km(t.points[0], t.points[1]) * 60)

    def test_non_positive_time_delta_skipped(self):
        t = track(point(0, 0), point(1, 0), point(2, 1))
        meta = compute_track_metadata(t)
        assert meta.max_speed_kmh == pytest.approx(distance_km(t.points[1], t.points[2]) * 60)

    def test_no_timestamps(self):
        meta = compute_track_metadata(track(point(0), point(1), point(2)))
        assert meta.has_time is False
        assert meta.max_speed_kmh == 0.0
        assert meta.avg_speed_kmh == 0.0
        assert meta.total_elapsed == "N/A"
        assert meta.total_elapsed_seconds is None
        assert meta.start_date_label == ""

    def test_missing_end_timestamp_is_not_available(self):
        meta = compute_track_metadata(track(point(0, 0), point(1, 1), point(2)))
        assert meta.has_time is True
        assert meta.total_elapsed == "N/A"
        assert meta.avg_speed_kmh == 0.0

    def test_elapsed_label_and_start_date(self):
        meta = compute_track_metadata(track(point(0, 0), point(1, 125)))
        assert meta.total_elapsed == "2h 5m"
        assert meta.total_elapsed_seconds == 125 * 60
        assert meta.start_date_label == "Friday, Jan 5, 2024"

    def test_out_of_order_timestamps_flagged(self):
        t = track(point(0, 0), point(1, 5), point(2, 3))
        meta = compute_track_metadata(t)
        assert t.time_regressions() == [2]
        assert meta.time_ordered is False

    def test_hours_between(self):
        assert hours_between(point(0, 0), point(1, 30)) == pytest.approx(0.5)
        assert hours_between(point(0), point(1, 30)) is None


class TestIdempotence:
    """Aggregator is a pure function of the track."""

    def test_same_output_twice(self):
        t = track(point(0, 0, 10), point(1, 1, 20), point(3, 2, 5))
        assert compute_track_metadata(t) == compute_track_metadata(t)
