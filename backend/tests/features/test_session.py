"""
Tests for AnalysisSession (version-keyed memoization and commands).
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest

from track_insight.features import session as session_module
from track_insight.features.session import AnalysisSession
from track_insight.features.tracks import GeoPoint, Track
from track_insight.shared.constants import MarkerKind


T0 = datetime(2024, 1, 5, 9, 0, tzinfo=timezone.utc)


def make_track(name="t", steps=4) -> Track:
    return Track.from_points(name, [
        GeoPoint(lat=i * 0.009, lon=0.0, timestamp=T0 + timedelta(minutes=i))
        for i in range(steps)
    ])


@pytest.fixture
def session():
    s = AnalysisSession()
    s.load_track(make_track())
    return s


class TestDerivedValues:
    """Outputs of a loaded session."""

    def test_empty_session(self):
        s = AnalysisSession()
        assert s.metadata is None
        assert s.markers == []
        assert s.status is None

    def test_metadata_and_status(self, session):
        assert session.metadata.total_distance_km > 0
        assert session.status.last_passed_index == 0
        assert session.markers == []  # all rules disabled by default

    def test_enabling_a_rule_produces_markers(self, session):
        session.update_rule(MarkerKind.DISTANCE, enabled=True, every_value=1)
        assert [m.label for m in session.markers] == ["1.0km", "2.0km", "3.0km"]

    def test_visibility_hides_markers(self, session):
        session.update_rule(MarkerKind.DISTANCE, enabled=True)
        session.set_markers_visible(False)
        assert session.markers == []
        session.set_markers_visible(True)
        assert len(session.markers) == 3

    def test_status_follows_progress(self, session):
        session.player.set_progress(1.0)
        assert session.status.last_passed_index == 3


class TestMemoization:
    """Recompute only when versions change."""

    def test_metadata_computed_once_per_track(self, session):
        with patch.object(session_module, "compute_track_metadata", wraps=session_module.compute_track_metadata) as spy:
            session.load_track(make_track("other"))
            first = session.metadata
            second = session.metadata
        assert first is second
        assert spy.call_count == 1

    def test_markers_cached_until_config_changes(self, session):
        session.update_rule(MarkerKind.DISTANCE, enabled=True)
        with patch.object(session_module, "detect_annotations", wraps=session_module.detect_annotations) as spy:
            a = session.markers
            b = session.markers
            assert spy.call_count == 1
            session.update_rule(MarkerKind.SPEED, enabled=True)
            session.markers
            assert spy.call_count == 2
        assert a is b

    def test_markers_reuse_cached_cumulative_index(self, session):
        session.update_rule(MarkerKind.DISTANCE, enabled=True)
        with patch.object(session_module, "detect_annotations", wraps=session_module.detect_annotations) as spy:
            session.markers
        assert spy.call_args.args[2] is session.metadata.cumulative_distance_km

    def test_new_track_invalidates_markers(self, session):
        session.update_rule(MarkerKind.DISTANCE, enabled=True)
        assert len(session.markers) == 3
        session.load_track(make_track(steps=2))
        assert len(session.markers) == 1

    def test_versions_bump(self, session):
        track_v, config_v = session.versions
        session.update_rule(MarkerKind.STOP, enabled=True)
        session.load_track(make_track())
        assert session.versions == (track_v + 1, config_v + 1)

    def test_same_visibility_does_not_invalidate(self, session):
        before = session.versions
        session.set_markers_visible(True)
        assert session.versions == before


class TestCommands:
    """Session commands."""

    def test_load_resets_playback(self, session):
        session.player.start()
        session.player.tick(10)
        session.load_track(make_track("next"))
        assert session.player.progress == 0.0
        assert not session.player.playing

    def test_clear_track(self, session):
        session.clear_track()
        assert session.track is None
        assert session.status is None
        assert session.player.start() is False

    def test_invalid_rule_update(self, session):
        with pytest.raises(ValueError):
            session.update_rule(MarkerKind.SPEED, limit=-5)
