"""
Analysis Session

Holds the loaded track, the marker configuration and the simulation
player, and memoizes derived values against explicit version counters:

- metadata  <- track_version
- markers   <- (track_version, config_version)
- status    <- (track_version, progress)

Recomputation is idempotent; the cache only saves the O(N) scans.
"""

import logging
from typing import Any, Hashable, List, Optional, Tuple

from track_insight.config import settings
from track_insight.shared.constants import MarkerKind

from .annotations import AnnotationConfig, AnnotationMarker, detect_annotations
from .simulation import SimulationPlayer, SimulationStatus, resolve_position
from .tracks import Track, TrackMetadata, compute_track_metadata

logger = logging.getLogger(__name__)


class _Memo:
    """Single-slot cache keyed by a hashable version tuple."""

    def __init__(self):
        self._key: Optional[Hashable] = None
        self._value: Any = None
        self._filled = False

    def get(self, key: Hashable, compute):
        if not self._filled or self._key != key:
            self._value = compute()
            self._key = key
            self._filled = True
        return self._value


class AnalysisSession:
    """
    One user's view of one track.

    Usage:
        session = AnalysisSession()
        session.load_track(track)
        session.update_rule(MarkerKind.STOP, enabled=True, min_duration=3)
        markers = session.markers
    """

    def __init__(
        self,
        config: Optional[AnnotationConfig] = None,
        playback_speed_kmh: Optional[float] = None,
    ):
        self._track: Optional[Track] = None
        self._config = config or AnnotationConfig()
        self._track_version = 0
        self._config_version = 0
        self.player = SimulationPlayer(
            playback_speed_kmh=playback_speed_kmh or settings.default_playback_speed_kmh
        )

        self._metadata_memo = _Memo()
        self._markers_memo = _Memo()
        self._status_memo = _Memo()

    # -------------------------------------------------------------------------
    # Inputs
    # -------------------------------------------------------------------------

    @property
    def track(self) -> Optional[Track]:
        return self._track

    @property
    def config(self) -> AnnotationConfig:
        return self._config

    @property
    def versions(self) -> Tuple[int, int]:
        return self._track_version, self._config_version

    def load_track(self, track: Optional[Track]) -> None:
        """Replace the track wholesale; playback restarts from the beginning."""
        self._track = track
        self._track_version += 1
        metadata = self.metadata
        self.player.bind(metadata.total_distance_km if metadata else 0.0)
        if track is not None:
            logger.info(f"Loaded track '{track.name}' with {len(track)} points")

    def clear_track(self) -> None:
        self.load_track(None)

    def update_rule(self, kind: MarkerKind, **changes) -> AnnotationConfig:
        """Change one rule block; invalidates cached markers."""
        self._config = self._config.with_rule(kind, **changes)
        self._config_version += 1
        return self._config

    def set_markers_visible(self, visible: bool) -> None:
        if visible == self._config.visible:
            return
        self._config = self._config.with_visibility(visible)
        self._config_version += 1

    def set_config(self, config: AnnotationConfig) -> None:
        self._config = config
        self._config_version += 1

    # -------------------------------------------------------------------------
    # Derived values
    # -------------------------------------------------------------------------

    @property
    def metadata(self) -> Optional[TrackMetadata]:
        return self._metadata_memo.get(
            self._track_version,
            lambda: compute_track_metadata(self._track),
        )

    @property
    def markers(self) -> List[AnnotationMarker]:
        return self._markers_memo.get(
            (self._track_version, self._config_version),
            lambda: detect_annotations(
                self._track,
                self._config,
                self.metadata.cumulative_distance_km if self.metadata else None,
            ),
        )

    @property
    def status(self) -> Optional[SimulationStatus]:
        progress = self.player.progress
        return self._status_memo.get(
            (self._track_version, progress),
            lambda: resolve_position(self._track, self.metadata, progress),
        )
