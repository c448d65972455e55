"""
Simulation Player

Progress-driven journey playback. The player owns only
{progress, playing, playback_speed_kmh}; positions are resolved from
progress against the track's cumulative-distance index.

Two pure functions carry the math:
- advance_progress(): tick contract (wall-clock delta -> new progress)
- resolve_position(): progress -> interpolated position/bearing/time
"""

import bisect
import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple

from track_insight.features.tracks.metadata import TrackMetadata
from track_insight.features.tracks.models import Track
from track_insight.shared.constants import SECONDS_PER_HOUR
from track_insight.shared.geo import initial_bearing_degrees

logger = logging.getLogger(__name__)

DEFAULT_PLAYBACK_SPEED_KMH = 100.0


class PlaybackState(str, Enum):
    """Player state."""
    IDLE = "idle"
    PLAYING = "playing"


@dataclass(frozen=True)
class SimulatedPosition:
    lat: float
    lon: float
    bearing_degrees: float


@dataclass(frozen=True)
class SimulationStatus:
    """Where the simulated traveller is for a given progress."""
    position: SimulatedPosition
    timestamp: Optional[datetime]
    last_passed_index: int
    progress: float
    distance_km: float

    def to_dict(self) -> dict:
        """Convert to dict for API response."""
        return {
            "lat": self.position.lat,
            "lon": self.position.lon,
            "bearing_degrees": round(self.position.bearing_degrees, 2),
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
            "last_passed_index": self.last_passed_index,
            "progress": self.progress,
            "distance_km": round(self.distance_km, 3),
        }


def advance_progress(
    progress: float,
    dt_seconds: float,
    speed_kmh: float,
    total_distance_km: float,
) -> Optional[Tuple[float, bool]]:
    """
    Advance progress by dt seconds of travel at speed_kmh.

    Args:
        progress: Current progress fraction in [0, 1]
        dt_seconds: Wall-clock seconds since the previous tick
        speed_kmh: Simulated travel speed
        total_distance_km: Track length

    Returns:
        (new_progress, finished), or None when there is nothing to travel
    """
    if total_distance_km <= 0:
        return None

    moved_km = (speed_kmh / SECONDS_PER_HOUR) * max(0.0, dt_seconds)
    new_distance_km = progress * total_distance_km + moved_km

    if new_distance_km >= total_distance_km:
        return 1.0, True
    return new_distance_km / total_distance_km, False


def _segment_index(cumulative: Tuple[float, ...], target_km: float) -> int:
    """
    First i with cumulative[i] <= target <= cumulative[i + 1].

    The array is non-decreasing, so bisect gives the same answer as a
    linear scan from 0.
    """
    j = bisect.bisect_left(cumulative, target_km)
    return max(0, min(j - 1, len(cumulative) - 2))


def resolve_position(
    track: Optional[Track],
    metadata: Optional[TrackMetadata],
    progress: float,
) -> Optional[SimulationStatus]:
    """
    Resolve a progress fraction to a position along the track.

    Bearing comes from the segment endpoints, so it is constant within a
    segment and may jump at segment boundaries.

    Returns:
        SimulationStatus, or None when no track is loaded
    """
    if track is None or metadata is None or track.is_empty:
        return None

    points = track.points
    cumulative = metadata.cumulative_distance_km
    total = metadata.total_distance_km
    progress = min(1.0, max(0.0, progress))
    target_km = progress * total

    if len(points) == 1 or progress >= 1.0:
        last = points[-1]
        return SimulationStatus(
            position=SimulatedPosition(lat=last.lat, lon=last.lon, bearing_degrees=0.0),
            timestamp=last.timestamp,
            last_passed_index=len(points) - 1,
            progress=progress,
            distance_km=total,
        )

    i = _segment_index(cumulative, target_km)
    p1, p2 = points[i], points[i + 1]

    segment_km = cumulative[i + 1] - cumulative[i]
    fraction = (target_km - cumulative[i]) / segment_km if segment_km > 0 else 0.0

    timestamp = None
    if p1.timestamp is not None and p2.timestamp is not None:
        timestamp = p1.timestamp + (p2.timestamp - p1.timestamp) * fraction

    return SimulationStatus(
        position=SimulatedPosition(
            lat=p1.lat + (p2.lat - p1.lat) * fraction,
            lon=p1.lon + (p2.lon - p1.lon) * fraction,
            bearing_degrees=initial_bearing_degrees(p1, p2),
        ),
        timestamp=timestamp,
        last_passed_index=i,
        progress=progress,
        distance_km=target_km,
    )


class SimulationPlayer:
    """
    Playback state machine.

    idle <-> playing; playing -> idle automatically when progress reaches 1.
    Any cancelling command (pause, reset, set_progress) bumps `generation`
    so ticks scheduled before it become no-ops.

    Usage:
        player = SimulationPlayer(total_distance_km=12.5)
        player.start()
        player.tick(1 / 60)
    """

    def __init__(
        self,
        total_distance_km: float = 0.0,
        playback_speed_kmh: float = DEFAULT_PLAYBACK_SPEED_KMH,
    ):
        self._total_distance_km = max(0.0, total_distance_km)
        self._progress = 0.0
        self._playing = False
        self._generation = 0
        self._playback_speed_kmh = DEFAULT_PLAYBACK_SPEED_KMH
        self.set_playback_speed(playback_speed_kmh)

    # -------------------------------------------------------------------------
    # Read-only state
    # -------------------------------------------------------------------------

    @property
    def progress(self) -> float:
        return self._progress

    @property
    def playing(self) -> bool:
        return self._playing

    @property
    def state(self) -> PlaybackState:
        return PlaybackState.PLAYING if self._playing else PlaybackState.IDLE

    @property
    def playback_speed_kmh(self) -> float:
        return self._playback_speed_kmh

    @property
    def total_distance_km(self) -> float:
        return self._total_distance_km

    @property
    def generation(self) -> int:
        return self._generation

    # -------------------------------------------------------------------------
    # Commands
    # -------------------------------------------------------------------------

    def bind(self, total_distance_km: float) -> None:
        """Attach to a (new) track length; playback restarts from idle at 0."""
        self._total_distance_km = max(0.0, total_distance_km)
        self.reset()

    def start(self) -> bool:
        """
        Start playing.

        Returns:
            True if the player transitioned to playing
        """
        if self._playing or self._total_distance_km <= 0:
            return False
        self._playing = True
        logger.debug(f"Playback started at progress {self._progress:.3f}")
        return True

    def pause(self) -> None:
        self._cancel()

    def reset(self) -> None:
        self._cancel()
        self._progress = 0.0

    def set_progress(self, fraction: float) -> None:
        """Manual scrub: clamps to [0, 1] and pauses."""
        self._cancel()
        self._progress = min(1.0, max(0.0, float(fraction)))

    def set_playback_speed(self, speed_kmh: float) -> None:
        if speed_kmh <= 0:
            raise ValueError(f"Playback speed must be positive, got {speed_kmh}")
        self._playback_speed_kmh = float(speed_kmh)

    def tick(self, dt_seconds: float, generation: Optional[int] = None) -> Optional[float]:
        """
        Apply one frame of playback.

        Args:
            dt_seconds: Wall-clock seconds since the previous tick
            generation: Generation the tick was scheduled under, if known

        Returns:
            New progress, or None if the tick was ignored
        """
        if not self._playing:
            return None
        if generation is not None and generation != self._generation:
            return None

        advanced = advance_progress(
            self._progress, dt_seconds, self._playback_speed_kmh, self._total_distance_km
        )
        if advanced is None:
            return None

        self._progress, finished = advanced
        if finished:
            self._playing = False
            logger.debug("Playback reached the end of the track")
        return self._progress

    def _cancel(self) -> None:
        self._playing = False
        self._generation += 1
