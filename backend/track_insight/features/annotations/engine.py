"""
Annotation Engine

Detects smart markers (time / distance / stop / speed) in one forward
pass over adjacent point pairs. Rule state lives in an explicit ScanState
accumulator threaded through the scan, so every detector is a plain
function of (state, limits, segment).
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Sequence

from track_insight.features.tracks.metadata import hours_between
from track_insight.features.tracks.models import GeoPoint, Track
from track_insight.shared.constants import (
    KM_PER_DISTANCE_UNIT,
    KMH_PER_SPEED_UNIT,
    SECONDS_PER_DURATION_UNIT,
    SECONDS_PER_TIME_UNIT,
    STOPPED_SPEED_KMH,
    DistanceUnit,
    MarkerKind,
    SpeedUnit,
    TimeUnit,
)
from track_insight.shared.formatters import format_minutes
from track_insight.shared.geo import distance_km

from .config import AnnotationConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnnotationMarker:
    """A point of interest for the map overlay."""
    lat: float
    lon: float
    kind: MarkerKind
    label: str
    detail: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert to dict for API response."""
        return {
            "lat": self.lat,
            "lon": self.lon,
            "kind": self.kind.value,
            "label": self.label,
            "detail": self.detail,
        }


@dataclass(frozen=True)
class ScanLimits:
    """Rule thresholds converted to km / seconds / km/h once per scan."""
    distance_interval_km: float
    distance_unit: DistanceUnit
    time_interval_s: float
    time_unit: TimeUnit
    stop_min_duration_s: float
    speed_limit_kmh: float
    speed_unit: SpeedUnit

    @classmethod
    def from_config(cls, config: AnnotationConfig) -> "ScanLimits":
        return cls(
            distance_interval_km=config.distance.every_value * KM_PER_DISTANCE_UNIT[config.distance.unit],
            distance_unit=config.distance.unit,
            time_interval_s=config.time.every_value * SECONDS_PER_TIME_UNIT[config.time.unit],
            time_unit=config.time.unit,
            stop_min_duration_s=config.stop.min_duration * SECONDS_PER_DURATION_UNIT[config.stop.unit],
            speed_limit_kmh=config.speed.limit * KMH_PER_SPEED_UNIT[config.speed.unit],
            speed_unit=config.speed.unit,
        )


@dataclass
class Segment:
    """One adjacent point pair with its shared distance/time figures."""
    start: GeoPoint
    end: GeoPoint
    distance_km: float
    hours: Optional[float]  # None unless both endpoints are timestamped

    @property
    def timed(self) -> bool:
        return self.hours is not None

    @property
    def speed_kmh(self) -> float:
        """Segment speed; 0 when untimed or the time delta is not positive."""
        if self.hours is None or self.hours <= 0:
            return 0.0
        return self.distance_km / self.hours


@dataclass
class ScanState:
    """Fold accumulator for a single annotation scan."""
    next_distance_km: float
    next_time_s: float
    first_time: Optional[datetime] = None
    total_km: float = 0.0
    prev_speed_kmh: float = 0.0
    stop_start_time: Optional[datetime] = None
    stop_start_point: Optional[GeoPoint] = None
    markers: List[AnnotationMarker] = field(default_factory=list)

    @classmethod
    def initial(cls, limits: ScanLimits, track: Track) -> "ScanState":
        first_time = next(
            (p.timestamp for p in track.points if p.timestamp is not None),
            None,
        )
        return cls(
            next_distance_km=limits.distance_interval_km,
            next_time_s=limits.time_interval_s,
            first_time=first_time,
        )


# =============================================================================
# Detectors
# =============================================================================

def detect_distance(state: ScanState, limits: ScanLimits, seg: Segment) -> None:
    """Emit at most one DISTANCE marker when total distance crosses the next threshold."""
    if state.total_km < state.next_distance_km:
        return

    value = state.next_distance_km / KM_PER_DISTANCE_UNIT[limits.distance_unit]
    if limits.distance_unit == DistanceUnit.METER:
        label = f"{value:.0f}{limits.distance_unit.value}"
    else:
        label = f"{value:.1f}{limits.distance_unit.value}"

    state.markers.append(AnnotationMarker(
        lat=seg.end.lat,
        lon=seg.end.lon,
        kind=MarkerKind.DISTANCE,
        label=label,
        detail=f"Total: {state.total_km:.2f}km",
    ))
    state.next_distance_km += limits.distance_interval_km


def detect_time(state: ScanState, limits: ScanLimits, seg: Segment) -> None:
    """Emit at most one TIME marker when elapsed time crosses the next threshold."""
    if not seg.timed or state.first_time is None:
        return

    elapsed_s = (seg.end.timestamp - state.first_time).total_seconds()
    if elapsed_s < state.next_time_s:
        return

    value = state.next_time_s / SECONDS_PER_TIME_UNIT[limits.time_unit]
    state.markers.append(AnnotationMarker(
        lat=seg.end.lat,
        lon=seg.end.lon,
        kind=MarkerKind.TIME,
        label=f"+{value:g} {limits.time_unit.value}",
        detail=f"Time elapsed: {format_minutes(elapsed_s, 0)} mins",
    ))
    state.next_time_s += limits.time_interval_s


def detect_speed(state: ScanState, limits: ScanLimits, seg: Segment) -> None:
    """Emit a SPEED marker on the rising edge into speeding."""
    if not seg.timed:
        return

    speed = seg.speed_kmh
    if speed <= limits.speed_limit_kmh or state.prev_speed_kmh > limits.speed_limit_kmh:
        return

    shown = speed / KMH_PER_SPEED_UNIT[limits.speed_unit]
    state.markers.append(AnnotationMarker(
        lat=seg.start.lat,
        lon=seg.start.lon,
        kind=MarkerKind.SPEED,
        label=f"! {shown:.0f}",
        detail=f"Speeding: {speed:.1f} km/h",
    ))


def _close_stop(state: ScanState, limits: ScanLimits, end_time: datetime) -> None:
    duration_s = (end_time - state.stop_start_time).total_seconds()
    if duration_s >= limits.stop_min_duration_s:
        minutes = format_minutes(duration_s)
        state.markers.append(AnnotationMarker(
            lat=state.stop_start_point.lat,
            lon=state.stop_start_point.lon,
            kind=MarkerKind.STOP,
            label=f"Stop {minutes}m",
            detail=f"Stopped for {minutes} mins",
        ))
    state.stop_start_time = None
    state.stop_start_point = None


def detect_stop(state: ScanState, limits: ScanLimits, seg: Segment) -> None:
    """Open/extend a stopped run on slow segments, close it on moving ones."""
    if not seg.timed:
        return

    if seg.speed_kmh < STOPPED_SPEED_KMH:
        if state.stop_start_time is None:
            state.stop_start_time = seg.start.timestamp
            state.stop_start_point = seg.start
    elif state.stop_start_time is not None:
        _close_stop(state, limits, seg.start.timestamp)


def flush_stop(state: ScanState, limits: ScanLimits, track: Track) -> None:
    """Close a run still open at the end of the scan against the last timestamp."""
    if state.stop_start_time is None:
        return
    last_time = track.points[-1].timestamp
    if last_time is None:
        return
    _close_stop(state, limits, last_time)


# =============================================================================
# Scan
# =============================================================================

def detect_annotations(
    track: Optional[Track],
    config: AnnotationConfig,
    cumulative: Optional[Sequence[float]] = None,
) -> List[AnnotationMarker]:
    """
    Compute smart markers for a track.

    Args:
        track: Track to scan (None means nothing is loaded)
        config: Rule configuration and visibility flag
        cumulative: Cumulative distance index from compute_track_metadata;
            segment distances are recomputed when omitted

    Returns:
        Markers in scan order; empty when hidden, no track, or no rule enabled

    Raises:
        ValueError: If cumulative does not have one entry per point
    """
    if track is None or not config.visible or not config.any_enabled:
        return []

    points = track.points
    if cumulative is not None and len(cumulative) != len(points):
        raise ValueError(
            f"Cumulative index has {len(cumulative)} entries for {len(points)} points"
        )

    limits = ScanLimits.from_config(config)
    state = ScanState.initial(limits, track)

    for i in range(len(points) - 1):
        p1, p2 = points[i], points[i + 1]
        if cumulative is not None:
            step_km = cumulative[i + 1] - cumulative[i]
        else:
            step_km = distance_km(p1, p2)
        seg = Segment(
            start=p1,
            end=p2,
            distance_km=step_km,
            hours=hours_between(p1, p2),
        )
        if cumulative is not None:
            state.total_km = cumulative[i + 1]
        else:
            state.total_km += seg.distance_km

        if config.distance.enabled:
            detect_distance(state, limits, seg)
        if config.time.enabled:
            detect_time(state, limits, seg)
        if config.speed.enabled:
            detect_speed(state, limits, seg)
        if config.stop.enabled:
            detect_stop(state, limits, seg)

        state.prev_speed_kmh = seg.speed_kmh

    if config.stop.enabled:
        flush_stop(state, limits, track)

    logger.debug(f"Track '{track.name}': {len(state.markers)} smart markers")
    return state.markers
