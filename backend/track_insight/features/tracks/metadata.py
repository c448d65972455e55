"""
Track Metadata Aggregator

Single forward pass over a track producing summary statistics and the
cumulative-distance index used by the annotation engine and the
simulation player.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from track_insight.shared.constants import MAX_PLAUSIBLE_SPEED_KMH, SECONDS_PER_HOUR
from track_insight.shared.formatters import format_elapsed, format_date_label
from track_insight.shared.geo import distance_km

from .models import GeoPoint, Track

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrackMetadata:
    """Derived statistics. Pure function of a Track, never mutated."""
    has_elevation: bool
    has_time: bool
    min_elevation: float
    max_elevation: float
    max_speed_kmh: float
    avg_speed_kmh: float
    total_elapsed: str                        # 'Xh Ym' / 'Ym Zs' / 'Zs' / 'N/A'
    total_elapsed_seconds: Optional[float]
    cumulative_distance_km: Tuple[float, ...]
    total_distance_km: float
    start_date_label: str
    time_ordered: bool = True

    def to_dict(self) -> dict:
        """Convert to dict for API response."""
        return {
            "has_elevation": self.has_elevation,
            "has_time": self.has_time,
            "min_elevation_m": round(self.min_elevation, 1),
            "max_elevation_m": round(self.max_elevation, 1),
            "max_speed_kmh": round(self.max_speed_kmh, 1),
            "avg_speed_kmh": round(self.avg_speed_kmh, 1),
            "total_elapsed": self.total_elapsed,
            "total_elapsed_seconds": self.total_elapsed_seconds,
            "total_distance_km": round(self.total_distance_km, 3),
            "start_date_label": self.start_date_label,
            "time_ordered": self.time_ordered,
        }


def hours_between(a: GeoPoint, b: GeoPoint) -> Optional[float]:
    """
    Time from a to b in hours.

    Returns:
        None if either point has no timestamp (may be zero or negative)
    """
    if a.timestamp is None or b.timestamp is None:
        return None
    return (b.timestamp - a.timestamp).total_seconds() / SECONDS_PER_HOUR


def compute_track_metadata(track: Optional[Track]) -> Optional[TrackMetadata]:
    """
    Aggregate statistics for a track in one pass.

    Args:
        track: Track to analyze

    Returns:
        TrackMetadata, or None for a missing or empty track
    """
    if track is None or track.is_empty:
        return None

    points = track.points

    has_elevation = any(p.elevation is not None and p.elevation != 0 for p in points)
    has_time = any(p.timestamp is not None for p in points)

    min_ele = float("inf")
    max_ele = float("-inf")
    max_speed = 0.0
    rejected = 0

    cumulative = [0.0]
    current = 0.0

    for i, p in enumerate(points):
        if p.elevation is not None:
            min_ele = min(min_ele, p.elevation)
            max_ele = max(max_ele, p.elevation)

        if i == 0:
            continue

        prev = points[i - 1]
        step_km = distance_km(prev, p)
        current += step_km
        cumulative.append(current)

        hours = hours_between(prev, p)
        if hours is None or hours <= 0:
            continue

        speed = step_km / hours
        if speed >= MAX_PLAUSIBLE_SPEED_KMH:
            rejected += 1
            continue
        max_speed = max(max_speed, speed)

    if rejected:
        logger.debug(f"Track '{track.name}': ignored {rejected} implausible speed samples")

    if min_ele == float("inf"):
        min_ele = 0.0
    if max_ele == float("-inf"):
        max_ele = 0.0

    start, end = points[0].timestamp, points[-1].timestamp
    elapsed_seconds = None
    if start is not None and end is not None:
        elapsed_seconds = max(0.0, (end - start).total_seconds())

    avg_speed = 0.0
    if elapsed_seconds and current > 0:
        avg_speed = current / (elapsed_seconds / SECONDS_PER_HOUR)

    regressions = track.time_regressions()
    if regressions:
        logger.warning(
            f"Track '{track.name}' has {len(regressions)} out-of-order timestamps "
            f"(first at point {regressions[0]}); time statistics may be wrong"
        )

    return TrackMetadata(
        has_elevation=has_elevation,
        has_time=has_time,
        min_elevation=min_ele,
        max_elevation=max_ele,
        max_speed_kmh=max_speed,
        avg_speed_kmh=avg_speed,
        total_elapsed=format_elapsed(elapsed_seconds),
        total_elapsed_seconds=elapsed_seconds,
        cumulative_distance_km=tuple(cumulative),
        total_distance_km=current,
        start_date_label=format_date_label(start),
        time_ordered=not regressions,
    )
