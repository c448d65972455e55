"""
Track domain models.

Plain frozen dataclasses: a track is parsed once and replaced wholesale
when a new source is loaded, never patched in place.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Optional, Tuple

from track_insight.shared.geo import (
    Bounds,
    EMPTY_BOUNDS,
    calculate_bounds,
    calculate_total_distance,
)


@dataclass(frozen=True)
class GeoPoint:
    """One position sample."""
    lat: float
    lon: float
    elevation: Optional[float] = None   # meters
    timestamp: Optional[datetime] = None


@dataclass(frozen=True)
class Track:
    """
    An ordered, time-sequenced polyline representing one recorded journey.

    Point order is recording order. Timestamps are assumed non-decreasing;
    use time_regressions() to check. Multi-part sources are flattened by
    the loaders, so the jump between two parts is an ordinary segment.
    """
    name: str
    points: Tuple[GeoPoint, ...] = ()
    bounds: Bounds = EMPTY_BOUNDS
    total_distance_km: Optional[float] = None

    @classmethod
    def from_points(cls, name: str, points: Iterable[GeoPoint]) -> "Track":
        """Build a track, computing bounds and total distance."""
        pts = tuple(points)
        return cls(
            name=name,
            points=pts,
            bounds=calculate_bounds(pts),
            total_distance_km=calculate_total_distance(pts),
        )

    @property
    def is_empty(self) -> bool:
        return not self.points

    def __len__(self) -> int:
        return len(self.points)

    def time_regressions(self) -> List[int]:
        """
        Indices i where points[i] is timestamped earlier than the last
        timestamped point before it.
        """
        result = []
        last_time = None
        for i, p in enumerate(self.points):
            if p.timestamp is None:
                continue
            if last_time is not None and p.timestamp < last_time:
                result.append(i)
            last_time = p.timestamp
        return result
