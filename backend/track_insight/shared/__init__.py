"""
Shared utilities (NOT business logic).

Usage:
    from track_insight.shared import haversine, distance_km
    from track_insight.shared.formatters import format_elapsed
"""
from .geo import (
    haversine,
    initial_bearing,
    distance_km,
    initial_bearing_degrees,
    calculate_total_distance,
    calculate_bounds,
    Bounds,
    EMPTY_BOUNDS,
    EARTH_RADIUS_KM,
)
from .formatters import (
    format_elapsed,
    format_date_label,
    format_minutes,
)
from .constants import (
    MarkerKind,
    TimeUnit,
    DistanceUnit,
    DurationUnit,
    SpeedUnit,
    MAX_PLAUSIBLE_SPEED_KMH,
    STOPPED_SPEED_KMH,
)

__all__ = [
    # geo
    "haversine",
    "initial_bearing",
    "distance_km",
    "initial_bearing_degrees",
    "calculate_total_distance",
    "calculate_bounds",
    "Bounds",
    "EMPTY_BOUNDS",
    "EARTH_RADIUS_KM",
    # formatters
    "format_elapsed",
    "format_date_label",
    "format_minutes",
    # constants
    "MarkerKind",
    "TimeUnit",
    "DistanceUnit",
    "DurationUnit",
    "SpeedUnit",
    "MAX_PLAUSIBLE_SPEED_KMH",
    "STOPPED_SPEED_KMH",
]
