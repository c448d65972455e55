"""
Unified constants for markers, units and detection thresholds.

This module provides a single source of truth for unit naming and
conversion factors across the entire application.
"""

from enum import Enum


class MarkerKind(str, Enum):
    """Type of smart marker emitted by the annotation engine."""
    TIME = "TIME"
    DISTANCE = "DISTANCE"
    STOP = "STOP"
    SPEED = "SPEED"


class TimeUnit(str, Enum):
    """Unit for the time-interval rule."""
    MINUTE = "min"
    HOUR = "hr"


class DistanceUnit(str, Enum):
    """Unit for the distance-interval rule."""
    KM = "km"
    MILE = "mi"
    METER = "m"


class DurationUnit(str, Enum):
    """Unit for the minimum stop duration."""
    MINUTE = "min"
    SECOND = "sec"


class SpeedUnit(str, Enum):
    """Unit for the speed limit."""
    KMH = "kmh"
    MPH = "mph"


# =============================================================================
# Conversion factors (all linear)
# =============================================================================

KM_PER_MILE = 1.60934
METERS_PER_KM = 1000.0
MINUTES_PER_HOUR = 60.0
SECONDS_PER_MINUTE = 60.0
SECONDS_PER_HOUR = 3600.0

# km per one unit of the distance rule
KM_PER_DISTANCE_UNIT: dict[DistanceUnit, float] = {
    DistanceUnit.KM: 1.0,
    DistanceUnit.MILE: KM_PER_MILE,
    DistanceUnit.METER: 1.0 / METERS_PER_KM,
}

# seconds per one unit of the time rule
SECONDS_PER_TIME_UNIT: dict[TimeUnit, float] = {
    TimeUnit.MINUTE: SECONDS_PER_MINUTE,
    TimeUnit.HOUR: MINUTES_PER_HOUR * SECONDS_PER_MINUTE,
}

# seconds per one unit of the stop rule
SECONDS_PER_DURATION_UNIT: dict[DurationUnit, float] = {
    DurationUnit.MINUTE: SECONDS_PER_MINUTE,
    DurationUnit.SECOND: 1.0,
}

# km/h per one unit of the speed rule
KMH_PER_SPEED_UNIT: dict[SpeedUnit, float] = {
    SpeedUnit.KMH: 1.0,
    SpeedUnit.MPH: KM_PER_MILE,
}


# =============================================================================
# Detection thresholds
# =============================================================================

# Segment speeds at or above this are GPS/clock glitches (never max speed)
MAX_PLAUSIBLE_SPEED_KMH = 1200.0

# Below this a segment counts as "stopped"
STOPPED_SPEED_KMH = 1.0
