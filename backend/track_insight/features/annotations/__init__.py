"""
Smart marker module.

Usage:
    from track_insight.features.annotations import AnnotationConfig, detect_annotations

Components:
- AnnotationConfig: rule blocks (time, distance, stop, speed) + visibility
- detect_annotations: single-pass marker detection
- AnnotationMarker: one emitted marker
"""

from .config import AnnotationConfig, TimeRule, DistanceRule, StopRule, SpeedRule
from .engine import AnnotationMarker, ScanLimits, ScanState, detect_annotations

__all__ = [
    # Config
    "AnnotationConfig",
    "TimeRule",
    "DistanceRule",
    "StopRule",
    "SpeedRule",
    # Engine
    "AnnotationMarker",
    "ScanLimits",
    "ScanState",
    "detect_annotations",
]
