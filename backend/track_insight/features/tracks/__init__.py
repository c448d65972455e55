"""
Track handling module.

Usage:
    from track_insight.features.tracks import Track, GeoPoint, TrackLoader
    from track_insight.features.tracks import compute_track_metadata

Components:
- GeoPoint, Track: immutable domain models
- TrackLoader: parse GPX/CSV content into a Track
- compute_track_metadata: single-pass statistics and cumulative distances
"""

from .models import GeoPoint, Track
from .metadata import TrackMetadata, compute_track_metadata, hours_between
from .loaders import TrackLoader

__all__ = [
    # Models
    "GeoPoint",
    "Track",
    # Metadata
    "TrackMetadata",
    "compute_track_metadata",
    "hours_between",
    # Loaders
    "TrackLoader",
]
