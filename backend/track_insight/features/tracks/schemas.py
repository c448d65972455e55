"""
Track-related schemas.

Pydantic models for track analysis responses.
"""

from pydantic import BaseModel
from typing import List, Optional, Tuple

from track_insight.features.annotations.schemas import MarkerSchema


class TrackInfo(BaseModel):
    """Loaded track summary."""

    name: str
    points_count: int = 0
    bounds: Tuple[Tuple[float, float], Tuple[float, float]]
    distance_km: float = 0.0


class TrackMetadataSchema(BaseModel):
    """Derived statistics."""

    has_elevation: bool
    has_time: bool
    min_elevation_m: float
    max_elevation_m: float
    max_speed_kmh: float
    avg_speed_kmh: float
    total_elapsed: str
    total_elapsed_seconds: Optional[float] = None
    total_distance_km: float
    start_date_label: str = ""
    time_ordered: bool = True


class SimulationStatusSchema(BaseModel):
    """Simulated position for a progress fraction."""

    lat: float
    lon: float
    bearing_degrees: float
    timestamp: Optional[str] = None
    last_passed_index: int
    progress: float
    distance_km: float


class TrackAnalysisResponse(BaseModel):
    """Response for track analysis."""

    success: bool
    track: TrackInfo
    metadata: Optional[TrackMetadataSchema] = None
    markers: List[MarkerSchema] = []
    simulation: Optional[SimulationStatusSchema] = None
