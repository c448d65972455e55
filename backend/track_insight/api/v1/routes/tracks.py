"""
Track Routes

Endpoint for uploading a track and getting statistics, smart markers and
a simulated position in one call.
"""

import logging
from typing import Optional

from fastapi import APIRouter, UploadFile, File, Form, HTTPException
from pydantic import ValidationError

from track_insight.config import settings
from track_insight.features.annotations.schemas import AnnotationConfigSchema, MarkerSchema
from track_insight.features.session import AnalysisSession
from track_insight.features.tracks import TrackLoader
from track_insight.features.tracks.schemas import (
    SimulationStatusSchema,
    TrackAnalysisResponse,
    TrackInfo,
    TrackMetadataSchema,
)

logger = logging.getLogger(__name__)

router = APIRouter()

ALLOWED_EXTENSIONS = (".gpx", ".kml", ".csv")


@router.post("/analyze", response_model=TrackAnalysisResponse)
async def analyze_track(
    file: UploadFile = File(...),
    config: Optional[str] = Form(default=None),
    progress: float = Form(default=0.0, ge=0.0, le=1.0),
):
    """
    Upload and analyze a track file (.gpx, .kml or .csv).

    `config` is an optional JSON-encoded AnnotationConfigSchema.
    `progress` selects the simulated position (0 = start, 1 = end).
    """
    # Validate file
    if not file.filename or not file.filename.lower().endswith(ALLOWED_EXTENSIONS):
        raise HTTPException(status_code=400, detail="Only .gpx, .kml and .csv files are allowed")

    try:
        annotation_config = (
            AnnotationConfigSchema.model_validate_json(config) if config
            else AnnotationConfigSchema()
        )
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors(include_url=False))

    # Read content
    content = await file.read()

    if len(content) == 0:
        raise HTTPException(status_code=400, detail="File is empty")

    if len(content) > settings.max_upload_mb * 1024 * 1024:
        raise HTTPException(
            status_code=400,
            detail=f"File too large (max {settings.max_upload_mb}MB)"
        )

    # Parse track
    try:
        track = TrackLoader.parse(content, file.filename)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    session = AnalysisSession(config=annotation_config.to_config())
    session.load_track(track)
    session.player.set_progress(progress)

    metadata = session.metadata
    status = session.status

    return TrackAnalysisResponse(
        success=True,
        track=TrackInfo(
            name=track.name,
            points_count=len(track),
            bounds=track.bounds,
            distance_km=round(metadata.total_distance_km, 3) if metadata else 0.0,
        ),
        metadata=TrackMetadataSchema(**metadata.to_dict()) if metadata else None,
        markers=[MarkerSchema(**m.to_dict()) for m in session.markers],
        simulation=SimulationStatusSchema(**status.to_dict()) if status else None,
    )
