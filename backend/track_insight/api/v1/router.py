"""
API Router v1

Combines all route modules.
"""

from fastapi import APIRouter

from track_insight.api.v1.routes import tracks

api_router = APIRouter()

api_router.include_router(tracks.router, prefix="/tracks", tags=["Tracks"])
