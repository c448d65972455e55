"""
Journey simulation module.

Usage:
    from track_insight.features.simulation import SimulationPlayer, resolve_position
    from track_insight.features.simulation import PlaybackRunner

Components:
- SimulationPlayer: idle/playing state machine with tick(dt)
- advance_progress / resolve_position: pure playback math
- PlaybackRunner: asyncio tick scheduler
"""

from .player import (
    DEFAULT_PLAYBACK_SPEED_KMH,
    PlaybackState,
    SimulatedPosition,
    SimulationPlayer,
    SimulationStatus,
    advance_progress,
    resolve_position,
)
from .runner import PlaybackRunner

__all__ = [
    # Player
    "DEFAULT_PLAYBACK_SPEED_KMH",
    "PlaybackState",
    "SimulatedPosition",
    "SimulationPlayer",
    "SimulationStatus",
    "advance_progress",
    "resolve_position",
    # Runner
    "PlaybackRunner",
]
