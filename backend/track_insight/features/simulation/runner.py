"""
Playback runner.

Thin asyncio scheduler adapter that feeds wall-clock tick deltas to a
SimulationPlayer. The player itself knows nothing about timers.
"""

import asyncio
import logging
from typing import Callable, Optional

from track_insight.config import settings

from .player import SimulationPlayer

logger = logging.getLogger(__name__)

TickCallback = Callable[[float], None]


class PlaybackRunner:
    """
    Drives a player with periodic ticks until it goes idle.

    Call `start()` to begin playback.
    Call `stop()` to pause and cancel the pending tick.

    Usage:
        runner = PlaybackRunner(player, on_tick=print)
        await runner.start()
        # ... later ...
        await runner.stop()
    """

    def __init__(
        self,
        player: SimulationPlayer,
        on_tick: Optional[TickCallback] = None,
        interval_seconds: Optional[float] = None,
    ):
        self._player = player
        self._on_tick = on_tick
        self._interval = interval_seconds or settings.playback_tick_seconds
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> bool:
        """
        Start the player (unless it is already playing) and the tick loop.

        Returns:
            False if a loop is already running or the player cannot play
        """
        if self.running:
            return False
        if not self._player.playing and not self._player.start():
            return False

        generation = self._player.generation
        self._task = asyncio.create_task(self._run_loop(generation))
        logger.info("Playback runner started")
        return True

    async def stop(self):
        """Pause the player and cancel the loop."""
        self._player.pause()
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("Playback runner stopped")

    async def wait(self):
        """Wait until the loop ends on its own (end of track or pause)."""
        if self._task:
            await self._task

    async def _run_loop(self, generation: int):
        """Tick until the player leaves the generation we started under."""
        loop = asyncio.get_running_loop()
        last = loop.time()

        while self._player.playing and self._player.generation == generation:
            await asyncio.sleep(self._interval)
            now = loop.time()
            dt, last = now - last, now

            progress = self._player.tick(dt, generation)
            if progress is None:
                break
            if self._on_tick:
                self._on_tick(progress)
