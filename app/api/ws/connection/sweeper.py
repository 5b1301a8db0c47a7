import asyncio
import logging
import time
from typing import Callable, List, Optional

from .room_registry import RoomRegistry

logger = logging.getLogger(__name__)


class RoomSweeper:
    """Periodically removes rooms older than the configured TTL."""

    def __init__(
        self,
        registry: RoomRegistry,
        ttl: float,
        interval: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.registry = registry
        self.ttl = ttl
        self.interval = interval
        self.clock = clock
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def sweep_once(self) -> List[str]:
        expired = await self.registry.sweep_expired(self.clock(), self.ttl)
        if expired:
            logger.info(f"Swept {len(expired)} expired room(s)")
        return expired

    async def _run(self):
        while True:
            await asyncio.sleep(self.interval)
            try:
                await self.sweep_once()
            except Exception as e:
                logger.error(f"Room sweep failed: {e}", exc_info=True)

    def start(self):
        if not self.running:
            logger.info(f"Room sweeper started (ttl={self.ttl}s, interval={self.interval}s)")
            self._task = asyncio.create_task(self._run(), name="room-sweeper")

    async def stop(self):
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            logger.info("Room sweeper stopped")
        self._task = None
