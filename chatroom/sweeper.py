import asyncio
import contextlib
import logging
from typing import Callable, Optional

from .config import PARTICIPANT_TTL_SECONDS, SWEEP_INTERVAL_SECONDS
from .models import now_millis
from .participants import sweep_expired
from .store import ChatStore

logger = logging.getLogger(__name__)


class LivenessSweeper:
    """Background task expiring participants that stopped sending heartbeats."""

    def __init__(
        self,
        store: ChatStore,
        interval: float = SWEEP_INTERVAL_SECONDS,
        ttl: float = PARTICIPANT_TTL_SECONDS,
        clock: Callable[[], int] = now_millis,
    ):
        self.store = store
        self.interval = interval
        self.ttl = ttl
        self.clock = clock
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self):
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name="liveness-sweeper")
        logger.info("Liveness sweeper started (every %ss, ttl %ss)", self.interval, self.ttl)

    async def stop(self):
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        logger.info("Liveness sweeper stopped")

    async def tick(self) -> list[str]:
        """Run one sweep. Failures are logged; the next tick retries."""
        try:
            return await sweep_expired(self.store, self.clock(), self.ttl)
        except Exception:
            logger.exception("Liveness sweep failed")
            return []

    async def _run(self):
        while True:
            await asyncio.sleep(self.interval)
            await self.tick()
