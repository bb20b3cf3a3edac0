"""
Background sweep of expired memory cache entries.

Owns a single asyncio task that calls sweep() on every registered cache at a
fixed interval. The task is started and cancelled by the server lifespan so
no interval outlives the process that created it.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Iterable, List, Optional

from core.interfaces import SupportsSweep

logger = logging.getLogger(__name__)


class CacheSweeper:
    def __init__(self, caches: Iterable[SupportsSweep], *, interval_seconds: float = 300.0) -> None:
        self._caches: List[SupportsSweep] = list(caches)
        self._interval = max(0.0, float(interval_seconds))
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def run_once(self) -> int:
        removed = 0
        for cache in self._caches:
            count = cache.sweep()
            if count:
                logger.debug("Swept %d expired entries from %s", count, cache.name)
            removed += count
        return removed

    def start(self) -> None:
        # Non-positive interval disables the background loop.
        if self.running or self._interval <= 0:
            return
        self._task = asyncio.get_running_loop().create_task(self._loop(), name="cache-sweeper")

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            try:
                self.run_once()
            except Exception:
                # One bad round must not stop future sweeps
                logger.exception("Cache sweep failed")
