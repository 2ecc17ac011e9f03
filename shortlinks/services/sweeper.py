"""
Expiry Sweeper

Periodically purges expired short URLs from the registry.
Runs as an asyncio task for the lifetime of the application: started on
startup, cancelled on shutdown.
"""

import asyncio
import logging
from typing import Optional

from shortlinks.services.registry import URLRegistry

logger = logging.getLogger(__name__)


class ExpirySweeper:
    """
    Background task calling URLRegistry.sweep_expired on a fixed interval.

    A failing sweep is logged and the loop keeps running.
    """

    def __init__(self, registry: URLRegistry, interval_seconds: float = 3600):
        self.registry = registry
        self.interval_seconds = interval_seconds
        self._task: Optional[asyncio.Task] = None
        self._total_swept = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def total_swept(self) -> int:
        return self._total_swept

    def start(self) -> None:
        """Start the sweep loop on the running event loop."""
        if self.running:
            logger.warning("Expiry sweeper already running")
            return
        self._task = asyncio.create_task(self._run(), name="expiry-sweeper")
        logger.info(f"Expiry sweeper started: interval={self.interval_seconds}s")

    async def stop(self) -> None:
        """Cancel the sweep loop and wait for it to finish."""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Expiry sweeper stopped")

    def sweep_once(self) -> int:
        removed = self.registry.sweep_expired()
        self._total_swept += removed
        return removed

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            try:
                self.sweep_once()
            except Exception as e:
                logger.error(f"Expiry sweep failed: {str(e)}", exc_info=True)
