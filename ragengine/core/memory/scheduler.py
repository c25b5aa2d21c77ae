"""
Memory summarization scheduler.

Runs MemorySummarizer cycles on a fixed interval inside the application's
event loop. Started and stopped by the API lifespan.

Dependencies: asyncio
System role: Recurring trigger for the memory job
"""

import asyncio
import logging

from ragengine.core.memory.summarizer import MemorySummarizer, SummaryCycleReport

logger = logging.getLogger(__name__)


class MemoryScheduler:
    """Fixed-interval loop around ``MemorySummarizer.run_cycle``."""

    def __init__(self, summarizer: MemorySummarizer, interval_seconds: float) -> None:
        self._summarizer = summarizer
        self._interval_seconds = interval_seconds
        self._stop_event = asyncio.Event()
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        if self.running:
            return
        self._stop_event.clear()
        self._task = asyncio.create_task(self._loop(), name="memory-scheduler")
        logger.info(f"{__name__}:start - interval={self._interval_seconds}s")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._stop_event.set()
        await self._task
        self._task = None
        logger.info(f"{__name__}:stop - scheduler stopped")

    async def run_once(self) -> SummaryCycleReport:
        return await self._summarizer.run_cycle()

    async def _loop(self) -> None:
        while not self._stop_event.is_set():
            try:
                await self.run_once()
            except Exception:
                logger.exception(f"{__name__}:_loop - summarization cycle crashed")
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=self._interval_seconds)
            except asyncio.TimeoutError:
                pass
