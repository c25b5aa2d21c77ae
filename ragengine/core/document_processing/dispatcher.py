"""
Ingestion dispatchers.

The API triggers ingestion and returns immediately; a dispatcher decides
where the work runs: as an asyncio task in this process, or on a Celery
worker.

Dependencies: asyncio, celery (optional dispatch mode)
System role: Hand-off between the API and the ingestion pipeline
"""

import asyncio
import logging
from abc import ABC, abstractmethod

from ragengine.core.document_processing.entrypoint import IngestionPipeline

logger = logging.getLogger(__name__)


class IngestionDispatcher(ABC):
    """Schedules a document for background ingestion."""

    @abstractmethod
    async def dispatch(self, document_id: str, reingest: bool = False) -> None:
        """Schedule ingestion (or a reset-and-reingest) without waiting for it."""

    async def aclose(self) -> None:
        """Release resources on shutdown."""


class LocalDispatcher(IngestionDispatcher):
    """Run ingestion as asyncio tasks in the current event loop."""

    def __init__(self, pipeline: IngestionPipeline) -> None:
        self._pipeline = pipeline
        self._tasks: set[asyncio.Task] = set()

    async def dispatch(self, document_id: str, reingest: bool = False) -> None:
        run = self._pipeline.reingest if reingest else self._pipeline.submit
        task = asyncio.create_task(run(document_id), name=f"ingest:{document_id}")
        self._tasks.add(task)
        task.add_done_callback(self._on_done)

    def _on_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error(f"{__name__}:_on_done - {task.get_name()} failed: {task.exception()!r}")

    async def drain(self) -> None:
        """Wait for in-flight ingestion tasks."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def aclose(self) -> None:
        for task in list(self._tasks):
            task.cancel()
        await self.drain()


class CeleryDispatcher(IngestionDispatcher):
    """Enqueue ingestion on Celery workers."""

    async def dispatch(self, document_id: str, reingest: bool = False) -> None:
        from ragengine.workers.tasks.document_ingestion import ingest_document

        await asyncio.to_thread(ingest_document.delay, document_id, reingest)
        logger.info(f"{__name__}:dispatch - enqueued document_id={document_id}, reingest={reingest}")
