"""
Document ingestion Celery task.

Task: ragengine.ingest_document(document_id, reingest=False)
Flow: claim -> extract -> chunk -> embed -> upsert -> prune -> status

The pipeline records processing failures on the document itself, so the
task only fails (and is retried by Celery) when the pipeline could not
run at all, e.g. the database was unreachable.

Dependencies: celery, ragengine.application.container
System role: Multi-process document ingestion worker
"""

import asyncio
import logging

from ragengine.application.container import build_container
from ragengine.configs import get_settings
from ragengine.core.exceptions import DocumentNotFoundError
from ragengine.workers import celery_app

logger = logging.getLogger(__name__)


async def _ingest(document_id: str, reingest: bool) -> dict:
    container = build_container(get_settings())
    try:
        pipeline = container.pipeline
        result = await (pipeline.reingest(document_id) if reingest else pipeline.submit(document_id))
        return result.model_dump(mode="json")
    finally:
        await container.engine.dispose()


@celery_app.task(
    name="ragengine.ingest_document",
    bind=True,
    max_retries=3,
    autoretry_for=(ConnectionError, OSError),
    retry_backoff=60,
    retry_backoff_max=600,
)
def ingest_document(self, document_id: str, reingest: bool = False):
    """
    Ingest document in a worker process.

    Args:
        document_id: Document id
        reingest: Reset a processed or failed document first

    Returns:
        dict: PipelineResult with status and chunk count
    """
    logger.info(f"{__name__}:ingest_document - document_id={document_id}, reingest={reingest}")
    try:
        return asyncio.run(_ingest(document_id, reingest))
    except DocumentNotFoundError as e:
        logger.warning(f"{__name__}:ingest_document - {e.message}")
        return {"document_id": document_id, "skipped": True, "error": e.message}
