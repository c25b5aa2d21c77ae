"""
Document ingestion pipeline orchestrator.

Drives a document through download -> extract -> chunk -> embed -> index,
recording every stage as a status transition on the document row.

State machine:
    uploaded -> extracting -> chunking -> embedding -> processed
    any stage -> failed (retryable | terminal)

Transient upstream errors are retried per stage with bounded exponential
backoff; exhausting them leaves the document Failed(retryable). Corrupt or
unsupported content fails terminally without retry.

A run whose worker died leaves the document in an in-progress status.
Once its last transition is older than ``stale_claim_seconds`` a new
``submit`` or ``reingest`` takes it over. The version compare-and-set
lets only one taker win and stops the abandoned run at its next
transition.

Dependencies: tenacity, sqlalchemy, all task modules
System role: Pipeline orchestration (coordinates only)
"""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from datetime import timedelta
from typing import TypeVar

from sqlalchemy.ext.asyncio import async_sessionmaker
from tenacity import AsyncRetrying, retry_if_exception, stop_after_attempt, wait_exponential_jitter

from ragengine.boundary.db.base import utcnow
from ragengine.boundary.db.CRUD.document_crud import document_crud
from ragengine.boundary.db.models.document_model import DocumentModel
from ragengine.boundary.object_store.object_store import ObjectStore
from ragengine.configs.ingestion import IngestionSettings
from ragengine.core.document_processing.models import PipelineResult
from ragengine.core.document_processing.tasks import (
    ChunkingTask,
    EmbeddingTask,
    ExtractionTask,
    VectorStoreTask,
)
from ragengine.core.exceptions import (
    ConcurrencyConflictError,
    DocumentNotFoundError,
    EmbeddingServiceUnavailable,
    RagEngineError,
    TransientUpstreamError,
)
from ragengine.models.document import IN_PROGRESS_STATUSES, DocumentStatus, FailureKind

logger = logging.getLogger(__name__)

T = TypeVar("T")

CLAIMABLE_STATUSES = (DocumentStatus.UPLOADED, DocumentStatus.FAILED)
REINGESTABLE_STATUSES = (DocumentStatus.PROCESSED, DocumentStatus.FAILED)


def _is_stage_retryable(error: BaseException) -> bool:
    # The embedding client already retried per item.
    return isinstance(error, TransientUpstreamError) and not isinstance(error, EmbeddingServiceUnavailable)


class IngestionPipeline:
    """
    Orchestrate document ingestion.

    ``submit`` is idempotent: documents that are being processed or are
    already processed are left alone. Concurrent submitters race on the
    document version and only one wins the claim.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker,
        object_store: ObjectStore,
        extraction_task: ExtractionTask,
        chunking_task: ChunkingTask,
        embedding_task: EmbeddingTask,
        vector_store_task: VectorStoreTask,
        settings: IngestionSettings | None = None,
    ) -> None:
        """
        Initialize pipeline with its collaborators.

        Args:
            session_factory: Async database session factory
            object_store: Raw document source
            extraction_task: Bytes -> text
            chunking_task: Text -> chunks
            embedding_task: Chunks -> embedded chunks
            vector_store_task: Embedded chunks -> vector store
            settings: Retry and parallelism settings (defaults if None)
        """
        self._session_factory = session_factory
        self._object_store = object_store
        self._extraction_task = extraction_task
        self._chunking_task = chunking_task
        self._embedding_task = embedding_task
        self._vector_store_task = vector_store_task
        self._settings = settings or IngestionSettings()
        self._semaphore = asyncio.Semaphore(self._settings.max_concurrent_documents)

    async def submit(self, document_id: str) -> PipelineResult:
        """
        Ingest a document if it is waiting for ingestion.

        Processing failures are recorded on the document and returned, never
        raised.

        Args:
            document_id: Document to ingest

        Returns:
            PipelineResult: Final status, or ``skipped=True`` for a no-op

        Raises:
            DocumentNotFoundError: Unknown document id
        """
        start_time = time.perf_counter()

        document = await self._claim(document_id)
        if isinstance(document, PipelineResult):
            return document

        logger.info(
            f"{__name__}:submit - START document_id={document_id}, generation={document.generation}, "
            f"attempt={document.attempts}"
        )
        result = await self._run(document)
        result.processing_time_ms = (time.perf_counter() - start_time) * 1000
        logger.info(
            f"{__name__}:submit - END document_id={document_id}, status={result.status}, "
            f"chunks={result.chunk_count}, ms={result.processing_time_ms:.0f}"
        )
        return result

    async def submit_many(self, document_ids: list[str]) -> list[PipelineResult]:
        """
        Ingest documents in parallel, bounded by ``max_concurrent_documents``.

        Unknown ids yield a skipped result instead of aborting the batch.
        """

        async def _bounded(document_id: str) -> PipelineResult:
            async with self._semaphore:
                try:
                    return await self.submit(document_id)
                except DocumentNotFoundError as e:
                    logger.warning(f"{__name__}:submit_many - {e.message}")
                    return PipelineResult(document_id=document_id, skipped=True, error=e.message)

        return list(await asyncio.gather(*(_bounded(document_id) for document_id in document_ids)))

    async def reingest(self, document_id: str) -> PipelineResult:
        """
        Reset a processed, failed or abandoned document and ingest it again.

        The new run gets a new generation, so its chunks get new ids and the
        previous generation's chunks are pruned once indexing succeeds.

        Raises:
            DocumentNotFoundError: Unknown document id
        """
        async with self._session_factory() as db:
            document = await document_crud.get_by_id(db, document_id)
            if document is None:
                raise DocumentNotFoundError(document_id)
            stale = self._is_stale_claim(document)
            if document.status not in REINGESTABLE_STATUSES and not stale:
                return self._skipped(document, f"cannot re-ingest while {document.status.value}")
            if stale:
                self._log_takeover("reingest", document)
            try:
                await document_crud.transition_status(
                    db,
                    document_id,
                    expected_version=document.version,
                    status=DocumentStatus.UPLOADED,
                    from_statuses=(document.status,),
                    failure_kind=None,
                    error_message=None,
                )
                await db.commit()
            except ConcurrencyConflictError:
                await db.rollback()
                return self._skipped(document, "document changed concurrently")

        return await self.submit(document_id)

    async def _claim(self, document_id: str) -> DocumentModel | PipelineResult:
        async with self._session_factory() as db:
            document = await document_crud.get_by_id(db, document_id)
            if document is None:
                raise DocumentNotFoundError(document_id)

            stale = self._is_stale_claim(document)
            if stale:
                self._log_takeover("_claim", document)
            elif document.status in IN_PROGRESS_STATUSES or document.status == DocumentStatus.PROCESSED:
                return self._skipped(document, f"already {document.status.value}")
            if document.status == DocumentStatus.FAILED and document.failure_kind == FailureKind.TERMINAL:
                return self._skipped(document, "failed terminally; re-ingest explicitly")

            try:
                claimed = await document_crud.transition_status(
                    db,
                    document_id,
                    expected_version=document.version,
                    status=DocumentStatus.EXTRACTING,
                    from_statuses=(document.status,) if stale else CLAIMABLE_STATUSES,
                    attempts=document.attempts + 1,
                    generation=document.generation + 1,
                    failure_kind=None,
                    error_message=None,
                )
                await db.commit()
            except ConcurrencyConflictError:
                await db.rollback()
                logger.info(f"{__name__}:_claim - lost claim race document_id={document_id}")
                return self._skipped(document, "claimed by another worker")
            return claimed

    async def _run(self, document: DocumentModel) -> PipelineResult:
        version = document.version
        try:
            data = await self._with_retry("download", self._object_store.get_object, document.source_uri)
            extracted = await self._with_retry(
                "extract", self._extraction_task.extract, data, document.mime_type, document.id
            )

            version = await self._advance(document.id, version, DocumentStatus.CHUNKING)
            chunks = self._chunking_task.chunk(extracted, document.id, document.generation)

            version = await self._advance(document.id, version, DocumentStatus.EMBEDDING)
            embedded = await self._with_retry("embed", self._embedding_task.embed, chunks)
            chunk_ids = await self._with_retry(
                "index", self._vector_store_task.upload, embedded, document.owner_id, document.name
            )
            # A run taken over by another worker must not prune the new generation.
            await self._ensure_current(document.id, version)
            pruned = await self._vector_store_task.prune(document.id, keep_ids=chunk_ids)
            if pruned:
                logger.info(f"{__name__}:_run - pruned {pruned} stale chunks document_id={document.id}")

            await self._advance(
                document.id, version, DocumentStatus.PROCESSED, chunk_count=len(chunk_ids)
            )
            return PipelineResult(
                document_id=document.id,
                status=DocumentStatus.PROCESSED,
                chunk_count=len(chunk_ids),
            )

        except ConcurrencyConflictError as e:
            logger.warning(f"{__name__}:_run - document changed underneath the run: {e}")
            return PipelineResult(document_id=document.id, skipped=True, error=e.message)
        except TransientUpstreamError as e:
            return await self._fail(document.id, version, FailureKind.RETRYABLE, e)
        except RagEngineError as e:
            return await self._fail(document.id, version, FailureKind.TERMINAL, e)
        except Exception as e:
            logger.exception(f"{__name__}:_run - unexpected error document_id={document.id}")
            return await self._fail(document.id, version, FailureKind.RETRYABLE, e)

    def _is_stale_claim(self, document: DocumentModel) -> bool:
        if document.status not in IN_PROGRESS_STATUSES:
            return False
        return utcnow() - document.updated_at >= timedelta(seconds=self._settings.stale_claim_seconds)

    @staticmethod
    def _log_takeover(method: str, document: DocumentModel) -> None:
        logger.warning(
            f"{__name__}:{method} - taking over stale {document.status.value} run "
            f"document_id={document.id}, last_transition={document.updated_at.isoformat()}"
        )

    async def _ensure_current(self, document_id: str, version: int) -> None:
        async with self._session_factory() as db:
            document = await document_crud.get_by_id(db, document_id)
        if document is None:
            raise DocumentNotFoundError(document_id)
        if document.version != version:
            raise ConcurrencyConflictError("Document", document_id, version)

    async def _with_retry(self, stage: str, func: Callable[..., Awaitable[T]], *args) -> T:
        async for attempt in AsyncRetrying(
            retry=retry_if_exception(_is_stage_retryable),
            stop=stop_after_attempt(self._settings.max_attempts),
            wait=wait_exponential_jitter(
                initial=self._settings.backoff_initial,
                max=self._settings.backoff_max,
                jitter=self._settings.backoff_jitter,
            ),
            before_sleep=lambda retry_state: logger.warning(
                f"{__name__}:_with_retry - {stage} retry "
                f"{retry_state.attempt_number}/{self._settings.max_attempts}: {retry_state.outcome.exception()}"
            ),
            reraise=True,
        ):
            with attempt:
                return await func(*args)
        raise AssertionError("unreachable")

    async def _advance(self, document_id: str, version: int, status: DocumentStatus, **fields) -> int:
        async with self._session_factory() as db:
            document = await document_crud.transition_status(
                db,
                document_id,
                expected_version=version,
                status=status,
                from_statuses=IN_PROGRESS_STATUSES,
                **fields,
            )
            await db.commit()
            logger.info(f"{__name__}:_advance - document_id={document_id} -> {status.value}")
            return document.version

    async def _fail(
        self,
        document_id: str,
        version: int,
        failure_kind: FailureKind,
        error: Exception,
    ) -> PipelineResult:
        message = getattr(error, "message", None) or str(error)
        logger.error(
            f"{__name__}:_fail - document_id={document_id}, kind={failure_kind.value}",
            extra={"error_type": type(error).__name__, "error": message},
        )
        try:
            await self._advance(
                document_id,
                version,
                DocumentStatus.FAILED,
                failure_kind=failure_kind,
                error_message=message[:2000],
            )
        except ConcurrencyConflictError:
            logger.warning(f"{__name__}:_fail - could not record failure, document changed document_id={document_id}")
        return PipelineResult(
            document_id=document_id,
            status=DocumentStatus.FAILED,
            failure_kind=failure_kind,
            error=message,
        )

    @staticmethod
    def _skipped(document: DocumentModel, reason: str) -> PipelineResult:
        return PipelineResult(
            document_id=document.id,
            status=document.status,
            chunk_count=document.chunk_count,
            skipped=True,
            error=reason,
        )
