"""
Memory summarizer.

Turns finished conversations into long-term memories: one summary per
(user, session), embedded into the ``memories`` namespace so later turns
can recall it.

A session is eligible once idle past the inactivity threshold with
messages not covered by its last summary. Each session is processed in
its own transaction; failures are counted on the session and retried on
later cycles until the attempt cap, after which the session is skipped.

Dependencies: langchain_core, sqlalchemy, ragengine.boundary
System role: Asynchronous long-term memory job
"""

import logging
from datetime import datetime, timedelta, timezone
from enum import Enum

from langchain_core.messages import HumanMessage, SystemMessage
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import async_sessionmaker

from ragengine.boundary.db.CRUD.memory_summary_crud import memory_summary_crud
from ragengine.boundary.db.CRUD.message_crud import message_crud
from ragengine.boundary.db.CRUD.session_crud import session_crud
from ragengine.boundary.embeddings.embedding_client import EmbeddingClient
from ragengine.boundary.llm.model_service import ModelService
from ragengine.boundary.vdb.base import VectorStore
from ragengine.boundary.vdb.vector_schemas import MEMORIES_NAMESPACE, VectorRecord
from ragengine.configs.memory import MemorySettings
from ragengine.core.exceptions import GenerationError
from ragengine.core.request_context import RequestContext
from ragengine.models.chat import MessageRole

logger = logging.getLogger(__name__)

SUMMARY_SYSTEM_PROMPT = """Summarize the conversation below as long-term memory about the user.

Keep durable facts: who the user is, their goals, preferences, decisions and
open questions. Drop greetings and small talk. Write at most 8 short bullet
points in the third person. Do not invent anything that was not said."""

SUMMARY_TIMEOUT_SECONDS = 60.0


class SessionOutcome(str, Enum):
    SUMMARIZED = "summarized"
    FAILED = "failed"
    SKIPPED = "skipped"
    UNCHANGED = "unchanged"


class SummaryCycleReport(BaseModel):
    """Counts for one summarization cycle."""

    eligible: int = 0
    summarized: int = 0
    failed: int = 0
    skipped: int = Field(default=0, description="Sessions that hit the attempt cap this cycle")
    started_at: datetime
    finished_at: datetime | None = None


def memory_record_id(user_id: str, session_id: str) -> str:
    return f"{user_id}:{session_id}"


def format_transcript(messages) -> str:
    labels = {MessageRole.USER: "User", MessageRole.ASSISTANT: "Assistant", MessageRole.SYSTEM: "System"}
    return "\n".join(f"{labels[m.role]}: {m.content}" for m in messages)


class MemorySummarizer:
    """Summarize inactive sessions into long-term memory."""

    def __init__(
        self,
        session_factory: async_sessionmaker,
        model_service: ModelService,
        embedding_client: EmbeddingClient,
        vector_store: VectorStore,
        settings: MemorySettings | None = None,
    ) -> None:
        """
        Initialize memory summarizer.

        Args:
            session_factory: Async database session factory
            model_service: Summarization model
            embedding_client: Embeds summaries
            vector_store: Receives memory vectors
            settings: Thresholds and attempt cap (defaults if None)
        """
        self._session_factory = session_factory
        self._model_service = model_service
        self._embedding_client = embedding_client
        self._vector_store = vector_store
        self._settings = settings or MemorySettings()

    async def run_cycle(self, now: datetime | None = None) -> SummaryCycleReport:
        """
        Summarize every eligible session once.

        Running a cycle again without new messages is a no-op.

        Args:
            now: Reference time for the inactivity threshold (defaults to utcnow)

        Returns:
            SummaryCycleReport with per-outcome counts
        """
        now = now or datetime.now(timezone.utc)
        report = SummaryCycleReport(started_at=now)
        cutoff = now - timedelta(minutes=self._settings.inactivity_threshold_minutes)

        async with self._session_factory() as db:
            candidates = await session_crud.list_summary_candidates(
                db,
                inactive_before=cutoff,
                max_attempts=self._settings.max_attempts,
                limit=self._settings.batch_size,
            )
            session_ids = [candidate.id for candidate in candidates]

        report.eligible = len(session_ids)
        for session_id in session_ids:
            outcome = await self._summarize_session(session_id)
            if outcome == SessionOutcome.SUMMARIZED:
                report.summarized += 1
            elif outcome == SessionOutcome.FAILED:
                report.failed += 1
            elif outcome == SessionOutcome.SKIPPED:
                report.skipped += 1

        report.finished_at = datetime.now(timezone.utc)
        logger.info(
            f"{__name__}:run_cycle - eligible={report.eligible}, summarized={report.summarized}, "
            f"failed={report.failed}, skipped={report.skipped}"
        )
        return report

    async def _summarize_session(self, session_id: str) -> SessionOutcome:
        async with self._session_factory() as db:
            session = await session_crud.get_by_id(db, session_id)
            if session is None or session.summarized_version >= session.content_version:
                return SessionOutcome.UNCHANGED

            user_id = session.user_id
            version = session.content_version
            try:
                messages = await message_crud.list_by_session(db, session_id)
                summary = await self._summarize(format_transcript(messages))
                vector = await self._embedding_client.embed(summary)

                await self._vector_store.upsert(
                    MEMORIES_NAMESPACE,
                    VectorRecord(
                        id=memory_record_id(user_id, session_id),
                        owner_id=user_id,
                        text=summary,
                        vector=vector,
                        metadata={"session_id": session_id, "processed_version": version},
                    ),
                )
                await memory_summary_crud.upsert(
                    db,
                    user_id=user_id,
                    source_session_id=session_id,
                    summary_text=summary,
                    vector=vector,
                    processed_version=version,
                )
                await session_crud.mark_summarized(db, session_id, version)
                await db.commit()
            except Exception as e:
                await db.rollback()
                return await self._record_failure(db, session_id, e)

        logger.info(f"{__name__}:_summarize_session - summarized session_id={session_id}, version={version}")
        return SessionOutcome.SUMMARIZED

    async def _summarize(self, transcript: str) -> str:
        ctx = RequestContext(timeout_seconds=SUMMARY_TIMEOUT_SECONDS)
        summary = await self._model_service.complete(
            [SystemMessage(content=SUMMARY_SYSTEM_PROMPT), HumanMessage(content=transcript)],
            ctx,
        )
        summary = summary.strip()
        if not summary:
            raise GenerationError("Model returned an empty summary")
        return summary

    async def _record_failure(self, db, session_id: str, error: Exception) -> SessionOutcome:
        message = getattr(error, "message", None) or str(error) or type(error).__name__
        record = await session_crud.record_summary_failure(
            db, session_id, message[:2000], max_attempts=self._settings.max_attempts
        )
        await db.commit()

        if record is not None and record.summary_skipped_reason:
            logger.warning(
                f"{__name__}:_record_failure - skipping session_id={session_id}: {record.summary_skipped_reason}"
            )
            return SessionOutcome.SKIPPED

        logger.error(
            f"{__name__}:_record_failure - session_id={session_id} failed, will retry",
            extra={"error_type": type(error).__name__, "error": message},
        )
        return SessionOutcome.FAILED
