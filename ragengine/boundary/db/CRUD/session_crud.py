"""
Session CRUD operations.

Provides Create, Read, Update, Delete operations for SessionModel
plus the queries the memory summarization job relies on.

Dependencies: sqlalchemy, ragengine.boundary.db.models
System role: Session persistence operations
"""

from datetime import datetime
from typing import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ragengine.boundary.db.CRUD.base_crud import BaseCRUD
from ragengine.boundary.db.models.session_model import SessionModel


class SessionCRUD(BaseCRUD[SessionModel]):
    """CRUD operations for SessionModel."""

    def __init__(self) -> None:
        """Initialize SessionCRUD with SessionModel."""
        super().__init__(SessionModel)

    async def get_by_user(
        self,
        session: AsyncSession,
        user_id: str,
        limit: int | None = None,
    ) -> Sequence[SessionModel]:
        stmt = (
            select(SessionModel)
            .where(SessionModel.user_id == user_id)
            .order_by(SessionModel.last_activity_at.desc())
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await session.execute(stmt)
        return result.scalars().all()

    async def list_summary_candidates(
        self,
        session: AsyncSession,
        inactive_before: datetime,
        max_attempts: int,
        limit: int | None = None,
    ) -> Sequence[SessionModel]:
        """
        Sessions due for summarization.

        A candidate has been idle since ``inactive_before``, has messages
        not yet covered by a summary, is below the attempt cap and has not
        been permanently skipped.

        Args:
            session: Async database session
            inactive_before: Last-activity cutoff
            max_attempts: Attempt cap
            limit: Maximum number of sessions to return

        Returns:
            Sequence of eligible SessionModels, oldest activity first
        """
        stmt = (
            select(SessionModel)
            .where(
                SessionModel.last_activity_at < inactive_before,
                SessionModel.summarized_version < SessionModel.content_version,
                SessionModel.summary_attempts < max_attempts,
                SessionModel.summary_skipped_reason.is_(None),
            )
            .order_by(SessionModel.last_activity_at)
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await session.execute(stmt)
        return result.scalars().all()

    async def mark_summarized(
        self,
        session: AsyncSession,
        id: str,
        version: int,
    ) -> SessionModel | None:
        return await self.update_by_id(
            session,
            id,
            summarized_version=version,
            summary_attempts=0,
            summary_last_error=None,
        )

    async def record_summary_failure(
        self,
        session: AsyncSession,
        id: str,
        error: str,
        max_attempts: int,
    ) -> SessionModel | None:
        """
        Count a failed summarization attempt.

        Once the attempt cap is reached the session is permanently
        skipped and the reason recorded.

        Returns:
            Updated SessionModel, None if the session no longer exists
        """
        record = await self.get_by_id(session, id)
        if record is None:
            return None
        record.summary_attempts += 1
        record.summary_last_error = error
        if record.summary_attempts >= max_attempts:
            record.summary_skipped_reason = (
                f"gave up after {record.summary_attempts} attempts: {error}"
            )
        await session.flush()
        return record


# Singleton instance for convenience
session_crud = SessionCRUD()
