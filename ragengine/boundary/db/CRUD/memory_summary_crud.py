"""
Memory summary CRUD operations.

Dependencies: sqlalchemy, ragengine.boundary.db.models
System role: Long-term memory persistence operations
"""

from typing import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ragengine.boundary.db.base import utcnow
from ragengine.boundary.db.CRUD.base_crud import BaseCRUD
from ragengine.boundary.db.models.memory_summary_model import MemorySummaryModel


class MemorySummaryCRUD(BaseCRUD[MemorySummaryModel]):
    """CRUD operations for MemorySummaryModel."""

    def __init__(self) -> None:
        """Initialize MemorySummaryCRUD with MemorySummaryModel."""
        super().__init__(MemorySummaryModel)

    async def get_for_session(
        self,
        session: AsyncSession,
        user_id: str,
        source_session_id: str,
    ) -> MemorySummaryModel | None:
        stmt = select(MemorySummaryModel).where(
            MemorySummaryModel.user_id == user_id,
            MemorySummaryModel.source_session_id == source_session_id,
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_user(self, session: AsyncSession, user_id: str) -> Sequence[MemorySummaryModel]:
        stmt = (
            select(MemorySummaryModel)
            .where(MemorySummaryModel.user_id == user_id)
            .order_by(MemorySummaryModel.created_at)
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def upsert(
        self,
        session: AsyncSession,
        user_id: str,
        source_session_id: str,
        summary_text: str,
        vector: list[float],
        processed_version: int,
    ) -> MemorySummaryModel:
        """
        Create or replace the summary of a session.

        Returns:
            The persisted MemorySummaryModel
        """
        existing = await self.get_for_session(session, user_id, source_session_id)
        if existing is None:
            return await self.create(
                session,
                user_id=user_id,
                source_session_id=source_session_id,
                summary_text=summary_text,
                vector=vector,
                processed_version=processed_version,
            )

        existing.summary_text = summary_text
        existing.vector = vector
        existing.processed_version = processed_version
        existing.updated_at = utcnow()
        await session.flush()
        return existing


# Singleton instance for convenience
memory_summary_crud = MemorySummaryCRUD()
