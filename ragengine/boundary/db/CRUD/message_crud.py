"""
Message CRUD operations.

Idempotent per-turn message writes and history reads.

Dependencies: sqlalchemy, ragengine.boundary.db.models
System role: Chat history persistence operations
"""

from typing import Sequence

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ragengine.boundary.db.base import utcnow
from ragengine.boundary.db.CRUD.base_crud import BaseCRUD
from ragengine.boundary.db.models.message_model import MessageModel
from ragengine.boundary.db.models.session_model import SessionModel
from ragengine.models.chat import MessageRole


class MessageCRUD(BaseCRUD[MessageModel]):
    """
    CRUD operations for MessageModel.

    ``upsert_turn_message`` is the only write path used by chat; it keeps
    exactly one row per (session_id, turn_id, role).
    """

    def __init__(self) -> None:
        """Initialize MessageCRUD with MessageModel."""
        super().__init__(MessageModel)

    async def get_turn_message(
        self,
        session: AsyncSession,
        session_id: str,
        turn_id: str,
        role: MessageRole,
    ) -> MessageModel | None:
        stmt = (
            select(MessageModel)
            .where(
                MessageModel.session_id == session_id,
                MessageModel.turn_id == turn_id,
                MessageModel.role == role,
            )
            .execution_options(populate_existing=True)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def upsert_turn_message(
        self,
        session: AsyncSession,
        session_id: str,
        turn_id: str,
        role: MessageRole,
        content: str,
        citations: list[dict] | None = None,
        truncated: bool = False,
    ) -> MessageModel:
        """
        Insert or replace the message of a turn.

        A new row increments the session's ``message_count``; replacing an
        existing row (regeneration) does not. Inserts and replacements that
        change the content bump ``content_version`` so the summarizer
        revisits the session. Both refresh ``last_activity_at``. Callers
        commit after each call: a lost insert race rolls the transaction
        back before replacing.

        Args:
            session: Async database session
            session_id: Parent session id
            turn_id: Turn idempotency key
            role: Message role
            content: Message text
            citations: Citation wire dicts
            truncated: Whether generation stopped early

        Returns:
            The persisted MessageModel
        """
        values = {"content": content, "citations": citations or [], "truncated": truncated}

        existing = await self.get_turn_message(session, session_id, turn_id, role)
        if existing is None:
            try:
                message = MessageModel(session_id=session_id, turn_id=turn_id, role=role, **values)
                session.add(message)
                await session.flush()
            except IntegrityError:
                await session.rollback()
                existing = await self.get_turn_message(session, session_id, turn_id, role)
                if existing is None:
                    raise
            else:
                await self._touch_session(session, session_id, new_messages=1, content_changed=True)
                return message

        changed = any(getattr(existing, field) != value for field, value in values.items())
        for field, value in values.items():
            setattr(existing, field, value)
        existing.updated_at = utcnow()
        await session.flush()
        await self._touch_session(session, session_id, new_messages=0, content_changed=changed)
        return existing

    async def list_recent(
        self,
        session: AsyncSession,
        session_id: str,
        limit: int,
    ) -> list[MessageModel]:
        """
        Return the last ``limit`` messages of a session, oldest first.
        """
        stmt = (
            select(MessageModel)
            .where(MessageModel.session_id == session_id)
            .order_by(MessageModel.created_at.desc())
            .limit(limit)
        )
        result = await session.execute(stmt)
        return list(reversed(result.scalars().all()))

    async def list_by_session(self, session: AsyncSession, session_id: str) -> Sequence[MessageModel]:
        stmt = (
            select(MessageModel)
            .where(MessageModel.session_id == session_id)
            .order_by(MessageModel.created_at)
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def _touch_session(
        self,
        session: AsyncSession,
        session_id: str,
        new_messages: int,
        content_changed: bool,
    ) -> None:
        stmt = (
            update(SessionModel)
            .where(SessionModel.id == session_id)
            .values(
                message_count=SessionModel.message_count + new_messages,
                content_version=SessionModel.content_version + (1 if content_changed else 0),
                last_activity_at=utcnow(),
            )
            .execution_options(synchronize_session=False)
        )
        await session.execute(stmt)


# Singleton instance for convenience
message_crud = MessageCRUD()
