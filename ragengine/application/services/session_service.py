"""
Session service orchestrator.

Coordinates conversation session lifecycle operations.

Dependencies: ragengine.boundary.db.CRUD
System role: Session use case orchestration
"""

from sqlalchemy.ext.asyncio import AsyncSession

from ragengine.boundary.db.CRUD.message_crud import message_crud
from ragengine.boundary.db.CRUD.session_crud import session_crud
from ragengine.boundary.db.models.session_model import SessionModel
from ragengine.core.exceptions import SessionNotFoundError, ValidationError
from ragengine.models.chat import ChatMessageResponse
from ragengine.models.session import SessionResponse


def to_session_response(session: SessionModel) -> SessionResponse:
    return SessionResponse(
        id=session.id,
        user_id=session.user_id,
        message_count=session.message_count,
        last_activity_at=session.last_activity_at,
        created_at=session.created_at,
        updated_at=session.updated_at,
    )


class SessionService:
    """Session service orchestrator."""

    def __init__(self, db: AsyncSession) -> None:
        """
        Initialize session service with async database session.

        Args:
            db: Async SQLAlchemy session
        """
        self.db = db

    async def create_session(self, user_id: str) -> SessionResponse:
        """
        Create a new conversation session for a user.

        Raises:
            ValidationError: Empty user id
        """
        if not user_id or not user_id.strip():
            raise ValidationError("user_id must not be empty", field="user_id")
        session = await session_crud.create(self.db, user_id=user_id)
        await self.db.commit()
        return to_session_response(session)

    async def get_session(self, session_id: str) -> SessionResponse:
        """
        Get session by ID.

        Raises:
            SessionNotFoundError: Unknown session
        """
        session = await session_crud.get_by_id(self.db, session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return to_session_response(session)

    async def get_user_sessions(self, user_id: str, limit: int | None = None) -> list[SessionResponse]:
        sessions = await session_crud.get_by_user(self.db, user_id, limit=limit)
        return [to_session_response(s) for s in sessions]

    async def get_messages(self, session_id: str) -> list[ChatMessageResponse]:
        """
        Full message history of a session, oldest first.

        Raises:
            SessionNotFoundError: Unknown session
        """
        await self.get_session(session_id)
        messages = await message_crud.list_by_session(self.db, session_id)
        return [
            ChatMessageResponse(
                id=m.id,
                role=m.role,
                content=m.content,
                citations=m.citations or [],
                truncated=m.truncated,
                turn_id=m.turn_id,
                created_at=m.created_at,
            )
            for m in messages
        ]

