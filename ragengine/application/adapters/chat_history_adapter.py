"""
Chat history adapter.

High-level business logic for chat history management. Writes one
message per (turn, role) and returns history as LangChain messages.

Dependencies: langchain_core, ragengine.boundary.db.CRUD.message_crud
System role: Chat history business logic adapter
"""

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from sqlalchemy.ext.asyncio import AsyncSession

from ragengine.boundary.db.CRUD.message_crud import message_crud
from ragengine.boundary.db.models.message_model import MessageModel
from ragengine.models.chat import MessageRole

_MESSAGE_TYPES = {
    MessageRole.USER: HumanMessage,
    MessageRole.ASSISTANT: AIMessage,
    MessageRole.SYSTEM: SystemMessage,
}


def to_langchain_message(message: MessageModel) -> BaseMessage:
    return _MESSAGE_TYPES[message.role](content=message.content)


class ChatHistoryAdapter:
    """
    High-level adapter for chat history operations.

    Every write commits, so a message is durable before the next stage of
    the turn starts.
    """

    def __init__(self, session_id: str, db: AsyncSession) -> None:
        """
        Initialize chat history adapter.

        Args:
            session_id: Session id for chat history scope
            db: AsyncSession for database operations
        """
        self.session_id = session_id
        self.db = db

    async def add_user_message(self, turn_id: str, content: str) -> MessageModel:
        message = await message_crud.upsert_turn_message(
            self.db, self.session_id, turn_id, MessageRole.USER, content
        )
        await self.db.commit()
        return message

    async def add_ai_message(
        self,
        turn_id: str,
        content: str,
        citations: list[dict] | None = None,
        truncated: bool = False,
    ) -> MessageModel:
        """
        Store (or replace) the assistant message of a turn.

        Args:
            turn_id: Turn idempotency key
            content: Answer text, possibly partial
            citations: Citation wire dicts
            truncated: Whether generation stopped early

        Returns:
            The persisted MessageModel
        """
        message = await message_crud.upsert_turn_message(
            self.db,
            self.session_id,
            turn_id,
            MessageRole.ASSISTANT,
            content,
            citations=citations,
            truncated=truncated,
        )
        await self.db.commit()
        return message

    async def get_messages(self, limit: int, exclude_turn_id: str | None = None) -> list[BaseMessage]:
        """
        Get the most recent messages, oldest first.

        Args:
            limit: Maximum number of messages
            exclude_turn_id: Turn whose messages are left out (the turn being answered)

        Returns:
            List of BaseMessage objects (HumanMessage, AIMessage)
        """
        if limit <= 0:
            return []
        # Over-fetch so the excluded turn does not shrink the window
        rows = await message_crud.list_recent(self.db, self.session_id, limit + 2)
        rows = [row for row in rows if row.turn_id != exclude_turn_id]
        return [to_langchain_message(row) for row in rows[-limit:]]
