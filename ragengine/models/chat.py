"""
Chat domain models and schemas.

Request/response schemas and enums for chat turns.

Dependencies: pydantic
System role: Chat API contracts
"""

import enum
from datetime import datetime

from pydantic import BaseModel, Field

from ragengine.models.citation import Citation


class ChatMode(str, enum.Enum):
    """Whether a turn must be answered from retrieved documents."""

    GROUNDED = "grounded"
    CONVERSATIONAL = "conversational"


class MessageRole(str, enum.Enum):
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class TurnState(str, enum.Enum):
    """Per-turn lifecycle of the chat orchestrator."""

    RECEIVED = "received"
    CONTEXT_ASSEMBLED = "context_assembled"
    GENERATING = "generating"
    PERSISTED = "persisted"
    COMPLETED = "completed"
    FAILED = "failed"


class ChatRequest(BaseModel):
    """Request schema for chat messages."""

    message: str = Field(min_length=1, description="User question or message")
    mode: ChatMode = Field(default=ChatMode.GROUNDED, description="Grounded or conversational turn")
    turn_id: str | None = Field(
        default=None,
        description="Idempotency key; resend the same value to regenerate a turn",
    )


class ChatTurnResult(BaseModel):
    """Outcome of one chat turn, delivered with the final stream event."""

    turn_id: str
    message_id: str | None
    content: str
    citations: list[Citation] = Field(default_factory=list)
    truncated: bool = False
    grounded: bool = True
    state: TurnState


class ChatMessageResponse(BaseModel):
    """Single chat message in history."""

    id: str
    turn_id: str
    role: MessageRole
    content: str
    citations: list[dict] = Field(default_factory=list)
    truncated: bool = False
    created_at: datetime | None = None
