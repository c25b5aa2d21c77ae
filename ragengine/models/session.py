"""
Session domain models and schemas.

Request/response schemas for session operations.

Dependencies: pydantic
System role: Session API contracts
"""

from datetime import datetime

from pydantic import BaseModel, Field


class CreateSessionRequest(BaseModel):
    """Request schema for creating a new conversation session."""

    user_id: str = Field(min_length=1, description="Owner of the session")


class SessionResponse(BaseModel):
    """Response schema for session operations."""

    id: str
    user_id: str
    message_count: int
    last_activity_at: datetime
    created_at: datetime
    updated_at: datetime
