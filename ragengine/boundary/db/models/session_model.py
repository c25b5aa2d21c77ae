"""
Session ORM model.

Represents a user conversation and the bookkeeping the memory
summarization job keeps per session.

Dependencies: sqlalchemy, ragengine.boundary.db.base
System role: Session persistence for chat context management
"""

from datetime import datetime

from sqlalchemy import Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ragengine.boundary.db.base import Base, TimestampMixin, UTCDateTime, UUIDMixin, utcnow


class SessionModel(Base, UUIDMixin, TimestampMixin):
    """
    Conversation session ORM model.

    A session is eligible for summarization once it has been inactive
    past the configured threshold and ``summarized_version`` lags
    ``content_version``.

    Attributes:
        id: UUID primary key
        user_id: Owning user
        last_activity_at: Time of the last appended message
        message_count: Number of persisted messages
        content_version: Bumped on every message insert or content change
        summarized_version: content_version covered by the latest summary
        summary_attempts: Consecutive failed summarization attempts
        summary_last_error: Last summarization error message
        summary_skipped_reason: Set once the session is permanently skipped
        messages: Ordered chat messages (cascade delete)
    """

    __tablename__ = "sessions"

    user_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    last_activity_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, default=utcnow)
    message_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    content_version: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    summarized_version: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    summary_attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    summary_last_error: Mapped[str | None] = mapped_column(Text, nullable=True, default=None)
    summary_skipped_reason: Mapped[str | None] = mapped_column(Text, nullable=True, default=None)

    messages = relationship(
        "MessageModel",
        back_populates="session",
        cascade="all, delete-orphan",
        order_by="MessageModel.created_at",
    )
