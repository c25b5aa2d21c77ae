"""
Message ORM model.

One row per (session, turn, role): a turn has at most one user and one
assistant message, regenerations overwrite the assistant row in place.

Dependencies: sqlalchemy, ragengine.boundary.db.base
System role: Chat history persistence
"""

from sqlalchemy import JSON, Boolean, Enum, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ragengine.boundary.db.base import Base, TimestampMixin, UUIDMixin
from ragengine.models.chat import MessageRole


class MessageModel(Base, UUIDMixin, TimestampMixin):
    """
    Chat message ORM model.

    Attributes:
        session_id: Parent session
        turn_id: Client-supplied (or generated) idempotency key of the turn
        role: user, assistant or system
        content: Message text
        citations: Citation wire dicts attached to an assistant answer
        truncated: True when generation failed mid-stream
    """

    __tablename__ = "messages"
    __table_args__ = (
        UniqueConstraint("session_id", "turn_id", "role", name="uq_messages_session_turn_role"),
    )

    session_id: Mapped[str] = mapped_column(
        ForeignKey("sessions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    turn_id: Mapped[str] = mapped_column(String(64), nullable=False)
    role: Mapped[MessageRole] = mapped_column(
        Enum(MessageRole, native_enum=False, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")
    citations: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    truncated: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    session = relationship("SessionModel", back_populates="messages")
