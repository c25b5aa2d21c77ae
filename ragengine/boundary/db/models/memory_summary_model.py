"""
Memory summary ORM model.

Long-term memory distilled from one finished conversation session.

Dependencies: sqlalchemy, ragengine.boundary.db.base
System role: Long-term memory persistence
"""

from sqlalchemy import JSON, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from ragengine.boundary.db.base import Base, TimestampMixin, UUIDMixin


class MemorySummaryModel(Base, UUIDMixin, TimestampMixin):
    """
    Memory summary ORM model, unique per (user_id, source_session_id).

    Attributes:
        user_id: Owning user
        source_session_id: Session the summary was produced from
        summary_text: Model-written summary
        vector: Embedding of summary_text
        processed_version: Session content_version the summary covers
    """

    __tablename__ = "memory_summaries"
    __table_args__ = (
        UniqueConstraint("user_id", "source_session_id", name="uq_memory_summaries_user_session"),
    )

    user_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    source_session_id: Mapped[str] = mapped_column(String(36), nullable=False)
    summary_text: Mapped[str] = mapped_column(Text, nullable=False)
    vector: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    processed_version: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
