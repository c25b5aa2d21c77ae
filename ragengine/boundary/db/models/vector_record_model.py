"""
Vector record ORM model.

Backing table of the SQL vector store. Vectors are stored as JSON arrays
and ranked in process, which keeps the schema portable between
PostgreSQL and SQLite.

Dependencies: sqlalchemy, ragengine.boundary.db.base
System role: Durable vector storage
"""

from datetime import datetime

from sqlalchemy import JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ragengine.boundary.db.base import Base, UTCDateTime, utcnow


class VectorRecordModel(Base):
    """
    Vector record keyed by (namespace, id).

    Attributes:
        namespace: Logical partition ("documents", "memories")
        id: Record id, unique within the namespace
        owner_id: Owning user, used for scoped queries
        document_id: Source document (chunks only)
        text: Chunk or summary text
        vector: Embedding values
        record_metadata: Free-form equality-filterable metadata
        updated_at: Last upsert time; breaks similarity ties
    """

    __tablename__ = "vector_records"

    namespace: Mapped[str] = mapped_column(String(64), primary_key=True)
    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    owner_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    document_id: Mapped[str | None] = mapped_column(String(36), nullable=True, index=True)
    text: Mapped[str] = mapped_column(Text, nullable=False, default="")
    vector: Mapped[list] = mapped_column(JSON, nullable=False)
    record_metadata: Mapped[dict] = mapped_column("metadata", JSON, nullable=False, default=dict)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, default=utcnow)
