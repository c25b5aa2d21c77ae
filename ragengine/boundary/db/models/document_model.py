"""
Document ORM model.

Represents a source document owned by a user and the state of its
ingestion run.

Dependencies: sqlalchemy, ragengine.boundary.db.base
System role: Document metadata persistence and processing status tracking
"""

from sqlalchemy import Enum, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ragengine.boundary.db.base import Base, TimestampMixin, UUIDMixin
from ragengine.models.document import DocumentStatus, FailureKind


class DocumentModel(Base, UUIDMixin, TimestampMixin):
    """
    Document ORM model for tracking ingestion lifecycle.

    Status moves uploaded -> extracting -> chunking -> embedding -> processed,
    with failed reachable from any stage. Every status write bumps
    ``version``; writers compare-and-set against the version they read.

    Attributes:
        id: UUID primary key
        owner_id: User that owns the document; scopes retrieval
        source_uri: Object store location (s3://bucket/key or file://path)
        name: Display name used in citations
        mime_type: Content type driving extraction
        status: Processing lifecycle state
        failure_kind: retryable or terminal, set when status is failed
        error_message: Error details if processing failed
        attempts: Number of ingestion attempts started
        generation: Ingestion run counter; chunk ids derive from it
        chunk_count: Chunks indexed by the last successful run
        version: Optimistic-concurrency counter
    """

    __tablename__ = "documents"

    owner_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    source_uri: Mapped[str] = mapped_column(String(1024), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    mime_type: Mapped[str] = mapped_column(String(128), nullable=False)

    status: Mapped[DocumentStatus] = mapped_column(
        Enum(DocumentStatus, native_enum=False, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=DocumentStatus.UPLOADED,
        index=True,
    )
    failure_kind: Mapped[FailureKind | None] = mapped_column(
        Enum(FailureKind, native_enum=False, values_callable=lambda e: [m.value for m in e]),
        nullable=True,
        default=None,
    )
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True, default=None)

    attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    generation: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    chunk_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        return f"<DocumentModel id={self.id} status={self.status.value} v{self.version}>"
