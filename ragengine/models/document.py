"""
Document domain models and schemas.

Status enums shared by the ORM model and the ingestion pipeline, plus the
API contract for ingestion requests.

Dependencies: pydantic
System role: Document API contracts
"""

import enum
from datetime import datetime

from pydantic import BaseModel, Field


class DocumentStatus(str, enum.Enum):
    """
    Document processing lifecycle states.

    UPLOADED: Raw bytes stored, awaiting ingestion
    EXTRACTING / CHUNKING / EMBEDDING: Pipeline stage in progress
    PROCESSED: Chunks indexed in the vector store, ready for retrieval
    FAILED: Processing error; failure_kind says whether a retry can help
    """

    UPLOADED = "uploaded"
    EXTRACTING = "extracting"
    CHUNKING = "chunking"
    EMBEDDING = "embedding"
    PROCESSED = "processed"
    FAILED = "failed"

    @property
    def is_in_progress(self) -> bool:
        return self in IN_PROGRESS_STATUSES


IN_PROGRESS_STATUSES = frozenset(
    {DocumentStatus.EXTRACTING, DocumentStatus.CHUNKING, DocumentStatus.EMBEDDING}
)


class FailureKind(str, enum.Enum):
    """Whether a failed document may succeed on a later attempt."""

    RETRYABLE = "retryable"
    TERMINAL = "terminal"


class DocumentStatusResponse(BaseModel):
    """Pollable ingestion status of one document."""

    document_id: str
    name: str
    status: DocumentStatus
    failure_kind: FailureKind | None = None
    error_message: str | None = None
    chunk_count: int = 0
    attempts: int = 0
    updated_at: datetime | None = None


class IngestAcceptedResponse(BaseModel):
    """Returned immediately when ingestion is triggered."""

    document_id: str
    status: DocumentStatus
    accepted: bool = Field(description="False when the request was a no-op")


class RegisterDocumentRequest(BaseModel):
    """Register an already stored object as a document awaiting ingestion."""

    owner_id: str = Field(min_length=1)
    source_uri: str = Field(min_length=1, description="s3://bucket/key or file:// path")
    mime_type: str = Field(min_length=1)
    name: str | None = Field(default=None, description="Display name (defaults to the last path segment)")
