"""
Pipeline result model for document processing.

Represents the outcome of submitting a document to the ingestion pipeline.

Dependencies: pydantic
System role: Return type for IngestionPipeline.submit()
"""

from pydantic import BaseModel, Field

from ragengine.models.document import DocumentStatus, FailureKind


class PipelineResult(BaseModel):
    """Result of one ingestion submission."""

    document_id: str = Field(description="Document identifier")
    status: DocumentStatus | None = Field(default=None, description="Status after the submission")
    chunk_count: int = Field(default=0, description="Number of chunks indexed")
    processing_time_ms: float = Field(default=0.0, description="Total processing time in milliseconds")
    skipped: bool = Field(default=False, description="True when the submission was a no-op")
    failure_kind: FailureKind | None = Field(default=None, description="Set when processing failed")
    error: str | None = Field(default=None, description="Failure or skip reason")
