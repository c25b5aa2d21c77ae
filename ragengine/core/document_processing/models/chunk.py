"""
Chunk domain model.

Represents an immutable, embedded span of a source document produced by
the chunking stage and read back by retrieval.

Dependencies: pydantic
System role: Document chunk data structure
"""

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Chunk(BaseModel):
    """Document chunk carrying its embedding and provenance."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Chunk identifier, unique per ingestion generation")
    document_id: str = Field(description="Owning document")
    ordinal: int = Field(ge=0, description="Position within the document, unique per document")
    offset_start: int = Field(ge=0, description="Start offset into the extracted text")
    offset_end: int = Field(ge=0, description="End offset (exclusive) into the extracted text")
    text: str = Field(description="Chunk text content")
    source_label: str = Field(description="Human-readable location, e.g. 'page 2'")
    vector: list[float] | None = Field(default=None, description="Embedding vector")
    embedding_model_version: str | None = Field(default=None, description="Model that produced the vector")

    @property
    def dim(self) -> int:
        return len(self.vector) if self.vector is not None else 0

    @model_validator(mode="after")
    def _check_span(self) -> "Chunk":
        if self.offset_end < self.offset_start:
            raise ValueError("offset_end must not precede offset_start")
        return self
