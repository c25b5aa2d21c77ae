"""
Vector database schemas.

Pydantic models for vector records and search results shared by all
vector store implementations.

Dependencies: pydantic
System role: Type definitions for vector operations
"""

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field

DOCUMENTS_NAMESPACE = "documents"
MEMORIES_NAMESPACE = "memories"

# Filter keys resolved against record columns; anything else matches metadata.
RECORD_FILTER_FIELDS = ("owner_id", "document_id")


class VectorRecord(BaseModel):
    """
    One stored vector.

    ``metadata`` holds what retrieval needs to rebuild a chunk or memory
    (document name, source label, offsets, ordinal, model version).
    """

    id: str = Field(description="Record id, unique within its namespace")
    owner_id: str = Field(description="Owning user; scopes queries")
    document_id: str | None = Field(default=None, description="Source document for chunk records")
    text: str = Field(default="", description="Chunk or summary text")
    vector: list[float] = Field(description="Embedding values")
    metadata: dict[str, Any] = Field(default_factory=dict, description="Equality-filterable metadata")
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Last write time; newer records win similarity ties",
    )

    def matches(self, filter: dict[str, Any] | None) -> bool:
        """Equality filter over owner_id, document_id and metadata keys."""
        if not filter:
            return True
        for key, expected in filter.items():
            actual = getattr(self, key) if key in RECORD_FILTER_FIELDS else self.metadata.get(key)
            if actual != expected:
                return False
        return True


class VectorSearchResult(BaseModel):
    """Single result from vector search."""

    record: VectorRecord = Field(description="Matched record")
    similarity_score: float = Field(description="Cosine similarity (-1.0..1.0)")

    @property
    def id(self) -> str:
        return self.record.id
