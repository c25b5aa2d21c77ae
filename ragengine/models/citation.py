"""
Citation domain model.

Represents a citation to a source chunk for grounded answers. The wire
shape is camelCase: {documentName, sourceLabel, snippetText, score}.

Dependencies: pydantic
System role: Citation data structure
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Citation(BaseModel):
    """Citation model for source attribution."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    document_name: str = Field(description="Source document name")
    source_label: str = Field(description="Location inside the document (page, lines)")
    snippet_text: str = Field(description="Excerpt of the cited chunk")
    score: float = Field(description="Retrieval similarity score")

    def to_wire(self) -> dict:
        """Serialize with camelCase keys for clients and persisted messages."""
        return self.model_dump(by_alias=True)
