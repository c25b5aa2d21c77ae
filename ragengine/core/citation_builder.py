"""
Citation extraction and formatting.

Builds citations from retrieval results for answer grounding. Marker
``[n]`` in an answer refers to the n-th citation.

Dependencies: ragengine.models, ragengine.boundary.vdb
System role: Citation formatting business logic
"""

from ragengine.boundary.vdb.vector_schemas import VectorSearchResult
from ragengine.models.citation import Citation

SNIPPET_LENGTH = 200


class CitationBuilder:
    """Citation building business logic."""

    def __init__(self, snippet_length: int = SNIPPET_LENGTH) -> None:
        """
        Initialize citation builder.

        Args:
            snippet_length: Maximum snippet length in characters
        """
        self._snippet_length = snippet_length

    def build_citations(self, results: list[VectorSearchResult]) -> list[Citation]:
        """
        Build citations from search results, preserving rank order.

        Citation ``n`` (1-based) corresponds to marker ``[n]`` in the prompt.
        """
        return [self.format_citation(result) for result in results]

    def format_citation(self, result: VectorSearchResult) -> Citation:
        metadata = result.record.metadata
        return Citation(
            document_name=str(metadata.get("document_name") or "unknown"),
            source_label=str(metadata.get("source_label") or ""),
            snippet_text=self._snippet(result.record.text),
            score=round(result.similarity_score, 4),
        )

    def _snippet(self, text: str) -> str:
        text = " ".join(text.split())
        if len(text) <= self._snippet_length:
            return text
        return text[: self._snippet_length - 3].rstrip() + "..."
