"""
Document search tool.

Semantic search over the user's processed documents through the
Retriever, returning citation-shaped results.

Dependencies: ragengine.core.retriever
System role: Agent tool for grounded lookups
"""

from pydantic import BaseModel, Field

from ragengine.core.agentic_system.planner.tool_registry import AgentTool, CapabilityClass, ToolContext
from ragengine.core.retriever import Retriever


class DocumentSearchInput(BaseModel):
    query: str = Field(min_length=1, description="What to look for")
    k: int = Field(default=5, ge=1, le=100, description="Maximum results")


class DocumentSearchHit(BaseModel):
    document_name: str
    source_label: str
    snippet: str
    score: float


class DocumentSearchOutput(BaseModel):
    grounded: bool
    results: list[DocumentSearchHit] = Field(default_factory=list)


class DocumentSearchTool(AgentTool):
    name = "document_search"
    description = "Search the user's uploaded documents and return the most relevant passages with sources."
    capability = CapabilityClass.READ_ONLY
    InputModel = DocumentSearchInput
    OutputModel = DocumentSearchOutput

    def __init__(self, retriever: Retriever) -> None:
        self._retriever = retriever

    async def run(self, data: DocumentSearchInput, context: ToolContext) -> DocumentSearchOutput:
        result = await self._retriever.retrieve(data.query, context.user_id, data.k, context.request)
        return DocumentSearchOutput(
            grounded=result.grounded,
            results=[
                DocumentSearchHit(
                    document_name=c.document_name,
                    source_label=c.source_label,
                    snippet=c.snippet_text,
                    score=c.score,
                )
                for c in result.citations
            ],
        )
