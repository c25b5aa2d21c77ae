"""
Retrieval engine.

Embeds a query once, runs one owner-scoped vector query and assembles
citations. An empty result is reported as "no grounding", not as an error.

Dependencies: ragengine.boundary.vdb, ragengine.boundary.embeddings
System role: RAG retrieval business logic
"""

import logging

from pydantic import BaseModel, Field

from ragengine.boundary.embeddings.embedding_client import EmbeddingClient
from ragengine.boundary.vdb.base import VectorStore
from ragengine.boundary.vdb.vector_schemas import DOCUMENTS_NAMESPACE, MEMORIES_NAMESPACE
from ragengine.core.citation_builder import CitationBuilder
from ragengine.core.document_processing.models import Chunk
from ragengine.core.document_processing.tasks.vector_store_task import record_to_chunk
from ragengine.core.exceptions import ValidationError
from ragengine.core.request_context import RequestContext
from ragengine.models.citation import Citation

logger = logging.getLogger(__name__)

MAX_K = 100


class RetrievedChunk(BaseModel):
    """A chunk with its similarity to the query."""

    chunk: Chunk
    similarity_score: float


class RetrievalResult(BaseModel):
    """
    Ranked hits and their citations.

    ``grounded`` is False when nothing cleared the similarity threshold.
    """

    hits: list[RetrievedChunk] = Field(default_factory=list)
    citations: list[Citation] = Field(default_factory=list)
    query_vector: list[float] = Field(default_factory=list, repr=False)

    @property
    def grounded(self) -> bool:
        return bool(self.hits)


class RecalledMemory(BaseModel):
    """A long-term memory summary relevant to the query."""

    session_id: str
    summary_text: str
    similarity_score: float


class Retriever:
    """Retrieval business logic."""

    def __init__(
        self,
        embedding_client: EmbeddingClient,
        vector_store: VectorStore,
        citation_builder: CitationBuilder | None = None,
        min_similarity: float = 0.5,
        default_k: int = 5,
    ) -> None:
        """
        Initialize retriever.

        Args:
            embedding_client: Query embedder
            vector_store: Store holding document chunks and memories
            citation_builder: Citation formatter
            min_similarity: Hits scoring below this are discarded
            default_k: k used when the caller passes none
        """
        self._embedding_client = embedding_client
        self._vector_store = vector_store
        self._citation_builder = citation_builder or CitationBuilder()
        self._min_similarity = min_similarity
        self._default_k = default_k

    async def retrieve(
        self,
        query: str,
        user_id: str,
        k: int | None = None,
        ctx: RequestContext | None = None,
    ) -> RetrievalResult:
        """
        Retrieve the user's most relevant chunks.

        Args:
            query: Natural-language query
            user_id: Owner whose documents are searched
            k: Maximum hits (1..100)
            ctx: Request context

        Returns:
            RetrievalResult ordered by descending similarity, at most k hits

        Raises:
            ValidationError: Empty query or k out of range
        """
        k = self._default_k if k is None else k
        if not query or not query.strip():
            raise ValidationError("Query must not be empty", field="query")
        if not 1 <= k <= MAX_K:
            raise ValidationError(f"k must be between 1 and {MAX_K}, got {k}", field="k")

        if ctx is not None:
            ctx.raise_if_cancelled()
        query_vector = await self._embedding_client.embed(query, ctx)
        results = await self._vector_store.query(
            DOCUMENTS_NAMESPACE,
            query_vector,
            k,
            filter={"owner_id": user_id},
        )
        kept = [r for r in results if r.similarity_score >= self._min_similarity]

        logger.info(
            f"{__name__}:retrieve - user_id={user_id}, k={k}, candidates={len(results)}, kept={len(kept)}"
        )
        return RetrievalResult(
            hits=[RetrievedChunk(chunk=record_to_chunk(r.record), similarity_score=r.similarity_score) for r in kept],
            citations=self._citation_builder.build_citations(kept),
            query_vector=query_vector,
        )

    async def embed_query(self, query: str, ctx: RequestContext | None = None) -> list[float]:
        """Embed a query without searching (memory recall in conversational turns)."""
        return await self._embedding_client.embed(query, ctx)

    async def recall_memories(
        self,
        user_id: str,
        query_vector: list[float],
        k: int = 3,
    ) -> list[RecalledMemory]:
        """
        Recall the user's long-term memories closest to an already embedded query.
        """
        if k <= 0 or not query_vector:
            return []
        results = await self._vector_store.query(
            MEMORIES_NAMESPACE,
            query_vector,
            k,
            filter={"owner_id": user_id},
        )
        return [
            RecalledMemory(
                session_id=str(r.record.metadata.get("session_id", "")),
                summary_text=r.record.text,
                similarity_score=r.similarity_score,
            )
            for r in results
            if r.similarity_score >= self._min_similarity
        ]
