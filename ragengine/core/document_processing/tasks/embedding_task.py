"""
Chunk embedding task.

Dependencies: ragengine.boundary.embeddings
System role: Third stage of document ingestion pipeline
"""

from ragengine.boundary.embeddings.embedding_client import EmbeddingClient
from ragengine.core.document_processing.models import Chunk


class EmbeddingTask:
    """Attach embedding vectors to chunks."""

    def __init__(self, client: EmbeddingClient) -> None:
        self._client = client

    async def embed(self, chunks: list[Chunk]) -> list[Chunk]:
        """
        Embed chunk texts, preserving order.

        Raises:
            EmbeddingServiceUnavailable: Retries exhausted
            EmbeddingError: Permanent rejection
        """
        vectors = await self._client.embed_many([chunk.text for chunk in chunks])
        return [
            chunk.model_copy(update={"vector": vector, "embedding_model_version": self._client.model_version})
            for chunk, vector in zip(chunks, vectors)
        ]
