"""
Embedding boundary: backends and the batching client.

Exports:
  - EmbeddingClient: Order-preserving, batched, rate-limited embedding client
  - EmbeddingBackend, EmbeddingOutcome: Backend seam with per-item outcomes
  - LangChainEmbeddingBackend: Adapter over LangChain Embeddings
  - FixedDimensionEmbeddings: Gemini embeddings with fixed output dimensionality
"""

from ragengine.boundary.embeddings.backend import (
    EmbeddingBackend,
    EmbeddingOutcome,
    LangChainEmbeddingBackend,
)
from ragengine.boundary.embeddings.embedding_client import EmbeddingClient

__all__ = [
    "EmbeddingBackend",
    "EmbeddingOutcome",
    "LangChainEmbeddingBackend",
    "EmbeddingClient",
]
