"""
Vector database boundary.

Exports:
  - VectorStore: Namespaced vector store interface
  - SQLVectorStore, InMemoryVectorStore: Implementations
  - VectorRecord, VectorSearchResult: Schemas
  - DOCUMENTS_NAMESPACE, MEMORIES_NAMESPACE: Namespace names
  - get_vector_store(): Factory
"""

from ragengine.boundary.vdb.base import VectorStore
from ragengine.boundary.vdb.memory_vector_store import InMemoryVectorStore
from ragengine.boundary.vdb.sql_vector_store import SQLVectorStore
from ragengine.boundary.vdb.vector_schemas import (
    DOCUMENTS_NAMESPACE,
    MEMORIES_NAMESPACE,
    VectorRecord,
    VectorSearchResult,
)
from ragengine.boundary.vdb.vector_store_factory import get_vector_store

__all__ = [
    "VectorStore",
    "SQLVectorStore",
    "InMemoryVectorStore",
    "VectorRecord",
    "VectorSearchResult",
    "DOCUMENTS_NAMESPACE",
    "MEMORIES_NAMESPACE",
    "get_vector_store",
]
