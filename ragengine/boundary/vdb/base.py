"""
Vector store interface.

Dependencies: None
System role: Contract shared by SQL and in-memory vector stores
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import Any

from ragengine.boundary.vdb.vector_schemas import VectorRecord, VectorSearchResult


class VectorStore(ABC):
    """
    Namespaced vector store.

    Upserts replace by (namespace, id). A caller that awaited a write sees
    it in its next query.
    """

    async def upsert(self, namespace: str, record: VectorRecord) -> None:
        await self.upsert_many(namespace, [record])

    @abstractmethod
    async def upsert_many(self, namespace: str, records: list[VectorRecord]) -> None:
        """Insert or replace records."""

    @abstractmethod
    async def query(
        self,
        namespace: str,
        vector: list[float],
        k: int,
        filter: dict[str, Any] | None = None,
    ) -> list[VectorSearchResult]:
        """
        Return at most ``k`` results ranked by descending cosine similarity.

        Args:
            namespace: Partition to search
            vector: Query embedding
            k: Maximum results
            filter: Equality filter over owner_id, document_id and metadata keys
        """

    @abstractmethod
    async def delete(self, namespace: str, ids: Iterable[str]) -> int:
        """Delete records by id; returns the number removed."""

    @abstractmethod
    async def delete_where(
        self,
        namespace: str,
        filter: dict[str, Any],
        keep_ids: Iterable[str] = (),
    ) -> int:
        """Delete records matching ``filter`` except ``keep_ids``; returns the number removed."""

    @abstractmethod
    async def count(self, namespace: str, filter: dict[str, Any] | None = None) -> int:
        """Number of records matching ``filter``."""
