"""
In-memory vector store for local development and tests.

Dependencies: asyncio
System role: Non-durable VectorStore implementation
"""

import asyncio
import logging
from collections.abc import Iterable
from datetime import datetime, timezone
from typing import Any

from ragengine.boundary.vdb.base import VectorStore
from ragengine.boundary.vdb.similarity import rank
from ragengine.boundary.vdb.vector_schemas import VectorRecord, VectorSearchResult

logger = logging.getLogger(__name__)


class InMemoryVectorStore(VectorStore):
    """Dict-backed store; a lock keeps each call atomic."""

    def __init__(self) -> None:
        self._namespaces: dict[str, dict[str, VectorRecord]] = {}
        self._lock = asyncio.Lock()

    async def upsert_many(self, namespace: str, records: list[VectorRecord]) -> None:
        now = datetime.now(timezone.utc)
        async with self._lock:
            bucket = self._namespaces.setdefault(namespace, {})
            for record in records:
                bucket[record.id] = record.model_copy(update={"updated_at": now})

    async def query(
        self,
        namespace: str,
        vector: list[float],
        k: int,
        filter: dict[str, Any] | None = None,
    ) -> list[VectorSearchResult]:
        async with self._lock:
            candidates = [r for r in self._namespaces.get(namespace, {}).values() if r.matches(filter)]
        return rank(candidates, vector, k)

    async def delete(self, namespace: str, ids: Iterable[str]) -> int:
        async with self._lock:
            bucket = self._namespaces.get(namespace, {})
            removed = 0
            for record_id in ids:
                if bucket.pop(record_id, None) is not None:
                    removed += 1
            return removed

    async def delete_where(
        self,
        namespace: str,
        filter: dict[str, Any],
        keep_ids: Iterable[str] = (),
    ) -> int:
        keep = set(keep_ids)
        async with self._lock:
            bucket = self._namespaces.get(namespace, {})
            doomed = [rid for rid, r in bucket.items() if rid not in keep and r.matches(filter)]
            for record_id in doomed:
                del bucket[record_id]
        if doomed:
            logger.info(f"{__name__}:delete_where - pruned {len(doomed)} records from {namespace}")
        return len(doomed)

    async def count(self, namespace: str, filter: dict[str, Any] | None = None) -> int:
        async with self._lock:
            return sum(1 for r in self._namespaces.get(namespace, {}).values() if r.matches(filter))
