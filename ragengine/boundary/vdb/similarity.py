"""
Cosine ranking shared by the vector store implementations.

Order: similarity descending, then ``updated_at`` descending, then id,
so equal-score results are deterministic.
"""

import heapq
import math
from collections.abc import Iterable

from ragengine.boundary.vdb.vector_schemas import VectorRecord, VectorSearchResult
from ragengine.core.exceptions import VectorStoreError


def cosine_similarity(a: list[float], b: list[float]) -> float:
    if len(a) != len(b):
        raise VectorStoreError(
            f"Vector dimension mismatch: {len(a)} != {len(b)}",
            operation="query",
        )
    dot = math.fsum(x * y for x, y in zip(a, b))
    norm_a = math.sqrt(math.fsum(x * x for x in a))
    norm_b = math.sqrt(math.fsum(y * y for y in b))
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0
    return dot / (norm_a * norm_b)


def _sort_key(result: VectorSearchResult) -> tuple:
    return (-result.similarity_score, -result.record.updated_at.timestamp(), result.record.id)


def rank(records: Iterable[VectorRecord], query: list[float], k: int) -> list[VectorSearchResult]:
    """Return the top ``k`` records by cosine similarity to ``query``."""
    if k <= 0:
        return []
    scored = (
        VectorSearchResult(record=record, similarity_score=cosine_similarity(query, record.vector))
        for record in records
    )
    return heapq.nsmallest(k, scored, key=_sort_key)
