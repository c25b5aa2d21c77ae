"""
Batched embedding client.

Splits requests into batches, runs batches concurrently under a
per-client semaphore and retries only the items that failed.

Dependencies: tenacity
System role: Embedding Client shared by ingestion, retrieval and memory
"""

import asyncio
import logging

from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential_jitter

from ragengine.boundary.embeddings.backend import EmbeddingBackend
from ragengine.core.exceptions import EmbeddingError, EmbeddingServiceUnavailable, TransientUpstreamError
from ragengine.core.request_context import RequestContext

logger = logging.getLogger(__name__)


class _PendingItems(Exception):
    """Some items of a batch still need a vector."""

    def __init__(self, count: int, last_error: str | None) -> None:
        self.count = count
        self.last_error = last_error
        super().__init__(f"{count} items pending: {last_error}")


class EmbeddingClient:
    """
    Order-preserving embedding client.

    Attributes:
        dimension: Expected vector length
        model_version: Identifier stored next to each vector
    """

    def __init__(
        self,
        backend: EmbeddingBackend,
        dimension: int,
        batch_size: int = 64,
        max_concurrent_requests: int = 4,
        max_attempts: int = 5,
        backoff_initial: float = 0.5,
        backoff_max: float = 20.0,
    ) -> None:
        if batch_size < 1:
            raise ValueError("batch_size must be >= 1")
        self._backend = backend
        self.dimension = dimension
        self._batch_size = batch_size
        self._semaphore = asyncio.Semaphore(max_concurrent_requests)
        self._max_attempts = max_attempts
        self._backoff_initial = backoff_initial
        self._backoff_max = backoff_max

    @property
    def model_version(self) -> str:
        return self._backend.model_version

    async def embed(self, text: str, ctx: RequestContext | None = None) -> list[float]:
        """Embed a single text."""
        vectors = await self.embed_many([text], ctx)
        return vectors[0]

    async def embed_many(self, texts: list[str], ctx: RequestContext | None = None) -> list[list[float]]:
        """
        Embed texts, returning vectors in input order.

        Args:
            texts: Texts to embed
            ctx: Optional request context checked between attempts

        Returns:
            One vector per input text

        Raises:
            EmbeddingServiceUnavailable: Retries exhausted for some item
            EmbeddingError: An item was rejected permanently or a vector has
                the wrong dimension
        """
        if not texts:
            return []

        batches = [
            texts[start:start + self._batch_size]
            for start in range(0, len(texts), self._batch_size)
        ]
        results = await asyncio.gather(*(self._embed_batch(batch, ctx) for batch in batches))

        vectors: list[list[float]] = []
        for batch_vectors in results:
            vectors.extend(batch_vectors)
        return vectors

    async def _embed_batch(self, texts: list[str], ctx: RequestContext | None) -> list[list[float]]:
        results: list[list[float] | None] = [None] * len(texts)
        pending = list(range(len(texts)))

        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self._max_attempts),
                wait=wait_exponential_jitter(initial=self._backoff_initial, max=self._backoff_max),
                retry=retry_if_exception_type(_PendingItems),
                reraise=True,
            ):
                with attempt:
                    if ctx is not None:
                        ctx.raise_if_cancelled()
                    await self._attempt(texts, pending, results)
        except _PendingItems as e:
            logger.error(
                f"{__name__}:_embed_batch - retries exhausted",
                extra={"pending": e.count, "attempts": self._max_attempts, "error": e.last_error},
            )
            raise EmbeddingServiceUnavailable(
                f"Embedding service unavailable after {self._max_attempts} attempts: {e.last_error}",
                failed_count=e.count,
            ) from e

        return results  # type: ignore[return-value]

    async def _attempt(
        self,
        texts: list[str],
        pending: list[int],
        results: list[list[float] | None],
    ) -> None:
        """Embed the pending items once; shrink ``pending`` in place."""
        async with self._semaphore:
            try:
                outcomes = await self._backend.embed_batch([texts[i] for i in pending])
            except TransientUpstreamError as e:
                raise _PendingItems(len(pending), str(e)) from e

        if len(outcomes) != len(pending):
            raise _PendingItems(len(pending), "backend returned a mismatched batch")

        still_pending: list[int] = []
        last_error: str | None = None
        for index, outcome in zip(pending, outcomes):
            if outcome.ok:
                if len(outcome.vector) != self.dimension:
                    raise EmbeddingError(
                        f"Embedding has dimension {len(outcome.vector)}, expected {self.dimension}"
                    )
                results[index] = outcome.vector
            elif not outcome.retryable:
                raise EmbeddingError(f"Embedding rejected: {outcome.error}")
            else:
                still_pending.append(index)
                last_error = outcome.error

        pending[:] = still_pending
        if still_pending:
            logger.warning(
                f"{__name__}:_attempt - retrying failed items",
                extra={"failed": len(still_pending), "error": last_error},
            )
            raise _PendingItems(len(still_pending), last_error)
