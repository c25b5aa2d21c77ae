"""
Embedding backends.

A backend embeds one batch and reports an outcome per input item, so the
client can retry only what failed.

Dependencies: langchain_core
System role: Embedding service seam
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

from langchain_core.embeddings import Embeddings

logger = logging.getLogger(__name__)

_RETRYABLE_STATUS = {408, 429, 500, 502, 503, 504}
_RETRYABLE_NAMES = (
    "ResourceExhausted",
    "ServiceUnavailable",
    "DeadlineExceeded",
    "InternalServerError",
    "TooManyRequests",
    "Timeout",
    "Connection",
)


@dataclass(frozen=True)
class EmbeddingOutcome:
    """Result for one input item: a vector, or an error with a retry hint."""

    vector: list[float] | None = None
    error: str | None = None
    retryable: bool = True

    @property
    def ok(self) -> bool:
        return self.vector is not None


class EmbeddingBackend(ABC):
    """Embedding service adapter."""

    model_version: str = "unknown"

    @abstractmethod
    async def embed_batch(self, texts: list[str]) -> list[EmbeddingOutcome]:
        """
        Embed ``texts`` and return one outcome per item, in input order.
        """


def is_retryable_error(error: BaseException) -> bool:
    """
    Classify an upstream exception as transient.

    Looks at HTTP-ish status attributes first, then at the exception type
    name (google.api_core and httpx naming). Unknown errors count as
    transient; a client that gives up raises EmbeddingServiceUnavailable.
    """
    for attr in ("status_code", "code", "status"):
        status = getattr(error, attr, None)
        if isinstance(status, int):
            return status in _RETRYABLE_STATUS
    if isinstance(error, (TimeoutError, ConnectionError)):
        return True
    name = type(error).__name__
    if any(marker in name for marker in _RETRYABLE_NAMES):
        return True
    if name in ("InvalidArgument", "BadRequest", "PermissionDenied", "Unauthenticated", "ValueError"):
        return False
    return True


class LangChainEmbeddingBackend(EmbeddingBackend):
    """
    Adapter over any LangChain ``Embeddings``.

    LangChain embeds a batch all-or-nothing, so a failure is reported for
    every item of the batch.
    """

    def __init__(self, embeddings: Embeddings, model_version: str) -> None:
        self._embeddings = embeddings
        self.model_version = model_version

    async def embed_batch(self, texts: list[str]) -> list[EmbeddingOutcome]:
        try:
            vectors = await asyncio.to_thread(self._embeddings.embed_documents, texts)
        except Exception as e:
            retryable = is_retryable_error(e)
            logger.warning(
                f"{__name__}:embed_batch - batch of {len(texts)} failed",
                extra={"error": str(e), "error_type": type(e).__name__, "retryable": retryable},
            )
            return [EmbeddingOutcome(error=str(e), retryable=retryable) for _ in texts]

        return [EmbeddingOutcome(vector=list(vector)) for vector in vectors]
