"""
Test suite for EmbeddingClient.

Covers order preservation across batches, retrying only failed items,
exhaustion and the non-retryable paths.

System role: Verification of the embedding client
"""

import pytest

from ragengine.boundary.embeddings.backend import is_retryable_error
from ragengine.boundary.embeddings.embedding_client import EmbeddingClient
from ragengine.core.exceptions import EmbeddingError, EmbeddingServiceUnavailable, RequestCancelledError
from ragengine.core.request_context import RequestContext
from fakes import FakeEmbeddingBackend

RULES = [
    ("alpha", [1.0, 0.0, 0.0]),
    ("beta", [0.0, 1.0, 0.0]),
    ("gamma", [0.0, 0.0, 1.0]),
]


def make_client(backend: FakeEmbeddingBackend, **overrides) -> EmbeddingClient:
    options = {"dimension": 3, "batch_size": 2, "max_attempts": 3, "backoff_initial": 0, "backoff_max": 0}
    options.update(overrides)
    return EmbeddingClient(backend, **options)


class TestEmbedMany:
    """Test suite for EmbeddingClient.embed_many."""

    async def test_embed_many_should_preserve_input_order_across_batches(self) -> None:
        # Arrange
        backend = FakeEmbeddingBackend(rules=RULES)
        client = make_client(backend)
        texts = ["gamma one", "alpha two", "beta three", "alpha four", "gamma five"]

        # Act
        vectors = await client.embed_many(texts)

        # Assert
        assert vectors == [backend.vector_for(t) for t in texts]
        assert len(backend.calls) == 3

    async def test_embed_many_should_return_empty_for_no_texts(self) -> None:
        backend = FakeEmbeddingBackend()

        assert await make_client(backend).embed_many([]) == []
        assert backend.calls == []

    async def test_embed_should_return_single_vector(self) -> None:
        client = make_client(FakeEmbeddingBackend(rules=RULES))

        assert await client.embed("beta") == [0.0, 1.0, 0.0]

    async def test_model_version_should_come_from_backend(self) -> None:
        client = make_client(FakeEmbeddingBackend(model_version="fake@3"))

        assert client.model_version == "fake@3"


class TestPartialRetry:
    async def test_only_failed_items_should_be_retried(self) -> None:
        # Arrange
        backend = FakeEmbeddingBackend(rules=RULES, flaky={"beta": 1})
        client = make_client(backend, batch_size=10)

        # Act
        vectors = await client.embed_many(["alpha", "beta", "gamma"])

        # Assert
        assert vectors == [[1.0, 0.0, 0.0], [0.0, 1.0, 0.0], [0.0, 0.0, 1.0]]
        assert backend.calls == [["alpha", "beta", "gamma"], ["beta"]]

    async def test_transient_batch_failure_should_retry_whole_batch(self) -> None:
        backend = FakeEmbeddingBackend(rules=RULES, fail_calls=1)
        client = make_client(backend, batch_size=10)

        vectors = await client.embed_many(["alpha", "beta"])

        assert vectors == [[1.0, 0.0, 0.0], [0.0, 1.0, 0.0]]
        assert len(backend.calls) == 2

    async def test_exhausted_retries_should_raise_service_unavailable(self) -> None:
        # Arrange
        backend = FakeEmbeddingBackend(rules=RULES, flaky={"beta": 10})
        client = make_client(backend, batch_size=10, max_attempts=3)

        # Act & Assert
        with pytest.raises(EmbeddingServiceUnavailable) as exc_info:
            await client.embed_many(["alpha", "beta"])

        assert exc_info.value.retryable is True
        assert len(backend.calls) == 3
        assert backend.calls[1:] == [["beta"], ["beta"]]


class TestPermanentFailures:
    async def test_rejected_item_should_raise_embedding_error(self) -> None:
        backend = FakeEmbeddingBackend(rules=RULES, rejected={"beta"})
        client = make_client(backend, batch_size=10)

        with pytest.raises(EmbeddingError, match="rejected"):
            await client.embed_many(["alpha", "beta"])
        assert len(backend.calls) == 1

    async def test_wrong_dimension_should_raise_embedding_error(self) -> None:
        backend = FakeEmbeddingBackend(default=[1.0, 0.0])
        client = make_client(backend)

        with pytest.raises(EmbeddingError, match="dimension"):
            await client.embed("anything")

    async def test_cancelled_context_should_stop_before_calling_backend(self) -> None:
        backend = FakeEmbeddingBackend()
        ctx = RequestContext()
        ctx.cancel()

        with pytest.raises(RequestCancelledError):
            await make_client(backend).embed("anything", ctx)
        assert backend.calls == []

    def test_batch_size_should_be_positive(self) -> None:
        with pytest.raises(ValueError):
            make_client(FakeEmbeddingBackend(), batch_size=0)


class TestRetryClassification:
    def test_rate_limit_status_should_be_retryable(self) -> None:
        error = Exception("slow down")
        error.status_code = 429

        assert is_retryable_error(error) is True

    def test_bad_request_status_should_not_be_retryable(self) -> None:
        error = Exception("bad input")
        error.status_code = 400

        assert is_retryable_error(error) is False

    def test_timeouts_should_be_retryable(self) -> None:
        assert is_retryable_error(TimeoutError()) is True
