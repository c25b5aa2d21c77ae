"""
Test suite for Retriever.

Includes the scanned-report scenario: a three-page PDF ingested through
the OCR path, then queried so that only its second page clears the
similarity threshold.

System role: Verification of retrieval with citations
"""

import math

import pytest

from ragengine.boundary.vdb.vector_schemas import DOCUMENTS_NAMESPACE, MEMORIES_NAMESPACE, VectorRecord
from ragengine.core.exceptions import ValidationError
from ragengine.models.document import DocumentStatus
from fakes import blank_pdf

QUERY = [1.0, 0.0, 0.0]


def chunk_record(record_id: str, vector: list[float], owner_id: str = "user-1", label: str = "page 1") -> VectorRecord:
    return VectorRecord(
        id=record_id,
        owner_id=owner_id,
        document_id="doc-1",
        text=f"chunk {record_id}",
        vector=vector,
        metadata={"document_name": "doc.txt", "source_label": label, "ordinal": 0, "offset_start": 0, "offset_end": 7},
    )


@pytest.fixture
def retriever(container, fake_embeddings):
    fake_embeddings.rules = [("revenue", QUERY)]
    return container.retriever


class TestRetrieve:
    """Test suite for Retriever.retrieve."""

    async def test_retrieve_should_return_at_most_k_hits_in_score_order(self, retriever, vector_store) -> None:
        # Arrange
        await vector_store.upsert_many(
            DOCUMENTS_NAMESPACE,
            [
                chunk_record("c-low", [0.6, 0.8, 0.0]),
                chunk_record("c-top", [1.0, 0.0, 0.0]),
                chunk_record("c-mid", [0.8, 0.6, 0.0]),
            ],
        )

        # Act
        result = await retriever.retrieve("revenue?", "user-1", k=2)

        # Assert
        assert [hit.chunk.id for hit in result.hits] == ["c-top", "c-mid"]
        assert [c.score for c in result.citations] == [1.0, 0.8]
        assert result.grounded is True

    async def test_low_similarity_should_report_no_grounding(self, retriever, vector_store) -> None:
        await vector_store.upsert(DOCUMENTS_NAMESPACE, chunk_record("c-far", [0.1, 1.0, 0.0]))

        result = await retriever.retrieve("revenue?", "user-1", k=5)

        assert result.grounded is False
        assert result.hits == []
        assert result.citations == []

    async def test_retrieve_should_not_see_other_users_documents(self, retriever, vector_store) -> None:
        await vector_store.upsert(DOCUMENTS_NAMESPACE, chunk_record("c-other", QUERY, owner_id="user-2"))

        result = await retriever.retrieve("revenue?", "user-1")

        assert result.hits == []

    @pytest.mark.parametrize(("query", "k"), [("", 5), ("   ", 5), ("revenue", 0), ("revenue", 101)])
    async def test_invalid_arguments_should_raise(self, retriever, query: str, k: int) -> None:
        with pytest.raises(ValidationError):
            await retriever.retrieve(query, "user-1", k=k)


class TestRecallMemories:
    async def test_recall_should_return_relevant_user_memories(self, retriever, vector_store) -> None:
        # Arrange
        await vector_store.upsert_many(
            MEMORIES_NAMESPACE,
            [
                VectorRecord(id="user-1:s1", owner_id="user-1", text="Discussed revenue.", vector=QUERY,
                             metadata={"session_id": "s1"}),
                VectorRecord(id="user-1:s2", owner_id="user-1", text="Discussed hiring.", vector=[0.0, 1.0, 0.0],
                             metadata={"session_id": "s2"}),
                VectorRecord(id="user-2:s3", owner_id="user-2", text="Other user.", vector=QUERY,
                             metadata={"session_id": "s3"}),
            ],
        )

        # Act
        memories = await retriever.recall_memories("user-1", QUERY, k=3)

        # Assert
        assert [(m.session_id, m.summary_text) for m in memories] == [("s1", "Discussed revenue.")]

    async def test_recall_without_vector_should_be_empty(self, retriever) -> None:
        assert await retriever.recall_memories("user-1", [], k=3) == []


class TestScannedReportScenario:
    """A scanned report.pdf whose second page answers the question."""

    async def test_only_page_two_should_be_cited(
        self, container, create_document, fake_object_store, fake_ocr, fake_embeddings
    ) -> None:
        # Arrange
        page_two = [0.83, math.sqrt(1 - 0.83**2), 0.0]
        fake_ocr.pages = [
            "Company overview and mission.",
            "Quarterly revenue increased twelve percent.",
            "Outlook for hiring next year.",
        ]
        fake_embeddings.rules = [
            ("quarterly revenue", page_two),
            ("overview", [0.2, math.sqrt(1 - 0.2**2), 0.0]),
            ("outlook", [0.4, 0.0, math.sqrt(1 - 0.4**2)]),
            ("revenue", QUERY),
        ]
        fake_object_store.objects["s3://uploads/report.pdf"] = blank_pdf(3)
        document_id = await create_document(
            source_uri="s3://uploads/report.pdf", name="report.pdf", mime_type="application/pdf"
        )

        # Act
        ingested = await container.pipeline.submit(document_id)
        result = await container.retriever.retrieve("How did revenue change?", "user-1", k=5)

        # Assert
        assert ingested.status == DocumentStatus.PROCESSED
        assert ingested.chunk_count == 3
        assert len(result.hits) == 1
        [citation] = result.citations
        assert citation.document_name == "report.pdf"
        assert citation.source_label == "page 2"
        assert citation.score == pytest.approx(0.83, abs=1e-4)
        assert citation.to_wire()["documentName"] == "report.pdf"
