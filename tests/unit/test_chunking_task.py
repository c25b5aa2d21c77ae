"""
Test suite for ChunkingTask.

Verifies chunk offsets against the extracted text, page-bounded
splitting, source labels and deterministic chunk ids.

System role: Verification of the chunking stage
"""

import pytest

from ragengine.core.document_processing.models import ExtractedPage, ExtractedText
from ragengine.core.document_processing.tasks.chunking_task import ChunkingTask, chunk_id, estimate_tokens

LINES = "\n".join(f"Line {i}: the quarterly report lists revenue, costs and headcount." for i in range(1, 41))


@pytest.fixture
def small_chunker() -> ChunkingTask:
    """Provide a chunker with ~120-character chunks."""
    return ChunkingTask(chunk_size_tokens=30, chunk_overlap_tokens=5)


@pytest.fixture
def plain_text() -> ExtractedText:
    return ExtractedText(pages=[ExtractedPage(text=LINES)], paginated=False)


@pytest.fixture
def paged_text() -> ExtractedText:
    return ExtractedText(
        pages=[
            ExtractedPage(number=1, text="Company overview and mission."),
            ExtractedPage(number=2, text="Quarterly revenue increased twelve percent."),
            ExtractedPage(number=3, text="Outlook for hiring next year."),
        ],
        paginated=True,
    )


class TestChunkingTaskInit:
    def test_init_should_reject_overlap_not_smaller_than_size(self) -> None:
        with pytest.raises(ValueError):
            ChunkingTask(chunk_size_tokens=50, chunk_overlap_tokens=50)

    def test_estimate_tokens_should_round_up(self) -> None:
        assert estimate_tokens("") == 0
        assert estimate_tokens("abcde") == 2


class TestChunkingTaskSplit:
    """Test suite for ChunkingTask.chunk."""

    def test_chunk_offsets_should_index_into_full_text(
        self, small_chunker: ChunkingTask, plain_text: ExtractedText
    ) -> None:
        # Act
        chunks = small_chunker.chunk(plain_text, "doc-1")

        # Assert
        assert len(chunks) > 1
        full_text = plain_text.full_text
        for chunk in chunks:
            assert full_text[chunk.offset_start:chunk.offset_end] == chunk.text

    def test_chunk_ordinals_should_be_dense_from_zero(
        self, small_chunker: ChunkingTask, plain_text: ExtractedText
    ) -> None:
        chunks = small_chunker.chunk(plain_text, "doc-1")

        assert [c.ordinal for c in chunks] == list(range(len(chunks)))
        assert all(c.document_id == "doc-1" for c in chunks)

    def test_chunk_should_respect_size_bound(self, small_chunker: ChunkingTask, plain_text: ExtractedText) -> None:
        chunks = small_chunker.chunk(plain_text, "doc-1")

        assert all(estimate_tokens(c.text) <= 30 for c in chunks)

    def test_unpaginated_chunks_should_use_line_labels(
        self, small_chunker: ChunkingTask, plain_text: ExtractedText
    ) -> None:
        chunks = small_chunker.chunk(plain_text, "doc-1")

        assert chunks[0].source_label.startswith("lines 1-")
        assert all(c.source_label.startswith("lines ") for c in chunks)

    def test_paginated_chunks_should_not_cross_pages(self, paged_text: ExtractedText) -> None:
        # Arrange
        chunker = ChunkingTask()

        # Act
        chunks = chunker.chunk(paged_text, "doc-2")

        # Assert
        assert [c.source_label for c in chunks] == ["page 1", "page 2", "page 3"]
        assert [c.text for c in chunks] == [page.text for page in paged_text.pages]
        assert [c.offset_start for c in chunks] == paged_text.page_starts()

    def test_chunk_should_keep_short_trailing_chunk(self) -> None:
        chunker = ChunkingTask(chunk_size_tokens=10, chunk_overlap_tokens=0)
        text = "A" * 40 + " end."
        extracted = ExtractedText(pages=[ExtractedPage(text=text)])

        chunks = chunker.chunk(extracted, "doc-3")

        assert chunks[-1].text.endswith("end.")

    def test_empty_pages_should_produce_no_chunks(self) -> None:
        extracted = ExtractedText(pages=[ExtractedPage(number=1, text="")], paginated=True)

        assert ChunkingTask().chunk(extracted, "doc-4") == []


class TestChunkIds:
    def test_same_input_should_yield_same_ids(self, small_chunker: ChunkingTask, plain_text: ExtractedText) -> None:
        first = small_chunker.chunk(plain_text, "doc-1", generation=1)
        second = small_chunker.chunk(plain_text, "doc-1", generation=1)

        assert [c.id for c in first] == [c.id for c in second]
        assert first == second

    def test_new_generation_should_yield_new_ids(
        self, small_chunker: ChunkingTask, plain_text: ExtractedText
    ) -> None:
        first = small_chunker.chunk(plain_text, "doc-1", generation=1)
        second = small_chunker.chunk(plain_text, "doc-1", generation=2)

        assert not {c.id for c in first} & {c.id for c in second}

    def test_chunk_id_should_differ_per_document(self) -> None:
        assert chunk_id("doc-a", 1, 0) != chunk_id("doc-b", 1, 0)
        assert chunk_id("doc-a", 1, 0) == chunk_id("doc-a", 1, 0)
