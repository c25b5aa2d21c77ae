"""
Test suite for ExtractionTask.

Covers plain-text decoding, the OCR path for images and scanned PDFs,
and the permanent failures for empty, oversized, corrupt and unsupported
input.

System role: Verification of the extraction stage
"""

import pytest

from ragengine.core.document_processing.tasks.extraction_task import ExtractionTask, normalize_mime_type
from ragengine.core.exceptions import PermanentExtractionFailure
from fakes import FakeOcr, blank_pdf


class TestNormalizeMimeType:
    def test_should_drop_parameters_and_lowercase(self) -> None:
        assert normalize_mime_type("Text/Plain; charset=UTF-8") == "text/plain"


class TestTextExtraction:
    """Test suite for text/* documents."""

    async def test_extract_should_decode_utf8_with_bom(self) -> None:
        # Arrange
        task = ExtractionTask()
        data = "\ufeffFirst line\r\nSecond line".encode("utf-8")

        # Act
        extracted = await task.extract(data, "text/plain", "doc-1")

        # Assert
        assert extracted.paginated is False
        assert extracted.used_ocr is False
        assert extracted.full_text == "First line\nSecond line"

    async def test_extract_should_accept_markdown(self) -> None:
        extracted = await ExtractionTask().extract(b"# Title\n\nBody", "text/markdown")

        assert extracted.full_text.startswith("# Title")

    async def test_extract_should_reject_invalid_utf8(self) -> None:
        with pytest.raises(PermanentExtractionFailure):
            await ExtractionTask().extract(b"\xff\xfe\xfa", "text/plain", "doc-1")

    async def test_extract_should_reject_whitespace_only_text(self) -> None:
        with pytest.raises(PermanentExtractionFailure, match="no extractable text"):
            await ExtractionTask().extract(b"   \n\n  ", "text/plain", "doc-1")


class TestRejectedInput:
    async def test_extract_should_reject_empty_bytes(self) -> None:
        with pytest.raises(PermanentExtractionFailure, match="empty"):
            await ExtractionTask().extract(b"", "text/plain", "doc-1")

    async def test_extract_should_reject_oversized_document(self) -> None:
        task = ExtractionTask(max_document_bytes=10)

        with pytest.raises(PermanentExtractionFailure, match="limit"):
            await task.extract(b"x" * 11, "text/plain", "doc-1")

    async def test_extract_should_reject_unsupported_type(self) -> None:
        with pytest.raises(PermanentExtractionFailure, match="Unsupported"):
            await ExtractionTask().extract(b"PK\x03\x04", "application/zip", "doc-1")

    async def test_extract_should_reject_corrupt_pdf(self) -> None:
        with pytest.raises(PermanentExtractionFailure):
            await ExtractionTask().extract(b"this is not a pdf", "application/pdf", "doc-1")

    async def test_failure_should_carry_kind(self) -> None:
        with pytest.raises(PermanentExtractionFailure) as exc_info:
            await ExtractionTask().extract(b"", "text/plain", "doc-1")

        assert exc_info.value.to_payload()["kind"] == "PermanentExtractionFailure"


class TestOcrExtraction:
    """Test suite for the OCR path."""

    async def test_image_should_use_ocr_unpaginated(self) -> None:
        # Arrange
        ocr = FakeOcr(pages=["Receipt total 42.00"])
        task = ExtractionTask(ocr=ocr)

        # Act
        extracted = await task.extract(b"\x89PNG fake", "image/png", "doc-1")

        # Assert
        assert ocr.calls == 1
        assert extracted.used_ocr is True
        assert extracted.paginated is False
        assert extracted.full_text == "Receipt total 42.00"

    async def test_image_without_ocr_should_fail_permanently(self) -> None:
        with pytest.raises(PermanentExtractionFailure, match="OCR"):
            await ExtractionTask().extract(b"\x89PNG fake", "image/png", "doc-1")

    async def test_scanned_pdf_should_fall_back_to_ocr_per_page(self) -> None:
        # Arrange
        ocr = FakeOcr(pages=["Page one text", "Page two text", "Page three text"])
        task = ExtractionTask(ocr=ocr)

        # Act
        extracted = await task.extract(blank_pdf(3), "application/pdf", "doc-1")

        # Assert
        assert extracted.paginated is True
        assert extracted.used_ocr is True
        assert [page.number for page in extracted.pages] == [1, 2, 3]
        assert extracted.pages[1].text == "Page two text"

    async def test_scanned_pdf_without_ocr_should_fail_permanently(self) -> None:
        with pytest.raises(PermanentExtractionFailure, match="no extractable text"):
            await ExtractionTask().extract(blank_pdf(1), "application/pdf", "doc-1")
