"""
Document text extraction task.

Turns raw document bytes into page-aware plain text. PDFs go through
LangChain's PyPDFLoader; images and PDFs without a text layer go through
the OCR adapter; text formats are decoded as UTF-8.

Dependencies: langchain_community.document_loaders, pypdf
System role: First stage of document ingestion pipeline
"""

import asyncio
import logging
import os
import tempfile

from langchain_community.document_loaders import PyPDFLoader

from ragengine.boundary.llm.vision_ocr import OcrAdapter
from ragengine.core.document_processing.models import ExtractedPage, ExtractedText
from ragengine.core.exceptions import PermanentExtractionFailure

logger = logging.getLogger(__name__)

TEXT_MIME_TYPES = frozenset({
    "application/json",
    "application/xml",
    "application/x-yaml",
    "application/csv",
})


def normalize_mime_type(mime_type: str) -> str:
    return mime_type.split(";", 1)[0].strip().lower()


class ExtractionTask:
    """Extract text from PDFs, images and text documents."""

    def __init__(self, ocr: OcrAdapter | None = None, max_document_bytes: int | None = None) -> None:
        """
        Initialize extraction task.

        Args:
            ocr: OCR adapter for images and scanned PDFs (None disables OCR)
            max_document_bytes: Larger inputs fail permanently
        """
        self._ocr = ocr
        self._max_document_bytes = max_document_bytes

    async def extract(self, data: bytes, mime_type: str, document_id: str | None = None) -> ExtractedText:
        """
        Extract text from document bytes.

        Args:
            data: Raw document bytes
            mime_type: Declared content type
            document_id: Used for error context only

        Returns:
            ExtractedText with one entry per page (or a single unpaginated entry)

        Raises:
            PermanentExtractionFailure: Empty, oversized, corrupt or unsupported input
            TransientUpstreamError: OCR service failure
        """
        mime = normalize_mime_type(mime_type)
        if not data:
            raise PermanentExtractionFailure("Document is empty", document_id, mime)
        if self._max_document_bytes is not None and len(data) > self._max_document_bytes:
            raise PermanentExtractionFailure(
                f"Document is {len(data)} bytes, limit is {self._max_document_bytes}",
                document_id,
                mime,
            )

        if mime == "application/pdf":
            extracted = await self._extract_pdf(data, document_id)
        elif mime.startswith("image/"):
            extracted = await self._extract_with_ocr(data, mime, document_id, paginated=False)
        elif mime.startswith("text/") or mime in TEXT_MIME_TYPES:
            extracted = self._decode_text(data, mime, document_id)
        else:
            raise PermanentExtractionFailure(f"Unsupported content type: {mime}", document_id, mime)

        if extracted.is_empty:
            raise PermanentExtractionFailure("Document contains no extractable text", document_id, mime)

        logger.info(
            f"{__name__}:extract - OK document_id={document_id}, mime={mime}, "
            f"pages={len(extracted.pages)}, chars={len(extracted.full_text)}, ocr={extracted.used_ocr}"
        )
        return extracted

    async def _extract_pdf(self, data: bytes, document_id: str | None) -> ExtractedText:
        try:
            page_texts = await asyncio.to_thread(self._load_pdf_pages, data)
        except Exception as e:
            raise PermanentExtractionFailure(f"Failed to parse PDF: {e}", document_id, "application/pdf") from e

        extracted = ExtractedText(
            pages=[ExtractedPage(number=i, text=text) for i, text in enumerate(page_texts, start=1)],
            paginated=True,
        )
        if extracted.is_empty and self._ocr is not None:
            logger.info(f"{__name__}:_extract_pdf - no text layer, falling back to OCR document_id={document_id}")
            return await self._extract_with_ocr(data, "application/pdf", document_id, paginated=True)
        return extracted

    @staticmethod
    def _load_pdf_pages(data: bytes) -> list[str]:
        # PyPDFLoader reads from a path
        fd, path = tempfile.mkstemp(suffix=".pdf", prefix="ragengine_")
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(data)
            documents = PyPDFLoader(path).load()
            return [document.page_content.strip() for document in documents]
        finally:
            os.remove(path)

    async def _extract_with_ocr(
        self,
        data: bytes,
        mime: str,
        document_id: str | None,
        paginated: bool,
    ) -> ExtractedText:
        if self._ocr is None:
            raise PermanentExtractionFailure("OCR is required but not configured", document_id, mime)

        page_texts = await self._ocr.extract_text(data, mime)
        pages = (
            [ExtractedPage(number=i, text=text) for i, text in enumerate(page_texts, start=1)]
            if paginated
            else [ExtractedPage(text="\n\n".join(page_texts))]
        )
        return ExtractedText(pages=pages, paginated=paginated, used_ocr=True)

    @staticmethod
    def _decode_text(data: bytes, mime: str, document_id: str | None) -> ExtractedText:
        try:
            text = data.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise PermanentExtractionFailure(f"Document is not valid UTF-8: {e}", document_id, mime) from e
        return ExtractedText(pages=[ExtractedPage(text=text.replace("\r\n", "\n"))], paginated=False)
