"""
Vision OCR adapter.

Transcribes images and scanned PDFs with a multimodal Gemini model.

Dependencies: langchain_core, langchain_google_genai
System role: OCR fallback for the extraction stage
"""

import base64
import logging
from abc import ABC, abstractmethod

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import HumanMessage

from ragengine.boundary.llm.model_service import message_text
from ragengine.core.exceptions import TransientUpstreamError

logger = logging.getLogger(__name__)

OCR_PROMPT = (
    "Transcribe all text in this document exactly as written. "
    "Preserve paragraph breaks. Separate pages with a line containing only '\\f'. "
    "Return only the transcription."
)

PAGE_BREAK = "\f"


class OcrAdapter(ABC):
    """Optical character recognition seam."""

    @abstractmethod
    async def extract_text(self, data: bytes, mime_type: str) -> list[str]:
        """
        Transcribe ``data``.

        Returns:
            Text per page (a single entry for images)
        """


class GeminiVisionOcr(OcrAdapter):
    """OCR through a multimodal chat model."""

    def __init__(self, model: BaseChatModel) -> None:
        self._model = model

    async def extract_text(self, data: bytes, mime_type: str) -> list[str]:
        encoded = base64.b64encode(data).decode("ascii")
        if mime_type.startswith("image/"):
            media = {"type": "image_url", "image_url": f"data:{mime_type};base64,{encoded}"}
        else:
            media = {"type": "media", "mime_type": mime_type, "data": encoded}

        message = HumanMessage(content=[{"type": "text", "text": OCR_PROMPT}, media])
        try:
            response = await self._model.ainvoke([message])
        except Exception as e:
            logger.error(f"{__name__}:extract_text - FAILED mime_type={mime_type} - {type(e).__name__}: {e}")
            raise TransientUpstreamError(f"OCR call failed: {e}", service="llm") from e

        text = message_text(response.content)
        pages = [page.strip() for page in text.split(PAGE_BREAK)]
        logger.info(f"{__name__}:extract_text - OK pages={len(pages)}, chars={len(text)}")
        return pages
