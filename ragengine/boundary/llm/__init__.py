"""
LLM boundary: chat model service and vision OCR adapter.
"""

from ragengine.boundary.llm.model_service import (
    ChatModelService,
    ModelService,
    ToolCall,
    build_chat_model,
    message_text,
)
from ragengine.boundary.llm.vision_ocr import GeminiVisionOcr, OcrAdapter

__all__ = [
    "ModelService",
    "ChatModelService",
    "ToolCall",
    "build_chat_model",
    "message_text",
    "OcrAdapter",
    "GeminiVisionOcr",
]
