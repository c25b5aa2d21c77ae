"""
Models for document processing pipeline.

Exports: Chunk, ExtractedPage, ExtractedText, PipelineResult
"""

from .chunk import Chunk
from .extracted_text import ExtractedPage, ExtractedText
from .pipeline_result import PipelineResult

__all__ = [
    "Chunk",
    "ExtractedPage",
    "ExtractedText",
    "PipelineResult",
]
