"""
Document processing pipeline for ingestion.

Extraction, chunking, embedding and indexing of uploaded documents,
orchestrated by IngestionPipeline.

Dependencies: langchain_community, langchain_text_splitters, tenacity, pydantic
System role: Document ingestion pipeline entrypoint
"""

from .dispatcher import CeleryDispatcher, IngestionDispatcher, LocalDispatcher
from .entrypoint import IngestionPipeline
from .models import Chunk, ExtractedText, PipelineResult

__all__ = [
    "IngestionPipeline",
    "IngestionDispatcher",
    "LocalDispatcher",
    "CeleryDispatcher",
    "Chunk",
    "ExtractedText",
    "PipelineResult",
]
