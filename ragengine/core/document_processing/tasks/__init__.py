"""
Task modules for document processing pipeline.

Exports: ExtractionTask, ChunkingTask, EmbeddingTask, VectorStoreTask
"""

from .chunking_task import ChunkingTask
from .embedding_task import EmbeddingTask
from .extraction_task import ExtractionTask
from .vector_store_task import VectorStoreTask

__all__ = [
    "ExtractionTask",
    "ChunkingTask",
    "EmbeddingTask",
    "VectorStoreTask",
]
