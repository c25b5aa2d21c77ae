"""
Google Generative AI Embeddings wrapper with fixed output dimensionality.

Wraps GoogleGenerativeAIEmbeddings so every call returns vectors of the
configured size; the vector store rejects mixed dimensions.

Dependencies: langchain_google_genai
System role: Embedding dimension consistency across ingestion and retrieval
"""

import logging
from typing import List

from langchain_google_genai import GoogleGenerativeAIEmbeddings

logger = logging.getLogger(__name__)


class FixedDimensionEmbeddings(GoogleGenerativeAIEmbeddings):
    """
    GoogleGenerativeAIEmbeddings with a fixed output dimensionality.

    Documents are embedded with the RETRIEVAL_DOCUMENT task type and
    queries with RETRIEVAL_QUERY unless the caller overrides it.
    """

    _output_dimensionality: int = 1024

    def __init__(
        self,
        model: str = "models/gemini-embedding-001",
        output_dimensionality: int = 1024,
        **kwargs,
    ) -> None:
        """
        Initialize embeddings with fixed output dimensionality.

        Args:
            model: Google embedding model ID
            output_dimensionality: Fixed dimension for all embeddings
            **kwargs: Additional arguments for GoogleGenerativeAIEmbeddings
                (google_api_key, request_options, ...)
        """
        super().__init__(model=model, **kwargs)
        self._output_dimensionality = output_dimensionality
        logger.info(
            f"{__name__}:__init__ - Initialized with model={model}, "
            f"output_dimensionality={output_dimensionality}"
        )

    @property
    def output_dimensionality(self) -> int:
        return self._output_dimensionality

    def embed_documents(self, texts: List[str], **kwargs) -> List[List[float]]:
        kwargs.setdefault("output_dimensionality", self._output_dimensionality)
        kwargs.setdefault("task_type", "RETRIEVAL_DOCUMENT")
        return super().embed_documents(texts, **kwargs)

    def embed_query(self, text: str, **kwargs) -> List[float]:
        kwargs.setdefault("output_dimensionality", self._output_dimensionality)
        kwargs.setdefault("task_type", "RETRIEVAL_QUERY")
        return super().embed_query(text, **kwargs)
