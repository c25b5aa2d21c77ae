"""
Configuration settings for the document ingestion pipeline.

Provides environment-based configuration for extraction, chunking,
retry policy, worker parallelism and stale-claim recovery.

Dependencies: pydantic, pydantic_settings
System role: Centralized pipeline configuration
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class IngestionSettings(BaseSettings):
    """Settings for document ingestion pipeline."""

    model_config = SettingsConfigDict(
        env_prefix="INGESTION_",
        case_sensitive=False,
        extra="ignore",
    )

    # Chunking settings
    chunk_size_tokens: int = Field(
        default=400,
        gt=0,
        description="Target chunk length in (estimated) tokens",
    )
    chunk_overlap_tokens: int = Field(
        default=60,
        ge=0,
        description="Overlap between consecutive chunks in tokens",
    )

    # Retry policy for transient upstream failures
    max_attempts: int = Field(default=5, ge=1, description="Attempts per stage before Failed(retryable)")
    backoff_initial: float = Field(default=1.0, ge=0.0, description="Initial backoff in seconds")
    backoff_max: float = Field(default=30.0, ge=0.0, description="Maximum backoff in seconds")
    backoff_jitter: float = Field(default=1.0, ge=0.0, description="Random jitter added to each wait")

    # Parallelism across documents
    max_concurrent_documents: int = Field(
        default=4,
        ge=1,
        description="Documents processed in parallel by one worker",
    )

    # Recovery of runs abandoned by a dead worker
    stale_claim_seconds: float = Field(
        default=3600.0,
        gt=0,
        description="In-progress documents whose last transition is older than this may be taken over",
    )

    max_document_bytes: int = Field(
        default=50 * 1024 * 1024,
        description="Uploads larger than this are rejected as terminal failures",
    )
