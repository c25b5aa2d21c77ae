"""
Vector store configuration settings.

Manages vector store selection, embedding model settings and retrieval
thresholds for grounded answers.

Dependencies: pydantic, pydantic_settings
System role: Vector database configuration for RAG retrieval
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class VectorStoreSettings(BaseSettings):
    """Vector store configuration (SQL for durable deployments, memory for dev)."""

    model_config = SettingsConfigDict(
        env_prefix="VECTOR_STORE_",
        case_sensitive=False,
        extra="ignore",
    )

    store_type: str = Field(
        default="sql",
        description="Vector store type: 'sql' (durable, shares the database) or 'memory' (dev/tests)",
    )

    embedding_model: str = Field(
        default="models/gemini-embedding-001",
        description="Google Gemini embedding model ID (gemini-embedding-001 supports 1024-dim)",
    )
    embedding_dimension: int = Field(
        default=1024,
        description="Embedding vector dimension enforced on every embed call",
    )
    embedding_batch_size: int = Field(default=64, description="Texts per embedding request")
    embedding_max_concurrent_requests: int = Field(
        default=4,
        description="Concurrent embedding requests per client (per-caller rate limit)",
    )
    embedding_max_attempts: int = Field(
        default=5,
        description="Attempts per batch before EmbeddingServiceUnavailable is raised",
    )
    embedding_backoff_initial: float = Field(default=0.5, description="Initial backoff in seconds")
    embedding_backoff_max: float = Field(default=20.0, description="Maximum backoff in seconds")

    top_k: int = Field(default=5, description="Number of top results to retrieve")
    similarity_threshold: float = Field(
        default=0.5,
        ge=0.0,
        le=1.0,
        description="Minimum cosine similarity for a hit; below it retrieval reports no grounding",
    )
    max_staleness_seconds: float = Field(
        default=5.0,
        description="Documented upper bound on read-replica lag for cross-replica readers",
    )
