"""
Unified application settings.

Aggregates all configuration modules into a single Settings class.
Provides dependency injection factory for FastAPI and workers.

Dependencies: All config modules
System role: Central configuration aggregator for the application
"""

from functools import lru_cache

from pydantic import Field

from ragengine.configs.agent import AgentSettings
from ragengine.configs.base import BaseSettings
from ragengine.configs.celery_config import CelerySettings
from ragengine.configs.chat import ChatSettings
from ragengine.configs.database import DatabaseSettings
from ragengine.configs.ingestion import IngestionSettings
from ragengine.configs.llm import LLMSettings
from ragengine.configs.memory import MemorySettings
from ragengine.configs.object_store import ObjectStoreSettings
from ragengine.configs.vector_store import VectorStoreSettings


class Settings(BaseSettings):
    """Unified application settings aggregating all config modules."""

    # Aggregated settings
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    vector_store: VectorStoreSettings = Field(default_factory=VectorStoreSettings)
    ingestion: IngestionSettings = Field(default_factory=IngestionSettings)
    llm: LLMSettings = Field(default_factory=LLMSettings)
    chat: ChatSettings = Field(default_factory=ChatSettings)
    memory: MemorySettings = Field(default_factory=MemorySettings)
    agent: AgentSettings = Field(default_factory=AgentSettings)
    object_store: ObjectStoreSettings = Field(default_factory=ObjectStoreSettings)
    celery: CelerySettings = Field(default_factory=CelerySettings)


@lru_cache
def get_settings() -> Settings:
    """
    Get application settings singleton.

    Returns Settings instance, cached for dependency injection.
    Environment variables loaded once at startup.

    Returns:
        Settings: Application settings instance

    Usage:
        from ragengine.configs import get_settings
        settings = get_settings()
    """
    return Settings()
