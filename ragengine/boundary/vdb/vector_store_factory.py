"""
Vector store factory for selecting between SQL (durable) and in-memory (dev).

Depends on VECTOR_STORE_STORE_TYPE environment variable.
Provides consistent interface regardless of underlying implementation.

Dependencies: ragengine.boundary.vdb, ragengine.configs
System role: Vector store instantiation and selection
"""

import logging

from sqlalchemy.ext.asyncio import async_sessionmaker

from ragengine.boundary.vdb.base import VectorStore
from ragengine.boundary.vdb.memory_vector_store import InMemoryVectorStore
from ragengine.boundary.vdb.sql_vector_store import SQLVectorStore
from ragengine.configs.vector_store import VectorStoreSettings

logger = logging.getLogger(__name__)


def get_vector_store(
    settings: VectorStoreSettings,
    session_factory: async_sessionmaker | None = None,
) -> VectorStore:
    """
    Factory function to get vector store based on configuration.

    Args:
        settings: Vector store settings
        session_factory: Database session factory (required for "sql")

    Returns:
        SQLVectorStore or InMemoryVectorStore

    Raises:
        ValueError: If store_type is invalid or the SQL store lacks a session factory
    """
    store_type = settings.store_type.lower()

    if store_type == "memory":
        logger.info(f"{__name__}:get_vector_store - Creating in-memory vector store (local dev mode)")
        return InMemoryVectorStore()

    if store_type == "sql":
        if session_factory is None:
            raise ValueError("SQL vector store requires a database session factory")
        logger.info(f"{__name__}:get_vector_store - Creating SQL vector store")
        return SQLVectorStore(session_factory)

    raise ValueError(
        f"Invalid VECTOR_STORE_STORE_TYPE: {store_type}. "
        f"Must be 'sql' or 'memory'."
    )
