"""
Database boundary layer: ORM models, CRUD operations, and connection management.

Exports:
  - Base, UUIDMixin, TimestampMixin: Model building blocks
  - get_async_engine(), get_async_session_factory(), get_async_db(): Connection management
  - DocumentModel, SessionModel, MessageModel, MemorySummaryModel, VectorRecordModel
  - document_crud, session_crud, message_crud, memory_summary_crud: CRUD singletons

Dependencies: sqlalchemy, ragengine.configs
System role: Database adapter providing persistent storage for documents,
sessions, chat history, long-term memory and vectors.
"""

from ragengine.boundary.db.base import Base, TimestampMixin, UUIDMixin
from ragengine.boundary.db.connection import (
    get_async_db,
    get_async_engine,
    get_async_session_factory,
)
from ragengine.boundary.db.models import (
    DocumentModel,
    MemorySummaryModel,
    MessageModel,
    SessionModel,
    VectorRecordModel,
)
from ragengine.boundary.db.CRUD import (
    BaseCRUD,
    document_crud,
    memory_summary_crud,
    message_crud,
    session_crud,
)

__all__ = [
    # Base classes
    "Base",
    "TimestampMixin",
    "UUIDMixin",
    # Connection
    "get_async_db",
    "get_async_engine",
    "get_async_session_factory",
    # Models
    "DocumentModel",
    "SessionModel",
    "MessageModel",
    "MemorySummaryModel",
    "VectorRecordModel",
    # CRUD
    "BaseCRUD",
    "document_crud",
    "session_crud",
    "message_crud",
    "memory_summary_crud",
]
