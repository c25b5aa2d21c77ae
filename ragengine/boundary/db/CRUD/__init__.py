"""
CRUD operations for database models.

Exports base CRUD class and model-specific CRUD implementations
with pre-instantiated singletons for direct use.

Usage:
    from ragengine.boundary.db.CRUD import session_crud, document_crud

    session = await session_crud.get_by_id(db, session_id)
"""

from ragengine.boundary.db.CRUD.base_crud import BaseCRUD
from ragengine.boundary.db.CRUD.document_crud import DocumentCRUD, document_crud
from ragengine.boundary.db.CRUD.memory_summary_crud import MemorySummaryCRUD, memory_summary_crud
from ragengine.boundary.db.CRUD.message_crud import MessageCRUD, message_crud
from ragengine.boundary.db.CRUD.session_crud import SessionCRUD, session_crud

__all__ = [
    "BaseCRUD",
    "DocumentCRUD",
    "document_crud",
    "MemorySummaryCRUD",
    "memory_summary_crud",
    "MessageCRUD",
    "message_crud",
    "SessionCRUD",
    "session_crud",
]
