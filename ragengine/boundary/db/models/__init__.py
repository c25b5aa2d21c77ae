"""
Database models package.

Exports:
  - DocumentModel: Document ORM model
  - SessionModel: Conversation session ORM model
  - MessageModel: Chat message ORM model
  - MemorySummaryModel: Long-term memory ORM model
  - VectorRecordModel: SQL vector store record

Dependencies: sqlalchemy, ragengine.boundary.db.base
System role: Database model definitions for domain entities
"""

from ragengine.boundary.db.models.document_model import DocumentModel
from ragengine.boundary.db.models.session_model import SessionModel
from ragengine.boundary.db.models.message_model import MessageModel
from ragengine.boundary.db.models.memory_summary_model import MemorySummaryModel
from ragengine.boundary.db.models.vector_record_model import VectorRecordModel

__all__ = [
    "DocumentModel",
    "SessionModel",
    "MessageModel",
    "MemorySummaryModel",
    "VectorRecordModel",
]
