"""Service orchestrators."""

from .agent_service import AgentService
from .chat_service import ChatService
from .document_service import DocumentService
from .session_service import SessionService

__all__ = [
    "AgentService",
    "ChatService",
    "DocumentService",
    "SessionService",
]
