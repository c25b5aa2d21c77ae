"""API-specific dependencies."""

# Re-export common dependencies
from .dependencies import (
    build_chat_service,
    get_agent_service,
    get_container,
    get_db,
    get_document_service,
    get_session_service,
)

__all__ = [
    "build_chat_service",
    "get_agent_service",
    "get_container",
    "get_db",
    "get_document_service",
    "get_session_service",
]
