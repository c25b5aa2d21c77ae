"""API routers."""

from .agent import router as agent_router
from .chat_stream import router as chat_stream_router
from .documents import router as documents_router
from .health import router as health_router
from .sessions import router as sessions_router

__all__ = [
    "agent_router",
    "chat_stream_router",
    "documents_router",
    "health_router",
    "sessions_router",
]
