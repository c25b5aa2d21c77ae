"""
Dependency injection for FastAPI routes.

The ServiceContainer built by the lifespan lives on ``app.state``; these
factories hand request-scoped services their shared collaborators.

Dependencies: fastapi, ragengine.application
System role: DI container for service injection
"""

from collections.abc import AsyncGenerator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from ragengine.application.container import ServiceContainer
from ragengine.application.services import AgentService, ChatService, DocumentService, SessionService


def get_container(request: Request) -> ServiceContainer:
    return request.app.state.container


async def get_db(container: ServiceContainer = Depends(get_container)) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency for a request-scoped database session.

    Yields:
        AsyncSession: Closed when the request finishes
    """
    async with container.session_factory() as session:
        yield session


def get_session_service(db: AsyncSession = Depends(get_db)) -> SessionService:
    """
    Get session service instance.

    Args:
        db: Async database session (injected via Depends)

    Returns:
        SessionService: Session service instance
    """
    return SessionService(db=db)


def get_document_service(
    db: AsyncSession = Depends(get_db),
    container: ServiceContainer = Depends(get_container),
) -> DocumentService:
    return DocumentService(db=db, dispatcher=container.dispatcher)


def get_agent_service(
    db: AsyncSession = Depends(get_db),
    container: ServiceContainer = Depends(get_container),
) -> AgentService:
    return AgentService(db=db, planner=container.planner, settings=container.settings.agent)


def build_chat_service(container: ServiceContainer, db: AsyncSession) -> ChatService:
    """Chat service for one WebSocket turn."""
    return ChatService(db=db, rag_agent=container.rag_agent, settings=container.settings.chat)
