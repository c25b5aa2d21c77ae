"""
Session API endpoints.

Routes:
- POST /sessions - Create new session
- GET /sessions?user_id= - List a user's sessions
- GET /sessions/{id} - Get session
- GET /sessions/{id}/messages - Get chat history

Dependencies: ragengine.application.services.session_service, ragengine.models
System role: Session management HTTP API
"""

import logging

from fastapi import APIRouter, Depends, Query, status

from ragengine.api.deps import get_session_service
from ragengine.application.services.session_service import SessionService
from ragengine.models.chat import ChatMessageResponse
from ragengine.models.session import CreateSessionRequest, SessionResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sessions", tags=["sessions"])


@router.post("", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
async def create_session(
    request: CreateSessionRequest,
    session_service: SessionService = Depends(get_session_service),
) -> SessionResponse:
    """
    Create a new conversation session.

    Args:
        request: CreateSessionRequest with the owning user id
        session_service: Injected SessionService

    Returns:
        SessionResponse: Created session
    """
    return await session_service.create_session(request.user_id)


@router.get("", response_model=list[SessionResponse])
async def list_sessions(
    user_id: str = Query(min_length=1),
    limit: int | None = Query(default=None, ge=1, le=100),
    session_service: SessionService = Depends(get_session_service),
) -> list[SessionResponse]:
    """A user's sessions, most recently active first."""
    return await session_service.get_user_sessions(user_id, limit=limit)


@router.get("/{session_id}", response_model=SessionResponse)
async def get_session(
    session_id: str,
    session_service: SessionService = Depends(get_session_service),
) -> SessionResponse:
    return await session_service.get_session(session_id)


@router.get("/{session_id}/messages", response_model=list[ChatMessageResponse])
async def get_messages(
    session_id: str,
    session_service: SessionService = Depends(get_session_service),
) -> list[ChatMessageResponse]:
    """Full history, one user and at most one assistant message per turn."""
    return await session_service.get_messages(session_id)
