"""
WebSocket streaming chat endpoint.

Provides real-time token streaming for chat responses using WebSocket.

Routes: WS /ws/sessions/{session_id}/chat

Client sends:
    {"event": "chat", "data": {"message": "...", "mode": "grounded", "turn_id": "..."}}
    {"event": "ping"}

Server sends:
    {"event": "connected", "data": {"session_id": "..."}}
    {"event": "context", "data": {"turn_id": "...", "grounded": true, "citations": [...]}}
    {"event": "token", "data": {"token": "...", "index": 0}}
    {"event": "complete", "data": {"message_id": "...", "turn_id": "...", "citations": [...], "truncated": false}}
    {"event": "error", "data": {"kind": "...", "message": "...", "regenerate_available": true}}

While a turn streams, the socket is watched for a disconnect; a
disconnect cancels the turn, which closes the model call and stores the
partial answer as truncated.

Dependencies: ragengine.application.services.chat_service
System role: WebSocket streaming HTTP API
"""

import asyncio
import json
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from pydantic import ValidationError as PydanticValidationError

from ragengine.api.deps import build_chat_service
from ragengine.application.container import ServiceContainer
from ragengine.core.exceptions import RagEngineError, RequestCancelledError
from ragengine.core.request_context import RequestContext
from ragengine.models.chat import ChatRequest
from ragengine.models.streaming import ClientEventType, StreamEventType
from ragengine.observability.correlation import clear_correlation_id, set_correlation_id

logger = logging.getLogger(__name__)
router = APIRouter(tags=["streaming"])


def _error(kind: str, message: str, **extra) -> dict:
    return {"event": StreamEventType.ERROR.value, "data": {"kind": kind, "message": message, **extra}}


@router.websocket("/ws/sessions/{session_id}/chat")
async def websocket_chat(websocket: WebSocket, session_id: str) -> None:
    """
    WebSocket endpoint for streaming chat responses.

    Args:
        websocket: WebSocket connection
        session_id: Session id from path
    """
    container: ServiceContainer = websocket.app.state.container
    correlation_id = set_correlation_id(websocket.headers.get("x-correlation-id"))
    logger.info(
        "WebSocket connection established",
        extra={"session_id": session_id, "correlation_id": correlation_id},
    )

    await websocket.accept()
    await websocket.send_json({"event": StreamEventType.CONNECTED.value, "data": {"session_id": session_id}})

    try:
        while True:
            raw_data = await websocket.receive_text()
            try:
                data = json.loads(raw_data)
            except json.JSONDecodeError:
                await websocket.send_json(_error("ValidationError", "Invalid JSON format"))
                continue
            if not isinstance(data, dict):
                await websocket.send_json(_error("ValidationError", "Event must be a JSON object"))
                continue

            event_type = data.get("event")
            if event_type == ClientEventType.PING.value:
                await websocket.send_json({"event": "pong"})
                continue

            if event_type != ClientEventType.CHAT.value:
                logger.warning("Unknown event type received", extra={"session_id": session_id, "event_type": str(event_type)})
                await websocket.send_json(_error("ValidationError", f"Unknown event type: {event_type}"))
                continue

            try:
                request = ChatRequest.model_validate(data.get("data") or {})
            except PydanticValidationError as e:
                await websocket.send_json(_error("ValidationError", f"Invalid chat request: {e.errors()[0]['msg']}"))
                continue

            disconnected = await _run_turn(websocket, container, session_id, request)
            if disconnected:
                logger.info("WebSocket client disconnected mid-turn", extra={"session_id": session_id})
                return

    except WebSocketDisconnect:
        logger.info("WebSocket client disconnected", extra={"session_id": session_id})
    finally:
        clear_correlation_id()


async def _run_turn(
    websocket: WebSocket,
    container: ServiceContainer,
    session_id: str,
    request: ChatRequest,
) -> bool:
    """
    Stream one turn while watching the socket.

    Returns:
        True when the client disconnected during the turn
    """
    ctx = RequestContext(timeout_seconds=container.settings.chat.turn_timeout_seconds)
    turn = asyncio.create_task(_stream_turn(websocket, container, session_id, request, ctx))
    disconnected = False

    while not turn.done():
        receive = asyncio.create_task(websocket.receive())
        done, _ = await asyncio.wait({turn, receive}, return_when=asyncio.FIRST_COMPLETED)
        if receive not in done:
            receive.cancel()
            await asyncio.gather(receive, return_exceptions=True)
            break

        message = receive.result()
        if message["type"] == "websocket.disconnect":
            disconnected = True
            ctx.cancel()
            turn.cancel()
            break
        await websocket.send_json(_error("ValidationError", "A turn is already streaming on this connection"))

    results = await asyncio.gather(turn, return_exceptions=True)
    if isinstance(results[0], WebSocketDisconnect):
        disconnected = True
    elif isinstance(results[0], Exception):
        logger.error(
            "Chat turn crashed",
            extra={"session_id": session_id, "error_type": type(results[0]).__name__, "error_msg": str(results[0])},
        )
    return disconnected


async def _stream_turn(
    websocket: WebSocket,
    container: ServiceContainer,
    session_id: str,
    request: ChatRequest,
    ctx: RequestContext,
) -> None:
    async with container.session_factory() as db:
        chat_service = build_chat_service(container, db)
        events = chat_service.stream_chat(
            session_id=session_id,
            message=request.message,
            mode=request.mode,
            turn_id=request.turn_id,
            ctx=ctx,
        )
        try:
            async for event in events:
                await websocket.send_json(event.to_dict())
        except RequestCancelledError:
            logger.info("Chat turn cancelled", extra={"session_id": session_id, "turn_id": request.turn_id})
        except RagEngineError as e:
            logger.warning(
                "Chat turn rejected",
                extra={"session_id": session_id, "error_type": type(e).__name__, "error_msg": e.message},
            )
            await websocket.send_json(
                {
                    "event": StreamEventType.ERROR.value,
                    "data": {**e.to_payload(), "turn_id": request.turn_id, "regenerate_available": e.retryable},
                }
            )
        finally:
            await events.aclose()
