"""
Chat service for conversational Q&A with RAG.

Orchestrates one chat turn: history retrieval, context assembly, streamed
generation and idempotent message persistence.

Turn states: received -> context_assembled -> generating -> persisted ->
completed | failed. Exactly one user and one assistant message exist per
turn id; regenerating a turn overwrites its assistant message.

Dependencies: ragengine.core.agentic_system, ragengine.application.adapters, ragengine.boundary.db
System role: Chat service orchestration layer
"""

import asyncio
import logging
import uuid
from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession

from ragengine.application.adapters.chat_history_adapter import ChatHistoryAdapter
from ragengine.boundary.db.CRUD.session_crud import session_crud
from ragengine.configs.chat import ChatSettings
from ragengine.core.agentic_system.agent.fragment_stream import FragmentStream
from ragengine.core.agentic_system.agent.rag_agent import RAGAgent
from ragengine.core.agentic_system.agent.rag_agent_prompt import DECLINE_ANSWER
from ragengine.core.exceptions import (
    RagEngineError,
    RequestCancelledError,
    SessionNotFoundError,
    ValidationError,
)
from ragengine.core.request_context import RequestContext
from ragengine.models.chat import ChatMode, ChatTurnResult, TurnState
from ragengine.models.citation import Citation
from ragengine.models.streaming import StreamEvent, StreamEventType

logger = logging.getLogger(__name__)


class ChatService:
    """
    Chat service for conversational Q&A.

    Coordinates session validation, chat history retrieval, RAG agent
    invocation and message persistence for multi-turn conversations.
    """

    def __init__(
        self,
        db: AsyncSession,
        rag_agent: RAGAgent,
        settings: ChatSettings | None = None,
    ) -> None:
        """
        Initialize chat service.

        Args:
            db: AsyncSession for database operations
            rag_agent: RAG agent instance for Q&A
            settings: Chat settings (defaults if None)
        """
        self.db = db
        self.rag_agent = rag_agent
        self.settings = settings or ChatSettings()
        self.last_state: TurnState | None = None

    async def process_chat(
        self,
        session_id: str,
        message: str,
        mode: ChatMode = ChatMode.GROUNDED,
        turn_id: str | None = None,
        ctx: RequestContext | None = None,
    ) -> ChatTurnResult:
        """
        Run a turn without streaming and return its outcome.

        Raises:
            SessionNotFoundError: Unknown session
            ValidationError: Empty message
        """
        content: list[str] = []
        final: dict = {}
        async for event in self.stream_chat(session_id, message, mode, turn_id, ctx):
            if event.event == StreamEventType.TOKEN:
                content.append(event.data["token"])
            elif event.event in (StreamEventType.COMPLETE, StreamEventType.ERROR):
                final = event.data

        return ChatTurnResult(
            turn_id=final.get("turn_id", turn_id or ""),
            message_id=final.get("message_id"),
            content="".join(content),
            citations=[Citation.model_validate(c) for c in final.get("citations", [])],
            truncated=final.get("truncated", self.last_state == TurnState.FAILED),
            grounded=bool(final.get("citations")),
            state=self.last_state or TurnState.FAILED,
        )

    async def stream_chat(
        self,
        session_id: str,
        message: str,
        mode: ChatMode = ChatMode.GROUNDED,
        turn_id: str | None = None,
        ctx: RequestContext | None = None,
    ) -> AsyncGenerator[StreamEvent, None]:
        """
        Stream one chat turn.

        Args:
            session_id: Session id
            message: User's message
            mode: Grounded or conversational
            turn_id: Idempotency key; reuse it to regenerate a failed turn
            ctx: Request context (a turn-scoped one is created if None)

        Yields:
            StreamEvent: context, token..., then complete or error

        Raises:
            SessionNotFoundError: Unknown session (before any event)
            ValidationError: Empty message (before any event)
            RequestCancelledError: Client went away; partial answer persisted first
        """
        ctx = ctx or RequestContext(timeout_seconds=self.settings.turn_timeout_seconds)
        turn_id = turn_id or uuid.uuid4().hex
        self._set_state(TurnState.RECEIVED, turn_id)

        if not message or not message.strip():
            raise ValidationError("Message must not be empty", field="message")
        session = await session_crud.get_by_id(self.db, session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        user_id = session.user_id

        history_adapter = ChatHistoryAdapter(session_id=session_id, db=self.db)
        history = await history_adapter.get_messages(self.settings.history_window, exclude_turn_id=turn_id)
        await history_adapter.add_user_message(turn_id, message)

        # Context assembly
        try:
            context = await self.rag_agent.assemble_context(user_id, message, history, mode, ctx)
        except RequestCancelledError:
            self._set_state(TurnState.FAILED, turn_id)
            raise
        except RagEngineError as e:
            logger.error(f"{__name__}:stream_chat - context assembly failed turn_id={turn_id}: {e}")
            self._set_state(TurnState.FAILED, turn_id)
            yield self._error_event(e, turn_id, message_id=None)
            return

        citations = [citation.to_wire() for citation in context.citations]
        self._set_state(TurnState.CONTEXT_ASSEMBLED, turn_id)
        yield StreamEvent(
            event=StreamEventType.CONTEXT,
            data={"turn_id": turn_id, "grounded": context.grounded, "citations": citations},
        )

        if mode == ChatMode.GROUNDED and not context.grounded and self.settings.no_grounding_policy == "decline":
            self._set_state(TurnState.GENERATING, turn_id)
            yield StreamEvent(event=StreamEventType.TOKEN, data={"token": DECLINE_ANSWER, "index": 0})
            stored = await history_adapter.add_ai_message(turn_id, DECLINE_ANSWER)
            self._set_state(TurnState.PERSISTED, turn_id)
            self._set_state(TurnState.COMPLETED, turn_id)
            yield self._complete_event(stored.id, turn_id, [], truncated=False)
            return

        # Generation
        self._set_state(TurnState.GENERATING, turn_id)
        stream: FragmentStream = self.rag_agent.generate(context, ctx)
        failure: RagEngineError | None = None
        try:
            index = 0
            async for fragment in stream:
                yield StreamEvent(event=StreamEventType.TOKEN, data={"token": fragment, "index": index})
                index += 1
        except (RequestCancelledError, asyncio.CancelledError, GeneratorExit):
            await stream.cancel()
            await self._persist_partial(history_adapter, turn_id, stream, citations)
            self._set_state(TurnState.FAILED, turn_id)
            raise
        except RagEngineError as e:
            failure = e
        except Exception as e:
            logger.exception(f"{__name__}:stream_chat - unexpected generation error turn_id={turn_id}")
            failure = RagEngineError(f"Generation failed: {e}")

        truncated = failure is not None
        stored = await history_adapter.add_ai_message(
            turn_id, stream.text, citations=citations, truncated=truncated
        )
        self._set_state(TurnState.PERSISTED, turn_id)

        if failure is not None:
            logger.warning(
                f"{__name__}:stream_chat - stream failed after {stream.fragment_count} fragments turn_id={turn_id}: {failure}"
            )
            self._set_state(TurnState.FAILED, turn_id)
            yield self._error_event(failure, turn_id, message_id=stored.id, regenerate_available=True)
            return

        self._set_state(TurnState.COMPLETED, turn_id)
        yield self._complete_event(stored.id, turn_id, citations, truncated=False)

    async def _persist_partial(
        self,
        history_adapter: ChatHistoryAdapter,
        turn_id: str,
        stream: FragmentStream,
        citations: list[dict],
    ) -> None:
        try:
            await asyncio.shield(
                history_adapter.add_ai_message(turn_id, stream.text, citations=citations, truncated=True)
            )
            self._set_state(TurnState.PERSISTED, turn_id)
        except Exception:
            logger.exception(f"{__name__}:_persist_partial - could not persist partial answer turn_id={turn_id}")

    def _set_state(self, state: TurnState, turn_id: str) -> None:
        self.last_state = state
        logger.info(f"{__name__}:stream_chat - turn_id={turn_id} state={state.value}")

    @staticmethod
    def _complete_event(message_id: str, turn_id: str, citations: list[dict], truncated: bool) -> StreamEvent:
        return StreamEvent(
            event=StreamEventType.COMPLETE,
            data={
                "message_id": message_id,
                "turn_id": turn_id,
                "citations": citations,
                "truncated": truncated,
            },
        )

    @staticmethod
    def _error_event(
        error: RagEngineError,
        turn_id: str,
        message_id: str | None,
        regenerate_available: bool | None = None,
    ) -> StreamEvent:
        return StreamEvent(
            event=StreamEventType.ERROR,
            data={
                **error.to_payload(),
                "turn_id": turn_id,
                "message_id": message_id,
                "regenerate_available": error.retryable if regenerate_available is None else regenerate_available,
            },
        )
