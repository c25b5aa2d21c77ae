"""
Test suite for ChatService.

Covers the event sequence of a streamed turn, the no-grounding policies,
mid-stream failure with a truncated partial answer, client disconnects,
and regenerating a turn under the same turn id.

System role: Verification of the chat orchestrator
"""

import pytest

from ragengine.api.deps.dependencies import build_chat_service
from ragengine.boundary.db.CRUD.message_crud import message_crud
from ragengine.boundary.vdb.vector_schemas import DOCUMENTS_NAMESPACE, VectorRecord
from ragengine.configs.chat import ChatSettings
from ragengine.core.agentic_system.agent.rag_agent_prompt import DECLINE_ANSWER
from ragengine.core.exceptions import SessionNotFoundError, ValidationError
from ragengine.models.chat import ChatMode, MessageRole, TurnState
from ragengine.models.streaming import StreamEventType
from fakes import make_settings


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def chat_service(container, db):
    return build_chat_service(container, db)


@pytest.fixture
async def indexed_chunk(vector_store):
    """One chunk matching every query (the default fake embedding)."""
    await vector_store.upsert(
        DOCUMENTS_NAMESPACE,
        VectorRecord(
            id="chunk-1",
            owner_id="user-1",
            document_id="doc-1",
            text="Revenue grew 12% in the third quarter.",
            vector=[0.0, 0.0, 1.0],
            metadata={
                "document_name": "report.pdf",
                "source_label": "page 2",
                "ordinal": 0,
                "offset_start": 0,
                "offset_end": 38,
            },
        ),
    )


async def collect(stream) -> list:
    return [event async for event in stream]


class TestStreamChat:
    """Test suite for ChatService.stream_chat."""

    async def test_grounded_turn_should_stream_context_tokens_and_complete(
        self, chat_service, create_session, indexed_chunk, db
    ) -> None:
        # Arrange
        session_id = await create_session()

        # Act
        events = await collect(chat_service.stream_chat(session_id, "How did revenue change?", turn_id="turn-1"))

        # Assert
        kinds = [e.event for e in events]
        assert kinds == [
            StreamEventType.CONTEXT,
            StreamEventType.TOKEN,
            StreamEventType.TOKEN,
            StreamEventType.TOKEN,
            StreamEventType.COMPLETE,
        ]
        context, complete = events[0].data, events[-1].data
        assert context["grounded"] is True
        assert context["citations"][0]["documentName"] == "report.pdf"
        assert [e.data["index"] for e in events[1:4]] == [0, 1, 2]
        assert complete["turn_id"] == "turn-1"
        assert complete["citations"] == context["citations"]
        assert complete["truncated"] is False
        assert chat_service.last_state == TurnState.COMPLETED

        messages = await message_crud.list_by_session(db, session_id)
        assert [(m.role, m.content) for m in messages] == [
            (MessageRole.USER, "How did revenue change?"),
            (MessageRole.ASSISTANT, "Revenue grew 12% [1]."),
        ]

    async def test_no_hits_should_fall_back_without_citations(self, chat_service, create_session) -> None:
        session_id = await create_session()

        events = await collect(chat_service.stream_chat(session_id, "What about churn?"))

        assert events[0].data == {"turn_id": events[0].data["turn_id"], "grounded": False, "citations": []}
        assert events[-1].event == StreamEventType.COMPLETE
        assert events[-1].data["citations"] == []

    async def test_conversational_mode_should_skip_retrieval(
        self, chat_service, create_session, indexed_chunk
    ) -> None:
        session_id = await create_session()

        events = await collect(chat_service.stream_chat(session_id, "Hello there", mode=ChatMode.CONVERSATIONAL))

        assert events[0].data["grounded"] is False
        assert events[-1].event == StreamEventType.COMPLETE

    async def test_empty_message_should_raise_before_any_event(self, chat_service, create_session) -> None:
        session_id = await create_session()

        with pytest.raises(ValidationError):
            await collect(chat_service.stream_chat(session_id, "   "))

    async def test_unknown_session_should_raise(self, chat_service) -> None:
        with pytest.raises(SessionNotFoundError):
            await collect(chat_service.stream_chat("no-such-session", "hi"))


class TestDeclinePolicy:
    @pytest.fixture
    def settings(self):
        return make_settings(chat=ChatSettings(no_grounding_policy="decline"))

    async def test_ungrounded_turn_should_decline(self, chat_service, create_session, fake_model) -> None:
        # Arrange
        session_id = await create_session()

        # Act
        events = await collect(chat_service.stream_chat(session_id, "What about churn?"))

        # Assert
        assert [e.event for e in events] == [StreamEventType.CONTEXT, StreamEventType.TOKEN, StreamEventType.COMPLETE]
        assert events[1].data["token"] == DECLINE_ANSWER
        assert fake_model.streamed_prompts == []


class TestFailedTurns:
    """Mid-stream failure and regeneration of the same turn."""

    async def test_stream_failure_should_persist_partial_answer(
        self, chat_service, create_session, fake_model, db
    ) -> None:
        # Arrange
        session_id = await create_session()
        fake_model.fail_after = 1

        # Act
        events = await collect(chat_service.stream_chat(session_id, "Summarize", turn_id="turn-1"))

        # Assert
        error = events[-1]
        assert error.event == StreamEventType.ERROR
        assert error.data["kind"] == "TransientUpstream"
        assert error.data["regenerate_available"] is True
        assert error.data["message_id"] is not None

        [user, assistant] = await message_crud.list_by_session(db, session_id)
        assert assistant.content == "Revenue "
        assert assistant.truncated is True
        assert chat_service.last_state == TurnState.FAILED

    async def test_regenerating_turn_should_replace_partial_answer(
        self, chat_service, create_session, fake_model, db
    ) -> None:
        # Arrange
        session_id = await create_session()
        fake_model.fail_after = 1
        await collect(chat_service.stream_chat(session_id, "Summarize", turn_id="turn-1"))
        fake_model.fail_after = None

        # Act
        events = await collect(chat_service.stream_chat(session_id, "Summarize", turn_id="turn-1"))

        # Assert
        assert events[-1].event == StreamEventType.COMPLETE
        messages = await message_crud.list_by_session(db, session_id)
        assistants = [m for m in messages if m.role == MessageRole.ASSISTANT]
        assert len(messages) == 2
        assert len(assistants) == 1
        assert assistants[0].content == "Revenue grew 12% [1]."
        assert assistants[0].truncated is False


class TestProcessChat:
    async def test_process_chat_should_return_turn_result(
        self, chat_service, create_session, indexed_chunk
    ) -> None:
        # Arrange
        session_id = await create_session()

        # Act
        result = await chat_service.process_chat(session_id, "How did revenue change?", turn_id="turn-9")

        # Assert
        assert result.turn_id == "turn-9"
        assert result.content == "Revenue grew 12% [1]."
        assert result.state == TurnState.COMPLETED
        assert result.grounded is True
        assert result.citations[0].source_label == "page 2"
        assert result.truncated is False


class TestClientDisconnect:
    async def test_closing_stream_mid_answer_should_persist_truncated_answer(
        self, chat_service, create_session, fake_model, indexed_chunk, db
    ) -> None:
        # Arrange
        session_id = await create_session()
        events = chat_service.stream_chat(session_id, "How did revenue change?", turn_id="turn-1")
        assert (await events.__anext__()).event == StreamEventType.CONTEXT
        assert (await events.__anext__()).data["token"] == "Revenue "

        # Act
        await events.aclose()

        # Assert
        assert fake_model.closed_streams == 1
        messages = await message_crud.list_by_session(db, session_id)
        assistants = [m for m in messages if m.role == MessageRole.ASSISTANT]
        assert len(assistants) == 1
        assert assistants[0].content == "Revenue "
        assert assistants[0].truncated is True
        assert chat_service.last_state == TurnState.FAILED
