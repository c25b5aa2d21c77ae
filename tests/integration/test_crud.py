"""
Test suite for the CRUD layer against SQLite.

Covers compare-and-set document transitions, idempotent turn messages
and the summarization bookkeeping on sessions.

System role: Verification of persistence layer
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest

from ragengine.boundary.db.CRUD.document_crud import document_crud
from ragengine.boundary.db.CRUD.memory_summary_crud import memory_summary_crud
from ragengine.boundary.db.CRUD.message_crud import message_crud
from ragengine.boundary.db.CRUD.session_crud import session_crud
from ragengine.core.exceptions import ConcurrencyConflictError, DocumentNotFoundError
from ragengine.models.chat import MessageRole
from ragengine.models.document import DocumentStatus


class TestDocumentTransitions:
    """Test suite for DocumentCRUD.transition_status."""

    async def test_transition_should_bump_version(self, test_async_db, create_document) -> None:
        # Arrange
        document_id = await create_document()

        # Act
        document = await document_crud.transition_status(
            test_async_db, document_id, expected_version=0, status=DocumentStatus.EXTRACTING
        )

        # Assert
        assert document.status == DocumentStatus.EXTRACTING
        assert document.version == 1

    async def test_stale_version_should_conflict(self, test_async_db, create_document) -> None:
        document_id = await create_document()
        await document_crud.transition_status(
            test_async_db, document_id, expected_version=0, status=DocumentStatus.EXTRACTING
        )

        with pytest.raises(ConcurrencyConflictError):
            await document_crud.transition_status(
                test_async_db, document_id, expected_version=0, status=DocumentStatus.FAILED
            )

    async def test_unexpected_source_status_should_conflict(self, test_async_db, create_document) -> None:
        document_id = await create_document()

        with pytest.raises(ConcurrencyConflictError):
            await document_crud.transition_status(
                test_async_db,
                document_id,
                expected_version=0,
                status=DocumentStatus.CHUNKING,
                from_statuses=[DocumentStatus.EXTRACTING],
            )

    async def test_missing_row_after_update_should_raise_not_found(
        self, test_async_db, create_document, monkeypatch
    ) -> None:
        # Arrange
        document_id = await create_document()
        monkeypatch.setattr(document_crud, "get_by_id", AsyncMock(return_value=None))

        # Act / Assert
        with pytest.raises(DocumentNotFoundError):
            await document_crud.transition_status(
                test_async_db, document_id, expected_version=0, status=DocumentStatus.EXTRACTING
            )

    async def test_get_by_owner_should_scope_documents(self, test_async_db, create_document) -> None:
        await create_document(owner_id="user-1")
        await create_document(owner_id="user-2")

        documents = await document_crud.get_by_owner(test_async_db, "user-1")

        assert [d.owner_id for d in documents] == ["user-1"]


class TestTurnMessages:
    """Test suite for MessageCRUD.upsert_turn_message."""

    async def test_new_turn_should_increment_message_count(self, test_async_db, create_session) -> None:
        # Arrange
        session_id = await create_session()

        # Act
        await message_crud.upsert_turn_message(test_async_db, session_id, "turn-1", MessageRole.USER, "hi")
        await message_crud.upsert_turn_message(test_async_db, session_id, "turn-1", MessageRole.ASSISTANT, "hello")
        await test_async_db.commit()

        # Assert
        session = await session_crud.get_by_id(test_async_db, session_id)
        assert session.message_count == 2

    async def test_same_turn_should_replace_not_append(self, test_async_db, create_session) -> None:
        # Arrange
        session_id = await create_session()
        await message_crud.upsert_turn_message(
            test_async_db, session_id, "turn-1", MessageRole.ASSISTANT, "partial", truncated=True
        )
        await test_async_db.commit()

        # Act
        await message_crud.upsert_turn_message(
            test_async_db, session_id, "turn-1", MessageRole.ASSISTANT, "full answer", citations=[{"score": 1.0}]
        )
        await test_async_db.commit()

        # Assert
        messages = await message_crud.list_by_session(test_async_db, session_id)
        assert len(messages) == 1
        assert messages[0].content == "full answer"
        assert messages[0].truncated is False
        assert messages[0].citations == [{"score": 1.0}]
        session = await session_crud.get_by_id(test_async_db, session_id)
        assert session.message_count == 1
        assert session.content_version == 2

    async def test_unchanged_replacement_should_keep_content_version(self, test_async_db, create_session) -> None:
        # Arrange
        session_id = await create_session()
        await message_crud.upsert_turn_message(test_async_db, session_id, "turn-1", MessageRole.USER, "hi")
        await test_async_db.commit()

        # Act
        await message_crud.upsert_turn_message(test_async_db, session_id, "turn-1", MessageRole.USER, "hi")
        await test_async_db.commit()

        # Assert
        session = await session_crud.get_by_id(test_async_db, session_id)
        assert (session.message_count, session.content_version) == (1, 1)

    async def test_list_recent_should_return_oldest_first(self, test_async_db, create_session) -> None:
        session_id = await create_session()
        for index in range(4):
            await message_crud.upsert_turn_message(
                test_async_db, session_id, f"turn-{index}", MessageRole.USER, f"message {index}"
            )
        await test_async_db.commit()

        recent = await message_crud.list_recent(test_async_db, session_id, 2)

        assert [m.content for m in recent] == ["message 2", "message 3"]


class TestSummaryBookkeeping:
    async def test_candidates_should_require_unsummarized_messages(self, test_async_db, create_session) -> None:
        # Arrange
        active = await create_session()
        await create_session()  # no messages
        await message_crud.upsert_turn_message(test_async_db, active, "t1", MessageRole.USER, "hi")
        await test_async_db.commit()
        later = datetime.now(timezone.utc) + timedelta(minutes=1)

        # Act
        candidates = await session_crud.list_summary_candidates(test_async_db, later, max_attempts=3)

        # Assert
        assert [c.id for c in candidates] == [active]

    async def test_failures_should_skip_after_cap(self, test_async_db, create_session) -> None:
        session_id = await create_session()

        first = await session_crud.record_summary_failure(test_async_db, session_id, "boom", max_attempts=2)
        assert first.summary_skipped_reason is None
        second = await session_crud.record_summary_failure(test_async_db, session_id, "boom", max_attempts=2)

        assert second.summary_attempts == 2
        assert "gave up" in second.summary_skipped_reason

    async def test_summary_upsert_should_keep_one_row_per_session(self, test_async_db, create_session) -> None:
        session_id = await create_session()

        await memory_summary_crud.upsert(
            test_async_db, user_id="user-1", source_session_id=session_id,
            summary_text="v1", vector=[1.0, 0.0, 0.0], processed_version=1,
        )
        await memory_summary_crud.upsert(
            test_async_db, user_id="user-1", source_session_id=session_id,
            summary_text="v2", vector=[0.0, 1.0, 0.0], processed_version=2,
        )
        await test_async_db.commit()

        rows = await memory_summary_crud.get_by_user(test_async_db, "user-1")
        assert [(r.summary_text, r.processed_version) for r in rows] == [("v2", 2)]
