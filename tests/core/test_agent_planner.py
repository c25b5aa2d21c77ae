"""
Test suite for AgentPlanner.

The model's function selection is scripted; tools run for real against
SQLite and the in-memory vector store.

System role: Verification of the bounded tool-calling agent
"""

import logging

import pytest

from ragengine.application.services.agent_service import AgentService
from ragengine.boundary.db.CRUD.message_crud import message_crud
from ragengine.boundary.llm.model_service import ToolCall
from ragengine.configs.agent import AgentSettings
from ragengine.core.agentic_system.planner import PlanStatus, StepStatus, ToolContext
from ragengine.core.exceptions import SessionNotFoundError, ValidationError
from ragengine.models.chat import MessageRole
from ragengine.observability.logger import AUDIT_LOGGER_NAME
from fakes import make_settings

COUNT_MESSAGES = "SELECT COUNT(*) AS message_count FROM user_messages"


def query(sql: str) -> ToolCall:
    return ToolCall(name="read_only_query", args={"sql": sql})


def export_step(source: int = 0) -> ToolCall:
    return ToolCall(
        name="csv_export",
        args={
            "columns": {"$ref": f"steps.{source}.output.columns"},
            "rows": {"$ref": f"steps.{source}.output.rows"},
        },
    )


@pytest.fixture
def planner(container):
    return container.planner


@pytest.fixture
def add_messages(session_factory, create_session):
    """Create a session for ``user_id`` holding ``turns`` user/assistant pairs."""

    async def _add(user_id: str, turns: int) -> str:
        session_id = await create_session(user_id=user_id)
        async with session_factory() as db:
            for turn in range(turns):
                await message_crud.upsert_turn_message(db, session_id, f"t{turn}", MessageRole.USER, "question")
                await message_crud.upsert_turn_message(db, session_id, f"t{turn}", MessageRole.ASSISTANT, "answer")
            await db.commit()
        return session_id

    return _add


class TestCsvExportGoal:
    """Query the user's history, then export the result as CSV."""

    async def test_plan_should_chain_query_into_csv(self, planner, fake_model, add_messages) -> None:
        # Arrange
        await add_messages("user-1", 2)
        fake_model.tool_calls = [query(COUNT_MESSAGES), export_step(0)]

        # Act
        plan = await planner.run("Export my message count as CSV", ToolContext(user_id="user-1"))

        # Assert
        assert plan.status == PlanStatus.COMPLETED
        assert [s.status for s in plan.steps] == [StepStatus.SUCCEEDED, StepStatus.SUCCEEDED]
        assert plan.steps[0].output["columns"] == ["message_count"]
        assert plan.final_answer == {"csv": "message_count\n4\n", "row_count": 1}

    async def test_query_should_only_see_callers_rows(self, planner, fake_model, add_messages) -> None:
        # Arrange
        await add_messages("user-1", 1)
        await add_messages("user-2", 3)
        fake_model.tool_calls = [query(COUNT_MESSAGES)]

        # Act
        plan = await planner.run("How many messages have I sent?", ToolContext(user_id="user-1"))

        # Assert
        assert plan.final_answer["rows"] == [[2]]

    async def test_model_should_receive_tool_schemas(self, planner, fake_model) -> None:
        fake_model.tool_calls = [query(COUNT_MESSAGES)]

        await planner.run("Count my messages", ToolContext(user_id="user-1"))

        [specs] = fake_model.select_calls
        assert {s["name"] for s in specs} == {"read_only_query", "document_search", "csv_export"}


class TestHaltingPlans:
    """Plans stop at the first failing step and skip the rest."""

    async def test_invalid_input_should_halt_and_skip_later_steps(self, planner, fake_model) -> None:
        # Arrange
        fake_model.tool_calls = [
            ToolCall(name="csv_export", args={"columns": [], "rows": []}),
            query(COUNT_MESSAGES),
        ]

        # Act
        plan = await planner.run("Export nothing", ToolContext(user_id="user-1"))

        # Assert
        assert plan.status == PlanStatus.FAILED
        assert plan.error_kind == "ValidationError"
        assert [s.status for s in plan.steps] == [StepStatus.FAILED, StepStatus.SKIPPED]
        assert plan.steps[1].output is None

    async def test_unknown_tool_should_fail_plan(self, planner, fake_model) -> None:
        fake_model.tool_calls = [ToolCall(name="send_email", args={})]

        plan = await planner.run("Email my boss", ToolContext(user_id="user-1"))

        assert plan.status == PlanStatus.FAILED
        assert plan.error_kind == "ValidationError"
        assert "send_email" in plan.error

    async def test_plan_over_budget_should_not_run_any_step(self, planner, fake_model) -> None:
        # Arrange
        fake_model.tool_calls = [query(COUNT_MESSAGES)] * 4

        # Act
        plan = await planner.run("Count four times", ToolContext(user_id="user-1"))

        # Assert
        assert plan.status == PlanStatus.FAILED
        assert plan.error_kind == "ValidationError"
        assert all(s.status == StepStatus.SKIPPED for s in plan.steps)
        assert all(s.output is None for s in plan.steps)

    async def test_empty_selection_should_fail_plan(self, planner, fake_model) -> None:
        fake_model.tool_calls = []

        plan = await planner.run("Do something", ToolContext(user_id="user-1"))

        assert plan.status == PlanStatus.FAILED
        assert plan.steps == []

    async def test_empty_goal_should_raise(self, planner) -> None:
        with pytest.raises(ValidationError):
            await planner.run("  ", ToolContext(user_id="user-1"))

    async def test_query_on_raw_table_should_be_a_security_violation(
        self, planner, fake_model, caplog
    ) -> None:
        # Arrange
        fake_model.tool_calls = [query("SELECT user_id FROM sessions"), export_step(0)]
        caplog.set_level(logging.INFO, logger=AUDIT_LOGGER_NAME)

        # Act
        plan = await planner.run("List every user", ToolContext(user_id="user-1"))

        # Assert
        assert plan.status == PlanStatus.FAILED
        assert plan.error_kind == "SecurityViolation"
        assert [s.status for s in plan.steps] == [StepStatus.FAILED, StepStatus.SKIPPED]
        audit = [r for r in caplog.records if r.name == AUDIT_LOGGER_NAME]
        assert [r.outcome for r in audit] == ["blocked"]
        assert audit[0].tool_input == {"sql": "SELECT user_id FROM sessions"}


class TestTransformAllowlist:
    @pytest.fixture
    def settings(self):
        return make_settings(agent=AgentSettings(max_steps=3, transform_allowlist=[]))

    async def test_transform_outside_allowlist_should_be_rejected(
        self, planner, fake_model, add_messages
    ) -> None:
        # Arrange
        await add_messages("user-1", 1)
        fake_model.tool_calls = [query(COUNT_MESSAGES), export_step(0)]

        # Act
        plan = await planner.run("Export my message count", ToolContext(user_id="user-1"))

        # Assert
        assert plan.status == PlanStatus.FAILED
        assert plan.error_kind == "SecurityViolation"
        assert [s.status for s in plan.steps] == [StepStatus.SUCCEEDED, StepStatus.FAILED]


class TestAgentService:
    async def test_goal_should_run_for_session_owner(
        self, container, fake_model, add_messages, test_async_db
    ) -> None:
        # Arrange
        session_id = await add_messages("user-2", 1)
        await add_messages("user-1", 4)
        fake_model.tool_calls = [query(COUNT_MESSAGES)]
        service = AgentService(test_async_db, container.planner, container.settings.agent)

        # Act
        plan = await service.run_goal(session_id, "How many messages have I sent?")

        # Assert
        assert plan.final_answer["rows"] == [[2]]

    async def test_unknown_session_should_raise(self, container, test_async_db) -> None:
        service = AgentService(test_async_db, container.planner)

        with pytest.raises(SessionNotFoundError):
            await service.run_goal("no-such-session", "anything")
