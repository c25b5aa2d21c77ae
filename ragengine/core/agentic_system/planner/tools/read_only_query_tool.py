"""
Read-only SQL query tool.

Runs a guarded SELECT against views that only expose the calling user's
rows. The views are common table expressions bound to the user id, so
no other user's data is reachable from the statement. The transaction is
always rolled back.

Dependencies: sqlalchemy
System role: Agent tool for querying the user's own history
"""

import logging
from typing import Any

from pydantic import BaseModel, Field
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from ragengine.core.agentic_system.planner.sql_guard import normalize_select
from ragengine.core.agentic_system.planner.tool_registry import AgentTool, CapabilityClass, ToolContext
from ragengine.core.exceptions import ToolExecutionError

logger = logging.getLogger(__name__)

USER_SCOPED_CTES = """WITH
user_sessions AS (
    SELECT id, created_at, updated_at, last_activity_at, message_count
    FROM sessions WHERE user_id = :scope_user_id
),
user_messages AS (
    SELECT m.id, m.session_id, m.turn_id, m.role, m.content, m.truncated, m.created_at
    FROM messages m JOIN sessions s ON s.id = m.session_id
    WHERE s.user_id = :scope_user_id
),
user_documents AS (
    SELECT id, name, mime_type, status, chunk_count, created_at, updated_at
    FROM documents WHERE owner_id = :scope_user_id
)
"""


class ReadOnlyQueryInput(BaseModel):
    sql: str = Field(
        min_length=1,
        description="A single SELECT over user_messages, user_sessions or user_documents",
    )


class ReadOnlyQueryOutput(BaseModel):
    columns: list[str]
    rows: list[list[Any]]
    row_count: int
    truncated: bool = False


class ReadOnlyQueryTool(AgentTool):
    name = "read_only_query"
    description = (
        "Run a read-only SQL SELECT over the current user's data. Views: "
        "user_sessions(id, created_at, updated_at, last_activity_at, message_count), "
        "user_messages(id, session_id, turn_id, role, content, truncated, created_at), "
        "user_documents(id, name, mime_type, status, chunk_count, created_at, updated_at)."
    )
    capability = CapabilityClass.READ_ONLY
    InputModel = ReadOnlyQueryInput
    OutputModel = ReadOnlyQueryOutput

    def __init__(self, session_factory: async_sessionmaker, row_limit: int = 500) -> None:
        self._session_factory = session_factory
        self._row_limit = row_limit

    async def run(self, data: ReadOnlyQueryInput, context: ToolContext) -> ReadOnlyQueryOutput:
        statement = normalize_select(data.sql)
        wrapped = text(f"{USER_SCOPED_CTES}SELECT * FROM ({statement}) AS scoped_query LIMIT :scope_row_limit")
        params = {"scope_user_id": context.user_id, "scope_row_limit": self._row_limit + 1}

        async with self._session_factory() as db:
            try:
                if db.bind.dialect.name == "postgresql":
                    await db.execute(text("SET TRANSACTION READ ONLY"))
                result = await db.execute(wrapped, params)
                columns = list(result.keys())
                rows = [list(row) for row in result.fetchall()]
            except SQLAlchemyError as e:
                logger.warning(f"{__name__}:run - query failed: {type(e).__name__}: {e}")
                raise ToolExecutionError(self.name, f"Query failed: {e.__class__.__name__}") from e
            finally:
                await db.rollback()

        truncated = len(rows) > self._row_limit
        rows = rows[: self._row_limit]
        logger.info(f"{__name__}:run - user_id={context.user_id}, rows={len(rows)}, truncated={truncated}")
        return ReadOnlyQueryOutput(columns=columns, rows=rows, row_count=len(rows), truncated=truncated)
