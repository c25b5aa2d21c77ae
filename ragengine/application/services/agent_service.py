"""
Agent service orchestrator.

Runs an agent goal for the owner of a conversation session.

Dependencies: ragengine.core.agentic_system.planner
System role: Agent use case orchestration
"""

from sqlalchemy.ext.asyncio import AsyncSession

from ragengine.boundary.db.CRUD.session_crud import session_crud
from ragengine.configs.agent import AgentSettings
from ragengine.core.agentic_system.planner import AgentPlanner, Plan, ToolContext
from ragengine.core.exceptions import SessionNotFoundError
from ragengine.core.request_context import RequestContext


class AgentService:
    """Agent service orchestrator."""

    def __init__(self, db: AsyncSession, planner: AgentPlanner, settings: AgentSettings | None = None) -> None:
        self.db = db
        self._planner = planner
        self._settings = settings or AgentSettings()

    async def run_goal(self, session_id: str, goal: str, ctx: RequestContext | None = None) -> Plan:
        """
        Plan and execute a goal on behalf of the session's user.

        Returns:
            Plan with per-step status (failed plans are returned, not raised)

        Raises:
            SessionNotFoundError: Unknown session
            ValidationError: Empty goal
        """
        session = await session_crud.get_by_id(self.db, session_id)
        if session is None:
            raise SessionNotFoundError(session_id)

        ctx = ctx or RequestContext(timeout_seconds=self._settings.plan_timeout_seconds)
        context = ToolContext(user_id=session.user_id, session_id=session_id, request=ctx)
        return await self._planner.run(goal, context)
