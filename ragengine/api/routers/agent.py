"""
Agent API endpoints.

Routes:
- POST /sessions/{id}/goals - Plan and execute a goal with the agent tools

Dependencies: ragengine.application.services.agent_service
System role: Agent HTTP API
"""

import logging

from fastapi import APIRouter, Depends

from ragengine.api.deps import get_agent_service
from ragengine.application.services.agent_service import AgentService
from ragengine.core.agentic_system.planner import Plan
from ragengine.models.agent import GoalRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sessions", tags=["agent"])


@router.post("/{session_id}/goals", response_model=Plan)
async def run_goal(
    session_id: str,
    request: GoalRequest,
    agent_service: AgentService = Depends(get_agent_service),
) -> Plan:
    """
    Run a goal for the session's user.

    A halted plan is returned with status ``failed`` and per-step status,
    not as an HTTP error.
    """
    plan = await agent_service.run_goal(session_id, request.goal)
    logger.info(f"{__name__}:run_goal - session_id={session_id}, plan_id={plan.id}, status={plan.status.value}")
    return plan
