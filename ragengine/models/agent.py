"""
Agent goal request schema.

Dependencies: pydantic
System role: Agent API contracts
"""

from pydantic import BaseModel, Field


class GoalRequest(BaseModel):
    """A goal for the agent planner."""

    goal: str = Field(min_length=1, max_length=2000, description="What the agent should accomplish")
