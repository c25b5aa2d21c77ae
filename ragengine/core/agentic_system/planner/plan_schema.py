"""
Plan and step schemas for the agent planner.

Dependencies: pydantic
System role: Plan state returned to API callers
"""

from enum import Enum
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, Field


class PlanStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class StepStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    SKIPPED = "skipped"


class PlanStep(BaseModel):
    """One tool invocation. ``input`` may hold ``{"$ref": "steps.<i>.output.<field>"}`` bindings."""

    index: int
    tool_name: str
    input: dict[str, Any] = Field(default_factory=dict)
    status: StepStatus = StepStatus.PENDING
    output: dict[str, Any] | None = None
    error: str | None = None


class Plan(BaseModel):
    """Ordered tool steps toward a goal."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    goal: str
    status: PlanStatus = PlanStatus.PENDING
    steps: list[PlanStep] = Field(default_factory=list)
    final_answer: dict[str, Any] | None = None
    error: str | None = None
    error_kind: str | None = None
