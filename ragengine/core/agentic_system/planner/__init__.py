"""
Agent planner: bounded tool-calling loop over a fixed tool registry.
"""

from ragengine.core.agentic_system.planner.plan_schema import Plan, PlanStatus, PlanStep, StepStatus
from ragengine.core.agentic_system.planner.planner import AgentPlanner
from ragengine.core.agentic_system.planner.tool_registry import (
    AgentTool,
    CapabilityClass,
    ToolContext,
    ToolDefinition,
    ToolRegistry,
)

__all__ = [
    "AgentPlanner",
    "AgentTool",
    "CapabilityClass",
    "Plan",
    "PlanStatus",
    "PlanStep",
    "StepStatus",
    "ToolContext",
    "ToolDefinition",
    "ToolRegistry",
]
