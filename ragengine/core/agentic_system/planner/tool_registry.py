"""
Agent tool registry.

Tools are classes with declared pydantic input/output models and a
capability class. The registry is fixed at construction; the planner can
only run what is registered here.

Dependencies: pydantic
System role: Tool catalogue for the agent planner
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar

from pydantic import BaseModel, Field

from ragengine.core.request_context import RequestContext


class CapabilityClass(str, Enum):
    READ_ONLY = "read_only"
    TRANSFORM = "transform"


class ToolDefinition(BaseModel):
    """Public description of a tool."""

    name: str
    description: str
    input_schema: dict[str, Any] = Field(default_factory=dict)
    output_schema: dict[str, Any] = Field(default_factory=dict)
    capability_class: CapabilityClass


@dataclass
class ToolContext:
    """Who a tool runs for, and under which request bounds."""

    user_id: str
    session_id: str | None = None
    request: RequestContext = field(default_factory=RequestContext)


class AgentTool(ABC):
    """Base class for planner tools."""

    name: ClassVar[str]
    description: ClassVar[str]
    capability: ClassVar[CapabilityClass]
    InputModel: ClassVar[type[BaseModel]]
    OutputModel: ClassVar[type[BaseModel]]

    @abstractmethod
    async def run(self, data: BaseModel, context: ToolContext) -> BaseModel:
        """Execute with validated input; return an ``OutputModel`` instance."""

    def definition(self) -> ToolDefinition:
        return ToolDefinition(
            name=self.name,
            description=self.description,
            input_schema=self.InputModel.model_json_schema(),
            output_schema=self.OutputModel.model_json_schema(),
            capability_class=self.capability,
        )

    def function_spec(self) -> dict[str, Any]:
        """Function-calling declaration handed to the model."""
        return {
            "name": self.name,
            "description": self.description,
            "parameters": self.InputModel.model_json_schema(),
        }


class ToolRegistry:
    """Fixed set of tools keyed by name."""

    def __init__(self, tools: list[AgentTool]) -> None:
        self._tools: dict[str, AgentTool] = {}
        for tool in tools:
            if tool.name in self._tools:
                raise ValueError(f"Duplicate tool name: {tool.name}")
            self._tools[tool.name] = tool

    def get(self, name: str) -> AgentTool | None:
        return self._tools.get(name)

    @property
    def names(self) -> list[str]:
        return list(self._tools)

    def definitions(self) -> list[ToolDefinition]:
        return [tool.definition() for tool in self._tools.values()]

    def function_specs(self) -> list[dict[str, Any]]:
        return [tool.function_spec() for tool in self._tools.values()]
