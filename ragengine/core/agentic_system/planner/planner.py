"""
Agent planner.

Asks the model to choose an ordered list of tool calls for a goal, then
executes them one at a time against the fixed ToolRegistry.

Execution halts on the first unrecoverable problem: an over-budget plan,
an unknown tool, a capability that is not allowed, input that fails the
tool's schema, a security violation or a tool error. Steps after the
failing one are marked skipped. Every invocation, including rejected
ones, is written to the audit logger with its input and output.

Dependencies: langchain_core, pydantic
System role: Bounded tool-calling agent loop
"""

import logging
from datetime import datetime, timezone

from langchain_core.messages import HumanMessage, SystemMessage
from pydantic import ValidationError as PydanticValidationError

from ragengine.boundary.llm.model_service import ModelService
from ragengine.configs.agent import AgentSettings
from ragengine.core.agentic_system.planner.bindings import resolve_bindings
from ragengine.core.agentic_system.planner.plan_schema import Plan, PlanStatus, PlanStep, StepStatus
from ragengine.core.agentic_system.planner.planner_prompt import PLANNER_SYSTEM_PROMPT
from ragengine.core.agentic_system.planner.tool_registry import (
    AgentTool,
    CapabilityClass,
    ToolContext,
    ToolRegistry,
)
from ragengine.core.exceptions import (
    RagEngineError,
    SecurityViolation,
    ToolExecutionError,
    ToolInputValidationError,
    ValidationError,
)
from ragengine.observability.log_utils import to_audit_json
from ragengine.observability.logger import get_audit_logger

logger = logging.getLogger(__name__)
audit_logger = get_audit_logger()


class AgentPlanner:
    """Plan and execute tool calls toward a goal."""

    def __init__(
        self,
        model_service: ModelService,
        registry: ToolRegistry,
        settings: AgentSettings | None = None,
    ) -> None:
        """
        Initialize planner.

        Args:
            model_service: Supplies function selection
            registry: Tools the planner may use
            settings: Step budget and transform allowlist
        """
        self._model_service = model_service
        self._registry = registry
        self._settings = settings or AgentSettings()

    async def run(self, goal: str, context: ToolContext) -> Plan:
        """Create a plan for ``goal`` and execute it."""
        plan = await self.create_plan(goal, context)
        if plan.status == PlanStatus.FAILED:
            return plan
        return await self.execute(plan, context)

    async def create_plan(self, goal: str, context: ToolContext) -> Plan:
        """
        Obtain an ordered plan from the model's function selection.

        Raises:
            ValidationError: Empty goal
        """
        if not goal or not goal.strip():
            raise ValidationError("Goal must not be empty", field="goal")

        prompt = PLANNER_SYSTEM_PROMPT.format(
            max_steps=self._settings.max_steps,
            today=datetime.now(timezone.utc).date().isoformat(),
        )
        calls = await self._model_service.select_tools(
            [SystemMessage(content=prompt), HumanMessage(content=goal)],
            self._registry.function_specs(),
            context.request,
        )

        plan = Plan(
            goal=goal,
            steps=[PlanStep(index=i, tool_name=call.name, input=call.args) for i, call in enumerate(calls)],
        )
        logger.info(f"{__name__}:create_plan - plan_id={plan.id}, steps={[s.tool_name for s in plan.steps]}")

        if not plan.steps:
            self._fail_plan(plan, ValidationError("Model selected no tools for this goal"))
        elif len(plan.steps) > self._settings.max_steps:
            for step in plan.steps:
                step.status = StepStatus.SKIPPED
            self._fail_plan(
                plan,
                ValidationError(
                    f"Plan has {len(plan.steps)} steps, the budget is {self._settings.max_steps}",
                    field="steps",
                ),
            )
        return plan

    async def execute(self, plan: Plan, context: ToolContext) -> Plan:
        """Run the plan's steps in order, halting on the first failure."""
        if len(plan.steps) > self._settings.max_steps:
            for step in plan.steps:
                step.status = StepStatus.SKIPPED
            self._fail_plan(plan, ValidationError("Step budget exceeded", field="steps"))
            return plan

        plan.status = PlanStatus.RUNNING
        for step in plan.steps:
            try:
                context.request.raise_if_cancelled()
                await self._execute_step(plan, step, context)
            except RagEngineError as e:
                step.status = StepStatus.FAILED
                step.error = e.message
                self._skip_remaining(plan, step.index)
                self._fail_plan(plan, e)
                return plan

        plan.status = PlanStatus.COMPLETED
        plan.final_answer = plan.steps[-1].output if plan.steps else None
        logger.info(f"{__name__}:execute - plan_id={plan.id} completed, steps={len(plan.steps)}")
        return plan

    async def _execute_step(self, plan: Plan, step: PlanStep, context: ToolContext) -> None:
        tool = self._registry.get(step.tool_name)
        if tool is None:
            self._audit(plan, step, context, outcome="rejected", reason="unknown tool")
            raise ToolInputValidationError(step.tool_name, [f"Unknown tool '{step.tool_name}'"])

        if not self._is_allowed(tool):
            self._audit(plan, step, context, outcome="rejected", reason="capability not allowed")
            raise SecurityViolation(
                f"Tool '{tool.name}' has capability '{tool.capability.value}' and is not allowlisted",
                tool_name=tool.name,
            )

        try:
            resolved = resolve_bindings(step.input, plan.steps, step)
        except ToolInputValidationError as e:
            self._audit(plan, step, context, outcome="rejected", reason=e.message)
            raise
        try:
            data = tool.InputModel.model_validate(resolved)
        except PydanticValidationError as e:
            errors = [f"{'.'.join(str(p) for p in err['loc']) or 'input'}: {err['msg']}" for err in e.errors()]
            self._audit(plan, step, context, outcome="rejected", reason="invalid input", tool_input=resolved)
            raise ToolInputValidationError(tool.name, errors) from e

        step.status = StepStatus.RUNNING
        try:
            result = await tool.run(data, context)
        except SecurityViolation as e:
            self._audit(plan, step, context, outcome="blocked", reason=e.message, tool_input=resolved)
            raise
        except RagEngineError as e:
            self._audit(plan, step, context, outcome="failed", reason=e.message, tool_input=resolved)
            if isinstance(e, ToolExecutionError):
                raise
            raise ToolExecutionError(tool.name, e.message) from e
        except Exception as e:
            self._audit(plan, step, context, outcome="failed", reason=str(e), tool_input=resolved)
            raise ToolExecutionError(tool.name, f"{type(e).__name__}: {e}") from e

        step.output = tool.OutputModel.model_validate(result).model_dump(mode="json")
        step.status = StepStatus.SUCCEEDED
        self._audit(plan, step, context, outcome="succeeded", tool_input=resolved, tool_output=step.output)

    def _is_allowed(self, tool: AgentTool) -> bool:
        if tool.capability == CapabilityClass.READ_ONLY:
            return True
        return tool.name in self._settings.transform_allowlist

    def _skip_remaining(self, plan: Plan, failed_index: int) -> None:
        for step in plan.steps[failed_index + 1 :]:
            step.status = StepStatus.SKIPPED

    def _fail_plan(self, plan: Plan, error: RagEngineError) -> None:
        plan.status = PlanStatus.FAILED
        plan.error = error.message
        plan.error_kind = error.kind
        logger.warning(f"{__name__}:_fail_plan - plan_id={plan.id} halted: {error.kind}: {error.message}")

    def _audit(
        self,
        plan: Plan,
        step: PlanStep,
        context: ToolContext,
        outcome: str,
        reason: str | None = None,
        tool_input=None,
        tool_output=None,
    ) -> None:
        tool_input = step.input if tool_input is None else tool_input
        audit_logger.info(
            f"tool_invocation plan_id={plan.id} step={step.index} tool={step.tool_name} outcome={outcome} "
            f"input={to_audit_json(tool_input)} output={to_audit_json(tool_output)}",
            extra={
                "plan_id": plan.id,
                "step": step.index,
                "tool_name": step.tool_name,
                "user_id": context.user_id,
                "correlation_id": context.request.correlation_id,
                "outcome": outcome,
                "reason": reason,
                "tool_input": tool_input,
                "tool_output": tool_output,
            },
        )
