"""
Step output bindings.

Resolves ``{"$ref": "steps.<i>.output.<field>"}`` placeholders in a step's
input against the outputs of earlier, succeeded steps.
"""

from typing import Any

from ragengine.core.agentic_system.planner.plan_schema import PlanStep, StepStatus
from ragengine.core.exceptions import ToolInputValidationError

REF_KEY = "$ref"


def is_binding(value: Any) -> bool:
    return isinstance(value, dict) and set(value) == {REF_KEY} and isinstance(value[REF_KEY], str)


def resolve_bindings(value: Any, steps: list[PlanStep], current: PlanStep) -> Any:
    """Return ``value`` with every binding replaced by the referenced output."""
    if is_binding(value):
        return _lookup(value[REF_KEY], steps, current)
    if isinstance(value, dict):
        return {key: resolve_bindings(item, steps, current) for key, item in value.items()}
    if isinstance(value, list):
        return [resolve_bindings(item, steps, current) for item in value]
    return value


def _lookup(ref: str, steps: list[PlanStep], current: PlanStep) -> Any:
    parts = ref.split(".")
    if len(parts) < 3 or parts[0] != "steps" or parts[2] != "output" or not parts[1].isdigit():
        raise _binding_error(current, f"Malformed binding '{ref}', expected steps.<i>.output.<field>")

    index = int(parts[1])
    if index >= current.index:
        raise _binding_error(current, f"Binding '{ref}' refers to a step that has not run yet")

    source = steps[index]
    if source.status != StepStatus.SUCCEEDED or source.output is None:
        raise _binding_error(current, f"Binding '{ref}' refers to a step without output")

    value: Any = source.output
    for field_name in parts[3:]:
        if not isinstance(value, dict) or field_name not in value:
            raise _binding_error(current, f"Binding '{ref}': step {index} output has no field '{field_name}'")
        value = value[field_name]
    return value


def _binding_error(step: PlanStep, message: str) -> ToolInputValidationError:
    return ToolInputValidationError(step.tool_name, [message], details={"step": step.index})
