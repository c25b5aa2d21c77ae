"""
Agent planner settings.

Dependencies: pydantic_settings
System role: Step budget and capability allowlist for tool plans
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AgentSettings(BaseSettings):
    """Bounds for the tool-calling agent loop."""

    model_config = SettingsConfigDict(
        env_prefix="AGENT_",
        case_sensitive=False,
        extra="ignore",
    )

    max_steps: int = Field(default=5, ge=1, description="Maximum steps in one plan")
    transform_allowlist: list[str] = Field(
        default=["csv_export"],
        description="Transform-capability tools allowed to run",
    )
    query_row_limit: int = Field(default=500, ge=1, description="Rows returned by read-only queries")
    plan_timeout_seconds: float = Field(default=120.0, description="Bound on planning plus execution")
