"""
Memory summarizer settings.

Dependencies: pydantic_settings
System role: Schedule and retry policy for the long-term memory job
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class MemorySettings(BaseSettings):
    """Memory summarization job configuration."""

    model_config = SettingsConfigDict(
        env_prefix="MEMORY_",
        case_sensitive=False,
        extra="ignore",
    )

    enabled: bool = Field(default=True, description="Start the scheduler with the application")
    interval_seconds: float = Field(default=300.0, gt=0, description="Delay between cycles")
    inactivity_threshold_minutes: float = Field(
        default=30.0,
        ge=0,
        description="Sessions idle at least this long are eligible",
    )
    max_attempts: int = Field(
        default=3,
        ge=1,
        description="Failed cycles per session before it is permanently skipped",
    )
    batch_size: int = Field(default=50, ge=1, description="Sessions considered per cycle")
