"""
Chat orchestration settings.

Dependencies: pydantic_settings
System role: Conversation context sizing and grounding policy
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ChatSettings(BaseSettings):
    """Context window, retrieval depth and no-grounding policy for chat turns."""

    model_config = SettingsConfigDict(
        env_prefix="CHAT_",
        case_sensitive=False,
        extra="ignore",
    )

    history_window: int = Field(default=10, ge=0, description="Recent messages loaded per turn")
    grounded_top_k: int = Field(default=5, ge=1, le=100, description="Chunks injected in grounded mode")
    memory_top_k: int = Field(default=3, ge=0, description="Memory summaries injected per turn")
    no_grounding_policy: str = Field(
        default="fallback",
        description="'fallback' answers without sources, 'decline' returns a fixed refusal",
    )
    turn_timeout_seconds: float = Field(default=120.0, description="Bound on a whole chat turn")
