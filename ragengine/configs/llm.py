"""
LLM configuration settings.

Model identifiers and generation parameters for chat, summarization,
planning and OCR calls.

Dependencies: pydantic_settings
System role: Model service configuration
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class LLMSettings(BaseSettings):
    """Google Gemini model configuration."""

    model_config = SettingsConfigDict(
        env_prefix="LLM_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    google_api_key: str | None = Field(
        default=None,
        description="API key for Google Generative AI (falls back to GOOGLE_API_KEY)",
    )
    chat_model: str = Field(default="gemini-2.5-flash", description="Model for streamed answers")
    summary_model: str = Field(default="gemini-2.5-flash", description="Model for memory summaries")
    planner_model: str = Field(default="gemini-2.5-flash", description="Model for tool selection")
    vision_model: str = Field(default="gemini-2.5-flash", description="Model for OCR of images/scans")
    temperature: float = Field(default=0.0, description="Sampling temperature")
    request_timeout_seconds: float = Field(
        default=60.0,
        description="Default bounded execution time for one model call",
    )
