"""
Object store configuration.

Settings for the raw document bucket read by the ingestion pipeline.

Dependencies: pydantic_settings
System role: Object store (S3) configuration
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ObjectStoreSettings(BaseSettings):
    """Settings for raw document retrieval."""

    model_config = SettingsConfigDict(
        env_prefix="OBJECT_STORE_",
        case_sensitive=False,
        extra="ignore",
    )

    region: str = Field(
        default="ap-southeast-2",
        description="AWS region for the documents bucket",
    )
    endpoint_url: str | None = Field(
        default=None,
        description="Custom S3 endpoint (MinIO, LocalStack)",
    )
    local_root: str = Field(
        default=".",
        description="Base directory for file:// and relative URIs",
    )
