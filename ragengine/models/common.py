"""
Common response models.

Error schema shared by HTTP and WebSocket surfaces.

Dependencies: pydantic
System role: Common API response structures
"""

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Structured, user-facing error."""

    kind: str = Field(description="Stable error category, e.g. ValidationError")
    message: str = Field(description="Error message")
