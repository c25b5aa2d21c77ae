"""
Core business logic module.

Contains domain business logic, exception hierarchy, and core components.
All business rules and domain-specific logic reside here.
"""

from ragengine.core.exceptions import (
    ConcurrencyConflictError,
    DocumentNotFoundError,
    EmbeddingServiceUnavailable,
    PermanentExtractionFailure,
    RagEngineError,
    ResourceNotFoundError,
    SecurityViolation,
    SessionNotFoundError,
    TransientUpstreamError,
    ValidationError,
)
from ragengine.core.request_context import RequestContext

__all__ = [
    "ConcurrencyConflictError",
    "DocumentNotFoundError",
    "EmbeddingServiceUnavailable",
    "PermanentExtractionFailure",
    "RagEngineError",
    "RequestContext",
    "ResourceNotFoundError",
    "SecurityViolation",
    "SessionNotFoundError",
    "TransientUpstreamError",
    "ValidationError",
]
