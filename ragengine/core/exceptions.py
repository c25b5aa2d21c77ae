"""
Exception hierarchy for the RAG engine.

Provides layered exception structure for domain-specific errors.
All exceptions include context for observability and debugging, and a stable
``kind`` that user-facing surfaces render as ``{kind, message}``.

Dependencies: None (pure domain layer)
System role: Centralized exception handling across the application
"""

from typing import Any


class RagEngineError(Exception):
    """Base exception for all RAG engine errors."""

    kind: str = "Internal"
    retryable: bool = False

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize base exception with message and optional context.

        Args:
            message: Human-readable error message
            details: Optional dictionary of additional context for debugging
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message

    def to_payload(self) -> dict[str, str]:
        """Render the structured, user-facing error shape."""
        return {"kind": self.kind, "message": self.message}


class ConfigurationError(RagEngineError):
    """Raised at startup when an external service is misconfigured (process-fatal)."""

    kind = "Configuration"


class TransientUpstreamError(RagEngineError):
    """Network, timeout or rate-limit failure of an external AI or store service."""

    kind = "TransientUpstream"
    retryable = True

    def __init__(
        self,
        message: str,
        service: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize transient upstream error.

        Args:
            message: Error message
            service: Upstream service that failed (embedding, llm, object_store)
            details: Additional context
        """
        details = details or {}
        if service:
            details["service"] = service
        super().__init__(message, details)


class EmbeddingServiceUnavailable(TransientUpstreamError):
    """Raised when embedding retries are exhausted."""

    def __init__(self, message: str, failed_count: int = 0, details: dict[str, Any] | None = None) -> None:
        details = details or {}
        details["failed_count"] = failed_count
        super().__init__(message, service="embedding", details=details)


class GenerationError(TransientUpstreamError):
    """Raised when the LLM service fails before or during generation."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message, service="llm", details=details)


class ValidationError(RagEngineError):
    """Raised when input validation fails. Never retried."""

    kind = "ValidationError"

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize validation error.

        Args:
            message: Error message
            field: Field name that failed validation
            details: Additional context
        """
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, details)


class ToolInputValidationError(ValidationError):
    """Raised when a planned tool input does not match the tool's schema."""

    def __init__(self, tool_name: str, errors: list[str], details: dict[str, Any] | None = None) -> None:
        details = details or {}
        details["tool_name"] = tool_name
        details["errors"] = errors
        super().__init__(f"Invalid input for tool '{tool_name}': {'; '.join(errors)}", details=details)


class ResourceNotFoundError(RagEngineError):
    """Raised when an unknown identifier is referenced."""

    kind = "ResourceNotFound"

    def __init__(self, resource: str, resource_id: str, details: dict[str, Any] | None = None) -> None:
        details = details or {}
        details[f"{resource}_id"] = resource_id
        super().__init__(f"{resource.capitalize()} not found: {resource_id}", details)


class DocumentNotFoundError(ResourceNotFoundError):
    """Raised when a document cannot be found."""

    def __init__(self, document_id: str, details: dict[str, Any] | None = None) -> None:
        super().__init__("document", document_id, details)


class SessionNotFoundError(ResourceNotFoundError):
    """Raised when a session cannot be found."""

    def __init__(self, session_id: str, details: dict[str, Any] | None = None) -> None:
        super().__init__("session", session_id, details)


class DocumentProcessingError(RagEngineError):
    """Base exception for document processing errors."""

    def __init__(
        self,
        message: str,
        document_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize document processing error.

        Args:
            message: Error message
            document_id: ID of the document that failed
            details: Additional context
        """
        details = details or {}
        if document_id:
            details["document_id"] = document_id
        super().__init__(message, details)


class PermanentExtractionFailure(DocumentProcessingError):
    """Raised for corrupt or unsupported content. Terminal."""

    kind = "PermanentExtractionFailure"

    def __init__(
        self,
        message: str,
        document_id: str | None = None,
        mime_type: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if mime_type:
            details["mime_type"] = mime_type
        super().__init__(message, document_id, details)


class EmbeddingError(DocumentProcessingError):
    """Raised when the embedding service rejects an item permanently."""

    pass


class ConcurrencyConflictError(RagEngineError):
    """Raised when an optimistic-concurrency update loses the race."""

    kind = "ConcurrencyConflict"

    def __init__(self, entity: str, entity_id: str, expected_version: int) -> None:
        super().__init__(
            f"{entity} {entity_id} was modified concurrently",
            {"entity_id": entity_id, "expected_version": expected_version},
        )


class VectorStoreError(RagEngineError):
    """Raised when vector store operations fail."""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize vector store error.

        Args:
            message: Error message
            operation: Operation that failed (upsert, query, delete)
            details: Additional context
        """
        details = details or {}
        if operation:
            details["operation"] = operation
        super().__init__(message, details)


class SecurityViolation(RagEngineError):
    """Raised when a tool attempts a non-read-only or non-allowlisted operation."""

    kind = "SecurityViolation"

    def __init__(self, message: str, tool_name: str | None = None, details: dict[str, Any] | None = None) -> None:
        details = details or {}
        if tool_name:
            details["tool_name"] = tool_name
        super().__init__(message, details)


class ToolExecutionError(RagEngineError):
    """Raised when a tool fails during execution."""

    def __init__(self, tool_name: str, message: str, details: dict[str, Any] | None = None) -> None:
        details = details or {}
        details["tool_name"] = tool_name
        super().__init__(message, details)


class RequestCancelledError(RagEngineError):
    """Raised when a request's execution context was cancelled or timed out."""

    kind = "Cancelled"
