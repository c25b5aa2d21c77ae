"""
Observability module.

Provides structured logging, correlation ID tracking and the audit logger
used for tool invocations.
"""

from ragengine.observability.correlation import get_correlation_id, set_correlation_id
from ragengine.observability.logger import configure_logging, get_audit_logger

__all__ = [
    "configure_logging",
    "get_audit_logger",
    "get_correlation_id",
    "set_correlation_id",
]
