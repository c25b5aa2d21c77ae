"""
Per-request execution context.

Every chat turn, retrieval, plan and model call carries one of these instead
of relying on ambient client state: a correlation ID for log stitching, a
deadline, and a cooperative cancellation flag that model streams poll at each
fragment boundary.

Dependencies: asyncio, ragengine.observability.correlation
System role: Bounded execution context with cancellation
"""

import asyncio
import time
import uuid
from dataclasses import dataclass, field

from ragengine.core.exceptions import RequestCancelledError
from ragengine.observability.correlation import get_correlation_id


@dataclass
class RequestContext:
    """Correlation ID, deadline and cancellation for one unit of work."""

    correlation_id: str = field(default_factory=lambda: get_correlation_id() or str(uuid.uuid4()))
    timeout_seconds: float | None = None
    _started_at: float = field(default_factory=time.monotonic, repr=False)
    _cancel_event: asyncio.Event = field(default_factory=asyncio.Event, repr=False)

    @property
    def deadline(self) -> float | None:
        if self.timeout_seconds is None:
            return None
        return self._started_at + self.timeout_seconds

    def remaining(self) -> float | None:
        """Seconds left before the deadline (None when unbounded, never negative)."""
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.monotonic())

    @property
    def expired(self) -> bool:
        remaining = self.remaining()
        return remaining is not None and remaining <= 0.0

    @property
    def cancelled(self) -> bool:
        return self._cancel_event.is_set() or self.expired

    def cancel(self) -> None:
        """Request cooperative cancellation (e.g. client disconnected)."""
        self._cancel_event.set()

    def raise_if_cancelled(self) -> None:
        if self._cancel_event.is_set():
            raise RequestCancelledError("Request was cancelled", {"correlation_id": self.correlation_id})
        if self.expired:
            raise RequestCancelledError(
                "Request exceeded its time budget",
                {"correlation_id": self.correlation_id, "timeout_seconds": self.timeout_seconds},
            )

    async def wait_cancelled(self) -> None:
        await self._cancel_event.wait()

    def child(self, timeout_seconds: float | None = None) -> "RequestContext":
        """Derive a context sharing the correlation ID with a tighter deadline."""
        remaining = self.remaining()
        if timeout_seconds is None:
            bound = remaining
        elif remaining is None:
            bound = timeout_seconds
        else:
            bound = min(timeout_seconds, remaining)
        child = RequestContext(correlation_id=self.correlation_id, timeout_seconds=bound)
        child._cancel_event = self._cancel_event
        return child
