"""
Cancellable fragment stream.

Wraps a model's async iterator of text fragments: ordered, finite,
single-pass, and accumulating the full text as it is consumed.

Dependencies: asyncio
System role: Streaming primitive between the model service and chat
"""

import logging
from collections.abc import AsyncGenerator, AsyncIterator

from ragengine.core.request_context import RequestContext

logger = logging.getLogger(__name__)


class FragmentStream:
    """
    Single-pass async iterator over answer fragments.

    Iterating a second time raises RuntimeError. ``cancel()`` marks the
    request context cancelled; the next fragment boundary stops the
    stream and the underlying model iterator is closed.
    """

    def __init__(self, source: AsyncIterator[str], ctx: RequestContext) -> None:
        self._source = source
        self._ctx = ctx
        self._parts: list[str] = []
        self._started = False
        self._iterating = False
        self._finished = False
        self._closed = False
        self._iterator: AsyncGenerator[str, None] | None = None

    def __aiter__(self) -> AsyncIterator[str]:
        if self._started:
            raise RuntimeError("FragmentStream cannot be restarted")
        self._started = True
        self._iterator = self._iterate()
        return self._iterator

    async def _iterate(self) -> AsyncIterator[str]:
        self._iterating = True
        try:
            async for fragment in self._source:
                self._ctx.raise_if_cancelled()
                self._parts.append(fragment)
                yield fragment
            self._finished = True
        finally:
            self._iterating = False
            await self._close_source()

    async def cancel(self) -> None:
        """Stop the stream and release the model call."""
        self._ctx.cancel()
        # A suspended iterator is closed now; a running one stops at its next fragment.
        if self._iterator is not None and not self._iterator.ag_running:
            await self._iterator.aclose()
        if not self._iterating:
            await self._close_source()

    async def _close_source(self) -> None:
        if self._closed:
            return
        self._closed = True
        aclose = getattr(self._source, "aclose", None)
        if aclose is not None:
            await aclose()
            logger.debug(f"{__name__}:_close_source - model stream closed after {len(self._parts)} fragments")

    @property
    def text(self) -> str:
        """Text received so far."""
        return "".join(self._parts)

    @property
    def fragment_count(self) -> int:
        return len(self._parts)

    @property
    def finished(self) -> bool:
        """True once the source was exhausted without error or cancellation."""
        return self._finished
