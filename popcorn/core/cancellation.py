"""Cancellation tokens for catalog requests."""

import asyncio
import logging
from contextlib import suppress
from typing import Awaitable, TypeVar

from popcorn.core.errors import RequestCancelled

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CancellationToken:
    """Handle that aborts a request and marks its result as unwanted.

    A session creates one token per request and keeps a reference to the
    latest one. Cancelling the token aborts the request awaited through
    :meth:`run`; the session also compares tokens before applying a result,
    so a request that completes anyway cannot change state.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self.reason: str | None = None

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self, reason: str = "superseded") -> None:
        """Cancel the token. Cancelling twice keeps the first reason."""
        if self.cancelled:
            return
        self.reason = reason
        self._event.set()

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            raise RequestCancelled(f"Request cancelled ({self.reason})")

    async def run(self, awaitable: Awaitable[T]) -> T:
        """Await ``awaitable`` unless the token is cancelled first.

        On cancellation the underlying task is cancelled, which aborts the
        HTTP request, and :class:`RequestCancelled` is raised.
        """
        task = asyncio.ensure_future(awaitable)
        waiter = asyncio.ensure_future(self._event.wait())
        try:
            await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            waiter.cancel()
            if not task.done():
                task.cancel()
                with suppress(asyncio.CancelledError):
                    await task

        # A request that finished in the same tick as the cancel still hands
        # back its outcome; the owning session discards it as stale.
        if task.cancelled():
            logger.debug("Request aborted: %s", self.reason)
            raise RequestCancelled(f"Request cancelled ({self.reason})")
        return task.result()
