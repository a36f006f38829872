"""Search session: the current query and its catalog search."""

import asyncio
import logging
from typing import List, Optional

from popcorn.catalog.base import CatalogClient
from popcorn.core.cancellation import CancellationToken
from popcorn.core.errors import (
    NO_ERROR,
    ErrorKind,
    MovieNotFoundError,
    SessionError,
    classify_error,
)
from popcorn.models.media import SearchResult
from popcorn.services.detail import DetailSession

logger = logging.getLogger(__name__)

MIN_QUERY_LENGTH = 3


class SearchSession:
    """Owns the query text, the in-flight search and its results.

    At most one search is outstanding. Each :meth:`set_query` cancels the
    previous search, and a resolution is applied only while its token is
    still the session's current token, so a late response can never
    overwrite a newer one.

    Every query change that reaches the catalog is issued immediately; there
    is no time-based debounce.
    """

    def __init__(
        self,
        client: CatalogClient,
        detail: DetailSession | None = None,
        min_query_length: int = MIN_QUERY_LENGTH,
    ):
        self._client = client
        self._detail = detail
        self.min_query_length = min_query_length

        self.query: str = ""
        self.results: List[SearchResult] = []
        self.loading: bool = False
        self.error: SessionError = NO_ERROR

        self._token: Optional[CancellationToken] = None
        self._task: Optional[asyncio.Task[None]] = None
        self._pending: set[asyncio.Task[None]] = set()

    def set_query(self, text: str) -> Optional[asyncio.Task[None]]:
        """Record ``text`` and search for it when it is long enough.

        Must be called from a running event loop. Short queries clear the
        results synchronously and return None; otherwise the search task is
        returned.
        """
        self.query = text
        self._cancel_active("query changed")

        if len(text) < self.min_query_length:
            self.results = []
            self.error = NO_ERROR
            self.loading = False
            return None

        # A new search invalidates whatever detail view was open.
        if self._detail is not None:
            self._detail.close()

        token = CancellationToken()
        self._token = token
        self.error = NO_ERROR
        self.loading = True

        task = asyncio.create_task(self._search(text, token))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        self._task = task
        return task

    def cancel(self) -> None:
        """Abort the in-flight search, keeping the current results."""
        self._cancel_active("search cancelled")
        self.loading = False

    async def wait(self) -> None:
        """Wait for the in-flight search, if any, to settle."""
        if self._task is not None:
            await asyncio.gather(self._task, return_exceptions=True)

    async def aclose(self) -> None:
        """Cancel every outstanding search task."""
        self.cancel()
        for task in self._pending:
            task.cancel()
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)
        self._pending.clear()

    def _is_current(self, token: CancellationToken) -> bool:
        return token is self._token and not token.cancelled

    def _cancel_active(self, reason: str) -> None:
        if self._token is not None:
            self._token.cancel(reason)
        self._token = None
        self._task = None

    async def _search(self, text: str, token: CancellationToken) -> None:
        try:
            page = await self._client.search(text, token)
            if page.not_found or not page.items:
                raise MovieNotFoundError(page.message or "Movie not found!")
        except Exception as e:
            if not self._is_current(token):
                logger.debug("Dropping stale search failure for '%s': %s", text, e)
                return
            error = classify_error(e)
            if error.kind == ErrorKind.CANCELLED:
                error = NO_ERROR
            elif error.kind == ErrorKind.NOT_FOUND:
                logger.info("No results for '%s'", text)
            else:
                logger.warning(
                    "Search for '%s' failed (%s): %s", text, error.kind.value, e
                )
            self.results = []
            self.error = error
            self.loading = False
            return

        if not self._is_current(token):
            logger.debug("Dropping stale results for '%s'", text)
            return
        self.results = page.items
        self.error = NO_ERROR
        self.loading = False
