"""Detail session: the currently selected movie and its fetch."""

import asyncio
import logging
from typing import Optional

from popcorn.catalog.base import CatalogClient
from popcorn.core.cancellation import CancellationToken
from popcorn.core.errors import (
    NO_ERROR,
    IncompleteRecordError,
    MovieNotFoundError,
    SessionError,
    classify_error,
)
from popcorn.models.media import MovieDetail, WatchedItem
from popcorn.services.watchlist import WatchlistStore

logger = logging.getLogger(__name__)

DEFAULT_MAX_RATING = 10


class DetailSession:
    """Tracks one selected catalog id and the fetch of its full record.

    Fetch failures leave the record empty and are not surfaced as session
    state. The classified failure is kept on ``last_error`` for logging and
    diagnostics only.
    """

    def __init__(self, client: CatalogClient, max_rating: int = DEFAULT_MAX_RATING):
        self._client = client
        self.max_rating = max_rating

        self.selected_id: Optional[str] = None
        self.record: Optional[MovieDetail] = None
        self.loading: bool = False
        self.user_rating: Optional[float] = None
        self.last_error: SessionError = NO_ERROR

        self._token: Optional[CancellationToken] = None
        self._task: Optional[asyncio.Task[None]] = None
        self._pending: set[asyncio.Task[None]] = set()

    @property
    def is_open(self) -> bool:
        return self.selected_id is not None

    def select(self, movie_id: str) -> Optional[asyncio.Task[None]]:
        """Open ``movie_id``, or close the view if it is already selected.

        Must be called from a running event loop. Returns the fetch task, or
        None when the call closed the view.
        """
        if movie_id == self.selected_id:
            self.close()
            return None

        self._cancel_active("selection changed")
        token = CancellationToken()
        self._token = token
        self.selected_id = movie_id
        self.record = None
        self.user_rating = None
        self.last_error = NO_ERROR
        self.loading = True

        task = asyncio.create_task(self._fetch(movie_id, token))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        self._task = task
        return task

    def close(self) -> None:
        """Clear the selection and abort its fetch. No-op when closed."""
        if self.selected_id is None and self._token is None:
            return
        self._cancel_active("selection closed")
        self.selected_id = None
        self.record = None
        self.user_rating = None
        self.loading = False

    def is_watched(self, watchlist: WatchlistStore) -> bool:
        return self.selected_id is not None and watchlist.contains(self.selected_id)

    def rate(self, rating: float) -> None:
        """Record the user's rating for the selected movie."""
        self._check_rating(rating)
        self.user_rating = rating

    def build_watched_item(self, user_rating: float) -> WatchedItem:
        """Build a watchlist entry from the loaded record and ``user_rating``.

        Raises:
            IncompleteRecordError: no record is loaded or a fetch is running.
            ValueError: the rating is outside ``1..max_rating``.
        """
        if self.loading or self.record is None:
            raise IncompleteRecordError(
                f"No detail record loaded for {self.selected_id or 'selection'}"
            )
        self._check_rating(user_rating)

        record = self.record
        return WatchedItem(
            id=self.selected_id or record.id,
            title=record.title,
            poster_url=record.poster_url,
            catalog_rating=record.catalog_rating or 0.0,
            runtime_minutes=record.runtime_minutes or 0,
            user_rating=user_rating,
        )

    def _check_rating(self, rating: float) -> None:
        if not 1 <= rating <= self.max_rating:
            raise ValueError(
                f"Rating must be between 1 and {self.max_rating}, got {rating}"
            )

    def _is_current(self, token: CancellationToken) -> bool:
        return token is self._token and not token.cancelled

    def _cancel_active(self, reason: str) -> None:
        if self._token is not None:
            self._token.cancel(reason)
        self._token = None
        self._task = None

    async def _fetch(self, movie_id: str, token: CancellationToken) -> None:
        try:
            record = await self._client.fetch_by_id(movie_id, token)
            if record is None:
                raise MovieNotFoundError(f"No catalog record for {movie_id}")
        except Exception as e:
            if not self._is_current(token):
                logger.debug("Dropping stale detail failure for %s: %s", movie_id, e)
                return
            self.last_error = classify_error(e)
            logger.info(
                "Detail fetch for %s failed (%s): %s",
                movie_id,
                self.last_error.kind.value,
                e,
            )
            self.loading = False
            return

        if not self._is_current(token):
            logger.debug("Dropping stale detail for %s", movie_id)
            return
        self.record = record
        self.loading = False

    async def wait(self) -> None:
        """Wait for the in-flight fetch, if any, to settle."""
        if self._task is not None:
            await asyncio.gather(self._task, return_exceptions=True)

    async def aclose(self) -> None:
        """Close the view and cancel every outstanding fetch task."""
        self.close()
        for task in self._pending:
            task.cancel()
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)
        self._pending.clear()
