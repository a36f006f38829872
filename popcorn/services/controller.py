"""Controller that routes UI events into the sessions and the watchlist."""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, List, Optional

from pydantic import BaseModel

from popcorn.catalog.base import CatalogClient
from popcorn.catalog.omdb import OmdbClient
from popcorn.core.config import Settings, get_settings
from popcorn.core.errors import IncompleteRecordError, SessionError
from popcorn.core.storage import KeyValueStorage, SqlStorage
from popcorn.models.media import (
    MovieDetail,
    SearchResult,
    WatchedItem,
    WatchlistSummary,
)
from popcorn.services.detail import DetailSession
from popcorn.services.search import MIN_QUERY_LENGTH, SearchSession
from popcorn.services.watchlist import WatchlistStore

logger = logging.getLogger(__name__)


class UIState(BaseModel):
    """Snapshot of everything the UI layer renders."""

    query: str
    search_results: List[SearchResult]
    search_loading: bool
    search_error: SessionError
    selected_id: Optional[str]
    selected_detail: Optional[MovieDetail]
    detail_loading: bool
    is_watched: bool
    user_rating: Optional[float]
    watchlist: List[WatchedItem]
    summary: WatchlistSummary


class MovieController:
    """Entry point for UI intent events.

    The UI calls one method per event and reads :meth:`state` to redraw.
    Event methods that start network work return the task so callers can
    await it; nothing here depends on how the UI observes changes.
    """

    def __init__(
        self,
        client: CatalogClient,
        watchlist: WatchlistStore,
        min_query_length: int = MIN_QUERY_LENGTH,
        max_rating: int = 10,
    ):
        self.client = client
        self.watchlist = watchlist
        self.detail = DetailSession(client, max_rating=max_rating)
        self.search = SearchSession(
            client, detail=self.detail, min_query_length=min_query_length
        )

    def query_changed(self, text: str) -> Optional[asyncio.Task[None]]:
        return self.search.set_query(text)

    def item_selected(self, movie_id: str) -> Optional[asyncio.Task[None]]:
        return self.detail.select(movie_id)

    def rating_submitted(self, rating: float) -> None:
        self.detail.rate(rating)

    def item_added(self) -> Optional[WatchedItem]:
        """Add the selected movie with the submitted rating, then close it.

        Returns the stored item, or None when the movie was already on the
        watchlist and the existing entry was kept.

        Raises:
            IncompleteRecordError: nothing is loaded or no rating was given.
        """
        if self.detail.user_rating is None:
            raise IncompleteRecordError("Rate the movie before adding it")
        item = self.detail.build_watched_item(self.detail.user_rating)
        added = self.watchlist.add(item)
        if added:
            logger.info("Added %s (%s) to the watchlist", item.title, item.id)
        self.detail.close()
        return item if added else None

    def item_deleted(self, movie_id: str) -> bool:
        return self.watchlist.remove(movie_id)

    def selection_closed(self) -> None:
        self.detail.close()

    def state(self) -> UIState:
        return UIState(
            query=self.search.query,
            search_results=list(self.search.results),
            search_loading=self.search.loading,
            search_error=self.search.error,
            selected_id=self.detail.selected_id,
            selected_detail=self.detail.record,
            detail_loading=self.detail.loading,
            is_watched=self.detail.is_watched(self.watchlist),
            user_rating=self.detail.user_rating,
            watchlist=self.watchlist.items,
            summary=self.watchlist.summary(),
        )

    async def aclose(self) -> None:
        """Cancel outstanding requests and close the catalog client."""
        await self.search.aclose()
        await self.detail.aclose()
        try:
            await self.client.aclose()
        except Exception as e:
            logger.error(f"Error closing catalog {self.client.name}: {e}")


def build_controller(
    settings: Settings | None = None, storage: KeyValueStorage | None = None
) -> MovieController:
    """Create a controller wired to OMDb and the device storage."""
    settings = settings or get_settings()
    if storage is None:
        storage = SqlStorage(settings.storage_url, echo=settings.debug)
    return MovieController(
        client=OmdbClient(settings),
        watchlist=WatchlistStore(storage, key=settings.watchlist_key),
        min_query_length=settings.min_query_length,
        max_rating=settings.max_user_rating,
    )


@asynccontextmanager
async def controller_lifespan(
    settings: Settings | None = None,
) -> AsyncIterator[MovieController]:
    """Controller lifespan context manager."""
    settings = settings or get_settings()
    storage = SqlStorage(settings.storage_url, echo=settings.debug)
    controller = build_controller(settings, storage)
    try:
        yield controller
    finally:
        await controller.aclose()
        storage.close()
