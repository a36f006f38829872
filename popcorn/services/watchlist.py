"""Watchlist store persisted to device storage."""

import json
import logging
from typing import Dict, List, Optional

from pydantic import TypeAdapter, ValidationError

from popcorn.core.storage import KeyValueStorage
from popcorn.models.media import WatchedItem, WatchlistSummary

logger = logging.getLogger(__name__)

DEFAULT_KEY = "watched"

_items_adapter = TypeAdapter(List[WatchedItem])


class WatchlistStore:
    """The user's watched movies, keyed by catalog id.

    The collection is read from storage once, at construction. Every
    mutation that changes it writes the whole collection back as a JSON
    array. Storage failures are logged; the in-memory collection stays
    authoritative for the running session.
    """

    def __init__(self, storage: KeyValueStorage, key: str = DEFAULT_KEY):
        self._storage = storage
        self._key = key
        self._items: Dict[str, WatchedItem] = self._load()

    def _load(self) -> Dict[str, WatchedItem]:
        try:
            raw = self._storage.get_item(self._key)
        except Exception:
            logger.exception("Failed to read watchlist '%s', starting empty", self._key)
            return {}

        if not raw:
            return {}

        try:
            entries = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning("Stored watchlist '%s' is not JSON: %s", self._key, e)
            return {}
        if not isinstance(entries, list):
            logger.warning(
                "Stored watchlist '%s' is %s, expected a list",
                self._key,
                type(entries).__name__,
            )
            return {}

        items: Dict[str, WatchedItem] = {}
        for entry in entries:
            try:
                item = WatchedItem.model_validate(entry)
            except ValidationError as e:
                logger.warning("Skipping unreadable watchlist entry %r: %s", entry, e)
                continue
            items.setdefault(item.id, item)
        return items

    def _persist(self) -> None:
        payload = _items_adapter.dump_json(
            list(self._items.values()), by_alias=True
        ).decode("utf-8")
        try:
            self._storage.set_item(self._key, payload)
        except Exception:
            logger.exception("Failed to persist watchlist '%s'", self._key)

    @property
    def items(self) -> List[WatchedItem]:
        """Watched items in the order they were added."""
        return list(self._items.values())

    def __len__(self) -> int:
        return len(self._items)

    def contains(self, movie_id: str) -> bool:
        return movie_id in self._items

    def get(self, movie_id: str) -> Optional[WatchedItem]:
        return self._items.get(movie_id)

    def add(self, item: WatchedItem) -> bool:
        """Add ``item``. Returns False, changing nothing, if its id is present."""
        if item.id in self._items:
            logger.debug("%s is already on the watchlist", item.id)
            return False
        self._items[item.id] = item
        self._persist()
        return True

    def remove(self, movie_id: str) -> bool:
        """Remove the item with ``movie_id``. Returns False if it was absent."""
        if self._items.pop(movie_id, None) is None:
            return False
        self._persist()
        return True

    def summary(self) -> WatchlistSummary:
        """Count and average ratings/runtime of the watched items."""
        items = self.items
        if not items:
            return WatchlistSummary()

        count = len(items)
        return WatchlistSummary(
            count=count,
            avg_catalog_rating=sum(i.catalog_rating for i in items) / count,
            avg_user_rating=sum(i.user_rating for i in items) / count,
            avg_runtime=sum(i.runtime_minutes for i in items) / count,
        )
