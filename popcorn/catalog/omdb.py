"""OMDb catalog client for searching and fetching movie details."""

import logging
import re
from typing import Any, Optional

from cachetools import TTLCache
from pydantic import ValidationError

from popcorn.catalog.base import CatalogClient
from popcorn.core.cancellation import CancellationToken
from popcorn.core.errors import CatalogResponseError
from popcorn.models.media import CatalogSearch, MovieDetail, SearchResult

logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = "Movie not found!"

_LEADING_INT = re.compile(r"^\s*(\d+)")


def _clean(value: Any) -> Optional[str]:
    """Return None for OMDb's empty and "N/A" placeholders."""
    if value is None:
        return None
    value = str(value).strip()
    if not value or value == "N/A":
        return None
    return value


def _parse_runtime(value: Any) -> Optional[int]:
    """Parse runtimes like "148 min"."""
    value = _clean(value)
    if value is None:
        return None
    match = _LEADING_INT.match(value)
    return int(match.group(1)) if match else None


def _parse_rating(value: Any) -> Optional[float]:
    value = _clean(value)
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        return None


def _parse_search_item(item: dict) -> SearchResult:
    """Parse one entry of an OMDb ``Search`` list."""
    return SearchResult(
        id=item["imdbID"],
        title=item.get("Title", "Unknown"),
        year=_clean(item.get("Year")),
        poster_url=_clean(item.get("Poster")),
        media_type=_clean(item.get("Type")),
    )


def _parse_detail(info: dict, movie_id: str) -> MovieDetail:
    """Parse an OMDb lookup-by-id body."""
    return MovieDetail(
        id=info.get("imdbID") or movie_id,
        title=info.get("Title", "Unknown"),
        year=_clean(info.get("Year")),
        poster_url=_clean(info.get("Poster")),
        released_date=_clean(info.get("Released")),
        runtime_minutes=_parse_runtime(info.get("Runtime")),
        genre=_clean(info.get("Genre")),
        director=_clean(info.get("Director")),
        actors=_clean(info.get("Actors")),
        plot=_clean(info.get("Plot")),
        catalog_rating=_parse_rating(info.get("imdbRating")),
    )


class OmdbClient(CatalogClient):
    """Client for the OMDb API (https://www.omdbapi.com/)."""

    @property
    def name(self) -> str:
        return "OMDb"

    def __init__(self, settings=None, retry_config=None):
        super().__init__(settings, retry_config)
        ttl = self._settings.detail_cache_ttl
        self.detail_cache = TTLCache(maxsize=100, ttl=ttl) if ttl else None

    async def _get(self, params: dict, token: CancellationToken | None) -> dict:
        """Perform a catalog GET and return the decoded JSON object."""
        if token is not None:
            token.raise_if_cancelled()
        query = {"apikey": self._settings.omdb_api_key, **params}
        request = self.session.get(
            self._settings.omdb_base_url,
            params=query,
            timeout=self._settings.catalog_timeout,
        )
        if token is not None:
            response = await token.run(request)
        else:
            response = await request

        if not response.ok:
            raise CatalogResponseError(
                f"Catalog returned HTTP {response.status_code}"
            )
        data = response.json()
        if not isinstance(data, dict):
            raise CatalogResponseError("Catalog returned a malformed body")
        return data

    async def search(
        self, title: str, token: CancellationToken | None = None
    ) -> CatalogSearch:
        """Search OMDb by title."""
        logger.info("Searching catalog for '%s'", title)
        data = await self._get({"s": title}, token)

        if data.get("Response") == "False":
            message = data.get("Error") or NOT_FOUND_MESSAGE
            logger.info("No catalog matches for '%s': %s", title, message)
            return CatalogSearch(not_found=True, message=message)

        entries = data.get("Search")
        if not isinstance(entries, list):
            raise CatalogResponseError(
                f"Search response for '{title}' has no result list"
            )

        items: list[SearchResult] = []
        seen: set[str] = set()
        for entry in entries:
            if not isinstance(entry, dict) or not entry.get("imdbID"):
                continue
            if entry["imdbID"] in seen:
                continue
            seen.add(entry["imdbID"])
            try:
                items.append(_parse_search_item(entry))
            except ValidationError as e:
                raise CatalogResponseError(
                    "Catalog returned a malformed body", e
                ) from e

        total = _LEADING_INT.match(str(data.get("totalResults", "")))
        return CatalogSearch(
            items=items,
            total_results=int(total.group(1)) if total else len(items),
        )

    async def fetch_by_id(
        self, movie_id: str, token: CancellationToken | None = None
    ) -> MovieDetail | None:
        """Fetch full movie details from OMDb, cached when a TTL is set."""
        if self.detail_cache is not None and movie_id in self.detail_cache:
            logger.debug("Detail cache hit for %s", movie_id)
            return self.detail_cache[movie_id]

        data = await self._get({"i": movie_id}, token)
        if data.get("Response") == "False":
            logger.info(
                "Catalog has no record for %s: %s",
                movie_id,
                data.get("Error") or NOT_FOUND_MESSAGE,
            )
            return None

        try:
            detail = _parse_detail(data, movie_id)
        except ValidationError as e:
            raise CatalogResponseError("Catalog returned a malformed body", e) from e
        if self.detail_cache is not None:
            self.detail_cache[movie_id] = detail
        return detail
