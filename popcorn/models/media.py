"""Media models for catalog data and the watchlist."""

from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field


class SearchResult(BaseModel):
    """A search result from the catalog (lightweight for list display)."""

    id: str
    title: str
    year: Optional[str] = None
    poster_url: Optional[str] = None
    media_type: Optional[str] = None  # e.g., "movie", "series", "episode"


class CatalogSearch(BaseModel):
    """Outcome of a title search.

    ``not_found`` is set when the catalog answered with its "no match"
    sentinel; ``items`` is empty in that case.
    """

    items: List[SearchResult] = []
    total_results: int = 0
    not_found: bool = False
    message: Optional[str] = None


class MovieDetail(BaseModel):
    """A movie with full catalog data."""

    id: str
    title: str
    year: Optional[str] = None
    poster_url: Optional[str] = None
    released_date: Optional[str] = None
    runtime_minutes: Optional[int] = None
    genre: Optional[str] = None
    director: Optional[str] = None
    actors: Optional[str] = None
    plot: Optional[str] = None
    catalog_rating: Optional[float] = None


class WatchedItem(BaseModel):
    """A movie on the watchlist, with the user's own rating.

    Serialized with the key names the watchlist has always been stored
    under on the device.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str = Field(alias="imdbID")
    title: str
    poster_url: Optional[str] = Field(default=None, alias="poster")
    catalog_rating: float = Field(default=0.0, alias="imdbRating")
    runtime_minutes: int = Field(default=0, alias="runtime")
    user_rating: float = Field(gt=0, alias="userRating")


class WatchlistSummary(BaseModel):
    """Aggregates shown above the watchlist."""

    count: int = 0
    avg_catalog_rating: float = 0.0
    avg_user_rating: float = 0.0
    avg_runtime: float = 0.0
