import asyncio

import pytest

from popcorn.catalog.base import CatalogClient
from popcorn.core.config import Settings
from popcorn.core.storage import MemoryStorage
from popcorn.models.media import CatalogSearch, MovieDetail, SearchResult
from popcorn.services.watchlist import WatchlistStore


def make_settings(**overrides) -> Settings:
    return Settings(_env_file=None, omdb_api_key="test-key", **overrides)


class FakeCatalog(CatalogClient):
    """Catalog that answers from canned responses or test-resolved futures.

    A title/id with an entry in ``search_responses``/``detail_responses``
    resolves immediately (exceptions are raised). Anything else parks on a
    future recorded in ``search_calls``/``fetch_calls`` for the test to
    resolve. With ``honor_tokens=False`` cancellation is ignored, so a
    superseded request can still complete late.
    """

    def __init__(self, honor_tokens: bool = True):
        super().__init__(settings=make_settings())
        self.honor_tokens = honor_tokens
        self.search_responses: dict = {}
        self.detail_responses: dict = {}
        self.search_calls: list[tuple[str, asyncio.Future]] = []
        self.fetch_calls: list[tuple[str, asyncio.Future]] = []

    @property
    def name(self) -> str:
        return "Fake"

    async def _answer(self, key, responses, calls, token):
        if key in responses:
            calls.append((key, None))
            response = responses[key]
            if isinstance(response, Exception):
                raise response
            return response

        future = asyncio.get_running_loop().create_future()
        calls.append((key, future))
        if token is not None and self.honor_tokens:
            return await token.run(future)
        return await future

    async def search(self, title, token=None):
        return await self._answer(
            title, self.search_responses, self.search_calls, token
        )

    async def fetch_by_id(self, movie_id, token=None):
        return await self._answer(
            movie_id, self.detail_responses, self.fetch_calls, token
        )


def results(*titles: str) -> CatalogSearch:
    items = [
        SearchResult(id=f"tt{i}", title=title, year="2005")
        for i, title in enumerate(titles, start=1)
    ]
    return CatalogSearch(items=items, total_results=len(items))


def detail(movie_id: str = "tt1", **overrides) -> MovieDetail:
    data = {
        "id": movie_id,
        "title": "Batman Begins",
        "year": "2005",
        "poster_url": "https://img.example/batman.jpg",
        "released_date": "15 Jun 2005",
        "runtime_minutes": 140,
        "genre": "Action, Crime, Drama",
        "director": "Christopher Nolan",
        "actors": "Christian Bale, Michael Caine",
        "plot": "After witnessing his parents' death, Bruce learns the art of fighting.",
        "catalog_rating": 8.2,
    }
    data.update(overrides)
    return MovieDetail(**data)


@pytest.fixture
def catalog():
    return FakeCatalog()


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def watchlist(storage):
    return WatchlistStore(storage)
