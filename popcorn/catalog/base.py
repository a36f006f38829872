"""Catalog client base class and interface."""

from abc import ABC, abstractmethod

import niquests
from niquests.packages import urllib3

from popcorn.core.cancellation import CancellationToken
from popcorn.core.config import Settings, get_settings
from popcorn.models.media import CatalogSearch, MovieDetail


class CatalogClient(ABC):
    """Abstract base class for remote movie catalogs.

    Both operations are read-only and accept an optional
    :class:`CancellationToken`. When the token is cancelled before the
    request completes, the call raises
    :class:`~popcorn.core.errors.RequestCancelled` instead of returning.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        retry_config: urllib3.Retry | None = None,
    ):
        settings = settings or get_settings()
        self._settings = settings
        if retry_config is None:
            retry_config = urllib3.Retry(
                total=settings.catalog_retries,
                backoff_factor=0.5,
                status_forcelist=[429, 500, 502, 503, 504],
                allowed_methods=["HEAD", "GET", "OPTIONS"],
            )
        self.session = niquests.AsyncSession(retries=retry_config)
        if settings.proxy:
            self.session.proxies = {"http": settings.proxy, "https": settings.proxy}

    async def aclose(self) -> None:
        """Properly close the internal HTTP session."""
        if hasattr(self, "session") and self.session:
            await self.session.close()

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the unique name of this catalog."""
        pass

    @abstractmethod
    async def search(
        self, title: str, token: CancellationToken | None = None
    ) -> CatalogSearch:
        """Search the catalog by title.

        Args:
            title: The title text to search for.
            token: Cancels the request when cancelled.

        Returns:
            A CatalogSearch; ``not_found`` is set when nothing matched.
        """
        pass

    @abstractmethod
    async def fetch_by_id(
        self, movie_id: str, token: CancellationToken | None = None
    ) -> MovieDetail | None:
        """Fetch the full record for one catalog id.

        Args:
            movie_id: The catalog id (an IMDb id for OMDb).
            token: Cancels the request when cancelled.

        Returns:
            The MovieDetail, or None when the catalog has no such id.
        """
        pass
