"""Remote movie catalogs."""

from popcorn.catalog.base import CatalogClient
from popcorn.catalog.omdb import OmdbClient

__all__ = ["CatalogClient", "OmdbClient"]
