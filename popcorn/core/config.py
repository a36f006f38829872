"""Configuration management for Popcorn."""

from pydantic import PositiveInt, field_validator
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict
from urllib.parse import urlparse


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # OMDb
    omdb_api_key: str
    omdb_base_url: str = "https://www.omdbapi.com/"

    # Catalog client
    catalog_timeout: PositiveInt | None = None  # No timeout unless configured
    catalog_retries: int = 2
    detail_cache_ttl: PositiveInt | None = None  # Detail cache off unless set (seconds)

    # Sessions
    min_query_length: PositiveInt = 3
    max_user_rating: PositiveInt = 10

    # Device storage
    storage_url: str = "sqlite:///./popcorn.db"
    watchlist_key: str = "watched"

    # Network settings
    # Proxy configuration in the format http://host:port or socks5://host:port
    proxy: str | None = None

    @field_validator("proxy")
    @classmethod
    def validate_proxy(cls, v: str | None) -> str | None:
        if v is None:
            return v

        parsed = urlparse(v)
        if parsed.scheme not in ("http", "https", "socks4", "socks5", "socks5h"):
            raise ValueError(
                "Proxy must be a valid URL with scheme http/https/socks4/socks5/socks5h"
            )
        if not parsed.netloc:
            raise ValueError("Proxy must have a host and port")
        return v

    # App settings
    debug: bool = False

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
