"""Device-local key-value storage.

The watchlist is persisted the way a browser app uses ``localStorage``:
one string value under a fixed key, read at startup and rewritten in full on
every change. :class:`SqlStorage` keeps the values in a SQLite file using
SQLModel.
"""

from abc import ABC, abstractmethod
from typing import Dict, Optional

from sqlmodel import Field, Session, SQLModel, create_engine


class StorageItem(SQLModel, table=True):
    """A single key/value row."""

    __tablename__ = "storage"

    key: str = Field(primary_key=True)
    value: str


class KeyValueStorage(ABC):
    """Abstract string key-value store."""

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """Return the stored value, or None when the key is absent."""
        pass

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""
        pass

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Delete ``key``; a missing key is not an error."""
        pass


class MemoryStorage(KeyValueStorage):
    """Process-local storage, used for tests and throwaway sessions."""

    def __init__(self, initial: Dict[str, str] | None = None):
        self._items: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class SqlStorage(KeyValueStorage):
    """Key-value storage backed by a SQL database (SQLite by default)."""

    def __init__(self, database_url: str, echo: bool = False):
        connect_args = {}
        if database_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False  # Needed for SQLite
        self.engine = create_engine(
            database_url, echo=echo, connect_args=connect_args
        )
        SQLModel.metadata.create_all(self.engine)

    def get_item(self, key: str) -> Optional[str]:
        with Session(self.engine) as session:
            item = session.get(StorageItem, key)
            return item.value if item else None

    def set_item(self, key: str, value: str) -> None:
        with Session(self.engine) as session:
            item = session.get(StorageItem, key)
            if item is None:
                item = StorageItem(key=key, value=value)
            else:
                item.value = value
            session.add(item)
            session.commit()

    def remove_item(self, key: str) -> None:
        with Session(self.engine) as session:
            item = session.get(StorageItem, key)
            if item is not None:
                session.delete(item)
                session.commit()

    def close(self) -> None:
        """Dispose of the engine's connection pool."""
        self.engine.dispose()
