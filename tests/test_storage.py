import pytest

from popcorn.core.storage import MemoryStorage, SqlStorage


@pytest.fixture
def sql_storage(tmp_path):
    storage = SqlStorage(f"sqlite:///{tmp_path / 'popcorn.db'}")
    yield storage
    storage.close()


def test_sql_storage_get_set_remove(sql_storage):
    assert sql_storage.get_item("watched") is None

    sql_storage.set_item("watched", "[]")
    assert sql_storage.get_item("watched") == "[]"

    sql_storage.set_item("watched", '[{"imdbID": "tt1"}]')
    assert sql_storage.get_item("watched") == '[{"imdbID": "tt1"}]'

    sql_storage.remove_item("watched")
    assert sql_storage.get_item("watched") is None

    # Removing a missing key is fine.
    sql_storage.remove_item("watched")


def test_sql_storage_survives_reopen(tmp_path):
    url = f"sqlite:///{tmp_path / 'popcorn.db'}"
    first = SqlStorage(url)
    first.set_item("watched", "[1]")
    first.close()

    second = SqlStorage(url)
    try:
        assert second.get_item("watched") == "[1]"
    finally:
        second.close()


def test_memory_storage():
    storage = MemoryStorage({"a": "1"})

    assert storage.get_item("a") == "1"
    storage.set_item("b", "2")
    storage.remove_item("a")
    storage.remove_item("missing")

    assert storage.get_item("a") is None
    assert storage.get_item("b") == "2"
