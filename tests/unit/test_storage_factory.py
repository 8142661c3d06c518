"""
Unit tests for the storage factory.

Covers:
    - settings-driven selection (DSN > file path > memory)
    - explicit backend override and aliases
    - missing configuration / unknown backend -> ValueError
    - kwargs forwarding (id_generator)
"""

import pytest

from urlshortener.storage import FileStorage, MemoryStorage, get_storage
from urlshortener.storage.db_storage import DBStorage

from tests.helpers import make_settings, sequential_ids


def test_default_is_memory():
    assert isinstance(get_storage(make_settings()), MemoryStorage)


def test_file_path_selects_file(tmp_path):
    path = str(tmp_path / "urls.json")
    storage = get_storage(make_settings(file_storage_path=path))
    assert isinstance(storage, FileStorage)
    assert storage.path == path


def test_dsn_wins_over_file_path(tmp_path):
    settings = make_settings(
        file_storage_path=str(tmp_path / "urls.json"),
        database_dsn="postgresql://u:p@localhost/db",
        request_timeout=7.0,
    )
    storage = get_storage(settings)
    assert isinstance(storage, DBStorage)
    assert storage.dsn == "postgresql://u:p@localhost/db"
    assert storage.timeout == 7.0


@pytest.mark.parametrize("alias", ["postgres", "db", "database", " Postgres "])
def test_postgres_aliases(alias):
    storage = get_storage(make_settings(database_dsn="postgresql://fake"), backend=alias)
    assert isinstance(storage, DBStorage)


def test_explicit_memory_override_ignores_dsn():
    storage = get_storage(make_settings(database_dsn="postgresql://fake"), backend="memory")
    assert isinstance(storage, MemoryStorage)


def test_settings_backend_override(tmp_path):
    settings = make_settings(storage_backend="memory", file_storage_path=str(tmp_path / "x.json"))
    assert isinstance(get_storage(settings), MemoryStorage)


def test_file_backend_requires_path():
    with pytest.raises(ValueError):
        get_storage(make_settings(), backend="file")


def test_postgres_backend_requires_dsn():
    with pytest.raises(ValueError):
        get_storage(make_settings(), backend="postgres")


def test_unknown_backend():
    with pytest.raises(ValueError):
        get_storage(make_settings(), backend="redis")


def test_kwargs_forwarded():
    storage = get_storage(make_settings(), id_generator=sequential_ids("Fixed001"))
    assert storage.set("https://ya.ru") == "Fixed001"
