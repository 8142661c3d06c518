"""
Global pytest fixtures for the URL shortener test suite.

Responsibilities:
    - Provide fast Settings (short deletion flush interval, isolated from env)
    - Provide fresh in-memory / file storage backends
    - Provide a ShortenerService and a TestClient built through the app factory

Why an app factory?
    `create_app()` gives each test its own storage, service and deletion
    pipeline, so no state leaks between tests.
"""

import pytest
from fastapi.testclient import TestClient

from main import create_app
from urlshortener.config import Settings
from urlshortener.service import ShortenerService
from urlshortener.storage import FileStorage, MemoryStorage

from tests.helpers import make_settings


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def memory_storage() -> MemoryStorage:
    """Fresh in-memory backend."""
    return MemoryStorage()


@pytest.fixture
def file_storage(tmp_path) -> FileStorage:
    """Bootstrapped file backend on a temp path."""
    storage = FileStorage(str(tmp_path / "short-url-db.json"))
    storage.bootstrap()
    return storage


@pytest.fixture
def service(memory_storage, settings):
    """
    Started service over the memory backend; stopped after the test.
    """
    svc = ShortenerService(storage=memory_storage, settings=settings)
    svc.start()
    yield svc
    svc.stop()


@pytest.fixture
def client(settings, memory_storage):
    """
    TestClient over a fresh app. Used as a context manager so the lifespan
    starts (and later stops) the deletion pipeline.
    """
    app = create_app(settings=settings, storage=memory_storage)
    with TestClient(app) as test_client:
        yield test_client
