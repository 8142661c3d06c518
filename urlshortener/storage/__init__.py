"""
Storage backends for the URL shortener.

Import `get_storage` to pick a backend from settings; the Postgres backend is
imported lazily by the factory.
"""

from .base import BaseStorage
from .errors import (
    ShortenIDCollisionError,
    StorageClosedError,
    StorageError,
    URLDeletedError,
    URLExistsError,
)
from .file_storage import FileStorage
from .memory_storage import MemoryStorage
from .storage_factory import get_storage

__all__ = [
    "BaseStorage",
    "FileStorage",
    "MemoryStorage",
    "ShortenIDCollisionError",
    "StorageClosedError",
    "StorageError",
    "URLDeletedError",
    "URLExistsError",
    "get_storage",
]
