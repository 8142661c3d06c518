"""
Storage factory – pick the backend at startup
=============================================

Centralizes backend selection so the rest of the app only sees `BaseStorage`.

Selection
---------
- explicit `backend` argument, else `settings.resolved_backend()`:
  DATABASE_DSN set -> "postgres"; FILE_STORAGE_PATH set -> "file"; otherwise "memory".
- The Postgres module (and psycopg) is imported only when that backend is chosen.

The returned backend is not bootstrapped; the service does that at startup.
"""

from typing import Optional

from ..config import Settings
from ..logging_config import get_logger
from .base import BaseStorage
from .memory_storage import MemoryStorage

log = get_logger("storage")

BACKENDS = ("memory", "file", "postgres")


def get_storage(settings: Settings, backend: Optional[str] = None, **kwargs) -> BaseStorage:
    """
    Return a storage backend for the given settings.

    Parameters
    ----------
    settings : Settings
        Resolved application settings (paths, DSN, timeouts).
    backend : str, optional
        "memory", "file" or "postgres"; overrides the settings-derived choice.
    kwargs : dict
        Extra args passed to the backend constructor (e.g. id_generator=...).
    """
    be = (backend or settings.resolved_backend()).strip().lower()
    log.info("selected storage backend: %s", be)

    if be == "memory":
        return MemoryStorage(**kwargs)

    if be == "file":
        if not settings.file_storage_path:
            raise ValueError("FILE_STORAGE_PATH is required for file backend")
        from .file_storage import FileStorage

        return FileStorage(settings.file_storage_path, **kwargs)

    if be in ("postgres", "db", "database"):
        if not settings.database_dsn:
            raise ValueError("DATABASE_DSN is required for postgres backend")
        # Local import to avoid a hard psycopg dependency when not using postgres
        from .db_storage import DBStorage

        return DBStorage(dsn=settings.database_dsn, timeout=settings.request_timeout, **kwargs)

    raise ValueError(f"Unknown storage backend: {be!r}, expected one of {BACKENDS}")
