"""
In-memory storage backend.

Design:
    - `records` maps shorten_id -> Record; `_live_by_url` indexes live records by
      full URL so the conflict check does not scan.
    - All access goes through one lock; request handlers and the deletion worker
      run on different threads.
    - Nothing survives a restart. Use it for tests and local runs.
"""

import threading
from typing import Dict, List, Optional, Sequence

from ..models import FullURL, Record, ShortenID, URLPair
from ..shortid import SHORTEN_ID_LENGTH, IDGenerator, generate
from .base import BaseStorage
from .errors import ShortenIDCollisionError, URLDeletedError, URLExistsError


class MemoryStorage(BaseStorage):
    name = "memory"

    def __init__(self, id_generator: Optional[IDGenerator] = None, id_length: int = SHORTEN_ID_LENGTH):
        self.records: Dict[ShortenID, Record] = {}
        self._live_by_url: Dict[FullURL, ShortenID] = {}
        self._lock = threading.Lock()
        self._generate = id_generator or generate
        self._id_length = id_length

    def get(self, shorten_id: ShortenID) -> Optional[FullURL]:
        with self._lock:
            record = self.records.get(shorten_id)
        if record is None:
            return None
        if record.is_deleted:
            raise URLDeletedError(shorten_id)
        return record.full_url

    def set(self, full_url: FullURL, user_id: Optional[str] = None) -> ShortenID:
        """
        Insert a new record unless the URL is already live.

        The ID is generated once. A collision with an existing ID raises
        ShortenIDCollisionError instead of overwriting.
        """
        with self._lock:
            existing = self._live_by_url.get(full_url)
            if existing is not None:
                raise URLExistsError(full_url, existing)

            shorten_id = self._generate(self._id_length)
            if shorten_id in self.records:
                raise ShortenIDCollisionError(shorten_id)

            self.records[shorten_id] = Record(shorten_id=shorten_id, full_url=full_url, user_id=user_id)
            self._live_by_url[full_url] = shorten_id
            return shorten_id

    def list_urls(self, user_id: str) -> List[URLPair]:
        with self._lock:
            owned = [r for r in self.records.values() if r.user_id == user_id]
        owned.sort(key=lambda r: r.created_at)
        return [URLPair(shorten_id=r.shorten_id, full_url=r.full_url) for r in owned]

    def mark_as_deleted_by_id(
        self, shorten_ids: Sequence[ShortenID], user_id: Optional[str] = None
    ) -> None:
        with self._lock:
            for shorten_id in shorten_ids:
                record = self.records.get(shorten_id)
                if record is None or record.is_deleted:
                    continue
                if user_id is not None and record.user_id != user_id:
                    continue
                record.is_deleted = True
                if self._live_by_url.get(record.full_url) == shorten_id:
                    del self._live_by_url[record.full_url]
