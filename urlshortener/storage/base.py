"""
Base storage interface for the URL shortener.

Purpose:
    Define one contract that the in-memory, file and Postgres backends
    implement, so the service layer never needs to know where data lives.

Semantics shared by every backend:
    - `get` returns None for an unknown ID and raises URLDeletedError for a
      soft-deleted one. Absent and gone are different answers.
    - `set` raises URLExistsError carrying the existing ID when the full URL
      is already stored as a live record.
    - `mark_as_deleted_by_id` ignores unknown IDs and is idempotent.
    - Backend failures surface as StorageError; nothing is logged-and-swallowed.

Testing & Coverage:
    Abstract declarations are marked `# pragma: no cover`.
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from ..models import FullURL, ShortenID, URLPair


class BaseStorage(ABC):
    """Abstract base class for storage backends."""

    name = "base"

    @abstractmethod  # pragma: no cover
    def get(self, shorten_id: ShortenID) -> Optional[FullURL]:
        """
        Return the full URL of a live record.

        Returns:
            Optional[str]: The full URL, or None if no record has this ID.

        Raises:
            URLDeletedError: The record exists but is soft-deleted.
        """
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def set(self, full_url: FullURL, user_id: Optional[str] = None) -> ShortenID:
        """
        Generate a new ID and persist (id, full_url, user_id).

        Returns:
            str: The newly generated shorten ID.

        Raises:
            URLExistsError: The full URL is already stored; carries its ID.
        """
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def list_urls(self, user_id: str) -> List[URLPair]:
        """Return every record (live and deleted) owned by the user; [] when none."""
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def mark_as_deleted_by_id(
        self, shorten_ids: Sequence[ShortenID], user_id: Optional[str] = None
    ) -> None:
        """
        Soft-delete all matching IDs in one operation.

        When `user_id` is given only records owned by that user are touched.
        Unknown IDs are ignored.
        """
        raise NotImplementedError

    def bootstrap(self) -> None:
        """Prepare external resources (tables, files, connections). No-op by default."""

    def close(self) -> None:
        """Release external resources. No-op by default."""

    def ping(self) -> bool:
        """Return True when the backend is reachable."""
        return True
