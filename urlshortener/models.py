"""
Domain models shared by storage backends and the service layer.

Plain dataclasses; HTTP payloads live in `urlshortener.schemas`.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

# Type aliases kept for readability in signatures
FullURL = str
ShortenID = str
ShortURL = str


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Record:
    """One shortening: created by `set`, mutated only by soft delete."""

    shorten_id: ShortenID
    full_url: FullURL
    user_id: Optional[str] = None
    created_at: datetime = field(default_factory=_utcnow)
    is_deleted: bool = False


@dataclass(frozen=True)
class URLPair:
    """(shorten_id, full_url) row returned by `list_urls`."""

    shorten_id: ShortenID
    full_url: FullURL


@dataclass(frozen=True)
class UserURL:
    """Listing entry with the base URL already prepended."""

    short_url: ShortURL
    original_url: FullURL


@dataclass(frozen=True)
class ShortenResult:
    """
    Outcome of a shortening request.

    `created` is False when the URL was already stored; `short_url` then points
    at the pre-existing record and callers answer with a conflict status.
    """

    short_url: ShortURL
    shorten_id: ShortenID
    created: bool = True

    @property
    def conflict(self) -> bool:
        return not self.created
