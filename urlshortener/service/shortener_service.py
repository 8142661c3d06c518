"""
ShortenerService: the layer handlers talk to.

Responsibilities:
    - Validate submitted URLs (http/https with a host)
    - Turn storage IDs into absolute short URLs (`base_url/<id>`)
    - Translate a storage conflict into a usable result (`created=False`)
    - Hand deletions to the asynchronous pipeline
    - Own the storage/pipeline lifecycle (`start` / `stop`)

The service is constructed explicitly with its storage and settings; there is
no module-level instance.
"""

from typing import Iterable, List, Optional, Sequence, Tuple
from urllib.parse import urlparse

from ..config import Settings
from ..logging_config import get_logger
from ..models import FullURL, ShortenID, ShortenResult, ShortURL, UserURL
from ..storage.base import BaseStorage
from ..storage.errors import StorageError, URLExistsError
from .deletion_pipeline import DeletionPipeline

log = get_logger("service")

MAX_URL_LENGTH = 2048


class InvalidURLError(ValueError):
    """Submitted URL is empty, too long, or not http(s) with a host."""


class ShortenerService:
    def __init__(
        self,
        storage: BaseStorage,
        settings: Settings,
        pipeline: Optional[DeletionPipeline] = None,
    ):
        """
        Args:
            storage (BaseStorage): Backend holding the mappings.
            settings (Settings): Provides base_url and pipeline tuning.
            pipeline (Optional[DeletionPipeline]): Injected pipeline; built from settings if omitted.
        """
        self.storage = storage
        self.settings = settings
        self.pipeline = pipeline or DeletionPipeline(
            storage,
            flush_interval=settings.delete_flush_interval,
            intake_size=settings.delete_intake_size,
            batch_size=settings.delete_batch_size,
            submit_timeout=settings.request_timeout,
        )

    # ---------------------------------------------------------------------
    # Lifecycle
    # ---------------------------------------------------------------------
    def start(self) -> None:
        """Bootstrap storage and start the deletion workers."""
        self.storage.bootstrap()
        self.pipeline.start()
        log.info("service started with %s storage", self.storage.name)

    def stop(self) -> None:
        """Flush pending deletions, then close storage."""
        self.pipeline.stop()
        try:
            self.storage.close()
        except StorageError as err:
            log.error("error while closing storage: %s", err)
        log.info("service stopped")

    # ---------------------------------------------------------------------
    # Helpers
    # ---------------------------------------------------------------------
    def make_short_url(self, shorten_id: ShortenID) -> ShortURL:
        return f"{self.settings.base_url}/{shorten_id}"

    @staticmethod
    def validate_url(url: str) -> FullURL:
        """
        Strip and validate a submitted URL.

        Raises:
            InvalidURLError: If the URL is empty, too long, or not http(s) with a host.
        """
        url = (url or "").strip()
        if not url:
            raise InvalidURLError("URL is empty")
        if len(url) > MAX_URL_LENGTH:
            raise InvalidURLError("URL is too long")
        parsed = urlparse(url)
        if parsed.scheme not in {"http", "https"} or not parsed.netloc:
            raise InvalidURLError("Invalid URL format")
        return url

    # ---------------------------------------------------------------------
    # Public API
    # ---------------------------------------------------------------------
    def create_shorten_url(self, full_url: FullURL, user_id: Optional[str] = None) -> ShortenResult:
        """
        Shorten a URL.

        Returns:
            ShortenResult: `created=False` when the URL was already stored; the
            short URL then points at the existing record.

        Raises:
            InvalidURLError: Invalid URL.
            StorageError: Backend failure.
        """
        full_url = self.validate_url(full_url)
        try:
            shorten_id = self.storage.set(full_url, user_id=user_id)
        except URLExistsError as exists:
            log.info("%s", exists)
            return ShortenResult(
                short_url=self.make_short_url(exists.shorten_id),
                shorten_id=exists.shorten_id,
                created=False,
            )
        return ShortenResult(short_url=self.make_short_url(shorten_id), shorten_id=shorten_id)

    def create_shorten_urls_batch(
        self, items: Sequence[Tuple[str, FullURL]], user_id: Optional[str] = None
    ) -> List[Tuple[str, ShortenResult]]:
        """
        Shorten (correlation_id, url) pairs in order.

        Validation runs for the whole batch before anything is stored, so an
        invalid entry rejects the batch without partial writes.
        """
        for _, url in items:
            self.validate_url(url)
        return [(cid, self.create_shorten_url(url, user_id=user_id)) for cid, url in items]

    def get_full_url(self, shorten_id: ShortenID) -> Optional[FullURL]:
        """
        Returns:
            Optional[str]: The full URL or None when unknown.

        Raises:
            URLDeletedError: The URL was deleted.
        """
        return self.storage.get(shorten_id)

    def get_all_urls(self, user_id: str) -> List[UserURL]:
        pairs = self.storage.list_urls(user_id)
        return [UserURL(short_url=self.make_short_url(p.shorten_id), original_url=p.full_url) for p in pairs]

    def delete_urls(self, shorten_ids: Iterable[ShortenID], user_id: Optional[str] = None) -> int:
        """
        Accept IDs for asynchronous deletion; returns the number accepted.

        Raises:
            PipelineClosedError / DeletionQueueFullError: The intake cannot accept.
        """
        accepted = self.pipeline.submit(shorten_ids, user_id=user_id)
        log.info("accepted %d id(s) for deletion from user %s", accepted, user_id)
        return accepted

    def ping(self) -> bool:
        return self.storage.ping()
