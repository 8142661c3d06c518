"""
Asynchronous batched soft deletion.

Flow:
    submit() --> intake queue (small) --> listener thread --> batch queue (larger)
             --> worker thread: accumulate, flush every `flush_interval` seconds

    - `submit` returns as soon as the IDs are in the intake queue; callers answer
      202 Accepted without waiting for storage.
    - The worker collapses everything received during one interval into one
      `mark_as_deleted_by_id` call per owner. An empty interval issues nothing.
    - A failed flush is logged and the IDs stay pending for the next tick.
    - `stop` sends a sentinel through both queues; the worker flushes what it
      holds and exits. No polling.

Visibility: a deletion is applied at most one interval after it is accepted.
"""

import queue
import threading
import time
from dataclasses import dataclass
from typing import Dict, Iterable, Optional

from ..logging_config import get_logger
from ..models import ShortenID
from ..shortid import is_valid_shorten_id
from ..storage.base import BaseStorage

log = get_logger("service.deletion")

_STOP = object()


class PipelineClosedError(RuntimeError):
    """Submission to a pipeline that is not running."""


class DeletionQueueFullError(RuntimeError):
    """The intake queue did not accept an ID within the submit timeout."""


@dataclass(frozen=True)
class DeletionRequest:
    shorten_id: ShortenID
    user_id: Optional[str] = None


class DeletionPipeline:
    """
    Two-stage queue pipeline marking URLs deleted in periodic batches.

    Args:
        storage (BaseStorage): Backend receiving the batched updates.
        flush_interval (float): Seconds between flushes.
        intake_size (int): Capacity of the handler-facing queue.
        batch_size (int): Capacity of the queue feeding the worker.
        submit_timeout (float): Max seconds `submit` waits for intake capacity.
    """

    def __init__(
        self,
        storage: BaseStorage,
        flush_interval: float = 10.0,
        intake_size: int = 1,
        batch_size: int = 64,
        submit_timeout: Optional[float] = 30.0,
    ):
        self.storage = storage
        self.flush_interval = flush_interval
        self.submit_timeout = submit_timeout
        self._intake: "queue.Queue" = queue.Queue(maxsize=intake_size)
        self._batch: "queue.Queue" = queue.Queue(maxsize=batch_size)
        self._submit_lock = threading.Lock()
        self._listener: Optional[threading.Thread] = None
        self._worker: Optional[threading.Thread] = None
        self._started = False
        self._closing = False
        self.batches_flushed = 0

    @property
    def running(self) -> bool:
        return self._started and not self._closing

    def start(self) -> None:
        with self._submit_lock:
            if self._started:
                return
            self._listener = threading.Thread(target=self._listen, name="deletion-listener", daemon=True)
            self._worker = threading.Thread(target=self._work, name="deletion-worker", daemon=True)
            self._listener.start()
            self._worker.start()
            self._started = True

    def submit(self, shorten_ids: Iterable[ShortenID], user_id: Optional[str] = None) -> int:
        """
        Queue IDs for deletion and return how many were accepted.

        Malformed IDs (empty, non-alphanumeric, non-string) are skipped silently.

        Raises:
            PipelineClosedError: The pipeline was never started or is stopping.
            DeletionQueueFullError: Intake stayed full for `submit_timeout` seconds.
        """
        accepted = 0
        with self._submit_lock:
            if not self.running:
                raise PipelineClosedError("deletion pipeline is not running")
            for shorten_id in shorten_ids:
                if not isinstance(shorten_id, str) or not is_valid_shorten_id(shorten_id):
                    log.debug("skipping malformed id %r", shorten_id)
                    continue
                try:
                    self._intake.put(DeletionRequest(shorten_id, user_id), timeout=self.submit_timeout)
                except queue.Full:
                    raise DeletionQueueFullError(
                        f"intake queue is full, accepted {accepted} id(s) before giving up"
                    ) from None
                accepted += 1
        return accepted

    def stop(self, timeout: Optional[float] = None) -> None:
        """Stop accepting, drain both queues, flush pending IDs and join the threads."""
        with self._submit_lock:
            if not self._started or self._closing:
                return
            self._closing = True
        self._intake.put(_STOP)
        if self._listener is not None:
            self._listener.join(timeout)
        if self._worker is not None:
            self._worker.join(timeout)
        log.info("deletion pipeline stopped")

    # ---- Threads ----------------------------------------------------------

    def _listen(self) -> None:
        log.info("deletion listener is active")
        while True:
            item = self._intake.get()
            self._batch.put(item)
            if item is _STOP:
                break
        log.info("deletion listener is closed")

    def _work(self) -> None:
        log.info("deletion worker is active")
        # owner -> ids in arrival order (dict keeps order and drops duplicates)
        pending: Dict[Optional[str], Dict[ShortenID, None]] = {}
        next_flush = time.monotonic() + self.flush_interval

        while True:
            timeout = max(0.0, next_flush - time.monotonic())
            try:
                item = self._batch.get(timeout=timeout)
            except queue.Empty:
                item = None

            if item is _STOP:
                self._flush(pending)
                if pending:
                    dropped = sum(len(ids) for ids in pending.values())
                    log.error("deletion worker exiting with %d unflushed id(s)", dropped)
                break

            if item is not None:
                pending.setdefault(item.user_id, {})[item.shorten_id] = None

            if time.monotonic() >= next_flush:
                if pending:
                    self._flush(pending)
                next_flush = time.monotonic() + self.flush_interval

        log.info("deletion worker is closed")

    def _flush(self, pending: Dict[Optional[str], Dict[ShortenID, None]]) -> None:
        """Issue one storage call per owner; successful owners leave `pending`."""
        for owner, ids in list(pending.items()):
            batch = list(ids)
            log.info("marking %d id(s) as deleted for user %s", len(batch), owner)
            try:
                self.storage.mark_as_deleted_by_id(batch, user_id=owner)
            except Exception:
                log.exception("failed to mark %d id(s) as deleted, will retry next tick", len(batch))
                continue
            del pending[owner]
            self.batches_flushed += 1
