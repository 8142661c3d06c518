"""
File storage backend: append-only newline-delimited JSON log.

Line format
-----------
    {"id": "<uuid4>", "shorten_id": "AbC12XyZ", "full_url": "https://...",
     "user_id": "<uuid>" | null, "is_deleted": false}

`id` identifies the line, not the mapping. Lines written by older variants may
lack `user_id` / `is_deleted`; they read as `null` / `false`.

Soft delete appends a superseding line for the same `shorten_id` with
`is_deleted: true`. Readers fold the whole log and keep the last line per
`shorten_id`, so every read is a linear scan. No index is kept.

A final line without a newline is the remains of an interrupted append when it
does not parse: readers skip it and the next append cuts it off. Corrupt lines
anywhere else raise StorageError.

The file is opened and closed per operation. A process-local lock makes the
read-check-append sequence of `set` atomic for threads of this process only;
it is a local/dev durability backend, not a shared one.
"""

import json
import os
import threading
import uuid
from typing import Dict, Iterator, List, Optional, Sequence

from ..logging_config import get_logger
from ..models import FullURL, Record, ShortenID, URLPair
from ..shortid import SHORTEN_ID_LENGTH, IDGenerator, generate
from .base import BaseStorage
from .errors import ShortenIDCollisionError, StorageError, URLDeletedError, URLExistsError

log = get_logger("storage.file")


class FileStorage(BaseStorage):
    """Append-only JSON-lines implementation of the storage contract.

    Parameters
    ----------
    path : str
        Location of the log file. Created (empty) by `bootstrap` if missing.
    """

    name = "file"

    def __init__(
        self,
        path: str,
        id_generator: Optional[IDGenerator] = None,
        id_length: int = SHORTEN_ID_LENGTH,
        file_mode: int = 0o666,
    ) -> None:
        self.path = path
        self.file_mode = file_mode
        self._generate = id_generator or generate
        self._id_length = id_length
        self._lock = threading.Lock()

    # ---- Lifecycle --------------------------------------------------------

    def bootstrap(self) -> None:
        """Create the log file (and parent directory) if it does not exist."""
        try:
            parent = os.path.dirname(self.path)
            if parent:
                os.makedirs(parent, exist_ok=True)
            if not os.path.exists(self.path):
                fd = os.open(self.path, os.O_CREAT | os.O_WRONLY, self.file_mode)
                os.close(fd)
                log.info("created storage file %s", self.path)
        except OSError as err:
            raise StorageError(f"cannot create {self.path}: {err}", operation="bootstrap") from err

    def ping(self) -> bool:
        return os.path.isfile(self.path) and os.access(self.path, os.R_OK | os.W_OK)

    # ---- Internal helpers -------------------------------------------------

    def _entries(self, operation: str) -> Iterator[dict]:
        """Yield decoded lines in file order. A missing file reads as empty."""
        try:
            with open(self.path, "r", encoding="utf-8") as fh:
                for lineno, raw in enumerate(fh, start=1):
                    line = raw.strip()
                    if not line:
                        continue
                    try:
                        entry = json.loads(line)
                    except json.JSONDecodeError as err:
                        if not raw.endswith("\n"):
                            log.warning("ignoring unterminated entry at %s:%d", self.path, lineno)
                            continue
                        raise StorageError(
                            f"corrupted entry at {self.path}:{lineno}: {err}", operation=operation
                        ) from err
                    yield entry
        except FileNotFoundError:
            return
        except (OSError, UnicodeDecodeError) as err:
            raise StorageError(f"cannot read {self.path}: {err}", operation=operation) from err

    def _snapshot(self, operation: str) -> Dict[ShortenID, Record]:
        """Fold the log into the latest record per shorten_id."""
        state: Dict[ShortenID, Record] = {}
        for entry in self._entries(operation):
            shorten_id = entry.get("shorten_id")
            if not shorten_id:
                continue
            state[shorten_id] = Record(
                shorten_id=shorten_id,
                full_url=entry.get("full_url", ""),
                user_id=entry.get("user_id"),
                is_deleted=bool(entry.get("is_deleted", False)),
            )
        return state

    def _terminate_tail(self) -> str:
        """
        Prepare the log so the next append starts on a fresh line.

        Returns the prefix to write first: a newline when the last line is a
        complete entry without one. An unparsable unterminated tail is truncated.
        """
        try:
            with open(self.path, "rb+") as fh:
                size = fh.seek(0, os.SEEK_END)
                if size == 0:
                    return ""
                fh.seek(size - 1)
                if fh.read(1) == b"\n":
                    return ""
                fh.seek(0)
                data = fh.read()
                start = data.rfind(b"\n") + 1
                try:
                    json.loads(data[start:])
                except ValueError:
                    log.warning(
                        "dropping %d byte(s) of an interrupted write at the end of %s", size - start, self.path
                    )
                    fh.truncate(start)
                    return ""
                return "\n"
        except FileNotFoundError:
            return ""

    def _append(self, records: Sequence[Record], operation: str) -> None:
        lines = []
        for record in records:
            lines.append(
                json.dumps(
                    {
                        "id": str(uuid.uuid4()),
                        "shorten_id": record.shorten_id,
                        "full_url": record.full_url,
                        "user_id": record.user_id,
                        "is_deleted": record.is_deleted,
                    },
                    ensure_ascii=False,
                )
            )
        try:
            prefix = self._terminate_tail()
            fd = os.open(self.path, os.O_WRONLY | os.O_APPEND | os.O_CREAT, self.file_mode)
            with os.fdopen(fd, "a", encoding="utf-8") as fh:
                fh.write(prefix + "\n".join(lines) + "\n")
        except OSError as err:
            raise StorageError(f"cannot append to {self.path}: {err}", operation=operation) from err

    # ---- Contract methods -------------------------------------------------

    def get(self, shorten_id: ShortenID) -> Optional[FullURL]:
        """Scan the log; the last line for `shorten_id` wins."""
        found = None
        for entry in self._entries("get"):
            if entry.get("shorten_id") == shorten_id:
                found = entry
        if found is None:
            return None
        if found.get("is_deleted"):
            raise URLDeletedError(shorten_id)
        return found.get("full_url")

    def set(self, full_url: FullURL, user_id: Optional[str] = None) -> ShortenID:
        with self._lock:
            state = self._snapshot("set")
            for record in state.values():
                if record.full_url == full_url and not record.is_deleted:
                    raise URLExistsError(full_url, record.shorten_id)

            shorten_id = self._generate(self._id_length)
            if shorten_id in state:
                raise ShortenIDCollisionError(shorten_id)

            self._append([Record(shorten_id=shorten_id, full_url=full_url, user_id=user_id)], "set")
            return shorten_id

    def list_urls(self, user_id: str) -> List[URLPair]:
        state = self._snapshot("list_urls")
        return [
            URLPair(shorten_id=r.shorten_id, full_url=r.full_url)
            for r in state.values()
            if r.user_id == user_id
        ]

    def mark_as_deleted_by_id(
        self, shorten_ids: Sequence[ShortenID], user_id: Optional[str] = None
    ) -> None:
        """Append one tombstone line per live matching record, in a single write."""
        wanted = set(shorten_ids)
        if not wanted:
            return
        with self._lock:
            state = self._snapshot("mark_as_deleted_by_id")
            tombstones = []
            for shorten_id in wanted:
                record = state.get(shorten_id)
                if record is None or record.is_deleted:
                    continue
                if user_id is not None and record.user_id != user_id:
                    continue
                tombstones.append(
                    Record(
                        shorten_id=record.shorten_id,
                        full_url=record.full_url,
                        user_id=record.user_id,
                        is_deleted=True,
                    )
                )
            if tombstones:
                self._append(tombstones, "mark_as_deleted_by_id")
                log.debug("appended %d tombstone(s)", len(tombstones))
