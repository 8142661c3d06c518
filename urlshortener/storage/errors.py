"""Storage error kinds shared by every backend."""

from typing import Optional


class StorageError(Exception):
    """Backend failure (I/O, driver, corrupted data). Carries the operation name."""

    def __init__(self, message: str, operation: Optional[str] = None) -> None:
        self.operation = operation
        super().__init__(f"{operation}: {message}" if operation else message)


class URLExistsError(StorageError):
    """
    The full URL is already stored as a live record.

    Not a failure for callers: `shorten_id` identifies the existing record and
    is used to build the response anyway.
    """

    def __init__(self, full_url: str, shorten_id: str) -> None:
        self.full_url = full_url
        self.shorten_id = shorten_id
        super().__init__(f"'{full_url}' is already saved as {shorten_id!r}")


class URLDeletedError(StorageError):
    """The record exists but was soft-deleted (gone, not absent)."""

    def __init__(self, shorten_id: str) -> None:
        self.shorten_id = shorten_id
        super().__init__(f"url {shorten_id!r} deleted")


class ShortenIDCollisionError(StorageError):
    """A freshly generated ID is already taken. Not retried."""

    def __init__(self, shorten_id: str) -> None:
        self.shorten_id = shorten_id
        super().__init__(f"generated id {shorten_id!r} already exists", operation="set")


class StorageClosedError(StorageError):
    """Operation attempted on a closed or never bootstrapped backend."""
