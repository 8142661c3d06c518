"""Shared test helpers (plain functions; fixtures live in conftest.py)."""

import itertools
import time

from urlshortener.config import Settings

FAST_FLUSH = 0.05


def make_settings(**overrides) -> Settings:
    values = dict(
        base_url="http://localhost:8080",
        secret_key="test-secret",
        delete_flush_interval=FAST_FLUSH,
        request_timeout=5.0,
    )
    values.update(overrides)
    return Settings(**values)


def sequential_ids(*ids):
    """ID generator returning the given IDs in order (length argument ignored)."""
    it = iter(ids)
    return lambda length: next(it)


def counting_ids(prefix="id"):
    """Deterministic unique alphanumeric IDs: id000001, id000002, ..."""
    counter = itertools.count(1)
    return lambda length: f"{prefix}{next(counter):06d}"


def wait_until(predicate, timeout=2.0, interval=0.01):
    """Poll `predicate` until truthy or `timeout` seconds pass; returns the last result."""
    deadline = time.monotonic() + timeout
    result = predicate()
    while not result and time.monotonic() < deadline:
        time.sleep(interval)
        result = predicate()
    return result
