"""
NFR: concurrency/idempotency for shortening

Goal:
    Fire many concurrent shortening requests for the same URL and ensure:
      - exactly one request creates the record, the rest see a conflict
      - every caller gets the same short URL
      - storage holds a single live mapping for that URL

How to run (opt-in):
    RUN_NFR=1 pytest tests/nfr/test_concurrency_idempotency.py -vv
"""

import os
from concurrent.futures import ThreadPoolExecutor

import pytest

from urlshortener.service import ShortenerService
from urlshortener.storage import FileStorage, MemoryStorage

from tests.helpers import make_settings

pytestmark = pytest.mark.nfr


def _should_run():
    return os.getenv("RUN_NFR") == "1"


def _hammer(storage, n=500, workers=32):
    svc = ShortenerService(storage, make_settings())
    url = "https://example.com/idempotent"
    with ThreadPoolExecutor(max_workers=workers) as pool:
        results = list(pool.map(lambda _: svc.create_shorten_url(url), range(n)))
    return url, results


@pytest.mark.skipif(not _should_run(), reason="NFR tests are opt-in; set RUN_NFR=1 to enable")
def test_memory_single_winner_under_contention():
    storage = MemoryStorage()
    url, results = _hammer(storage)

    assert sum(1 for r in results if r.created) == 1
    assert len({r.short_url for r in results}) == 1
    assert len(storage.records) == 1
    assert storage.get(results[0].shorten_id) == url


@pytest.mark.skipif(not _should_run(), reason="NFR tests are opt-in; set RUN_NFR=1 to enable")
def test_file_single_winner_under_contention(tmp_path):
    storage = FileStorage(str(tmp_path / "urls.json"))
    storage.bootstrap()
    url, results = _hammer(storage, n=200, workers=16)

    assert sum(1 for r in results if r.created) == 1
    assert len({r.shorten_id for r in results}) == 1
    with open(storage.path, encoding="utf-8") as fh:
        assert sum(1 for line in fh if line.strip()) == 1
