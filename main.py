"""
Main API module for the URL shortener.

Responsibilities:
    - Build the FastAPI app (create_app) around an explicitly constructed
      ShortenerService
    - Bootstrap storage and start the deletion pipeline on startup; flush and
      close on shutdown (FastAPI lifespan)
    - Wire middleware: request logging, gzip responses, gzip request bodies

Architecture:
    - App factory for test isolation and DI: pass `settings` and/or `storage`
      to swap backends without touching routes.
    - Storage backend chosen from settings: DATABASE_DSN > FILE_STORAGE_PATH > memory.

Run:
    python main.py -a localhost:8080 -b http://localhost:8080 -f /tmp/short-url-db.json
    uvicorn main:app
"""

import sys
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI
from starlette.concurrency import run_in_threadpool
from starlette.middleware.gzip import GZipMiddleware

from urlshortener.api import (
    LoggingMiddleware,
    api_router,
    ping_router,
    register_exception_handlers,
    text_router,
)
from urlshortener.config import Settings
from urlshortener.logging_config import get_logger, setup_logging
from urlshortener.service import ShortenerService
from urlshortener.storage import BaseStorage, get_storage


def create_app(settings: Optional[Settings] = None, storage: Optional[BaseStorage] = None) -> FastAPI:
    """
    Factory function to build and configure a new FastAPI app instance.

    Args:
        settings (Optional[Settings]): Resolved settings; loaded from .env/env when omitted.
        storage (Optional[BaseStorage]): Backend to use; selected from settings when omitted.

    Returns:
        FastAPI: An app with its own service, storage and deletion pipeline.
            Storage is bootstrapped when the app starts (lifespan), not here.
    """
    settings = settings or Settings.load()
    setup_logging(settings.log_level)
    log = get_logger("app")

    storage = storage or get_storage(settings)
    service = ShortenerService(storage=storage, settings=settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        log.info("app configs: %r", settings)
        await run_in_threadpool(service.start)
        try:
            yield
        finally:
            await run_in_threadpool(service.stop)

    app = FastAPI(
        title="URL Shortener",
        description="Maps long URLs to short identifiers with batched soft deletion",
        docs_url="/docs",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.service = service

    app.add_middleware(GZipMiddleware)
    app.add_middleware(LoggingMiddleware)
    register_exception_handlers(app)

    # /ping and /api/* before the catch-all /{shorten_id}
    app.include_router(ping_router)
    app.include_router(api_router, prefix="/api")
    app.include_router(text_router)
    return app


def main(argv=None) -> None:
    settings = Settings.load(sys.argv[1:] if argv is None else argv)
    app = create_app(settings)
    get_logger("app").info("running server on %s", settings.run_addr)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
else:
    # `uvicorn main:app` and `from main import app`
    app = create_app()
