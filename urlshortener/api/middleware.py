"""HTTP plumbing: request logging and gzip-encoded request bodies."""

import gzip
import time
import uuid
import zlib
from typing import Callable

from fastapi import HTTPException, Request, Response
from fastapi.routing import APIRoute
from starlette.middleware.base import BaseHTTPMiddleware

from ..logging_config import get_logger

CORRELATION_HEADER = "X-Correlation-ID"


class LoggingMiddleware(BaseHTTPMiddleware):
    """Log every request with status and duration; tag responses with a correlation id."""

    def __init__(self, app, logger=None):
        super().__init__(app)
        self.logger = logger or get_logger("http")

    async def dispatch(self, request: Request, call_next: Callable):
        start = time.perf_counter()
        correlation_id = request.headers.get(CORRELATION_HEADER) or uuid.uuid4().hex
        request.state.correlation_id = correlation_id

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start) * 1000
        response.headers[CORRELATION_HEADER] = correlation_id
        self.logger.info(
            "%s %s -> %s in %.2fms [%s]",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
            correlation_id,
        )
        return response


class GzipRequest(Request):
    """Request whose body is transparently gunzipped when Content-Encoding says gzip."""

    async def body(self) -> bytes:
        if not hasattr(self, "_body"):
            body = await super().body()
            if "gzip" in self.headers.get("content-encoding", "").lower():
                try:
                    body = gzip.decompress(body)
                except (OSError, EOFError, zlib.error) as err:
                    raise HTTPException(status_code=400, detail=f"invalid gzip body: {err}")
            self._body = body
        return self._body


class GzipRoute(APIRoute):
    """APIRoute that hands handlers a GzipRequest."""

    def get_route_handler(self) -> Callable:
        original_route_handler = super().get_route_handler()

        async def custom_route_handler(request: Request) -> Response:
            request = GzipRequest(request.scope, request.receive)
            return await original_route_handler(request)

        return custom_route_handler
