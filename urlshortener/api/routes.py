"""
HTTP routes.

Thin handlers over `ShortenerService` (found on `app.state.service`). Error
kinds are mapped to status codes by `register_exception_handlers`:

    InvalidURLError          -> 400
    URLDeletedError          -> 410
    PipelineClosedError,
    DeletionQueueFullError   -> 503
    StorageError             -> 500

Handlers are plain `def` functions; FastAPI runs them in its threadpool, so
blocking storage calls do not stall the event loop.
"""

from typing import Any, List

from fastapi import APIRouter, Body, Depends, FastAPI, HTTPException, Request, Response, status
from fastapi.responses import JSONResponse, PlainTextResponse, RedirectResponse

from auth.dependencies import get_current_user, require_user

from ..logging_config import get_logger
from ..schemas import (
    BatchRequestItem,
    BatchResponseItem,
    ErrorOut,
    ShortenRequest,
    ShortenResponse,
    UserURLOut,
)
from ..service.deletion_pipeline import DeletionQueueFullError, PipelineClosedError
from ..service.shortener_service import InvalidURLError, ShortenerService
from ..storage.errors import StorageError, URLDeletedError
from .middleware import GzipRoute

log = get_logger("api")

ping_router = APIRouter(route_class=GzipRoute)
api_router = APIRouter(route_class=GzipRoute)
text_router = APIRouter(route_class=GzipRoute)


def get_service(request: Request) -> ShortenerService:
    return request.app.state.service


async def read_text_body(request: Request) -> str:
    """Raw request body decoded as UTF-8 (gzip already undone by GzipRoute)."""
    body = await request.body()
    try:
        return body.decode("utf-8")
    except UnicodeDecodeError:
        raise HTTPException(status_code=400, detail="request body is not valid UTF-8")


# ----------------------------------------------------------------
# Health
# ----------------------------------------------------------------
@ping_router.get("/ping")
def ping(service: ShortenerService = Depends(get_service)) -> Response:
    if service.ping():
        return Response(status_code=status.HTTP_200_OK)
    return Response(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)


# ----------------------------------------------------------------
# Plain-text routes
# ----------------------------------------------------------------
@text_router.post("/", response_class=PlainTextResponse, status_code=status.HTTP_201_CREATED)
def shorten_text(
    response: Response,
    body: str = Depends(read_text_body),
    user_id: str = Depends(get_current_user),
    service: ShortenerService = Depends(get_service),
) -> str:
    """Shorten the URL sent as the raw body; 409 returns the existing short URL."""
    result = service.create_shorten_url(body, user_id=user_id)
    if result.conflict:
        response.status_code = status.HTTP_409_CONFLICT
    return result.short_url


@text_router.get(
    "/{shorten_id}",
    status_code=status.HTTP_307_TEMPORARY_REDIRECT,
    responses={404: {"model": ErrorOut}, 410: {"model": ErrorOut}},
)
def redirect_to_full_url(shorten_id: str, service: ShortenerService = Depends(get_service)) -> Response:
    """307 to the full URL; 404 when unknown; 410 when deleted."""
    full_url = service.get_full_url(shorten_id)
    if full_url is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="url not found")
    return RedirectResponse(url=full_url, status_code=status.HTTP_307_TEMPORARY_REDIRECT)


# ----------------------------------------------------------------
# JSON API
# ----------------------------------------------------------------
@api_router.post("/shorten", response_model=ShortenResponse, status_code=status.HTTP_201_CREATED)
def shorten_json(
    req: ShortenRequest,
    response: Response,
    user_id: str = Depends(get_current_user),
    service: ShortenerService = Depends(get_service),
) -> ShortenResponse:
    log.info("incoming request data: original_url=%s", req.url)
    result = service.create_shorten_url(req.url, user_id=user_id)
    if result.conflict:
        response.status_code = status.HTTP_409_CONFLICT
    return ShortenResponse(result=result.short_url)


@api_router.post(
    "/shorten/batch", response_model=List[BatchResponseItem], status_code=status.HTTP_201_CREATED
)
def shorten_batch(
    items: List[BatchRequestItem],
    response: Response,
    user_id: str = Depends(get_current_user),
    service: ShortenerService = Depends(get_service),
) -> List[BatchResponseItem]:
    """Shorten many URLs; 409 if any of them already existed."""
    if not items:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="batch is empty")
    log.info("got batch of %d url(s)", len(items))
    results = service.create_shorten_urls_batch(
        [(item.correlation_id, item.original_url) for item in items], user_id=user_id
    )
    if any(result.conflict for _, result in results):
        response.status_code = status.HTTP_409_CONFLICT
    return [BatchResponseItem(correlation_id=cid, short_url=result.short_url) for cid, result in results]


@api_router.get("/user/urls", response_model=List[UserURLOut], responses={401: {"model": ErrorOut}})
def list_user_urls(
    user_id: str = Depends(require_user),
    service: ShortenerService = Depends(get_service),
):
    """Every URL shortened by the caller; 204 when there are none."""
    urls = service.get_all_urls(user_id)
    if not urls:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    return [UserURLOut(short_url=u.short_url, original_url=u.original_url) for u in urls]


@api_router.delete("/user/urls", status_code=status.HTTP_202_ACCEPTED)
def delete_user_urls(
    shorten_ids: List[Any] = Body(...),
    user_id: str = Depends(require_user),
    service: ShortenerService = Depends(get_service),
) -> Response:
    """Queue the caller's IDs for deletion and answer 202 without waiting."""
    service.delete_urls(shorten_ids, user_id=user_id)
    return Response(status_code=status.HTTP_202_ACCEPTED)


# ----------------------------------------------------------------
# Error mapping
# ----------------------------------------------------------------
def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(InvalidURLError)
    async def _invalid_url(request: Request, exc: InvalidURLError):
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(exc)})

    @app.exception_handler(URLDeletedError)
    async def _gone(request: Request, exc: URLDeletedError):
        return JSONResponse(status_code=status.HTTP_410_GONE, content={"detail": str(exc)})

    @app.exception_handler(PipelineClosedError)
    @app.exception_handler(DeletionQueueFullError)
    async def _unavailable(request: Request, exc: Exception):
        log.warning("deletion not accepted: %s", exc)
        return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content={"detail": str(exc)})

    @app.exception_handler(StorageError)
    async def _storage_error(request: Request, exc: StorageError):
        log.error("storage failure on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"detail": "internal storage error"}
        )
