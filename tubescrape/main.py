import logging

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.applications import Starlette
from starlette.routing import Mount

from tubescrape.config import get_settings
from tubescrape.exceptions import (
    AccountNotFound,
    AuthenticationError,
    InputError,
    InsufficientCredits,
    MissingId,
    MissingQuery,
    ParseFailure,
    PermissionDenied,
    RateLimited,
    UpstreamUnavailable,
)
from tubescrape.mcp_server import mcp
from tubescrape.models.common import ErrorResponse, StatusResponse
from tubescrape.routers.credits import router as credits_router
from tubescrape.routers.youtube import router as youtube_router
from tubescrape.services.youtube import get_scraper

logger = logging.getLogger(__name__)


# --- FastAPI app ---

api = FastAPI(title="Tubescrape", version="0.1.0")
api.include_router(youtube_router)
api.include_router(credits_router)


@api.get("/api/status")
def api_status() -> StatusResponse:
    scraper = get_scraper()
    return StatusResponse(
        cache_entries=len(scraper.cache),
        cache_ttl_seconds=scraper.cache.ttl,
        rate_limit_max_requests=scraper.limiter.max_requests,
        rate_limit_window_seconds=scraper.limiter.window,
    )


# --- Exception handlers ---

def _error(status_code: int, error_code: str, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error_code=error_code, message=str(exc)).model_dump())


@api.exception_handler(InputError)
async def input_error_handler(request: Request, exc: InputError):
    if isinstance(exc, MissingQuery):
        return _error(400, "missing_query", exc)
    if isinstance(exc, MissingId):
        return _error(400, "missing_id", exc)
    return _error(400, "invalid_input", exc)


@api.exception_handler(RateLimited)
async def rate_limited_handler(request: Request, exc: RateLimited):
    return _error(429, "rate_limited", exc)


@api.exception_handler(UpstreamUnavailable)
async def upstream_error_handler(request: Request, exc: UpstreamUnavailable):
    return _error(502, "upstream_unavailable", exc)


@api.exception_handler(ParseFailure)
async def parse_failure_handler(request: Request, exc: ParseFailure):
    return _error(502, "parse_failure", exc)


@api.exception_handler(AuthenticationError)
async def auth_error_handler(request: Request, exc: AuthenticationError):
    return _error(401, "unauthenticated", exc)


@api.exception_handler(PermissionDenied)
async def permission_denied_handler(request: Request, exc: PermissionDenied):
    return _error(403, "permission_denied", exc)


@api.exception_handler(AccountNotFound)
async def not_found_handler(request: Request, exc: AccountNotFound):
    return _error(404, "not_found", exc)


@api.exception_handler(InsufficientCredits)
async def insufficient_credits_handler(request: Request, exc: InsufficientCredits):
    return _error(400, "failed_precondition", exc)


@api.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    content = ErrorResponse(error_code="internal_error", message="Unexpected server error.").model_dump()
    return JSONResponse(status_code=500, content=content)


# --- Starlette root app ---

mcp_app = mcp.http_app(path="/", stateless_http=True)

app = Starlette(
    routes=[
        Mount("/mcp", app=mcp_app),
        Mount("/", app=api),
    ],
    lifespan=mcp_app.lifespan,
)


def run():
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(
        "tubescrape.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
