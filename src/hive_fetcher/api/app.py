"""FastAPI application factory."""

from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import structlog

from ..config import settings
from ..errors import InvalidSearchRequest
from ..models.search_result import SearchResponse
from ..storage.content_store import ContentStore
from ..utils.logging import request_context, setup_logging
from .routers import health, search

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage application lifecycle.

    Opens the content store pool on startup, checks connectivity (a failed
    check is logged, not fatal) and drains the pool on shutdown.
    """
    setup_logging(settings.log_level, settings.json_logs)

    store: ContentStore = app.state.content_store
    await store.start()
    await store.check_connection()

    yield

    await store.stop()


def _validation_message(errors: list[dict[str, Any]]) -> str:
    """Collapse FastAPI body validation errors into one short message."""
    for error in errors:
        loc = tuple(error.get("loc", ()))
        if error.get("type") == "json_invalid":
            return "Invalid JSON body"
        if loc == ("body",):
            return "Keywords array is required"
        if loc[:2] == ("body", "keywords"):
            if len(loc) == 2:
                return "Keywords array is required"
            return "Keywords must be non-empty strings"
        if loc[:2] in (("body", "startDate"), ("body", "endDate")):
            return "Invalid date format. Use YYYY-MM-DD."

    if not errors:
        return "Invalid request body"
    first = errors[0]
    field = ".".join(str(part) for part in first.get("loc", ())[1:])
    return f"Invalid value for {field}: {first.get('msg')}" if field else "Invalid request body"


def _bad_request(message: str) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content=SearchResponse.invalid(message).model_dump(mode="json", exclude_none=True),
    )


async def invalid_search_handler(request: Request, exc: InvalidSearchRequest) -> JSONResponse:
    logger.warning("invalid_search_request", path=request.url.path, error=exc.message)
    return _bad_request(exc.message)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    message = _validation_message(list(exc.errors()))
    logger.warning("invalid_search_request", path=request.url.path, error=message)
    return _bad_request(message)


def create_app(content_store: ContentStore | None = None) -> FastAPI:
    """Create and configure FastAPI application.

    Args:
        content_store: Store to serve searches from; built from settings if omitted

    Returns:
        Configured FastAPI application
    """
    app = FastAPI(
        title="Hive Fetcher API",
        description="Keyword search over top-level Hive posts via HAF SQL",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.content_store = content_store or ContentStore.from_settings(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        with request_context(method=request.method, path=request.url.path):
            logger.info("http_request")
            response = await call_next(request)
            logger.info("http_response", status_code=response.status_code)
            return response

    app.add_exception_handler(InvalidSearchRequest, invalid_search_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)

    app.include_router(health.router, tags=["Health"])
    app.include_router(search.router)

    return app
