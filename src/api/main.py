from __future__ import annotations

from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from uuid import uuid4

import structlog
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from src.api.routes import register_routes
from src.core.config import Settings, get_settings
from src.core.logging import setup_logging
from src.domain.errors import StoreUnavailableError
from src.infrastructure.db.session import dispose_engine
from starlette.responses import Response
from structlog.contextvars import bind_contextvars, clear_contextvars

logger = structlog.get_logger()

DEV_ENVIRONMENTS = {"local", "development"}


def _add_cors(app: FastAPI, settings: Settings) -> None:
    # Any origin in dev environments.
    origins = ["*"] if settings.environment in DEV_ENVIRONMENTS else settings.cors_origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_origin_regex=settings.cors_origin_regex,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


async def store_unavailable_handler(request: Request, exc: Exception) -> Response:
    await logger.awarning("store_unavailable", path=str(request.url.path), error=str(exc))
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": str(exc)},
    )


async def request_context_middleware(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    """Bind request and client-session identifiers to every log line of the request."""
    request_id = request.headers.get("x-request-id", str(uuid4()))
    bind_contextvars(
        request_id=request_id,
        session_id=request.headers.get("x-session-id"),
        path=str(request.url.path),
        method=request.method,
    )
    try:
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response
    finally:
        clear_contextvars()


def create_app() -> FastAPI:
    """Application factory for the public API."""
    setup_logging()
    settings = get_settings()

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        logger.info(
            "service_startup",
            service=settings.app_name,
            environment=settings.environment,
            version=settings.version,
            identity_backend=settings.identity_backend,
            document_backend=settings.document_backend,
        )
        yield
        await dispose_engine()
        logger.info("service_shutdown", service=settings.app_name)

    app = FastAPI(title=settings.app_name, version=settings.version, lifespan=lifespan)

    _add_cors(app, settings)
    register_routes(app)
    app.add_exception_handler(StoreUnavailableError, store_unavailable_handler)
    app.middleware("http")(request_context_middleware)

    return app


app = create_app()
