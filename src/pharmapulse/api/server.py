"""
HTTP API Server.

FastAPI application factory. Services come from the DI container stored on
``app.state.container``; the lifespan runs the periodic cache sweep and
closes upstream HTTP clients on shutdown.
"""

import asyncio
import logging
import time
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from .. import __version__
from ..config import Settings
from ..container import ApplicationContainer
from ..core.exceptions import APIError, NotFoundError, PharmaPulseError, ValidationError
from .drugs import router as drugs_router
from .news import router as news_router

logger = logging.getLogger(__name__)


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    timestamp: str
    uptime: float


def build_container(settings: Settings) -> ApplicationContainer:
    container = ApplicationContainer()
    container.config.from_dict(settings.to_dict())
    return container


def status_for(error: PharmaPulseError) -> int:
    if isinstance(error, ValidationError):
        return 400
    if isinstance(error, NotFoundError):
        return 404
    if isinstance(error, APIError):
        return 502
    return 500


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    container: ApplicationContainer = app.state.container
    settings: Settings = app.state.settings

    cache = container.cache_store()
    sweeper = asyncio.create_task(cache.sweep_forever(settings.cache_check_period))
    logger.info(f"Cache sweep every {settings.cache_check_period:g}s")

    yield

    # Shutdown
    sweeper.cancel()
    try:
        await sweeper
    except asyncio.CancelledError:
        pass
    for client in container.http_clients():
        await client.close()
    logger.info("HTTP API server shut down")


def create_app(
    settings: Optional[Settings] = None,
    container: Optional[ApplicationContainer] = None,
) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        settings: Runtime settings (default: read from the environment)
        container: Pre-built container, e.g. with test overrides

    Returns:
        Configured FastAPI instance.
    """
    settings = settings or Settings.from_env()
    container = container or build_container(settings)

    app = FastAPI(
        title="PharmaPulse API",
        description="Drug information from openFDA and RxNorm, plus pharmaceutical news.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.container = container
    app.state.started_at = time.monotonic()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(PharmaPulseError)
    async def pharmapulse_error_handler(request: Request, exc: PharmaPulseError):
        status = status_for(exc)
        if status >= 500:
            logger.error(f"{request.url.path} failed: {exc}")
        return JSONResponse(status_code=status, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        details = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'][1:])}: {err['msg']}" for err in exc.errors()
        )
        return JSONResponse(
            status_code=400,
            content={"success": False, "error": f"Invalid request: {details}", "category": "validation"},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        content = {"success": False, "error": exc.detail}
        if exc.status_code == 404:
            content["path"] = request.url.path
        return JSONResponse(status_code=exc.status_code, content=content)

    @app.get("/api/health", response_model=HealthResponse)
    async def health_check():
        """Health check endpoint."""
        return HealthResponse(
            status="healthy",
            timestamp=datetime.now(UTC).isoformat(),
            uptime=round(time.monotonic() - app.state.started_at, 3),
        )

    @app.get("/api/cache/stats")
    async def cache_stats():
        """Cache Store counters."""
        return {"success": True, "data": container.cache_store().stats()}

    app.include_router(drugs_router, prefix="/api/drugs")
    app.include_router(news_router, prefix="/api/news")

    return app


def run_api_server(
    host: Optional[str] = None,
    port: Optional[int] = None,
    log_level: str = "info",
    settings: Optional[Settings] = None,
):
    """
    Run the HTTP API server.

    Args:
        host: Host to bind to (default: PHARMAPULSE_HOST or 127.0.0.1)
        port: Port to bind to (default: PORT or 3000)
        log_level: uvicorn log level
        settings: Runtime settings (default: read from the environment)
    """
    import uvicorn

    settings = settings or Settings.from_env()
    host = host or settings.host
    port = port or settings.port

    logger.info(f"Starting PharmaPulse API on {host}:{port}")
    uvicorn.run(create_app(settings), host=host, port=port, log_level=log_level)
