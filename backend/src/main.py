"""
FastAPI application entry point for the PMovies backend.

This module provides the application factory with:
- Health, readiness and metrics endpoints
- OMDb search endpoints
- Request/response logging with correlation IDs
- Prometheus metrics
- OpenTelemetry distributed tracing
- CORS, security headers, GZip and rate limiting
- Outbound HTTP session management
- Graceful startup and shutdown

Run standalone with ``pmovies-backend`` (uvicorn), or mount
``backend.src.main:app`` on any ASGI server, e.g. gunicorn with uvicorn
workers.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

import aiohttp
import structlog
import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from opentelemetry import trace
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from backend.src.config import Settings, get_settings
from backend.src.exceptions import OMDbAPIError
from backend.src.middleware import RequestLoggingMiddleware, SecurityHeadersMiddleware
from backend.src.rate_limit import limiter
from backend.src.routers import health_router, metrics_router, search_router
from backend.src.routers.base import response_error
from shared.logging import configure_logging
from shared.metrics import setup_metrics
from shared.tracing import configure_tracing

logger = structlog.get_logger(__name__)

OMDB_UNREACHABLE_ERROR = "Unable to reach the OMDb API!"
INVALID_REQUEST_ERROR = "Invalid request"


# ============================================================================
# Lifespan Management
# ============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan manager for startup and shutdown events.

    Handles:
    - Outbound HTTP session creation
    - OpenTelemetry tracing setup
    - Graceful shutdown and resource cleanup
    """
    settings: Settings = app.state.settings

    logger.info(
        "application_starting",
        app_name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment
    )

    if not settings.omdb_api_key:
        logger.warning("omdb_api_key_missing")

    # ========================================================================
    # Startup: Initialize Resources
    # ========================================================================

    try:
        if settings.tracing_enabled:
            logger.info("initializing_tracing", endpoint=settings.tracing_otlp_endpoint)
            configure_tracing(
                service_name=settings.app_name,
                otlp_endpoint=settings.tracing_otlp_endpoint,
                sampling_rate=settings.tracing_sample_rate,
                service_version=settings.app_version,
            )

        logger.info("initializing_http_session", timeout=settings.omdb_timeout)
        app.state.http_session = aiohttp.ClientSession(
            timeout=aiohttp.ClientTimeout(total=settings.omdb_timeout),
            headers={"Accept": "application/json"},
        )

        logger.info("application_started", app_name=settings.app_name)

        yield

    except Exception as e:
        logger.error("application_startup_failed", error=str(e), exc_info=True)
        raise

    # ========================================================================
    # Shutdown: Cleanup Resources
    # ========================================================================

    finally:
        logger.info("application_shutting_down")

        session: Optional[aiohttp.ClientSession] = getattr(app.state, "http_session", None)
        if session is not None:
            await session.close()
            logger.info("http_session_closed")

        if settings.tracing_enabled:
            provider = trace.get_tracer_provider()
            if hasattr(provider, "shutdown"):
                provider.shutdown()

        logger.info("application_shutdown_complete")


# ============================================================================
# Exception Handlers
# ============================================================================

async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle request validation errors."""
    logger.warning(
        "validation_error",
        path=request.url.path,
        errors=exc.errors()
    )
    return response_error(INVALID_REQUEST_ERROR, status.HTTP_422_UNPROCESSABLE_ENTITY)


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Handle HTTP exceptions."""
    logger.warning(
        "http_exception",
        path=request.url.path,
        status_code=exc.status_code,
        detail=exc.detail
    )
    return response_error(exc.detail, exc.status_code)


async def omdb_exception_handler(request: Request, exc: OMDbAPIError):
    """Handle failures of the upstream OMDb API."""
    logger.error(
        "omdb_api_unavailable",
        path=request.url.path,
        upstream_status=exc.status,
        error=str(exc)
    )
    return response_error(OMDB_UNREACHABLE_ERROR, status.HTTP_502_BAD_GATEWAY)


async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.error(
        "unexpected_exception",
        path=request.url.path,
        error=str(exc),
        exc_info=True
    )
    return response_error("Internal server error", status.HTTP_500_INTERNAL_SERVER_ERROR)


# ============================================================================
# FastAPI Application
# ============================================================================

def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Application settings (cached settings if None)

    Returns:
        Configured application, ready to be served by any ASGI server
    """
    settings = settings or get_settings()

    configure_logging(
        log_level=settings.log_level,
        json_logs=settings.log_format == "json",
        service_name=settings.app_name,
        environment=settings.environment,
    )

    api_metrics, _ = setup_metrics()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Movie search API backed by the OMDb API.",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
        debug=settings.debug,
    )
    app.state.settings = settings
    app.state.limiter = limiter

    # ------------------------------------------------------------------------
    # Middleware (last added runs first)
    # ------------------------------------------------------------------------

    app.add_middleware(SecurityHeadersMiddleware, settings=settings)
    app.add_middleware(GZipMiddleware, minimum_size=1000)

    if settings.cors_enabled:
        logger.info("configuring_cors", origins=settings.cors_origins)
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins,
            allow_credentials=settings.cors_allow_credentials,
            allow_methods=settings.cors_allow_methods,
            allow_headers=settings.cors_allow_headers,
        )

    app.add_middleware(RequestLoggingMiddleware, metrics=api_metrics)

    if settings.tracing_enabled:
        FastAPIInstrumentor.instrument_app(app)

    # ------------------------------------------------------------------------
    # Exception handlers
    # ------------------------------------------------------------------------

    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(OMDbAPIError, omdb_exception_handler)
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    # ------------------------------------------------------------------------
    # Routers
    # ------------------------------------------------------------------------

    app.include_router(health_router)
    if settings.metrics_enabled:
        app.include_router(metrics_router)
    app.include_router(search_router)

    return app


app = create_app()


# ============================================================================
# Application Entry Point
# ============================================================================

def main() -> None:
    """
    Run the application with Uvicorn.

    With ``debug`` set, Uvicorn watches the source tree and reloads on change.
    """
    settings = get_settings()

    logger.info(
        "starting_uvicorn_server",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )

    uvicorn.run(
        "backend.src.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
        access_log=True,
    )


if __name__ == "__main__":
    main()
