"""
Health, readiness and metrics endpoints.

These stay outside rate limiting so orchestrators and scrapers are never
throttled.
"""

from typing import Any, Dict

import structlog
from fastapi import APIRouter, Request, Response, status
from fastapi.responses import JSONResponse, PlainTextResponse
from prometheus_client import CONTENT_TYPE_LATEST

from backend.src.config import get_settings
from shared.metrics import get_metrics_handler

logger = structlog.get_logger(__name__)

health_router = APIRouter(tags=["Health"])

metrics_router = APIRouter(tags=["Monitoring"])

_metrics_handler = get_metrics_handler()


@health_router.get("/health", response_class=JSONResponse)
async def health_check() -> Dict[str, Any]:
    """
    Health check endpoint.

    Returns basic health status without checking dependencies.
    Use for container health checks.
    """
    settings = get_settings()
    return {
        "status": "healthy",
        "service": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment
    }


@health_router.get("/ready", response_class=JSONResponse)
async def readiness_check(request: Request) -> JSONResponse:
    """
    Readiness check endpoint.

    Ready once the outbound HTTP session to the OMDb API is open. The OMDb
    API itself is not called, so readiness never spends API quota.
    """
    settings = get_settings()
    session = getattr(request.app.state, "http_session", None)

    checks = {
        "http_session": "healthy" if session is not None and not session.closed else "unhealthy",
        "omdb_api_key": "configured" if settings.omdb_api_key else "missing",
    }

    ready = checks["http_session"] == "healthy"

    if not ready:
        logger.warning("readiness_check_failed", checks=checks)

    return JSONResponse(
        status_code=status.HTTP_200_OK if ready else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": "ready" if ready else "not_ready",
            "service": settings.app_name,
            "version": settings.app_version,
            "checks": checks
        }
    )


@metrics_router.get("/metrics", response_class=PlainTextResponse)
async def metrics() -> Response:
    """Prometheus metrics endpoint."""
    return Response(
        content=_metrics_handler(),
        media_type=CONTENT_TYPE_LATEST
    )
