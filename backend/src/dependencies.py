"""
FastAPI dependency injection for the outbound HTTP session and services.

Provides injectable dependencies for:
- The shared aiohttp session opened by the application lifespan
- The OMDb API service

Tests swap the OMDb service through ``app.dependency_overrides``.
"""

from typing import Optional

import aiohttp
import structlog
from fastapi import Depends, HTTPException, Request, status

from backend.src.config import Settings, get_settings
from backend.src.services.omdb_service import OMDbAPIService

logger = structlog.get_logger(__name__)


# ============================================================================
# HTTP SESSION
# ============================================================================


def get_http_session(request: Request) -> aiohttp.ClientSession:
    """
    Get the shared outbound HTTP session.

    Returns:
        aiohttp session stored on the application state

    Raises:
        HTTPException: 503 if the session is not open (startup not finished
            or shutdown in progress)
    """
    session: Optional[aiohttp.ClientSession] = getattr(request.app.state, "http_session", None)

    if session is None or session.closed:
        logger.error("http_session_unavailable")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service is not ready"
        )

    return session


# ============================================================================
# SERVICES
# ============================================================================


def get_omdb_service(
    session: aiohttp.ClientSession = Depends(get_http_session),
    settings: Settings = Depends(get_settings),
) -> OMDbAPIService:
    """Get an OMDb API service bound to the shared session."""
    return OMDbAPIService(session, settings)
