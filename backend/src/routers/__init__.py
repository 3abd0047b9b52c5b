"""API routers."""

from backend.src.routers.health import health_router, metrics_router
from backend.src.routers.search import search_router

__all__ = ["health_router", "metrics_router", "search_router"]
