"""
Rate limiting for the public routes, using slowapi.

The limit itself is read from the settings on every request, so tests and
deployments can change it without re-importing the routers.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from backend.src.config import get_settings

_settings = get_settings()

limiter = Limiter(
    key_func=get_remote_address,
    enabled=_settings.rate_limit_enabled,
    storage_uri=_settings.rate_limit_storage_url or "memory://",
)


def search_rate_limit() -> str:
    """Current limit of the search routes, e.g. "60/60 seconds"."""
    return get_settings().rate_limit
