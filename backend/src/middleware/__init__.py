"""FastAPI middleware components.

This package contains custom middleware for request/response logging,
metrics and security headers.
"""

from backend.src.middleware.request_logging import (
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
)

__all__ = [
    "RequestLoggingMiddleware",
    "SecurityHeadersMiddleware",
]
