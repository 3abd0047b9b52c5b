"""
Shared pytest configuration.

Environment overrides are set before any backend module is imported, since
the rate limiter and the module-level app read settings at import time.
"""

import os

os.environ.setdefault("PMOVIES_OMDB_API_KEY", "test-key")
os.environ.setdefault("PMOVIES_RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("PMOVIES_TRACING_ENABLED", "false")
os.environ.setdefault("PMOVIES_ENVIRONMENT", "development")
os.environ.setdefault("PMOVIES_LOG_FORMAT", "text")

import pytest  # noqa: E402

from backend.src.config import Settings  # noqa: E402


@pytest.fixture
def settings() -> Settings:
    """Settings built from explicit values, independent of the environment."""
    return Settings(
        _env_file=None,
        omdb_api_key="test-key",
        omdb_retry_attempts=3,
        omdb_retry_delay=0.001,
        omdb_retry_max_delay=0.01,
        rate_limit_enabled=False,
        tracing_enabled=False,
    )
