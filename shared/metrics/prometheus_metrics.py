"""Prometheus metrics definitions and helpers.

Provides the metric definitions shared by the HTTP layer and the OMDb
client of the PMovies backend.
"""

from functools import lru_cache
from typing import Callable

from prometheus_client import (
    Counter,
    Gauge,
    Histogram,
    generate_latest,
    REGISTRY,
    CollectorRegistry,
)


class APIMetrics:
    """Inbound HTTP metrics."""

    def __init__(self, registry: CollectorRegistry = REGISTRY) -> None:
        """Initialize API metrics.

        Args:
            registry: Prometheus registry to use
        """
        self.requests_total = Counter(
            "http_requests_total",
            "Total HTTP requests",
            ["method", "endpoint", "status"],
            registry=registry,
        )

        self.request_duration = Histogram(
            "http_request_duration_seconds",
            "HTTP request duration in seconds",
            ["method", "endpoint"],
            registry=registry,
        )

        self.requests_in_progress = Gauge(
            "http_requests_in_progress",
            "HTTP requests currently in progress",
            ["method", "endpoint"],
            registry=registry,
        )


class OMDbMetrics:
    """Outbound OMDb API metrics."""

    def __init__(self, registry: CollectorRegistry = REGISTRY) -> None:
        """Initialize OMDb client metrics.

        Args:
            registry: Prometheus registry to use
        """
        # Requests by endpoint (search, lookup, poster) and outcome
        self.requests_total = Counter(
            "omdb_requests_total",
            "Total requests sent to the OMDb API",
            ["endpoint", "outcome"],
            registry=registry,
        )

        self.request_duration = Histogram(
            "omdb_request_duration_seconds",
            "Time spent waiting on the OMDb API, retries included",
            ["endpoint"],
            buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
            registry=registry,
        )

        self.retries_total = Counter(
            "omdb_retries_total",
            "Total retried OMDb API requests",
            ["endpoint"],
            registry=registry,
        )

        self.search_results = Histogram(
            "omdb_search_total_results",
            "Total results reported by OMDb per successful search",
            buckets=[0, 1, 10, 50, 100, 500, 1000, 5000],
            registry=registry,
        )


@lru_cache()
def setup_metrics() -> tuple[APIMetrics, OMDbMetrics]:
    """Setup and return the process-wide metric instances.

    Cached, since registering the same metric names twice on the default
    registry raises.

    Returns:
        Tuple of (APIMetrics, OMDbMetrics)
    """
    return APIMetrics(), OMDbMetrics()


def get_metrics_handler(registry: CollectorRegistry = REGISTRY) -> Callable[[], bytes]:
    """Get metrics handler for HTTP endpoint.

    Returns:
        Function that generates Prometheus metrics output
    """

    def metrics_handler() -> bytes:
        return generate_latest(registry)

    return metrics_handler
