"""Metrics module using Prometheus."""

from .prometheus_metrics import (
    APIMetrics,
    OMDbMetrics,
    setup_metrics,
    get_metrics_handler,
)

__all__ = [
    "APIMetrics",
    "OMDbMetrics",
    "setup_metrics",
    "get_metrics_handler",
]
