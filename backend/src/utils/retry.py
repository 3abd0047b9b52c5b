"""
Error handling utilities with exponential backoff retry logic.

Provides a retry decorator and error classification for transient vs
permanent failures of outbound HTTP calls to the OMDb API.
"""

import asyncio
import functools
import inspect
import random
import time
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Optional, Type, Tuple
from dataclasses import dataclass

import aiohttp
import structlog

logger = structlog.get_logger(__name__)


class ErrorCategory(Enum):
    """Error category classification"""
    RETRYABLE = "retryable"
    NON_RETRYABLE = "non_retryable"
    RATE_LIMITED = "rate_limited"


@dataclass
class RetryConfig:
    """Configuration for retry behavior"""
    max_attempts: int = 3
    initial_delay: float = 0.1  # seconds
    max_delay: float = 10.0  # seconds
    exponential_base: float = 2.0
    jitter: bool = True
    jitter_range: float = 0.2  # +/- 20%


@dataclass
class RetryMetrics:
    """Counters for retry operations"""
    total_attempts: int = 0
    successful_attempts: int = 0
    failed_attempts: int = 0
    retry_count: int = 0
    total_retry_duration_ms: float = 0.0
    last_error: Optional[str] = None
    last_error_timestamp: Optional[datetime] = None


RETRYABLE_STATUS_CODES = frozenset({408, 500, 502, 503, 504})

RATE_LIMITED_STATUS_CODES = frozenset({429})

# Retryable exception types
RETRYABLE_EXCEPTIONS: Tuple[Type[BaseException], ...] = (
    # Network errors
    ConnectionError,
    TimeoutError,
    asyncio.TimeoutError,
    # HTTP client errors
    aiohttp.ClientConnectionError,
    aiohttp.ClientPayloadError,
    aiohttp.ServerTimeoutError,
)

# Non-retryable exception types
NON_RETRYABLE_EXCEPTIONS: Tuple[Type[BaseException], ...] = (
    ValueError,
    TypeError,
    KeyError,
    AttributeError,
    aiohttp.ContentTypeError,
)


def classify_error(exception: BaseException) -> ErrorCategory:
    """
    Classify an exception as retryable or non-retryable.

    Args:
        exception: The exception to classify

    Returns:
        ErrorCategory indicating retry behavior
    """
    # HTTP status codes win over the exception type
    status_code = getattr(exception, "status", None)
    if isinstance(status_code, int):
        if status_code in RATE_LIMITED_STATUS_CODES:
            return ErrorCategory.RATE_LIMITED
        if status_code in RETRYABLE_STATUS_CODES or status_code >= 500:
            return ErrorCategory.RETRYABLE
        if 400 <= status_code < 500:
            return ErrorCategory.NON_RETRYABLE

    if isinstance(exception, NON_RETRYABLE_EXCEPTIONS):
        return ErrorCategory.NON_RETRYABLE

    if isinstance(exception, RETRYABLE_EXCEPTIONS):
        return ErrorCategory.RETRYABLE

    # Check error message for common patterns
    error_msg = str(exception).lower()
    retryable_patterns = [
        "connection",
        "timeout",
        "unavailable",
        "temporary",
    ]

    if any(pattern in error_msg for pattern in retryable_patterns):
        return ErrorCategory.RETRYABLE

    return ErrorCategory.NON_RETRYABLE


def calculate_delay(attempt: int, config: RetryConfig) -> float:
    """
    Calculate delay for retry attempt with exponential backoff and jitter.

    Args:
        attempt: Current attempt number (0-indexed)
        config: Retry configuration

    Returns:
        Delay in seconds
    """
    delay = config.initial_delay * (config.exponential_base ** attempt)
    delay = min(delay, config.max_delay)

    if config.jitter:
        jitter = random.uniform(-config.jitter_range, config.jitter_range)
        delay = delay * (1 + jitter)

    return max(0, delay)


def retry_with_backoff(
    config: Optional[RetryConfig] = None,
    on_retry: Optional[Callable[[int, BaseException, float], None]] = None,
    metrics: Optional[RetryMetrics] = None,
):
    """
    Decorator for retrying operations with exponential backoff.

    Only retryable and rate-limited errors are retried; anything else is
    raised on the first attempt. The last error is raised once
    ``config.max_attempts`` is exhausted.

    Args:
        config: Retry configuration (uses defaults if None)
        on_retry: Optional callback called with (attempt, error, delay)
            before each retry
        metrics: Optional metrics object to track retry stats

    Returns:
        Decorated function with retry logic

    Example:
        @retry_with_backoff(RetryConfig(max_attempts=5))
        async def fetch_search(params):
            return await session.get(url, params=params)
    """
    if config is None:
        config = RetryConfig()

    if metrics is None:
        metrics = RetryMetrics()

    def _should_raise(func_name: str, attempt: int, error: BaseException) -> Tuple[bool, ErrorCategory]:
        error_category = classify_error(error)

        metrics.last_error = str(error)
        metrics.last_error_timestamp = datetime.now(timezone.utc)

        if error_category == ErrorCategory.NON_RETRYABLE:
            logger.error(
                "non_retryable_error",
                function=func_name,
                attempt=attempt + 1,
                error_type=type(error).__name__,
                error=str(error),
            )
            metrics.failed_attempts += 1
            return True, error_category

        if attempt == config.max_attempts - 1:
            logger.error(
                "max_retries_exhausted",
                function=func_name,
                max_attempts=config.max_attempts,
                total_retry_duration_ms=metrics.total_retry_duration_ms,
                error_type=type(error).__name__,
                error=str(error),
            )
            metrics.failed_attempts += 1
            return True, error_category

        return False, error_category

    def _next_delay(func_name: str, attempt: int, error: BaseException, error_category: ErrorCategory) -> float:
        delay = calculate_delay(attempt, config)
        metrics.retry_count += 1
        metrics.total_retry_duration_ms += delay * 1000

        logger.warning(
            "retrying_operation",
            function=func_name,
            attempt=attempt + 1,
            max_attempts=config.max_attempts,
            delay_seconds=round(delay, 3),
            error_type=type(error).__name__,
            error_category=error_category.value,
        )

        if on_retry:
            on_retry(attempt, error, delay)

        return delay

    def decorator(func):
        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs):
            for attempt in range(config.max_attempts):
                try:
                    metrics.total_attempts += 1
                    result = await func(*args, **kwargs)
                    metrics.successful_attempts += 1
                    return result

                except Exception as e:
                    should_raise, error_category = _should_raise(func.__name__, attempt, e)
                    if should_raise:
                        raise

                    await asyncio.sleep(_next_delay(func.__name__, attempt, e, error_category))

        @functools.wraps(func)
        def sync_wrapper(*args, **kwargs):
            for attempt in range(config.max_attempts):
                try:
                    metrics.total_attempts += 1
                    result = func(*args, **kwargs)
                    metrics.successful_attempts += 1
                    return result

                except Exception as e:
                    should_raise, error_category = _should_raise(func.__name__, attempt, e)
                    if should_raise:
                        raise

                    time.sleep(_next_delay(func.__name__, attempt, e, error_category))

        # Return appropriate wrapper based on function type
        if inspect.iscoroutinefunction(func):
            return async_wrapper
        return sync_wrapper

    return decorator
