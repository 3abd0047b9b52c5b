"""
Unit tests for exponential backoff retry logic.

Tests the retry decorator, delay calculation and error classification used
for transient failures of OMDb API calls.
"""

import asyncio

import aiohttp
import pytest
from unittest.mock import Mock

from backend.src.utils.retry import (
    ErrorCategory,
    RetryConfig,
    RetryMetrics,
    calculate_delay,
    classify_error,
    retry_with_backoff,
)


def response_error(status: int) -> aiohttp.ClientResponseError:
    """ClientResponseError as raised by raise_for_status()"""
    return aiohttp.ClientResponseError(request_info=Mock(), history=(), status=status, message="error")


@pytest.fixture
def retry_config():
    """Retry configuration for tests, jitter disabled for determinism"""
    return RetryConfig(
        max_attempts=3,
        initial_delay=0.001,
        max_delay=0.01,
        exponential_base=2,
        jitter=False,
    )


class TestErrorClassification:
    """Test classification of retryable vs permanent errors"""

    @pytest.mark.parametrize("status", [408, 500, 502, 503, 504, 599])
    def test_transient_statuses_are_retryable(self, status):
        assert classify_error(response_error(status)) == ErrorCategory.RETRYABLE

    def test_too_many_requests_is_rate_limited(self):
        assert classify_error(response_error(429)) == ErrorCategory.RATE_LIMITED

    @pytest.mark.parametrize("status", [400, 401, 403, 404])
    def test_client_statuses_are_not_retryable(self, status):
        assert classify_error(response_error(status)) == ErrorCategory.NON_RETRYABLE

    @pytest.mark.parametrize("error", [
        aiohttp.ClientConnectionError("refused"),
        aiohttp.ServerDisconnectedError(),
        asyncio.TimeoutError(),
        ConnectionResetError(),
    ])
    def test_network_errors_are_retryable(self, error):
        assert classify_error(error) == ErrorCategory.RETRYABLE

    def test_value_error_is_not_retryable(self):
        assert classify_error(ValueError("Expecting value")) == ErrorCategory.NON_RETRYABLE

    def test_message_patterns_are_retryable(self):
        assert classify_error(RuntimeError("service temporarily unavailable")) == ErrorCategory.RETRYABLE

    def test_unknown_errors_are_not_retryable(self):
        assert classify_error(RuntimeError("boom")) == ErrorCategory.NON_RETRYABLE


class TestCalculateDelay:
    """Test that delays follow exponential backoff pattern"""

    def test_exponential_growth_is_capped(self):
        config = RetryConfig(initial_delay=0.1, max_delay=1.0, exponential_base=2, jitter=False)

        delays = [calculate_delay(attempt, config) for attempt in range(6)]

        assert delays == pytest.approx([0.1, 0.2, 0.4, 0.8, 1.0, 1.0])

    def test_jitter_stays_in_range(self):
        config = RetryConfig(initial_delay=1.0, max_delay=10.0, jitter=True, jitter_range=0.2)

        for _ in range(50):
            assert 0.8 <= calculate_delay(0, config) <= 1.2


class TestSyncRetry:
    """Test the decorator on plain functions"""

    def test_successful_operation_no_retry(self, retry_config):
        operation = Mock(return_value="success")
        metrics = RetryMetrics()

        result = retry_with_backoff(retry_config, metrics=metrics)(operation)()

        assert result == "success"
        assert operation.call_count == 1
        assert metrics.retry_count == 0
        assert metrics.successful_attempts == 1

    def test_retry_on_transient_failure(self, retry_config):
        operation = Mock(side_effect=[ConnectionError("down"), ConnectionError("down"), "success"])
        operation.__name__ = "operation"
        on_retry = Mock()
        metrics = RetryMetrics()

        result = retry_with_backoff(retry_config, on_retry=on_retry, metrics=metrics)(operation)()

        assert result == "success"
        assert operation.call_count == 3
        assert on_retry.call_count == 2
        assert metrics.retry_count == 2

    def test_max_retries_exhausted(self, retry_config):
        operation = Mock(side_effect=ConnectionError("always down"))
        operation.__name__ = "operation"
        metrics = RetryMetrics()

        with pytest.raises(ConnectionError):
            retry_with_backoff(retry_config, metrics=metrics)(operation)()

        assert operation.call_count == 3
        assert metrics.failed_attempts == 1
        assert metrics.last_error == "always down"

    def test_non_retryable_error_raises_immediately(self, retry_config):
        operation = Mock(side_effect=ValueError("bad payload"))
        operation.__name__ = "operation"

        with pytest.raises(ValueError):
            retry_with_backoff(retry_config)(operation)()

        assert operation.call_count == 1


class TestAsyncRetry:
    """Test the decorator on coroutine functions"""

    @pytest.mark.asyncio
    async def test_retry_on_server_error(self, retry_config):
        calls = 0

        async def fetch():
            nonlocal calls
            calls += 1
            if calls < 2:
                raise response_error(503)
            return {"Response": "True"}

        result = await retry_with_backoff(retry_config)(fetch)()

        assert result == {"Response": "True"}
        assert calls == 2

    @pytest.mark.asyncio
    async def test_rate_limited_is_retried(self, retry_config):
        calls = 0

        async def fetch():
            nonlocal calls
            calls += 1
            raise response_error(429)

        with pytest.raises(aiohttp.ClientResponseError):
            await retry_with_backoff(retry_config)(fetch)()

        assert calls == 3

    @pytest.mark.asyncio
    async def test_unauthorized_is_not_retried(self, retry_config):
        calls = 0

        async def fetch():
            nonlocal calls
            calls += 1
            raise response_error(401)

        with pytest.raises(aiohttp.ClientResponseError) as exc_info:
            await retry_with_backoff(retry_config)(fetch)()

        assert exc_info.value.status == 401
        assert calls == 1
