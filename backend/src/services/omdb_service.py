"""
Service for handling OMDb API requests, deserialization and data binding.

The OMDb API lives on two sub hosts of the same domain: one serving JSON
data (search, title and IMDb ID lookups) and one serving poster images.
Both are reached through a shared ``aiohttp.ClientSession`` owned by the
application lifespan.
"""

import asyncio
import time
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

import aiohttp
import structlog
from pydantic import ValidationError

from backend.src.config import Settings, get_settings
from backend.src.exceptions import OMDbAPIError
from backend.src.models.omdb import OMDbSearch
from backend.src.utils.enumerable import OMDbAPIParams
from backend.src.utils.params_builder import OMDbAPIParamsBuilder
from backend.src.utils.retry import RetryConfig, RetryMetrics, retry_with_backoff
from shared.metrics import OMDbMetrics, setup_metrics
from shared.tracing import trace_function

logger = structlog.get_logger(__name__)

POSTER_HEIGHT_PARAM = "h"

Query = List[Tuple[str, str]]


class OMDbAPIService:
    """Client of the OMDb data and poster APIs."""

    def __init__(
        self,
        session: aiohttp.ClientSession,
        settings: Optional[Settings] = None,
        metrics: Optional[OMDbMetrics] = None,
    ):
        """
        Initialize the OMDb service.

        Args:
            session: Shared HTTP session
            settings: Application settings (cached settings if None)
            metrics: OMDb metrics (process-wide metrics if None)
        """
        self.session = session
        self.settings = settings or get_settings()
        self.metrics = metrics or setup_metrics()[1]
        self.retry_metrics = RetryMetrics()

        self._retry_config = RetryConfig(
            max_attempts=self.settings.omdb_retry_attempts,
            initial_delay=self.settings.omdb_retry_delay,
            max_delay=self.settings.omdb_retry_max_delay,
        )
        self._timeout = aiohttp.ClientTimeout(total=self.settings.omdb_timeout)

    # =========================================================================
    # Params
    # =========================================================================

    def make_params_for_search(self, param_search: str) -> OMDbAPIParamsBuilder:
        """Params of a search request, with the API key already set."""
        return OMDbAPIParamsBuilder.build_for_search(param_search, self.settings.omdb_api_key)

    def make_params_for_title(self, param_title: str) -> OMDbAPIParamsBuilder:
        """Params of a title lookup, with the API key already set."""
        return OMDbAPIParamsBuilder.build_for_title(param_title, self.settings.omdb_api_key)

    def make_params_for_imdb_id(self, param_imdb_id: str) -> OMDbAPIParamsBuilder:
        """Params of an IMDb ID lookup, with the API key already set."""
        return OMDbAPIParamsBuilder.build_for_imdb_id(param_imdb_id, self.settings.omdb_api_key)

    # =========================================================================
    # Hosts
    # =========================================================================

    @property
    def data_base_url(self) -> str:
        return self.settings.omdb_data_url

    @property
    def poster_base_url(self) -> str:
        return self.settings.omdb_poster_url

    # =========================================================================
    # Requests
    # =========================================================================

    @trace_function("omdb.search")
    async def search(self, params: OMDbAPIParamsBuilder) -> OMDbSearch:
        """
        Run a search on the OMDb data API.

        Args:
            params: Builder created by ``make_params_for_search``

        Returns:
            The OMDb search body; "no results" is a body with
            ``Response == "False"``, not an exception

        Raises:
            OMDbAPIError: If the API is unreachable or answers with an HTTP error
        """
        body = await self._request("search", self.data_base_url, params.to_query(), self._read_json)

        try:
            result = OMDbSearch.model_validate(body)
        except ValidationError as e:
            logger.error("omdb_search_body_invalid", errors=e.errors(include_url=False))
            raise OMDbAPIError("OMDb search answered with an unexpected body") from e

        if result.has_result():
            self.metrics.search_results.observe(result.total_results_number())

        return result

    @trace_function("omdb.lookup")
    async def lookup(self, params: OMDbAPIParamsBuilder) -> Dict[str, Any]:
        """
        Fetch one title from the OMDb data API.

        Args:
            params: Builder created by ``make_params_for_title`` or
                ``make_params_for_imdb_id``

        Returns:
            The raw OMDb JSON body

        Raises:
            OMDbAPIError: If the API is unreachable or answers with an HTTP error
        """
        return await self._request("lookup", self.data_base_url, params.to_query(), self._read_json)

    @trace_function("omdb.poster")
    async def fetch_poster(self, imdb_id: str, height: Optional[int] = None) -> bytes:
        """
        Download the poster image of a title from the OMDb poster API.

        Args:
            imdb_id: IMDb identifier of the title
            height: Optional image height in pixels

        Returns:
            Raw image bytes

        Raises:
            OMDbAPIError: If the API is unreachable or answers with an HTTP error
        """
        query: Query = [(str(OMDbAPIParams.IMDB_ID), imdb_id)]

        if self.settings.omdb_api_key is not None:
            query.append((str(OMDbAPIParams.API_KEY), self.settings.omdb_api_key))

        if height is not None:
            query.append((POSTER_HEIGHT_PARAM, str(height)))

        return await self._request("poster", self.poster_base_url, query, self._read_bytes)

    # =========================================================================
    # Internals
    # =========================================================================

    @staticmethod
    async def _read_json(response: aiohttp.ClientResponse) -> Any:
        # OMDb sometimes labels JSON as text/html on errors
        return await response.json(content_type=None)

    @staticmethod
    async def _read_bytes(response: aiohttp.ClientResponse) -> bytes:
        return await response.read()

    async def _request(
        self,
        endpoint: str,
        base_url: str,
        query: Query,
        read: Callable[[aiohttp.ClientResponse], Awaitable[Any]],
    ) -> Any:
        url = f"{base_url}/"

        async def send() -> Any:
            async with self.session.get(url, params=query, timeout=self._timeout) as response:
                response.raise_for_status()
                return await read(response)

        def on_retry(attempt: int, error: BaseException, delay: float) -> None:
            self.metrics.retries_total.labels(endpoint=endpoint).inc()

        retrying_send = retry_with_backoff(
            self._retry_config, on_retry=on_retry, metrics=self.retry_metrics
        )(send)

        start_time = time.perf_counter()

        try:
            body = await retrying_send()
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            status = getattr(e, "status", None)
            # ClientResponseError renders the full URL, API key included
            reason = getattr(e, "message", None) or type(e).__name__
            self.metrics.requests_total.labels(endpoint=endpoint, outcome="error").inc()
            logger.error(
                "omdb_request_failed",
                endpoint=endpoint,
                status=status,
                error_type=type(e).__name__,
                reason=reason,
            )
            raise OMDbAPIError(f"OMDb {endpoint} request failed: {reason}", status=status) from e
        finally:
            self.metrics.request_duration.labels(endpoint=endpoint).observe(
                time.perf_counter() - start_time
            )

        self.metrics.requests_total.labels(endpoint=endpoint, outcome="success").inc()
        logger.debug("omdb_request_completed", endpoint=endpoint)

        return body
