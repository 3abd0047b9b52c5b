"""
Unit tests for the OMDb API service.

The aiohttp session is replaced by a stub recording every GET and replaying
scripted responses, so no request leaves the process.
"""

import asyncio
import json
from typing import Any, List, Optional
from unittest.mock import Mock

import aiohttp
import pytest
from prometheus_client import CollectorRegistry

from backend.src.exceptions import OMDbAPIError
from backend.src.services.omdb_service import OMDbAPIService
from backend.src.utils.enumerable import OMDbAPIParams
from shared.metrics import OMDbMetrics


# ============================================================================
# SESSION STUB
# ============================================================================


class StubResponse:
    """Minimal stand-in for aiohttp.ClientResponse."""

    def __init__(self, status: int = 200, body: Any = None, raw: Optional[bytes] = None):
        self.status = status
        self._body = body
        self._raw = raw

    def raise_for_status(self) -> None:
        if self.status >= 400:
            raise aiohttp.ClientResponseError(
                request_info=Mock(), history=(), status=self.status, message="upstream error"
            )

    async def json(self, content_type: Optional[str] = "application/json") -> Any:
        if isinstance(self._body, str):
            return json.loads(self._body)
        return self._body

    async def read(self) -> bytes:
        return self._raw or b""

    async def __aenter__(self) -> "StubResponse":
        return self

    async def __aexit__(self, *exc_info) -> None:
        return None


class StubSession:
    """Replays scripted responses (or raises scripted errors) in order."""

    def __init__(self, *outcomes: Any):
        self.outcomes: List[Any] = list(outcomes)
        self.calls: List[dict] = []

    def get(self, url: str, params=None, timeout=None):
        self.calls.append({"url": url, "params": list(params or [])})
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


# ============================================================================
# FIXTURES
# ============================================================================


@pytest.fixture
def metrics():
    """Metrics on a private registry, so tests do not share counters"""
    return OMDbMetrics(registry=CollectorRegistry())


@pytest.fixture
def search_body():
    return {
        "Search": [
            {"Title": "Heat", "Year": "1995", "imdbID": "tt0113277", "Type": "movie", "Poster": "N/A"}
        ],
        "totalResults": "1",
        "Response": "True",
    }


def make_service(session, settings, metrics) -> OMDbAPIService:
    return OMDbAPIService(session, settings, metrics)


# ============================================================================
# TESTS
# ============================================================================


class TestParams:
    """Test params creation with the configured API key"""

    def test_search_params_carry_api_key(self, settings, metrics):
        service = make_service(StubSession(), settings, metrics)

        params = service.make_params_for_search("heat")

        assert params.get(OMDbAPIParams.SEARCH) == "heat"
        assert params.get(OMDbAPIParams.API_KEY) == "test-key"

    def test_title_and_imdb_params(self, settings, metrics):
        service = make_service(StubSession(), settings, metrics)

        assert service.make_params_for_title("Heat").get(OMDbAPIParams.TITLE) == "Heat"
        assert service.make_params_for_imdb_id("tt0113277").get(OMDbAPIParams.IMDB_ID) == "tt0113277"

    def test_no_api_key_configured(self, settings, metrics):
        settings = settings.model_copy(update={"omdb_api_key": None})
        service = make_service(StubSession(), settings, metrics)

        assert service.make_params_for_search("heat").get(OMDbAPIParams.API_KEY) is None


class TestHosts:
    """Test the sub host URLs"""

    def test_default_hosts(self, settings, metrics):
        service = make_service(StubSession(), settings, metrics)

        assert service.data_base_url == "https://www.omdbapi.com"
        assert service.poster_base_url == "https://img.omdbapi.com"

    def test_custom_sub_hosts(self, settings, metrics):
        settings = settings.model_copy(update={"omdb_sub_host_data": "data", "omdb_host": "example.org"})
        service = make_service(StubSession(), settings, metrics)

        assert service.data_base_url == "https://data.example.org"


class TestSearch:
    """Test search requests"""

    @pytest.mark.asyncio
    async def test_search_sends_query_and_parses_body(self, settings, metrics, search_body):
        session = StubSession(StubResponse(body=search_body))
        service = make_service(session, settings, metrics)

        params = service.make_params_for_search("heat").add(OMDbAPIParams.TYPE, "movie")
        result = await service.search(params)

        assert result.has_result()
        assert result.parsed()[0].imdb_id == "tt0113277"
        assert session.calls == [{
            "url": "https://www.omdbapi.com/",
            "params": [("s", "heat"), ("r", "json"), ("v", "1"), ("apikey", "test-key"), ("type", "movie")],
        }]
        assert metrics.requests_total.labels(endpoint="search", outcome="success")._value.get() == 1

    @pytest.mark.asyncio
    async def test_search_without_results_is_not_an_exception(self, settings, metrics):
        session = StubSession(StubResponse(body={"Response": "False", "Error": "Movie not found!"}))
        service = make_service(session, settings, metrics)

        result = await service.search(service.make_params_for_search("zzzzzz"))

        assert result.has_error()

    @pytest.mark.asyncio
    async def test_transient_failures_are_retried(self, settings, metrics, search_body):
        session = StubSession(
            aiohttp.ClientConnectionError("connection refused"),
            StubResponse(status=503),
            StubResponse(body=search_body),
        )
        service = make_service(session, settings, metrics)

        result = await service.search(service.make_params_for_search("heat"))

        assert result.has_result()
        assert len(session.calls) == 3
        assert metrics.retries_total.labels(endpoint="search")._value.get() == 2

    @pytest.mark.asyncio
    async def test_exhausted_retries_raise_omdb_error(self, settings, metrics):
        session = StubSession(*[asyncio.TimeoutError() for _ in range(3)])
        service = make_service(session, settings, metrics)

        with pytest.raises(OMDbAPIError) as exc_info:
            await service.search(service.make_params_for_search("heat"))

        assert exc_info.value.status is None
        assert len(session.calls) == 3
        assert metrics.requests_total.labels(endpoint="search", outcome="error")._value.get() == 1

    @pytest.mark.asyncio
    async def test_unauthorized_is_not_retried(self, settings, metrics):
        session = StubSession(StubResponse(status=401))
        service = make_service(session, settings, metrics)

        with pytest.raises(OMDbAPIError) as exc_info:
            await service.search(service.make_params_for_search("heat"))

        assert exc_info.value.status == 401
        assert len(session.calls) == 1

    @pytest.mark.asyncio
    async def test_invalid_json_raises_omdb_error(self, settings, metrics):
        session = StubSession(StubResponse(body="<html>maintenance</html>"))
        service = make_service(session, settings, metrics)

        with pytest.raises(OMDbAPIError):
            await service.search(service.make_params_for_search("heat"))

        assert len(session.calls) == 1

    @pytest.mark.asyncio
    async def test_unexpected_body_shape_raises_omdb_error(self, settings, metrics):
        session = StubSession(StubResponse(body=["not", "an", "object"]))
        service = make_service(session, settings, metrics)

        with pytest.raises(OMDbAPIError):
            await service.search(service.make_params_for_search("heat"))

    @pytest.mark.asyncio
    async def test_api_key_not_in_error_message(self, settings, metrics):
        session = StubSession(StubResponse(status=401))
        service = make_service(session, settings, metrics)

        with pytest.raises(OMDbAPIError) as exc_info:
            await service.search(service.make_params_for_search("heat"))

        assert "test-key" not in str(exc_info.value)


class TestLookupAndPoster:
    """Test title lookups and poster downloads"""

    @pytest.mark.asyncio
    async def test_lookup_returns_raw_body(self, settings, metrics):
        body = {"Title": "Heat", "Year": "1995", "Response": "True"}
        session = StubSession(StubResponse(body=body))
        service = make_service(session, settings, metrics)

        result = await service.lookup(service.make_params_for_imdb_id("tt0113277"))

        assert result == body
        assert session.calls[0]["params"][0] == ("i", "tt0113277")

    @pytest.mark.asyncio
    async def test_fetch_poster_hits_poster_host(self, settings, metrics):
        session = StubSession(StubResponse(raw=b"\x89PNG"))
        service = make_service(session, settings, metrics)

        image = await service.fetch_poster("tt0113277", height=600)

        assert image == b"\x89PNG"
        assert session.calls == [{
            "url": "https://img.omdbapi.com/",
            "params": [("i", "tt0113277"), ("apikey", "test-key"), ("h", "600")],
        }]

    @pytest.mark.asyncio
    async def test_fetch_poster_not_found(self, settings, metrics):
        session = StubSession(StubResponse(status=404))
        service = make_service(session, settings, metrics)

        with pytest.raises(OMDbAPIError) as exc_info:
            await service.fetch_poster("tt0000000")

        assert exc_info.value.status == 404
