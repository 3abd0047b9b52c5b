"""
Search router: generic searches in the OMDb API.

Provides REST API endpoints for:
- Searching titles by name (GET /search)
- Searching with the type already set (GET /search/{type})
- Searching with type and year already set (GET /search/{type}/{year})

OMDb pages results ten at a time; ``page`` selects which ten are returned.
"""

from typing import Dict

import structlog
from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse

from backend.src.dependencies import get_omdb_service
from backend.src.exceptions import IllegalParamValueError
from backend.src.models.omdb import ErrorResponse, OMDbSearch, SearchResponse
from backend.src.rate_limit import limiter, search_rate_limit
from backend.src.routers.base import (
    ROUTE_PREFIX,
    response_bad_request,
    response_not_found,
    response_ok,
    response_unprocessable_entity,
)
from backend.src.services.omdb_service import OMDbAPIService
from backend.src.utils.enumerable import OMDbAPIParams

logger = structlog.get_logger(__name__)

MISSING_FILTER_ERROR = 'Missing param "filter"! Unable to make a search!'
NO_RESULTS_ERROR = "No results for the given filter were found!"

search_router = APIRouter(
    prefix=ROUTE_PREFIX + "search",
    tags=["Search"],
    responses={
        400: {"model": ErrorResponse, "description": "Missing filter"},
        404: {"model": ErrorResponse, "description": "No results"},
        422: {"model": ErrorResponse, "description": "Illegal param value"},
        429: {"model": ErrorResponse, "description": "Rate limit exceeded"},
        502: {"model": ErrorResponse, "description": "OMDb API unreachable"},
    }
)


# ============================================================================
# SEARCH ENDPOINTS
# ============================================================================


@search_router.get(
    "/{search_type}/{year}",
    response_model=SearchResponse,
    summary="Search by type and year",
)
@limiter.limit(search_rate_limit)
async def search_type_with_year(
    request: Request,
    search_type: str,
    year: str,
    search_filter: str = Query("", alias="filter"),
    page: str = Query(""),
    service: OMDbAPIService = Depends(get_omdb_service),
) -> JSONResponse:
    """Alias of ``GET /search`` with type and year already set."""
    return await run_search(service, search_filter, search_type, year, page)


@search_router.get(
    "/{search_type}",
    response_model=SearchResponse,
    summary="Search by type",
)
@limiter.limit(search_rate_limit)
async def search_type(
    request: Request,
    search_type: str,
    search_filter: str = Query("", alias="filter"),
    year: str = Query(""),
    page: str = Query(""),
    service: OMDbAPIService = Depends(get_omdb_service),
) -> JSONResponse:
    """Alias of ``GET /search`` with the type already set."""
    return await run_search(service, search_filter, search_type, year, page)


@search_router.get(
    "",
    response_model=SearchResponse,
    summary="Search titles",
    description="""
    Search OMDb titles whose name matches ``filter``.

    **Query Parameters:**
    - filter: Title name or word sequence (required)
    - type: movie, series or episode
    - year: Release year, from 1 up to the current year
    - page: OMDb result page, 1 or greater

    **Error Responses:**
    - 400: ``filter`` is missing
    - 404: OMDb found nothing
    - 422: ``type``, ``year`` or ``page`` has an illegal value
    - 502: OMDb API could not be reached
    """,
)
@limiter.limit(search_rate_limit)
async def search(
    request: Request,
    search_filter: str = Query("", alias="filter"),
    search_type: str = Query("", alias="type"),
    year: str = Query(""),
    page: str = Query(""),
    service: OMDbAPIService = Depends(get_omdb_service),
) -> JSONResponse:
    """Base search; the other routes fall back to it."""
    return await run_search(service, search_filter, search_type, year, page)


# ============================================================================
# SEARCH LOGIC
# ============================================================================


async def run_search(
    service: OMDbAPIService,
    search_filter: str,
    search_type: str,
    year: str,
    page: str,
) -> JSONResponse:
    """
    Search OMDb with every given param.

    Args:
        service: OMDb API service
        search_filter: Required filter (title name)
        search_type: Optional type, empty when not set
        year: Optional year, empty when not set
        page: Optional page index, empty when not set

    Returns:
        ``{"search": [...]}`` on success, ``{"error": ...}`` otherwise

    Raises:
        OMDbAPIError: If the OMDb API is unreachable (mapped to 502)
    """
    if not search_filter:
        return response_bad_request(MISSING_FILTER_ERROR)

    additional_params: Dict[OMDbAPIParams, str] = {}

    if search_type:
        additional_params[OMDbAPIParams.TYPE] = search_type

    if year:
        additional_params[OMDbAPIParams.YEAR] = year

    if page:
        additional_params[OMDbAPIParams.PAGE] = page

    try:
        params = service.make_params_for_search(search_filter).add_all(additional_params)
    except IllegalParamValueError as e:
        logger.info("search_rejected", param=e.param, value=e.value)
        return response_unprocessable_entity(str(e))

    result: OMDbSearch = await service.search(params)

    if result.has_error():
        logger.info("search_without_results", filter=search_filter, omdb_error=result.error)
        return response_not_found(NO_RESULTS_ERROR)

    total_results = result.total_results_number()

    if total_results > OMDbSearch.MAX_RESULTS_IN_SEARCH:
        logger.info(
            "search_paginated",
            filter=search_filter,
            total_results=total_results,
            pages=result.total_pages(),
            page=page or "1",
        )

    return response_ok("search", result.parsed())
