"""
Pydantic models for OMDb API payloads and the search responses of this API.

OMDb answers with capitalised keys and stringly-typed values; the aliases
below bind them, and ``OMDbSearch.parsed`` turns each search item into the
snake_case shape served to clients.
"""

import math
from typing import Any, ClassVar, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from backend.src.utils.integers import parse_int

POSTER_NOT_AVAILABLE = "N/A"


def _as_int(value: Any) -> int:
    """Integer value of an OMDb string field, 0 when it is not a plain integer."""
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        return parse_int(value) or 0
    return 0


class SearchItem(BaseModel):
    """One entry of a parsed search result."""

    title: Optional[str] = Field(None, description="Title of the movie, series or episode")
    year: int = Field(0, description="Release year, 0 when OMDb gives a range or no year")
    imdb_id: Optional[str] = Field(None, description="IMDb identifier, e.g. tt0133093")
    type: Optional[str] = Field(None, description="movie, series or episode")
    poster: Optional[str] = Field(None, description="Poster URL, null when not available")


class OMDbSearch(BaseModel):
    """Body of an OMDb search (``s``) response."""

    RESPONSE_TRUE_VALUE: ClassVar[str] = "True"
    RESPONSE_FALSE_VALUE: ClassVar[str] = "False"
    MAX_RESULTS_IN_SEARCH: ClassVar[int] = 10

    model_config = ConfigDict(populate_by_name=True, extra="ignore", coerce_numbers_to_str=True)

    response: str = Field("False", alias="Response")
    total_results: Optional[str] = Field(None, alias="totalResults")
    search: Optional[List[Dict[str, Any]]] = Field(None, alias="Search")
    error: Optional[str] = Field(None, alias="Error")

    # =========================================================================
    # Accessors
    # =========================================================================

    def has_result(self) -> bool:
        return self.response == self.RESPONSE_TRUE_VALUE

    def has_error(self) -> bool:
        return self.response == self.RESPONSE_FALSE_VALUE

    def total_results_number(self) -> int:
        if self.total_results is None:
            return 0
        return _as_int(self.total_results)

    def total_pages(self) -> int:
        """Number of OMDb pages needed to list every result."""
        return math.ceil(self.total_results_number() / self.MAX_RESULTS_IN_SEARCH)

    # =========================================================================
    # Parser
    # =========================================================================

    def parsed(self) -> List[SearchItem]:
        """Search items in the shape served by ``GET /search``."""
        items = []

        for search_item in self.search or []:
            poster = search_item.get("Poster")

            items.append(SearchItem(
                title=search_item.get("Title"),
                year=_as_int(search_item.get("Year")),
                imdb_id=search_item.get("imdbID"),
                type=search_item.get("Type"),
                poster=None if poster == POSTER_NOT_AVAILABLE else poster,
            ))

        return items


class SearchResponse(BaseModel):
    """Success body of ``GET /search``."""

    search: List[SearchItem]


class ErrorResponse(BaseModel):
    """Error body shared by every route of this API."""

    error: str = Field(..., min_length=1)
