"""Pydantic models for OMDb payloads and API responses."""

from backend.src.models.omdb import ErrorResponse, OMDbSearch, SearchItem, SearchResponse

__all__ = ["ErrorResponse", "OMDbSearch", "SearchItem", "SearchResponse"]
