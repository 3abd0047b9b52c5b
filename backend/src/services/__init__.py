"""Business logic services."""

from backend.src.services.omdb_service import OMDbAPIService

__all__ = ["OMDbAPIService"]
