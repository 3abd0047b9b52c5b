"""FastAPI backend of PMovies.

This package provides REST API endpoints for searching movies, series and
episodes through the OMDb API.
"""

__version__ = "0.0.1"
