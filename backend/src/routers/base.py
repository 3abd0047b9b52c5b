"""
Response helpers shared by every router.

Every body of this API is a JSON object with a single key: a custom key for
data, "message" for plain messages and "error" for failures.
"""

from typing import Any

from fastapi import status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

# Base prefix of all routes
ROUTE_PREFIX = "/"


# ============================================================================
# 2xx STATUS CODE
# ============================================================================


def response_ok(key: str, data: Any) -> JSONResponse:
    """200 with ``{key: data}``."""
    return response(key, data, status.HTTP_200_OK)


def response_message(message: Any) -> JSONResponse:
    """200 with ``{"message": message}``."""
    return response("message", message, status.HTTP_200_OK)


# ============================================================================
# 4xx STATUS CODE
# ============================================================================


def response_bad_request(error: Any) -> JSONResponse:
    """400 with ``{"error": error}``."""
    return response_error(error, status.HTTP_400_BAD_REQUEST)


def response_not_found(error: Any) -> JSONResponse:
    """404 with ``{"error": error}``."""
    return response_error(error, status.HTTP_404_NOT_FOUND)


def response_unprocessable_entity(error: Any) -> JSONResponse:
    """422 with ``{"error": error}``."""
    return response_error(error, status.HTTP_422_UNPROCESSABLE_ENTITY)


# ============================================================================
# HTTP STATUS CODE
# ============================================================================


def response_error(error: Any, status_code: int) -> JSONResponse:
    """``{"error": error}`` with any status, usually 4xx or 5xx."""
    return response("error", error, status_code)


def response(key: str, value: Any, status_code: int) -> JSONResponse:
    """
    JSON response holding only the given key and value.

    Args:
        key: Any JSON acceptable key
        value: Any JSON encodable value, pydantic models included
        status_code: HTTP status code

    Returns:
        Response with ``{key: value}`` as body
    """
    return JSONResponse(
        status_code=status_code,
        content={key: jsonable_encoder(value)}
    )
