"""
Domain exceptions raised by the OMDb integration.

The HTTP layer maps them onto status codes:
- IllegalParamValueError -> 422 Unprocessable Entity
- OMDbAPIError -> 502 Bad Gateway
"""

from typing import Optional


class IllegalParamStateError(RuntimeError):
    """A required OMDb param was changed after the builder was created."""


class IllegalParamValueError(ValueError):
    """An OMDb param received a value the API does not accept."""

    def __init__(self, param: str, value: str):
        self.param = param
        self.value = value
        super().__init__(
            f'Given param "{param}" value "{value}" is not a legal type!'
        )


class OMDbAPIError(Exception):
    """
    The OMDb API could not be reached or answered with an HTTP error.

    Attributes:
        status: Upstream HTTP status, when the API answered at all
    """

    def __init__(self, message: str, status: Optional[int] = None):
        self.status = status
        super().__init__(message)
