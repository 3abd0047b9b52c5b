"""
Enumerations of the OMDb API query vocabulary.

Every member carries the exact value sent over the wire, so ``str(member)``
can be dropped straight into a query string.
"""

from enum import Enum
from typing import Optional, Type, TypeVar

E = TypeVar("E", bound="EnumerableStringParser")


class EnumerableStringParser(str, Enum):
    """Base for string enumerations parsed back from their wire value."""

    @classmethod
    def parse_string(cls: Type[E], value: str) -> Optional[E]:
        """
        Find the member whose wire value is exactly ``value``.

        Args:
            value: Raw string, usually taken from a request

        Returns:
            The matching member, or None when nothing matches
        """
        for entry in cls:
            if entry.to_parse_string() == value:
                return entry
        return None

    def to_parse_string(self) -> str:
        return self.value

    def __str__(self) -> str:
        return self.value


class OMDbAPIParams(EnumerableStringParser):
    """Query parameters understood by the OMDb API."""

    SEARCH = "s"
    TITLE = "t"
    IMDB_ID = "i"
    TYPE = "type"
    PLOT = "plot"
    YEAR = "y"
    PAGE = "page"
    RETURN = "r"
    VERSION = "v"
    API_KEY = "apikey"


class OMDbAPITypeParamValues(EnumerableStringParser):
    """Values of the ``type`` param."""

    MOVIE = "movie"
    SERIES = "series"
    EPISODE = "episode"


class OMDbAPIPlotParamValues(EnumerableStringParser):
    """Values of the ``plot`` param."""

    SHORT = "short"
    FULL = "full"


class OMDbAPIReturnParamValues(EnumerableStringParser):
    """Values of the ``r`` param (response data type)."""

    JSON = "json"
    XML = "xml"
