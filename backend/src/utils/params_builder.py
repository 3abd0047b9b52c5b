"""
Query params builder for OMDb API requests.

Every OMDb request has exactly one required param - a search phrase (``s``),
a title (``t``) or an IMDb ID (``i``) - set when the builder is created,
followed by the response format and API version. Optional params are
validated as they are added, so an invalid value never reaches the API.

Example:
    >>> builder = OMDbAPIParamsBuilder.build_for_search("matrix", "key")
    >>> builder = builder.add(OMDbAPIParams.TYPE, "movie").add(OMDbAPIParams.PAGE, "2")
    >>> builder.to_query()
    [('s', 'matrix'), ('r', 'json'), ('v', '1'), ('apikey', 'key'), ('type', 'movie'), ('page', '2')]
"""

from datetime import datetime
from typing import Callable, Dict, List, Mapping, Optional, Tuple

from backend.src.exceptions import IllegalParamStateError, IllegalParamValueError
from backend.src.utils.enumerable import (
    OMDbAPIParams,
    OMDbAPIPlotParamValues,
    OMDbAPIReturnParamValues,
    OMDbAPITypeParamValues,
)
from backend.src.utils.integers import parse_int

API_VERSION = "1"

REQUIRED_PARAMS = frozenset({
    OMDbAPIParams.SEARCH,
    OMDbAPIParams.TITLE,
    OMDbAPIParams.IMDB_ID,
})


class OMDbAPIParamsBuilder:
    """Ordered, validated set of OMDb query params."""

    # =========================================================================
    # Static Constructors
    # =========================================================================

    @classmethod
    def build_for_search(
        cls, required_search_param: str, access_api_key: Optional[str] = None
    ) -> "OMDbAPIParamsBuilder":
        """Start the params of a search (``s``) request."""
        return cls(OMDbAPIParams.SEARCH, required_search_param, access_api_key)

    @classmethod
    def build_for_title(
        cls, required_title_param: str, access_api_key: Optional[str] = None
    ) -> "OMDbAPIParamsBuilder":
        """Start the params of a title (``t``) request."""
        return cls(OMDbAPIParams.TITLE, required_title_param, access_api_key)

    @classmethod
    def build_for_imdb_id(
        cls, required_imdb_id_param: str, access_api_key: Optional[str] = None
    ) -> "OMDbAPIParamsBuilder":
        """Start the params of an IMDb ID (``i``) request."""
        return cls(OMDbAPIParams.IMDB_ID, required_imdb_id_param, access_api_key)

    def __init__(
        self,
        required_param_name: OMDbAPIParams,
        required_param_value: str,
        required_api_key: Optional[str] = None,
    ):
        self._query: Dict[OMDbAPIParams, str] = {}

        self._query[required_param_name] = required_param_value
        self._query[OMDbAPIParams.RETURN] = str(OMDbAPIReturnParamValues.JSON)
        self._query[OMDbAPIParams.VERSION] = API_VERSION

        if required_api_key is not None:
            self._query[OMDbAPIParams.API_KEY] = required_api_key

    # =========================================================================
    # Methods
    # =========================================================================

    def add(self, param_name: OMDbAPIParams, param_value: str) -> "OMDbAPIParamsBuilder":
        """
        Add or replace an optional param.

        An existing param keeps its position in the query; a new one is
        appended.

        Args:
            param_name: Any param except the required ones
            param_value: Raw value, validated for type, plot, r, y and page

        Returns:
            The builder itself, for chaining

        Raises:
            IllegalParamStateError: If ``param_name`` is a required param
            IllegalParamValueError: If the value is not legal for the param
        """
        if self.is_required_param(param_name):
            raise IllegalParamStateError("Required params are set on instantiation!")

        validator = self._validators().get(param_name)

        if validator is not None and not validator(param_value):
            raise IllegalParamValueError(str(param_name), param_value)

        self._query[param_name] = param_value

        return self

    def add_all(self, params: Mapping[OMDbAPIParams, str]) -> "OMDbAPIParamsBuilder":
        """Add every entry of ``params``, in iteration order."""
        for param_name, param_value in params.items():
            self.add(param_name, param_value)

        return self

    def get(self, param_name: OMDbAPIParams) -> Optional[str]:
        return self._query.get(param_name)

    # =========================================================================
    # Validating Methods
    # =========================================================================

    @staticmethod
    def is_required_param(param: OMDbAPIParams) -> bool:
        return param in REQUIRED_PARAMS

    def _validators(self) -> Dict[OMDbAPIParams, Callable[[str], bool]]:
        return {
            OMDbAPIParams.TYPE: self.is_valid_type_param_value,
            OMDbAPIParams.PLOT: self.is_valid_plot_param_value,
            OMDbAPIParams.RETURN: self.is_valid_return_param_value,
            OMDbAPIParams.YEAR: self.is_valid_year_param_value,
            OMDbAPIParams.PAGE: self.is_valid_page_param_value,
        }

    @staticmethod
    def is_valid_type_param_value(value: str) -> bool:
        return OMDbAPITypeParamValues.parse_string(value) is not None

    @staticmethod
    def is_valid_plot_param_value(value: str) -> bool:
        return OMDbAPIPlotParamValues.parse_string(value) is not None

    @staticmethod
    def is_valid_return_param_value(value: str) -> bool:
        return OMDbAPIReturnParamValues.parse_string(value) is not None

    @staticmethod
    def is_valid_year_param_value(value: str) -> bool:
        year = parse_int(value)
        return year is not None and 1 <= year <= datetime.now().year

    @staticmethod
    def is_valid_page_param_value(value: str) -> bool:
        page = parse_int(value)
        return page is not None and page >= 1

    # =========================================================================
    # Converting Methods
    # =========================================================================

    def to_query(self) -> List[Tuple[str, str]]:
        """Params as ordered ``(name, value)`` pairs, ready for aiohttp."""
        return [(str(name), value) for name, value in self._query.items()]

    def to_dict(self) -> Dict[str, str]:
        return dict(self.to_query())

    # =========================================================================
    # Override Methods
    # =========================================================================

    def __eq__(self, other: object) -> bool:
        if isinstance(other, OMDbAPIParamsBuilder):
            return self.to_query() == other.to_query()
        return NotImplemented

    def __hash__(self) -> int:
        return hash(tuple(self.to_query()))

    def __repr__(self) -> str:
        return f"OMDbAPIParamsBuilder({self.to_query()!r})"
