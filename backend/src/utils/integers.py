"""
Strict integer parsing shared by param validation and OMDb payload binding.
"""

import re
from typing import Optional

# Optional sign followed by ASCII digits only
INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+")


def parse_int(value: str) -> Optional[int]:
    """Integer value of ``value``, or None unless the whole string is an integer.

    Surrounding whitespace and a trailing newline are rejected.
    """
    if not INTEGER_PATTERN.fullmatch(value):
        return None
    return int(value)
