"""
Coercion of caller-supplied pagination options.

Every function here is total: malformed input degrades to a default instead
of raising. The coercion table:

    option      positive   zero / negative    unparsable       absent
    ---------   --------   ----------------   --------------   -------------
    limit       value      DEFAULT_LIMIT      DEFAULT_LIMIT    DEFAULT_LIMIT
    limit*      value      0 (unbounded)      0 (unbounded)    DEFAULT_LIMIT
    page        value      1                  1                1
    offset      value      0                  0                0

    * legacy zero fallback, opt-in via ``legacy_limit_fallback``
"""

import math
import re
from typing import Any, Optional

DEFAULT_LIMIT = 10
DEFAULT_PAGE = 1
DEFAULT_OFFSET = 0
UNBOUNDED_LIMIT = 0

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")
_FALSE_STRINGS = ("false", "0", "no", "off")


def parse_int(value: Any) -> Optional[int]:
    """
    Leniently parse an integer.

    Ints pass through, finite floats truncate toward zero, and strings
    parse their leading sign and digits ("12abc" -> 12). Booleans and
    everything else do not parse.

    Args:
        value: Raw option value

    Returns:
        Parsed integer, or None if the value does not parse
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            return None
        return int(value)
    if isinstance(value, (str, bytes)):
        text = value.decode("utf-8", errors="ignore") if isinstance(value, bytes) else value
        match = _LEADING_INT.match(text)
        if match is None:
            return None
        return int(match.group(1))
    return None


def coerce_limit(value: Any, legacy_zero_fallback: bool = False) -> int:
    """
    Coerce the page size.

    An absent (None) limit is DEFAULT_LIMIT in both modes; only a supplied
    zero, negative or unparsable value is unbounded in legacy mode.

    Args:
        value: Raw ``limit`` option
        legacy_zero_fallback: Fall back to an unbounded (0) limit instead of
            DEFAULT_LIMIT for supplied values

    Returns:
        Positive page size, or UNBOUNDED_LIMIT in legacy mode
    """
    if value is None:
        return DEFAULT_LIMIT
    parsed = parse_int(value)
    if parsed is not None and parsed > 0:
        return parsed
    return UNBOUNDED_LIMIT if legacy_zero_fallback else DEFAULT_LIMIT


def coerce_page(value: Any) -> int:
    """Coerce a 1-based page number; non-positive or unparsable gives 1."""
    parsed = parse_int(value)
    if parsed is None or parsed < 1:
        return DEFAULT_PAGE
    return parsed


def coerce_offset(value: Any) -> int:
    """Coerce a 0-based row offset; negative or unparsable gives 0."""
    parsed = parse_int(value)
    if parsed is None or parsed < 0:
        return DEFAULT_OFFSET
    return parsed


def coerce_flag(value: Any, default: bool) -> bool:
    """
    Coerce a boolean option.

    None keeps the default; the strings "false", "0", "no" and "off" are
    false, any other string is true.
    """
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        text = value.strip().lower()
        if not text:
            return default
        return text not in _FALSE_STRINGS
    return bool(value)
