"""
Value parsing helpers for loosely typed upstream fields.

The feeds mix numbers and string-encoded numbers, and one of them varies
key casing between deployments. These helpers never raise; they fall back
to the caller's default.
"""

import math
import re
from typing import Any, Mapping, Optional

from ..constants import AVAILABLE_UNKNOWN
from ..models import is_valid_availability

_LEADING_INT = re.compile(r'^\s*([+-]?\d+)')


def key_casings(key: str):
    """Candidate spellings of a field name, in lookup order."""
    candidates = []
    for candidate in (key, key.lower(), key.upper(), key.capitalize()):
        if candidate not in candidates:
            candidates.append(candidate)
    return candidates


def get_field(record: Mapping[str, Any], key: str, default: Any = None) -> Any:
    """
    Look up a field tolerating key casing.

    Tries the exact key, then lowercase, uppercase and capitalized forms.
    The first candidate holding a non-empty value wins.

    Examples:
        >>> get_field({'Id': 'A1'}, 'ID')
        'A1'
    """
    if not isinstance(record, Mapping):
        return default
    for candidate in key_casings(key):
        value = record.get(candidate)
        if value is not None and value != '':
            return value
    return default


def parse_int(value: Any, default: int) -> int:
    """
    Parse an integer the way the feeds encode them.

    Accepts ints, finite floats and strings with a leading integer
    ("42", " 42 ", "42.0"). Anything else returns default.
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else default
    if isinstance(value, str):
        match = _LEADING_INT.match(value)
        if match:
            return int(match.group(1))
    return default


def parse_float(value: Any, default: float = 0.0) -> float:
    """Parse a float from a number or numeric string; default on failure."""
    if value is None or isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return number if math.isfinite(number) else default


def normalize_availability(value: Any) -> int:
    """Parse availablecar; unparsable or out-of-range values become -9."""
    count = parse_int(value, AVAILABLE_UNKNOWN)
    if not is_valid_availability(count):
        return AVAILABLE_UNKNOWN
    return count


def normalize_capacity(value: Any) -> int:
    """Parse totalcar; unparsable or negative values become 0."""
    count = parse_int(value, 0)
    return count if count >= 0 else 0


def as_text(value: Optional[Any]) -> str:
    """Display string for an optional upstream value."""
    if value is None:
        return ''
    return str(value).strip()
