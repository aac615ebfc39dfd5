"""
Probe interval parsing.

Intervals are given either as a number of milliseconds or as a human readable
duration such as "500ms", "10s", "1.5h" or "2 days". The literal "none" means
the probe has no interval and is flushed on every update.
"""

import re
from typing import Any, Optional

from ..validation import InvalidIntervalError

NO_INTERVAL = "none"

_SECOND = 1000
_MINUTE = _SECOND * 60
_HOUR = _MINUTE * 60
_DAY = _HOUR * 24
_WEEK = _DAY * 7
_YEAR = _DAY * 365.25

_UNITS = {
    "ms": 1, "msec": 1, "msecs": 1, "millisecond": 1, "milliseconds": 1,
    "s": _SECOND, "sec": _SECOND, "secs": _SECOND, "second": _SECOND, "seconds": _SECOND,
    "m": _MINUTE, "min": _MINUTE, "mins": _MINUTE, "minute": _MINUTE, "minutes": _MINUTE,
    "h": _HOUR, "hr": _HOUR, "hrs": _HOUR, "hour": _HOUR, "hours": _HOUR,
    "d": _DAY, "day": _DAY, "days": _DAY,
    "w": _WEEK, "week": _WEEK, "weeks": _WEEK,
    "y": _YEAR, "yr": _YEAR, "yrs": _YEAR, "year": _YEAR, "years": _YEAR,
}

_DURATION_RE = re.compile(r"^(?P<value>-?(?:\d+)?\.?\d+) *(?P<unit>[a-z]+)?$", re.IGNORECASE)

# longer strings are not durations, and would only slow the regex down
_MAX_DURATION_LENGTH = 100


def parse_duration(text: str) -> Optional[float]:
    """
    Convert a duration string to milliseconds.

    Returns:
        The duration in milliseconds, or None when ``text`` is not a duration
    """
    text = text.strip()
    if not text or len(text) > _MAX_DURATION_LENGTH:
        return None

    match = _DURATION_RE.match(text)
    if not match:
        return None

    unit = (match.group("unit") or "ms").lower()
    if unit not in _UNITS:
        return None

    return float(match.group("value")) * _UNITS[unit]


def parse_interval(value: Any, probe_name: Optional[str] = None) -> Optional[int]:
    """
    Normalize a probe interval to milliseconds.

    Args:
        value: ``None``, the "none" marker, a non-negative integer number of
            milliseconds (0 means no interval), or a duration string
        probe_name: Probe the interval belongs to, for error reporting

    Returns:
        None when the probe has no interval, else a positive number of
        milliseconds

    Raises:
        InvalidIntervalError: If the value is not a valid interval. Durations
            that are zero, negative or not a whole number of milliseconds are
            rejected rather than rounded.
    """
    if value is None:
        return None

    if isinstance(value, bool):
        raise InvalidIntervalError(probe_name, value)

    if isinstance(value, int):
        if value < 0:
            raise InvalidIntervalError(probe_name, value)
        return value or None

    if isinstance(value, str):
        if value.strip().lower() == NO_INTERVAL:
            return None

        milliseconds = parse_duration(value)
        if milliseconds is None or milliseconds <= 0 or not float(milliseconds).is_integer():
            raise InvalidIntervalError(probe_name, value)
        return int(milliseconds)

    raise InvalidIntervalError(probe_name, value)


def is_no_interval(value: Any) -> bool:
    """True when ``value`` explicitly or implicitly means "no interval"."""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip().lower() == NO_INTERVAL
    return isinstance(value, int) and not isinstance(value, bool) and value == 0
