"""Parsing of human duration strings such as ``"2h"`` or ``"30 minutes"``."""

import re
from datetime import timedelta

_DURATION_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*([a-z]*)\s*$", re.IGNORECASE)

_UNIT_SECONDS = {
    "ms": 0.001,
    "msec": 0.001,
    "msecs": 0.001,
    "millisecond": 0.001,
    "milliseconds": 0.001,
    "": 1,
    "s": 1,
    "sec": 1,
    "secs": 1,
    "second": 1,
    "seconds": 1,
    "m": 60,
    "min": 60,
    "mins": 60,
    "minute": 60,
    "minutes": 60,
    "h": 3600,
    "hr": 3600,
    "hrs": 3600,
    "hour": 3600,
    "hours": 3600,
    "d": 86400,
    "day": 86400,
    "days": 86400,
    "w": 604800,
    "week": 604800,
    "weeks": 604800,
}


def parse_duration(value: str | int | float) -> timedelta:
    """
    Parse a duration into a timedelta.

    Numbers and unit-less strings are seconds.

    Args:
        value: e.g. ``"2h"``, ``"90m"``, ``"1.5 days"``, ``3600``

    Returns:
        The parsed duration

    Raises:
        ValueError: If the value is not a recognised duration
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid duration: {value!r}")
    if isinstance(value, (int, float)):
        return timedelta(seconds=value)

    match = _DURATION_RE.match(value or "")
    if not match:
        raise ValueError(f"Invalid duration: {value!r}")

    amount, unit = match.groups()
    factor = _UNIT_SECONDS.get(unit.lower())
    if factor is None:
        raise ValueError(f"Unknown duration unit {unit!r} in {value!r}")

    return timedelta(seconds=float(amount) * factor)
