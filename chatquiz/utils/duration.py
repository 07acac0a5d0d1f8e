"""
Duration Formatting
Human readable durations rounded to their largest unit
"""
import math
from typing import List, Tuple

# Unit lengths in milliseconds. A year is 365.25 days and a month a twelfth of it.
DURATION_UNITS: List[Tuple[str, int]] = [
    ("year", 31557600000),
    ("month", 2629800000),
    ("week", 604800000),
    ("day", 86400000),
    ("hour", 3600000),
    ("minute", 60000),
    ("second", 1000),
]


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _format(value: int, unit: str) -> str:
    return f"{value} {unit}" if value == 1 else f"{value} {unit}s"


def humanize_duration(duration_ms: float) -> str:
    """
    Convert a duration in milliseconds to a consistent human readable string.

    Rounding rules:
    - Only the largest unit the duration reaches is kept ("3 hours", never
      "3 hours, 5 minutes").
    - The value in that unit is rounded half up.
    - When rounding reaches the next larger unit the result is carried into
      it (59.6 minutes is "1 hour", not "60 minutes").
    - Anything below one second is expressed in seconds ("0 seconds",
      "1 second").

    Two durations are considered the same choice iff this function returns
    the same string for both.
    """
    duration_ms = abs(duration_ms)

    index = next(
        (i for i, (_, size) in enumerate(DURATION_UNITS) if duration_ms >= size),
        len(DURATION_UNITS) - 1
    )
    unit, size = DURATION_UNITS[index]
    value = _round_half_up(duration_ms / size)

    if index > 0:
        larger_unit, larger_size = DURATION_UNITS[index - 1]
        if value * size >= larger_size:
            return _format(_round_half_up(duration_ms / larger_size), larger_unit)

    return _format(value, unit)
