"""
Wall-clock helpers.

Route times travel through the optimizer as integer minutes since midnight of the
planning day. The running clock is allowed to pass 1440; it only wraps when it is
formatted back into an "HH:MM" string.
"""
import math
import re

MINUTES_PER_DAY = 24 * 60

_HHMM_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})$")


def validate_hhmm(value: str) -> str:
    """
    Check that a string is a 24-hour "HH:MM" time.

    Args:
        value: Candidate time string (e.g. "08:00", "8:00", "17:30")

    Returns:
        The value unchanged

    Raises:
        ValueError: If the string is not a valid time of day
    """
    match = _HHMM_PATTERN.match(value.strip()) if isinstance(value, str) else None
    if not match:
        raise ValueError(f"Invalid time '{value}', expected HH:MM")

    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        raise ValueError(f"Invalid time '{value}', expected HH:MM")
    return value.strip()


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up (2.5 -> 3, -2.5 -> -2)."""
    return int(math.floor(value + 0.5))


def seconds_to_minutes(seconds: float) -> int:
    """Whole minutes for a provider duration in seconds, ties rounded up."""
    return round_half_up(seconds / 60)


def time_to_minutes(time: str) -> int:
    """Convert "HH:MM" to minutes since midnight."""
    hours, minutes = time.split(":")
    return int(hours) * 60 + int(minutes)


def minutes_to_time(minutes: float) -> str:
    """Convert minutes since midnight to "HH:MM", wrapping at 24h."""
    total = round_half_up(minutes)
    hours = (total // 60) % 24
    return f"{hours:02d}:{total % 60:02d}"
