"""Clock and calendar helpers for the in-story time of day."""

from __future__ import annotations

DAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")
MINUTES_PER_HOUR = 60
HOURS_PER_DAY = 24
DEFAULT_START_MINUTES = 8 * MINUTES_PER_HOUR
_OUT_OF_RANGE_DAY = "Weekend"


def normalize_minutes(value: object) -> int:
    try:
        minutes = int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0
    return max(minutes, 0)


def format_clock(time_minutes: int) -> str:
    """Return ``HH:MM`` for a minute counter, wrapping hours at midnight."""
    minutes = normalize_minutes(time_minutes)
    hours = (minutes // MINUTES_PER_HOUR) % HOURS_PER_DAY
    return f"{hours:02d}:{minutes % MINUTES_PER_HOUR:02d}"


def day_name(day_index: int) -> str:
    if isinstance(day_index, int) and 0 <= day_index < len(DAYS):
        return DAYS[day_index]
    return _OUT_OF_RANGE_DAY


def advance_minutes(time_minutes: int, delta: int) -> int:
    return max(normalize_minutes(time_minutes) + int(delta), 0)
