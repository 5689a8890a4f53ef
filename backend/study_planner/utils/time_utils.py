"""
Date and Time Helpers

Clock-of-day arithmetic on "HH:MM" strings, weekday conversion, and
timezone normalization shared by the models and the scheduling passes.

Usage:
    from study_planner.utils.time_utils import parse_hhmm, format_hhmm

    minutes = parse_hhmm("09:30")  # 570
    label = format_hhmm(minutes + 45)  # "10:15"
"""

import re
from datetime import date, datetime, timedelta, timezone
from typing import Iterator, Optional

MINUTES_PER_DAY = 24 * 60

_HHMM_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


def parse_hhmm(value: str) -> int:
    """
    Convert an "HH:MM" (24h) string to minutes since midnight.

    Args:
        value: Time string such as "09:00" or "23:45"

    Returns:
        Minutes since midnight

    Raises:
        ValueError: If the string is not a valid 24h time
    """
    match = _HHMM_PATTERN.match(value.strip()) if value else None
    if not match:
        raise ValueError(f"Invalid HH:MM time: {value!r}")
    return int(match.group(1)) * 60 + int(match.group(2))


def format_hhmm(minutes: int) -> str:
    """Format minutes since midnight as "HH:MM", wrapping past midnight."""
    minutes = int(minutes) % MINUTES_PER_DAY
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def minutes_between(start_time: str, end_time: str) -> int:
    """Length in minutes of the span from start_time to end_time."""
    return parse_hhmm(end_time) - parse_hhmm(start_time)


def day_of_week(day: date) -> int:
    """Weekday index with 0=Sunday through 6=Saturday."""
    return (day.weekday() + 1) % 7


def day_name(day: date) -> str:
    """Full English weekday name."""
    return day.strftime("%A")


def iter_days(start: date, end: date) -> Iterator[date]:
    """Yield every calendar day in the inclusive range [start, end]."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def week_key(day: date) -> tuple[int, int]:
    """ISO (year, week) used to group sessions by calendar week."""
    iso = day.isocalendar()
    return iso[0], iso[1]


def ensure_timezone_aware(dt: Optional[datetime]) -> Optional[datetime]:
    """Return dt as an aware datetime, assuming UTC for naive values."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def days_until(target: datetime, reference: datetime) -> float:
    """Fractional days from reference to target (negative when past)."""
    delta = ensure_timezone_aware(target) - ensure_timezone_aware(reference)
    return delta.total_seconds() / 86400
