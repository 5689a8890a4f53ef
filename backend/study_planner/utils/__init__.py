"""Shared utilities for date and clock-of-day handling."""

from study_planner.utils.time_utils import (
    MINUTES_PER_DAY,
    day_name,
    day_of_week,
    days_until,
    ensure_timezone_aware,
    format_hhmm,
    iter_days,
    minutes_between,
    parse_hhmm,
    utc_now,
    week_key,
)

__all__ = [
    "MINUTES_PER_DAY",
    "day_name",
    "day_of_week",
    "days_until",
    "ensure_timezone_aware",
    "format_hhmm",
    "iter_days",
    "minutes_between",
    "parse_hhmm",
    "utc_now",
    "week_key",
]
