"""
Date math used by the analytics engine.

All functions are pure: the reference time is always passed in, never read
from the clock, so week boundaries and deadlines are reproducible in tests.
Weeks start on Monday (ISO weeks).
"""

import math
from datetime import date, datetime, time, timedelta, timezone
from typing import Iterable, List

ONE_DAY = timedelta(days=1)
DAYS_IN_WEEK = 7

MONTH_ABBREVIATIONS = [
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
]


def round_half_up(value: float) -> int:
    """Round .5 upwards like the mobile client does (Python's round() is banker's)."""
    return int(math.floor(value + 0.5))


def align_to(value: datetime, reference: datetime) -> datetime:
    """Express ``value`` on the same clock as ``reference`` so they compare cleanly.

    Naive timestamps are read as UTC when mixed with aware ones.
    """
    if reference.tzinfo is None:
        if value.tzinfo is None:
            return value
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc).astimezone(reference.tzinfo)
    return value.astimezone(reference.tzinfo)


def start_of_day(value: datetime) -> datetime:
    return value.replace(hour=0, minute=0, second=0, microsecond=0)


def at_midnight(day: date, reference: datetime) -> datetime:
    """Midnight of ``day`` in the reference's timezone."""
    return datetime.combine(day, time.min, tzinfo=reference.tzinfo)


def week_start(value: datetime) -> datetime:
    """Monday 00:00 of the week containing ``value``.

    weekday() is Monday-based, so a Sunday rolls back six days.
    """
    return start_of_day(value) - timedelta(days=value.weekday())


def previous_week_start(value: datetime) -> datetime:
    return week_start(value) - timedelta(days=DAYS_IN_WEEK)


def days_between(later: datetime, earlier: datetime) -> int:
    """Whole days from ``earlier`` to ``later``, rounded up (signed)."""
    return math.ceil((later - earlier) / ONE_DAY)


def days_remaining(target_date: date, now: datetime) -> int:
    """Signed days until the target date; negative once the deadline has passed."""
    return days_between(at_midnight(target_date, now), now)


def display_days_remaining(target_date: date, now: datetime) -> int:
    return max(0, days_remaining(target_date, now))


def days_elapsed(start_date: date, now: datetime) -> int:
    return days_between(now, at_midnight(start_date, now))


def total_planned_days(start_date: date, target_date: date) -> int:
    """Length of the goal window in days, never less than one."""
    return max(1, (target_date - start_date).days)


def bucket_by_day_of_week(
    timestamps: Iterable[datetime], week_start_at: datetime
) -> List[int]:
    """Count timestamps per weekday of the week beginning at ``week_start_at``.

    Index 0 is Monday. Timestamps outside the week are ignored.
    """
    buckets = [0] * DAYS_IN_WEEK
    week_end = week_start_at + timedelta(days=DAYS_IN_WEEK)
    for ts in timestamps:
        moment = align_to(ts, week_start_at)
        if week_start_at <= moment < week_end:
            buckets[(moment - week_start_at) // ONE_DAY] += 1
    return buckets


def week_range_label(week_start_at: datetime) -> str:
    """``"Oct 13 - Oct 19"`` for the seven days starting at ``week_start_at``."""
    week_end = week_start_at + timedelta(days=DAYS_IN_WEEK - 1)

    def _fmt(day: datetime) -> str:
        return f"{MONTH_ABBREVIATIONS[day.month - 1]} {day.day}"

    return f"{_fmt(week_start_at)} - {_fmt(week_end)}"


def format_minutes(minutes: int) -> str:
    hours, mins = divmod(max(0, int(minutes)), 60)
    if hours == 0:
        return f"{mins}m"
    if mins == 0:
        return f"{hours}h"
    return f"{hours}h {mins}m"
