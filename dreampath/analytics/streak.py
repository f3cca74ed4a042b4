from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional

from dreampath.analytics.temporal import align_to
from dreampath.models.task import Task


def completion_dates(
    tasks: Iterable[Task], reference: Optional[datetime] = None
) -> List[date]:
    """Distinct calendar dates with at least one completion, newest first.

    When ``reference`` is given, timestamps are moved onto its timezone before
    the time of day is dropped.
    """
    dates = set()
    for task in tasks:
        if not task.is_completed:
            continue
        moment = task.completed_at
        if reference is not None:
            moment = align_to(moment, reference)
        dates.add(moment.date())
    return sorted(dates, reverse=True)


def calculate_streak(
    tasks: Iterable[Task],
    now: Optional[datetime] = None,
    require_recent: bool = False,
) -> int:
    """
    Consecutive-day completion streak ending at the most recent completion date.

    The run is counted backwards from the newest completion date and stops at
    the first gap. By default the newest date does not have to be recent, so a
    run that ended weeks ago is still reported. With ``require_recent`` the
    newest completion must fall on ``now``'s date or the day before, otherwise
    the streak is 0.
    """
    dates = completion_dates(tasks, now)
    if not dates:
        return 0

    if require_recent:
        if now is None:
            raise ValueError("require_recent needs a reference time")
        if (now.date() - dates[0]).days > 1:
            return 0

    streak = 1
    for current, previous in zip(dates, dates[1:]):
        if current - previous == timedelta(days=1):
            streak += 1
        else:
            break
    return streak


def calculate_longest_streak(
    tasks: Iterable[Task], reference: Optional[datetime] = None
) -> int:
    """Longest run of consecutive completion dates anywhere in the history."""
    dates = sorted(completion_dates(tasks, reference))
    if not dates:
        return 0

    longest = current = 1
    for previous, day in zip(dates, dates[1:]):
        if day - previous == timedelta(days=1):
            current += 1
            longest = max(longest, current)
        else:
            current = 1
    return longest
