"""
Recurring booking schedules: occurrence date generation and conflict detection.

Days of the week are Sunday-based throughout (0 = Sunday ... 6 = Saturday).
"""

import enum
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import List, Optional, Sequence, Tuple

from core.timezones import to_utc_datetime

DEFAULT_MAX_OCCURRENCES = 52
DEFAULT_HORIZON_DAYS = 365

DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]

INVALID_TIMEZONE_CONVERSION = "Invalid timezone conversion"
CONFLICTING_BOOKING = "Walker has conflicting booking"
BLOCKED_TIME = "Walker has blocked time"


class RecurrenceFrequency(str, enum.Enum):
    WEEKLY = "weekly"
    BI_WEEKLY = "bi_weekly"
    MONTHLY = "monthly"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]


_DISPLAY_NAMES = {
    RecurrenceFrequency.WEEKLY: "Weekly",
    RecurrenceFrequency.BI_WEEKLY: "Every 2 weeks",
    RecurrenceFrequency.MONTHLY: "Monthly",
}


@dataclass(frozen=True)
class OccurrenceConflict:
    date: date
    reason: str


def day_of_week_name(day_of_week: int) -> str:
    if 0 <= day_of_week < len(DAY_NAMES):
        return DAY_NAMES[day_of_week]
    return "Unknown"


def sunday_based_weekday(day: date) -> int:
    return (day.weekday() + 1) % 7


def _advance_to_weekday(day: date, target: int) -> date:
    while sunday_based_weekday(day) != target:
        day += timedelta(days=1)
    return day


def _next_monthly(current: date, target: int) -> date:
    """Same weekday and week-of-month in the following month, clamped to that month."""
    if current.month == 12:
        first = date(current.year + 1, 1, 1)
    else:
        first = date(current.year, current.month + 1, 1)

    week_of_month = (current.day - 1) // 7
    candidate = _advance_to_weekday(first, target) + timedelta(weeks=week_of_month)
    if candidate.month != first.month:
        candidate -= timedelta(weeks=1)
    return candidate


def generate_occurrence_dates(
    start_date: date,
    frequency: RecurrenceFrequency,
    day_of_week: int,
    end_date: Optional[date] = None,
    total_occurrences: Optional[int] = None,
) -> List[date]:
    max_occurrences = total_occurrences if total_occurrences is not None else DEFAULT_MAX_OCCURRENCES
    end = end_date or start_date + timedelta(days=DEFAULT_HORIZON_DAYS)
    # Out of range weekdays fall back to Monday
    target = day_of_week if 0 <= day_of_week <= 6 else 1

    dates: List[date] = []
    current = _advance_to_weekday(start_date, target)
    while len(dates) < max_occurrences and current <= end:
        dates.append(current)
        if frequency == RecurrenceFrequency.WEEKLY:
            current += timedelta(weeks=1)
        elif frequency == RecurrenceFrequency.BI_WEEKLY:
            current += timedelta(weeks=2)
        else:
            current = _next_monthly(current, target)
    return dates


def occurrence_window(day: date, time_of_day: time, duration_minutes: int, tz_name: str) -> Optional[Tuple[datetime, datetime]]:
    start = to_utc_datetime(day, time_of_day, tz_name)
    if start is None:
        return None
    return start, start + timedelta(minutes=duration_minutes)


def find_conflicts(
    dates: Sequence[date],
    time_of_day: time,
    duration_minutes: int,
    tz_name: str,
    bookings: Sequence[Tuple[datetime, datetime]],
    blocks: Sequence[Tuple[datetime, datetime]],
) -> List[OccurrenceConflict]:
    """
    Check each occurrence against the walker's active bookings and blocks.

    ``bookings`` must already exclude cancelled and completed ones. A booking
    overlap is reported in preference to a block overlap on the same date.
    """
    conflicts = []
    for day in dates:
        window = occurrence_window(day, time_of_day, duration_minutes, tz_name)
        if window is None:
            conflicts.append(OccurrenceConflict(day, INVALID_TIMEZONE_CONVERSION))
            continue

        start, end = window
        if any(b_start < end and b_end > start for b_start, b_end in bookings):
            conflicts.append(OccurrenceConflict(day, CONFLICTING_BOOKING))
        elif any(b_start < end and b_end > start for b_start, b_end in blocks):
            conflicts.append(OccurrenceConflict(day, BLOCKED_TIME))
    return conflicts
