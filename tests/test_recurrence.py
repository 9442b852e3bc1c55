"""
Tests for recurring schedule expansion and per-date conflict detection.

Calendar reference: 2025-01-01 is a Wednesday; 2025-01-05 a Sunday.
"""

from datetime import date, time

from core.recurrence import (
    BLOCKED_TIME,
    CONFLICTING_BOOKING,
    INVALID_TIMEZONE_CONVERSION,
    RecurrenceFrequency,
    day_of_week_name,
    find_conflicts,
    generate_occurrence_dates,
    sunday_based_weekday,
)
from test_fixtures import utc

WEDNESDAY = 3


def test_sunday_based_weekday():
    assert sunday_based_weekday(date(2025, 1, 5)) == 0
    assert sunday_based_weekday(date(2025, 1, 6)) == 1
    assert sunday_based_weekday(date(2025, 1, 4)) == 6
    assert day_of_week_name(0) == "Sunday"
    assert day_of_week_name(7) == "Unknown"


def test_weekly_occurrences():
    dates = generate_occurrence_dates(date(2025, 1, 1), RecurrenceFrequency.WEEKLY, WEDNESDAY, total_occurrences=4)
    assert dates == [date(2025, 1, 1), date(2025, 1, 8), date(2025, 1, 15), date(2025, 1, 22)]


def test_bi_weekly_starts_on_next_matching_weekday():
    dates = generate_occurrence_dates(date(2025, 1, 1), RecurrenceFrequency.BI_WEEKLY, 5, total_occurrences=3)
    assert dates == [date(2025, 1, 3), date(2025, 1, 17), date(2025, 1, 31)]


def test_monthly_keeps_week_of_month():
    """Verifies: the second Monday stays the second Monday each month"""
    dates = generate_occurrence_dates(date(2025, 1, 13), RecurrenceFrequency.MONTHLY, 1, total_occurrences=3)
    assert dates == [date(2025, 1, 13), date(2025, 2, 10), date(2025, 3, 10)]


def test_monthly_fifth_week_clamps_into_month():
    dates = generate_occurrence_dates(date(2025, 1, 29), RecurrenceFrequency.MONTHLY, WEDNESDAY, total_occurrences=2)
    assert dates == [date(2025, 1, 29), date(2025, 2, 26)]


def test_end_date_is_inclusive_limit():
    dates = generate_occurrence_dates(
        date(2025, 1, 1), RecurrenceFrequency.WEEKLY, WEDNESDAY, end_date=date(2025, 1, 20)
    )
    assert dates == [date(2025, 1, 1), date(2025, 1, 8), date(2025, 1, 15)]


def test_defaults_cap_at_52_and_invalid_weekday_means_monday():
    assert len(generate_occurrence_dates(date(2025, 1, 1), RecurrenceFrequency.WEEKLY, WEDNESDAY)) == 52
    first = generate_occurrence_dates(date(2025, 1, 1), RecurrenceFrequency.WEEKLY, 9, total_occurrences=1)
    assert first == [date(2025, 1, 6)]


def test_frequency_display_names():
    assert RecurrenceFrequency.WEEKLY.display_name == "Weekly"
    assert RecurrenceFrequency.BI_WEEKLY.display_name == "Every 2 weeks"
    assert RecurrenceFrequency.MONTHLY.display_name == "Monthly"


def test_conflicts_prefer_bookings_over_blocks():
    dates = [date(2025, 1, 8), date(2025, 1, 15), date(2025, 1, 22)]
    bookings = [(utc(2025, 1, 8, 10, 15), utc(2025, 1, 8, 10, 45))]
    blocks = [
        (utc(2025, 1, 8, 9), utc(2025, 1, 8, 12)),
        (utc(2025, 1, 15, 9), utc(2025, 1, 15, 10, 1)),
    ]

    conflicts = find_conflicts(dates, time(10, 0), 30, "UTC", bookings, blocks)

    assert [(c.date, c.reason) for c in conflicts] == [
        (date(2025, 1, 8), CONFLICTING_BOOKING),
        (date(2025, 1, 15), BLOCKED_TIME),
    ]


def test_touching_booking_is_not_a_conflict():
    bookings = [(utc(2025, 1, 8, 9, 30), utc(2025, 1, 8, 10, 0))]
    assert find_conflicts([date(2025, 1, 8)], time(10, 0), 30, "UTC", bookings, []) == []


def test_nonexistent_local_time_reported():
    conflicts = find_conflicts([date(2025, 3, 9)], time(2, 30), 30, "America/Denver", [], [])
    assert conflicts[0].reason == INVALID_TIMEZONE_CONVERSION
