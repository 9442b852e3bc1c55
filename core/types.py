"""
Value types shared by the scheduling code: money in cents, minute durations
and UTC time slots.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional


@dataclass(frozen=True, order=True)
class Money:
    """An amount of USD stored as integer cents."""

    cents: int = 0

    @classmethod
    def from_dollars(cls, dollars) -> "Money":
        """Build from a dollar amount, rounding half away from zero to the cent."""
        amount = (Decimal(str(dollars)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
        return cls(int(amount))

    @classmethod
    def zero(cls) -> "Money":
        return cls(0)

    @property
    def dollars(self) -> float:
        return self.cents / 100

    def is_zero(self) -> bool:
        return self.cents == 0

    def is_positive(self) -> bool:
        return self.cents > 0

    def __add__(self, other: "Money") -> "Money":
        return Money(self.cents + other.cents)

    def __sub__(self, other: "Money") -> "Money":
        return Money(self.cents - other.cents)

    def __str__(self) -> str:
        return f"${self.cents / 100:.2f}"


def format_cents(cents: Optional[int]) -> str:
    return str(Money(cents or 0))


@dataclass(frozen=True, order=True)
class DurationMinutes:
    """A non-negative number of minutes; negative input is clamped to zero."""

    minutes: int = 0

    def __post_init__(self):
        if self.minutes < 0:
            object.__setattr__(self, "minutes", 0)

    @classmethod
    def zero(cls) -> "DurationMinutes":
        return cls(0)

    def is_zero(self) -> bool:
        return self.minutes == 0

    @property
    def hours(self) -> int:
        return self.minutes // 60

    @property
    def remaining_minutes(self) -> int:
        return self.minutes % 60

    def as_timedelta(self) -> timedelta:
        return timedelta(minutes=self.minutes)

    def __int__(self) -> int:
        return self.minutes

    def __str__(self) -> str:
        if self.hours and self.remaining_minutes:
            return f"{self.hours}h {self.remaining_minutes}m"
        if self.hours:
            return f"{self.hours}h"
        return f"{self.remaining_minutes}m"


@dataclass(frozen=True)
class TimeSlot:
    """A half-open interval [start, end) with end strictly after start."""

    start: datetime
    end: datetime

    def __post_init__(self):
        if self.end <= self.start:
            raise ValueError(
                f"End time ({self.end.isoformat()}) must be after start time ({self.start.isoformat()})"
            )

    @classmethod
    def from_start(cls, start: datetime, duration: DurationMinutes) -> "TimeSlot":
        return cls(start, start + duration.as_timedelta())

    @property
    def duration_minutes(self) -> int:
        return int((self.end - self.start).total_seconds() // 60)

    def overlaps(self, other: "TimeSlot") -> bool:
        # Touching slots (one ends exactly when the other starts) do not overlap
        return self.start < other.end and other.start < self.end

    def contains(self, instant: datetime) -> bool:
        return self.start <= instant < self.end

    def contains_slot(self, other: "TimeSlot") -> bool:
        return self.start <= other.start and other.end <= self.end

    def gap_to(self, other: "TimeSlot") -> Optional["TimeSlot"]:
        """Free time between the end of this slot and the start of ``other``."""
        if self.end < other.start:
            return TimeSlot(self.end, other.start)
        return None

    def extend_start(self, duration: DurationMinutes) -> "TimeSlot":
        return TimeSlot(self.start - duration.as_timedelta(), self.end)

    def extend_end(self, duration: DurationMinutes) -> "TimeSlot":
        return TimeSlot(self.start, self.end + duration.as_timedelta())


def intervals_overlap(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    return a_start < b_end and b_start < a_end
