"""
Slot availability engine.

Given a walker's working hours, existing bookings, blocked time and known
travel times, compute the start times at which a service of a given length can
be booked at a target location. Deterministic for a given input.
"""

import enum
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Dict, Hashable, List, Optional, Sequence, Tuple

from app.exceptions import ServiceValidationError
from core.geo import Coordinates
from core.timezones import resolve_local
from core.types import DurationMinutes


@dataclass
class AvailabilityConfig:
    min_buffer_minutes: int = 15
    default_travel_minutes: int = 20
    slot_interval_minutes: int = 30
    max_advance_days: int = 30
    min_notice_hours: int = 2


class SlotConfidence(str, enum.Enum):
    """How much the travel estimate behind a slot can be trusted"""

    HIGH = "high"  # travel time from cache or maps lookup
    MEDIUM = "medium"  # haversine estimate
    LOW = "low"  # no data, default travel time assumed


@dataclass(frozen=True)
class DayHours:
    start: time
    end: time


@dataclass(frozen=True)
class BookingSlot:
    id: Hashable
    location_id: Hashable
    start: datetime
    end: datetime

    @property
    def duration_minutes(self) -> int:
        return int((self.end - self.start).total_seconds() // 60)


@dataclass(frozen=True)
class BlockSlot:
    id: Hashable
    start: datetime
    end: datetime


@dataclass
class AvailableSlot:
    start: datetime
    end: datetime
    travel_from_previous: Optional[DurationMinutes] = None
    confidence: SlotConfidence = SlotConfidence.HIGH

    @property
    def duration_minutes(self) -> int:
        return int((self.end - self.start).total_seconds() // 60)


@dataclass(frozen=True)
class ScheduleGap:
    start: datetime
    end: datetime
    duration_minutes: int


@dataclass
class TravelTimeMatrix:
    """Directed travel times in minutes keyed by (origin, destination)."""

    times: Dict[Tuple[Hashable, Hashable], DurationMinutes] = field(default_factory=dict)

    def insert(self, origin: Hashable, destination: Hashable, minutes) -> None:
        if not isinstance(minutes, DurationMinutes):
            minutes = DurationMinutes(int(minutes))
        self.times[(origin, destination)] = minutes

    def get(self, origin: Hashable, destination: Hashable) -> Optional[DurationMinutes]:
        return self.times.get((origin, destination))

    def get_or_default(self, origin: Hashable, destination: Hashable, default: DurationMinutes) -> DurationMinutes:
        found = self.get(origin, destination)
        return found if found is not None else default

    def __len__(self) -> int:
        return len(self.times)


def calculate_slots(
    working_hours: Optional[DayHours],
    existing_bookings: Sequence[BookingSlot],
    blocks: Sequence[BlockSlot],
    travel_times: TravelTimeMatrix,
    target_location: Hashable,
    service_duration_minutes: int,
    on_date: date,
    timezone_name: str,
    config: Optional[AvailabilityConfig] = None,
) -> List[AvailableSlot]:
    """
    Calculate available slots for ``on_date``.

    1. Interpret working hours in ``timezone_name`` (unknown zones fall back to UTC)
    2. Generate candidate slots every ``slot_interval_minutes`` that end within hours
    3. Drop candidates overlapping bookings, then blocks
    4. Enforce travel plus buffer around neighbouring bookings
    """
    if working_hours is None:
        return []
    config = config or AvailabilityConfig()

    work_start = resolve_local(on_date, working_hours.start, timezone_name)
    work_end = resolve_local(on_date, working_hours.end, timezone_name)

    candidates = _generate_potential_slots(
        work_start, work_end, service_duration_minutes, config.slot_interval_minutes
    )
    candidates = [c for c in candidates if not _conflicts(c, existing_bookings)]
    candidates = [c for c in candidates if not _conflicts(c, blocks)]

    return _apply_travel_constraints(candidates, existing_bookings, travel_times, target_location, config)


def _generate_potential_slots(
    work_start: datetime, work_end: datetime, duration_minutes: int, interval_minutes: int
) -> List[Tuple[datetime, datetime]]:
    slots = []
    duration = timedelta(minutes=duration_minutes)
    interval = timedelta(minutes=max(interval_minutes, 1))
    current = work_start
    while current + duration <= work_end:
        slots.append((current, current + duration))
        current += interval
    return slots


def _conflicts(slot: Tuple[datetime, datetime], occupied) -> bool:
    start, end = slot
    return any(start < o.end and end > o.start for o in occupied)


def _apply_travel_constraints(
    slots: List[Tuple[datetime, datetime]],
    bookings: Sequence[BookingSlot],
    travel_times: TravelTimeMatrix,
    target_location: Hashable,
    config: AvailabilityConfig,
) -> List[AvailableSlot]:
    ordered = sorted(bookings, key=lambda b: b.start)
    buffer = timedelta(minutes=config.min_buffer_minutes)
    default_travel = DurationMinutes(config.default_travel_minutes)

    result = []
    for start, end in slots:
        previous = next((b for b in reversed(ordered) if b.end <= start), None)
        following = next((b for b in ordered if b.start >= end), None)

        travel_from = DurationMinutes.zero()
        confidence = SlotConfidence.HIGH
        if previous is not None:
            known = travel_times.get(previous.location_id, target_location)
            if known is not None:
                travel_from = known
            else:
                travel_from, confidence = default_travel, SlotConfidence.LOW

        travel_to = DurationMinutes.zero()
        if following is not None:
            travel_to = travel_times.get_or_default(target_location, following.location_id, default_travel)

        if previous is not None and start < previous.end + travel_from.as_timedelta() + buffer:
            continue
        if following is not None and end > following.start - travel_to.as_timedelta() - buffer:
            continue

        slot = AvailableSlot(start=start, end=end)
        if previous is not None:
            slot.travel_from_previous = travel_from
            slot.confidence = confidence
        result.append(slot)
    return result


def estimate_travel_time(origin: Coordinates, destination: Coordinates) -> DurationMinutes:
    """Haversine fallback used when neither cache nor maps lookup has data."""
    return DurationMinutes(origin.estimate_travel_minutes(destination))


def merge_intervals(intervals: Sequence[Tuple[datetime, datetime]]) -> List[Tuple[datetime, datetime]]:
    if not intervals:
        return []
    ordered = sorted(intervals, key=lambda iv: iv[0])
    merged = [ordered[0]]
    for start, end in ordered[1:]:
        last_start, last_end = merged[-1]
        if start <= last_end:
            merged[-1] = (last_start, max(last_end, end))
        else:
            merged.append((start, end))
    return merged


def find_schedule_gaps(
    work_start: datetime,
    work_end: datetime,
    bookings: Sequence[BookingSlot],
    blocks: Sequence[BlockSlot],
) -> List[ScheduleGap]:
    """Free stretches inside the working window once bookings and blocks are merged."""
    occupied = [(b.start, b.end) for b in bookings] + [(b.start, b.end) for b in blocks]

    gaps = []
    current = work_start
    for start, end in merge_intervals(occupied):
        if current < start <= work_end:
            gap_end = min(start, work_end)
            gaps.append(ScheduleGap(current, gap_end, int((gap_end - current).total_seconds() // 60)))
        current = max(end, current)

    if current < work_end:
        gaps.append(ScheduleGap(current, work_end, int((work_end - current).total_seconds() // 60)))
    return gaps


def validate_booking_window(start: datetime, now: datetime, config: Optional[AvailabilityConfig] = None) -> None:
    """
    Reject start times inside the minimum notice period or beyond the booking horizon.

    Raises:
        ServiceValidationError: INSUFFICIENT_NOTICE or TOO_FAR_IN_ADVANCE
    """
    config = config or AvailabilityConfig()
    if start < now + timedelta(hours=config.min_notice_hours):
        raise ServiceValidationError(
            f"Bookings require at least {config.min_notice_hours} hours notice",
            details={"min_hours": config.min_notice_hours},
            code="INSUFFICIENT_NOTICE",
        )
    if start > now + timedelta(days=config.max_advance_days):
        raise ServiceValidationError(
            f"Bookings can be made at most {config.max_advance_days} days in advance",
            details={"max_days": config.max_advance_days},
            code="TOO_FAR_IN_ADVANCE",
        )
