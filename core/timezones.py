"""Local wall-clock to UTC conversion using the IANA database (zoneinfo)."""

from datetime import date, datetime, time, timezone
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


def get_zone(name: Optional[str]) -> Optional[ZoneInfo]:
    if not name:
        return None
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        return None


def is_valid_timezone(name: str) -> bool:
    return get_zone(name) is not None


def to_utc_datetime(day: date, at: time, tz_name: str) -> Optional[datetime]:
    """
    Convert a local date and time in ``tz_name`` to an aware UTC datetime.

    Returns None when the zone is unknown, when the wall time does not exist
    (spring-forward gap) or when it is ambiguous (fall-back overlap).
    """
    tz = get_zone(tz_name)
    if tz is None:
        return None

    naive = datetime.combine(day, at)
    first = naive.replace(tzinfo=tz, fold=0)
    second = naive.replace(tzinfo=tz, fold=1)
    if first.utcoffset() != second.utcoffset():
        return None

    as_utc = first.astimezone(timezone.utc)
    # A wall time inside a gap does not survive the round trip
    if as_utc.astimezone(tz).replace(tzinfo=None) != naive:
        return None
    return as_utc


def resolve_local(day: date, at: time, tz_name: str) -> datetime:
    """
    Always-defined UTC instant for a local wall time, used for working-hours edges.

    Unknown zones read as UTC. A time inside a spring-forward gap lands after
    the gap (02:30 on a Denver transition day becomes 03:30 MDT); an ambiguous
    time takes its first occurrence.
    """
    tz = get_zone(tz_name) or timezone.utc
    return datetime.combine(day, at).replace(tzinfo=tz, fold=0).astimezone(timezone.utc)


def utc_day_bounds(day: date, tz_name: str) -> tuple[datetime, datetime]:
    """UTC instants of local midnight at the start and end of ``day``."""
    tz = get_zone(tz_name) or timezone.utc
    start = datetime.combine(day, time.min).replace(tzinfo=tz)
    end = datetime.combine(day, time.max).replace(tzinfo=tz)
    return start.astimezone(timezone.utc), end.astimezone(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and normalize aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
