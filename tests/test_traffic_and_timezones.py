"""
Tests for rush-hour adjustments and local wall-clock to UTC conversion.
"""

from datetime import date, datetime, time, timezone

from core.timezones import ensure_utc, is_valid_timezone, resolve_local, to_utc_datetime, utc_day_bounds
from core.traffic import TrafficConfig, TravelConfidence


def at(hour, minute=0) -> datetime:
    return datetime(2025, 1, 15, hour, minute)


# =============================================================================
# TRAFFIC
# =============================================================================


def test_peak_hours_are_half_open():
    config = TrafficConfig()
    assert config.is_peak_hour(at(8))
    assert config.is_peak_hour(at(16, 30))
    assert not config.is_peak_hour(at(9))
    assert not config.is_peak_hour(at(18))
    assert not config.is_peak_hour(at(12))


def test_adjust_travel_time_rounds_up_at_peak():
    """Verifies: 20 minutes at rush hour becomes 26, not 27 from float noise"""
    config = TrafficConfig()
    assert config.adjust_travel_time(20, at(8)) == 26
    assert config.adjust_travel_time(10, at(8)) == 13
    assert config.adjust_travel_time(20, at(12)) == 20


def test_cache_ttl_depends_on_peak():
    config = TrafficConfig()
    assert config.get_cache_ttl_minutes(at(17)) == 240
    assert config.get_cache_ttl_minutes(at(12)) == 1440


def test_travel_confidence_from_cache_age():
    config = TrafficConfig()
    assert TravelConfidence.from_cache_age(100, False, config) == TravelConfidence.HIGH
    assert TravelConfidence.from_cache_age(1000, False, config) == TravelConfidence.MEDIUM
    assert TravelConfidence.from_cache_age(2000, False, config) == TravelConfidence.LOW
    assert TravelConfidence.from_cache_age(130, True, config) == TravelConfidence.MEDIUM


# =============================================================================
# TIMEZONES
# =============================================================================


def test_local_time_converted_to_utc():
    converted = to_utc_datetime(date(2025, 1, 15), time(9, 0), "America/Denver")
    assert converted == datetime(2025, 1, 15, 16, 0, tzinfo=timezone.utc)


def test_daylight_saving_edges_are_rejected():
    """Verifies: wall times skipped in spring or repeated in autumn do not convert"""
    assert to_utc_datetime(date(2025, 3, 9), time(2, 30), "America/Denver") is None
    assert to_utc_datetime(date(2025, 11, 2), time(1, 30), "America/Denver") is None


def test_unknown_timezone():
    assert to_utc_datetime(date(2025, 1, 15), time(9, 0), "Mars/Olympus_Mons") is None
    assert not is_valid_timezone("Mars/Olympus_Mons")
    assert is_valid_timezone("Europe/Berlin")


def test_day_bounds_follow_local_midnight():
    start, end = utc_day_bounds(date(2025, 1, 15), "America/Denver")
    assert start == datetime(2025, 1, 15, 7, 0, tzinfo=timezone.utc)
    assert end.date() == date(2025, 1, 16)
    assert end.hour == 6


def test_ensure_utc():
    naive = datetime(2025, 1, 15, 9, 0)
    assert ensure_utc(naive).tzinfo == timezone.utc
    assert ensure_utc(naive).hour == 9


def test_working_hours_edges_resolve_through_transitions():
    """
    Verifies:
    - A wall time inside the spring gap lands just after it (02:30 -> 03:30 MDT)
    - An autumn time that happens twice takes its first occurrence (MDT)
    - The result stays on the requested local day
    """
    gap = resolve_local(date(2025, 3, 9), time(2, 30), "America/Denver")
    assert gap == datetime(2025, 3, 9, 9, 30, tzinfo=timezone.utc)

    repeated = resolve_local(date(2025, 11, 2), time(1, 30), "America/Denver")
    assert repeated == datetime(2025, 11, 2, 7, 30, tzinfo=timezone.utc)


def test_working_hours_edges_in_unknown_zone_use_utc():
    resolved = resolve_local(date(2025, 1, 15), time(9, 0), "Mars/Olympus_Mons")
    assert resolved == datetime(2025, 1, 15, 9, 0, tzinfo=timezone.utc)
