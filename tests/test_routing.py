"""
Tests for the daily route optimizer (Clarke-Wright savings).

Three stops: A (09:00, depot), B (10:00), C (11:00). A-B is 30 minutes,
A-C and B-C are 10, so visiting C before B saves 20 minutes of driving.
"""

from core.availability import TravelTimeMatrix
from core.routing import RouteBooking, RouteOptimizer
from test_fixtures import utc


def stop(name, hour, lat=39.74, lng=-104.99):
    return RouteBooking(
        booking_id=f"booking-{name}",
        location_id=name,
        customer_name=f"Customer {name}",
        address=f"{name} Street",
        scheduled_start=utc(2025, 1, 15, hour),
        scheduled_end=utc(2025, 1, 15, hour, 30),
        latitude=lat,
        longitude=lng,
    )


def symmetric_matrix(pairs):
    matrix = TravelTimeMatrix()
    for (a, b), minutes in pairs.items():
        matrix.insert(a, b, minutes)
        matrix.insert(b, a, minutes)
    return matrix


MATRIX = symmetric_matrix({("A", "B"): 30, ("A", "C"): 10, ("B", "C"): 10})


def test_empty_and_single_routes():
    empty = RouteOptimizer().optimize([], MATRIX)
    assert empty.num_stops == 0
    assert not empty.is_optimized

    single = RouteOptimizer().optimize([stop("A", 9)], MATRIX)
    assert single.num_stops == 1
    assert single.stops[0].travel_from_previous_minutes == 0
    assert single.is_optimized


def test_savings_reorder_stops():
    """Verifies: the depot stays first and the cheaper order is chosen"""
    route = RouteOptimizer().optimize([stop("B", 10), stop("C", 11), stop("A", 9)], MATRIX)

    assert [s.location_id for s in route.stops] == ["A", "C", "B"]
    assert [s.sequence for s in route.stops] == [1, 2, 3]
    assert route.total_travel_minutes == 20
    assert route.savings_vs_chronological == 20


def test_arrivals_never_precede_booked_start():
    route = RouteOptimizer().optimize([stop("A", 9), stop("B", 10), stop("C", 11)], MATRIX)
    a, c, b = route.stops

    assert a.arrival_time == utc(2025, 1, 15, 9)
    # C is booked for 11:00, so the walker waits rather than arriving at 09:40
    assert c.arrival_time == utc(2025, 1, 15, 11)
    assert c.departure_time == utc(2025, 1, 15, 11, 30)
    # B follows C's departure plus 10 minutes of travel
    assert b.arrival_time == utc(2025, 1, 15, 11, 40)
    assert b.service_duration_minutes == 30
    assert route.total_working_minutes == 90 + 20


def test_missing_travel_falls_back_to_estimate():
    route = RouteOptimizer().optimize([stop("X", 9), stop("Y", 10)], TravelTimeMatrix())
    assert route.stops[1].travel_from_previous_minutes == 5
    assert route.savings_vs_chronological == 0
