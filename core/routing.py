"""
Daily route optimization for a walker using the Clarke-Wright savings heuristic.

The chronologically first booking acts as the depot. Every pair (i, j) of the
remaining stops earns a saving ``d[0][i] + d[0][j] - d[i][j]``; routes are merged
greedily from the largest saving while both nodes sit at route ends. The depot
leads the final order, followed by the merged chains.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Hashable, List, Optional, Sequence

from core.availability import TravelTimeMatrix
from core.geo import Coordinates


@dataclass(frozen=True)
class RouteBooking:
    booking_id: Hashable
    location_id: Hashable
    customer_name: str
    address: str
    scheduled_start: datetime
    scheduled_end: datetime
    latitude: float
    longitude: float

    @property
    def duration_minutes(self) -> int:
        return int((self.scheduled_end - self.scheduled_start).total_seconds() // 60)

    @property
    def coordinates(self) -> Coordinates:
        return Coordinates.unchecked(self.latitude, self.longitude)


@dataclass
class RouteStop:
    sequence: int
    booking_id: Hashable
    location_id: Hashable
    customer_name: str
    address: str
    arrival_time: datetime
    departure_time: datetime
    travel_from_previous_minutes: int
    service_duration_minutes: int


@dataclass
class OptimizedRoute:
    stops: List[RouteStop] = field(default_factory=list)
    total_travel_minutes: int = 0
    total_distance_meters: int = 0
    savings_vs_chronological: int = 0
    is_optimized: bool = False

    @classmethod
    def empty(cls) -> "OptimizedRoute":
        return cls()

    @property
    def num_stops(self) -> int:
        return len(self.stops)

    @property
    def total_service_minutes(self) -> int:
        return sum(s.service_duration_minutes for s in self.stops)

    @property
    def total_working_minutes(self) -> int:
        return self.total_service_minutes + self.total_travel_minutes


@dataclass(frozen=True)
class Saving:
    from_idx: int
    to_idx: int
    savings_minutes: int


class RouteOptimizer:
    def __init__(self, start_location: Optional[Coordinates] = None):
        self.start_location = start_location

    def optimize(self, bookings: Sequence[RouteBooking], travel_matrix: TravelTimeMatrix) -> OptimizedRoute:
        if not bookings:
            return OptimizedRoute.empty()
        if len(bookings) == 1:
            return self._single_booking_route(bookings[0])

        ordered = sorted(bookings, key=lambda b: b.scheduled_start)
        chronological_travel = self.calculate_total_travel(ordered, travel_matrix)

        order = self._clarke_wright(ordered, travel_matrix)
        optimized = [ordered[i] for i in order]
        optimized_travel = self.calculate_total_travel(optimized, travel_matrix)

        return self.build_route(optimized, travel_matrix, chronological_travel - optimized_travel)

    def _single_booking_route(self, booking: RouteBooking) -> OptimizedRoute:
        stop = RouteStop(
            sequence=1,
            booking_id=booking.booking_id,
            location_id=booking.location_id,
            customer_name=booking.customer_name,
            address=booking.address,
            arrival_time=booking.scheduled_start,
            departure_time=booking.scheduled_end,
            travel_from_previous_minutes=0,
            service_duration_minutes=booking.duration_minutes,
        )
        return OptimizedRoute(stops=[stop], is_optimized=True)

    def travel_between(self, origin: RouteBooking, destination: RouteBooking, travel_matrix: TravelTimeMatrix) -> int:
        known = travel_matrix.get(origin.location_id, destination.location_id)
        if known is not None:
            return known.minutes
        return origin.coordinates.estimate_travel_minutes(destination.coordinates)

    def calculate_total_travel(self, bookings: Sequence[RouteBooking], travel_matrix: TravelTimeMatrix) -> int:
        return sum(
            self.travel_between(bookings[i - 1], bookings[i], travel_matrix)
            for i in range(1, len(bookings))
        )

    def build_distance_matrix(self, bookings: Sequence[RouteBooking], travel_matrix: TravelTimeMatrix) -> List[List[int]]:
        n = len(bookings)
        return [
            [0 if i == j else self.travel_between(bookings[i], bookings[j], travel_matrix) for j in range(n)]
            for i in range(n)
        ]

    def _clarke_wright(self, bookings: Sequence[RouteBooking], travel_matrix: TravelTimeMatrix) -> List[int]:
        n = len(bookings)
        if n <= 2:
            return list(range(n))

        d = self.build_distance_matrix(bookings, travel_matrix)

        savings = []
        for i in range(1, n):
            for j in range(i + 1, n):
                value = d[0][i] + d[0][j] - d[i][j]
                if value > 0:
                    savings.append(Saving(i, j, value))
        # Stable sort keeps chronological pair order among equal savings
        savings.sort(key=lambda s: s.savings_minutes, reverse=True)

        routes: List[List[int]] = [[i] for i in range(n)]
        route_of = list(range(n))

        for saving in savings:
            i, j = saving.from_idx, saving.to_idx
            ri, rj = route_of[i], route_of[j]
            if ri == rj:
                continue
            if i not in (routes[ri][0], routes[ri][-1]) or j not in (routes[rj][0], routes[rj][-1]):
                continue

            # The shorter route merges into the longer one
            if len(routes[ri]) >= len(routes[rj]):
                longer, shorter, anchor, joining = ri, rj, i, j
            else:
                longer, shorter, anchor, joining = rj, ri, j, i

            target = routes[longer]
            moving = list(routes[shorter])
            if target[-1] == anchor:
                if moving[0] != joining:
                    moving.reverse()
                routes[longer] = target + moving
            else:
                if moving[-1] != joining:
                    moving.reverse()
                routes[longer] = moving + target

            for node in moving:
                route_of[node] = longer
            routes[shorter] = []

        order = [0]
        chains = sorted((r for r in routes[1:] if r), key=min)
        for chain in chains:
            # Enter each chain from whichever end is closer to the current stop
            last = order[-1]
            if d[last][chain[-1]] < d[last][chain[0]]:
                chain = list(reversed(chain))
            order.extend(chain)
        return order

    def build_route(self, bookings: Sequence[RouteBooking], travel_matrix: TravelTimeMatrix, savings: int) -> OptimizedRoute:
        stops: List[RouteStop] = []
        total_travel = 0
        previous_departure: Optional[datetime] = None

        for idx, booking in enumerate(bookings):
            if idx == 0:
                travel = 0
                arrival = booking.scheduled_start
            else:
                travel = self.travel_between(bookings[idx - 1], booking, travel_matrix)
                # Never arrive before the booked start time
                arrival = max(previous_departure + timedelta(minutes=travel), booking.scheduled_start)
            total_travel += travel

            duration = booking.duration_minutes
            stops.append(
                RouteStop(
                    sequence=idx + 1,
                    booking_id=booking.booking_id,
                    location_id=booking.location_id,
                    customer_name=booking.customer_name,
                    address=booking.address,
                    arrival_time=arrival,
                    departure_time=arrival + timedelta(minutes=duration),
                    travel_from_previous_minutes=travel,
                    service_duration_minutes=duration,
                )
            )
            previous_departure = stops[-1].departure_time

        return OptimizedRoute(
            stops=stops,
            total_travel_minutes=total_travel,
            total_distance_meters=0,
            savings_vs_chronological=max(0, savings),
            is_optimized=True,
        )
