from datetime import date
from uuid import UUID
import logging

from sqlalchemy.orm import Session

from api.dependencies import TenantContext
from core.routing import RouteBooking, RouteOptimizer
from core.timezones import utc_day_bounds
from core.traffic import TrafficConfig
from domain.mappers import UserMapper
from domain.schemas.scheduling_schemas import RouteResponse, RouteStopResponse
from repositories import BookingRepository, LocationRepository, UserRepository
from services.availability_service import walker_timezone
from services.schedule_service import require_self_or_admin
from services.travel_service import TravelService
from services.user_service import UserService

logger = logging.getLogger("offleash.routes")


class RouteService:
    @staticmethod
    def optimize_day(db: Session, tenant: TenantContext, walker_id: UUID, on_date: date) -> RouteResponse:
        """Reorder the walker's active bookings for ``on_date`` to cut travel"""
        require_self_or_admin(tenant, walker_id, "view this route")
        walker = UserService.get_walker(db, tenant.org_id, walker_id)

        day_start, day_end = utc_day_bounds(on_date, walker_timezone(walker))
        bookings = BookingRepository(db).list_active_for_walker_between(
            tenant.org_id, walker_id, day_start, day_end
        )

        user_repo = UserRepository(db)
        location_repo = LocationRepository(db)
        route_bookings = []
        for b in bookings:
            location = location_repo.get_by_id(b.location_id)
            if location is None:
                logger.warning("Booking %s has no location; left out of the route", b.id)
                continue
            route_bookings.append(
                RouteBooking(
                    booking_id=b.id,
                    location_id=b.location_id,
                    customer_name=UserMapper.short_name(user_repo.get_by_id(b.customer_id)),
                    address=location.short_address,
                    scheduled_start=b.scheduled_start,
                    scheduled_end=b.scheduled_end,
                    latitude=location.latitude,
                    longitude=location.longitude,
                )
            )

        matrix = TravelService.traffic_matrix(
            db, [b.location_id for b in route_bookings], on_date, TrafficConfig()
        )
        route = RouteOptimizer().optimize(route_bookings, matrix)

        logger.info(
            f"route_optimized walker_id={walker_id} date={on_date.isoformat()} "
            f"stops={route.num_stops} savings={route.savings_vs_chronological}"
        )
        return RouteResponse(
            date=on_date,
            walker_id=walker_id,
            is_optimized=route.is_optimized,
            stops=[
                RouteStopResponse(
                    sequence=s.sequence,
                    booking_id=s.booking_id,
                    location_id=s.location_id,
                    customer_name=s.customer_name,
                    address=s.address,
                    arrival_time=s.arrival_time,
                    departure_time=s.departure_time,
                    travel_from_previous_minutes=s.travel_from_previous_minutes,
                    service_duration_minutes=s.service_duration_minutes,
                )
                for s in route.stops
            ],
            total_travel_minutes=route.total_travel_minutes,
            total_distance_meters=route.total_distance_meters,
            savings_minutes=route.savings_vs_chronological,
        )
