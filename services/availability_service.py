from datetime import date, timedelta
from typing import Dict, Optional, Tuple
from uuid import UUID
import logging

from sqlalchemy.orm import Session

from api.dependencies import TenantContext
from app.config import settings
from app.exceptions import NotFoundError, ServiceValidationError
from core.availability import (
    AvailabilityConfig,
    BlockSlot,
    BookingSlot,
    DayHours,
    calculate_slots,
)
from core.recurrence import sunday_based_weekday
from core.service_areas import walker_can_service_location
from core.timezones import get_zone, resolve_local, utc_day_bounds, utcnow
from core.traffic import TrafficConfig
from domain.models import Location
from domain.schemas.scheduling_schemas import (
    AvailabilitySlotsResponse,
    EngineSlotResponse,
    SlotResponse,
    WalkerAvailabilityResponse,
)
from repositories import (
    BlockRepository,
    BookingRepository,
    LocationRepository,
    ServiceAreaRepository,
    ServiceRepository,
    WorkingHoursRepository,
)
from services.catalog_service import service_not_found
from services.service_area_service import to_boundary
from services.travel_service import TravelService, location_coordinates
from services.user_service import UserService

logger = logging.getLogger("offleash.availability")

TIGHT_MARGIN_MINUTES = 10
TIGHT_WARNING = "Schedule is tight - walker may be slightly delayed"
CURRENT_LOCATION = "Current location"


def walker_timezone(walker) -> str:
    tz = getattr(walker, "timezone", None)
    return tz if get_zone(tz) else settings.default_timezone


class AvailabilityService:
    """Bookable slots for a walker on a given day"""

    @staticmethod
    def _load_target(db: Session, tenant: TenantContext, service_id: UUID, location_id: UUID):
        service = ServiceRepository(db).get_in_org(service_id, tenant.org_id)
        if service is None:
            raise service_not_found(service_id)
        location = LocationRepository(db).get_in_org(location_id, tenant.org_id)
        if location is None:
            raise NotFoundError(f"Location not found: {location_id}", code="LOCATION_NOT_FOUND")
        return service, location

    @staticmethod
    def get_slots(
        db: Session,
        tenant: TenantContext,
        walker_id: UUID,
        location_id: UUID,
        service_id: UUID,
        on_date: date,
    ) -> AvailabilitySlotsResponse:
        """
        Slots every ``slot_interval_minutes`` inside the walker's hours for
        ``on_date``, annotated with travel from wherever the walker will be.

        Travel comes from the previous booking's location or, for today with
        no earlier booking, from the walker's live position. A slot that
        starts before the walker could arrive is dropped; one that leaves less
        than travel plus buffer plus a 10 minute margin is flagged as tight.
        """
        walker = UserService.get_walker(db, tenant.org_id, walker_id)
        service, destination = AvailabilityService._load_target(db, tenant, service_id, location_id)
        buffer = settings.travel_buffer_minutes

        response = AvailabilitySlotsResponse(
            date=on_date,
            walker_id=walker_id,
            walker_name=walker.full_name,
            slots=[],
            travel_buffer_minutes=buffer,
        )

        hours = WorkingHoursRepository(db).get_for_day(
            tenant.org_id, walker_id, sunday_based_weekday(on_date)
        )
        if hours is None or not hours.is_active:
            return response

        tz_name = walker_timezone(walker)
        now = utcnow()
        work_start = resolve_local(on_date, hours.start_time, tz_name)
        work_end = resolve_local(on_date, hours.end_time, tz_name)
        day_start, day_end = utc_day_bounds(on_date, tz_name)

        bookings = BookingRepository(db).list_active_for_walker_between(
            tenant.org_id, walker_id, day_start, day_end
        )
        blocks = BlockRepository(db).list_overlapping(tenant.org_id, walker_id, day_start, day_end)

        live_origin = None
        if on_date == now.astimezone(get_zone(tz_name)).date():
            live_origin = TravelService.fresh_walker_position(db, tenant.org_id, walker_id)

        location_repo = LocationRepository(db)
        travel_by_origin: Dict[Optional[UUID], Optional[Tuple[int, str]]] = {}

        def travel_from(previous) -> Optional[Tuple[int, str]]:
            key = previous.location_id if previous is not None else None
            if key in travel_by_origin:
                return travel_by_origin[key]
            result = None
            if previous is not None:
                origin: Optional[Location] = location_repo.get_by_id(previous.location_id)
                if origin is not None:
                    estimate = TravelService.between_locations(
                        db, origin, destination, settings.slot_travel_cache_ttl_minutes
                    )
                    result = (estimate.minutes, f"Previous: {origin.address}")
            elif live_origin is not None:
                estimate = TravelService.from_point(
                    db, live_origin, destination, settings.slot_travel_cache_ttl_minutes
                )
                result = (estimate.minutes, CURRENT_LOCATION)
            travel_by_origin[key] = result
            return result

        duration = timedelta(minutes=service.duration_minutes)
        step = timedelta(minutes=settings.slot_interval_minutes)
        current = work_start
        while current + duration <= work_end:
            start, end = current, current + duration
            current += step
            if start < now:
                continue
            if any(start < b.scheduled_end and end > b.scheduled_start for b in bookings):
                continue
            if any(start < b.end_time and end > b.start_time for b in blocks):
                continue

            previous = max(
                (b for b in bookings if b.scheduled_end <= start),
                key=lambda b: b.scheduled_end,
                default=None,
            )
            travel = travel_from(previous)

            is_tight = False
            if travel is not None and previous is not None:
                gap = int((start - previous.scheduled_end).total_seconds() // 60)
                if gap < travel[0]:
                    continue
                is_tight = gap < travel[0] + buffer + TIGHT_MARGIN_MINUTES

            response.slots.append(
                SlotResponse(
                    start_time=start,
                    end_time=end,
                    travel_minutes=travel[0] if travel else None,
                    travel_from=travel[1] if travel else None,
                    is_tight=is_tight,
                    warning=TIGHT_WARNING if is_tight else None,
                )
            )

        logger.debug(
            f"slots_computed walker_id={walker_id} date={on_date.isoformat()} count={len(response.slots)}"
        )
        return response

    @staticmethod
    def get_walker_availability(
        db: Session,
        tenant: TenantContext,
        walker_id: UUID,
        on_date: date,
        service_id: UUID,
        location_id: UUID,
    ) -> WalkerAvailabilityResponse:
        """Slots from the availability engine, with traffic-adjusted cached travel"""
        walker = UserService.get_walker(db, tenant.org_id, walker_id)
        service, location = AvailabilityService._load_target(db, tenant, service_id, location_id)

        areas = ServiceAreaRepository(db).list_for_walker(tenant.org_id, walker_id)
        boundaries = [to_boundary(a) for a in areas if a.is_active]
        if boundaries and walker_can_service_location(
            boundaries, walker_id, location_coordinates(location)
        ) is None:
            raise ServiceValidationError(
                "Location is outside walker's service area", code="OUTSIDE_SERVICE_AREA"
            )

        tz_name = walker_timezone(walker)
        hours = WorkingHoursRepository(db).get_for_day(
            tenant.org_id, walker_id, sunday_based_weekday(on_date)
        )
        day_hours = DayHours(hours.start_time, hours.end_time) if hours and hours.is_active else None

        day_start, day_end = utc_day_bounds(on_date, tz_name)
        bookings = [
            BookingSlot(b.id, b.location_id, b.scheduled_start, b.scheduled_end)
            for b in BookingRepository(db).list_active_for_walker_between(
                tenant.org_id, walker_id, day_start, day_end
            )
        ]
        blocks = [
            BlockSlot(b.id, b.start_time, b.end_time)
            for b in BlockRepository(db).list_overlapping(tenant.org_id, walker_id, day_start, day_end)
        ]

        traffic = TrafficConfig()
        matrix = TravelService.traffic_matrix(
            db, [location.id] + [b.location_id for b in bookings], on_date, traffic
        )

        config = AvailabilityConfig(slot_interval_minutes=settings.slot_interval_minutes)
        slots = calculate_slots(
            day_hours,
            bookings,
            blocks,
            matrix,
            location.id,
            service.duration_minutes,
            on_date,
            tz_name,
            config,
        )

        earliest = utcnow() + timedelta(hours=config.min_notice_hours)
        return WalkerAvailabilityResponse(
            walker_id=walker_id,
            date=on_date,
            slots=[
                EngineSlotResponse(
                    start=s.start,
                    end=s.end,
                    travel_from_previous_minutes=(
                        s.travel_from_previous.minutes if s.travel_from_previous is not None else None
                    ),
                    confidence=s.confidence.value,
                )
                for s in slots
                if s.start >= earliest
            ],
        )

