from datetime import timedelta
from typing import Dict, Iterable, List, Optional
from uuid import UUID
import logging

from sqlalchemy.orm import Session

from api.dependencies import TenantContext
from app.exceptions import (
    ForbiddenError,
    NotFoundError,
    OffleashError,
    ServiceValidationError,
    booking_conflict,
    invalid_booking_time,
    invalid_state_transition,
)
from core.timezones import ensure_utc, utcnow
from domain.enums import BookingStatus
from domain.mappers import BookingMapper
from domain.models import Booking
from domain.schemas.booking_schemas import (
    BookingCancelRequest,
    BookingCreate,
    BookingResponse,
    BookingRescheduleRequest,
)
from repositories import (
    BookingRepository,
    LocationRepository,
    ServiceRepository,
    UserRepository,
)
from services.catalog_service import service_not_found
from services.location_service import LocationService
from services.user_service import UserService

logger = logging.getLogger("offleash.bookings")


def booking_status(booking) -> BookingStatus:
    return BookingStatus(getattr(booking.status, "value", booking.status))


def booking_not_found(booking_id: UUID) -> NotFoundError:
    return NotFoundError(f"Booking not found: {booking_id}", code="BOOKING_NOT_FOUND")


class BookingService:
    """Single bookings: creation with conflict checks, listing and the status lifecycle"""

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    @staticmethod
    def to_responses(db: Session, bookings: Iterable[Booking]) -> List[BookingResponse]:
        """Attach customer, walker, service and location to each booking"""
        user_repo = UserRepository(db)
        service_repo = ServiceRepository(db)
        location_repo = LocationRepository(db)
        users: Dict[UUID, object] = {}
        services: Dict[UUID, object] = {}
        locations: Dict[UUID, object] = {}

        def cached(cache, repo, key):
            if key not in cache:
                cache[key] = repo.get_by_id(key)
            return cache[key]

        return [
            BookingMapper.to_response(
                b,
                customer=cached(users, user_repo, b.customer_id),
                walker=cached(users, user_repo, b.walker_id),
                service=cached(services, service_repo, b.service_id),
                location=cached(locations, location_repo, b.location_id),
            )
            for b in bookings
        ]

    @staticmethod
    def list_for_org(db: Session, tenant: TenantContext, status: Optional[str] = None) -> List[BookingResponse]:
        status_filter = None
        if status:
            try:
                status_filter = BookingStatus(status)
            except ValueError:
                raise ServiceValidationError(f"Invalid status: {status}")
        bookings = BookingRepository(db).list_for_org(tenant.org_id, status_filter)
        return BookingService.to_responses(db, bookings)

    @staticmethod
    def list_for_customer(db: Session, tenant: TenantContext) -> List[BookingResponse]:
        bookings = BookingRepository(db).list_for_customer(tenant.org_id, tenant.user_id)
        return BookingService.to_responses(db, bookings)

    @staticmethod
    def list_for_walker(db: Session, tenant: TenantContext) -> List[BookingResponse]:
        bookings = BookingRepository(db).list_for_walker(tenant.org_id, tenant.user_id)
        return BookingService.to_responses(db, bookings)

    @staticmethod
    def get_visible(db: Session, tenant: TenantContext, booking_id: UUID) -> Booking:
        """
        Customer sees own bookings, walker sees assigned ones, admin sees all.
        Anything else reads as missing.
        """
        booking = BookingRepository(db).get_in_org(booking_id, tenant.org_id)
        if booking is None:
            raise booking_not_found(booking_id)
        if not (
            tenant.is_admin
            or booking.customer_id == tenant.user_id
            or booking.walker_id == tenant.user_id
        ):
            raise booking_not_found(booking_id)
        return booking

    @staticmethod
    def get_booking(db: Session, tenant: TenantContext, booking_id: UUID) -> BookingResponse:
        booking = BookingService.get_visible(db, tenant, booking_id)
        return BookingService.to_responses(db, [booking])[0]

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    @staticmethod
    def create_booking(db: Session, tenant: TenantContext, data: BookingCreate) -> BookingResponse:
        """
        Create a pending booking for the caller.

        Raises:
            NotFoundError: service, walker or location missing in the organization
            ForbiddenError: the caller is not a customer, or the location belongs to someone else
            ServiceValidationError: INVALID_BOOKING_TIME for a start in the past
            ConflictError: BOOKING_CONFLICT when the walker is already booked
        """
        if not tenant.is_customer:
            raise ForbiddenError("Only customers can create bookings")

        service = ServiceRepository(db).get_in_org(data.service_id, tenant.org_id)
        if service is None or not service.is_active:
            raise service_not_found(data.service_id)

        walker_id = data.walker_id
        if walker_id is None:
            first = UserRepository(db).first_walker(tenant.org_id)
            if first is None:
                raise NotFoundError("No walkers available", code="WALKER_NOT_FOUND")
            walker_id = first.id
        UserService.get_walker(db, tenant.org_id, walker_id)

        location = LocationService.get_owned(db, tenant, data.location_id)

        start = ensure_utc(data.start_time)
        if start <= utcnow():
            raise invalid_booking_time("Cannot create booking in the past")
        end = start + timedelta(minutes=service.duration_minutes)

        repo = BookingRepository(db)
        try:
            # Serialize concurrent bookings for the same walker
            UserRepository(db).lock_for_update(walker_id)
            if repo.has_conflict(tenant.org_id, walker_id, start, end):
                raise booking_conflict()

            booking = Booking(
                organization_id=tenant.org_id,
                customer_id=tenant.user_id,
                walker_id=walker_id,
                service_id=service.id,
                location_id=location.id,
                status=BookingStatus.PENDING,
                scheduled_start=start,
                scheduled_end=end,
                price_cents=service.base_price_cents,
                notes=data.notes,
                customer_notes=data.notes,
            )
            booking = repo.create(booking)
        except OffleashError:
            db.rollback()
            raise
        except Exception:
            db.rollback()
            logger.exception("Error creating booking for customer %s", tenant.user_id)
            raise

        logger.info(
            f"booking_created booking_id={booking.id} walker_id={walker_id} start={start.isoformat()}"
        )
        return BookingService.to_responses(db, [booking])[0]

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @staticmethod
    def _save(db: Session, booking: Booking, action: str) -> BookingResponse:
        try:
            booking = BookingRepository(db).update(booking)
        except Exception:
            db.rollback()
            logger.exception("Error trying to %s booking %s", action, booking.id)
            raise
        logger.info(f"booking_{action} booking_id={booking.id} status={booking_status(booking).value}")
        return BookingService.to_responses(db, [booking])[0]

    @staticmethod
    def confirm(db: Session, tenant: TenantContext, booking_id: UUID) -> BookingResponse:
        booking = BookingService.get_visible(db, tenant, booking_id)
        if not (tenant.is_admin or booking.walker_id == tenant.user_id):
            raise ForbiddenError("Only the assigned walker or an admin can confirm")
        status = booking_status(booking)
        if not status.can_confirm:
            raise invalid_state_transition(status.value, "confirm")

        booking.status = BookingStatus.CONFIRMED
        return BookingService._save(db, booking, "confirmed")

    @staticmethod
    def cancel(db: Session, tenant: TenantContext, booking_id: UUID, data: BookingCancelRequest) -> BookingResponse:
        booking = BookingService.get_visible(db, tenant, booking_id)
        status = booking_status(booking)
        if not status.can_cancel:
            raise invalid_state_transition(status.value, "cancel")

        booking.status = BookingStatus.CANCELLED
        booking.cancellation_reason = data.reason
        return BookingService._save(db, booking, "cancelled")

    @staticmethod
    def reschedule(
        db: Session, tenant: TenantContext, booking_id: UUID, data: BookingRescheduleRequest
    ) -> BookingResponse:
        """Move a booking keeping its duration; it goes back to pending"""
        booking = BookingService.get_visible(db, tenant, booking_id)
        if booking.customer_id != tenant.user_id:
            raise ForbiddenError("Only the customer can reschedule a booking")
        status = booking_status(booking)
        if not status.can_reschedule:
            raise invalid_state_transition(status.value, "reschedule")

        start = ensure_utc(data.start_time)
        if start <= utcnow():
            raise invalid_booking_time("Cannot reschedule a booking into the past")
        end = start + (booking.scheduled_end - booking.scheduled_start)

        repo = BookingRepository(db)
        try:
            UserRepository(db).lock_for_update(booking.walker_id)
            if repo.has_conflict(tenant.org_id, booking.walker_id, start, end, exclude_id=booking.id):
                raise booking_conflict()
            booking.scheduled_start = start
            booking.scheduled_end = end
            booking.status = BookingStatus.PENDING
        except OffleashError:
            db.rollback()
            raise
        return BookingService._save(db, booking, "rescheduled")

    @staticmethod
    def start(db: Session, tenant: TenantContext, booking_id: UUID) -> BookingResponse:
        booking = BookingService.get_visible(db, tenant, booking_id)
        if booking.walker_id != tenant.user_id:
            raise ForbiddenError("Only the assigned walker can start a booking")
        status = booking_status(booking)
        if not status.can_start:
            raise invalid_state_transition(status.value, "start")

        booking.status = BookingStatus.IN_PROGRESS
        booking.actual_start = utcnow()
        return BookingService._save(db, booking, "started")

    @staticmethod
    def complete(db: Session, tenant: TenantContext, booking_id: UUID) -> BookingResponse:
        booking = BookingService.get_visible(db, tenant, booking_id)
        if not (tenant.is_admin or booking.walker_id == tenant.user_id):
            raise ForbiddenError("Only the assigned walker or an admin can complete")
        status = booking_status(booking)
        if not status.can_complete:
            raise invalid_state_transition(status.value, "complete")

        now = utcnow()
        booking.status = BookingStatus.COMPLETED
        booking.actual_start = booking.actual_start or now
        booking.actual_end = now
        return BookingService._save(db, booking, "completed")
