from datetime import date, datetime, time, timedelta
from typing import List, Optional, Tuple
from uuid import UUID
import logging

from sqlalchemy.orm import Session

from api.dependencies import TenantContext
from app.config import settings
from app.exceptions import (
    ForbiddenError,
    NotFoundError,
    OffleashError,
    ServiceValidationError,
    booking_conflict,
)
from core.recurrence import (
    DEFAULT_MAX_OCCURRENCES,
    OccurrenceConflict,
    RecurrenceFrequency,
    find_conflicts,
    generate_occurrence_dates,
    occurrence_window,
    sunday_based_weekday,
)
from core.timezones import get_zone, utc_day_bounds, utcnow
from domain.enums import BookingStatus, CancelScope
from domain.mappers import BookingMapper, SeriesMapper
from domain.models import Booking, RecurringBookingSeries
from domain.schemas.booking_schemas import (
    CancelSeriesResponse,
    DateEndCondition,
    OccurrenceConflictResponse,
    RecurringBookingCreate,
    RecurringCreateResponse,
    RecurringListItem,
    RecurringSeriesDetail,
)
from repositories import (
    BlockRepository,
    BookingRepository,
    LocationRepository,
    RecurringSeriesRepository,
    ServiceRepository,
    UserRepository,
)
from services.booking_service import booking_status
from services.catalog_service import service_not_found
from services.location_service import LocationService
from services.user_service import UserService

logger = logging.getLogger("offleash.recurring")

PREVIEW_DATE_COUNT = 5


def parse_time_of_day(value: str) -> time:
    try:
        return datetime.strptime(value.strip(), "%H:%M").time()
    except ValueError:
        raise ServiceValidationError("Invalid time format. Use HH:MM", code="INVALID_TIME")


def parse_frequency(value: str) -> RecurrenceFrequency:
    try:
        return RecurrenceFrequency(value)
    except ValueError:
        raise ServiceValidationError("Invalid frequency. Must be weekly, bi_weekly, or monthly")


def series_not_found(series_id: UUID) -> NotFoundError:
    return NotFoundError(f"Recurring series not found: {series_id}", code="SERIES_NOT_FOUND")


class RecurringService:
    """Recurring booking series: creation, preview, listing and cancellation"""

    @staticmethod
    def _end_condition(data: RecurringBookingCreate) -> Tuple[Optional[date], Optional[int]]:
        condition = data.end_condition
        if isinstance(condition, DateEndCondition):
            if condition.date <= data.start_date:
                raise ServiceValidationError("End date must be after start date")
            return condition.date, None
        if not 1 <= condition.count <= DEFAULT_MAX_OCCURRENCES:
            raise ServiceValidationError(
                f"Occurrences must be between 1 and {DEFAULT_MAX_OCCURRENCES}"
            )
        return None, condition.count

    @staticmethod
    def _replay(db: Session, series: RecurringBookingSeries) -> RecurringCreateResponse:
        count = len(BookingRepository(db).list_for_series(series.organization_id, series.id))
        logger.info(f"recurring_idempotent_replay series_id={series.id} bookings={count}")
        return RecurringCreateResponse(
            series=SeriesMapper.to_response(series),
            bookings_created=count,
            total_planned=count,
            conflicts=[],
            preview_dates=[],
        )

    @staticmethod
    def _scan_conflicts(
        db: Session,
        org_id: UUID,
        walker_id: UUID,
        dates: List[date],
        time_of_day: time,
        duration_minutes: int,
        tz_name: str,
    ) -> List[OccurrenceConflict]:
        """Occurrence dates that overlap the walker's active bookings or blocks"""
        if not dates:
            return []
        range_start, _ = utc_day_bounds(dates[0], tz_name)
        _, range_end = utc_day_bounds(dates[-1], tz_name)
        busy = [
            (b.scheduled_start, b.scheduled_end)
            for b in BookingRepository(db).list_active_for_walker_between(
                org_id, walker_id, range_start, range_end
            )
        ]
        blocked = [
            (b.start_time, b.end_time)
            for b in BlockRepository(db).list_overlapping(org_id, walker_id, range_start, range_end)
        ]
        return find_conflicts(dates, time_of_day, duration_minutes, tz_name, busy, blocked)

    @staticmethod
    def create(
        db: Session,
        tenant: TenantContext,
        data: RecurringBookingCreate,
        idempotency_key: Optional[UUID] = None,
        force_preview: bool = False,
    ) -> RecurringCreateResponse:
        """
        Plan a recurring series and, unless previewing, create the series and
        one pending booking per conflict-free date in a single transaction.

        Raises:
            ServiceValidationError: bad frequency, time or end condition
            ConflictError: BOOKING_CONFLICT when every date conflicts
        """
        frequency = parse_frequency(data.frequency)
        time_of_day = parse_time_of_day(data.time_of_day)
        end_date, total_occurrences = RecurringService._end_condition(data)
        preview = force_preview or data.preview_only

        series_repo = RecurringSeriesRepository(db)
        if idempotency_key is not None and not preview:
            since = utcnow() - timedelta(hours=settings.idempotency_window_hours)
            existing = series_repo.get_by_idempotency_key(
                tenant.org_id, tenant.user_id, idempotency_key, since
            )
            if existing is not None:
                return RecurringService._replay(db, existing)

        UserService.get_walker(db, tenant.org_id, data.walker_id)
        service = ServiceRepository(db).get_in_org(data.service_id, tenant.org_id)
        if service is None:
            raise service_not_found(data.service_id)
        location = LocationService.get_owned(db, tenant, data.location_id)

        customer = UserRepository(db).get_by_id(tenant.user_id)
        tz_name = customer.timezone if customer and get_zone(customer.timezone) else settings.default_timezone

        day_of_week = sunday_based_weekday(data.start_date)
        dates = generate_occurrence_dates(
            data.start_date, frequency, day_of_week, end_date, total_occurrences
        )

        preview_dates = dates[:PREVIEW_DATE_COUNT]

        if preview:
            conflicts = RecurringService._scan_conflicts(
                db, tenant.org_id, data.walker_id, dates, time_of_day, service.duration_minutes, tz_name
            )
            return RecurringCreateResponse(
                series=None,
                bookings_created=0,
                total_planned=len(dates),
                conflicts=[OccurrenceConflictResponse(date=c.date, reason=c.reason) for c in conflicts],
                preview_dates=preview_dates,
            )

        try:
            # Serialize with single bookings for the same walker, then re-check
            UserRepository(db).lock_for_update(data.walker_id)
            conflicts = RecurringService._scan_conflicts(
                db, tenant.org_id, data.walker_id, dates, time_of_day, service.duration_minutes, tz_name
            )
            conflict_items = [OccurrenceConflictResponse(date=c.date, reason=c.reason) for c in conflicts]
            conflict_dates = {c.date for c in conflicts}

            series = RecurringBookingSeries(
                organization_id=tenant.org_id,
                customer_id=tenant.user_id,
                walker_id=data.walker_id,
                service_id=service.id,
                location_id=location.id,
                frequency=frequency,
                day_of_week=day_of_week,
                time_of_day=time_of_day,
                timezone=tz_name,
                end_date=end_date,
                total_occurrences=total_occurrences,
                is_active=True,
                price_cents_per_booking=service.base_price_cents,
                default_notes=data.notes,
                idempotency_key=idempotency_key,
                idempotency_key_created_at=utcnow() if idempotency_key else None,
            )
            db.add(series)
            db.flush()

            created = 0
            for idx, day in enumerate(dates):
                if day in conflict_dates:
                    continue
                window = occurrence_window(day, time_of_day, service.duration_minutes, tz_name)
                if window is None:
                    continue
                start, end = window
                db.add(
                    Booking(
                        organization_id=tenant.org_id,
                        customer_id=tenant.user_id,
                        walker_id=data.walker_id,
                        service_id=service.id,
                        location_id=location.id,
                        status=BookingStatus.PENDING,
                        scheduled_start=start,
                        scheduled_end=end,
                        price_cents=service.base_price_cents,
                        notes=data.notes,
                        recurring_series_id=series.id,
                        occurrence_number=idx + 1,
                    )
                )
                created += 1

            if created == 0:
                raise booking_conflict("No bookings could be created; every date conflicts")

            db.commit()
            db.refresh(series)
        except OffleashError:
            db.rollback()
            raise
        except Exception:
            db.rollback()
            logger.exception("Error creating recurring series for customer %s", tenant.user_id)
            raise

        logger.info(
            f"recurring_created series_id={series.id} bookings={created} conflicts={len(conflicts)}"
        )
        return RecurringCreateResponse(
            series=SeriesMapper.to_response(series),
            bookings_created=created,
            total_planned=len(dates),
            conflicts=conflict_items,
            preview_dates=preview_dates,
        )

    @staticmethod
    def list_series(db: Session, tenant: TenantContext) -> List[RecurringListItem]:
        user_repo = UserRepository(db)
        service_repo = ServiceRepository(db)
        booking_repo = BookingRepository(db)
        now = utcnow()

        items = []
        for series in RecurringSeriesRepository(db).list_for_customer(tenant.org_id, tenant.user_id):
            bookings = booking_repo.list_for_series(tenant.org_id, series.id)
            upcoming = [
                b.scheduled_start
                for b in bookings
                if b.scheduled_start > now and booking_status(b).is_active
            ]
            walker = user_repo.get_by_id(series.walker_id)
            service = service_repo.get_by_id(series.service_id)
            response = SeriesMapper.to_response(series)
            items.append(
                RecurringListItem(
                    id=series.id,
                    walker_id=series.walker_id,
                    walker_name=walker.full_name if walker else "Unknown",
                    service_id=series.service_id,
                    service_name=service.name if service else "Unknown",
                    frequency=response.frequency,
                    frequency_display=response.frequency_display,
                    day_of_week_name=response.day_of_week_name,
                    time_of_day=response.time_of_day,
                    is_active=series.is_active,
                    price_display=response.price_display,
                    next_occurrence=min(upcoming) if upcoming else None,
                    total_bookings=len(bookings),
                )
            )
        return items

    @staticmethod
    def _get_owned(db: Session, tenant: TenantContext, series_id: UUID) -> RecurringBookingSeries:
        series = RecurringSeriesRepository(db).get_in_org(series_id, tenant.org_id)
        if series is None:
            raise series_not_found(series_id)
        if series.customer_id != tenant.user_id:
            raise ForbiddenError("Not allowed to access this series")
        return series

    @staticmethod
    def get_series(db: Session, tenant: TenantContext, series_id: UUID) -> RecurringSeriesDetail:
        series = RecurringService._get_owned(db, tenant, series_id)
        walker = UserRepository(db).get_by_id(series.walker_id)
        service = ServiceRepository(db).get_by_id(series.service_id)
        location = LocationRepository(db).get_by_id(series.location_id)
        bookings = BookingRepository(db).list_for_series(tenant.org_id, series.id)
        return RecurringSeriesDetail(
            series=SeriesMapper.to_response(series),
            walker_name=walker.full_name if walker else "Unknown",
            service_name=service.name if service else "Unknown",
            location_address=location.short_address if location else "Unknown",
            bookings=[BookingMapper.to_series_item(b) for b in bookings],
        )

    @staticmethod
    def cancel_series(db: Session, tenant: TenantContext, series_id: UUID, scope: str) -> CancelSeriesResponse:
        try:
            cancel_scope = CancelScope(scope)
        except ValueError:
            raise ServiceValidationError("Invalid scope. Must be all_future or entire_series")

        series = RecurringService._get_owned(db, tenant, series_id)
        if not series.is_active:
            raise ServiceValidationError("Series is already cancelled", code="SERIES_INACTIVE")

        after = utcnow() if cancel_scope == CancelScope.ALL_FUTURE else None
        try:
            cancelled = BookingRepository(db).cancel_for_series(tenant.org_id, series.id, after)
            series.is_active = False
            db.commit()
        except Exception:
            db.rollback()
            logger.exception("Error cancelling series %s", series_id)
            raise

        logger.info(
            f"recurring_cancelled series_id={series_id} scope={cancel_scope.value} bookings={cancelled}"
        )
        return CancelSeriesResponse(bookings_cancelled=cancelled, series_deactivated=True)
