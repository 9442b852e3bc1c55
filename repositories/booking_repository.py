"""
Booking Repository - Data access for bookings and recurring series
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID
from sqlalchemy.orm import Session
from sqlalchemy import func

from repositories.base import BaseRepository
from domain.models import Booking, RecurringBookingSeries
from domain.enums import BookingStatus, INACTIVE_BOOKING_STATUSES


class BookingRepository(BaseRepository[Booking]):
    """Repository for booking data access"""

    def __init__(self, db: Session):
        super().__init__(db, Booking)

    def list_for_org(self, org_id: UUID, status: Optional[BookingStatus] = None) -> List[Booking]:
        query = self.db.query(Booking).filter(Booking.organization_id == org_id)
        if status is not None:
            query = query.filter(Booking.status == status)
        return query.order_by(Booking.scheduled_start).all()

    def list_for_customer(self, org_id: UUID, customer_id: UUID) -> List[Booking]:
        return (
            self.db.query(Booking)
            .filter(Booking.organization_id == org_id, Booking.customer_id == customer_id)
            .order_by(Booking.scheduled_start)
            .all()
        )

    def list_for_walker(self, org_id: UUID, walker_id: UUID) -> List[Booking]:
        return (
            self.db.query(Booking)
            .filter(Booking.organization_id == org_id, Booking.walker_id == walker_id)
            .order_by(Booking.scheduled_start)
            .all()
        )

    def list_active_for_walker_between(
        self,
        org_id: UUID,
        walker_id: UUID,
        start: datetime,
        end: datetime,
        exclude_id: Optional[UUID] = None,
    ) -> List[Booking]:
        """
        Walker bookings overlapping [start, end) whose status still occupies
        the calendar (anything but cancelled and completed).
        """
        query = self.db.query(Booking).filter(
            Booking.organization_id == org_id,
            Booking.walker_id == walker_id,
            Booking.status.notin_(INACTIVE_BOOKING_STATUSES),
            Booking.scheduled_start < end,
            Booking.scheduled_end > start,
        )
        if exclude_id is not None:
            query = query.filter(Booking.id != exclude_id)
        return query.order_by(Booking.scheduled_start).all()

    def has_conflict(
        self,
        org_id: UUID,
        walker_id: UUID,
        start: datetime,
        end: datetime,
        exclude_id: Optional[UUID] = None,
    ) -> bool:
        return bool(
            self.list_active_for_walker_between(org_id, walker_id, start, end, exclude_id)
        )

    def list_for_series(self, org_id: UUID, series_id: UUID) -> List[Booking]:
        return (
            self.db.query(Booking)
            .filter(Booking.organization_id == org_id, Booking.recurring_series_id == series_id)
            .order_by(Booking.scheduled_start)
            .all()
        )

    def cancel_for_series(self, org_id: UUID, series_id: UUID, after: Optional[datetime] = None) -> int:
        """
        Cancel the pending / confirmed bookings of a series, optionally only
        those starting after ``after``. Returns the number cancelled.
        """
        query = self.db.query(Booking).filter(
            Booking.organization_id == org_id,
            Booking.recurring_series_id == series_id,
            Booking.status.in_((BookingStatus.PENDING, BookingStatus.CONFIRMED)),
        )
        if after is not None:
            query = query.filter(Booking.scheduled_start > after)
        return query.update(
            {Booking.status: BookingStatus.CANCELLED}, synchronize_session=False
        )

    def count_between(
        self, org_id: UUID, start: datetime, end: datetime, status: Optional[BookingStatus] = None
    ) -> int:
        query = self.db.query(Booking).filter(
            Booking.organization_id == org_id,
            Booking.scheduled_start >= start,
            Booking.scheduled_start < end,
        )
        if status is not None:
            query = query.filter(Booking.status == status)
        return query.count()

    def count_by_status(self, org_id: UUID, status: BookingStatus) -> int:
        return (
            self.db.query(Booking)
            .filter(Booking.organization_id == org_id, Booking.status == status)
            .count()
        )

    def completed_revenue_between(self, org_id: UUID, start: datetime, end: datetime) -> int:
        total = (
            self.db.query(func.coalesce(func.sum(Booking.price_cents), 0))
            .filter(
                Booking.organization_id == org_id,
                Booking.status == BookingStatus.COMPLETED,
                Booking.scheduled_start >= start,
                Booking.scheduled_start < end,
            )
            .scalar()
        )
        return int(total or 0)

    def shares_booking(self, org_id: UUID, user_a: UUID, user_b: UUID) -> bool:
        """True when one user is the customer and the other the walker of some booking"""
        return (
            self.db.query(Booking.id)
            .filter(
                Booking.organization_id == org_id,
                (
                    (Booking.customer_id == user_a) & (Booking.walker_id == user_b)
                )
                | (
                    (Booking.customer_id == user_b) & (Booking.walker_id == user_a)
                ),
            )
            .first()
            is not None
        )


class RecurringSeriesRepository(BaseRepository[RecurringBookingSeries]):
    def __init__(self, db: Session):
        super().__init__(db, RecurringBookingSeries)

    def get_by_idempotency_key(
        self, org_id: UUID, customer_id: UUID, key: UUID, since: datetime
    ) -> Optional[RecurringBookingSeries]:
        return (
            self.db.query(RecurringBookingSeries)
            .filter(
                RecurringBookingSeries.organization_id == org_id,
                RecurringBookingSeries.customer_id == customer_id,
                RecurringBookingSeries.idempotency_key == key,
                RecurringBookingSeries.idempotency_key_created_at >= since,
            )
            .first()
        )

    def list_for_customer(self, org_id: UUID, customer_id: UUID) -> List[RecurringBookingSeries]:
        return (
            self.db.query(RecurringBookingSeries)
            .filter(
                RecurringBookingSeries.organization_id == org_id,
                RecurringBookingSeries.customer_id == customer_id,
            )
            .order_by(RecurringBookingSeries.created_at.desc())
            .all()
        )
