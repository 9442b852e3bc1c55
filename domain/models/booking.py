"""
Booking and recurring booking series models.
"""

from sqlalchemy import (
    Column,
    Text,
    TIMESTAMP,
    ForeignKey,
    Integer,
    SmallInteger,
    BigInteger,
    Boolean,
    Date,
    Time,
    Enum as SQLEnum,
    CheckConstraint,
    Index,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid

from domain.models.database import Base
from domain.enums import BookingStatus
from core.recurrence import RecurrenceFrequency


class Booking(Base):
    """A scheduled service for a customer with a walker"""

    __tablename__ = "bookings"
    __table_args__ = (
        CheckConstraint("scheduled_start < scheduled_end", name="ck_bookings_range"),
        Index("ix_bookings_walker_start", "walker_id", "scheduled_start"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    organization_id = Column(
        UUID(as_uuid=True), ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True
    )
    customer_id = Column(
        UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True
    )
    walker_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False)
    service_id = Column(UUID(as_uuid=True), ForeignKey("services.id"), nullable=False)
    location_id = Column(UUID(as_uuid=True), ForeignKey("locations.id"), nullable=False)
    status = Column(
        SQLEnum(BookingStatus, name="booking_status"), nullable=False, default=BookingStatus.PENDING
    )
    scheduled_start = Column(TIMESTAMP(timezone=True), nullable=False)
    scheduled_end = Column(TIMESTAMP(timezone=True), nullable=False)
    actual_start = Column(TIMESTAMP(timezone=True))
    actual_end = Column(TIMESTAMP(timezone=True))
    price_cents = Column(BigInteger, nullable=False, default=0)
    notes = Column(Text)
    customer_notes = Column(Text)
    walker_notes = Column(Text)
    cancellation_reason = Column(Text)
    recurring_series_id = Column(
        UUID(as_uuid=True), ForeignKey("recurring_booking_series.id", ondelete="SET NULL"), index=True
    )
    occurrence_number = Column(Integer)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(
        TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    series = relationship("RecurringBookingSeries", back_populates="bookings")

    @property
    def duration_minutes(self) -> int:
        return int((self.scheduled_end - self.scheduled_start).total_seconds() // 60)


class RecurringBookingSeries(Base):
    """Template from which the bookings of a recurring schedule were created"""

    __tablename__ = "recurring_booking_series"
    __table_args__ = (
        CheckConstraint("day_of_week BETWEEN 0 AND 6", name="ck_series_day"),
        Index("ix_series_idempotency", "organization_id", "customer_id", "idempotency_key"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    organization_id = Column(
        UUID(as_uuid=True), ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False
    )
    customer_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    walker_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False)
    service_id = Column(UUID(as_uuid=True), ForeignKey("services.id"), nullable=False)
    location_id = Column(UUID(as_uuid=True), ForeignKey("locations.id"), nullable=False)
    frequency = Column(SQLEnum(RecurrenceFrequency, name="recurrence_frequency"), nullable=False)
    day_of_week = Column(SmallInteger, nullable=False)
    time_of_day = Column(Time, nullable=False)
    timezone = Column(Text, nullable=False)
    end_date = Column(Date)
    total_occurrences = Column(Integer)
    is_active = Column(Boolean, nullable=False, default=True)
    price_cents_per_booking = Column(BigInteger, nullable=False)
    default_notes = Column(Text)
    idempotency_key = Column(UUID(as_uuid=True))
    idempotency_key_created_at = Column(TIMESTAMP(timezone=True))
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(
        TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    bookings = relationship(
        "Booking", back_populates="series", order_by="Booking.scheduled_start"
    )
