"""
Walker profile, specializations and personal calendar events.
"""

from sqlalchemy import (
    Column,
    Text,
    TIMESTAMP,
    ForeignKey,
    Integer,
    Boolean,
    Date,
    Enum as SQLEnum,
    CheckConstraint,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid

from domain.models.database import Base
from domain.enums import CalendarEventType, CalendarSyncStatus, WalkerSpecialization


class WalkerProfile(Base):
    """Public bio and emergency contact of a walker, one per organization"""

    __tablename__ = "walker_profiles"
    __table_args__ = (
        UniqueConstraint("user_id", "organization_id", name="uq_walker_profiles_user_org"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    organization_id = Column(
        UUID(as_uuid=True), ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False
    )
    bio = Column(Text)
    profile_photo_url = Column(Text)
    emergency_contact_name = Column(Text)
    emergency_contact_phone = Column(Text)
    emergency_contact_relationship = Column(Text)
    years_experience = Column(Integer)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(
        TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    specializations = relationship(
        "WalkerSpecializationEntry",
        cascade="all, delete-orphan",
        order_by="WalkerSpecializationEntry.created_at",
    )


class WalkerSpecializationEntry(Base):
    __tablename__ = "walker_specializations"
    __table_args__ = (
        UniqueConstraint("walker_profile_id", "specialization", name="uq_walker_specialization"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    walker_profile_id = Column(
        UUID(as_uuid=True), ForeignKey("walker_profiles.id", ondelete="CASCADE"), nullable=False
    )
    specialization = Column(
        SQLEnum(WalkerSpecialization, name="walker_specialization"), nullable=False
    )
    certified = Column(Boolean, nullable=False, default=False)
    certification_date = Column(Date)
    certification_expiry = Column(Date)
    notes = Column(Text)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())


class CalendarEvent(Base):
    """
    An entry on a user's calendar. Users create ``block`` and ``personal``
    events; ``booking`` and ``synced`` events come from the system.
    """

    __tablename__ = "calendar_events"
    __table_args__ = (CheckConstraint("start_time < end_time", name="ck_calendar_events_range"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    organization_id = Column(
        UUID(as_uuid=True), ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False
    )
    user_id = Column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title = Column(Text)
    description = Column(Text)
    start_time = Column(TIMESTAMP(timezone=True), nullable=False)
    end_time = Column(TIMESTAMP(timezone=True), nullable=False)
    all_day = Column(Boolean, nullable=False, default=False)
    event_type = Column(SQLEnum(CalendarEventType, name="calendar_event_type"), nullable=False)
    external_event_id = Column(Text)
    sync_status = Column(
        SQLEnum(CalendarSyncStatus, name="calendar_sync_status"),
        nullable=False,
        default=CalendarSyncStatus.PENDING,
    )
    last_synced_at = Column(TIMESTAMP(timezone=True))
    recurrence_rule = Column(Text)
    recurrence_parent_id = Column(
        UUID(as_uuid=True), ForeignKey("calendar_events.id", ondelete="CASCADE")
    )
    color = Column(Text)
    is_blocking = Column(Boolean, nullable=False, default=True)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(
        TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now()
    )
