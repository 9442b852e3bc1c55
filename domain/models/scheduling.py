"""
Walker scheduling models: weekly hours, blocked time, service areas,
live location and the travel time cache.
"""

from sqlalchemy import (
    Column,
    Text,
    TIMESTAMP,
    ForeignKey,
    Integer,
    SmallInteger,
    Boolean,
    Float,
    Time,
    CheckConstraint,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import UUID, JSONB
from sqlalchemy.sql import func
import uuid

from domain.models.database import Base


class WorkingHours(Base):
    """Weekly working window of a walker, one row per day (0 = Sunday)"""

    __tablename__ = "working_hours"
    __table_args__ = (
        UniqueConstraint("walker_id", "day_of_week", name="uq_working_hours_walker_day"),
        CheckConstraint("day_of_week BETWEEN 0 AND 6", name="ck_working_hours_day"),
        CheckConstraint("start_time < end_time", name="ck_working_hours_range"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    organization_id = Column(
        UUID(as_uuid=True), ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False
    )
    walker_id = Column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    day_of_week = Column(SmallInteger, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())


class Block(Base):
    """Time a walker is unavailable"""

    __tablename__ = "blocks"
    __table_args__ = (CheckConstraint("start_time < end_time", name="ck_blocks_range"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    organization_id = Column(
        UUID(as_uuid=True), ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False
    )
    walker_id = Column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    reason = Column(Text, nullable=False)
    start_time = Column(TIMESTAMP(timezone=True), nullable=False)
    end_time = Column(TIMESTAMP(timezone=True), nullable=False)
    is_recurring = Column(Boolean, nullable=False, default=False)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())


class ServiceArea(Base):
    """Polygon a walker covers; ``polygon`` is a list of {"lat", "lng"} points"""

    __tablename__ = "walker_service_areas"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    organization_id = Column(
        UUID(as_uuid=True), ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True
    )
    walker_id = Column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name = Column(Text, nullable=False)
    color = Column(Text, nullable=False, default="#3B82F6")
    polygon = Column(JSONB, nullable=False, default=list)
    min_lat = Column(Float)
    max_lat = Column(Float)
    min_lng = Column(Float)
    max_lng = Column(Float)
    is_active = Column(Boolean, nullable=False, default=True)
    priority = Column(Integer, nullable=False, default=0)
    price_adjustment_percent = Column(Integer, nullable=False, default=0)
    notes = Column(Text)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(
        TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now()
    )


class WalkerLocation(Base):
    """Last reported position of a walker"""

    __tablename__ = "walker_locations"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    organization_id = Column(
        UUID(as_uuid=True), ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False
    )
    walker_id = Column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    accuracy = Column(Float)
    heading = Column(Float)
    speed = Column(Float)
    is_on_duty = Column(Boolean, nullable=False, default=False)
    # Time of the last position report; duty toggles leave it alone
    updated_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    duty_changed_at = Column(TIMESTAMP(timezone=True))


class TravelTimeCache(Base):
    """
    Cached drive time between two locations.

    ``origin_location_id`` is null when the origin was a raw coordinate
    (a walker's live position); ``origin_latitude`` / ``origin_longitude`` then
    identify it.
    """

    __tablename__ = "travel_time_cache"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    origin_location_id = Column(
        UUID(as_uuid=True), ForeignKey("locations.id", ondelete="CASCADE"), index=True
    )
    origin_latitude = Column(Float)
    origin_longitude = Column(Float)
    destination_location_id = Column(
        UUID(as_uuid=True), ForeignKey("locations.id", ondelete="CASCADE"), nullable=False, index=True
    )
    travel_minutes = Column(Integer, nullable=False)
    distance_meters = Column(Integer, nullable=False, default=0)
    calculated_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)
