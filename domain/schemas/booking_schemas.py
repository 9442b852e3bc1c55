from pydantic import BaseModel, Field
from typing import Optional, List, Literal, Union
from datetime import date, datetime
from uuid import UUID


class BookingCreate(BaseModel):
    """Schema for creating a single booking"""

    walker_id: Optional[UUID] = Field(
        None, description="Defaults to the organization's first walker"
    )
    service_id: UUID
    location_id: UUID
    start_time: datetime
    notes: Optional[str] = None


class BookingCancelRequest(BaseModel):
    reason: Optional[str] = None


class BookingRescheduleRequest(BaseModel):
    start_time: datetime


class BookingResponse(BaseModel):
    """Booking enriched with the names and address clients display"""

    id: UUID
    customer_id: UUID
    customer_name: str
    customer_phone: Optional[str] = None
    walker_id: UUID
    walker_name: str
    service_id: UUID
    service_name: str
    location_id: UUID
    location_address: str
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    status: str
    scheduled_start: datetime
    scheduled_end: datetime
    actual_start: Optional[datetime] = None
    actual_end: Optional[datetime] = None
    price_cents: int
    price_display: str
    notes: Optional[str] = None
    recurring_series_id: Optional[UUID] = None
    occurrence_number: Optional[int] = None


class OccurrenceEndCondition(BaseModel):
    type: Literal["occurrences"]
    count: int


class DateEndCondition(BaseModel):
    type: Literal["date"]
    date: date


class RecurringBookingCreate(BaseModel):
    walker_id: UUID
    service_id: UUID
    location_id: UUID
    frequency: str = Field(..., description="weekly, bi_weekly or monthly")
    start_date: date
    time_of_day: str = Field(..., description="HH:MM in the customer's timezone")
    end_condition: Union[OccurrenceEndCondition, DateEndCondition] = Field(
        ..., discriminator="type"
    )
    notes: Optional[str] = None
    preview_only: bool = False


class OccurrenceConflictResponse(BaseModel):
    date: date
    reason: str


class RecurringSeriesResponse(BaseModel):
    id: UUID
    customer_id: UUID
    walker_id: UUID
    service_id: UUID
    location_id: UUID
    frequency: str
    frequency_display: str
    day_of_week: int
    day_of_week_name: str
    time_of_day: str
    timezone: str
    end_date: Optional[date] = None
    total_occurrences: Optional[int] = None
    is_active: bool
    price_cents_per_booking: int
    price_display: str
    default_notes: Optional[str] = None
    created_at: Optional[datetime] = None


class RecurringCreateResponse(BaseModel):
    series: Optional[RecurringSeriesResponse] = None
    bookings_created: int
    total_planned: int
    conflicts: List[OccurrenceConflictResponse]
    preview_dates: List[date]


class RecurringListItem(BaseModel):
    id: UUID
    walker_id: UUID
    walker_name: str
    service_id: UUID
    service_name: str
    frequency: str
    frequency_display: str
    day_of_week_name: str
    time_of_day: str
    is_active: bool
    price_display: str
    next_occurrence: Optional[datetime] = None
    total_bookings: int


class SeriesBookingItem(BaseModel):
    id: UUID
    occurrence_number: Optional[int] = None
    scheduled_start: datetime
    scheduled_end: datetime
    status: str
    price_display: str


class RecurringSeriesDetail(BaseModel):
    series: RecurringSeriesResponse
    walker_name: str
    service_name: str
    location_address: str
    bookings: List[SeriesBookingItem]


class CancelSeriesRequest(BaseModel):
    scope: str = Field(..., description="all_future or entire_series")


class CancelSeriesResponse(BaseModel):
    bookings_cancelled: int
    series_deactivated: bool
