"""
Booking domain mappers.
Handles transformation between booking / series ORM models and DTOs.
"""

from core.recurrence import RecurrenceFrequency, day_of_week_name
from core.types import format_cents
from domain.schemas.booking_schemas import (
    BookingResponse,
    RecurringSeriesResponse,
    SeriesBookingItem,
)

UNKNOWN = "Unknown"


def _value(enum_or_str) -> str:
    return getattr(enum_or_str, "value", enum_or_str)


class BookingMapper:
    """Mapper for booking transformations."""

    @staticmethod
    def to_response(booking, customer=None, walker=None, service=None, location=None) -> BookingResponse:
        """
        Convert a Booking row plus its related rows to BookingResponse.

        Missing related rows (deleted users, services) render as "Unknown".
        """
        return BookingResponse(
            id=booking.id,
            customer_id=booking.customer_id,
            customer_name=customer.full_name if customer else UNKNOWN,
            customer_phone=customer.phone if customer else None,
            walker_id=booking.walker_id,
            walker_name=walker.full_name if walker else UNKNOWN,
            service_id=booking.service_id,
            service_name=service.name if service else UNKNOWN,
            location_id=booking.location_id,
            location_address=location.short_address if location else UNKNOWN,
            latitude=location.latitude if location else None,
            longitude=location.longitude if location else None,
            status=_value(booking.status),
            scheduled_start=booking.scheduled_start,
            scheduled_end=booking.scheduled_end,
            actual_start=booking.actual_start,
            actual_end=booking.actual_end,
            price_cents=booking.price_cents,
            price_display=format_cents(booking.price_cents),
            notes=booking.notes,
            recurring_series_id=booking.recurring_series_id,
            occurrence_number=booking.occurrence_number,
        )

    @staticmethod
    def to_series_item(booking) -> SeriesBookingItem:
        return SeriesBookingItem(
            id=booking.id,
            occurrence_number=booking.occurrence_number,
            scheduled_start=booking.scheduled_start,
            scheduled_end=booking.scheduled_end,
            status=_value(booking.status),
            price_display=format_cents(booking.price_cents),
        )


class SeriesMapper:
    """Mapper for recurring booking series."""

    @staticmethod
    def to_response(series) -> RecurringSeriesResponse:
        frequency = RecurrenceFrequency(_value(series.frequency))
        return RecurringSeriesResponse(
            id=series.id,
            customer_id=series.customer_id,
            walker_id=series.walker_id,
            service_id=series.service_id,
            location_id=series.location_id,
            frequency=frequency.value,
            frequency_display=frequency.display_name,
            day_of_week=series.day_of_week,
            day_of_week_name=day_of_week_name(series.day_of_week),
            time_of_day=series.time_of_day.strftime("%H:%M"),
            timezone=series.timezone,
            end_date=series.end_date,
            total_occurrences=series.total_occurrences,
            is_active=series.is_active,
            price_cents_per_booking=series.price_cents_per_booking,
            price_display=format_cents(series.price_cents_per_booking),
            default_notes=series.default_notes,
            created_at=series.created_at,
        )

    @staticmethod
    def frequency_display(series) -> str:
        return RecurrenceFrequency(_value(series.frequency)).display_name
