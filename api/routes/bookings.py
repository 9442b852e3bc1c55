"""Booking routes: one-off bookings, their lifecycle and recurring series"""

from fastapi import APIRouter, Depends, Header, Query, status
from sqlalchemy.orm import Session
import logging
from uuid import UUID
from typing import List, Optional

from api.dependencies import TenantContext, get_db, get_tenant, require_admin, require_walker
from app.exceptions import ServiceValidationError
from domain.schemas.booking_schemas import (
    BookingCancelRequest,
    BookingCreate,
    BookingRescheduleRequest,
    BookingResponse,
    CancelSeriesRequest,
    CancelSeriesResponse,
    RecurringBookingCreate,
    RecurringCreateResponse,
    RecurringListItem,
    RecurringSeriesDetail,
)
from services.booking_service import BookingService
from services.recurring_service import RecurringService

router = APIRouter(prefix="/bookings", tags=["Bookings"])
logger = logging.getLogger("offleash.api.bookings")


def idempotency_key(x_idempotency_key: Optional[str] = Header(None)) -> Optional[UUID]:
    if not x_idempotency_key:
        return None
    try:
        return UUID(x_idempotency_key)
    except ValueError:
        raise ServiceValidationError("X-Idempotency-Key must be a UUID", code="INVALID_IDEMPOTENCY_KEY")


# ============================================================
# Recurring series (registered before /{booking_id})
# ============================================================


@router.post("/recurring", response_model=RecurringCreateResponse, status_code=status.HTTP_201_CREATED)
def create_recurring(
    data: RecurringBookingCreate,
    key: Optional[UUID] = Depends(idempotency_key),
    tenant: TenantContext = Depends(get_tenant),
    db: Session = Depends(get_db),
):
    """Create a weekly, bi-weekly or monthly series, skipping conflicting dates"""
    return RecurringService.create(db, tenant, data, idempotency_key=key)


@router.post("/recurring/preview", response_model=RecurringCreateResponse)
def preview_recurring(
    data: RecurringBookingCreate,
    tenant: TenantContext = Depends(get_tenant),
    db: Session = Depends(get_db),
):
    """Dates and conflicts of a series without creating anything"""
    return RecurringService.create(db, tenant, data, force_preview=True)


@router.get("/recurring", response_model=List[RecurringListItem])
def list_recurring(tenant: TenantContext = Depends(get_tenant), db: Session = Depends(get_db)):
    return RecurringService.list_series(db, tenant)


@router.get("/recurring/{series_id}", response_model=RecurringSeriesDetail)
def get_recurring(series_id: UUID, tenant: TenantContext = Depends(get_tenant), db: Session = Depends(get_db)):
    return RecurringService.get_series(db, tenant, series_id)


@router.post("/recurring/{series_id}/cancel", response_model=CancelSeriesResponse)
def cancel_recurring(
    series_id: UUID,
    data: CancelSeriesRequest,
    tenant: TenantContext = Depends(get_tenant),
    db: Session = Depends(get_db),
):
    return RecurringService.cancel_series(db, tenant, series_id, data.scope)


# ============================================================
# Bookings
# ============================================================


@router.post("", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
def create_booking(data: BookingCreate, tenant: TenantContext = Depends(get_tenant), db: Session = Depends(get_db)):
    return BookingService.create_booking(db, tenant, data)


@router.get("", response_model=List[BookingResponse])
def list_bookings(
    status_filter: Optional[str] = Query(None, alias="status"),
    tenant: TenantContext = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """All bookings of the organization, optionally filtered by status"""
    return BookingService.list_for_org(db, tenant, status_filter)


@router.get("/customer", response_model=List[BookingResponse])
def list_customer_bookings(tenant: TenantContext = Depends(get_tenant), db: Session = Depends(get_db)):
    return BookingService.list_for_customer(db, tenant)


@router.get("/walker", response_model=List[BookingResponse])
def list_walker_bookings(tenant: TenantContext = Depends(require_walker), db: Session = Depends(get_db)):
    return BookingService.list_for_walker(db, tenant)


@router.get("/{booking_id}", response_model=BookingResponse)
def get_booking(booking_id: UUID, tenant: TenantContext = Depends(get_tenant), db: Session = Depends(get_db)):
    return BookingService.get_booking(db, tenant, booking_id)


@router.post("/{booking_id}/confirm", response_model=BookingResponse)
def confirm_booking(booking_id: UUID, tenant: TenantContext = Depends(get_tenant), db: Session = Depends(get_db)):
    return BookingService.confirm(db, tenant, booking_id)


@router.post("/{booking_id}/cancel", response_model=BookingResponse)
def cancel_booking(
    booking_id: UUID,
    data: Optional[BookingCancelRequest] = None,
    tenant: TenantContext = Depends(get_tenant),
    db: Session = Depends(get_db),
):
    return BookingService.cancel(db, tenant, booking_id, data or BookingCancelRequest())


@router.post("/{booking_id}/reschedule", response_model=BookingResponse)
def reschedule_booking(
    booking_id: UUID,
    data: BookingRescheduleRequest,
    tenant: TenantContext = Depends(get_tenant),
    db: Session = Depends(get_db),
):
    """Move a booking to a new start time; it goes back to pending"""
    return BookingService.reschedule(db, tenant, booking_id, data)


@router.post("/{booking_id}/start", response_model=BookingResponse)
def start_booking(booking_id: UUID, tenant: TenantContext = Depends(get_tenant), db: Session = Depends(get_db)):
    return BookingService.start(db, tenant, booking_id)


@router.post("/{booking_id}/complete", response_model=BookingResponse)
def complete_booking(booking_id: UUID, tenant: TenantContext = Depends(get_tenant), db: Session = Depends(get_db)):
    return BookingService.complete(db, tenant, booking_id)
