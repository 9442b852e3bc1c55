"""Availability, travel time, live walker positions and daily routes"""

from datetime import date
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
import logging
from uuid import UUID
from typing import Optional

from api.dependencies import TenantContext, get_db, get_tenant
from domain.schemas.scheduling_schemas import (
    AvailabilitySlotsResponse,
    OnDutyRequest,
    RouteResponse,
    TravelTimeResponse,
    WalkerAvailabilityResponse,
    WalkerLocationResponse,
    WalkerLocationUpdate,
)
from services.availability_service import AvailabilityService
from services.route_service import RouteService
from services.travel_service import TravelService

router = APIRouter(tags=["Availability"])
logger = logging.getLogger("offleash.api.availability")


@router.get("/availability/slots", response_model=AvailabilitySlotsResponse)
def get_slots(
    walker_id: UUID = Query(...),
    location_id: UUID = Query(...),
    service_id: UUID = Query(...),
    on_date: date = Query(..., alias="date"),
    tenant: TenantContext = Depends(get_tenant),
    db: Session = Depends(get_db),
):
    """Bookable slots for a walker on a date, with travel time from the previous stop"""
    return AvailabilityService.get_slots(db, tenant, walker_id, location_id, service_id, on_date)


@router.get("/availability/{walker_id}", response_model=WalkerAvailabilityResponse)
def get_walker_availability(
    walker_id: UUID,
    on_date: date = Query(..., alias="date"),
    service_id: UUID = Query(...),
    location_id: UUID = Query(...),
    tenant: TenantContext = Depends(get_tenant),
    db: Session = Depends(get_db),
):
    return AvailabilityService.get_walker_availability(
        db, tenant, walker_id, on_date, service_id, location_id
    )


@router.get("/travel-time", response_model=TravelTimeResponse)
def get_travel_time(
    destination_location_id: UUID = Query(...),
    origin_location_id: Optional[UUID] = Query(None),
    origin_lat: Optional[float] = Query(None),
    origin_lng: Optional[float] = Query(None),
    tenant: TenantContext = Depends(get_tenant),
    db: Session = Depends(get_db),
):
    return TravelService.get_travel_time(
        db, tenant, destination_location_id, origin_location_id, origin_lat, origin_lng
    )


@router.post("/walkers/{walker_id}/location", response_model=WalkerLocationResponse)
def update_walker_location(
    walker_id: UUID,
    data: WalkerLocationUpdate,
    tenant: TenantContext = Depends(get_tenant),
    db: Session = Depends(get_db),
):
    """Position ping from the walker's device"""
    return TravelService.update_walker_location(db, tenant, walker_id, data)


@router.get("/walkers/{walker_id}/location", response_model=Optional[WalkerLocationResponse])
def get_walker_location(walker_id: UUID, tenant: TenantContext = Depends(get_tenant), db: Session = Depends(get_db)):
    return TravelService.get_walker_location(db, tenant, walker_id)


@router.post("/walkers/{walker_id}/on-duty")
def set_on_duty(
    walker_id: UUID,
    data: OnDutyRequest,
    tenant: TenantContext = Depends(get_tenant),
    db: Session = Depends(get_db),
):
    is_on_duty = TravelService.set_on_duty(db, tenant, walker_id, data.is_on_duty)
    return {"status": "ok", "is_on_duty": is_on_duty}


@router.get("/walkers/{walker_id}/route", response_model=RouteResponse)
def get_route(
    walker_id: UUID,
    on_date: date = Query(..., alias="date"),
    tenant: TenantContext = Depends(get_tenant),
    db: Session = Depends(get_db),
):
    """Optimized visiting order of the walker's bookings for the day"""
    return RouteService.optimize_day(db, tenant, walker_id, on_date)
