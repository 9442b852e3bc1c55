"""Personal calendar events of the signed-in user"""

from datetime import datetime
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
import logging
from uuid import UUID
from typing import Optional

from api.dependencies import TenantContext, get_db, get_tenant
from domain.enums import CalendarEventType
from domain.schemas.walker_schemas import (
    CalendarEventCreate,
    CalendarEventListResponse,
    CalendarEventResponse,
    CalendarEventUpdate,
)
from services.calendar_service import CalendarService

router = APIRouter(prefix="/calendar/events", tags=["Calendar"])
logger = logging.getLogger("offleash.api.calendar")


@router.get("", response_model=CalendarEventListResponse)
def list_events(
    start: datetime = Query(...),
    end: datetime = Query(...),
    event_type: Optional[CalendarEventType] = Query(None),
    tenant: TenantContext = Depends(get_tenant),
    db: Session = Depends(get_db),
):
    events = CalendarService.list_events(db, tenant, start, end, event_type)
    return CalendarEventListResponse(
        events=[CalendarEventResponse.model_validate(e) for e in events], count=len(events)
    )


@router.post("", response_model=CalendarEventResponse, status_code=status.HTTP_201_CREATED)
def create_event(data: CalendarEventCreate, tenant: TenantContext = Depends(get_tenant), db: Session = Depends(get_db)):
    return CalendarEventResponse.model_validate(CalendarService.create_event(db, tenant, data))


@router.get("/{event_id}", response_model=CalendarEventResponse)
def get_event(event_id: UUID, tenant: TenantContext = Depends(get_tenant), db: Session = Depends(get_db)):
    return CalendarEventResponse.model_validate(CalendarService.get_event(db, tenant, event_id))


@router.put("/{event_id}", response_model=CalendarEventResponse)
def update_event(
    event_id: UUID,
    data: CalendarEventUpdate,
    tenant: TenantContext = Depends(get_tenant),
    db: Session = Depends(get_db),
):
    return CalendarEventResponse.model_validate(CalendarService.update_event(db, tenant, event_id, data))


@router.delete("/{event_id}")
def delete_event(event_id: UUID, tenant: TenantContext = Depends(get_tenant), db: Session = Depends(get_db)):
    CalendarService.delete_event(db, tenant, event_id)
    return {"status": "ok", "deleted": True}
