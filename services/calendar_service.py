from datetime import datetime
from typing import List, Optional
from uuid import UUID
import logging

from sqlalchemy.orm import Session

from api.dependencies import TenantContext
from app.exceptions import ForbiddenError, NotFoundError, ServiceValidationError
from core.timezones import ensure_utc
from domain.enums import CalendarEventType, CalendarSyncStatus
from domain.models import CalendarEvent
from domain.schemas.walker_schemas import CalendarEventCreate, CalendarEventUpdate
from repositories import CalendarEventRepository

logger = logging.getLogger("offleash.calendar")

# Written by the booking flow and calendar sync, never by users
SYSTEM_EVENT_TYPES = (CalendarEventType.BOOKING, CalendarEventType.SYNCED)


class CalendarService:
    """Personal calendar entries of the signed-in user"""

    @staticmethod
    def _get_own(db: Session, tenant: TenantContext, event_id: UUID) -> CalendarEvent:
        event = CalendarEventRepository(db).get_in_org(event_id, tenant.org_id)
        if not event:
            raise NotFoundError(f"Calendar event not found: {event_id}", code="EVENT_NOT_FOUND")
        if event.user_id != tenant.user_id:
            raise ForbiddenError("Calendar event belongs to another user")
        return event

    @staticmethod
    def list_events(
        db: Session,
        tenant: TenantContext,
        start: datetime,
        end: datetime,
        event_type: Optional[CalendarEventType] = None,
    ) -> List[CalendarEvent]:
        start, end = ensure_utc(start), ensure_utc(end)
        if start >= end:
            raise ServiceValidationError("Start time must be before end time", code="INVALID_TIME_RANGE")
        return CalendarEventRepository(db).list_in_range(tenant.org_id, tenant.user_id, start, end, event_type)

    @staticmethod
    def get_event(db: Session, tenant: TenantContext, event_id: UUID) -> CalendarEvent:
        return CalendarService._get_own(db, tenant, event_id)

    @staticmethod
    def create_event(db: Session, tenant: TenantContext, data: CalendarEventCreate) -> CalendarEvent:
        start, end = ensure_utc(data.start_time), ensure_utc(data.end_time)
        if start >= end:
            raise ServiceValidationError("End time must be after start time", code="INVALID_TIME_RANGE")
        if data.event_type in SYSTEM_EVENT_TYPES:
            raise ServiceValidationError(
                f"Cannot create {data.event_type.value} events directly", code="INVALID_EVENT_TYPE"
            )

        event = CalendarEvent(
            organization_id=tenant.org_id,
            user_id=tenant.user_id,
            title=data.title,
            description=data.description,
            start_time=start,
            end_time=end,
            all_day=data.all_day,
            event_type=data.event_type,
            sync_status=CalendarSyncStatus.PENDING,
            recurrence_rule=data.recurrence_rule,
            color=data.color,
            is_blocking=data.is_blocking,
        )
        try:
            event = CalendarEventRepository(db).create(event)
        except Exception:
            db.rollback()
            logger.exception("Error creating calendar event for user %s", tenant.user_id)
            raise
        logger.info(f"calendar_event_created event_id={event.id} type={data.event_type.value}")
        return event

    @staticmethod
    def update_event(
        db: Session, tenant: TenantContext, event_id: UUID, data: CalendarEventUpdate
    ) -> CalendarEvent:
        event = CalendarService._get_own(db, tenant, event_id)
        if event.event_type == CalendarEventType.SYNCED:
            raise ServiceValidationError(
                "Cannot edit synced events. Edit in the source calendar.", code="SYNCED_EVENT"
            )

        changes = data.model_dump(exclude_unset=True)
        for key in ("start_time", "end_time"):
            if changes.get(key) is not None:
                changes[key] = ensure_utc(changes[key])
        start = changes.get("start_time") or ensure_utc(event.start_time)
        end = changes.get("end_time") or ensure_utc(event.end_time)
        if start >= end:
            raise ServiceValidationError("End time must be after start time", code="INVALID_TIME_RANGE")

        try:
            for field, value in changes.items():
                if value is not None:
                    setattr(event, field, value)
            event = CalendarEventRepository(db).update(event)
        except Exception:
            db.rollback()
            logger.exception("Error updating calendar event %s", event_id)
            raise
        return event

    @staticmethod
    def delete_event(db: Session, tenant: TenantContext, event_id: UUID) -> None:
        event = CalendarService._get_own(db, tenant, event_id)
        if event.event_type == CalendarEventType.SYNCED:
            raise ServiceValidationError(
                "Cannot delete synced events. Delete in the source calendar.", code="SYNCED_EVENT"
            )
        try:
            CalendarEventRepository(db).delete(event)
        except Exception:
            db.rollback()
            logger.exception("Error deleting calendar event %s", event_id)
            raise
        logger.info(f"calendar_event_deleted event_id={event_id}")
