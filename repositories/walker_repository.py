"""
Walker Repositories - profiles, specializations and calendar events
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID
from sqlalchemy.orm import Session

from repositories.base import BaseRepository
from domain.enums import CalendarEventType
from domain.models import CalendarEvent, WalkerProfile, WalkerSpecializationEntry


class WalkerProfileRepository(BaseRepository[WalkerProfile]):
    def __init__(self, db: Session):
        super().__init__(db, WalkerProfile)

    def get_for_user(self, org_id: UUID, user_id: UUID) -> Optional[WalkerProfile]:
        return (
            self.db.query(WalkerProfile)
            .filter(WalkerProfile.organization_id == org_id, WalkerProfile.user_id == user_id)
            .first()
        )

    def list_specializations(self, profile_id: UUID) -> List[WalkerSpecializationEntry]:
        return (
            self.db.query(WalkerSpecializationEntry)
            .filter(WalkerSpecializationEntry.walker_profile_id == profile_id)
            .order_by(WalkerSpecializationEntry.created_at)
            .all()
        )

    def delete_specializations(self, profile_id: UUID) -> int:
        """Stage removal of every specialization; the caller commits"""
        return (
            self.db.query(WalkerSpecializationEntry)
            .filter(WalkerSpecializationEntry.walker_profile_id == profile_id)
            .delete(synchronize_session=False)
        )


class CalendarEventRepository(BaseRepository[CalendarEvent]):
    def __init__(self, db: Session):
        super().__init__(db, CalendarEvent)

    def list_in_range(
        self,
        org_id: UUID,
        user_id: UUID,
        start: datetime,
        end: datetime,
        event_type: Optional[CalendarEventType] = None,
    ) -> List[CalendarEvent]:
        query = self.db.query(CalendarEvent).filter(
            CalendarEvent.organization_id == org_id,
            CalendarEvent.user_id == user_id,
            CalendarEvent.start_time < end,
            CalendarEvent.end_time > start,
        )
        if event_type is not None:
            query = query.filter(CalendarEvent.event_type == event_type)
        return query.order_by(CalendarEvent.start_time).all()
