"""
Scheduling Repositories - working hours, blocks, service areas, walker
positions and the travel time cache
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID
from sqlalchemy.orm import Session

from repositories.base import BaseRepository
from domain.models import (
    WorkingHours,
    Block,
    ServiceArea,
    WalkerLocation,
    TravelTimeCache,
)


class WorkingHoursRepository(BaseRepository[WorkingHours]):
    def __init__(self, db: Session):
        super().__init__(db, WorkingHours)

    def list_for_walker(self, org_id: UUID, walker_id: UUID) -> List[WorkingHours]:
        return (
            self.db.query(WorkingHours)
            .filter(WorkingHours.organization_id == org_id, WorkingHours.walker_id == walker_id)
            .order_by(WorkingHours.day_of_week)
            .all()
        )

    def get_for_day(self, org_id: UUID, walker_id: UUID, day_of_week: int) -> Optional[WorkingHours]:
        return (
            self.db.query(WorkingHours)
            .filter(
                WorkingHours.organization_id == org_id,
                WorkingHours.walker_id == walker_id,
                WorkingHours.day_of_week == day_of_week,
            )
            .first()
        )

    def delete_for_walker(self, org_id: UUID, walker_id: UUID) -> int:
        return (
            self.db.query(WorkingHours)
            .filter(WorkingHours.organization_id == org_id, WorkingHours.walker_id == walker_id)
            .delete(synchronize_session=False)
        )


class BlockRepository(BaseRepository[Block]):
    def __init__(self, db: Session):
        super().__init__(db, Block)

    def list_overlapping(
        self,
        org_id: UUID,
        walker_id: UUID,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> List[Block]:
        query = self.db.query(Block).filter(
            Block.organization_id == org_id, Block.walker_id == walker_id
        )
        if end is not None:
            query = query.filter(Block.start_time < end)
        if start is not None:
            query = query.filter(Block.end_time > start)
        return query.order_by(Block.start_time).all()


class ServiceAreaRepository(BaseRepository[ServiceArea]):
    def __init__(self, db: Session):
        super().__init__(db, ServiceArea)

    def list_for_org(self, org_id: UUID, active_only: bool = False) -> List[ServiceArea]:
        query = self.db.query(ServiceArea).filter(ServiceArea.organization_id == org_id)
        if active_only:
            query = query.filter(ServiceArea.is_active.is_(True))
        return query.order_by(ServiceArea.priority, ServiceArea.created_at).all()

    def list_for_walker(self, org_id: UUID, walker_id: UUID) -> List[ServiceArea]:
        return (
            self.db.query(ServiceArea)
            .filter(ServiceArea.organization_id == org_id, ServiceArea.walker_id == walker_id)
            .order_by(ServiceArea.priority, ServiceArea.created_at)
            .all()
        )

    def list_active_containing_box(self, org_id: UUID, lat: float, lng: float) -> List[ServiceArea]:
        """Active areas whose bounding box holds the point; polygon test happens in core"""
        return (
            self.db.query(ServiceArea)
            .filter(
                ServiceArea.organization_id == org_id,
                ServiceArea.is_active.is_(True),
                ServiceArea.min_lat <= lat,
                ServiceArea.max_lat >= lat,
                ServiceArea.min_lng <= lng,
                ServiceArea.max_lng >= lng,
            )
            .all()
        )


class WalkerLocationRepository(BaseRepository[WalkerLocation]):
    def __init__(self, db: Session):
        super().__init__(db, WalkerLocation)

    def get_for_walker(self, org_id: UUID, walker_id: UUID) -> Optional[WalkerLocation]:
        return (
            self.db.query(WalkerLocation)
            .filter(WalkerLocation.organization_id == org_id, WalkerLocation.walker_id == walker_id)
            .first()
        )


class TravelTimeCacheRepository(BaseRepository[TravelTimeCache]):
    def __init__(self, db: Session):
        super().__init__(db, TravelTimeCache)

    def get_fresh(
        self, origin_location_id: UUID, destination_location_id: UUID, since: datetime
    ) -> Optional[TravelTimeCache]:
        return (
            self.db.query(TravelTimeCache)
            .filter(
                TravelTimeCache.origin_location_id == origin_location_id,
                TravelTimeCache.destination_location_id == destination_location_id,
                TravelTimeCache.calculated_at >= since,
            )
            .order_by(TravelTimeCache.calculated_at.desc())
            .first()
        )

    def get_fresh_from_point(
        self, latitude: float, longitude: float, destination_location_id: UUID, since: datetime
    ) -> Optional[TravelTimeCache]:
        return (
            self.db.query(TravelTimeCache)
            .filter(
                TravelTimeCache.origin_location_id.is_(None),
                TravelTimeCache.origin_latitude == latitude,
                TravelTimeCache.origin_longitude == longitude,
                TravelTimeCache.destination_location_id == destination_location_id,
                TravelTimeCache.calculated_at >= since,
            )
            .order_by(TravelTimeCache.calculated_at.desc())
            .first()
        )

    def list_fresh_between(self, location_ids: List[UUID], since: datetime) -> List[TravelTimeCache]:
        """All fresh entries whose origin and destination are both in ``location_ids``"""
        if not location_ids:
            return []
        return (
            self.db.query(TravelTimeCache)
            .filter(
                TravelTimeCache.origin_location_id.in_(location_ids),
                TravelTimeCache.destination_location_id.in_(location_ids),
                TravelTimeCache.calculated_at >= since,
            )
            .all()
        )
