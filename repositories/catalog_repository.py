"""
Catalog Repositories - services, customer locations and pets
"""

from typing import List, Optional
from uuid import UUID
from sqlalchemy.orm import Session

from repositories.base import BaseRepository
from domain.models import Service, Location, Pet


class ServiceRepository(BaseRepository[Service]):
    """Repository for bookable services"""

    def __init__(self, db: Session):
        super().__init__(db, Service)

    def list_for_org(self, org_id: UUID, include_inactive: bool = False) -> List[Service]:
        query = self.db.query(Service).filter(Service.organization_id == org_id)
        if not include_inactive:
            query = query.filter(Service.is_active.is_(True))
        return query.order_by(Service.name).all()


class LocationRepository(BaseRepository[Location]):
    def __init__(self, db: Session):
        super().__init__(db, Location)

    def list_for_user(self, org_id: UUID, user_id: UUID) -> List[Location]:
        return (
            self.db.query(Location)
            .filter(Location.organization_id == org_id, Location.user_id == user_id)
            .order_by(Location.is_default.desc(), Location.created_at)
            .all()
        )

    def count_for_user(self, org_id: UUID, user_id: UUID) -> int:
        return (
            self.db.query(Location)
            .filter(Location.organization_id == org_id, Location.user_id == user_id)
            .count()
        )

    def clear_default(self, org_id: UUID, user_id: UUID) -> None:
        self.db.query(Location).filter(
            Location.organization_id == org_id,
            Location.user_id == user_id,
            Location.is_default.is_(True),
        ).update({Location.is_default: False}, synchronize_session=False)

    def get_many(self, org_id: UUID, location_ids: List[UUID]) -> List[Location]:
        if not location_ids:
            return []
        return (
            self.db.query(Location)
            .filter(Location.organization_id == org_id, Location.id.in_(location_ids))
            .all()
        )


class PetRepository(BaseRepository[Pet]):
    def __init__(self, db: Session):
        super().__init__(db, Pet)

    def list_for_owner(self, org_id: UUID, owner_id: UUID) -> List[Pet]:
        return (
            self.db.query(Pet)
            .filter(
                Pet.organization_id == org_id,
                Pet.owner_id == owner_id,
                Pet.is_active.is_(True),
            )
            .order_by(Pet.name)
            .all()
        )

    def get_for_owner(self, pet_id: UUID, org_id: UUID, owner_id: UUID) -> Optional[Pet]:
        return (
            self.db.query(Pet)
            .filter(
                Pet.id == pet_id,
                Pet.organization_id == org_id,
                Pet.owner_id == owner_id,
            )
            .first()
        )
