"""
Shared data access for the tenant-scoped repositories.
"""

from typing import Generic, Optional, Type, TypeVar
from uuid import UUID
from sqlalchemy.orm import Session

ModelType = TypeVar("ModelType")


class BaseRepository(Generic[ModelType]):
    """
    Lookup and write helpers every repository inherits.

    Rows of tenant-scoped models carry ``organization_id``. Services look them
    up with ``get_in_org`` so a row of another organization reads as missing.
    Writes commit immediately; services that stage several rows use the session
    directly and commit once.
    """

    def __init__(self, db: Session, model: Type[ModelType]):
        self.db = db
        self.model = model

    def get_by_id(self, entity_id: UUID) -> Optional[ModelType]:
        return self.db.query(self.model).filter(self.model.id == entity_id).first()

    def get_in_org(self, entity_id: UUID, org_id: UUID) -> Optional[ModelType]:
        return (
            self.db.query(self.model)
            .filter(self.model.id == entity_id, self.model.organization_id == org_id)
            .first()
        )

    def create(self, entity: ModelType) -> ModelType:
        self.db.add(entity)
        self.db.commit()
        self.db.refresh(entity)
        return entity

    def update(self, entity: ModelType) -> ModelType:
        """Commit pending attribute changes on ``entity`` and reload it"""
        self.db.commit()
        self.db.refresh(entity)
        return entity

    def delete(self, entity: ModelType) -> None:
        self.db.delete(entity)
        self.db.commit()
