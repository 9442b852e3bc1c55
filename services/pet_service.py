from typing import List
from uuid import UUID
import logging

from sqlalchemy.orm import Session

from api.dependencies import TenantContext
from app.exceptions import NotFoundError
from domain.models import Pet
from domain.schemas.catalog_schemas import PetCreate, PetUpdate
from repositories import PetRepository

logger = logging.getLogger("offleash.pets")


class PetService:
    @staticmethod
    def get_pet(db: Session, tenant: TenantContext, pet_id: UUID) -> Pet:
        pet = PetRepository(db).get_for_owner(pet_id, tenant.org_id, tenant.user_id)
        if not pet or not pet.is_active:
            raise NotFoundError(f"Pet not found: {pet_id}", code="PET_NOT_FOUND")
        return pet

    @staticmethod
    def list_pets(db: Session, tenant: TenantContext) -> List[Pet]:
        return PetRepository(db).list_for_owner(tenant.org_id, tenant.user_id)

    @staticmethod
    def create_pet(db: Session, tenant: TenantContext, data: PetCreate) -> Pet:
        pet = Pet(organization_id=tenant.org_id, owner_id=tenant.user_id, **data.model_dump())
        try:
            pet = PetRepository(db).create(pet)
        except Exception:
            db.rollback()
            logger.exception("Error creating pet for user %s", tenant.user_id)
            raise
        logger.info(f"pet_created pet_id={pet.id} owner_id={tenant.user_id}")
        return pet

    @staticmethod
    def update_pet(db: Session, tenant: TenantContext, pet_id: UUID, data: PetUpdate) -> Pet:
        pet = PetService.get_pet(db, tenant, pet_id)
        try:
            for field, value in data.model_dump(exclude_unset=True).items():
                setattr(pet, field, value)
            return PetRepository(db).update(pet)
        except Exception:
            db.rollback()
            logger.exception("Error updating pet %s", pet_id)
            raise

    @staticmethod
    def deactivate_pet(db: Session, tenant: TenantContext, pet_id: UUID) -> None:
        pet = PetService.get_pet(db, tenant, pet_id)
        try:
            pet.is_active = False
            PetRepository(db).update(pet)
        except Exception:
            db.rollback()
            logger.exception("Error removing pet %s", pet_id)
            raise
