from typing import List
from uuid import UUID
import logging

from sqlalchemy.orm import Session

from app.exceptions import NotFoundError
from domain.models import Service
from domain.schemas.catalog_schemas import ServiceCreate, ServiceUpdate
from repositories import OrganizationRepository, ServiceRepository
from app.exceptions import organization_not_found

logger = logging.getLogger("offleash.catalog")


def service_not_found(service_id: UUID) -> NotFoundError:
    return NotFoundError(f"Service not found: {service_id}", code="SERVICE_NOT_FOUND")


class CatalogService:
    """Bookable services of an organization"""

    @staticmethod
    def list_services(db: Session, org_id: UUID, include_inactive: bool = False) -> List[Service]:
        return ServiceRepository(db).list_for_org(org_id, include_inactive=include_inactive)

    @staticmethod
    def list_public_services(db: Session, org_slug: str) -> List[Service]:
        """Anonymous catalog browsing by organization slug"""
        org = OrganizationRepository(db).get_active_by_slug(org_slug)
        if not org:
            raise organization_not_found(org_slug)
        return ServiceRepository(db).list_for_org(org.id)

    @staticmethod
    def get_service(db: Session, org_id: UUID, service_id: UUID) -> Service:
        service = ServiceRepository(db).get_in_org(service_id, org_id)
        if not service:
            raise service_not_found(service_id)
        return service

    @staticmethod
    def create_service(db: Session, org_id: UUID, data: ServiceCreate) -> Service:
        service = Service(
            organization_id=org_id,
            name=data.name,
            description=data.description,
            duration_minutes=data.duration_minutes,
            base_price_cents=data.base_price_cents,
            is_active=True,
        )
        try:
            service = ServiceRepository(db).create(service)
        except Exception:
            db.rollback()
            logger.exception("Error creating service in org %s", org_id)
            raise
        logger.info(f"service_created service_id={service.id} org_id={org_id}")
        return service

    @staticmethod
    def update_service(db: Session, org_id: UUID, service_id: UUID, data: ServiceUpdate) -> Service:
        repo = ServiceRepository(db)
        service = CatalogService.get_service(db, org_id, service_id)
        try:
            for field, value in data.model_dump(exclude_unset=True).items():
                setattr(service, field, value)
            return repo.update(service)
        except Exception:
            db.rollback()
            logger.exception("Error updating service %s", service_id)
            raise

    @staticmethod
    def deactivate_service(db: Session, org_id: UUID, service_id: UUID) -> None:
        """Services are never hard-deleted; bookings keep referencing them"""
        repo = ServiceRepository(db)
        service = CatalogService.get_service(db, org_id, service_id)
        try:
            service.is_active = False
            repo.update(service)
        except Exception:
            db.rollback()
            logger.exception("Error deactivating service %s", service_id)
            raise
        logger.info(f"service_deactivated service_id={service_id}")
