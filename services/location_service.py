from typing import List
from uuid import UUID
import logging

from sqlalchemy.orm import Session

from api.dependencies import TenantContext
from app.exceptions import ForbiddenError, NotFoundError, ServiceValidationError
from core.geo import Coordinates
from domain.models import Location
from domain.schemas.catalog_schemas import LocationCreate, LocationUpdate
from repositories import LocationRepository

logger = logging.getLogger("offleash.locations")


def validate_coordinates(latitude: float, longitude: float) -> Coordinates:
    try:
        return Coordinates(latitude, longitude)
    except ValueError as e:
        raise ServiceValidationError(str(e), code="INVALID_COORDINATES")


class LocationService:
    """Addresses where a customer's walks start"""

    @staticmethod
    def get_owned(db: Session, tenant: TenantContext, location_id: UUID) -> Location:
        """
        Raises:
            NotFoundError: no such location in the caller's organization
            ForbiddenError: the location belongs to another customer
        """
        location = LocationRepository(db).get_in_org(location_id, tenant.org_id)
        if not location:
            raise NotFoundError(f"Location not found: {location_id}", code="LOCATION_NOT_FOUND")
        if location.user_id != tenant.user_id:
            raise ForbiddenError("Location does not belong to you")
        return location

    @staticmethod
    def list_locations(db: Session, tenant: TenantContext) -> List[Location]:
        return LocationRepository(db).list_for_user(tenant.org_id, tenant.user_id)

    @staticmethod
    def create_location(db: Session, tenant: TenantContext, data: LocationCreate) -> Location:
        validate_coordinates(data.latitude, data.longitude)
        repo = LocationRepository(db)

        # The first location always becomes the default
        make_default = bool(data.is_default) or repo.count_for_user(tenant.org_id, tenant.user_id) == 0
        try:
            if make_default:
                repo.clear_default(tenant.org_id, tenant.user_id)
            location = Location(
                organization_id=tenant.org_id,
                user_id=tenant.user_id,
                name=data.name,
                address=data.address,
                city=data.city,
                state=data.state,
                zip_code=data.zip_code,
                latitude=data.latitude,
                longitude=data.longitude,
                notes=data.notes,
                is_default=make_default,
            )
            location = repo.create(location)
        except Exception:
            db.rollback()
            logger.exception("Error creating location for user %s", tenant.user_id)
            raise

        logger.info(f"location_created location_id={location.id} user_id={tenant.user_id}")
        return location

    @staticmethod
    def update_location(db: Session, tenant: TenantContext, location_id: UUID, data: LocationUpdate) -> Location:
        location = LocationService.get_owned(db, tenant, location_id)
        updates = data.model_dump(exclude_unset=True)
        validate_coordinates(
            updates.get("latitude", location.latitude),
            updates.get("longitude", location.longitude),
        )
        try:
            for field, value in updates.items():
                setattr(location, field, value)
            return LocationRepository(db).update(location)
        except Exception:
            db.rollback()
            logger.exception("Error updating location %s", location_id)
            raise

    @staticmethod
    def set_default(db: Session, tenant: TenantContext, location_id: UUID) -> Location:
        repo = LocationRepository(db)
        location = LocationService.get_owned(db, tenant, location_id)
        try:
            repo.clear_default(tenant.org_id, tenant.user_id)
            location.is_default = True
            return repo.update(location)
        except Exception:
            db.rollback()
            logger.exception("Error setting default location %s", location_id)
            raise

    @staticmethod
    def delete_location(db: Session, tenant: TenantContext, location_id: UUID) -> None:
        repo = LocationRepository(db)
        location = LocationService.get_owned(db, tenant, location_id)
        was_default = location.is_default
        try:
            db.delete(location)
            db.flush()
            if was_default:
                remaining = repo.list_for_user(tenant.org_id, tenant.user_id)
                if remaining:
                    remaining[0].is_default = True
            db.commit()
        except Exception:
            db.rollback()
            logger.exception("Error deleting location %s", location_id)
            raise
        logger.info(f"location_deleted location_id={location_id}")
