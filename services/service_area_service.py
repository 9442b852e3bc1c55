from typing import List, Optional
from uuid import UUID
import logging

from sqlalchemy.orm import Session

from api.dependencies import TenantContext
from app.exceptions import NotFoundError, ServiceValidationError
from core.service_areas import PolygonPoint, ServiceAreaBoundary, find_walkers_for_location
from domain.models import ServiceArea
from domain.schemas.scheduling_schemas import (
    PolygonPointSchema,
    ServiceAreaCheckResponse,
    ServiceAreaCreate,
    ServiceAreaMatchResponse,
    ServiceAreaUpdate,
)
from repositories import ServiceAreaRepository, UserRepository
from services.location_service import validate_coordinates
from services.user_service import UserService

logger = logging.getLogger("offleash.service_areas")

DEFAULT_AREA_COLOR = "#3B82F6"


class ServiceAreaError(ServiceValidationError):
    default_code = "INVALID_SERVICE_AREA"


def validate_polygon(points: List[PolygonPointSchema]) -> ServiceAreaBoundary:
    """Check the polygon and compute its bounding box"""
    if len(points) < 3:
        raise ServiceAreaError("A service area needs at least 3 points")
    for p in points:
        validate_coordinates(p.lat, p.lng)
    return ServiceAreaBoundary.from_polygon(
        walker_id=None,
        area_id=None,
        name="",
        polygon=[PolygonPoint(p.lat, p.lng) for p in points],
    )


def _apply_polygon(area: ServiceArea, points: List[PolygonPointSchema]) -> None:
    bounds = validate_polygon(points)
    area.polygon = [{"lat": p.lat, "lng": p.lng} for p in points]
    area.min_lat, area.max_lat = bounds.min_lat, bounds.max_lat
    area.min_lng, area.max_lng = bounds.min_lng, bounds.max_lng


def to_boundary(area: ServiceArea) -> ServiceAreaBoundary:
    return ServiceAreaBoundary.from_polygon(
        walker_id=area.walker_id,
        area_id=area.id,
        name=area.name,
        polygon=[PolygonPoint(p["lat"], p["lng"]) for p in (area.polygon or [])],
        priority=area.priority,
        price_adjustment_percent=area.price_adjustment_percent,
    )


class ServiceAreaService:
    """Polygons walkers cover, managed by the walker or an admin"""

    @staticmethod
    def _get_area(db: Session, tenant: TenantContext, area_id: UUID, walker_id: Optional[UUID] = None) -> ServiceArea:
        area = ServiceAreaRepository(db).get_in_org(area_id, tenant.org_id)
        if not area or (walker_id is not None and area.walker_id != walker_id):
            raise NotFoundError(f"Service area not found: {area_id}", code="SERVICE_AREA_NOT_FOUND")
        return area

    @staticmethod
    def list_for_walker(db: Session, tenant: TenantContext, walker_id: UUID) -> List[ServiceArea]:
        UserService.get_walker(db, tenant.org_id, walker_id)
        return ServiceAreaRepository(db).list_for_walker(tenant.org_id, walker_id)

    @staticmethod
    def list_for_org(db: Session, tenant: TenantContext) -> List[ServiceArea]:
        return ServiceAreaRepository(db).list_for_org(tenant.org_id)

    @staticmethod
    def create_area(db: Session, tenant: TenantContext, walker_id: UUID, data: ServiceAreaCreate) -> ServiceArea:
        UserService.get_walker(db, tenant.org_id, walker_id)
        area = ServiceArea(
            organization_id=tenant.org_id,
            walker_id=walker_id,
            name=data.name,
            color=data.color or DEFAULT_AREA_COLOR,
            is_active=True,
            priority=data.priority,
            price_adjustment_percent=data.price_adjustment_percent,
            notes=data.notes,
        )
        _apply_polygon(area, data.polygon)
        try:
            area = ServiceAreaRepository(db).create(area)
        except Exception:
            db.rollback()
            logger.exception("Error creating service area for walker %s", walker_id)
            raise
        logger.info(f"service_area_created area_id={area.id} walker_id={walker_id}")
        return area

    @staticmethod
    def update_area(
        db: Session,
        tenant: TenantContext,
        area_id: UUID,
        data: ServiceAreaUpdate,
        walker_id: Optional[UUID] = None,
    ) -> ServiceArea:
        """``walker_id`` restricts the update to that walker's own areas"""
        area = ServiceAreaService._get_area(db, tenant, area_id, walker_id)
        updates = data.model_dump(exclude_unset=True)
        polygon = updates.pop("polygon", None)
        try:
            if polygon is not None:
                _apply_polygon(area, data.polygon)
            for field, value in updates.items():
                setattr(area, field, value)
            return ServiceAreaRepository(db).update(area)
        except ServiceValidationError:
            db.rollback()
            raise
        except Exception:
            db.rollback()
            logger.exception("Error updating service area %s", area_id)
            raise

    @staticmethod
    def delete_area(db: Session, tenant: TenantContext, area_id: UUID, walker_id: Optional[UUID] = None) -> None:
        area = ServiceAreaService._get_area(db, tenant, area_id, walker_id)
        try:
            ServiceAreaRepository(db).delete(area)
        except Exception:
            db.rollback()
            logger.exception("Error deleting service area %s", area_id)
            raise
        logger.info(f"service_area_deleted area_id={area_id}")

    @staticmethod
    def check_location(db: Session, tenant: TenantContext, latitude: float, longitude: float) -> ServiceAreaCheckResponse:
        coords = validate_coordinates(latitude, longitude)
        candidates = ServiceAreaRepository(db).list_active_containing_box(tenant.org_id, latitude, longitude)
        matches = find_walkers_for_location([to_boundary(a) for a in candidates], coords)

        user_repo = UserRepository(db)
        walkers = []
        for m in matches:
            walker = user_repo.get_by_id(m.walker_id)
            walkers.append(
                ServiceAreaMatchResponse(
                    walker_id=m.walker_id,
                    walker_name=walker.full_name if walker else None,
                    area_id=m.area_id,
                    area_name=m.area_name,
                    priority=m.priority,
                    price_adjustment_percent=m.price_adjustment_percent,
                )
            )
        return ServiceAreaCheckResponse(
            latitude=latitude,
            longitude=longitude,
            is_serviced=bool(walkers),
            walkers=walkers,
        )

