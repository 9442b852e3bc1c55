from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterable, Optional
from uuid import UUID
import logging

from sqlalchemy.orm import Session

from adapters import maps_adapter
from api.dependencies import TenantContext
from app.config import settings
from app.exceptions import ForbiddenError, NotFoundError, OffleashError, ServiceValidationError
from core.availability import TravelTimeMatrix
from core.geo import Coordinates
from core.timezones import ensure_utc, utcnow
from core.traffic import TrafficConfig
from domain.models import Location, TravelTimeCache, WalkerLocation
from domain.schemas.scheduling_schemas import (
    TravelTimeResponse,
    WalkerLocationResponse,
    WalkerLocationUpdate,
)
from repositories import LocationRepository, TravelTimeCacheRepository, WalkerLocationRepository
from services.location_service import validate_coordinates
from services.user_service import UserService

logger = logging.getLogger("offleash.travel")


@dataclass(frozen=True)
class TravelEstimate:
    minutes: int
    distance_meters: int
    is_cached: bool
    calculated_at: datetime


def location_coordinates(location: Location) -> Coordinates:
    return Coordinates.unchecked(location.latitude, location.longitude)


def _lookup_remote(origin: Coordinates, destination: Coordinates):
    """Maps adapter first, haversine estimate when it is unavailable or fails"""
    try:
        result = maps_adapter.get_travel_time(origin, destination)
        return result.duration_minutes, result.distance_meters
    except OffleashError as e:
        logger.debug("Maps lookup unavailable, estimating: %s", e.message)
        return origin.estimate_travel_minutes(destination), origin.distance_meters(destination)


def _store(db: Session, entry: TravelTimeCache) -> None:
    try:
        db.add(entry)
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("Could not cache travel time to location %s", entry.destination_location_id)


def _from_cache(entry: TravelTimeCache) -> TravelEstimate:
    return TravelEstimate(
        minutes=entry.travel_minutes,
        distance_meters=entry.distance_meters,
        is_cached=True,
        calculated_at=entry.calculated_at,
    )


class TravelService:
    """Drive times between locations and live walker positions"""

    @staticmethod
    def between_locations(
        db: Session, origin: Location, destination: Location, ttl_minutes: Optional[int] = None
    ) -> TravelEstimate:
        ttl = ttl_minutes if ttl_minutes is not None else settings.travel_cache_ttl_minutes
        now = utcnow()
        cached = TravelTimeCacheRepository(db).get_fresh(
            origin.id, destination.id, now - timedelta(minutes=ttl)
        )
        if cached is not None:
            return _from_cache(cached)

        minutes, meters = _lookup_remote(location_coordinates(origin), location_coordinates(destination))
        _store(
            db,
            TravelTimeCache(
                origin_location_id=origin.id,
                destination_location_id=destination.id,
                travel_minutes=minutes,
                distance_meters=meters,
                calculated_at=now,
            ),
        )
        return TravelEstimate(minutes, meters, False, now)

    @staticmethod
    def from_point(
        db: Session, origin: Coordinates, destination: Location, ttl_minutes: Optional[int] = None
    ) -> TravelEstimate:
        ttl = ttl_minutes if ttl_minutes is not None else settings.travel_cache_ttl_minutes
        now = utcnow()
        cached = TravelTimeCacheRepository(db).get_fresh_from_point(
            origin.latitude, origin.longitude, destination.id, now - timedelta(minutes=ttl)
        )
        if cached is not None:
            return _from_cache(cached)

        minutes, meters = _lookup_remote(origin, location_coordinates(destination))
        _store(
            db,
            TravelTimeCache(
                origin_latitude=origin.latitude,
                origin_longitude=origin.longitude,
                destination_location_id=destination.id,
                travel_minutes=minutes,
                distance_meters=meters,
                calculated_at=now,
            ),
        )
        return TravelEstimate(minutes, meters, False, now)

    @staticmethod
    def get_travel_time(
        db: Session,
        tenant: TenantContext,
        destination_location_id: UUID,
        origin_location_id: Optional[UUID] = None,
        origin_lat: Optional[float] = None,
        origin_lng: Optional[float] = None,
    ) -> TravelTimeResponse:
        """Travel from a saved location or a raw point to a saved location"""
        repo = LocationRepository(db)
        destination = repo.get_in_org(destination_location_id, tenant.org_id)
        if destination is None:
            raise NotFoundError("Destination location not found", code="LOCATION_NOT_FOUND")

        if origin_location_id is not None:
            origin = repo.get_in_org(origin_location_id, tenant.org_id)
            if origin is None:
                raise NotFoundError("Origin location not found", code="LOCATION_NOT_FOUND")
            estimate = TravelService.between_locations(db, origin, destination)
        elif origin_lat is not None and origin_lng is not None:
            estimate = TravelService.from_point(db, validate_coordinates(origin_lat, origin_lng), destination)
        else:
            raise ServiceValidationError(
                "Provide origin_location_id or both origin_lat and origin_lng"
            )

        return TravelTimeResponse(
            travel_minutes=estimate.minutes,
            distance_meters=estimate.distance_meters,
            is_cached=estimate.is_cached,
            calculated_at=estimate.calculated_at,
        )

    @staticmethod
    def traffic_matrix(
        db: Session, location_ids: Iterable[UUID], on_date: date, traffic: Optional[TrafficConfig] = None
    ) -> TravelTimeMatrix:
        """Fresh cache entries between the given locations, adjusted for traffic at noon"""
        traffic = traffic or TrafficConfig()
        noon = datetime(on_date.year, on_date.month, on_date.day, 12)
        since = utcnow() - timedelta(minutes=traffic.get_cache_ttl_minutes(noon))
        matrix = TravelTimeMatrix()
        for entry in TravelTimeCacheRepository(db).list_fresh_between(list(set(location_ids)), since):
            matrix.insert(
                entry.origin_location_id,
                entry.destination_location_id,
                traffic.adjust_travel_time(entry.travel_minutes, noon),
            )
        return matrix

    # ------------------------------------------------------------------
    # Live walker position
    # ------------------------------------------------------------------

    @staticmethod
    def is_stale(row: WalkerLocation, now: Optional[datetime] = None) -> bool:
        if row.updated_at is None:
            return True
        now = now or utcnow()
        return now - ensure_utc(row.updated_at) > timedelta(minutes=settings.walker_location_stale_minutes)

    @staticmethod
    def to_location_response(row: WalkerLocation) -> WalkerLocationResponse:
        return WalkerLocationResponse(
            walker_id=row.walker_id,
            latitude=row.latitude,
            longitude=row.longitude,
            accuracy=row.accuracy,
            heading=row.heading,
            speed=row.speed,
            is_on_duty=row.is_on_duty,
            updated_at=row.updated_at,
            is_stale=TravelService.is_stale(row),
        )

    @staticmethod
    def fresh_walker_position(db: Session, org_id: UUID, walker_id: UUID) -> Optional[Coordinates]:
        row = WalkerLocationRepository(db).get_for_walker(org_id, walker_id)
        if row is None or TravelService.is_stale(row):
            return None
        return Coordinates.unchecked(row.latitude, row.longitude)

    @staticmethod
    def update_walker_location(
        db: Session, tenant: TenantContext, walker_id: UUID, data: WalkerLocationUpdate
    ) -> WalkerLocationResponse:
        if tenant.user_id != walker_id:
            raise ForbiddenError("Walkers can only report their own location")
        UserService.get_walker(db, tenant.org_id, walker_id)
        validate_coordinates(data.latitude, data.longitude)

        repo = WalkerLocationRepository(db)
        row = repo.get_for_walker(tenant.org_id, walker_id)
        try:
            if row is None:
                row = WalkerLocation(organization_id=tenant.org_id, walker_id=walker_id)
                db.add(row)
            row.latitude = data.latitude
            row.longitude = data.longitude
            row.accuracy = data.accuracy
            row.heading = data.heading
            row.speed = data.speed
            on_duty = True if data.is_on_duty is None else data.is_on_duty
            now = utcnow()
            if row.is_on_duty != on_duty:
                row.duty_changed_at = now
            row.is_on_duty = on_duty
            row.updated_at = now
            db.commit()
            db.refresh(row)
        except Exception:
            db.rollback()
            logger.exception("Error updating location for walker %s", walker_id)
            raise
        return TravelService.to_location_response(row)

    @staticmethod
    def get_walker_location(db: Session, tenant: TenantContext, walker_id: UUID) -> Optional[WalkerLocationResponse]:
        """None when the walker has never reported a position"""
        if not (tenant.is_admin or tenant.user_id == walker_id):
            raise ForbiddenError("Only admins or the walker may view this location")
        row = WalkerLocationRepository(db).get_for_walker(tenant.org_id, walker_id)
        return TravelService.to_location_response(row) if row else None

    @staticmethod
    def set_on_duty(db: Session, tenant: TenantContext, walker_id: UUID, is_on_duty: bool) -> bool:
        if tenant.user_id != walker_id:
            raise ForbiddenError("Walkers can only change their own duty status")
        row = WalkerLocationRepository(db).get_for_walker(tenant.org_id, walker_id)
        if row is None:
            raise NotFoundError("No location reported yet", code="WALKER_LOCATION_NOT_FOUND")
        try:
            row.is_on_duty = is_on_duty
            row.duty_changed_at = utcnow()
            db.commit()
        except Exception:
            db.rollback()
            logger.exception("Error updating duty status for walker %s", walker_id)
            raise
        logger.info(f"walker_duty_changed walker_id={walker_id} is_on_duty={is_on_duty}")
        return is_on_duty
