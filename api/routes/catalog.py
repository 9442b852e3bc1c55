"""Services offered, customer locations and pets"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
import logging
from uuid import UUID
from typing import List, Optional

from api.dependencies import (
    TenantContext,
    get_db,
    get_optional_tenant,
    get_tenant,
    require_admin,
)
from app.exceptions import UnauthorizedError
from domain.mappers import ServiceMapper
from domain.schemas.catalog_schemas import (
    LocationCreate,
    LocationResponse,
    LocationUpdate,
    PetCreate,
    PetResponse,
    PetUpdate,
    ServiceCreate,
    ServiceResponse,
    ServiceUpdate,
)
from services.catalog_service import CatalogService
from services.location_service import LocationService
from services.pet_service import PetService

services_router = APIRouter(prefix="/services", tags=["Services"])
locations_router = APIRouter(prefix="/locations", tags=["Locations"])
pets_router = APIRouter(prefix="/pets", tags=["Pets"])
logger = logging.getLogger("offleash.api.catalog")


# ============================================================
# Services
# ============================================================


@services_router.get("", response_model=List[ServiceResponse])
def list_services(
    org_slug: Optional[str] = Query(None, description="Browse an organization's catalog anonymously"),
    tenant: Optional[TenantContext] = Depends(get_optional_tenant),
    db: Session = Depends(get_db),
):
    """Active services of the caller's organization, or of ``org_slug``"""
    if org_slug:
        services = CatalogService.list_public_services(db, org_slug)
    elif tenant is None:
        raise UnauthorizedError("Missing authorization header")
    else:
        services = CatalogService.list_services(db, tenant.org_id)
    return [ServiceMapper.to_response(s) for s in services]


@services_router.get("/{service_id}", response_model=ServiceResponse)
def get_service(service_id: UUID, tenant: TenantContext = Depends(get_tenant), db: Session = Depends(get_db)):
    return ServiceMapper.to_response(CatalogService.get_service(db, tenant.org_id, service_id))


@services_router.post("", response_model=ServiceResponse, status_code=status.HTTP_201_CREATED)
def create_service(
    data: ServiceCreate,
    tenant: TenantContext = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return ServiceMapper.to_response(CatalogService.create_service(db, tenant.org_id, data))


@services_router.put("/{service_id}", response_model=ServiceResponse)
def update_service(
    service_id: UUID,
    data: ServiceUpdate,
    tenant: TenantContext = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return ServiceMapper.to_response(CatalogService.update_service(db, tenant.org_id, service_id, data))


@services_router.delete("/{service_id}")
def delete_service(
    service_id: UUID,
    tenant: TenantContext = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Deactivate a service; existing bookings keep referring to it"""
    CatalogService.deactivate_service(db, tenant.org_id, service_id)
    return {"status": "ok", "deactivated": str(service_id)}


# ============================================================
# Locations
# ============================================================


@locations_router.get("", response_model=List[LocationResponse])
def list_locations(tenant: TenantContext = Depends(get_tenant), db: Session = Depends(get_db)):
    return [LocationResponse.model_validate(loc) for loc in LocationService.list_locations(db, tenant)]


@locations_router.post("", response_model=LocationResponse, status_code=status.HTTP_201_CREATED)
def create_location(
    data: LocationCreate,
    tenant: TenantContext = Depends(get_tenant),
    db: Session = Depends(get_db),
):
    """Save an address; the first one becomes the default"""
    return LocationResponse.model_validate(LocationService.create_location(db, tenant, data))


@locations_router.put("/{location_id}", response_model=LocationResponse)
def update_location(
    location_id: UUID,
    data: LocationUpdate,
    tenant: TenantContext = Depends(get_tenant),
    db: Session = Depends(get_db),
):
    return LocationResponse.model_validate(LocationService.update_location(db, tenant, location_id, data))


@locations_router.put("/{location_id}/default", response_model=LocationResponse)
def set_default_location(
    location_id: UUID,
    tenant: TenantContext = Depends(get_tenant),
    db: Session = Depends(get_db),
):
    return LocationResponse.model_validate(LocationService.set_default(db, tenant, location_id))


@locations_router.delete("/{location_id}")
def delete_location(
    location_id: UUID,
    tenant: TenantContext = Depends(get_tenant),
    db: Session = Depends(get_db),
):
    LocationService.delete_location(db, tenant, location_id)
    return {"status": "ok", "deleted": str(location_id)}


# ============================================================
# Pets
# ============================================================


@pets_router.get("", response_model=List[PetResponse])
def list_pets(tenant: TenantContext = Depends(get_tenant), db: Session = Depends(get_db)):
    return [PetResponse.model_validate(p) for p in PetService.list_pets(db, tenant)]


@pets_router.get("/{pet_id}", response_model=PetResponse)
def get_pet(pet_id: UUID, tenant: TenantContext = Depends(get_tenant), db: Session = Depends(get_db)):
    return PetResponse.model_validate(PetService.get_pet(db, tenant, pet_id))


@pets_router.post("", response_model=PetResponse, status_code=status.HTTP_201_CREATED)
def create_pet(data: PetCreate, tenant: TenantContext = Depends(get_tenant), db: Session = Depends(get_db)):
    return PetResponse.model_validate(PetService.create_pet(db, tenant, data))


@pets_router.put("/{pet_id}", response_model=PetResponse)
def update_pet(
    pet_id: UUID,
    data: PetUpdate,
    tenant: TenantContext = Depends(get_tenant),
    db: Session = Depends(get_db),
):
    return PetResponse.model_validate(PetService.update_pet(db, tenant, pet_id, data))


@pets_router.delete("/{pet_id}")
def delete_pet(pet_id: UUID, tenant: TenantContext = Depends(get_tenant), db: Session = Depends(get_db)):
    PetService.deactivate_pet(db, tenant, pet_id)
    return {"status": "ok", "deactivated": str(pet_id)}
