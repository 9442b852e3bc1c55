"""Walker working hours, blocked time and service areas"""

from datetime import datetime
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
import logging
from uuid import UUID
from typing import List, Optional

from api.dependencies import TenantContext, get_db, get_tenant, require_admin, require_walker
from domain.mappers import ServiceAreaMapper
from domain.schemas.scheduling_schemas import (
    BlockCreate,
    BlockResponse,
    ServiceAreaCheckResponse,
    ServiceAreaCreate,
    ServiceAreaResponse,
    ServiceAreaUpdate,
    WorkingHoursResponse,
    WorkingHoursUpdate,
)
from services.schedule_service import ScheduleService
from services.service_area_service import ServiceAreaService

router = APIRouter(tags=["Scheduling"])
logger = logging.getLogger("offleash.api.scheduling")


# ============================================================
# Working hours
# ============================================================


@router.get("/working-hours/{walker_id}", response_model=List[WorkingHoursResponse])
def get_working_hours(walker_id: UUID, tenant: TenantContext = Depends(get_tenant), db: Session = Depends(get_db)):
    return ScheduleService.get_working_hours(db, tenant, walker_id)


@router.put("/working-hours/{walker_id}", response_model=List[WorkingHoursResponse])
def replace_working_hours(
    walker_id: UUID,
    data: WorkingHoursUpdate,
    tenant: TenantContext = Depends(get_tenant),
    db: Session = Depends(get_db),
):
    """Replace the walker's whole week"""
    return ScheduleService.replace_working_hours(db, tenant, walker_id, data)


@router.delete("/working-hours/{walker_id}")
def clear_working_hours(walker_id: UUID, tenant: TenantContext = Depends(get_tenant), db: Session = Depends(get_db)):
    removed = ScheduleService.clear_working_hours(db, tenant, walker_id)
    return {"status": "ok", "deleted": removed}


# ============================================================
# Blocks
# ============================================================


@router.get("/blocks", response_model=List[BlockResponse])
def list_blocks(
    walker_id: Optional[UUID] = Query(None),
    start: Optional[datetime] = Query(None),
    end: Optional[datetime] = Query(None),
    tenant: TenantContext = Depends(get_tenant),
    db: Session = Depends(get_db),
):
    blocks = ScheduleService.list_blocks(db, tenant, walker_id, start, end)
    return [BlockResponse.model_validate(b) for b in blocks]


@router.post("/blocks", response_model=BlockResponse, status_code=status.HTTP_201_CREATED)
def create_block(data: BlockCreate, tenant: TenantContext = Depends(get_tenant), db: Session = Depends(get_db)):
    return BlockResponse.model_validate(ScheduleService.create_block(db, tenant, data))


@router.delete("/blocks/{block_id}")
def delete_block(block_id: UUID, tenant: TenantContext = Depends(get_tenant), db: Session = Depends(get_db)):
    ScheduleService.delete_block(db, tenant, block_id)
    return {"status": "ok", "deleted": str(block_id)}


# ============================================================
# Service areas
# ============================================================


@router.get("/walker/service-areas", response_model=List[ServiceAreaResponse])
def list_my_areas(tenant: TenantContext = Depends(require_walker), db: Session = Depends(get_db)):
    areas = ServiceAreaService.list_for_walker(db, tenant, tenant.user_id)
    return [ServiceAreaMapper.to_response(a) for a in areas]


@router.post(
    "/walker/service-areas", response_model=ServiceAreaResponse, status_code=status.HTTP_201_CREATED
)
def create_my_area(
    data: ServiceAreaCreate,
    tenant: TenantContext = Depends(require_walker),
    db: Session = Depends(get_db),
):
    return ServiceAreaMapper.to_response(ServiceAreaService.create_area(db, tenant, tenant.user_id, data))


@router.put("/walker/service-areas/{area_id}", response_model=ServiceAreaResponse)
def update_my_area(
    area_id: UUID,
    data: ServiceAreaUpdate,
    tenant: TenantContext = Depends(require_walker),
    db: Session = Depends(get_db),
):
    area = ServiceAreaService.update_area(db, tenant, area_id, data, walker_id=tenant.user_id)
    return ServiceAreaMapper.to_response(area)


@router.delete("/walker/service-areas/{area_id}")
def delete_my_area(area_id: UUID, tenant: TenantContext = Depends(require_walker), db: Session = Depends(get_db)):
    ServiceAreaService.delete_area(db, tenant, area_id, walker_id=tenant.user_id)
    return {"status": "ok", "deleted": str(area_id)}


@router.get("/admin/service-areas", response_model=List[ServiceAreaResponse])
def list_all_areas(tenant: TenantContext = Depends(require_admin), db: Session = Depends(get_db)):
    """Every area in the organization"""
    return [ServiceAreaMapper.to_response(a) for a in ServiceAreaService.list_for_org(db, tenant)]


@router.get("/admin/walkers/{walker_id}/service-areas", response_model=List[ServiceAreaResponse])
def list_walker_areas(
    walker_id: UUID,
    tenant: TenantContext = Depends(require_admin),
    db: Session = Depends(get_db),
):
    areas = ServiceAreaService.list_for_walker(db, tenant, walker_id)
    return [ServiceAreaMapper.to_response(a) for a in areas]


@router.post(
    "/admin/walkers/{walker_id}/service-areas",
    response_model=ServiceAreaResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_walker_area(
    walker_id: UUID,
    data: ServiceAreaCreate,
    tenant: TenantContext = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return ServiceAreaMapper.to_response(ServiceAreaService.create_area(db, tenant, walker_id, data))


@router.put("/admin/service-areas/{area_id}", response_model=ServiceAreaResponse)
def update_any_area(
    area_id: UUID,
    data: ServiceAreaUpdate,
    tenant: TenantContext = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return ServiceAreaMapper.to_response(ServiceAreaService.update_area(db, tenant, area_id, data))


@router.delete("/admin/service-areas/{area_id}")
def delete_any_area(area_id: UUID, tenant: TenantContext = Depends(require_admin), db: Session = Depends(get_db)):
    ServiceAreaService.delete_area(db, tenant, area_id)
    return {"status": "ok", "deleted": str(area_id)}


@router.get("/service-areas/check", response_model=ServiceAreaCheckResponse)
def check_location(
    lat: float = Query(...),
    lng: float = Query(...),
    tenant: TenantContext = Depends(get_tenant),
    db: Session = Depends(get_db),
):
    """Walkers whose active areas contain the point, best priority first"""
    return ServiceAreaService.check_location(db, tenant, lat, lng)
