"""Walker profiles and the specialization catalog"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
import logging
from uuid import UUID
from typing import List

from api.dependencies import TenantContext, get_db, get_tenant, require_admin, require_walker
from domain.schemas.walker_schemas import (
    SpecializationOption,
    WalkerProfileResponse,
    WalkerProfileUpdate,
)
from services.walker_profile_service import WalkerProfileService

router = APIRouter(prefix="/walker", tags=["Walker Profiles"])
admin_router = APIRouter(prefix="/admin/walkers", tags=["Admin"])
logger = logging.getLogger("offleash.api.profiles")


@router.get("/profile", response_model=WalkerProfileResponse)
def get_my_profile(tenant: TenantContext = Depends(require_walker), db: Session = Depends(get_db)):
    return WalkerProfileService.get_my_profile(db, tenant)


@router.put("/profile", response_model=WalkerProfileResponse)
def update_my_profile(
    data: WalkerProfileUpdate,
    tenant: TenantContext = Depends(require_walker),
    db: Session = Depends(get_db),
):
    return WalkerProfileService.update_profile(db, tenant, tenant.user_id, data)


@router.get("/specializations", response_model=List[SpecializationOption])
def list_specializations(tenant: TenantContext = Depends(get_tenant)):
    return WalkerProfileService.list_specializations()


# ============================================================
# Admin
# ============================================================


@admin_router.get("/{walker_id}/profile", response_model=WalkerProfileResponse)
def get_walker_profile(walker_id: UUID, tenant: TenantContext = Depends(require_admin), db: Session = Depends(get_db)):
    return WalkerProfileService.get_profile(db, tenant, walker_id)


@admin_router.put("/{walker_id}/profile", response_model=WalkerProfileResponse)
def update_walker_profile(
    walker_id: UUID,
    data: WalkerProfileUpdate,
    tenant: TenantContext = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return WalkerProfileService.update_profile(db, tenant, walker_id, data)
