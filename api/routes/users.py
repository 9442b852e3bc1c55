"""User and walker management routes"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
import logging
from uuid import UUID
from typing import List, Optional

from api.dependencies import TenantContext, get_db, get_tenant, require_admin
from domain.schemas.user_schemas import UserResponse, UserUpdateRequest, WalkerCreateRequest
from services.user_service import UserService

router = APIRouter(prefix="/users", tags=["Users"])
admin_router = APIRouter(prefix="/admin/walkers", tags=["Admin"])
logger = logging.getLogger("offleash.api.users")


@router.get("/me", response_model=UserResponse)
def get_me(tenant: TenantContext = Depends(get_tenant), db: Session = Depends(get_db)):
    return UserService.get_me(db, tenant)


@router.put("/me", response_model=UserResponse)
def update_me(
    data: UserUpdateRequest,
    tenant: TenantContext = Depends(get_tenant),
    db: Session = Depends(get_db),
):
    """Update names, phone or timezone of the caller"""
    return UserService.update_me(db, tenant, data)


@router.get("", response_model=List[UserResponse])
def list_users(
    role: Optional[str] = Query(None, description="customer, walker, admin or owner"),
    tenant: TenantContext = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Members of the caller's organization"""
    return UserService.list_users(db, tenant, role)


@router.get("/{user_id}", response_model=UserResponse)
def get_user(user_id: UUID, tenant: TenantContext = Depends(get_tenant), db: Session = Depends(get_db)):
    """Admins, the user themselves, or someone sharing a booking with them"""
    return UserService.get_user(db, tenant, user_id)


@admin_router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def create_walker(
    data: WalkerCreateRequest,
    tenant: TenantContext = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return UserService.create_walker(db, tenant, data)
