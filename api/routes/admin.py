"""Organization administration and platform tenant management"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
import logging
from uuid import UUID

from api.dependencies import AuthUser, TenantContext, get_db, require_admin, require_platform_admin
from domain.schemas.admin_schemas import (
    BrandingResponse,
    BrandingUpdate,
    DashboardMetrics,
    PaymentConfigResponse,
    PaymentConfigUpdate,
    TenantCreate,
    TenantListResponse,
    TenantResponse,
    TenantUpdate,
)
from services.organization_service import OrganizationService, TenantService

router = APIRouter(prefix="/admin", tags=["Admin"])
logger = logging.getLogger("offleash.api.admin")


@router.get("/branding", response_model=BrandingResponse)
def get_branding(tenant: TenantContext = Depends(require_admin), db: Session = Depends(get_db)):
    return OrganizationService.get_branding(db, tenant)


@router.put("/branding", response_model=BrandingResponse)
def update_branding(
    data: BrandingUpdate,
    tenant: TenantContext = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Colors must be #RRGGBB"""
    return OrganizationService.update_branding(db, tenant, data)


@router.get("/payment-config", response_model=PaymentConfigResponse)
def get_payment_config(tenant: TenantContext = Depends(require_admin), db: Session = Depends(get_db)):
    return OrganizationService.get_payment_config(db, tenant)


@router.put("/payment-config", response_model=PaymentConfigResponse)
def update_payment_config(
    data: PaymentConfigUpdate,
    tenant: TenantContext = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return OrganizationService.update_payment_config(db, tenant, data)


@router.get("/dashboard/metrics", response_model=DashboardMetrics)
def dashboard_metrics(tenant: TenantContext = Depends(require_admin), db: Session = Depends(get_db)):
    """Today's and pending bookings, member counts and this month's revenue"""
    return OrganizationService.dashboard_metrics(db, tenant)


# ============================================================
# Platform operators
# ============================================================


@router.get("/tenants", response_model=TenantListResponse)
def list_tenants(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    _: AuthUser = Depends(require_platform_admin),
    db: Session = Depends(get_db),
):
    return TenantService.list_tenants(db, skip, limit)


@router.post("/tenants", response_model=TenantResponse, status_code=status.HTTP_201_CREATED)
def create_tenant(
    data: TenantCreate,
    _: AuthUser = Depends(require_platform_admin),
    db: Session = Depends(get_db),
):
    """Create an organization, with an owner account when owner_email is given"""
    return TenantService.create_tenant(db, data)


@router.get("/tenants/{tenant_id}", response_model=TenantResponse)
def get_tenant(tenant_id: UUID, _: AuthUser = Depends(require_platform_admin), db: Session = Depends(get_db)):
    return TenantService.get_tenant(db, tenant_id)


@router.put("/tenants/{tenant_id}", response_model=TenantResponse)
def update_tenant(
    tenant_id: UUID,
    data: TenantUpdate,
    _: AuthUser = Depends(require_platform_admin),
    db: Session = Depends(get_db),
):
    return TenantService.update_tenant(db, tenant_id, data)
