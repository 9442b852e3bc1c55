"""Payment provider connections and customer payment methods"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
import logging
from uuid import UUID
from typing import List, Optional

from api.dependencies import TenantContext, get_db, get_tenant, require_admin
from domain.schemas.admin_schemas import (
    ConnectUrlResponse,
    PaymentMethodCreate,
    PaymentMethodResponse,
    PaymentMethodUpdate,
    PaymentProviderResponse,
    PaymentProviderUpdate,
    ProviderCallbackRequest,
)
from services.payment_service import PaymentMethodService, PaymentProviderService

providers_router = APIRouter(prefix="/payment-providers", tags=["Payments"])
methods_router = APIRouter(prefix="/payment-methods", tags=["Payments"])
logger = logging.getLogger("offleash.api.payments")


# ============================================================
# Providers
# ============================================================


@providers_router.get("", response_model=List[PaymentProviderResponse])
def list_providers(tenant: TenantContext = Depends(require_admin), db: Session = Depends(get_db)):
    return PaymentProviderService.list_providers(db, tenant)


@providers_router.get("/primary", response_model=Optional[PaymentProviderResponse])
def get_primary_provider(tenant: TenantContext = Depends(get_tenant), db: Session = Depends(get_db)):
    return PaymentProviderService.get_primary(db, tenant)


@providers_router.get("/{provider}/connect", response_model=ConnectUrlResponse)
def connect_provider(
    provider: str,
    redirect_uri: str = Query(...),
    tenant: TenantContext = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """OAuth URL for connecting a Stripe or Square account"""
    return PaymentProviderService.connect_url(db, tenant, provider, redirect_uri)


@providers_router.post("/{provider}/callback", response_model=PaymentProviderResponse)
def provider_callback(
    provider: str,
    data: ProviderCallbackRequest,
    tenant: TenantContext = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return PaymentProviderService.handle_callback(db, tenant, provider, data.code, data.state)


@providers_router.put("/{provider_id}", response_model=PaymentProviderResponse)
def update_provider(
    provider_id: UUID,
    data: PaymentProviderUpdate,
    tenant: TenantContext = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return PaymentProviderService.update_provider(db, tenant, provider_id, data)


@providers_router.delete("/{provider_id}")
def deactivate_provider(
    provider_id: UUID,
    tenant: TenantContext = Depends(require_admin),
    db: Session = Depends(get_db),
):
    PaymentProviderService.deactivate_provider(db, tenant, provider_id)
    return {"status": "ok", "deactivated": str(provider_id)}


# ============================================================
# Customer payment methods
# ============================================================


@methods_router.get("", response_model=List[PaymentMethodResponse])
def list_methods(tenant: TenantContext = Depends(get_tenant), db: Session = Depends(get_db)):
    return PaymentMethodService.list_methods(db, tenant)


@methods_router.post("", response_model=PaymentMethodResponse, status_code=status.HTTP_201_CREATED)
def create_method(
    data: PaymentMethodCreate,
    tenant: TenantContext = Depends(get_tenant),
    db: Session = Depends(get_db),
):
    return PaymentMethodService.create_method(db, tenant, data)


@methods_router.put("/{method_id}", response_model=PaymentMethodResponse)
def update_method(
    method_id: UUID,
    data: PaymentMethodUpdate,
    tenant: TenantContext = Depends(get_tenant),
    db: Session = Depends(get_db),
):
    return PaymentMethodService.update_method(db, tenant, method_id, data)


@methods_router.put("/{method_id}/default", response_model=PaymentMethodResponse)
def set_default_method(method_id: UUID, tenant: TenantContext = Depends(get_tenant), db: Session = Depends(get_db)):
    return PaymentMethodService.set_default(db, tenant, method_id)


@methods_router.delete("/{method_id}")
def delete_method(method_id: UUID, tenant: TenantContext = Depends(get_tenant), db: Session = Depends(get_db)):
    """Remove a saved method; another one becomes the default"""
    PaymentMethodService.delete_method(db, tenant, method_id)
    return {"status": "ok", "deleted": str(method_id)}
