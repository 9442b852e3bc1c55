"""Health check and public branding routes"""

from typing import Optional

from fastapi import APIRouter, Depends, Header, Query
from sqlalchemy.orm import Session
import logging

from api.dependencies import get_db
from app.config import settings
from app.exceptions import ServiceValidationError
from domain.schemas.admin_schemas import BrandingResponse
from services.organization_service import OrganizationService

router = APIRouter(tags=["Health"])
logger = logging.getLogger("offleash.api.health")


@router.get("/health")
def health_check():
    """Basic health check endpoint"""
    return {"status": "ok", "service": settings.app_name, "version": settings.app_version}


@router.get("/api/branding", response_model=BrandingResponse)
def public_branding(
    slug: Optional[str] = Query(None),
    x_tenant_slug: Optional[str] = Header(None),
    db: Session = Depends(get_db),
):
    """Branding of an organization, looked up by slug or the X-Tenant-Slug header"""
    org_slug = slug or x_tenant_slug
    if not org_slug:
        raise ServiceValidationError("Provide slug or the X-Tenant-Slug header")
    return OrganizationService.public_branding(db, org_slug)
