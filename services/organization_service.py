from datetime import timedelta
from typing import Optional
from uuid import UUID
import logging
import re

from sqlalchemy.orm import Session

from api.dependencies import TenantContext
from app.config import settings
from app.exceptions import ConflictError, NotFoundError, ServiceValidationError, organization_not_found
from app.security import hash_password
from core.timezones import get_zone, utc_day_bounds, utcnow
from core.types import format_cents
from domain.enums import (
    AuthProvider,
    BillingFrequency,
    BookingStatus,
    BusinessModel,
    FeeStructure,
    MembershipRole,
    PaymentProviderType,
)
from domain.models import Organization, UserIdentity
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
from repositories import BookingRepository, MembershipRepository, OrganizationRepository
from services.auth_service import AuthService, validate_password

logger = logging.getLogger("offleash.organizations")

HEX_COLOR = re.compile(r"^#[0-9A-Fa-f]{6}$")
SLUG_PATTERN = re.compile(r"^[a-z0-9-]{3,50}$")

DEFAULT_PAYMENT_CONFIG = {
    "business_model": BusinessModel.BOOKING_ONLY.value,
    "fee_structure": FeeStructure.CUSTOMER_PAYS.value,
    "billing_frequency": BillingFrequency.MONTHLY.value,
    "apple_pay_enabled": False,
    "google_pay_enabled": False,
    "preferred_provider": None,
}

PAYMENT_CONFIG_ENUMS = {
    "business_model": BusinessModel,
    "fee_structure": FeeStructure,
    "billing_frequency": BillingFrequency,
    "preferred_provider": PaymentProviderType,
}


def to_branding(org: Organization) -> BrandingResponse:
    branding = org.branding
    return BrandingResponse(
        company_name=branding.get("company_name") or org.name,
        primary_color=branding.get("primary_color"),
        secondary_color=branding.get("secondary_color"),
        accent_color=branding.get("accent_color"),
        logo_url=branding.get("logo_url"),
        favicon_url=branding.get("favicon_url"),
        font_family=branding.get("font_family"),
        support_email=branding.get("support_email"),
    )


def to_payment_config(org: Organization) -> PaymentConfigResponse:
    return PaymentConfigResponse(**{**DEFAULT_PAYMENT_CONFIG, **org.payment_config})


def _save_settings(db: Session, org: Organization, key: str, value: dict) -> Organization:
    # Assign a new dict so SQLAlchemy notices the JSONB change
    org.settings = {**(org.settings or {}), key: value}
    try:
        db.commit()
        db.refresh(org)
    except Exception:
        db.rollback()
        logger.exception("Error saving %s for organization %s", key, org.id)
        raise
    return org


class OrganizationService:
    """Tenant branding, payment configuration and the admin dashboard"""

    @staticmethod
    def _get_org(db: Session, org_id: UUID) -> Organization:
        org = OrganizationRepository(db).get_by_id(org_id)
        if org is None:
            raise NotFoundError("Organization not found", code="ORGANIZATION_NOT_FOUND")
        return org

    @staticmethod
    def public_branding(db: Session, slug: str) -> BrandingResponse:
        return to_branding(AuthService.get_active_org(db, slug))

    @staticmethod
    def get_branding(db: Session, tenant: TenantContext) -> BrandingResponse:
        return to_branding(OrganizationService._get_org(db, tenant.org_id))

    @staticmethod
    def update_branding(db: Session, tenant: TenantContext, data: BrandingUpdate) -> BrandingResponse:
        updates = data.model_dump(exclude_unset=True)
        for field in ("primary_color", "secondary_color", "accent_color"):
            value = updates.get(field)
            if value is not None and not HEX_COLOR.match(value):
                raise ServiceValidationError(
                    f"{field} must be a hex color like #1A2B3C", code="INVALID_COLOR"
                )

        org = OrganizationService._get_org(db, tenant.org_id)
        org = _save_settings(db, org, "branding", {**org.branding, **updates})
        logger.info(f"branding_updated org_id={org.id} fields={sorted(updates)}")
        return to_branding(org)

    @staticmethod
    def get_payment_config(db: Session, tenant: TenantContext) -> PaymentConfigResponse:
        return to_payment_config(OrganizationService._get_org(db, tenant.org_id))

    @staticmethod
    def update_payment_config(
        db: Session, tenant: TenantContext, data: PaymentConfigUpdate
    ) -> PaymentConfigResponse:
        """Fields left out of the request keep their current values"""
        updates = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None}
        for field, enum_cls in PAYMENT_CONFIG_ENUMS.items():
            if field in updates:
                try:
                    enum_cls(updates[field])
                except ValueError:
                    allowed = ", ".join(e.value for e in enum_cls)
                    raise ServiceValidationError(f"Invalid {field}. Must be one of: {allowed}")

        org = OrganizationService._get_org(db, tenant.org_id)
        org = _save_settings(db, org, "payment_config", {**org.payment_config, **updates})
        logger.info(f"payment_config_updated org_id={org.id} fields={sorted(updates)}")
        return to_payment_config(org)

    @staticmethod
    def dashboard_metrics(db: Session, tenant: TenantContext) -> DashboardMetrics:
        tz_name = settings.default_timezone
        now = utcnow()
        local_now = now.astimezone(get_zone(tz_name))
        today_start, today_end = utc_day_bounds(local_now.date(), tz_name)
        month_start, _ = utc_day_bounds(local_now.date().replace(day=1), tz_name)

        bookings = BookingRepository(db)
        memberships = MembershipRepository(db)
        revenue = bookings.completed_revenue_between(tenant.org_id, month_start, now + timedelta(seconds=1))
        return DashboardMetrics(
            todays_bookings=bookings.count_between(tenant.org_id, today_start, today_end),
            pending_bookings=bookings.count_by_status(tenant.org_id, BookingStatus.PENDING),
            active_walkers=memberships.count_by_role(tenant.org_id, MembershipRole.WALKER),
            total_customers=memberships.count_by_role(tenant.org_id, MembershipRole.CUSTOMER),
            revenue_this_month_cents=revenue,
            revenue_this_month_display=format_cents(revenue),
        )


class TenantService:
    """Platform operator management of organizations"""

    @staticmethod
    def list_tenants(db: Session, skip: int = 0, limit: int = 100) -> TenantListResponse:
        repo = OrganizationRepository(db)
        return TenantListResponse(
            tenants=[TenantResponse.model_validate(o) for o in repo.list_all(skip, limit)],
            total=repo.count(),
        )

    @staticmethod
    def get_tenant(db: Session, tenant_id: UUID) -> TenantResponse:
        org = OrganizationRepository(db).get_by_id(tenant_id)
        if org is None:
            raise organization_not_found(str(tenant_id))
        return TenantResponse.model_validate(org)

    @staticmethod
    def create_tenant(db: Session, data: TenantCreate) -> TenantResponse:
        """
        Create an organization, optionally with an owner account.

        Raises:
            ServiceValidationError: malformed slug or weak owner password
            ConflictError: SLUG_EXISTS
        """
        slug = data.slug.strip().lower()
        if not SLUG_PATTERN.match(slug):
            raise ServiceValidationError(
                "Slug must be 3-50 characters of lowercase letters, digits or hyphens",
                code="INVALID_SLUG",
            )
        repo = OrganizationRepository(db)
        if repo.slug_exists(slug):
            raise ConflictError(f"Slug already taken: {slug}", code="SLUG_EXISTS")

        owner_email: Optional[str] = data.owner_email.strip().lower() if data.owner_email else None
        if owner_email:
            validate_password(data.owner_password or "")

        try:
            org = Organization(name=data.name, slug=slug, settings={}, is_active=True)
            db.add(org)
            db.flush()

            if owner_email:
                user, _ = AuthService.create_member(
                    db,
                    org,
                    email=owner_email,
                    first_name=data.owner_first_name or "",
                    last_name=data.owner_last_name or "",
                    role=MembershipRole.OWNER,
                    password_hash=hash_password(data.owner_password),
                )
                db.add(
                    UserIdentity(
                        user_id=user.id,
                        provider=AuthProvider.EMAIL,
                        provider_user_id=owner_email,
                        provider_email=owner_email,
                    )
                )
            db.commit()
            db.refresh(org)
        except Exception:
            db.rollback()
            logger.exception("Error creating tenant %s", slug)
            raise

        logger.info(f"tenant_created org_id={org.id} slug={slug} owner={bool(owner_email)}")
        return TenantResponse.model_validate(org)

    @staticmethod
    def update_tenant(db: Session, tenant_id: UUID, data: TenantUpdate) -> TenantResponse:
        org = OrganizationRepository(db).get_by_id(tenant_id)
        if org is None:
            raise organization_not_found(str(tenant_id))
        updates = data.model_dump(exclude_unset=True)
        try:
            for field, value in updates.items():
                if value is not None:
                    setattr(org, field, value)
            db.commit()
            db.refresh(org)
        except Exception:
            db.rollback()
            logger.exception("Error updating tenant %s", tenant_id)
            raise
        logger.info(f"tenant_updated org_id={org.id} fields={sorted(updates)}")
        return TenantResponse.model_validate(org)
