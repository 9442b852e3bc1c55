from typing import List, Optional
from uuid import UUID, uuid4
import logging

from sqlalchemy.orm import Session

from adapters import payments_adapter
from api.dependencies import TenantContext
from app.config import settings
from app.exceptions import ExternalServiceError, NotFoundError, ServiceValidationError
from app.security import encrypt_secret
from core.timezones import utcnow
from domain.enums import PaymentMethodType, PaymentProviderType
from domain.mappers import PaymentMethodMapper
from domain.models import PaymentMethod, PaymentProvider
from domain.schemas.admin_schemas import (
    ConnectUrlResponse,
    PaymentMethodCreate,
    PaymentMethodResponse,
    PaymentMethodUpdate,
    PaymentProviderResponse,
    PaymentProviderUpdate,
)
from repositories import PaymentMethodRepository, PaymentProviderRepository

logger = logging.getLogger("offleash.payments")


def parse_provider_type(value: str) -> PaymentProviderType:
    try:
        return PaymentProviderType(value)
    except ValueError:
        raise ServiceValidationError("Invalid provider. Must be stripe or square")


def to_provider_response(provider: PaymentProvider) -> PaymentProviderResponse:
    return PaymentProviderResponse(
        id=provider.id,
        provider_type=getattr(provider.provider_type, "value", provider.provider_type),
        is_active=provider.is_active,
        is_primary=provider.is_primary,
        is_verified=provider.is_verified,
        merchant_id=provider.merchant_id,
        connected_at=provider.connected_at,
        account_name=provider.account_name,
        charges_enabled=provider.charges_enabled,
        payouts_enabled=provider.payouts_enabled,
    )


def validate_card(data: PaymentMethodCreate) -> None:
    """Brand, four-digit last four and an expiry that has not passed"""
    if not data.card_brand:
        raise ServiceValidationError("Card brand is required")
    if not data.card_last_four or len(data.card_last_four) != 4 or not data.card_last_four.isdigit():
        raise ServiceValidationError("Card last four must be exactly 4 digits")
    if data.card_exp_month is None or data.card_exp_year is None:
        raise ServiceValidationError("Card expiry month and year are required")

    today = utcnow().date()
    if (data.card_exp_year, data.card_exp_month) < (today.year, today.month):
        raise ServiceValidationError("Card has expired", code="CARD_EXPIRED")


class PaymentMethodService:
    """Customer saved payment methods"""

    @staticmethod
    def _get(db: Session, tenant: TenantContext, method_id: UUID) -> PaymentMethod:
        method = PaymentMethodRepository(db).get_for_user(method_id, tenant.org_id, tenant.user_id)
        if method is None:
            raise NotFoundError(f"Payment method not found: {method_id}", code="PAYMENT_METHOD_NOT_FOUND")
        return method

    @staticmethod
    def list_methods(db: Session, tenant: TenantContext) -> List[PaymentMethodResponse]:
        methods = PaymentMethodRepository(db).list_active_for_user(tenant.org_id, tenant.user_id)
        return [PaymentMethodMapper.to_response(m) for m in methods]

    @staticmethod
    def create_method(db: Session, tenant: TenantContext, data: PaymentMethodCreate) -> PaymentMethodResponse:
        try:
            method_type = PaymentMethodType(data.method_type)
        except ValueError:
            raise ServiceValidationError(
                "Invalid method_type. Must be card, apple_pay, google_pay or bank_account"
            )
        if method_type == PaymentMethodType.CARD:
            validate_card(data)

        repo = PaymentMethodRepository(db)
        make_default = data.is_default or not repo.list_active_for_user(tenant.org_id, tenant.user_id)
        try:
            if make_default:
                repo.clear_default(tenant.org_id, tenant.user_id)
            method = PaymentMethod(
                organization_id=tenant.org_id,
                user_id=tenant.user_id,
                method_type=method_type,
                provider_token=data.provider_token,
                card_brand=data.card_brand,
                card_last_four=data.card_last_four,
                card_exp_month=data.card_exp_month,
                card_exp_year=data.card_exp_year,
                nickname=data.nickname,
                is_default=make_default,
                is_active=True,
            )
            method = repo.create(method)
        except Exception:
            db.rollback()
            logger.exception("Error saving payment method for user %s", tenant.user_id)
            raise
        logger.info(f"payment_method_added method_id={method.id} type={method_type.value}")
        return PaymentMethodMapper.to_response(method)

    @staticmethod
    def update_method(
        db: Session, tenant: TenantContext, method_id: UUID, data: PaymentMethodUpdate
    ) -> PaymentMethodResponse:
        method = PaymentMethodService._get(db, tenant, method_id)
        try:
            method.nickname = data.nickname
            method = PaymentMethodRepository(db).update(method)
        except Exception:
            db.rollback()
            logger.exception("Error updating payment method %s", method_id)
            raise
        return PaymentMethodMapper.to_response(method)

    @staticmethod
    def set_default(db: Session, tenant: TenantContext, method_id: UUID) -> PaymentMethodResponse:
        method = PaymentMethodService._get(db, tenant, method_id)
        repo = PaymentMethodRepository(db)
        try:
            repo.clear_default(tenant.org_id, tenant.user_id)
            method.is_default = True
            method = repo.update(method)
        except Exception:
            db.rollback()
            logger.exception("Error setting default payment method %s", method_id)
            raise
        return PaymentMethodMapper.to_response(method)

    @staticmethod
    def delete_method(db: Session, tenant: TenantContext, method_id: UUID) -> None:
        """Deactivate; the default moves to another active method"""
        method = PaymentMethodService._get(db, tenant, method_id)
        repo = PaymentMethodRepository(db)
        try:
            was_default = method.is_default
            method.is_active = False
            method.is_default = False
            db.flush()
            if was_default:
                remaining = repo.list_active_for_user(tenant.org_id, tenant.user_id)
                if remaining:
                    remaining[0].is_default = True
            db.commit()
        except Exception:
            db.rollback()
            logger.exception("Error removing payment method %s", method_id)
            raise
        logger.info(f"payment_method_removed method_id={method_id}")


class PaymentProviderService:
    """Organization Stripe / Square connections"""

    @staticmethod
    def list_providers(db: Session, tenant: TenantContext) -> List[PaymentProviderResponse]:
        return [to_provider_response(p) for p in PaymentProviderRepository(db).list_for_org(tenant.org_id)]

    @staticmethod
    def get_primary(db: Session, tenant: TenantContext) -> Optional[PaymentProviderResponse]:
        provider = PaymentProviderRepository(db).get_primary(tenant.org_id)
        return to_provider_response(provider) if provider else None

    @staticmethod
    def connect_url(db: Session, tenant: TenantContext, provider: str, redirect_uri: str) -> ConnectUrlResponse:
        """
        Raises:
            ExternalServiceError: the provider's OAuth app is not configured
        """
        provider_type = parse_provider_type(provider)
        state = f"{tenant.org_id}:{uuid4()}"

        if provider_type == PaymentProviderType.STRIPE:
            if not settings.stripe_client_id:
                raise ExternalServiceError("Stripe is not configured", code="PROVIDER_NOT_CONFIGURED")
            url = payments_adapter.stripe_connect_url(settings.stripe_client_id, redirect_uri, state)
        else:
            if not settings.square_application_id:
                raise ExternalServiceError("Square is not configured", code="PROVIDER_NOT_CONFIGURED")
            url = payments_adapter.square_connect_url(
                settings.square_application_id, redirect_uri, state, settings.square_environment
            )
        return ConnectUrlResponse(url=url, state=state)

    @staticmethod
    def _exchange(provider_type: PaymentProviderType, code: str) -> payments_adapter.ProviderTokens:
        if provider_type == PaymentProviderType.STRIPE:
            if not settings.stripe_secret_key:
                raise ExternalServiceError("Stripe is not configured", code="PROVIDER_NOT_CONFIGURED")
            return payments_adapter.exchange_stripe_code(code, settings.stripe_secret_key)
        if not (settings.square_application_id and settings.square_application_secret):
            raise ExternalServiceError("Square is not configured", code="PROVIDER_NOT_CONFIGURED")
        return payments_adapter.exchange_square_code(
            code,
            settings.square_application_id,
            settings.square_application_secret,
            settings.square_environment,
        )

    @staticmethod
    def handle_callback(
        db: Session, tenant: TenantContext, provider: str, code: str, state: str
    ) -> PaymentProviderResponse:
        """Exchange the OAuth code and store the connection; the first one becomes primary"""
        provider_type = parse_provider_type(provider)
        org_part, sep, _ = state.partition(":")
        if not sep or not org_part:
            raise ServiceValidationError("Invalid state parameter", code="INVALID_STATE")
        if org_part != str(tenant.org_id):
            raise ServiceValidationError("State mismatch", code="INVALID_STATE")

        tokens = PaymentProviderService._exchange(provider_type, code)

        repo = PaymentProviderRepository(db)
        try:
            row = repo.get_by_type(tenant.org_id, provider_type)
            if row is None:
                row = PaymentProvider(organization_id=tenant.org_id, provider_type=provider_type)
                db.add(row)
            row.merchant_id = tokens.account_id
            row.account_id = tokens.account_id
            row.access_token_encrypted = encrypt_secret(tokens.access_token)
            row.refresh_token_encrypted = encrypt_secret(tokens.refresh_token)
            row.is_active = True
            row.is_verified = True
            row.charges_enabled = True
            row.payouts_enabled = True
            row.connected_at = utcnow()
            db.flush()
            if repo.get_primary(tenant.org_id) is None:
                row.is_primary = True
            db.commit()
            db.refresh(row)
        except Exception:
            db.rollback()
            logger.exception("Error storing %s connection for org %s", provider_type.value, tenant.org_id)
            raise

        logger.info(
            f"payment_provider_connected org_id={tenant.org_id} provider={provider_type.value} primary={row.is_primary}"
        )
        return to_provider_response(row)

    @staticmethod
    def _get(db: Session, tenant: TenantContext, provider_id: UUID) -> PaymentProvider:
        row = PaymentProviderRepository(db).get_in_org(provider_id, tenant.org_id)
        if row is None:
            raise NotFoundError(f"Payment provider not found: {provider_id}", code="PROVIDER_NOT_FOUND")
        return row

    @staticmethod
    def update_provider(
        db: Session, tenant: TenantContext, provider_id: UUID, data: PaymentProviderUpdate
    ) -> PaymentProviderResponse:
        row = PaymentProviderService._get(db, tenant, provider_id)
        repo = PaymentProviderRepository(db)
        try:
            if data.is_active is not None:
                row.is_active = data.is_active
                if not data.is_active:
                    row.is_primary = False
            if data.is_primary:
                if not row.is_active:
                    raise ServiceValidationError("An inactive provider cannot be primary")
                repo.clear_primary(tenant.org_id)
                row.is_primary = True
            elif data.is_primary is False:
                row.is_primary = False
            db.commit()
            db.refresh(row)
        except ServiceValidationError:
            db.rollback()
            raise
        except Exception:
            db.rollback()
            logger.exception("Error updating payment provider %s", provider_id)
            raise
        return to_provider_response(row)

    @staticmethod
    def deactivate_provider(db: Session, tenant: TenantContext, provider_id: UUID) -> None:
        row = PaymentProviderService._get(db, tenant, provider_id)
        try:
            row.is_active = False
            row.is_primary = False
            db.commit()
        except Exception:
            db.rollback()
            logger.exception("Error deactivating payment provider %s", provider_id)
            raise
        logger.info(f"payment_provider_deactivated provider_id={provider_id}")
