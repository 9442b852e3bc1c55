from typing import List
from uuid import UUID
import logging

from sqlalchemy.orm import Session

from app.exceptions import (
    ConflictError,
    NotFoundError,
    ServiceValidationError,
    invalid_credentials,
)
from app.security import hash_password, verify_password
from domain.enums import AuthProvider
from domain.models import User, UserIdentity
from domain.schemas.auth_schemas import (
    ChangePasswordRequest,
    IdentityResponse,
    LinkEmailRequest,
)
from repositories import IdentityRepository, UserRepository
from services.auth_service import validate_password
from services.oauth_service import OAuthService

logger = logging.getLogger("offleash.identity")


def mask_provider_id(provider: str, value: str) -> str:
    """
    Hide most of a provider id before it is shown back to the user.

    phone ``***1234``; wallet ``0x1234...abcd``; email ``jo***@example.com``,
    or ``***@x.com`` when the local part has two characters or fewer;
    anything longer than 8 characters is cut to 8 plus ``...``.
    """
    if not value:
        return value
    if provider == AuthProvider.PHONE.value:
        return f"***{value[-4:]}"
    if provider == AuthProvider.WALLET.value and len(value) > 10:
        return f"{value[:6]}...{value[-4:]}"
    if "@" in value:
        local, domain = value.split("@", 1)
        # Short local parts are hidden entirely
        shown = local[:2] if len(local) > 2 else ""
        return f"{shown}***@{domain}"
    if len(value) > 8:
        return f"{value[:8]}..."
    return value


def _provider_value(provider) -> str:
    return getattr(provider, "value", provider)


class IdentityService:
    """Sign-in methods linked to the caller's account"""

    @staticmethod
    def _get_user(db: Session, user_id: UUID) -> User:
        user = UserRepository(db).get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found", code="USER_NOT_FOUND")
        return user

    @staticmethod
    def list_identities(db: Session, user_id: UUID) -> List[IdentityResponse]:
        identities = IdentityRepository(db).list_for_user(user_id)
        can_unlink = len(identities) > 1
        return [
            IdentityResponse(
                id=i.id,
                provider=_provider_value(i.provider),
                provider_user_id=mask_provider_id(_provider_value(i.provider), i.provider_user_id),
                provider_email=i.provider_email,
                created_at=i.created_at,
                can_unlink=can_unlink,
            )
            for i in identities
        ]

    @staticmethod
    def _link(db: Session, user_id: UUID, provider: AuthProvider, subject: str, email=None) -> None:
        repo = IdentityRepository(db)

        if repo.get_for_user_and_provider(user_id, provider):
            raise ConflictError(
                f"A {provider.value} account is already linked", code="IDENTITY_EXISTS"
            )
        existing = repo.get_by_provider(provider, subject)
        if existing is not None and existing.user_id != user_id:
            raise ConflictError(
                f"This {provider.value} account is linked to another user",
                code="IDENTITY_LINKED_ELSEWHERE",
            )

        try:
            db.add(
                UserIdentity(
                    user_id=user_id,
                    provider=provider,
                    provider_user_id=subject,
                    provider_email=email,
                )
            )
            db.commit()
        except Exception:
            db.rollback()
            logger.exception("Error linking %s identity for user %s", provider.value, user_id)
            raise
        logger.info(f"identity_linked provider={provider.value} user_id={user_id}")

    @staticmethod
    def link_google(db: Session, user_id: UUID, id_token: str) -> List[IdentityResponse]:
        verified = OAuthService.verify_google(id_token)
        IdentityService._link(db, user_id, AuthProvider.GOOGLE, verified.subject, verified.email)
        return IdentityService.list_identities(db, user_id)

    @staticmethod
    def link_apple(db: Session, user_id: UUID, id_token: str) -> List[IdentityResponse]:
        verified = OAuthService.verify_apple(id_token)
        IdentityService._link(db, user_id, AuthProvider.APPLE, verified.subject, verified.email)
        return IdentityService.list_identities(db, user_id)

    @staticmethod
    def link_email(db: Session, user_id: UUID, data: LinkEmailRequest) -> List[IdentityResponse]:
        user = IdentityService._get_user(db, user_id)
        email = data.email.strip().lower()
        validate_password(data.password)

        # Password is staged on the user and committed together with the identity
        user.password_hash = hash_password(data.password)
        IdentityService._link(db, user_id, AuthProvider.EMAIL, email, email)
        return IdentityService.list_identities(db, user_id)

    @staticmethod
    def unlink(db: Session, user_id: UUID, identity_id: UUID) -> None:
        repo = IdentityRepository(db)
        identity = repo.get_by_id(identity_id)
        if identity is None or identity.user_id != user_id:
            raise NotFoundError("Identity not found", code="IDENTITY_NOT_FOUND")
        if repo.count_for_user(user_id) <= 1:
            raise ServiceValidationError(
                "Cannot unlink your only sign-in method", code="LAST_IDENTITY"
            )

        try:
            db.delete(identity)
            db.commit()
        except Exception:
            db.rollback()
            logger.exception("Error unlinking identity %s", identity_id)
            raise
        logger.info(f"identity_unlinked identity_id={identity_id} user_id={user_id}")

    @staticmethod
    def change_password(db: Session, user_id: UUID, data: ChangePasswordRequest) -> None:
        """Accounts without a password (OAuth, phone, wallet) may set one directly"""
        user = IdentityService._get_user(db, user_id)
        if user.password_hash:
            if not data.current_password or not verify_password(
                data.current_password, user.password_hash
            ):
                raise invalid_credentials()
        validate_password(data.new_password)

        try:
            user.password_hash = hash_password(data.new_password)
            db.commit()
        except Exception:
            db.rollback()
            logger.exception("Error changing password for user %s", user_id)
            raise
        logger.info(f"password_changed user_id={user_id}")
