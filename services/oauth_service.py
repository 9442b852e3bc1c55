from typing import Optional
import logging

from sqlalchemy.orm import Session

from adapters import identity_adapter
from adapters.identity_adapter import VerifiedIdentity
from app.config import settings
from app.exceptions import OffleashError, UnauthorizedError, organization_not_found
from domain.enums import AuthProvider
from domain.models import User, UserIdentity
from domain.schemas.auth_schemas import AppleAuthRequest, AuthResponse, GoogleAuthRequest
from repositories import IdentityRepository, OrganizationRepository, UserRepository
from services.auth_service import AuthService

logger = logging.getLogger("offleash.oauth")


def provider_not_configured(provider: str) -> OffleashError:
    return OffleashError(f"{provider} sign-in is not configured", code="PROVIDER_NOT_CONFIGURED")


def placeholder_email(provider: AuthProvider, subject: str) -> str:
    """Stand-in address for accounts whose provider shares no email"""
    safe = "".join(ch for ch in subject.lower() if ch.isalnum())[:40]
    return f"{provider.value}-{safe}@users.offleash.app"


class OAuthService:
    """Sign-in with Google and Apple ID tokens"""

    @staticmethod
    def verify_google(id_token: str) -> VerifiedIdentity:
        if not settings.google_client_id:
            raise provider_not_configured("Google")
        return identity_adapter.verify_google_token(id_token, settings.google_client_id)

    @staticmethod
    def verify_apple(id_token: str) -> VerifiedIdentity:
        if not settings.apple_client_id:
            raise provider_not_configured("Apple")
        return identity_adapter.verify_apple_token(id_token, settings.apple_client_id)

    @staticmethod
    def sign_in_with_identity(
        db: Session,
        provider: AuthProvider,
        verified: VerifiedIdentity,
        org_slug: Optional[str],
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
    ) -> AuthResponse:
        """
        Resolve the user behind a verified provider identity.

        1. A known identity signs in its user
        2. Otherwise a user with the same email gets the identity linked
        3. Otherwise a customer is created in ``org_slug`` (or the default
           organization)
        """
        identity_repo = IdentityRepository(db)
        user_repo = UserRepository(db)

        try:
            identity = identity_repo.get_by_provider(provider, verified.subject)
            if identity is not None:
                user = user_repo.get_by_id(identity.user_id)
                if user is None:
                    raise UnauthorizedError("Identity is not linked to an account")
                logger.info(f"oauth_login provider={provider.value} user_id={user.id}")
                return AuthService.build_auth_response(db, user)

            user: Optional[User] = None
            if verified.email:
                user = user_repo.get_by_email(verified.email.lower())

            if user is None:
                org_repo = OrganizationRepository(db)
                org = org_repo.get_active_by_slug(org_slug) if org_slug else org_repo.get_default()
                if org is None:
                    raise organization_not_found(org_slug or "default")
                email = (verified.email or placeholder_email(provider, verified.subject)).lower()
                user, _ = AuthService.create_member(
                    db,
                    org,
                    email=email,
                    first_name=first_name or verified.first_name or "",
                    last_name=last_name or verified.last_name or "",
                )
                logger.info(f"oauth_user_created provider={provider.value} user_id={user.id} org={org.slug}")

            db.add(
                UserIdentity(
                    user_id=user.id,
                    provider=provider,
                    provider_user_id=verified.subject,
                    provider_email=verified.email,
                )
            )
            db.commit()
            db.refresh(user)
        except OffleashError:
            db.rollback()
            raise
        except Exception:
            db.rollback()
            logger.exception("Error signing in with %s", provider.value)
            raise

        return AuthService.build_auth_response(db, user)

    @staticmethod
    def google(db: Session, data: GoogleAuthRequest) -> AuthResponse:
        verified = OAuthService.verify_google(data.id_token)
        return OAuthService.sign_in_with_identity(db, AuthProvider.GOOGLE, verified, data.org_slug)

    @staticmethod
    def apple(db: Session, data: AppleAuthRequest) -> AuthResponse:
        verified = OAuthService.verify_apple(data.id_token)
        return OAuthService.sign_in_with_identity(
            db,
            AuthProvider.APPLE,
            verified,
            data.org_slug,
            first_name=data.first_name,
            last_name=data.last_name,
        )
