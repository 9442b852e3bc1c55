from typing import List, Optional, Tuple
from uuid import UUID
import logging

from sqlalchemy.orm import Session

from app.config import settings
from app.exceptions import (
    ConflictError,
    NotFoundError,
    ServiceValidationError,
    invalid_credentials,
    organization_not_found,
)
from app.security import create_token, hash_password, verify_password
from domain.enums import AuthProvider, MembershipRole, MembershipStatus, UserRole
from domain.mappers import AuthMapper
from domain.models import Membership, Organization, PlatformAdmin, User, UserIdentity
from domain.schemas.auth_schemas import (
    AuthResponse,
    LoginRequest,
    MembershipInfo,
    PlatformAuthResponse,
    RefreshResponse,
    RegisterRequest,
    SessionResponse,
    UniversalLoginRequest,
)
from repositories import (
    MembershipRepository,
    OrganizationRepository,
    PlatformAdminRepository,
    UserRepository,
)

logger = logging.getLogger("offleash.auth")

MIN_PASSWORD_LENGTH = 8
NO_MEMBERSHIP_ROLE = "user"


def validate_password(password: str) -> None:
    if len(password or "") < MIN_PASSWORD_LENGTH:
        raise ServiceValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters",
            code="WEAK_PASSWORD",
        )


class AuthService:
    """Email/password sign-in, registration and the token / session helpers the
    other sign-in flows (Google, Apple, phone, wallet) share."""

    @staticmethod
    def get_active_org(db: Session, slug: str) -> Organization:
        org = OrganizationRepository(db).get_active_by_slug(slug)
        if not org:
            raise organization_not_found(slug)
        return org

    @staticmethod
    def create_member(
        db: Session,
        org: Organization,
        email: str,
        first_name: str,
        last_name: str,
        role: MembershipRole = MembershipRole.CUSTOMER,
        password_hash: Optional[str] = None,
        phone: Optional[str] = None,
    ) -> Tuple[User, Membership]:
        """
        Stage a user with an active membership in ``org`` and make that
        membership the default. The caller commits.
        """
        user_role = UserRole.ADMIN if role.is_admin else UserRole(role.value)
        user = User(
            organization_id=org.id,
            email=email,
            password_hash=password_hash,
            role=user_role,
            first_name=first_name or "",
            last_name=last_name or "",
            phone=phone,
        )
        db.add(user)
        db.flush()

        membership = Membership(
            user_id=user.id,
            organization_id=org.id,
            role=role,
            status=MembershipStatus.ACTIVE,
        )
        db.add(membership)
        db.flush()

        user.default_membership_id = membership.id
        return user, membership

    @staticmethod
    def list_memberships(db: Session, user: User) -> List[MembershipInfo]:
        rows = MembershipRepository(db).list_for_user(user.id)
        return [
            AuthMapper.membership_info(m, org, user.default_membership_id) for m, org in rows
        ]

    @staticmethod
    def build_auth_response(db: Session, user: User, org_id: Optional[UUID] = None) -> AuthResponse:
        """
        Issue a token for ``user``.

        With ``org_id`` the token is scoped to that organization. Without it the
        default membership is used, then the first membership, and finally a
        context-free token when the user belongs nowhere.
        """
        memberships = AuthService.list_memberships(db, user)

        current = None
        if org_id is not None:
            current = next((m for m in memberships if m.organization_id == org_id), None)
        else:
            current = next((m for m in memberships if m.is_default), None)
            if current is None and memberships:
                current = memberships[0]

        token = create_token(user.id, current.organization_id if current else None)
        role = current.role if current else NO_MEMBERSHIP_ROLE
        return AuthResponse(
            token=token,
            user=AuthMapper.user_info(user, role=role),
            membership=current,
            memberships=memberships,
        )

    @staticmethod
    def register(db: Session, data: RegisterRequest) -> AuthResponse:
        org = AuthService.get_active_org(db, data.org_slug)
        email = data.email.strip().lower()

        if UserRepository(db).get_by_email_in_org(email, org.id):
            raise ConflictError("Email already registered", code="EMAIL_EXISTS")
        validate_password(data.password)

        role = MembershipRole.from_registration(data.role)
        try:
            user, membership = AuthService.create_member(
                db,
                org,
                email=email,
                first_name=data.first_name,
                last_name=data.last_name,
                role=role,
                password_hash=hash_password(data.password),
                phone=data.phone,
            )
            db.add(
                UserIdentity(
                    user_id=user.id,
                    provider=AuthProvider.EMAIL,
                    provider_user_id=email,
                    provider_email=email,
                )
            )
            db.commit()
            db.refresh(user)
        except Exception:
            db.rollback()
            logger.exception("Error registering %s in org %s", email, org.slug)
            raise

        logger.info(f"user_registered user_id={user.id} org={org.slug} role={role.value}")
        return AuthService.build_auth_response(db, user, org.id)

    @staticmethod
    def login(db: Session, data: LoginRequest) -> AuthResponse:
        """Sign in to one organization; the reported role is the membership role there."""
        org = AuthService.get_active_org(db, data.org_slug)
        email = data.email.strip().lower()
        user_repo = UserRepository(db)

        user = user_repo.get_by_email_in_org(email, org.id) or user_repo.get_by_email(email)
        if not user or not verify_password(data.password, user.password_hash):
            logger.warning(f"login_failed org={org.slug}")
            raise invalid_credentials()

        membership = MembershipRepository(db).get_active_for_user_in_org(user.id, org.id)
        if membership is None:
            logger.warning(f"login_without_membership user_id={user.id} org={org.slug}")
            raise invalid_credentials()

        return AuthService.build_auth_response(db, user, org.id)

    @staticmethod
    def login_universal(db: Session, data: UniversalLoginRequest) -> AuthResponse:
        user = UserRepository(db).get_by_email(data.email.strip().lower())
        if not user or not verify_password(data.password, user.password_hash):
            logger.warning("universal_login_failed")
            raise invalid_credentials()
        return AuthService.build_auth_response(db, user)

    @staticmethod
    def refresh(user_id: UUID, org_id: Optional[UUID], platform_admin: bool = False) -> RefreshResponse:
        token = create_token(user_id, org_id, platform_admin=platform_admin)
        return RefreshResponse(token=token, expires_in=settings.jwt_expiry_hours * 3600)

    @staticmethod
    def get_session(db: Session, user_id: UUID, org_id: Optional[UUID]) -> SessionResponse:
        user = UserRepository(db).get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found", code="USER_NOT_FOUND")

        memberships = AuthService.list_memberships(db, user)
        current = next((m for m in memberships if m.organization_id == org_id), None)
        role = current.role if current else NO_MEMBERSHIP_ROLE
        return SessionResponse(
            user=AuthMapper.user_info(user, role=role),
            membership=current,
            memberships=memberships,
            org_id=org_id,
        )

    @staticmethod
    def platform_login(db: Session, email: str, password: str) -> PlatformAuthResponse:
        """
        Sign in a platform operator. The operator configured through settings is
        created on its first successful sign-in.
        """
        email = email.strip().lower()
        repo = PlatformAdminRepository(db)
        admin = repo.get_by_email(email)

        if admin is None:
            configured = (settings.platform_admin_email or "").strip().lower()
            if not configured or configured != email:
                raise invalid_credentials()
            if not verify_password(password, settings.platform_admin_password_hash):
                raise invalid_credentials()
            try:
                admin = PlatformAdmin(
                    email=email, password_hash=settings.platform_admin_password_hash
                )
                db.add(admin)
                db.commit()
                db.refresh(admin)
            except Exception:
                db.rollback()
                logger.exception("Error bootstrapping platform admin")
                raise
            logger.info(f"platform_admin_bootstrapped admin_id={admin.id}")
        elif not verify_password(password, admin.password_hash):
            logger.warning("platform_login_failed")
            raise invalid_credentials()

        return PlatformAuthResponse(
            token=create_token(admin.id, None, platform_admin=True),
            admin_id=admin.id,
            email=admin.email,
        )
