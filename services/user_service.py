from typing import List, Optional
from uuid import UUID
import logging

from sqlalchemy.orm import Session

from api.dependencies import TenantContext
from app.exceptions import ConflictError, ForbiddenError, NotFoundError, ServiceValidationError
from app.security import hash_password
from core.timezones import is_valid_timezone
from domain.enums import AuthProvider, MembershipRole
from domain.mappers import UserMapper
from domain.models import User, UserIdentity
from domain.schemas.user_schemas import UserResponse, UserUpdateRequest, WalkerCreateRequest
from repositories import (
    BookingRepository,
    MembershipRepository,
    OrganizationRepository,
    UserRepository,
)
from services.auth_service import AuthService, validate_password

logger = logging.getLogger("offleash.users")


def _role_value(role) -> str:
    return getattr(role, "value", role)


class UserService:
    """Business logic for user accounts inside an organization"""

    @staticmethod
    def get_member(db: Session, org_id: UUID, user_id: UUID) -> User:
        user = UserRepository(db).get_in_org(user_id, org_id)
        if not user:
            raise NotFoundError("User not found", code="USER_NOT_FOUND")
        return user

    @staticmethod
    def get_walker(db: Session, org_id: UUID, walker_id: UUID) -> User:
        """
        Raises:
            NotFoundError: WALKER_NOT_FOUND when the user is not an active member
            ServiceValidationError: the member does not hold the walker role
        """
        membership = MembershipRepository(db).get_active_for_user_in_org(walker_id, org_id)
        user = UserRepository(db).get_by_id(walker_id) if membership else None
        if user is None:
            raise NotFoundError(f"Walker not found: {walker_id}", code="WALKER_NOT_FOUND")
        if _role_value(membership.role) != MembershipRole.WALKER.value:
            raise ServiceValidationError("Selected user is not a walker", code="NOT_A_WALKER")
        return user

    @staticmethod
    def get_me(db: Session, tenant: TenantContext) -> UserResponse:
        user = UserService.get_member(db, tenant.org_id, tenant.user_id)
        return UserMapper.to_response(user, role=tenant.role.value)

    @staticmethod
    def update_me(db: Session, tenant: TenantContext, data: UserUpdateRequest) -> UserResponse:
        user = UserService.get_member(db, tenant.org_id, tenant.user_id)

        updates = data.model_dump(exclude_unset=True)
        if updates.get("timezone") and not is_valid_timezone(updates["timezone"]):
            raise ServiceValidationError(f"Unknown timezone: {updates['timezone']}", code="INVALID_TIMEZONE")

        try:
            for field, value in updates.items():
                setattr(user, field, value)
            db.commit()
            db.refresh(user)
        except Exception:
            db.rollback()
            logger.exception("Error updating user %s", user.id)
            raise

        logger.info(f"user_updated user_id={user.id} fields={sorted(updates)}")
        return UserMapper.to_response(user, role=tenant.role.value)

    @staticmethod
    def list_users(db: Session, tenant: TenantContext, role: Optional[str] = None) -> List[UserResponse]:
        membership_role = None
        if role:
            try:
                membership_role = MembershipRole(role)
            except ValueError:
                raise ServiceValidationError(
                    "Invalid role. Must be customer, walker, admin or owner"
                )
        rows = UserRepository(db).list_in_org(tenant.org_id, membership_role)
        return [UserMapper.to_response(u, role=_role_value(m.role)) for u, m in rows]

    @staticmethod
    def get_user(db: Session, tenant: TenantContext, user_id: UUID) -> UserResponse:
        """Admins see everyone; others see themselves and the people they share a booking with"""
        user = UserService.get_member(db, tenant.org_id, user_id)
        if not (
            tenant.is_admin
            or user_id == tenant.user_id
            or BookingRepository(db).shares_booking(tenant.org_id, tenant.user_id, user_id)
        ):
            raise ForbiddenError("Not allowed to view this user")
        return UserMapper.to_response(user)

    @staticmethod
    def create_walker(db: Session, tenant: TenantContext, data: WalkerCreateRequest) -> UserResponse:
        org = OrganizationRepository(db).get_by_id(tenant.org_id)
        if org is None:
            raise NotFoundError("Organization not found", code="ORGANIZATION_NOT_FOUND")

        email = data.email.strip().lower()
        if UserRepository(db).get_by_email_in_org(email, org.id):
            raise ConflictError("Email already registered", code="EMAIL_EXISTS")
        validate_password(data.password)

        try:
            user, _ = AuthService.create_member(
                db,
                org,
                email=email,
                first_name=data.first_name,
                last_name=data.last_name,
                role=MembershipRole.WALKER,
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
            logger.exception("Error creating walker %s", email)
            raise

        logger.info(f"walker_created user_id={user.id} org_id={org.id}")
        return UserMapper.to_response(user, role=MembershipRole.WALKER.value)
