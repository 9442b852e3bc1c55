"""
API dependencies for dependency injection
"""

from dataclasses import dataclass
from typing import Generator, Optional
from uuid import UUID

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from app.exceptions import UnauthorizedError, ForbiddenError
from app.security import decode_token, TokenClaims
from domain.enums import MembershipRole
from domain.models import get_db_session
from repositories import MembershipRepository


def get_db() -> Generator[Session, None, None]:
    """
    Database session dependency for FastAPI routes.

    Usage:
        @router.get("/example")
        def example(db: Session = Depends(get_db)):
            # Use db session here
            pass
    """
    yield from get_db_session()


@dataclass(frozen=True)
class AuthUser:
    """Caller identified by a verified bearer token"""

    user_id: UUID
    org_id: Optional[UUID]
    platform_admin: bool = False


@dataclass(frozen=True)
class TenantContext:
    """Caller acting inside one organization with the role of their membership there"""

    user_id: UUID
    org_id: UUID
    role: MembershipRole
    membership_id: Optional[UUID] = None

    @property
    def is_admin(self) -> bool:
        return self.role.is_admin

    @property
    def is_walker(self) -> bool:
        return self.role == MembershipRole.WALKER

    @property
    def is_customer(self) -> bool:
        return self.role == MembershipRole.CUSTOMER


def _bearer_token(authorization: Optional[str]) -> str:
    if not authorization:
        raise UnauthorizedError("Missing authorization header")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise UnauthorizedError("Invalid authorization header", code="INVALID_TOKEN")
    return token.strip()


def get_token_claims(authorization: Optional[str] = Header(default=None)) -> TokenClaims:
    return decode_token(_bearer_token(authorization))


def get_current_user(claims: TokenClaims = Depends(get_token_claims)) -> AuthUser:
    """Any authenticated caller; 401 for a missing, malformed, expired or forged token"""
    user_id = claims.user_id
    if user_id is None:
        raise UnauthorizedError("Invalid token subject", code="INVALID_TOKEN")
    return AuthUser(
        user_id=user_id,
        org_id=claims.organization_id,
        platform_admin=claims.platform_admin,
    )


def get_tenant(
    user: AuthUser = Depends(get_current_user), db: Session = Depends(get_db)
) -> TenantContext:
    """Authenticated caller whose token is scoped to an organization they belong to"""
    if user.org_id is None:
        raise UnauthorizedError("Token is not scoped to an organization", code="INVALID_TOKEN")

    membership = MembershipRepository(db).get_active_for_user_in_org(user.user_id, user.org_id)
    if membership is None:
        raise ForbiddenError("No active membership in this organization")
    return TenantContext(
        user_id=user.user_id,
        org_id=user.org_id,
        role=MembershipRole(getattr(membership.role, "value", membership.role)),
        membership_id=membership.id,
    )


def require_admin(tenant: TenantContext = Depends(get_tenant)) -> TenantContext:
    if not tenant.is_admin:
        raise ForbiddenError("Admin access required")
    return tenant


def require_walker(tenant: TenantContext = Depends(get_tenant)) -> TenantContext:
    if not tenant.is_walker:
        raise ForbiddenError("Walker access required")
    return tenant


def require_platform_admin(user: AuthUser = Depends(get_current_user)) -> AuthUser:
    if not user.platform_admin:
        raise ForbiddenError("Platform admin access required")
    return user


def get_optional_tenant(
    authorization: Optional[str] = Header(default=None), db: Session = Depends(get_db)
) -> Optional[TenantContext]:
    """Tenant of the caller when a token is sent, otherwise None"""
    if not authorization:
        return None
    user = get_current_user(get_token_claims(authorization))
    return get_tenant(user, db)
