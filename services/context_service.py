from typing import Optional, Tuple
from uuid import UUID
import logging

from sqlalchemy.orm import Session

from app.exceptions import NotFoundError
from app.security import create_token
from domain.enums import MembershipStatus
from domain.mappers import AuthMapper
from domain.models import Membership, Organization, User
from domain.schemas.auth_schemas import ContextListResponse, ContextSwitchResponse
from repositories import MembershipRepository, OrganizationRepository, UserRepository

logger = logging.getLogger("offleash.context")


class ContextService:
    """Organization contexts (memberships) a user can act in"""

    @staticmethod
    def _own_membership(db: Session, user_id: UUID, membership_id: UUID) -> Tuple[User, Membership, Organization]:
        user = UserRepository(db).get_by_id(user_id)
        membership = MembershipRepository(db).get_by_id(membership_id)
        if (
            user is None
            or membership is None
            or membership.user_id != user_id
            or getattr(membership.status, "value", membership.status) != MembershipStatus.ACTIVE.value
        ):
            raise NotFoundError("Membership not found", code="MEMBERSHIP_NOT_FOUND")

        org = OrganizationRepository(db).get_by_id(membership.organization_id)
        if org is None or not org.is_active:
            raise NotFoundError("Membership not found", code="MEMBERSHIP_NOT_FOUND")
        return user, membership, org

    @staticmethod
    def list_contexts(db: Session, user_id: UUID, current_org_id: Optional[UUID]) -> ContextListResponse:
        user = UserRepository(db).get_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found", code="USER_NOT_FOUND")

        rows = MembershipRepository(db).list_for_user(user_id)
        return ContextListResponse(
            contexts=[AuthMapper.context(m, org, user.default_membership_id) for m, org in rows],
            current_org_id=current_org_id,
        )

    @staticmethod
    def switch(db: Session, user_id: UUID, membership_id: UUID) -> ContextSwitchResponse:
        user, membership, org = ContextService._own_membership(db, user_id, membership_id)
        logger.info(f"context_switched user_id={user_id} org_id={org.id}")
        return ContextSwitchResponse(
            token=create_token(user_id, org.id),
            membership=AuthMapper.membership_info(membership, org, user.default_membership_id),
        )

    @staticmethod
    def set_default(db: Session, user_id: UUID, membership_id: UUID, current_org_id: Optional[UUID]) -> ContextListResponse:
        user, membership, _ = ContextService._own_membership(db, user_id, membership_id)
        try:
            user.default_membership_id = membership.id
            db.commit()
        except Exception:
            db.rollback()
            logger.exception("Error setting default membership for user %s", user_id)
            raise
        return ContextService.list_contexts(db, user_id, current_org_id)
