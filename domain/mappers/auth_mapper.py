"""
Auth domain mappers.
Builds user, membership and context DTOs from ORM rows.
"""

from typing import Optional
from domain.schemas.auth_schemas import UserInfo, MembershipInfo, ContextResponse


def _value(enum_or_str) -> str:
    return getattr(enum_or_str, "value", enum_or_str)


class AuthMapper:
    """Mapper for authentication responses."""

    @staticmethod
    def user_info(user, role: Optional[str] = None) -> UserInfo:
        """
        Convert a User row to UserInfo.

        Args:
            user: User ORM instance
            role: role to report; defaults to the role stored on the user row
        """
        return UserInfo(
            id=user.id,
            email=user.email,
            first_name=user.first_name or "",
            last_name=user.last_name or "",
            role=role if role is not None else _value(user.role),
            phone=user.phone,
            timezone=user.timezone,
        )

    @staticmethod
    def membership_info(membership, organization, default_membership_id=None) -> MembershipInfo:
        return MembershipInfo(
            id=membership.id,
            organization_id=organization.id,
            organization_name=organization.name,
            organization_slug=organization.slug,
            role=_value(membership.role),
            is_default=membership.id == default_membership_id,
        )

    @staticmethod
    def context(membership, organization, default_membership_id=None) -> ContextResponse:
        return ContextResponse(
            membership_id=membership.id,
            organization_id=organization.id,
            organization_name=organization.name,
            organization_slug=organization.slug,
            role=_value(membership.role),
            is_default=membership.id == default_membership_id,
        )
