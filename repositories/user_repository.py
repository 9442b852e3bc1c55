"""
User Repository - Data access for users, memberships and sign-in identities
"""

from datetime import datetime
from typing import List, Optional, Tuple
from uuid import UUID
from sqlalchemy.orm import Session

from repositories.base import BaseRepository
from domain.models import (
    User,
    Membership,
    Organization,
    UserIdentity,
    PhoneVerification,
    WalletChallenge,
)
from domain.enums import MembershipRole, MembershipStatus, AuthProvider


class UserRepository(BaseRepository[User]):
    """Repository for user data access"""

    def __init__(self, db: Session):
        super().__init__(db, User)

    def get_in_org(self, user_id: UUID, org_id: UUID) -> Optional[User]:
        """A user is visible in an organization when they hold a membership there"""
        return (
            self.db.query(User)
            .join(Membership, Membership.user_id == User.id)
            .filter(User.id == user_id, Membership.organization_id == org_id)
            .first()
        )

    def get_by_email_in_org(self, email: str, org_id: UUID) -> Optional[User]:
        return (
            self.db.query(User)
            .filter(User.email == email, User.organization_id == org_id)
            .first()
        )

    def get_by_email(self, email: str) -> Optional[User]:
        """Global lookup; the oldest account wins when an email exists in several organizations"""
        return (
            self.db.query(User)
            .filter(User.email == email)
            .order_by(User.created_at)
            .first()
        )

    def lock_for_update(self, user_id: UUID) -> Optional[User]:
        """SELECT ... FOR UPDATE on the user row; serializes booking writes per walker"""
        return (
            self.db.query(User).filter(User.id == user_id).with_for_update().first()
        )

    def list_in_org(self, org_id: UUID, role: Optional[MembershipRole] = None) -> List[Tuple[User, Membership]]:
        query = (
            self.db.query(User, Membership)
            .join(Membership, Membership.user_id == User.id)
            .filter(Membership.organization_id == org_id)
        )
        if role is not None:
            query = query.filter(Membership.role == role)
        return query.order_by(User.created_at).all()

    def first_walker(self, org_id: UUID) -> Optional[User]:
        return (
            self.db.query(User)
            .join(Membership, Membership.user_id == User.id)
            .filter(
                Membership.organization_id == org_id,
                Membership.role == MembershipRole.WALKER,
                Membership.status == MembershipStatus.ACTIVE,
            )
            .order_by(User.created_at)
            .first()
        )


class MembershipRepository(BaseRepository[Membership]):
    def __init__(self, db: Session):
        super().__init__(db, Membership)

    def get_for_user_in_org(self, user_id: UUID, org_id: UUID) -> Optional[Membership]:
        return (
            self.db.query(Membership)
            .filter(Membership.user_id == user_id, Membership.organization_id == org_id)
            .first()
        )

    def get_active_for_user_in_org(self, user_id: UUID, org_id: UUID) -> Optional[Membership]:
        return (
            self.db.query(Membership)
            .filter(
                Membership.user_id == user_id,
                Membership.organization_id == org_id,
                Membership.status == MembershipStatus.ACTIVE,
            )
            .first()
        )

    def list_for_user(self, user_id: UUID) -> List[Tuple[Membership, Organization]]:
        """Active memberships with their organizations, oldest first"""
        return (
            self.db.query(Membership, Organization)
            .join(Organization, Organization.id == Membership.organization_id)
            .filter(
                Membership.user_id == user_id,
                Membership.status == MembershipStatus.ACTIVE,
            )
            .order_by(Membership.created_at)
            .all()
        )

    def count_by_role(self, org_id: UUID, role: MembershipRole) -> int:
        return (
            self.db.query(Membership)
            .filter(
                Membership.organization_id == org_id,
                Membership.role == role,
                Membership.status == MembershipStatus.ACTIVE,
            )
            .count()
        )


class IdentityRepository(BaseRepository[UserIdentity]):
    def __init__(self, db: Session):
        super().__init__(db, UserIdentity)

    def get_by_provider(self, provider: AuthProvider, provider_user_id: str) -> Optional[UserIdentity]:
        return (
            self.db.query(UserIdentity)
            .filter(
                UserIdentity.provider == provider,
                UserIdentity.provider_user_id == provider_user_id,
            )
            .first()
        )

    def get_for_user_and_provider(self, user_id: UUID, provider: AuthProvider) -> Optional[UserIdentity]:
        return (
            self.db.query(UserIdentity)
            .filter(UserIdentity.user_id == user_id, UserIdentity.provider == provider)
            .first()
        )

    def list_for_user(self, user_id: UUID) -> List[UserIdentity]:
        return (
            self.db.query(UserIdentity)
            .filter(UserIdentity.user_id == user_id)
            .order_by(UserIdentity.created_at)
            .all()
        )

    def count_for_user(self, user_id: UUID) -> int:
        return self.db.query(UserIdentity).filter(UserIdentity.user_id == user_id).count()


class PhoneVerificationRepository(BaseRepository[PhoneVerification]):
    def __init__(self, db: Session):
        super().__init__(db, PhoneVerification)

    def count_since(self, phone_number: str, since: datetime) -> int:
        return (
            self.db.query(PhoneVerification)
            .filter(
                PhoneVerification.phone_number == phone_number,
                PhoneVerification.created_at >= since,
            )
            .count()
        )

    def get_active(self, phone_number: str, now: datetime) -> Optional[PhoneVerification]:
        """Most recent unexpired code for a phone number"""
        return (
            self.db.query(PhoneVerification)
            .filter(
                PhoneVerification.phone_number == phone_number,
                PhoneVerification.expires_at > now,
            )
            .order_by(PhoneVerification.created_at.desc())
            .first()
        )

    def delete_for_phone(self, phone_number: str) -> int:
        return (
            self.db.query(PhoneVerification)
            .filter(PhoneVerification.phone_number == phone_number)
            .delete(synchronize_session=False)
        )


class WalletChallengeRepository(BaseRepository[WalletChallenge]):
    def __init__(self, db: Session):
        super().__init__(db, WalletChallenge)

    def get_active(self, wallet_address: str, now: datetime) -> Optional[WalletChallenge]:
        return (
            self.db.query(WalletChallenge)
            .filter(
                WalletChallenge.wallet_address == wallet_address,
                WalletChallenge.expires_at > now,
            )
            .order_by(WalletChallenge.created_at.desc())
            .first()
        )

    def delete_for_address(self, wallet_address: str) -> int:
        return (
            self.db.query(WalletChallenge)
            .filter(WalletChallenge.wallet_address == wallet_address)
            .delete(synchronize_session=False)
        )
