"""
Payment Repositories - customer payment methods and organization providers
"""

from typing import List, Optional
from uuid import UUID
from sqlalchemy.orm import Session

from repositories.base import BaseRepository
from domain.models import PaymentMethod, PaymentProvider
from domain.enums import PaymentProviderType


class PaymentMethodRepository(BaseRepository[PaymentMethod]):
    def __init__(self, db: Session):
        super().__init__(db, PaymentMethod)

    def list_active_for_user(self, org_id: UUID, user_id: UUID) -> List[PaymentMethod]:
        return (
            self.db.query(PaymentMethod)
            .filter(
                PaymentMethod.organization_id == org_id,
                PaymentMethod.user_id == user_id,
                PaymentMethod.is_active.is_(True),
            )
            .order_by(PaymentMethod.is_default.desc(), PaymentMethod.created_at)
            .all()
        )

    def get_for_user(self, method_id: UUID, org_id: UUID, user_id: UUID) -> Optional[PaymentMethod]:
        return (
            self.db.query(PaymentMethod)
            .filter(
                PaymentMethod.id == method_id,
                PaymentMethod.organization_id == org_id,
                PaymentMethod.user_id == user_id,
                PaymentMethod.is_active.is_(True),
            )
            .first()
        )

    def clear_default(self, org_id: UUID, user_id: UUID) -> None:
        self.db.query(PaymentMethod).filter(
            PaymentMethod.organization_id == org_id,
            PaymentMethod.user_id == user_id,
            PaymentMethod.is_default.is_(True),
        ).update({PaymentMethod.is_default: False}, synchronize_session=False)


class PaymentProviderRepository(BaseRepository[PaymentProvider]):
    def __init__(self, db: Session):
        super().__init__(db, PaymentProvider)

    def list_for_org(self, org_id: UUID) -> List[PaymentProvider]:
        return (
            self.db.query(PaymentProvider)
            .filter(PaymentProvider.organization_id == org_id)
            .order_by(PaymentProvider.is_primary.desc(), PaymentProvider.connected_at)
            .all()
        )

    def get_primary(self, org_id: UUID) -> Optional[PaymentProvider]:
        return (
            self.db.query(PaymentProvider)
            .filter(
                PaymentProvider.organization_id == org_id,
                PaymentProvider.is_primary.is_(True),
                PaymentProvider.is_active.is_(True),
            )
            .first()
        )

    def get_by_type(self, org_id: UUID, provider_type: PaymentProviderType) -> Optional[PaymentProvider]:
        return (
            self.db.query(PaymentProvider)
            .filter(
                PaymentProvider.organization_id == org_id,
                PaymentProvider.provider_type == provider_type,
            )
            .first()
        )

    def count_active(self, org_id: UUID) -> int:
        return (
            self.db.query(PaymentProvider)
            .filter(
                PaymentProvider.organization_id == org_id,
                PaymentProvider.is_active.is_(True),
            )
            .count()
        )

    def clear_primary(self, org_id: UUID) -> None:
        self.db.query(PaymentProvider).filter(
            PaymentProvider.organization_id == org_id,
            PaymentProvider.is_primary.is_(True),
        ).update({PaymentProvider.is_primary: False}, synchronize_session=False)
