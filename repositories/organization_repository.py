"""
Organization Repository - Data access for tenants and platform operators
"""

from typing import List, Optional
from sqlalchemy.orm import Session
from sqlalchemy import or_

from repositories.base import BaseRepository
from domain.models import Organization, PlatformAdmin


class OrganizationRepository(BaseRepository[Organization]):
    """Repository for organization data access"""

    def __init__(self, db: Session):
        super().__init__(db, Organization)

    def get_by_slug(self, slug: str) -> Optional[Organization]:
        return self.db.query(Organization).filter(Organization.slug == slug).first()

    def get_active_by_slug(self, slug: str) -> Optional[Organization]:
        return (
            self.db.query(Organization)
            .filter(Organization.slug == slug, Organization.is_active.is_(True))
            .first()
        )

    def get_by_host(self, host: str) -> Optional[Organization]:
        """Resolve a tenant from a custom domain or subdomain"""
        return (
            self.db.query(Organization)
            .filter(or_(Organization.custom_domain == host, Organization.subdomain == host))
            .first()
        )

    def get_default(self) -> Optional[Organization]:
        """The oldest active organization, used when a sign-in names none"""
        return (
            self.db.query(Organization)
            .filter(Organization.is_active.is_(True))
            .order_by(Organization.created_at)
            .first()
        )

    def list_all(self, skip: int = 0, limit: int = 100) -> List[Organization]:
        return (
            self.db.query(Organization)
            .order_by(Organization.created_at.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def count(self) -> int:
        return self.db.query(Organization).count()

    def slug_exists(self, slug: str) -> bool:
        return self.get_by_slug(slug) is not None


class PlatformAdminRepository(BaseRepository[PlatformAdmin]):
    def __init__(self, db: Session):
        super().__init__(db, PlatformAdmin)

    def get_by_email(self, email: str) -> Optional[PlatformAdmin]:
        return self.db.query(PlatformAdmin).filter(PlatformAdmin.email == email).first()
