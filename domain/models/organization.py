"""
Tenant (organization) and platform operator models.
"""

from sqlalchemy import Column, Text, TIMESTAMP, Boolean
from sqlalchemy.dialects.postgresql import UUID, JSONB, CITEXT
from sqlalchemy.sql import func
import uuid

from domain.models.database import Base


class Organization(Base):
    """A tenant business. Branding and payment configuration live in ``settings``."""

    __tablename__ = "organizations"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(Text, nullable=False)
    slug = Column(Text, unique=True, nullable=False, index=True)
    subdomain = Column(Text, unique=True)
    custom_domain = Column(Text, unique=True)
    settings = Column(JSONB, nullable=False, default=dict)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(
        TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    @property
    def branding(self) -> dict:
        return dict((self.settings or {}).get("branding") or {})

    @property
    def payment_config(self) -> dict:
        return dict((self.settings or {}).get("payment_config") or {})


class PlatformAdmin(Base):
    """Operator account that manages tenants"""

    __tablename__ = "platform_admins"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email = Column(CITEXT, unique=True, nullable=False)
    password_hash = Column(Text, nullable=False)
    first_name = Column(Text)
    last_name = Column(Text)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
