"""
Customer payment methods and tenant payment processor connections.
"""

from sqlalchemy import (
    Column,
    Text,
    TIMESTAMP,
    ForeignKey,
    SmallInteger,
    Boolean,
    Enum as SQLEnum,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func
import uuid

from domain.models.database import Base
from domain.enums import PaymentMethodType, PaymentProviderType


class PaymentMethod(Base):
    """Tokenized payment method saved by a customer"""

    __tablename__ = "payment_methods"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    organization_id = Column(
        UUID(as_uuid=True), ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False
    )
    user_id = Column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    method_type = Column(SQLEnum(PaymentMethodType, name="payment_method_type"), nullable=False)
    provider_token = Column(Text)
    card_brand = Column(Text)
    card_last_four = Column(Text)
    card_exp_month = Column(SmallInteger)
    card_exp_year = Column(SmallInteger)
    nickname = Column(Text)
    is_default = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(
        TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now()
    )


class PaymentProvider(Base):
    """An organization's connected Stripe or Square account"""

    __tablename__ = "payment_providers"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    organization_id = Column(
        UUID(as_uuid=True), ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True
    )
    provider_type = Column(SQLEnum(PaymentProviderType, name="payment_provider_type"), nullable=False)
    merchant_id = Column(Text)
    account_id = Column(Text)
    access_token_encrypted = Column(Text)
    refresh_token_encrypted = Column(Text)
    account_name = Column(Text)
    is_active = Column(Boolean, nullable=False, default=True)
    is_primary = Column(Boolean, nullable=False, default=False)
    is_verified = Column(Boolean, nullable=False, default=False)
    charges_enabled = Column(Boolean, nullable=False, default=False)
    payouts_enabled = Column(Boolean, nullable=False, default=False)
    connected_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(
        TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now()
    )
