from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from uuid import UUID


class BrandingResponse(BaseModel):
    company_name: str
    primary_color: Optional[str] = None
    secondary_color: Optional[str] = None
    accent_color: Optional[str] = None
    logo_url: Optional[str] = None
    favicon_url: Optional[str] = None
    font_family: Optional[str] = None
    support_email: Optional[str] = None


class BrandingUpdate(BaseModel):
    company_name: Optional[str] = None
    primary_color: Optional[str] = Field(None, description="#RRGGBB")
    secondary_color: Optional[str] = Field(None, description="#RRGGBB")
    accent_color: Optional[str] = Field(None, description="#RRGGBB")
    logo_url: Optional[str] = None
    favicon_url: Optional[str] = None
    font_family: Optional[str] = None
    support_email: Optional[str] = None


class PaymentConfigResponse(BaseModel):
    business_model: str
    fee_structure: str
    billing_frequency: str
    apple_pay_enabled: bool
    google_pay_enabled: bool
    preferred_provider: Optional[str] = None


class PaymentConfigUpdate(BaseModel):
    business_model: Optional[str] = None
    fee_structure: Optional[str] = None
    billing_frequency: Optional[str] = None
    apple_pay_enabled: Optional[bool] = None
    google_pay_enabled: Optional[bool] = None
    preferred_provider: Optional[str] = None


class DashboardMetrics(BaseModel):
    todays_bookings: int
    pending_bookings: int
    active_walkers: int
    total_customers: int
    revenue_this_month_cents: int
    revenue_this_month_display: str


class PaymentProviderResponse(BaseModel):
    id: UUID
    provider_type: str
    is_active: bool
    is_primary: bool
    is_verified: bool
    merchant_id: Optional[str] = None
    connected_at: Optional[datetime] = None
    account_name: Optional[str] = None
    charges_enabled: bool
    payouts_enabled: bool

    model_config = {"from_attributes": True}


class ConnectUrlResponse(BaseModel):
    url: str
    state: str


class ProviderCallbackRequest(BaseModel):
    code: str
    state: str


class PaymentProviderUpdate(BaseModel):
    is_active: Optional[bool] = None
    is_primary: Optional[bool] = None


class PaymentMethodCreate(BaseModel):
    method_type: str = Field("card", description="card, apple_pay, google_pay or bank_account")
    provider_token: Optional[str] = None
    card_brand: Optional[str] = None
    card_last_four: Optional[str] = None
    card_exp_month: Optional[int] = Field(None, ge=1, le=12)
    card_exp_year: Optional[int] = None
    nickname: Optional[str] = None
    is_default: bool = False


class PaymentMethodUpdate(BaseModel):
    nickname: Optional[str] = None


class PaymentMethodResponse(BaseModel):
    id: UUID
    method_type: str
    card_brand: Optional[str] = None
    card_last_four: Optional[str] = None
    card_exp_month: Optional[int] = None
    card_exp_year: Optional[int] = None
    nickname: Optional[str] = None
    is_default: bool
    display_name: str


class TenantCreate(BaseModel):
    name: str = Field(..., min_length=1)
    slug: str
    owner_email: Optional[str] = None
    owner_password: Optional[str] = None
    owner_first_name: Optional[str] = None
    owner_last_name: Optional[str] = None


class TenantUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    is_active: Optional[bool] = None


class TenantResponse(BaseModel):
    id: UUID
    name: str
    slug: str
    subdomain: Optional[str] = None
    custom_domain: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class TenantListResponse(BaseModel):
    tenants: List[TenantResponse]
    total: int
