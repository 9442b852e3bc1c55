from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from uuid import UUID


class RegisterRequest(BaseModel):
    """Self-registration inside an organization"""

    org_slug: str
    email: str
    password: str
    first_name: str
    last_name: str
    phone: Optional[str] = None
    role: Optional[str] = Field(
        None, description="walker, admin or customer (default)"
    )


class LoginRequest(BaseModel):
    org_slug: str
    email: str
    password: str


class UniversalLoginRequest(BaseModel):
    email: str
    password: str


class PlatformLoginRequest(BaseModel):
    email: str
    password: str


class UserInfo(BaseModel):
    id: UUID
    email: str
    first_name: str
    last_name: str
    role: str
    phone: Optional[str] = None
    timezone: Optional[str] = None


class MembershipInfo(BaseModel):
    id: UUID
    organization_id: UUID
    organization_name: str
    organization_slug: str
    role: str
    is_default: bool = False


class AuthResponse(BaseModel):
    """Token plus the identity it was issued for"""

    token: str
    user: UserInfo
    membership: Optional[MembershipInfo] = None
    memberships: List[MembershipInfo] = Field(default_factory=list)


class ValidateResponse(BaseModel):
    valid: bool
    user_id: UUID


class RefreshResponse(BaseModel):
    token: str
    expires_in: int


class SessionResponse(BaseModel):
    user: UserInfo
    membership: Optional[MembershipInfo] = None
    memberships: List[MembershipInfo] = Field(default_factory=list)
    org_id: Optional[UUID] = None


class PlatformAuthResponse(BaseModel):
    token: str
    admin_id: UUID
    email: str


class GoogleAuthRequest(BaseModel):
    id_token: str
    org_slug: Optional[str] = None


class AppleAuthRequest(BaseModel):
    id_token: str
    org_slug: Optional[str] = None
    # Apple only sends the name on the first sign-in
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class PhoneSendCodeRequest(BaseModel):
    org_slug: str
    phone_number: str


class PhoneVerifyRequest(BaseModel):
    org_slug: str
    phone_number: str
    code: str


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class WalletChallengeRequest(BaseModel):
    org_slug: str
    wallet_address: str


class WalletChallengeResponse(BaseModel):
    message: str
    nonce: str


class WalletVerifyRequest(BaseModel):
    org_slug: str
    wallet_address: str
    message: str
    signature: str


class ContextResponse(BaseModel):
    membership_id: UUID
    organization_id: UUID
    organization_name: str
    organization_slug: str
    role: str
    is_default: bool


class ContextListResponse(BaseModel):
    contexts: List[ContextResponse]
    current_org_id: Optional[UUID] = None


class ContextSwitchRequest(BaseModel):
    membership_id: UUID


class ContextSwitchResponse(BaseModel):
    token: str
    membership: MembershipInfo


class IdentityResponse(BaseModel):
    id: UUID
    provider: str
    provider_user_id: str
    provider_email: Optional[str] = None
    created_at: Optional[datetime] = None
    can_unlink: bool


class LinkOAuthRequest(BaseModel):
    id_token: str


class LinkEmailRequest(BaseModel):
    email: str
    password: str


class ChangePasswordRequest(BaseModel):
    current_password: Optional[str] = None
    new_password: str
