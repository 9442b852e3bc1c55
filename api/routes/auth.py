"""Sign-in routes: email, OAuth, phone, wallet and platform operators"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
import logging

from api.dependencies import AuthUser, get_current_user, get_db
from domain.schemas.auth_schemas import (
    AppleAuthRequest,
    AuthResponse,
    GoogleAuthRequest,
    LoginRequest,
    MessageResponse,
    PhoneSendCodeRequest,
    PhoneVerifyRequest,
    PlatformAuthResponse,
    PlatformLoginRequest,
    RefreshResponse,
    RegisterRequest,
    SessionResponse,
    UniversalLoginRequest,
    ValidateResponse,
    WalletChallengeRequest,
    WalletChallengeResponse,
    WalletVerifyRequest,
)
from services.auth_service import AuthService
from services.oauth_service import OAuthService
from services.phone_auth_service import PhoneAuthService
from services.wallet_auth_service import WalletAuthService

router = APIRouter(prefix="/auth", tags=["Auth"])
platform_router = APIRouter(prefix="/platform/auth", tags=["Platform"])
logger = logging.getLogger("offleash.api.auth")


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(data: RegisterRequest, db: Session = Depends(get_db)):
    return AuthService.register(db, data)


@router.post("/login", response_model=AuthResponse)
def login(data: LoginRequest, db: Session = Depends(get_db)):
    """Sign in to one organization"""
    return AuthService.login(db, data)


@router.post("/login/universal", response_model=AuthResponse)
def login_universal(data: UniversalLoginRequest, db: Session = Depends(get_db)):
    """Sign in without naming an organization; the default membership is used"""
    return AuthService.login_universal(db, data)


@router.get("/validate", response_model=ValidateResponse)
def validate(user: AuthUser = Depends(get_current_user)):
    return ValidateResponse(valid=True, user_id=user.user_id)


@router.post("/refresh", response_model=RefreshResponse)
def refresh(user: AuthUser = Depends(get_current_user)):
    """Reissue the caller's token with the same claims"""
    return AuthService.refresh(user.user_id, user.org_id, platform_admin=user.platform_admin)


@router.get("/session", response_model=SessionResponse)
def session(user: AuthUser = Depends(get_current_user), db: Session = Depends(get_db)):
    return AuthService.get_session(db, user.user_id, user.org_id)


@router.post("/google", response_model=AuthResponse)
def google(data: GoogleAuthRequest, db: Session = Depends(get_db)):
    return OAuthService.google(db, data)


@router.post("/apple", response_model=AuthResponse)
def apple(data: AppleAuthRequest, db: Session = Depends(get_db)):
    return OAuthService.apple(db, data)


@router.post("/phone/send-code", response_model=MessageResponse)
def phone_send_code(data: PhoneSendCodeRequest, db: Session = Depends(get_db)):
    """Text a one-time code; the response is the same when rate limited"""
    return PhoneAuthService.send_code(db, data)


@router.post("/phone/verify", response_model=AuthResponse)
def phone_verify(data: PhoneVerifyRequest, db: Session = Depends(get_db)):
    return PhoneAuthService.verify_code(db, data)


@router.post("/wallet/challenge", response_model=WalletChallengeResponse)
def wallet_challenge(data: WalletChallengeRequest, db: Session = Depends(get_db)):
    """Sign-In with Ethereum message for the wallet to sign"""
    return WalletAuthService.create_challenge(db, data)


@router.post("/wallet/verify", response_model=AuthResponse)
def wallet_verify(data: WalletVerifyRequest, db: Session = Depends(get_db)):
    return WalletAuthService.verify(db, data)


@platform_router.post("/login", response_model=PlatformAuthResponse)
def platform_login(data: PlatformLoginRequest, db: Session = Depends(get_db)):
    return AuthService.platform_login(db, data.email, data.password)
