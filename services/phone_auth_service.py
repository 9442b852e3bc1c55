from datetime import timedelta
import logging
import re
import secrets

from sqlalchemy.orm import Session

from adapters import sms_adapter
from app.exceptions import OffleashError, ServiceValidationError, UnauthorizedError
from app.security import hash_password, verify_password
from core.timezones import utcnow
from domain.enums import AuthProvider
from domain.models import PhoneVerification, UserIdentity
from domain.schemas.auth_schemas import (
    AuthResponse,
    MessageResponse,
    PhoneSendCodeRequest,
    PhoneVerifyRequest,
)
from repositories import IdentityRepository, PhoneVerificationRepository, UserRepository
from services.auth_service import AuthService

logger = logging.getLogger("offleash.phone_auth")

E164_PATTERN = re.compile(r"^\+\d{10,15}$")
CODE_TTL = timedelta(minutes=10)
RATE_WINDOW = timedelta(hours=1)
MAX_CODES_PER_WINDOW = 3
MAX_ATTEMPTS = 5
CODE_SENT_MESSAGE = "If the number is valid, a verification code has been sent"


def normalize_phone(phone_number: str) -> str:
    phone = re.sub(r"[\s\-().]", "", phone_number or "")
    if not E164_PATTERN.match(phone):
        raise ServiceValidationError(
            "Invalid phone number. Use E.164 format, e.g. +15551234567",
            code="INVALID_PHONE",
        )
    return phone


def generate_code() -> str:
    return f"{secrets.randbelow(1_000_000):06d}"


class PhoneAuthService:
    """Passwordless sign-in with a 6 digit SMS code"""

    @staticmethod
    def send_code(db: Session, data: PhoneSendCodeRequest) -> MessageResponse:
        phone = normalize_phone(data.phone_number)
        org = AuthService.get_active_org(db, data.org_slug)
        repo = PhoneVerificationRepository(db)
        now = utcnow()

        if repo.count_since(phone, now - RATE_WINDOW) >= MAX_CODES_PER_WINDOW:
            # Same answer as success so callers cannot tell the limit was hit
            logger.warning(f"phone_code_rate_limited org={org.slug}")
            return MessageResponse(success=True, message=CODE_SENT_MESSAGE)

        code = generate_code()
        try:
            db.add(
                PhoneVerification(
                    phone_number=phone,
                    code_hash=hash_password(code),
                    attempts=0,
                    expires_at=now + CODE_TTL,
                )
            )
            db.commit()
        except Exception:
            db.rollback()
            logger.exception("Error storing phone verification")
            raise

        delivered = sms_adapter.send_sms(phone, f"Your {org.name} verification code is {code}")
        if not delivered:
            logger.warning(f"phone_code_not_delivered org={org.slug}")
        return MessageResponse(success=True, message=CODE_SENT_MESSAGE)

    @staticmethod
    def verify_code(db: Session, data: PhoneVerifyRequest) -> AuthResponse:
        phone = normalize_phone(data.phone_number)
        org = AuthService.get_active_org(db, data.org_slug)
        repo = PhoneVerificationRepository(db)

        verification = repo.get_active(phone, utcnow())
        if verification is None:
            raise UnauthorizedError("Invalid or expired verification code", code="INVALID_CODE")

        if verification.attempts >= MAX_ATTEMPTS:
            raise ServiceValidationError(
                "Too many failed attempts. Request a new code", code="TOO_MANY_ATTEMPTS"
            )

        if not verify_password(data.code.strip(), verification.code_hash):
            verification.attempts += 1
            db.commit()
            logger.warning(f"phone_code_rejected attempts={verification.attempts}")
            raise UnauthorizedError("Invalid or expired verification code", code="INVALID_CODE")

        try:
            repo.delete_for_phone(phone)

            identity = IdentityRepository(db).get_by_provider(AuthProvider.PHONE, phone)
            user = UserRepository(db).get_by_id(identity.user_id) if identity else None
            if user is None:
                digits = phone.lstrip("+")
                user, _ = AuthService.create_member(
                    db,
                    org,
                    email=f"{digits}@phone.offleash.app",
                    first_name="Phone",
                    last_name="User",
                    phone=phone,
                )
                db.add(
                    UserIdentity(
                        user_id=user.id,
                        provider=AuthProvider.PHONE,
                        provider_user_id=phone,
                    )
                )
                logger.info(f"phone_user_created user_id={user.id} org={org.slug}")
            db.commit()
            db.refresh(user)
        except OffleashError:
            db.rollback()
            raise
        except Exception:
            db.rollback()
            logger.exception("Error completing phone sign-in")
            raise

        return AuthService.build_auth_response(db, user)
