"""
Password hashing and JWT handling.

Passwords and one-time codes are hashed with passlib (bcrypt). Tokens are HS256
JWTs carrying the user id (``sub``), the active organization (``org_id``) and,
for platform operators, ``platform_admin``.
"""

import base64
import hashlib
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import UUID

from cryptography.fernet import Fernet, InvalidToken
from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from app.config import settings
from app.exceptions import UnauthorizedError

logger = logging.getLogger("offleash.security")

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.password_bcrypt_rounds,
)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """Verify a password against its hash; accounts without a password never match."""
    if not hashed_password:
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError):
        logger.warning("Stored password hash could not be parsed")
        return False


@dataclass(frozen=True)
class TokenClaims:
    sub: str
    org_id: Optional[str]
    platform_admin: bool
    exp: int
    iat: int

    @property
    def user_id(self) -> Optional[UUID]:
        try:
            return UUID(self.sub)
        except (ValueError, TypeError):
            return None

    @property
    def organization_id(self) -> Optional[UUID]:
        if not self.org_id:
            return None
        try:
            return UUID(self.org_id)
        except (ValueError, TypeError):
            return None


def create_token(
    user_id: UUID,
    org_id: Optional[UUID] = None,
    platform_admin: bool = False,
    expires_in: Optional[timedelta] = None,
) -> str:
    """Create a signed token for a user, optionally scoped to an organization."""
    now = datetime.now(timezone.utc)
    expire = now + (expires_in or timedelta(hours=settings.jwt_expiry_hours))
    payload = {
        "sub": str(user_id),
        "org_id": str(org_id) if org_id else None,
        "exp": int(expire.timestamp()),
        "iat": int(now.timestamp()),
    }
    if platform_admin:
        payload["platform_admin"] = True
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> TokenClaims:
    """
    Verify signature and expiry of a token.

    Raises:
        UnauthorizedError: TOKEN_EXPIRED or INVALID_TOKEN
    """
    try:
        payload = jwt.decode(
            token, settings.jwt_secret, algorithms=[settings.jwt_algorithm]
        )
    except ExpiredSignatureError:
        raise UnauthorizedError("Token has expired", code="TOKEN_EXPIRED")
    except JWTError as e:
        logger.debug("Token rejected: %s", e)
        raise UnauthorizedError("Invalid token", code="INVALID_TOKEN")

    sub = payload.get("sub")
    if not sub:
        raise UnauthorizedError("Invalid token", code="INVALID_TOKEN")
    return TokenClaims(
        sub=sub,
        org_id=payload.get("org_id"),
        platform_admin=bool(payload.get("platform_admin", False)),
        exp=int(payload.get("exp", 0)),
        iat=int(payload.get("iat", 0)),
    )


def _fernet() -> Fernet:
    key = settings.token_encryption_key
    if not key:
        digest = hashlib.sha256(settings.jwt_secret.encode()).digest()
        key = base64.urlsafe_b64encode(digest).decode()
    return Fernet(key.encode() if isinstance(key, str) else key)


def encrypt_secret(value: Optional[str]) -> Optional[str]:
    """Encrypt a third-party credential (OAuth access / refresh token) for storage"""
    if value is None:
        return None
    return _fernet().encrypt(value.encode()).decode()


def decrypt_secret(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    try:
        return _fernet().decrypt(value.encode()).decode()
    except InvalidToken:
        logger.error("Stored credential could not be decrypted (key changed?)")
        raise
