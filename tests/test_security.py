"""
Password hashing, token signing and credential encryption
"""

import uuid
from datetime import timedelta

import pytest
from jose import jwt

from app.config import settings
from app.exceptions import UnauthorizedError
from app.security import (
    create_token,
    decode_token,
    decrypt_secret,
    encrypt_secret,
    hash_password,
    verify_password,
)


# =============================================================================
# PASSWORDS
# =============================================================================


def test_password_hash_verifies():
    """
    Verifies:
    - The stored hash is not the plain password
    - The right password matches and a wrong one does not
    """
    hashed = hash_password("correct horse battery")
    assert hashed != "correct horse battery"
    assert verify_password("correct horse battery", hashed)
    assert not verify_password("wrong horse", hashed)


def test_account_without_password_never_matches():
    assert verify_password("anything", None) is False
    assert verify_password("anything", "") is False


def test_garbage_hash_does_not_raise():
    assert verify_password("anything", "not-a-bcrypt-hash") is False


# =============================================================================
# TOKENS
# =============================================================================


def test_token_round_trip_with_org():
    user_id, org_id = uuid.uuid4(), uuid.uuid4()
    claims = decode_token(create_token(user_id, org_id))

    assert claims.user_id == user_id
    assert claims.organization_id == org_id
    assert claims.platform_admin is False
    assert claims.exp > claims.iat


def test_token_without_org():
    claims = decode_token(create_token(uuid.uuid4()))
    assert claims.organization_id is None


def test_platform_admin_claim():
    claims = decode_token(create_token(uuid.uuid4(), platform_admin=True))
    assert claims.platform_admin is True


def test_default_expiry_is_configured_hours():
    claims = decode_token(create_token(uuid.uuid4()))
    assert claims.exp - claims.iat == settings.jwt_expiry_hours * 3600


def test_expired_token_rejected():
    token = create_token(uuid.uuid4(), expires_in=timedelta(seconds=-10))

    with pytest.raises(UnauthorizedError) as exc:
        decode_token(token)
    assert exc.value.code == "TOKEN_EXPIRED"


def test_tampered_token_rejected():
    token = create_token(uuid.uuid4(), uuid.uuid4())
    header, payload, signature = token.split(".")
    forged = ".".join([header, payload, signature[::-1]])

    with pytest.raises(UnauthorizedError) as exc:
        decode_token(forged)
    assert exc.value.code == "INVALID_TOKEN"


def test_token_signed_with_other_secret_rejected():
    token = jwt.encode({"sub": str(uuid.uuid4()), "exp": 4102444800}, "another-secret", algorithm="HS256")

    with pytest.raises(UnauthorizedError) as exc:
        decode_token(token)
    assert exc.value.code == "INVALID_TOKEN"


def test_token_without_subject_rejected():
    token = jwt.encode({"exp": 4102444800}, settings.jwt_secret, algorithm=settings.jwt_algorithm)

    with pytest.raises(UnauthorizedError):
        decode_token(token)


# =============================================================================
# STORED CREDENTIALS
# =============================================================================


def test_secret_encryption_round_trip():
    encrypted = encrypt_secret("sk_live_abc123")
    assert encrypted != "sk_live_abc123"
    assert decrypt_secret(encrypted) == "sk_live_abc123"


def test_none_secret_passes_through():
    assert encrypt_secret(None) is None
    assert decrypt_secret(None) is None
