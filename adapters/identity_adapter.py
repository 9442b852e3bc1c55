"""
Google and Apple ID token verification.

Signing keys are fetched from each provider's published JWKS and cached; tokens
are verified with python-jose (RS256, audience and issuer checks).
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence, Tuple
import logging
import time

import httpx
from jose import jwt, JWTError, ExpiredSignatureError

from app.exceptions import ExternalServiceError, UnauthorizedError

logger = logging.getLogger("offleash.adapters.identity")

GOOGLE_JWKS_URL = "https://www.googleapis.com/oauth2/v3/certs"
GOOGLE_ISSUERS = ("accounts.google.com", "https://accounts.google.com")
APPLE_JWKS_URL = "https://appleid.apple.com/auth/keys"
APPLE_ISSUERS = ("https://appleid.apple.com",)

_client: Optional[httpx.Client] = None
_cache_seconds = 3600
# url -> (fetched_at, jwks)
_jwks_cache: Dict[str, Tuple[float, Dict[str, Any]]] = {}


@dataclass(frozen=True)
class VerifiedIdentity:
    subject: str
    email: Optional[str]
    email_verified: bool
    first_name: Optional[str] = None
    last_name: Optional[str] = None


def connect(timeout: float = 5.0, cache_seconds: int = 3600):
    global _client, _cache_seconds
    _client = httpx.Client(timeout=timeout)
    _cache_seconds = cache_seconds
    logger.info("Identity key client ready")


def close():
    global _client
    try:
        if _client is not None:
            _client.close()
    except Exception:
        logger.exception("Error closing identity key client")
    finally:
        _client = None
        _jwks_cache.clear()


def _fetch_jwks(url: str) -> Dict[str, Any]:
    cached = _jwks_cache.get(url)
    if cached and time.monotonic() - cached[0] < _cache_seconds:
        return cached[1]

    client = _client or httpx.Client(timeout=5.0)
    try:
        resp = client.get(url)
        resp.raise_for_status()
        jwks = resp.json()
    except httpx.HTTPError as e:
        logger.warning("Could not fetch signing keys from %s: %s", url, e)
        raise ExternalServiceError("Could not fetch identity provider keys")
    finally:
        if client is not _client:
            client.close()

    _jwks_cache[url] = (time.monotonic(), jwks)
    return jwks


def _decode(token: str, jwks_url: str, audience: str, issuers: Sequence[str]) -> Dict[str, Any]:
    jwks = _fetch_jwks(jwks_url)
    try:
        return jwt.decode(
            token,
            jwks,
            algorithms=["RS256"],
            audience=audience,
            issuer=list(issuers),
            options={"verify_at_hash": False},
        )
    except ExpiredSignatureError:
        raise UnauthorizedError("ID token has expired", code="TOKEN_EXPIRED")
    except JWTError as e:
        logger.info("ID token rejected: %s", e)
        raise UnauthorizedError("Invalid ID token", code="INVALID_TOKEN")


def _is_true(value) -> bool:
    # Apple sends booleans as strings
    return value is True or value == "true"


def verify_google_token(id_token: str, client_id: str) -> VerifiedIdentity:
    claims = _decode(id_token, GOOGLE_JWKS_URL, client_id, GOOGLE_ISSUERS)
    if not _is_true(claims.get("email_verified")):
        raise UnauthorizedError("Google email is not verified", code="INVALID_TOKEN")
    return VerifiedIdentity(
        subject=claims["sub"],
        email=claims.get("email"),
        email_verified=True,
        first_name=claims.get("given_name"),
        last_name=claims.get("family_name"),
    )


def verify_apple_token(id_token: str, client_id: str) -> VerifiedIdentity:
    claims = _decode(id_token, APPLE_JWKS_URL, client_id, APPLE_ISSUERS)
    return VerifiedIdentity(
        subject=claims["sub"],
        email=claims.get("email"),
        email_verified=_is_true(claims.get("email_verified")),
    )
