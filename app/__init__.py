"""
Settings, the error hierarchy and the token/password helpers every layer uses.
"""

from app.config import settings
from app.exceptions import (
    ConflictError,
    ExternalServiceError,
    ForbiddenError,
    GatewayTimeoutError,
    NotFoundError,
    OffleashError,
    ServiceValidationError,
    UnauthorizedError,
)
from app.security import TokenClaims, create_token, decode_token

__all__ = [
    "settings",
    "OffleashError",
    "ServiceValidationError",
    "UnauthorizedError",
    "ForbiddenError",
    "NotFoundError",
    "ConflictError",
    "ExternalServiceError",
    "GatewayTimeoutError",
    "TokenClaims",
    "create_token",
    "decode_token",
]
