from typing import Any, Mapping, Optional


class OffleashError(Exception):
    """Base class for errors the API layer turns into JSON error responses.

    Attributes:
        message: human-readable message
        details: optional mapping with extra context (field errors, limits)
        code: machine-readable error code
        http_status: HTTP status code used by the exception handler
    """

    http_status = 500
    default_code = "INTERNAL_ERROR"
    default_message = "Internal error"

    def __init__(
        self,
        message: Optional[str] = None,
        details: Optional[Mapping[str, Any]] = None,
        code: Optional[str] = None,
    ):
        self.message = message or self.default_message
        super().__init__(self.message)
        self.details = details
        self.code = code or self.default_code

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details:
            payload["details"] = dict(self.details)
        return payload

    def __str__(self) -> str:
        return self.message


class ServiceValidationError(OffleashError):
    """Raised when input data is invalid or a precondition for a service call is not met."""

    http_status = 400
    default_code = "DOMAIN_ERROR"
    default_message = "Invalid input"


class UnauthorizedError(OffleashError):
    """Raised when authentication fails (missing, invalid or expired credentials)."""

    http_status = 401
    default_code = "UNAUTHORIZED"
    default_message = "Unauthorized"


class ForbiddenError(OffleashError):
    """Raised when an authenticated caller may not act on a resource."""

    http_status = 403
    default_code = "FORBIDDEN"
    default_message = "Forbidden"


class NotFoundError(OffleashError):
    """Raised when a requested resource was not found.

    Resources that belong to another organization are reported as not found.
    """

    http_status = 404
    default_code = "NOT_FOUND"
    default_message = "Not found"


class ConflictError(OffleashError):
    """Raised when a resource conflict occurs (overlapping booking, duplicate entry)."""

    http_status = 409
    default_code = "CONFLICT"
    default_message = "Conflict"


class ExternalServiceError(OffleashError):
    """Raised when an upstream provider (maps, identity, payments) fails."""

    http_status = 503
    default_code = "EXTERNAL_API_ERROR"
    default_message = "External service unavailable"


class GatewayTimeoutError(OffleashError):
    http_status = 504
    default_code = "TIMEOUT"
    default_message = "Upstream request timed out"


# Shorthands for the domain rejections raised across services


def booking_conflict(message: str = "Walker has a conflicting booking") -> ConflictError:
    return ConflictError(message, code="BOOKING_CONFLICT")


def invalid_booking_time(message: str) -> ServiceValidationError:
    return ServiceValidationError(message, code="INVALID_BOOKING_TIME")


def invalid_state_transition(current: str, action: str) -> ServiceValidationError:
    return ServiceValidationError(
        f"Cannot {action} a booking that is {current}",
        details={"status": current, "action": action},
        code="INVALID_STATE_TRANSITION",
    )


def invalid_credentials() -> UnauthorizedError:
    return UnauthorizedError("Invalid credentials", code="INVALID_CREDENTIALS")


def organization_not_found(slug: str) -> NotFoundError:
    return NotFoundError(f"Organization not found: {slug}", code="ORGANIZATION_NOT_FOUND")
