"""
Request logging and the JSON error envelope shared by every handler.

Error bodies look like:
    {"success": false, "error": {"code", "message", "details"?}, "request_id", "timestamp"}
"""

import time
import logging
from datetime import date, datetime, timezone
from uuid import UUID, uuid4

from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from app.exceptions import OffleashError

logger = logging.getLogger("offleash.middleware")

REQUEST_ID_HEADER = "X-Request-ID"
QUIET_PATHS = {"/health"}


def _jsonable(value):
    """Pydantic error entries may carry exceptions, dates or UUIDs in ``ctx`` / ``input``"""
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (UUID, Exception, bytes)):
        return str(value)
    return value


def error_response(request: Request, status_code: int, error: dict) -> JSONResponse:
    request_id = getattr(request.state, "request_id", None)
    headers = {REQUEST_ID_HEADER: request_id} if request_id else None
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "error": error,
            "request_id": request_id,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
        headers=headers,
    )


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Tag each request with an id (the caller's X-Request-ID when sent) and log
    method, path, status and duration. Health checks log at DEBUG.
    """

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid4())
        request.state.request_id = request_id
        level = logging.DEBUG if request.url.path in QUIET_PATHS else logging.INFO
        started = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception:
            elapsed = time.perf_counter() - started
            logger.exception(
                f"request_failed id={request_id} method={request.method} "
                f"path={request.url.path} duration={elapsed:.4f}s"
            )
            raise

        elapsed = time.perf_counter() - started
        logger.log(
            level,
            f"request id={request_id} method={request.method} path={request.url.path} "
            f"status={response.status_code} duration={elapsed:.4f}s",
        )
        response.headers[REQUEST_ID_HEADER] = request_id
        response.headers["X-Process-Time"] = f"{elapsed:.4f}"
        return response


# ============================================================================
# Error Handlers
# ============================================================================


async def offleash_exception_handler(request: Request, exc: OffleashError):
    if exc.http_status >= 500:
        logger.error(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")
    else:
        logger.warning(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")
    return error_response(request, exc.http_status, exc.to_dict())


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """422 with the pydantic error list as details"""
    errors = _jsonable(exc.errors())
    logger.warning(f"VALIDATION_ERROR on {request.method} {request.url.path}: {len(errors)} error(s)")
    return error_response(
        request,
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        {"code": "VALIDATION_ERROR", "message": "Request validation failed", "details": {"errors": errors}},
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    logger.warning(f"HTTP_{exc.status_code} on {request.method} {request.url.path}: {exc.detail}")
    return error_response(
        request,
        exc.status_code,
        {"code": f"HTTP_{exc.status_code}", "message": exc.detail},
    )


async def general_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return error_response(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        {"code": "INTERNAL_SERVER_ERROR", "message": "An unexpected error occurred"},
    )
