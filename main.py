"""
OFFLEASH FastAPI Application
Main entry point: middleware, exception handlers and routers
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging
import uvicorn
from contextlib import asynccontextmanager
import anyio
from typing import Optional

from api.routes import (
    admin,
    auth,
    availability,
    bookings,
    calendar,
    catalog,
    contexts,
    feedback,
    health,
    payments,
    profiles,
    scheduling,
    users,
)

from domain.models import init_database
from adapters import github_adapter, identity_adapter, maps_adapter, payments_adapter, sms_adapter

from app.config import settings, DEV_JWT_SECRET

from api.middleware import (
    RequestLoggingMiddleware,
    offleash_exception_handler,
    validation_exception_handler,
    http_exception_handler,
    general_exception_handler,
)
from app.exceptions import OffleashError

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()), format=settings.log_format
)
_logger = logging.getLogger("offleash.main")


def _connect_adapters() -> None:
    """Best-effort: a missing provider degrades the feature, not the service"""
    connectors = [
        ("maps", lambda: maps_adapter.connect(settings.google_maps_api_key, settings.maps_timeout_sec)),
        ("identity", lambda: identity_adapter.connect(cache_seconds=settings.identity_keys_cache_sec)),
        (
            "sms",
            lambda: sms_adapter.connect(
                settings.twilio_account_sid, settings.twilio_auth_token, settings.twilio_from_number
            ),
        ),
        ("payments", payments_adapter.connect),
        ("github", lambda: github_adapter.connect(settings.github_token, settings.github_feedback_repo)),
    ]
    for name, connect in connectors:
        try:
            connect()
            _logger.info("%s adapter ready", name)
        except Exception as e:
            _logger.warning("Failed to initialize %s adapter; continuing without it: %s", name, e)


def _close_adapters() -> None:
    for name, adapter in (
        ("maps", maps_adapter),
        ("identity", identity_adapter),
        ("sms", sms_adapter),
        ("payments", payments_adapter),
        ("github", github_adapter),
    ):
        try:
            adapter.close()
        except Exception as e:
            _logger.exception("Error closing %s adapter during shutdown: %s", name, e)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup: refuse the development signing secret in production, create the
    schema with retries while PostgreSQL comes up, then open adapter clients.
    """
    _logger.info(f"Starting OFFLEASH in {settings.environment.value} mode")
    if settings.is_production() and settings.jwt_secret == DEV_JWT_SECRET:
        raise RuntimeError("JWT_SECRET must be set in production")

    last_exc: Optional[Exception] = None
    for attempt in range(1, settings.db_init_attempts + 1):
        try:
            # Blocking DDL runs in a worker thread
            await anyio.to_thread.run_sync(init_database)
            _logger.info("Database initialization succeeded")
            break
        except Exception as exc:
            last_exc = exc
            _logger.warning(
                "Database init attempt %d/%d failed: %s",
                attempt,
                settings.db_init_attempts,
                exc,
            )
            if attempt < settings.db_init_attempts:
                await anyio.sleep(settings.db_init_delay_sec)
            else:
                _logger.error("Database initialization failed after %d attempts", attempt)
                raise last_exc

    _connect_adapters()

    try:
        yield
    finally:
        _logger.info("Shutting down OFFLEASH")
        _close_adapters()


# Interactive docs are off in production
_show_docs = not settings.is_production()
_prefix = settings.api_prefix

app = FastAPI(
    title=settings.api_title,
    version=settings.app_version,
    description=settings.api_description,
    lifespan=lifespan,
    debug=settings.debug,
    openapi_url=f"{_prefix}/openapi.json" if _show_docs else None,
    docs_url=f"{_prefix}/docs" if _show_docs else None,
    redoc_url=f"{_prefix}/redoc" if _show_docs else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

app.add_middleware(RequestLoggingMiddleware)

for exc_class, handler in (
    (RequestValidationError, validation_exception_handler),
    (StarletteHTTPException, http_exception_handler),
    (OffleashError, offleash_exception_handler),
    (Exception, general_exception_handler),
):
    app.add_exception_handler(exc_class, handler)

# Static paths are registered before parameterised ones within each router
ROUTERS = (
    health.router,
    auth.router,
    auth.platform_router,
    contexts.router,
    contexts.identities_router,
    users.router,
    users.admin_router,
    profiles.router,
    profiles.admin_router,
    catalog.services_router,
    catalog.locations_router,
    catalog.pets_router,
    scheduling.router,
    calendar.router,
    bookings.router,
    availability.router,
    admin.router,
    payments.providers_router,
    payments.methods_router,
    feedback.router,
)
for router in ROUTERS:
    app.include_router(router, prefix=_prefix)


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_development(),
        log_level=settings.log_level.lower(),
    )
