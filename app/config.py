"""
OFFLEASH settings, read from the environment or a .env file.

Every provider credential is optional; a feature whose provider is not
configured reports PROVIDER_NOT_CONFIGURED instead of failing at startup.
"""

import json
from enum import Enum
from typing import Annotated, Optional
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict
from pydantic import Field, field_validator

DEV_JWT_SECRET = "dev-secret-change-me"


class Environment(str, Enum):
    """Deployment stage; production disables the interactive docs"""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TESTING = "testing"


class Settings(BaseSettings):
    """Typed settings; environment variable names are the field names, any case"""

    app_name: str = Field(default="offleash", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    environment: Environment = Field(
        default=Environment.DEVELOPMENT, description="Application environment"
    )
    debug: bool = Field(default=False, description="Debug mode")

    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8000, ge=1, le=65535, description="Server port")

    # PostgreSQL
    database_url: str = Field(
        default="postgresql+psycopg2://offleash@localhost:5432/offleash",
        description="PostgreSQL connection URL",
    )
    db_echo: bool = Field(default=False, description="SQLAlchemy echo SQL statements")
    db_init_attempts: int = Field(
        default=8, ge=1, description="Database initialization retry attempts"
    )
    db_init_delay_sec: float = Field(
        default=2.0, ge=0, description="Delay between DB init attempts"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(
        default="%(asctime)s %(levelname)s %(name)s: %(message)s",
        description="Log format string",
    )

    # CORS
    cors_origins: Annotated[list[str], NoDecode] = Field(
        default=["http://localhost:5173", "http://localhost:5174"],
        description="Allowed CORS origins",
    )
    cors_allow_credentials: bool = Field(
        default=True, description="Allow CORS credentials"
    )
    cors_allow_methods: list[str] = Field(
        default=["*"], description="Allowed HTTP methods"
    )
    cors_allow_headers: list[str] = Field(
        default=["*"], description="Allowed HTTP headers"
    )

    # OpenAPI
    api_prefix: str = Field(default="", description="API route prefix")
    api_title: str = Field(default="OFFLEASH API", description="API documentation title")
    api_description: str = Field(
        default="Multi-tenant dog walking marketplace: bookings, scheduling and routing",
        description="API documentation description",
    )

    # Auth
    jwt_secret: str = Field(default=DEV_JWT_SECRET, description="HS256 signing secret")
    jwt_algorithm: str = Field(default="HS256", description="JWT signing algorithm")
    jwt_expiry_hours: int = Field(default=24, ge=1, description="Token lifetime")
    password_bcrypt_rounds: int = Field(default=12, ge=4, le=31)
    token_encryption_key: Optional[str] = Field(
        default=None,
        description="Fernet key for stored provider tokens; derived from jwt_secret when unset",
    )
    platform_admin_email: Optional[str] = Field(default=None)
    platform_admin_password_hash: Optional[str] = Field(default=None)

    # Sign-in providers
    app_domain: str = Field(default="offleash.app", description="Domain used in SIWE messages")
    google_client_id: Optional[str] = Field(default=None)
    apple_client_id: Optional[str] = Field(default=None)
    identity_keys_cache_sec: int = Field(default=3600, ge=0)

    # SMS (Twilio)
    twilio_account_sid: Optional[str] = Field(default=None)
    twilio_auth_token: Optional[str] = Field(default=None)
    twilio_from_number: Optional[str] = Field(default=None)

    # Feedback (GitHub issues)
    github_token: Optional[str] = Field(default=None)
    github_feedback_repo: str = Field(default="offleash/offleash", description="owner/name receiving feedback issues")

    # Maps
    google_maps_api_key: Optional[str] = Field(default=None)
    maps_timeout_sec: float = Field(default=5.0, gt=0)

    # Payment providers
    stripe_client_id: Optional[str] = Field(default=None)
    stripe_secret_key: Optional[str] = Field(default=None)
    square_application_id: Optional[str] = Field(default=None)
    square_application_secret: Optional[str] = Field(default=None)
    square_environment: str = Field(default="sandbox")

    # Scheduling
    default_timezone: str = Field(default="America/Denver")
    travel_buffer_minutes: int = Field(default=15, ge=0)
    slot_interval_minutes: int = Field(default=30, ge=5)
    travel_cache_ttl_minutes: int = Field(
        default=15, ge=1, description="Freshness of cached travel times for /travel-time"
    )
    slot_travel_cache_ttl_minutes: int = Field(
        default=60, ge=1, description="Freshness of cached travel times for slot search"
    )
    walker_location_stale_minutes: int = Field(default=30, ge=1)
    idempotency_window_hours: int = Field(default=24, ge=1)

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    @field_validator("environment", mode="before")
    @classmethod
    def normalize_environment(cls, v):
        return Environment(v.strip().lower()) if isinstance(v, str) else v

    @field_validator("cors_origins", mode="before")
    @classmethod
    def split_origins(cls, v):
        """CORS_ORIGINS may be a JSON list or a comma separated string"""
        if isinstance(v, str):
            if v.lstrip().startswith("["):
                return json.loads(v)
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    def is_production(self) -> bool:
        return self.environment == Environment.PRODUCTION

    def is_development(self) -> bool:
        return self.environment == Environment.DEVELOPMENT

    def is_testing(self) -> bool:
        return self.environment == Environment.TESTING


settings = Settings()
