"""
Domain models package - SQLAlchemy ORM models.
"""

from domain.models.database import (
    Base,
    engine,
    SessionLocal,
    init_database,
    get_db_session,
    session_scope,
)
from domain.models.organization import Organization, PlatformAdmin
from domain.models.user import (
    User,
    Membership,
    UserIdentity,
    PhoneVerification,
    WalletChallenge,
)
from domain.models.catalog import Service, Location, Pet
from domain.models.scheduling import (
    WorkingHours,
    Block,
    ServiceArea,
    WalkerLocation,
    TravelTimeCache,
)
from domain.models.booking import Booking, RecurringBookingSeries
from domain.models.payment import PaymentMethod, PaymentProvider
from domain.models.walker import CalendarEvent, WalkerProfile, WalkerSpecializationEntry

__all__ = [
    # Database
    "Base",
    "engine",
    "SessionLocal",
    "init_database",
    "get_db_session",
    "session_scope",
    # Tenancy
    "Organization",
    "PlatformAdmin",
    # Users
    "User",
    "Membership",
    "UserIdentity",
    "PhoneVerification",
    "WalletChallenge",
    # Catalog
    "Service",
    "Location",
    "Pet",
    # Scheduling
    "WorkingHours",
    "Block",
    "ServiceArea",
    "WalkerLocation",
    "TravelTimeCache",
    # Bookings
    "Booking",
    "RecurringBookingSeries",
    # Payments
    "PaymentMethod",
    "PaymentProvider",
    # Walker profiles and calendars
    "WalkerProfile",
    "WalkerSpecializationEntry",
    "CalendarEvent",
]
