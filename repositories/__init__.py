"""
Repositories package - Data access layer.
"""

from repositories.base import BaseRepository
from repositories.organization_repository import (
    OrganizationRepository,
    PlatformAdminRepository,
)
from repositories.user_repository import (
    UserRepository,
    MembershipRepository,
    IdentityRepository,
    PhoneVerificationRepository,
    WalletChallengeRepository,
)
from repositories.catalog_repository import (
    ServiceRepository,
    LocationRepository,
    PetRepository,
)
from repositories.scheduling_repository import (
    WorkingHoursRepository,
    BlockRepository,
    ServiceAreaRepository,
    WalkerLocationRepository,
    TravelTimeCacheRepository,
)
from repositories.booking_repository import BookingRepository, RecurringSeriesRepository
from repositories.payment_repository import (
    PaymentMethodRepository,
    PaymentProviderRepository,
)
from repositories.walker_repository import CalendarEventRepository, WalkerProfileRepository

__all__ = [
    "BaseRepository",
    "OrganizationRepository",
    "PlatformAdminRepository",
    "UserRepository",
    "MembershipRepository",
    "IdentityRepository",
    "PhoneVerificationRepository",
    "WalletChallengeRepository",
    "ServiceRepository",
    "LocationRepository",
    "PetRepository",
    "WorkingHoursRepository",
    "BlockRepository",
    "ServiceAreaRepository",
    "WalkerLocationRepository",
    "TravelTimeCacheRepository",
    "BookingRepository",
    "RecurringSeriesRepository",
    "PaymentMethodRepository",
    "PaymentProviderRepository",
    "WalkerProfileRepository",
    "CalendarEventRepository",
]
