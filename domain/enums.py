"""
Domain enums for OFFLEASH.
Contains all enumeration types used across the domain models.
"""

import enum
from typing import Optional


class UserRole(str, enum.Enum):
    """Role stored on the user row (home organization)"""

    CUSTOMER = "customer"
    WALKER = "walker"
    ADMIN = "admin"


class MembershipRole(str, enum.Enum):
    """Role a user holds inside one organization"""

    CUSTOMER = "customer"
    WALKER = "walker"
    ADMIN = "admin"
    OWNER = "owner"

    @property
    def is_admin(self) -> bool:
        return self in (MembershipRole.ADMIN, MembershipRole.OWNER)

    @classmethod
    def from_registration(cls, value) -> "MembershipRole":
        """Self-registration accepts walker and admin; anything else is a customer."""
        if value in ("walker", cls.WALKER):
            return cls.WALKER
        if value in ("admin", cls.ADMIN):
            return cls.ADMIN
        return cls.CUSTOMER


class MembershipStatus(str, enum.Enum):
    ACTIVE = "active"
    INVITED = "invited"
    SUSPENDED = "suspended"


class BookingStatus(str, enum.Enum):
    """Booking lifecycle states"""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"

    @property
    def is_active(self) -> bool:
        return self in (BookingStatus.PENDING, BookingStatus.CONFIRMED, BookingStatus.IN_PROGRESS)

    @property
    def can_cancel(self) -> bool:
        return self in (BookingStatus.PENDING, BookingStatus.CONFIRMED)

    @property
    def can_confirm(self) -> bool:
        return self == BookingStatus.PENDING

    @property
    def can_start(self) -> bool:
        return self == BookingStatus.CONFIRMED

    @property
    def can_complete(self) -> bool:
        return self in (BookingStatus.CONFIRMED, BookingStatus.IN_PROGRESS)

    @property
    def can_reschedule(self) -> bool:
        return self in (BookingStatus.PENDING, BookingStatus.CONFIRMED)


# Statuses that never block a walker's calendar
INACTIVE_BOOKING_STATUSES = (BookingStatus.CANCELLED, BookingStatus.COMPLETED)


class AuthProvider(str, enum.Enum):
    EMAIL = "email"
    GOOGLE = "google"
    APPLE = "apple"
    PHONE = "phone"
    WALLET = "wallet"


class PaymentProviderType(str, enum.Enum):
    STRIPE = "stripe"
    SQUARE = "square"


class PaymentMethodType(str, enum.Enum):
    CARD = "card"
    APPLE_PAY = "apple_pay"
    GOOGLE_PAY = "google_pay"
    BANK_ACCOUNT = "bank_account"


class BusinessModel(str, enum.Enum):
    BOOKING_ONLY = "booking_only"
    FULL_SERVICE = "full_service"


class FeeStructure(str, enum.Enum):
    CUSTOMER_PAYS = "customer_pays"
    SPLIT_FEES = "split_fees"
    OWNER_SUBSCRIPTION = "owner_subscription"


class BillingFrequency(str, enum.Enum):
    MONTHLY = "monthly"
    YEARLY = "yearly"


class CancelScope(str, enum.Enum):
    """How much of a recurring series a cancellation covers"""

    ALL_FUTURE = "all_future"
    ENTIRE_SERIES = "entire_series"


class WalkerSpecialization(str, enum.Enum):
    PUPPIES = "puppies"
    SENIOR_DOGS = "senior_dogs"
    LARGE_BREEDS = "large_breeds"
    SMALL_BREEDS = "small_breeds"
    ANXIOUS_REACTIVE = "anxious_reactive"
    MULTIPLE_DOGS = "multiple_dogs"
    PET_FIRST_AID = "pet_first_aid"
    DOG_TRAINING = "dog_training"
    CAT_CARE = "cat_care"
    MEDICATION_ADMINISTRATION = "medication_administration"

    @property
    def display_name(self) -> str:
        return SPECIALIZATION_NAMES[self]

    @classmethod
    def parse(cls, value: str) -> Optional["WalkerSpecialization"]:
        """Accepts ``senior_dogs`` as well as ``SeniorDogs``; unknown names give None"""
        key = value.strip().lower().replace("_", "")
        for member in cls:
            if member.value.replace("_", "") == key:
                return member
        return None


SPECIALIZATION_NAMES = {
    WalkerSpecialization.PUPPIES: "Puppies",
    WalkerSpecialization.SENIOR_DOGS: "Senior Dogs",
    WalkerSpecialization.LARGE_BREEDS: "Large Breeds",
    WalkerSpecialization.SMALL_BREEDS: "Small Breeds",
    WalkerSpecialization.ANXIOUS_REACTIVE: "Anxious/Reactive Dogs",
    WalkerSpecialization.MULTIPLE_DOGS: "Multiple Dogs",
    WalkerSpecialization.PET_FIRST_AID: "Pet First Aid Certified",
    WalkerSpecialization.DOG_TRAINING: "Dog Training",
    WalkerSpecialization.CAT_CARE: "Cat Care",
    WalkerSpecialization.MEDICATION_ADMINISTRATION: "Medication Administration",
}


class CalendarEventType(str, enum.Enum):
    """Booking and synced events are written by the system, never through the API"""

    BOOKING = "booking"
    BLOCK = "block"
    PERSONAL = "personal"
    SYNCED = "synced"


class CalendarSyncStatus(str, enum.Enum):
    PENDING = "pending"
    SYNCED = "synced"
    FAILED = "failed"
    CONFLICT = "conflict"


class FeedbackType(str, enum.Enum):
    BUG = "bug"
    FEATURE = "feature"
