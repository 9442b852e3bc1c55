"""API routes package"""

from . import (
    health,
    auth,
    contexts,
    users,
    profiles,
    catalog,
    scheduling,
    calendar,
    bookings,
    availability,
    admin,
    payments,
    feedback,
)

__all__ = [
    "health",
    "auth",
    "contexts",
    "users",
    "profiles",
    "catalog",
    "scheduling",
    "calendar",
    "bookings",
    "availability",
    "admin",
    "payments",
    "feedback",
]
