"""
Domain mappers package.
Handles transformation between ORM models and DTOs (Data Transfer Objects).
"""

from domain.mappers.auth_mapper import AuthMapper
from domain.mappers.booking_mapper import BookingMapper, SeriesMapper
from domain.mappers.catalog_mapper import (
    UserMapper,
    ServiceMapper,
    ServiceAreaMapper,
    PaymentMethodMapper,
)

__all__ = [
    "AuthMapper",
    "BookingMapper",
    "SeriesMapper",
    "UserMapper",
    "ServiceMapper",
    "ServiceAreaMapper",
    "PaymentMethodMapper",
]
