"""
Catalog and account mappers: users, services, service areas, payment methods.
"""

from typing import Optional
from core.types import format_cents
from domain.schemas.user_schemas import UserResponse
from domain.schemas.catalog_schemas import ServiceResponse
from domain.schemas.scheduling_schemas import ServiceAreaResponse, PolygonPointSchema
from domain.schemas.admin_schemas import PaymentMethodResponse


def _value(enum_or_str) -> str:
    return getattr(enum_or_str, "value", enum_or_str)


class UserMapper:
    """Mapper for user-related transformations."""

    @staticmethod
    def to_response(user, role: Optional[str] = None) -> UserResponse:
        return UserResponse(
            id=user.id,
            organization_id=user.organization_id,
            email=user.email,
            first_name=user.first_name or "",
            last_name=user.last_name or "",
            role=role if role is not None else _value(user.role),
            phone=user.phone,
            timezone=user.timezone,
            created_at=user.created_at,
        )

    @staticmethod
    def short_name(user) -> str:
        """First name and last initial, e.g. "Jane D." """
        if user is None:
            return "Unknown"
        initial = f" {user.last_name[0]}." if user.last_name else ""
        return f"{user.first_name}{initial}"


class ServiceMapper:
    @staticmethod
    def to_response(service) -> ServiceResponse:
        return ServiceResponse(
            id=service.id,
            name=service.name,
            description=service.description,
            duration_minutes=service.duration_minutes,
            base_price_cents=service.base_price_cents,
            price_display=format_cents(service.base_price_cents),
            is_active=service.is_active,
        )


class ServiceAreaMapper:
    @staticmethod
    def to_response(area) -> ServiceAreaResponse:
        return ServiceAreaResponse(
            id=area.id,
            walker_id=area.walker_id,
            name=area.name,
            color=area.color,
            polygon=[PolygonPointSchema(lat=p["lat"], lng=p["lng"]) for p in (area.polygon or [])],
            is_active=area.is_active,
            priority=area.priority,
            price_adjustment_percent=area.price_adjustment_percent,
            notes=area.notes,
        )


class PaymentMethodMapper:
    @staticmethod
    def display_name(method) -> str:
        if method.nickname:
            return method.nickname
        method_type = _value(method.method_type)
        if method_type == "card" and method.card_last_four:
            brand = (method.card_brand or "Card").title()
            return f"{brand} ending in {method.card_last_four}"
        return method_type.replace("_", " ").title()

    @staticmethod
    def to_response(method) -> PaymentMethodResponse:
        return PaymentMethodResponse(
            id=method.id,
            method_type=_value(method.method_type),
            card_brand=method.card_brand,
            card_last_four=method.card_last_four,
            card_exp_month=method.card_exp_month,
            card_exp_year=method.card_exp_year,
            nickname=method.nickname,
            is_default=method.is_default,
            display_name=PaymentMethodMapper.display_name(method),
        )
