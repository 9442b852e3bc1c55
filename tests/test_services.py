"""
Service-layer rules: booking lifecycle, creation conflicts and input validation.

Repositories are patched per test; FakeSession records commits and rollbacks.
"""

import uuid
from datetime import date, time, timedelta

import pytest

from test_fixtures import make_booking, make_location, make_service, make_user, future  # noqa: F401

from api.dependencies import TenantContext
from app.exceptions import ConflictError, ForbiddenError, NotFoundError, ServiceValidationError
from core.recurrence import RecurrenceFrequency
from core.timezones import utcnow
from domain.enums import BookingStatus, MembershipRole
from domain.schemas.admin_schemas import BrandingUpdate, PaymentMethodCreate, TenantCreate
from domain.schemas.booking_schemas import (
    BookingCancelRequest,
    BookingCreate,
    BookingRescheduleRequest,
    RecurringBookingCreate,
)
from repositories import BookingRepository, ServiceRepository, UserRepository
from services.auth_service import validate_password
from services.booking_service import BookingService
from services.location_service import LocationService
from services.organization_service import OrganizationService, TenantService
from services.payment_service import validate_card
from services.recurring_service import RecurringService, parse_frequency, parse_time_of_day
from services.user_service import UserService


class FakeSession:
    def __init__(self):
        self.commits = 0
        self.rollbacks = 0

    def commit(self):
        self.commits += 1

    def rollback(self):
        self.rollbacks += 1


def tenant_for(role="customer", user_id=None, org_id=None):
    return TenantContext(
        user_id=user_id or uuid.uuid4(),
        org_id=org_id or uuid.uuid4(),
        role=MembershipRole(role),
        membership_id=uuid.uuid4(),
    )


@pytest.fixture
def lifecycle(monkeypatch):
    """
    Serve one mock booking from get_visible and return it unchanged from _save.

    Example:
        >>> booking = lifecycle(make_booking(status="confirmed"))
    """

    def serve(booking):
        monkeypatch.setattr(BookingService, "get_visible", lambda db, tenant, booking_id: booking)
        monkeypatch.setattr(BookingService, "_save", lambda db, b, action: b)
        return booking

    return serve


# =============================================================================
# LIFECYCLE
# =============================================================================


def test_walker_confirms_pending(lifecycle):
    walker = tenant_for("walker")
    booking = lifecycle(make_booking(walker_id=walker.user_id))

    result = BookingService.confirm(None, walker, booking.id)

    assert result.status == BookingStatus.CONFIRMED


def test_customer_cannot_confirm(lifecycle):
    customer = tenant_for("customer")
    booking = lifecycle(make_booking(customer_id=customer.user_id))

    with pytest.raises(ForbiddenError):
        BookingService.confirm(None, customer, booking.id)


def test_confirm_twice_is_invalid_transition(lifecycle):
    admin = tenant_for("admin")
    booking = lifecycle(make_booking(status="confirmed"))

    with pytest.raises(ServiceValidationError) as exc:
        BookingService.confirm(None, admin, booking.id)
    assert exc.value.code == "INVALID_STATE_TRANSITION"


def test_cancel_records_reason(lifecycle):
    customer = tenant_for("customer")
    booking = lifecycle(make_booking(customer_id=customer.user_id, status="confirmed"))

    result = BookingService.cancel(None, customer, booking.id, BookingCancelRequest(reason="Dog is sick"))

    assert result.status == BookingStatus.CANCELLED
    assert result.cancellation_reason == "Dog is sick"


@pytest.mark.parametrize("status", ["in_progress", "completed", "cancelled"])
def test_cancel_only_before_start(lifecycle, status):
    customer = tenant_for("customer")
    booking = lifecycle(make_booking(customer_id=customer.user_id, status=status))

    with pytest.raises(ServiceValidationError):
        BookingService.cancel(None, customer, booking.id, BookingCancelRequest())


def test_start_sets_actual_start(lifecycle):
    walker = tenant_for("walker")
    booking = lifecycle(make_booking(walker_id=walker.user_id, status="confirmed"))

    result = BookingService.start(None, walker, booking.id)

    assert result.status == BookingStatus.IN_PROGRESS
    assert result.actual_start is not None


def test_start_requires_confirmation(lifecycle):
    walker = tenant_for("walker")
    booking = lifecycle(make_booking(walker_id=walker.user_id, status="pending"))

    with pytest.raises(ServiceValidationError):
        BookingService.start(None, walker, booking.id)


def test_only_assigned_walker_starts(lifecycle):
    admin = tenant_for("admin")
    booking = lifecycle(make_booking(status="confirmed"))

    with pytest.raises(ForbiddenError):
        BookingService.start(None, admin, booking.id)


def test_complete_from_confirmed_fills_both_times(lifecycle):
    """
    Verifies:
    - A walk completed without an explicit start gets actual_start too
    - actual_end is never before actual_start
    """
    walker = tenant_for("walker")
    booking = lifecycle(make_booking(walker_id=walker.user_id, status="confirmed"))

    result = BookingService.complete(None, walker, booking.id)

    assert result.status == BookingStatus.COMPLETED
    assert result.actual_start is not None
    assert result.actual_end >= result.actual_start


def test_reschedule_keeps_duration_and_resets_to_pending(monkeypatch, lifecycle):
    customer = tenant_for("customer")
    booking = lifecycle(make_booking(customer_id=customer.user_id, status="confirmed", duration_minutes=60))
    monkeypatch.setattr(UserRepository, "lock_for_update", lambda self, user_id: None)
    monkeypatch.setattr(BookingRepository, "has_conflict", lambda self, *a, **k: False)
    new_start = future(hours=96)

    result = BookingService.reschedule(None, customer, booking.id, BookingRescheduleRequest(start_time=new_start))

    assert result.status == BookingStatus.PENDING
    assert result.scheduled_start == new_start
    assert result.scheduled_end - result.scheduled_start == timedelta(minutes=60)


def test_reschedule_conflict_rolls_back(monkeypatch, lifecycle):
    customer = tenant_for("customer")
    booking = lifecycle(make_booking(customer_id=customer.user_id))
    monkeypatch.setattr(UserRepository, "lock_for_update", lambda self, user_id: None)
    monkeypatch.setattr(BookingRepository, "has_conflict", lambda self, *a, **k: True)
    db = FakeSession()

    with pytest.raises(ConflictError):
        BookingService.reschedule(db, customer, booking.id, BookingRescheduleRequest(start_time=future(hours=96)))
    assert db.rollbacks == 1


def test_only_customer_reschedules(lifecycle):
    walker = tenant_for("walker")
    booking = lifecycle(make_booking(walker_id=walker.user_id))

    with pytest.raises(ForbiddenError):
        BookingService.reschedule(None, walker, booking.id, BookingRescheduleRequest(start_time=future(hours=96)))


# =============================================================================
# VISIBILITY
# =============================================================================


def test_stranger_sees_not_found(monkeypatch):
    customer = tenant_for("customer")
    booking = make_booking()
    monkeypatch.setattr(BookingRepository, "get_in_org", lambda self, booking_id, org_id: booking)

    with pytest.raises(NotFoundError):
        BookingService.get_visible(None, customer, booking.id)


def test_admin_sees_any_booking(monkeypatch):
    admin = tenant_for("admin")
    booking = make_booking()
    monkeypatch.setattr(BookingRepository, "get_in_org", lambda self, booking_id, org_id: booking)

    assert BookingService.get_visible(None, admin, booking.id) is booking


# =============================================================================
# CREATION
# =============================================================================


@pytest.fixture
def creatable(monkeypatch):
    """Patch the lookups create_booking performs before its conflict check"""
    service = make_service()
    location = make_location()
    monkeypatch.setattr(ServiceRepository, "get_in_org", lambda self, service_id, org_id: service)
    monkeypatch.setattr(UserService, "get_walker", lambda db, org_id, walker_id: make_user(walker_id, role="walker"))
    monkeypatch.setattr(LocationService, "get_owned", lambda db, tenant, location_id: location)
    monkeypatch.setattr(UserRepository, "lock_for_update", lambda self, user_id: None)
    return service, location


def test_create_in_the_past_is_rejected(creatable):
    customer = tenant_for("customer")
    data = BookingCreate(
        walker_id=uuid.uuid4(),
        service_id=uuid.uuid4(),
        location_id=uuid.uuid4(),
        start_time=utcnow() - timedelta(hours=1),
    )

    with pytest.raises(ServiceValidationError) as exc:
        BookingService.create_booking(FakeSession(), customer, data)
    assert exc.value.code == "INVALID_BOOKING_TIME"


def test_create_conflict_rolls_back(monkeypatch, creatable):
    customer = tenant_for("customer")
    monkeypatch.setattr(BookingRepository, "has_conflict", lambda self, *a, **k: True)
    db = FakeSession()
    data = BookingCreate(
        walker_id=uuid.uuid4(),
        service_id=uuid.uuid4(),
        location_id=uuid.uuid4(),
        start_time=future(),
    )

    with pytest.raises(ConflictError) as exc:
        BookingService.create_booking(db, customer, data)
    assert exc.value.code == "BOOKING_CONFLICT"
    assert db.rollbacks == 1


def test_create_prices_from_service(monkeypatch, creatable):
    """
    Verifies:
    - The booking ends start + service duration
    - The price is the service's base price
    - The new booking is pending and belongs to the caller
    """
    service, location = creatable
    customer = tenant_for("customer")
    created = {}

    def fake_create(self, booking):
        booking.id = uuid.uuid4()
        created["booking"] = booking
        return booking

    monkeypatch.setattr(BookingRepository, "has_conflict", lambda self, *a, **k: False)
    monkeypatch.setattr(BookingRepository, "create", fake_create)
    monkeypatch.setattr(BookingService, "to_responses", lambda db, bookings: list(bookings))
    start = future()

    BookingService.create_booking(
        FakeSession(),
        customer,
        BookingCreate(walker_id=uuid.uuid4(), service_id=service.id, location_id=location.id, start_time=start),
    )

    booking = created["booking"]
    assert booking.status == BookingStatus.PENDING
    assert booking.customer_id == customer.user_id
    assert booking.scheduled_end - booking.scheduled_start == timedelta(minutes=service.duration_minutes)
    assert booking.price_cents == service.base_price_cents


def test_create_without_walkers_is_not_found(monkeypatch, creatable):
    customer = tenant_for("customer")
    monkeypatch.setattr(UserRepository, "first_walker", lambda self, org_id: None)
    data = BookingCreate(service_id=uuid.uuid4(), location_id=uuid.uuid4(), start_time=future())

    with pytest.raises(NotFoundError) as exc:
        BookingService.create_booking(FakeSession(), customer, data)
    assert exc.value.code == "WALKER_NOT_FOUND"


# =============================================================================
# RECURRING INPUT
# =============================================================================


def recurring(**overrides):
    values = dict(
        walker_id=uuid.uuid4(),
        service_id=uuid.uuid4(),
        location_id=uuid.uuid4(),
        frequency="weekly",
        start_date=date(2030, 3, 4),
        time_of_day="09:00",
        end_condition={"type": "occurrences", "count": 4},
    )
    values.update(overrides)
    return RecurringBookingCreate(**values)


def test_time_of_day_parsing():
    assert parse_time_of_day("09:30") == time(9, 30)
    with pytest.raises(ServiceValidationError):
        parse_time_of_day("9.30am")


def test_frequency_parsing():
    assert parse_frequency("bi_weekly") == RecurrenceFrequency.BI_WEEKLY
    with pytest.raises(ServiceValidationError):
        parse_frequency("daily")


def test_end_condition_by_count():
    assert RecurringService._end_condition(recurring()) == (None, 4)


def test_end_condition_by_date():
    data = recurring(end_condition={"type": "date", "date": "2030-06-01"})
    assert RecurringService._end_condition(data) == (date(2030, 6, 1), None)


def test_end_date_must_follow_start():
    data = recurring(end_condition={"type": "date", "date": "2030-03-04"})
    with pytest.raises(ServiceValidationError):
        RecurringService._end_condition(data)


@pytest.mark.parametrize("count", [0, 100])
def test_occurrence_count_bounds(count):
    data = recurring(end_condition={"type": "occurrences", "count": count})
    with pytest.raises(ServiceValidationError):
        RecurringService._end_condition(data)


def test_cancel_series_rejects_unknown_scope():
    with pytest.raises(ServiceValidationError):
        RecurringService.cancel_series(None, tenant_for(), uuid.uuid4(), "next_week")


# =============================================================================
# OTHER VALIDATORS
# =============================================================================


def test_short_password_rejected():
    with pytest.raises(ServiceValidationError) as exc:
        validate_password("short")
    assert exc.value.code == "WEAK_PASSWORD"
    validate_password("long enough")


def test_registration_roles():
    assert MembershipRole.from_registration("walker") == MembershipRole.WALKER
    assert MembershipRole.from_registration("owner") == MembershipRole.CUSTOMER
    assert MembershipRole.from_registration(None) == MembershipRole.CUSTOMER


def test_card_validation():
    next_year = utcnow().year + 1
    validate_card(PaymentMethodCreate(card_brand="visa", card_last_four="4242", card_exp_month=1, card_exp_year=next_year))

    with pytest.raises(ServiceValidationError):
        validate_card(PaymentMethodCreate(card_brand="visa", card_last_four="42a2", card_exp_month=1, card_exp_year=next_year))

    with pytest.raises(ServiceValidationError) as exc:
        validate_card(PaymentMethodCreate(card_brand="visa", card_last_four="4242", card_exp_month=1, card_exp_year=2020))
    assert exc.value.code == "CARD_EXPIRED"


def test_branding_color_checked_before_lookup():
    with pytest.raises(ServiceValidationError) as exc:
        OrganizationService.update_branding(None, tenant_for("admin"), BrandingUpdate(accent_color="#12345"))
    assert exc.value.code == "INVALID_COLOR"


def test_tenant_slug_checked_before_lookup():
    with pytest.raises(ServiceValidationError) as exc:
        TenantService.create_tenant(None, TenantCreate(name="Paws", slug="ab"))
    assert exc.value.code == "INVALID_SLUG"
