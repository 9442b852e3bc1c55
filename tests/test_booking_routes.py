"""
Booking and recurring-series routes.

Services are patched; these tests cover status codes, role guards, request
parsing and route ordering.
"""

import uuid
from datetime import date

from test_fixtures import client, login_as, make_booking, booking_response, future  # noqa: F401

from app.exceptions import booking_conflict, invalid_state_transition
from domain.schemas.booking_schemas import CancelSeriesResponse, RecurringCreateResponse
from services.booking_service import BookingService
from services.recurring_service import RecurringService


def booking_payload(**overrides):
    payload = {
        "service_id": str(uuid.uuid4()),
        "location_id": str(uuid.uuid4()),
        "start_time": future().isoformat(),
    }
    payload.update(overrides)
    return payload


def recurring_payload(**overrides):
    payload = {
        "walker_id": str(uuid.uuid4()),
        "service_id": str(uuid.uuid4()),
        "location_id": str(uuid.uuid4()),
        "frequency": "weekly",
        "start_date": "2030-03-04",
        "time_of_day": "09:00",
        "end_condition": {"type": "occurrences", "count": 4},
    }
    payload.update(overrides)
    return payload


# =============================================================================
# CREATE
# =============================================================================


def test_create_booking_returns_201(monkeypatch, login_as):
    """
    Verifies:
    - POST /bookings answers 201 with the enriched booking
    - The service receives the caller's tenant
    """
    customer = login_as("customer")
    seen = {}

    def fake_create(db, tenant, data):
        seen["tenant"] = tenant
        return booking_response(make_booking(customer_id=tenant.user_id, start=data.start_time))

    monkeypatch.setattr(BookingService, "create_booking", fake_create)

    response = client.post("/bookings", json=booking_payload(), headers=customer.headers)

    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "pending"
    assert body["customer_id"] == str(customer.user_id)
    assert body["price_display"] == "$25.00"
    assert seen["tenant"].org_id == customer.org_id


def test_create_booking_conflict_is_409(monkeypatch, login_as):
    customer = login_as("customer")

    def conflict(db, tenant, data):
        raise booking_conflict()

    monkeypatch.setattr(BookingService, "create_booking", conflict)

    response = client.post("/bookings", json=booking_payload(), headers=customer.headers)

    assert response.status_code == 409
    assert response.json()["error"]["code"] == "BOOKING_CONFLICT"


def test_create_booking_requires_token():
    response = client.post("/bookings", json=booking_payload())
    assert response.status_code == 401


def test_create_booking_bad_body_is_422(login_as):
    customer = login_as("customer")
    response = client.post("/bookings", json={"service_id": "not-a-uuid"}, headers=customer.headers)
    assert response.status_code == 422


# =============================================================================
# LISTING AND ROLE GUARDS
# =============================================================================


def test_org_listing_is_admin_only(login_as):
    customer = login_as("customer")
    response = client.get("/bookings", headers=customer.headers)
    assert response.status_code == 403


def test_org_listing_passes_status_filter(monkeypatch, login_as):
    admin = login_as("admin")
    seen = {}

    def fake_list(db, tenant, status=None):
        seen["status"] = status
        return []

    monkeypatch.setattr(BookingService, "list_for_org", fake_list)

    response = client.get("/bookings?status=confirmed", headers=admin.headers)

    assert response.status_code == 200
    assert response.json() == []
    assert seen["status"] == "confirmed"


def test_owner_counts_as_admin(monkeypatch, login_as):
    owner = login_as("owner")
    monkeypatch.setattr(BookingService, "list_for_org", lambda db, tenant, status=None: [])

    response = client.get("/bookings", headers=owner.headers)

    assert response.status_code == 200


def test_walker_listing_is_walker_only(login_as):
    customer = login_as("customer")
    response = client.get("/bookings/walker", headers=customer.headers)
    assert response.status_code == 403


def test_walker_listing(monkeypatch, login_as):
    walker = login_as("walker")
    booking = make_booking(walker_id=walker.user_id, status="confirmed")
    monkeypatch.setattr(BookingService, "list_for_walker", lambda db, tenant: [booking_response(booking)])

    response = client.get("/bookings/walker", headers=walker.headers)

    assert response.status_code == 200
    assert [b["id"] for b in response.json()] == [str(booking.id)]


def test_customer_path_is_not_a_booking_id(monkeypatch, login_as):
    """/bookings/customer must reach the listing, not GET /bookings/{booking_id}"""
    customer = login_as("customer")
    monkeypatch.setattr(BookingService, "list_for_customer", lambda db, tenant: [])

    response = client.get("/bookings/customer", headers=customer.headers)

    assert response.status_code == 200
    assert response.json() == []


def test_get_booking_bad_id_is_422(login_as):
    customer = login_as("customer")
    response = client.get("/bookings/12345", headers=customer.headers)
    assert response.status_code == 422


# =============================================================================
# LIFECYCLE
# =============================================================================


def test_cancel_without_body(monkeypatch, login_as):
    """
    Verifies:
    - The cancel body is optional
    - The service gets an empty reason
    """
    customer = login_as("customer")
    booking = make_booking(customer_id=customer.user_id)
    seen = {}

    def fake_cancel(db, tenant, booking_id, data):
        seen["reason"] = data.reason
        booking.status = "cancelled"
        return booking_response(booking)

    monkeypatch.setattr(BookingService, "cancel", fake_cancel)

    response = client.post(f"/bookings/{booking.id}/cancel", headers=customer.headers)

    assert response.status_code == 200
    assert response.json()["status"] == "cancelled"
    assert seen["reason"] is None


def test_cancel_with_reason(monkeypatch, login_as):
    customer = login_as("customer")
    booking = make_booking(customer_id=customer.user_id)
    seen = {}

    def fake_cancel(db, tenant, booking_id, data):
        seen["reason"] = data.reason
        return booking_response(booking)

    monkeypatch.setattr(BookingService, "cancel", fake_cancel)

    client.post(f"/bookings/{booking.id}/cancel", json={"reason": "Dog is at the vet"}, headers=customer.headers)

    assert seen["reason"] == "Dog is at the vet"


def test_invalid_transition_is_400(monkeypatch, login_as):
    walker = login_as("walker")

    def refuse(db, tenant, booking_id):
        raise invalid_state_transition("completed", "start")

    monkeypatch.setattr(BookingService, "start", refuse)

    response = client.post(f"/bookings/{uuid.uuid4()}/start", headers=walker.headers)

    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "INVALID_STATE_TRANSITION"
    assert error["message"] == "Cannot start a booking that is completed"


def test_reschedule_passes_new_start(monkeypatch, login_as):
    customer = login_as("customer")
    booking = make_booking(customer_id=customer.user_id, status="confirmed")
    new_start = future(hours=72)

    def fake_reschedule(db, tenant, booking_id, data):
        moved = make_booking(booking_id=booking_id, customer_id=tenant.user_id, start=data.start_time)
        return booking_response(moved)

    monkeypatch.setattr(BookingService, "reschedule", fake_reschedule)

    response = client.post(
        f"/bookings/{booking.id}/reschedule",
        json={"start_time": new_start.isoformat()},
        headers=customer.headers,
    )

    assert response.status_code == 200
    assert response.json()["status"] == "pending"


# =============================================================================
# RECURRING SERIES
# =============================================================================


def empty_result(**kwargs):
    values = dict(series=None, bookings_created=0, total_planned=4, conflicts=[], preview_dates=[])
    values.update(kwargs)
    return RecurringCreateResponse(**values)


def test_recurring_create_passes_idempotency_key(monkeypatch, login_as):
    customer = login_as("customer")
    key = uuid.uuid4()
    seen = {}

    def fake_create(db, tenant, data, idempotency_key=None, force_preview=False):
        seen["key"] = idempotency_key
        seen["frequency"] = data.frequency
        return empty_result(bookings_created=4)

    monkeypatch.setattr(RecurringService, "create", fake_create)

    response = client.post(
        "/bookings/recurring",
        json=recurring_payload(),
        headers={**customer.headers, "X-Idempotency-Key": str(key)},
    )

    assert response.status_code == 201
    assert response.json()["bookings_created"] == 4
    assert seen == {"key": key, "frequency": "weekly"}


def test_recurring_create_rejects_bad_idempotency_key(login_as):
    customer = login_as("customer")

    response = client.post(
        "/bookings/recurring",
        json=recurring_payload(),
        headers={**customer.headers, "X-Idempotency-Key": "retry-1"},
    )

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_IDEMPOTENCY_KEY"


def test_recurring_preview_forces_preview(monkeypatch, login_as):
    customer = login_as("customer")
    seen = {}

    def fake_create(db, tenant, data, idempotency_key=None, force_preview=False):
        seen["force_preview"] = force_preview
        return empty_result(preview_dates=[date(2030, 3, 4), date(2030, 3, 11)])

    monkeypatch.setattr(RecurringService, "create", fake_create)

    response = client.post("/bookings/recurring/preview", json=recurring_payload(), headers=customer.headers)

    assert response.status_code == 200
    assert response.json()["preview_dates"] == ["2030-03-04", "2030-03-11"]
    assert seen["force_preview"] is True


def test_recurring_end_condition_is_discriminated(login_as):
    customer = login_as("customer")
    payload = recurring_payload(end_condition={"type": "forever"})

    response = client.post("/bookings/recurring/preview", json=payload, headers=customer.headers)

    assert response.status_code == 422


def test_recurring_list_is_not_a_booking_id(monkeypatch, login_as):
    customer = login_as("customer")
    monkeypatch.setattr(RecurringService, "list_series", lambda db, tenant: [])

    response = client.get("/bookings/recurring", headers=customer.headers)

    assert response.status_code == 200
    assert response.json() == []


def test_cancel_series_scope(monkeypatch, login_as):
    customer = login_as("customer")
    seen = {}

    def fake_cancel(db, tenant, series_id, scope):
        seen["scope"] = scope
        return CancelSeriesResponse(bookings_cancelled=3, series_deactivated=True)

    monkeypatch.setattr(RecurringService, "cancel_series", fake_cancel)

    response = client.post(
        f"/bookings/recurring/{uuid.uuid4()}/cancel",
        json={"scope": "all_future"},
        headers=customer.headers,
    )

    assert response.status_code == 200
    assert response.json() == {"bookings_cancelled": 3, "series_deactivated": True}
    assert seen["scope"] == "all_future"
