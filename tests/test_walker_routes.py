"""
Walker profile, calendar and feedback routes.

Services are patched; these tests cover role guards, request parsing and
response shapes.
"""

import uuid
from datetime import timedelta

from test_fixtures import client, login_as, future  # noqa: F401
from test_walker_services import make_event

from domain.schemas.walker_schemas import FeedbackResponse, WalkerProfileResponse
from services.calendar_service import CalendarService
from services.feedback_service import FeedbackService
from services.walker_profile_service import WalkerProfileService


def profile_response(user_id, **overrides):
    values = dict(id=uuid.uuid4(), user_id=user_id, bio="Loves big dogs", years_experience=4)
    values.update(overrides)
    return WalkerProfileResponse(**values)


# =============================================================================
# PROFILES
# =============================================================================


def test_walker_reads_own_profile(monkeypatch, login_as):
    walker = login_as("walker")
    monkeypatch.setattr(
        WalkerProfileService, "get_my_profile", lambda db, tenant: profile_response(tenant.user_id)
    )

    response = client.get("/walker/profile", headers=walker.headers)

    assert response.status_code == 200
    assert response.json()["user_id"] == str(walker.user_id)
    assert response.json()["years_experience"] == 4


def test_customer_has_no_walker_profile_route(login_as):
    customer = login_as("customer")

    response = client.get("/walker/profile", headers=customer.headers)

    assert response.status_code == 403


def test_walker_update_targets_self(monkeypatch, login_as):
    """
    Verifies:
    - PUT /walker/profile edits the caller's own profile
    - Specializations in the body reach the service
    """
    walker = login_as("walker")
    seen = {}

    def fake_update(db, tenant, walker_id, data):
        seen.update(walker_id=walker_id, names=[s.specialization for s in data.specializations])
        return profile_response(walker_id)

    monkeypatch.setattr(WalkerProfileService, "update_profile", fake_update)

    response = client.put(
        "/walker/profile",
        json={"bio": "Loves big dogs", "specializations": [{"specialization": "large_breeds"}]},
        headers=walker.headers,
    )

    assert response.status_code == 200
    assert seen == {"walker_id": walker.user_id, "names": ["large_breeds"]}


def test_negative_experience_is_422(login_as):
    walker = login_as("walker")

    response = client.put("/walker/profile", json={"years_experience": -1}, headers=walker.headers)

    assert response.status_code == 422


def test_specialization_catalog_for_any_member(login_as):
    customer = login_as("customer")

    response = client.get("/walker/specializations", headers=customer.headers)

    assert response.status_code == 200
    assert {"value": "puppies", "display_name": "Puppies"} in response.json()
    assert len(response.json()) == 10


def test_admin_profile_routes_are_admin_only(login_as):
    walker = login_as("walker")

    response = client.get(f"/admin/walkers/{uuid.uuid4()}/profile", headers=walker.headers)

    assert response.status_code == 403


def test_admin_updates_walker_profile(monkeypatch, login_as):
    admin = login_as("admin")
    walker_id = uuid.uuid4()
    seen = {}

    def fake_update(db, tenant, target, data):
        seen["target"] = target
        return profile_response(target, bio=data.bio)

    monkeypatch.setattr(WalkerProfileService, "update_profile", fake_update)

    response = client.put(f"/admin/walkers/{walker_id}/profile", json={"bio": "Senior walker"}, headers=admin.headers)

    assert response.status_code == 200
    assert seen["target"] == walker_id
    assert response.json()["bio"] == "Senior walker"


# =============================================================================
# CALENDAR
# =============================================================================


def test_list_events_returns_count(monkeypatch, login_as):
    walker = login_as("walker")
    events = [make_event(walker.user_id), make_event(walker.user_id)]
    seen = {}

    def fake_list(db, tenant, start, end, event_type):
        seen["event_type"] = event_type
        return events

    monkeypatch.setattr(CalendarService, "list_events", fake_list)
    start = future()

    response = client.get(
        "/calendar/events",
        params={"start": start.isoformat(), "end": (start + timedelta(days=7)).isoformat(), "event_type": "personal"},
        headers=walker.headers,
    )

    assert response.status_code == 200
    body = response.json()
    assert body["count"] == 2
    assert body["events"][0]["title"] == "Vet appointment"
    assert seen["event_type"].value == "personal"


def test_list_events_requires_range(login_as):
    walker = login_as("walker")

    response = client.get("/calendar/events", headers=walker.headers)

    assert response.status_code == 422


def test_create_event_returns_201(monkeypatch, login_as):
    customer = login_as("customer")
    monkeypatch.setattr(
        CalendarService, "create_event", lambda db, tenant, data: make_event(tenant.user_id, start=data.start_time)
    )
    start = future()

    response = client.post(
        "/calendar/events",
        json={"title": "Vet appointment", "start_time": start.isoformat(), "end_time": (start + timedelta(hours=1)).isoformat()},
        headers=customer.headers,
    )

    assert response.status_code == 201
    assert response.json()["user_id"] == str(customer.user_id)
    assert response.json()["is_blocking"] is True


def test_delete_event(monkeypatch, login_as):
    walker = login_as("walker")
    removed = []
    monkeypatch.setattr(CalendarService, "delete_event", lambda db, tenant, event_id: removed.append(event_id))
    event_id = uuid.uuid4()

    response = client.delete(f"/calendar/events/{event_id}", headers=walker.headers)

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "deleted": True}
    assert removed == [event_id]


# =============================================================================
# FEEDBACK
# =============================================================================


def feedback_payload(**overrides):
    payload = {
        "feedback_type": "feature",
        "title": "Dark mode",
        "description": "Please add a dark theme for late evening walks.",
    }
    payload.update(overrides)
    return payload


def test_submit_feedback(monkeypatch, login_as):
    customer = login_as("customer")
    monkeypatch.setattr(
        FeedbackService,
        "submit",
        lambda tenant, data: FeedbackResponse(success=True, message="Feedback received. Thank you!"),
    )

    response = client.post("/feedback", json=feedback_payload(), headers=customer.headers)

    assert response.status_code == 200
    assert response.json()["success"] is True
    assert response.json()["issue_url"] is None


def test_feedback_title_too_short_is_422(login_as):
    customer = login_as("customer")

    response = client.post("/feedback", json=feedback_payload(title="UI"), headers=customer.headers)

    assert response.status_code == 422


def test_feedback_unknown_type_is_422(login_as):
    customer = login_as("customer")

    response = client.post("/feedback", json=feedback_payload(feedback_type="praise"), headers=customer.headers)

    assert response.status_code == 422


def test_feedback_requires_token():
    response = client.post("/feedback", json=feedback_payload())
    assert response.status_code == 401
