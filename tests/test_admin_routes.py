"""
Scheduling, service-area and administration routes
"""

import uuid
from datetime import datetime, time, timezone
from types import SimpleNamespace

from test_fixtures import client, bearer, login_as  # noqa: F401

from domain.schemas.admin_schemas import BrandingResponse, TenantListResponse, TenantResponse
from domain.schemas.scheduling_schemas import ServiceAreaCheckResponse, ServiceAreaMatchResponse
from services.organization_service import OrganizationService, TenantService
from services.schedule_service import ScheduleService
from services.service_area_service import ServiceAreaService
from services.user_service import UserService


def make_area(walker_id, name="Capitol Hill"):
    return SimpleNamespace(
        id=uuid.uuid4(),
        walker_id=walker_id,
        name=name,
        color="#3B82F6",
        polygon=[
            {"lat": 39.72, "lng": -104.99},
            {"lat": 39.74, "lng": -104.99},
            {"lat": 39.74, "lng": -104.96},
        ],
        is_active=True,
        priority=1,
        price_adjustment_percent=0,
        notes=None,
    )


# =============================================================================
# WORKING HOURS AND BLOCKS
# =============================================================================


def test_clear_working_hours_reports_count(monkeypatch, login_as):
    walker = login_as("walker")
    monkeypatch.setattr(ScheduleService, "clear_working_hours", lambda db, tenant, walker_id: 5)

    response = client.delete(f"/working-hours/{walker.user_id}", headers=walker.headers)

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "deleted": 5}


def test_working_hours_day_out_of_range_is_422(login_as):
    walker = login_as("walker")
    payload = {"days": [{"day_of_week": 7, "start_time": "08:00", "end_time": "17:00"}]}

    response = client.put(f"/working-hours/{walker.user_id}", json=payload, headers=walker.headers)

    assert response.status_code == 422


def test_replace_working_hours_parses_times(monkeypatch, login_as):
    walker = login_as("walker")
    seen = {}

    def fake_replace(db, tenant, walker_id, data):
        seen["days"] = [(d.day_of_week, d.start_time, d.end_time) for d in data.days]
        return []

    monkeypatch.setattr(ScheduleService, "replace_working_hours", fake_replace)

    payload = {"days": [{"day_of_week": 1, "start_time": "08:00", "end_time": "17:30"}]}
    response = client.put(f"/working-hours/{walker.user_id}", json=payload, headers=walker.headers)

    assert response.status_code == 200
    assert seen["days"] == [(1, time(8, 0), time(17, 30))]


def test_create_block_returns_201(monkeypatch, login_as):
    walker = login_as("walker")
    start = datetime(2030, 5, 1, 16, 0, tzinfo=timezone.utc)
    end = datetime(2030, 5, 1, 18, 0, tzinfo=timezone.utc)

    def fake_block(db, tenant, data):
        return SimpleNamespace(
            id=uuid.uuid4(),
            walker_id=tenant.user_id,
            reason=data.reason,
            start_time=data.start_time,
            end_time=data.end_time,
            is_recurring=data.is_recurring,
        )

    monkeypatch.setattr(ScheduleService, "create_block", fake_block)

    response = client.post(
        "/blocks",
        json={"reason": "Vet appointment", "start_time": start.isoformat(), "end_time": end.isoformat()},
        headers=walker.headers,
    )

    assert response.status_code == 201
    body = response.json()
    assert body["walker_id"] == str(walker.user_id)
    assert body["reason"] == "Vet appointment"


# =============================================================================
# SERVICE AREAS
# =============================================================================


def test_walker_areas_use_callers_id(monkeypatch, login_as):
    """
    Verifies:
    - /walker/service-areas lists the caller's own areas
    - Polygon points come back as lat/lng objects
    """
    walker = login_as("walker")
    seen = {}

    def fake_list(db, tenant, walker_id):
        seen["walker_id"] = walker_id
        return [make_area(walker_id)]

    monkeypatch.setattr(ServiceAreaService, "list_for_walker", fake_list)

    response = client.get("/walker/service-areas", headers=walker.headers)

    assert response.status_code == 200
    assert seen["walker_id"] == walker.user_id
    area = response.json()[0]
    assert area["name"] == "Capitol Hill"
    assert area["polygon"][0] == {"lat": 39.72, "lng": -104.99}


def test_walker_areas_reject_customers(login_as):
    customer = login_as("customer")
    response = client.get("/walker/service-areas", headers=customer.headers)
    assert response.status_code == 403


def test_admin_areas_reject_walkers(login_as):
    walker = login_as("walker")
    response = client.get("/admin/service-areas", headers=walker.headers)
    assert response.status_code == 403


def test_area_with_two_points_is_400(monkeypatch, login_as):
    walker = login_as("walker")
    monkeypatch.setattr(UserService, "get_walker", lambda db, org_id, walker_id: None)

    response = client.post(
        "/walker/service-areas",
        json={"name": "Line", "polygon": [{"lat": 39.7, "lng": -105.0}, {"lat": 39.8, "lng": -105.0}]},
        headers=walker.headers,
    )

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_SERVICE_AREA"


def test_check_location(monkeypatch, login_as):
    customer = login_as("customer")
    walker_id, area_id = uuid.uuid4(), uuid.uuid4()

    def fake_check(db, tenant, latitude, longitude):
        return ServiceAreaCheckResponse(
            latitude=latitude,
            longitude=longitude,
            is_serviced=True,
            walkers=[
                ServiceAreaMatchResponse(
                    walker_id=walker_id,
                    walker_name="Michael Chen",
                    area_id=area_id,
                    area_name="Capitol Hill",
                    priority=1,
                    price_adjustment_percent=0,
                )
            ],
        )

    monkeypatch.setattr(ServiceAreaService, "check_location", fake_check)

    response = client.get("/service-areas/check?lat=39.73&lng=-104.98", headers=customer.headers)

    assert response.status_code == 200
    body = response.json()
    assert body["is_serviced"] is True
    assert body["walkers"][0]["walker_id"] == str(walker_id)


# =============================================================================
# ORGANIZATION ADMIN
# =============================================================================


def test_branding_needs_admin(login_as):
    customer = login_as("customer")
    response = client.put("/admin/branding", json={"primary_color": "#112233"}, headers=customer.headers)
    assert response.status_code == 403


def test_branding_rejects_bad_color(login_as):
    """Color validation runs before the organization is loaded"""
    admin = login_as("admin")
    response = client.put("/admin/branding", json={"primary_color": "blue"}, headers=admin.headers)

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_COLOR"


def test_public_branding_needs_slug():
    response = client.get("/api/branding")
    assert response.status_code == 400


def test_public_branding_by_header(monkeypatch):
    seen = {}

    def fake_branding(db, slug):
        seen["slug"] = slug
        return BrandingResponse(company_name="Denver Dog Walkers", primary_color="#1A2B3C")

    monkeypatch.setattr(OrganizationService, "public_branding", fake_branding)

    response = client.get("/api/branding", headers={"X-Tenant-Slug": "denver-dogs"})

    assert response.status_code == 200
    assert response.json()["company_name"] == "Denver Dog Walkers"
    assert seen["slug"] == "denver-dogs"


# =============================================================================
# PLATFORM TENANTS
# =============================================================================


def test_tenants_need_platform_admin():
    response = client.get("/admin/tenants", headers=bearer())
    assert response.status_code == 403


def test_list_tenants(monkeypatch):
    org = TenantResponse(id=uuid.uuid4(), name="Denver Dog Walkers", slug="denver-dogs", is_active=True)
    seen = {}

    def fake_list(db, skip=0, limit=100):
        seen["page"] = (skip, limit)
        return TenantListResponse(tenants=[org], total=1)

    monkeypatch.setattr(TenantService, "list_tenants", fake_list)

    response = client.get("/admin/tenants?skip=10&limit=20", headers=bearer(platform_admin=True))

    assert response.status_code == 200
    assert response.json()["total"] == 1
    assert seen["page"] == (10, 20)


def test_tenant_limit_is_capped():
    response = client.get("/admin/tenants?limit=1000", headers=bearer(platform_admin=True))
    assert response.status_code == 422


def test_create_tenant_bad_slug_is_400():
    response = client.post(
        "/admin/tenants",
        json={"name": "Bad Slug Walkers", "slug": "Bad Slug!"},
        headers=bearer(platform_admin=True),
    )

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_SLUG"
