"""
Sign-in routes and the bearer-token guards in front of every other route
"""

import uuid

from test_fixtures import client, bearer, login_as, make_user  # noqa: F401

from app.exceptions import invalid_credentials, organization_not_found
from app.security import create_token, decode_token
from domain.schemas.auth_schemas import AuthResponse, MembershipInfo, UserInfo
from services.auth_service import AuthService


def auth_response(user, org_id=None, role="customer"):
    org_id = org_id or uuid.uuid4()
    membership = MembershipInfo(
        id=uuid.uuid4(),
        organization_id=org_id,
        organization_name="Denver Dog Walkers",
        organization_slug="denver-dogs",
        role=role,
        is_default=True,
    )
    return AuthResponse(
        token=create_token(user.id, org_id),
        user=UserInfo(
            id=user.id,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            role=role,
            phone=user.phone,
            timezone=user.timezone,
        ),
        membership=membership,
        memberships=[membership],
    )


# =============================================================================
# HEALTH
# =============================================================================


def test_health():
    response = client.get("/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["service"] == "offleash"


# =============================================================================
# REGISTER / LOGIN
# =============================================================================


def test_register_returns_201(monkeypatch):
    """
    Verifies:
    - POST /auth/register answers 201 with the token and the membership
    """
    user = make_user()
    monkeypatch.setattr(AuthService, "register", lambda db, data: auth_response(user))

    response = client.post(
        "/auth/register",
        json={
            "org_slug": "denver-dogs",
            "email": user.email,
            "password": "s3cure-pass",
            "first_name": "Sarah",
            "last_name": "Martinez",
        },
    )

    assert response.status_code == 201
    body = response.json()
    assert body["user"]["email"] == user.email
    assert body["membership"]["organization_slug"] == "denver-dogs"
    assert decode_token(body["token"]).user_id == user.id


def test_register_missing_fields_is_422():
    response = client.post("/auth/register", json={"org_slug": "denver-dogs"})
    assert response.status_code == 422
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


def test_login_wrong_password_is_401(monkeypatch):
    def reject(db, data):
        raise invalid_credentials()

    monkeypatch.setattr(AuthService, "login", reject)

    response = client.post(
        "/auth/login",
        json={"org_slug": "denver-dogs", "email": "sarah@example.com", "password": "nope"},
    )

    assert response.status_code == 401
    body = response.json()
    assert body["success"] is False
    assert body["error"]["code"] == "INVALID_CREDENTIALS"


def test_login_unknown_org_is_404(monkeypatch):
    def missing(db, data):
        raise organization_not_found(data.org_slug)

    monkeypatch.setattr(AuthService, "login", missing)

    response = client.post(
        "/auth/login",
        json={"org_slug": "nowhere", "email": "sarah@example.com", "password": "whatever1"},
    )

    assert response.status_code == 404


def test_universal_login(monkeypatch):
    user = make_user(role="walker")
    monkeypatch.setattr(AuthService, "login_universal", lambda db, data: auth_response(user, role="walker"))

    response = client.post("/auth/login/universal", json={"email": user.email, "password": "s3cure-pass"})

    assert response.status_code == 200
    assert response.json()["user"]["role"] == "walker"


# =============================================================================
# TOKEN GUARDS
# =============================================================================


def test_validate_with_token():
    user_id = uuid.uuid4()
    response = client.get("/auth/validate", headers=bearer(user_id))

    assert response.status_code == 200
    assert response.json() == {"valid": True, "user_id": str(user_id)}


def test_validate_without_header_is_401():
    response = client.get("/auth/validate")
    assert response.status_code == 401


def test_malformed_header_is_401():
    response = client.get("/auth/validate", headers={"Authorization": "Token abc"})
    assert response.status_code == 401
    assert response.json()["error"]["code"] == "INVALID_TOKEN"


def test_forged_token_is_401():
    response = client.get("/auth/validate", headers={"Authorization": "Bearer not.a.jwt"})
    assert response.status_code == 401


def test_refresh_keeps_claims():
    """
    Verifies:
    - The reissued token carries the same user and organization
    - expires_in reflects the configured lifetime
    """
    user_id, org_id = uuid.uuid4(), uuid.uuid4()
    response = client.post("/auth/refresh", headers=bearer(user_id, org_id))

    assert response.status_code == 200
    body = response.json()
    claims = decode_token(body["token"])
    assert claims.user_id == user_id
    assert claims.organization_id == org_id
    assert body["expires_in"] == 24 * 3600


def test_tenant_route_needs_org_scoped_token():
    response = client.get("/bookings/customer", headers=bearer(org_id=None))
    assert response.status_code == 401
    assert response.json()["error"]["code"] == "INVALID_TOKEN"


def test_tenant_route_without_membership_is_403(login_as):
    login_as("customer")
    # Valid token, but for an organization the caller does not belong to
    response = client.get("/bookings/customer", headers=bearer(uuid.uuid4(), uuid.uuid4()))
    assert response.status_code == 403


def test_platform_routes_need_platform_claim():
    response = client.get("/admin/tenants", headers=bearer(uuid.uuid4(), uuid.uuid4()))
    assert response.status_code == 403


def test_platform_login(monkeypatch):
    from domain.schemas.auth_schemas import PlatformAuthResponse

    admin_id = uuid.uuid4()
    monkeypatch.setattr(
        AuthService,
        "platform_login",
        lambda db, email, password: PlatformAuthResponse(
            token=create_token(admin_id, None, platform_admin=True), admin_id=admin_id, email=email
        ),
    )

    response = client.post("/platform/auth/login", json={"email": "ops@offleash.app", "password": "operator-pass"})

    assert response.status_code == 200
    assert decode_token(response.json()["token"]).platform_admin is True


# =============================================================================
# ERROR ENVELOPE
# =============================================================================


def test_request_id_is_echoed():
    response = client.get("/health", headers={"X-Request-ID": "req-abc-123"})
    assert response.headers["X-Request-ID"] == "req-abc-123"


def test_error_body_carries_request_id():
    """
    Verifies:
    - Error responses use the success/error envelope
    - The request id in the body matches the response header
    """
    response = client.get("/auth/validate")

    body = response.json()
    assert body["success"] is False
    assert body["error"]["code"] == "UNAUTHORIZED"
    assert body["request_id"] == response.headers["X-Request-ID"]
    assert "timestamp" in body
