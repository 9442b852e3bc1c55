"""
Service flows that span several repositories: recurring series creation,
travel-aware slots, passwordless sign-in, linked identities, payment methods
and walker routes.

Repositories are patched per test; RecordingSession stands in for the
SQLAlchemy session and records what was staged and committed.
"""

import uuid
from datetime import date, datetime, time, timedelta, timezone
from types import SimpleNamespace

import pytest
from eth_account import Account
from eth_account.messages import encode_defunct

from test_fixtures import make_booking, make_location, make_service, make_user, future, utc  # noqa: F401
from test_services import FakeSession, tenant_for

from adapters import sms_adapter
from app.exceptions import ConflictError, ForbiddenError, ServiceValidationError, UnauthorizedError
from app.security import hash_password
from core.geo import Coordinates
from core.recurrence import BLOCKED_TIME, CONFLICTING_BOOKING, RecurrenceFrequency
from domain.enums import AuthProvider
from domain.schemas.auth_schemas import (
    PhoneSendCodeRequest,
    PhoneVerifyRequest,
    WalletVerifyRequest,
)
from domain.schemas.booking_schemas import BookingCreate, RecurringBookingCreate
from repositories import (
    BlockRepository,
    BookingRepository,
    IdentityRepository,
    LocationRepository,
    PaymentMethodRepository,
    PhoneVerificationRepository,
    RecurringSeriesRepository,
    ServiceRepository,
    UserRepository,
    WalkerLocationRepository,
    WalletChallengeRepository,
    WorkingHoursRepository,
)
from services import availability_service
from services.auth_service import AuthService
from services.availability_service import CURRENT_LOCATION, TIGHT_WARNING, AvailabilityService
from services.booking_service import BookingService
from services.identity_service import IdentityService, mask_provider_id
from services.location_service import LocationService
from services.payment_service import PaymentMethodService, PaymentProviderService
from services.phone_auth_service import MAX_ATTEMPTS, PhoneAuthService
from services.recurring_service import RecurringService
from services.route_service import RouteService
from services.travel_service import TravelEstimate, TravelService
from services.user_service import UserService
from services.wallet_auth_service import WalletAuthService, build_siwe_message


class RecordingSession(FakeSession):
    """FakeSession that also accepts staged rows and hands out ids on flush"""

    def __init__(self):
        super().__init__()
        self.added = []
        self.deleted = []

    def add(self, row):
        self.added.append(row)

    def flush(self):
        for row in self.added:
            if getattr(row, "id", None) is None:
                row.id = uuid.uuid4()

    def refresh(self, row):
        pass

    def delete(self, row):
        self.deleted.append(row)


def staged(db, model_name):
    return [row for row in db.added if type(row).__name__ == model_name]


# =============================================================================
# RECURRING SERIES
# =============================================================================


def series_request(**overrides):
    """Weekly on Mondays at 09:00 Denver time, four occurrences from 4 March 2030"""
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


def make_series(customer_id, walker_id):
    return SimpleNamespace(
        id=uuid.uuid4(),
        organization_id=uuid.uuid4(),
        customer_id=customer_id,
        walker_id=walker_id,
        service_id=uuid.uuid4(),
        location_id=uuid.uuid4(),
        frequency=RecurrenceFrequency.WEEKLY,
        day_of_week=1,
        time_of_day=time(9, 0),
        timezone="America/Denver",
        end_date=None,
        total_occurrences=4,
        is_active=True,
        price_cents_per_booking=2500,
        default_notes=None,
        created_at=datetime.now(timezone.utc),
    )


@pytest.fixture
def schedulable(monkeypatch):
    """
    Patch the lookups RecurringService.create performs and expose the walker's
    busy time so each test can shape it.

    Example:
        >>> schedulable.bookings.append((start, end))
    """
    state = SimpleNamespace(bookings=[], blocks=[], locks=[])
    service = make_service(duration_minutes=60)
    location = make_location()

    monkeypatch.setattr(UserService, "get_walker", lambda db, org_id, walker_id: make_user(walker_id, role="walker"))
    monkeypatch.setattr(ServiceRepository, "get_in_org", lambda self, service_id, org_id: service)
    monkeypatch.setattr(LocationService, "get_owned", lambda db, tenant, location_id: location)
    monkeypatch.setattr(UserRepository, "get_by_id", lambda self, user_id: make_user(user_id))
    monkeypatch.setattr(UserRepository, "lock_for_update", lambda self, user_id: state.locks.append(user_id))
    monkeypatch.setattr(
        BookingRepository,
        "list_active_for_walker_between",
        lambda self, org_id, walker_id, start, end: [
            SimpleNamespace(scheduled_start=s, scheduled_end=e) for s, e in state.bookings
        ],
    )
    monkeypatch.setattr(
        BlockRepository,
        "list_overlapping",
        lambda self, org_id, walker_id, start=None, end=None: [
            SimpleNamespace(start_time=s, end_time=e) for s, e in state.blocks
        ],
    )
    monkeypatch.setattr(
        RecurringSeriesRepository, "get_by_idempotency_key", lambda self, *a: None
    )
    return state


def test_series_skips_conflicting_dates(schedulable):
    """
    Verifies:
    - The walker row is locked before conflicts are checked
    - A date overlapping an active booking is reported and not booked
    - The remaining dates become pending bookings in one commit
    """
    customer = tenant_for("customer")
    data = series_request()
    # 11 March 09:00 MDT
    schedulable.bookings.append((utc(2030, 3, 11, 15), utc(2030, 3, 11, 16)))
    db = RecordingSession()

    result = RecurringService.create(db, customer, data)

    assert schedulable.locks == [data.walker_id]
    assert result.bookings_created == 3
    assert result.total_planned == 4
    assert [(c.date, c.reason) for c in result.conflicts] == [(date(2030, 3, 11), CONFLICTING_BOOKING)]
    bookings = staged(db, "Booking")
    assert [b.occurrence_number for b in bookings] == [1, 3, 4]
    assert all(b.recurring_series_id == result.series.id for b in bookings)
    assert db.commits == 1


def test_series_first_booking_uses_customer_timezone(schedulable):
    customer = tenant_for("customer")
    db = RecordingSession()

    RecurringService.create(db, customer, series_request())

    first = staged(db, "Booking")[0]
    # 4 March is before the DST switch; 09:00 MST
    assert first.scheduled_start == utc(2030, 3, 4, 16)
    assert first.scheduled_end - first.scheduled_start == timedelta(minutes=60)


def test_series_where_every_date_conflicts_is_rejected(schedulable):
    customer = tenant_for("customer")
    schedulable.blocks.append((utc(2030, 3, 1), utc(2030, 4, 1)))
    db = RecordingSession()

    with pytest.raises(ConflictError) as exc:
        RecurringService.create(db, customer, series_request())

    assert exc.value.code == "BOOKING_CONFLICT"
    assert db.rollbacks == 1
    assert db.commits == 0


def test_series_preview_plans_without_writing(schedulable):
    """
    Verifies:
    - A preview returns no series and creates nothing
    - Blocked dates are listed with their reason
    - No lock is taken
    """
    customer = tenant_for("customer")
    # 18 March 09:00 MDT
    schedulable.blocks.append((utc(2030, 3, 18, 14), utc(2030, 3, 18, 18)))
    db = RecordingSession()

    result = RecurringService.create(db, customer, series_request(preview_only=True))

    assert result.series is None
    assert result.bookings_created == 0
    assert result.total_planned == 4
    assert result.preview_dates[0] == date(2030, 3, 4)
    assert [(c.date, c.reason) for c in result.conflicts] == [(date(2030, 3, 18), BLOCKED_TIME)]
    assert db.added == [] and db.commits == 0
    assert schedulable.locks == []


def test_series_replay_returns_existing_series(monkeypatch, schedulable):
    """
    Verifies:
    - A repeated idempotency key returns the stored series
    - Nothing is looked up, locked or written on replay
    """
    customer = tenant_for("customer")
    data = series_request()
    existing = make_series(customer.user_id, data.walker_id)
    monkeypatch.setattr(RecurringSeriesRepository, "get_by_idempotency_key", lambda self, *a: existing)
    monkeypatch.setattr(
        BookingRepository, "list_for_series", lambda self, org_id, series_id: [make_booking()] * 3
    )

    def no_lookup(*args, **kwargs):
        raise AssertionError("replay must not re-plan the series")

    monkeypatch.setattr(UserService, "get_walker", no_lookup)
    db = RecordingSession()

    result = RecurringService.create(db, customer, data, idempotency_key=uuid.uuid4())

    assert result.series.id == existing.id
    assert result.bookings_created == 3
    assert result.conflicts == []
    assert db.added == [] and db.commits == 0
    assert schedulable.locks == []


# =============================================================================
# SLOTS
# =============================================================================

# Wednesday; Denver is on MDT (UTC-6)
SLOT_DAY = date(2030, 6, 12)


@pytest.fixture
def slot_day(monkeypatch):
    """
    Walker works 08:00-12:00 Denver time (14:00-18:00 UTC) and offers a
    30 minute walk. Tests fill in bookings, blocks, travel and the clock.
    """
    state = SimpleNamespace(
        bookings=[],
        blocks=[],
        hours=SimpleNamespace(start_time=time(8), end_time=time(12), is_active=True),
        now=utc(2030, 6, 1, 12),
        position=None,
        travel_minutes=20,
        origin=make_location(),
    )
    walker = make_user(role="walker")
    service = make_service(duration_minutes=30)
    destination = make_location()

    monkeypatch.setattr(UserService, "get_walker", lambda db, org_id, walker_id: walker)
    monkeypatch.setattr(
        AvailabilityService, "_load_target", lambda db, tenant, service_id, location_id: (service, destination)
    )
    monkeypatch.setattr(WorkingHoursRepository, "get_for_day", lambda self, org_id, walker_id, day: state.hours)
    monkeypatch.setattr(
        BookingRepository, "list_active_for_walker_between", lambda self, *a: list(state.bookings)
    )
    monkeypatch.setattr(BlockRepository, "list_overlapping", lambda self, *a: list(state.blocks))
    monkeypatch.setattr(availability_service, "utcnow", lambda: state.now)
    monkeypatch.setattr(TravelService, "fresh_walker_position", lambda db, org_id, walker_id: state.position)
    monkeypatch.setattr(LocationRepository, "get_by_id", lambda self, location_id: state.origin)

    def estimate(*args, **kwargs):
        return TravelEstimate(state.travel_minutes, 0, True, state.now)

    monkeypatch.setattr(TravelService, "between_locations", estimate)
    monkeypatch.setattr(TravelService, "from_point", estimate)
    return state


def slots_for(on_date=SLOT_DAY):
    admin = tenant_for("admin")
    return AvailabilityService.get_slots(None, admin, uuid.uuid4(), uuid.uuid4(), uuid.uuid4(), on_date).slots


def starts(slots):
    return [(s.start_time.hour, s.start_time.minute) for s in slots]


def test_slots_cover_working_hours(slot_day):
    slots = slots_for()

    assert starts(slots) == [(14, 0), (14, 30), (15, 0), (15, 30), (16, 0), (16, 30), (17, 0), (17, 30)]
    assert all(s.travel_minutes is None and not s.is_tight for s in slots)


def test_slots_skip_blocked_time(slot_day):
    """Verifies: a blocked hour removes the slots overlapping it and keeps the one ending at its start"""
    slot_day.blocks.append(SimpleNamespace(start_time=utc(2030, 6, 12, 15), end_time=utc(2030, 6, 12, 16)))

    assert starts(slots_for()) == [(14, 0), (14, 30), (16, 0), (16, 30), (17, 0), (17, 30)]


def test_slots_leave_room_to_travel_from_previous_booking(slot_day):
    """
    Verifies:
    - A slot starting before the walker could arrive is dropped
    - A slot with less than travel + buffer + 10 minutes of slack is tight
    - Travel is reported from the previous booking's address
    """
    booking = make_booking(start=utc(2030, 6, 12, 15), duration_minutes=30)
    slot_day.bookings.append(booking)

    slots = {(s.start_time.hour, s.start_time.minute): s for s in slots_for()}

    assert (15, 0) not in slots
    # 15:30 leaves no time to cover 20 minutes of travel
    assert (15, 30) not in slots
    tight = slots[(16, 0)]
    assert tight.is_tight
    assert tight.warning == TIGHT_WARNING
    assert tight.travel_minutes == 20
    assert tight.travel_from == f"Previous: {slot_day.origin.address}"
    relaxed = slots[(16, 30)]
    assert not relaxed.is_tight and relaxed.warning is None
    assert slots[(14, 0)].travel_minutes is None


def test_slots_today_travel_from_live_position(slot_day):
    slot_day.now = utc(2030, 6, 12, 14)
    slot_day.position = Coordinates.unchecked(39.75, -105.0)
    slot_day.travel_minutes = 12

    slots = slots_for()

    assert starts(slots)[0] == (14, 0)
    assert all(s.travel_from == CURRENT_LOCATION and s.travel_minutes == 12 for s in slots)
    assert not any(s.is_tight for s in slots)


def test_slots_drop_past_times_today(slot_day):
    slot_day.now = utc(2030, 6, 12, 16, 10)

    assert starts(slots_for()) == [(16, 30), (17, 0), (17, 30)]


def test_slots_on_spring_forward_day_stay_on_that_day(slot_day):
    """
    Verifies:
    - Hours opening at 02:00 on the Denver DST switch open at 03:00 MDT
    - No slot leaves the requested day or working hours
    """
    slot_day.hours = SimpleNamespace(start_time=time(2), end_time=time(10), is_active=True)
    slot_day.now = utc(2027, 3, 1)

    slots = slots_for(date(2027, 3, 14))

    assert slots[0].start_time == utc(2027, 3, 14, 9)
    assert slots[-1].end_time == utc(2027, 3, 14, 16)
    assert len(slots) == 14


def test_slots_empty_on_day_off(slot_day):
    slot_day.hours = None

    assert slots_for() == []


# =============================================================================
# PHONE SIGN-IN
# =============================================================================

PHONE = "+13035550100"


@pytest.fixture
def phone_org(monkeypatch):
    org = SimpleNamespace(id=uuid.uuid4(), slug="demo", name="Demo Walks")
    monkeypatch.setattr(AuthService, "get_active_org", lambda db, slug: org)
    return org


def test_fourth_code_within_an_hour_is_not_sent(monkeypatch, phone_org):
    """
    Verifies:
    - After three codes in the window no code is stored or texted
    - The caller gets the same answer as a successful send
    """
    sent = []
    monkeypatch.setattr(PhoneVerificationRepository, "count_since", lambda self, phone, since: 3)
    monkeypatch.setattr(sms_adapter, "send_sms", lambda to, body: sent.append(to) or True)
    db = RecordingSession()

    result = PhoneAuthService.send_code(db, PhoneSendCodeRequest(org_slug="demo", phone_number=PHONE))

    assert result.success
    assert sent == []
    assert db.added == [] and db.commits == 0


def test_code_is_texted_below_the_limit(monkeypatch, phone_org):
    sent = []
    monkeypatch.setattr(PhoneVerificationRepository, "count_since", lambda self, phone, since: 2)
    monkeypatch.setattr(sms_adapter, "send_sms", lambda to, body: sent.append(body) or True)
    db = RecordingSession()

    PhoneAuthService.send_code(db, PhoneSendCodeRequest(org_slug="demo", phone_number="+1 (303) 555-0100"))

    assert len(staged(db, "PhoneVerification")) == 1
    assert staged(db, "PhoneVerification")[0].phone_number == PHONE
    assert "Demo Walks" in sent[0]


def test_code_locked_after_five_failed_attempts(monkeypatch, phone_org):
    """Verifies: once five attempts are used even the right code is refused"""
    verification = SimpleNamespace(attempts=MAX_ATTEMPTS, code_hash=hash_password("123456"))
    monkeypatch.setattr(PhoneVerificationRepository, "get_active", lambda self, phone, now: verification)

    with pytest.raises(ServiceValidationError) as exc:
        PhoneAuthService.verify_code(
            FakeSession(), PhoneVerifyRequest(org_slug="demo", phone_number=PHONE, code="123456")
        )
    assert exc.value.code == "TOO_MANY_ATTEMPTS"


def test_wrong_code_counts_an_attempt(monkeypatch, phone_org):
    verification = SimpleNamespace(attempts=MAX_ATTEMPTS - 1, code_hash=hash_password("123456"))
    monkeypatch.setattr(PhoneVerificationRepository, "get_active", lambda self, phone, now: verification)
    db = FakeSession()

    with pytest.raises(UnauthorizedError) as exc:
        PhoneAuthService.verify_code(db, PhoneVerifyRequest(org_slug="demo", phone_number=PHONE, code="000000"))

    assert exc.value.code == "INVALID_CODE"
    assert verification.attempts == MAX_ATTEMPTS
    assert db.commits == 1


# =============================================================================
# WALLET SIGN-IN
# =============================================================================


def signed_challenge(signer, address, nonce):
    now = datetime(2030, 1, 1, tzinfo=timezone.utc)
    message = build_siwe_message("offleash.app", address.lower(), "demo", nonce, now, now + timedelta(minutes=10))
    signed = Account.sign_message(encode_defunct(text=message), private_key=signer.key)
    return message, "0x" + bytes(signed.signature).hex()


@pytest.fixture
def wallet_challenge(monkeypatch, phone_org):
    challenge = SimpleNamespace(nonce="a" * 32)
    monkeypatch.setattr(WalletChallengeRepository, "get_active", lambda self, address, now: challenge)
    return challenge


def test_wallet_nonce_must_match_challenge(wallet_challenge):
    wallet = Account.create()
    message, signature = signed_challenge(wallet, wallet.address, "b" * 32)

    with pytest.raises(UnauthorizedError) as exc:
        WalletAuthService.verify(
            RecordingSession(),
            WalletVerifyRequest(org_slug="demo", wallet_address=wallet.address, message=message, signature=signature),
        )
    assert exc.value.code == "INVALID_CHALLENGE"


def test_wallet_signature_from_another_key_is_rejected(wallet_challenge):
    """
    Verifies:
    - A message signed by a different key does not sign the wallet in
    - Nothing is written
    """
    wallet, impostor = Account.create(), Account.create()
    message, signature = signed_challenge(impostor, wallet.address, wallet_challenge.nonce)
    db = RecordingSession()

    with pytest.raises(UnauthorizedError) as exc:
        WalletAuthService.verify(
            db,
            WalletVerifyRequest(org_slug="demo", wallet_address=wallet.address, message=message, signature=signature),
        )
    assert exc.value.code == "INVALID_SIGNATURE"
    assert db.added == [] and db.commits == 0


# =============================================================================
# LINKED IDENTITIES
# =============================================================================


@pytest.mark.parametrize(
    "provider, value, masked",
    [
        ("email", "sarah.martinez@example.com", "sa***@example.com"),
        ("email", "jo@example.com", "***@example.com"),
        ("email", "x@x.com", "***@x.com"),
        ("phone", "+13035550100", "***0100"),
        ("wallet", "0x52908400098527886e0f7030069857d2e4169ee7", "0x5290...9ee7"),
        ("google", "108234567890123456789", "10823456..."),
        ("apple", "short", "short"),
    ],
)
def test_provider_ids_are_masked(provider, value, masked):
    assert mask_provider_id(provider, value) == masked


def make_identity(user_id, provider=AuthProvider.EMAIL, provider_user_id="sarah.martinez@example.com"):
    return SimpleNamespace(
        id=uuid.uuid4(),
        user_id=user_id,
        provider=provider,
        provider_user_id=provider_user_id,
        provider_email=None,
        created_at=datetime.now(timezone.utc),
    )


def test_single_identity_cannot_be_unlinked(monkeypatch):
    user_id = uuid.uuid4()
    monkeypatch.setattr(IdentityRepository, "list_for_user", lambda self, uid: [make_identity(user_id)])

    [only] = IdentityService.list_identities(None, user_id)

    assert only.can_unlink is False
    assert only.provider_user_id == "sa***@example.com"


def test_every_identity_unlinkable_when_several(monkeypatch):
    user_id = uuid.uuid4()
    identities = [make_identity(user_id), make_identity(user_id, AuthProvider.PHONE, "+13035550100")]
    monkeypatch.setattr(IdentityRepository, "list_for_user", lambda self, uid: identities)

    listed = IdentityService.list_identities(None, user_id)

    assert [i.can_unlink for i in listed] == [True, True]
    assert listed[1].provider_user_id == "***0100"


def test_last_identity_is_never_unlinked(monkeypatch):
    user_id = uuid.uuid4()
    identity = make_identity(user_id)
    monkeypatch.setattr(IdentityRepository, "get_by_id", lambda self, identity_id: identity)
    monkeypatch.setattr(IdentityRepository, "count_for_user", lambda self, uid: 1)
    db = RecordingSession()

    with pytest.raises(ServiceValidationError) as exc:
        IdentityService.unlink(db, user_id, identity.id)

    assert exc.value.code == "LAST_IDENTITY"
    assert db.deleted == [] and db.commits == 0


def test_unlink_with_another_identity_left(monkeypatch):
    user_id = uuid.uuid4()
    identity = make_identity(user_id)
    monkeypatch.setattr(IdentityRepository, "get_by_id", lambda self, identity_id: identity)
    monkeypatch.setattr(IdentityRepository, "count_for_user", lambda self, uid: 2)
    db = RecordingSession()

    IdentityService.unlink(db, user_id, identity.id)

    assert db.deleted == [identity]
    assert db.commits == 1


# =============================================================================
# PAYMENTS
# =============================================================================


def make_method(is_default=False):
    return SimpleNamespace(id=uuid.uuid4(), is_default=is_default, is_active=True)


def test_deleting_default_method_promotes_another(monkeypatch):
    """
    Verifies:
    - The removed method is deactivated and loses the default flag
    - The first remaining active method becomes the default
    """
    customer = tenant_for("customer")
    removed, other = make_method(is_default=True), make_method()
    monkeypatch.setattr(PaymentMethodRepository, "get_for_user", lambda self, method_id, org_id, user_id: removed)
    monkeypatch.setattr(PaymentMethodRepository, "list_active_for_user", lambda self, org_id, user_id: [other])
    db = RecordingSession()

    PaymentMethodService.delete_method(db, customer, removed.id)

    assert removed.is_active is False and removed.is_default is False
    assert other.is_default is True
    assert db.commits == 1


def test_deleting_other_method_keeps_default(monkeypatch):
    customer = tenant_for("customer")
    removed, default = make_method(), make_method(is_default=True)
    monkeypatch.setattr(PaymentMethodRepository, "get_for_user", lambda self, method_id, org_id, user_id: removed)

    def no_listing(self, org_id, user_id):
        raise AssertionError("default only moves when the default is removed")

    monkeypatch.setattr(PaymentMethodRepository, "list_active_for_user", no_listing)

    PaymentMethodService.delete_method(RecordingSession(), customer, removed.id)

    assert default.is_default is True
    assert removed.is_active is False


@pytest.mark.parametrize("state_for", [lambda org: f"{uuid.uuid4()}:abc", lambda org: str(org), lambda org: ""])
def test_provider_callback_state_must_name_caller_org(monkeypatch, state_for):
    """Verifies: a state without a colon or minted for another organization never reaches the token exchange"""
    admin = tenant_for("admin")

    def no_exchange(provider_type, code):
        raise AssertionError("code must not be exchanged")

    monkeypatch.setattr(PaymentProviderService, "_exchange", no_exchange)

    with pytest.raises(ServiceValidationError) as exc:
        PaymentProviderService.handle_callback(RecordingSession(), admin, "stripe", "code", state_for(admin.org_id))
    assert exc.value.code == "INVALID_STATE"


# =============================================================================
# ROUTES, DUTY AND BOOKING ROLES
# =============================================================================


def test_walker_route_for_one_booking(monkeypatch):
    """
    Verifies:
    - A booking whose location is gone is left out of the route
    - The remaining booking is the only stop, with the customer's short name
    """
    walker = tenant_for("walker")
    kept = make_booking(walker_id=walker.user_id, start=utc(2030, 6, 12, 15))
    orphan = make_booking(walker_id=walker.user_id, start=utc(2030, 6, 12, 17))
    location = make_location(location_id=kept.location_id)

    monkeypatch.setattr(UserService, "get_walker", lambda db, org_id, walker_id: make_user(walker_id, role="walker"))
    monkeypatch.setattr(BookingRepository, "list_active_for_walker_between", lambda self, *a: [kept, orphan])
    monkeypatch.setattr(
        LocationRepository, "get_by_id", lambda self, location_id: location if location_id == kept.location_id else None
    )
    monkeypatch.setattr(UserRepository, "get_by_id", lambda self, user_id: make_user(user_id))
    monkeypatch.setattr(TravelService, "traffic_matrix", lambda db, ids, on_date, traffic: None)

    route = RouteService.optimize_day(None, walker, walker.user_id, SLOT_DAY)

    assert [s.booking_id for s in route.stops] == [kept.id]
    assert route.stops[0].sequence == 1
    assert route.stops[0].customer_name == "Sarah M."
    assert route.stops[0].service_duration_minutes == 30
    assert route.total_travel_minutes == 0


def test_route_of_another_walker_is_forbidden():
    walker = tenant_for("walker")

    with pytest.raises(ForbiddenError):
        RouteService.optimize_day(None, walker, uuid.uuid4(), SLOT_DAY)


def test_duty_toggle_keeps_position_age(monkeypatch):
    """
    Verifies:
    - Going on duty records when the flag changed
    - The last position report time is untouched, so an old position stays stale
    """
    walker = tenant_for("walker")
    reported = datetime.now(timezone.utc) - timedelta(hours=3)
    row = SimpleNamespace(is_on_duty=False, updated_at=reported, duty_changed_at=None)
    monkeypatch.setattr(WalkerLocationRepository, "get_for_walker", lambda self, org_id, walker_id: row)
    db = FakeSession()

    assert TravelService.set_on_duty(db, walker, walker.user_id, True) is True

    assert row.is_on_duty is True
    assert row.updated_at == reported
    assert row.duty_changed_at is not None
    assert TravelService.is_stale(row)
    assert db.commits == 1


@pytest.mark.parametrize("role", ["walker", "admin", "owner"])
def test_only_customers_create_bookings(monkeypatch, role):
    caller = tenant_for(role)

    def no_lookup(*args, **kwargs):
        raise AssertionError("role is checked before any lookup")

    monkeypatch.setattr(ServiceRepository, "get_in_org", no_lookup)
    data = BookingCreate(walker_id=uuid.uuid4(), service_id=uuid.uuid4(), location_id=uuid.uuid4(), start_time=future())

    with pytest.raises(ForbiddenError):
        BookingService.create_booking(FakeSession(), caller, data)
