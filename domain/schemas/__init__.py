"""
Domain schemas package - Pydantic models for validation.
"""

from domain.schemas.auth_schemas import (
    RegisterRequest,
    LoginRequest,
    UniversalLoginRequest,
    PlatformLoginRequest,
    UserInfo,
    MembershipInfo,
    AuthResponse,
    ValidateResponse,
    RefreshResponse,
    SessionResponse,
    PlatformAuthResponse,
    GoogleAuthRequest,
    AppleAuthRequest,
    PhoneSendCodeRequest,
    PhoneVerifyRequest,
    MessageResponse,
    WalletChallengeRequest,
    WalletChallengeResponse,
    WalletVerifyRequest,
    ContextResponse,
    ContextListResponse,
    ContextSwitchRequest,
    ContextSwitchResponse,
    IdentityResponse,
    LinkOAuthRequest,
    LinkEmailRequest,
    ChangePasswordRequest,
)
from domain.schemas.user_schemas import (
    UserResponse,
    UserUpdateRequest,
    WalkerCreateRequest,
)
from domain.schemas.catalog_schemas import (
    ServiceCreate,
    ServiceUpdate,
    ServiceResponse,
    LocationCreate,
    LocationUpdate,
    LocationResponse,
    PetCreate,
    PetUpdate,
    PetResponse,
)
from domain.schemas.scheduling_schemas import (
    WorkingHoursDay,
    WorkingHoursUpdate,
    WorkingHoursResponse,
    BlockCreate,
    BlockResponse,
    PolygonPointSchema,
    ServiceAreaCreate,
    ServiceAreaUpdate,
    ServiceAreaResponse,
    ServiceAreaMatchResponse,
    ServiceAreaCheckResponse,
    WalkerLocationUpdate,
    WalkerLocationResponse,
    OnDutyRequest,
    TravelTimeResponse,
    SlotResponse,
    AvailabilitySlotsResponse,
    EngineSlotResponse,
    WalkerAvailabilityResponse,
    RouteStopResponse,
    RouteResponse,
)
from domain.schemas.booking_schemas import (
    BookingCreate,
    BookingCancelRequest,
    BookingRescheduleRequest,
    BookingResponse,
    RecurringBookingCreate,
    OccurrenceConflictResponse,
    RecurringSeriesResponse,
    RecurringCreateResponse,
    RecurringListItem,
    SeriesBookingItem,
    RecurringSeriesDetail,
    CancelSeriesRequest,
    CancelSeriesResponse,
)
from domain.schemas.admin_schemas import (
    BrandingResponse,
    BrandingUpdate,
    PaymentConfigResponse,
    PaymentConfigUpdate,
    DashboardMetrics,
    PaymentProviderResponse,
    ConnectUrlResponse,
    ProviderCallbackRequest,
    PaymentProviderUpdate,
    PaymentMethodCreate,
    PaymentMethodUpdate,
    PaymentMethodResponse,
    TenantCreate,
    TenantUpdate,
    TenantResponse,
    TenantListResponse,
)
from domain.schemas.walker_schemas import (
    SpecializationInput,
    WalkerProfileUpdate,
    SpecializationResponse,
    WalkerProfileResponse,
    SpecializationOption,
    CalendarEventCreate,
    CalendarEventUpdate,
    CalendarEventResponse,
    CalendarEventListResponse,
    FeedbackRequest,
    FeedbackResponse,
)

__all__ = [
    # Auth schemas
    "RegisterRequest",
    "LoginRequest",
    "UniversalLoginRequest",
    "PlatformLoginRequest",
    "UserInfo",
    "MembershipInfo",
    "AuthResponse",
    "ValidateResponse",
    "RefreshResponse",
    "SessionResponse",
    "PlatformAuthResponse",
    "GoogleAuthRequest",
    "AppleAuthRequest",
    "PhoneSendCodeRequest",
    "PhoneVerifyRequest",
    "MessageResponse",
    "WalletChallengeRequest",
    "WalletChallengeResponse",
    "WalletVerifyRequest",
    "ContextResponse",
    "ContextListResponse",
    "ContextSwitchRequest",
    "ContextSwitchResponse",
    "IdentityResponse",
    "LinkOAuthRequest",
    "LinkEmailRequest",
    "ChangePasswordRequest",
    # User schemas
    "UserResponse",
    "UserUpdateRequest",
    "WalkerCreateRequest",
    # Catalog schemas
    "ServiceCreate",
    "ServiceUpdate",
    "ServiceResponse",
    "LocationCreate",
    "LocationUpdate",
    "LocationResponse",
    "PetCreate",
    "PetUpdate",
    "PetResponse",
    # Scheduling schemas
    "WorkingHoursDay",
    "WorkingHoursUpdate",
    "WorkingHoursResponse",
    "BlockCreate",
    "BlockResponse",
    "PolygonPointSchema",
    "ServiceAreaCreate",
    "ServiceAreaUpdate",
    "ServiceAreaResponse",
    "ServiceAreaMatchResponse",
    "ServiceAreaCheckResponse",
    "WalkerLocationUpdate",
    "WalkerLocationResponse",
    "OnDutyRequest",
    "TravelTimeResponse",
    "SlotResponse",
    "AvailabilitySlotsResponse",
    "EngineSlotResponse",
    "WalkerAvailabilityResponse",
    "RouteStopResponse",
    "RouteResponse",
    # Booking schemas
    "BookingCreate",
    "BookingCancelRequest",
    "BookingRescheduleRequest",
    "BookingResponse",
    "RecurringBookingCreate",
    "OccurrenceConflictResponse",
    "RecurringSeriesResponse",
    "RecurringCreateResponse",
    "RecurringListItem",
    "SeriesBookingItem",
    "RecurringSeriesDetail",
    "CancelSeriesRequest",
    "CancelSeriesResponse",
    # Admin schemas
    "BrandingResponse",
    "BrandingUpdate",
    "PaymentConfigResponse",
    "PaymentConfigUpdate",
    "DashboardMetrics",
    "PaymentProviderResponse",
    "ConnectUrlResponse",
    "ProviderCallbackRequest",
    "PaymentProviderUpdate",
    "PaymentMethodCreate",
    "PaymentMethodUpdate",
    "PaymentMethodResponse",
    "TenantCreate",
    "TenantUpdate",
    "TenantResponse",
    "TenantListResponse",
    # Walker profile, calendar and feedback schemas
    "SpecializationInput",
    "WalkerProfileUpdate",
    "SpecializationResponse",
    "WalkerProfileResponse",
    "SpecializationOption",
    "CalendarEventCreate",
    "CalendarEventUpdate",
    "CalendarEventResponse",
    "CalendarEventListResponse",
    "FeedbackRequest",
    "FeedbackResponse",
]
