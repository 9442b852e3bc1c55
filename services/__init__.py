"""Services package - Business logic layer"""

from services.auth_service import AuthService
from services.oauth_service import OAuthService
from services.phone_auth_service import PhoneAuthService
from services.wallet_auth_service import WalletAuthService
from services.identity_service import IdentityService
from services.context_service import ContextService
from services.user_service import UserService
from services.catalog_service import CatalogService
from services.location_service import LocationService
from services.pet_service import PetService
from services.schedule_service import ScheduleService
from services.service_area_service import ServiceAreaService
from services.booking_service import BookingService
from services.recurring_service import RecurringService
from services.travel_service import TravelService
from services.availability_service import AvailabilityService
from services.route_service import RouteService
from services.organization_service import OrganizationService, TenantService
from services.payment_service import PaymentMethodService, PaymentProviderService
from services.walker_profile_service import WalkerProfileService
from services.calendar_service import CalendarService
from services.feedback_service import FeedbackService

__all__ = [
    "AuthService",
    "OAuthService",
    "PhoneAuthService",
    "WalletAuthService",
    "IdentityService",
    "ContextService",
    "UserService",
    "CatalogService",
    "LocationService",
    "PetService",
    "ScheduleService",
    "ServiceAreaService",
    "BookingService",
    "RecurringService",
    "TravelService",
    "AvailabilityService",
    "RouteService",
    "OrganizationService",
    "TenantService",
    "PaymentMethodService",
    "PaymentProviderService",
    "WalkerProfileService",
    "CalendarService",
    "FeedbackService",
]
