from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import date, datetime, time
from uuid import UUID


class WorkingHoursDay(BaseModel):
    day_of_week: int = Field(..., ge=0, le=6, description="0 = Sunday ... 6 = Saturday")
    start_time: time
    end_time: time
    is_active: bool = True


class WorkingHoursUpdate(BaseModel):
    """Full weekly replacement"""

    days: List[WorkingHoursDay]


class WorkingHoursResponse(BaseModel):
    id: UUID
    walker_id: UUID
    day_of_week: int
    day_name: str
    start_time: time
    end_time: time
    is_active: bool


class BlockCreate(BaseModel):
    walker_id: Optional[UUID] = Field(
        None, description="Defaults to the caller; admins may block any walker"
    )
    reason: str = Field(..., min_length=1)
    start_time: datetime
    end_time: datetime
    is_recurring: bool = False


class BlockResponse(BaseModel):
    id: UUID
    walker_id: UUID
    reason: str
    start_time: datetime
    end_time: datetime
    is_recurring: bool

    model_config = {"from_attributes": True}


class PolygonPointSchema(BaseModel):
    lat: float
    lng: float


class ServiceAreaCreate(BaseModel):
    name: str = Field(..., min_length=1)
    color: Optional[str] = None
    polygon: List[PolygonPointSchema]
    priority: int = 0
    price_adjustment_percent: int = 0
    notes: Optional[str] = None


class ServiceAreaUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    color: Optional[str] = None
    polygon: Optional[List[PolygonPointSchema]] = None
    is_active: Optional[bool] = None
    priority: Optional[int] = None
    price_adjustment_percent: Optional[int] = None
    notes: Optional[str] = None


class ServiceAreaResponse(BaseModel):
    id: UUID
    walker_id: UUID
    name: str
    color: str
    polygon: List[PolygonPointSchema]
    is_active: bool
    priority: int
    price_adjustment_percent: int
    notes: Optional[str] = None


class ServiceAreaMatchResponse(BaseModel):
    walker_id: UUID
    walker_name: Optional[str] = None
    area_id: UUID
    area_name: str
    priority: int
    price_adjustment_percent: int


class ServiceAreaCheckResponse(BaseModel):
    latitude: float
    longitude: float
    is_serviced: bool
    walkers: List[ServiceAreaMatchResponse]


class WalkerLocationUpdate(BaseModel):
    latitude: float
    longitude: float
    accuracy: Optional[float] = Field(None, ge=0)
    heading: Optional[float] = Field(None, ge=0, lt=360)
    speed: Optional[float] = Field(None, ge=0)
    is_on_duty: Optional[bool] = None


class WalkerLocationResponse(BaseModel):
    walker_id: UUID
    latitude: float
    longitude: float
    accuracy: Optional[float] = None
    heading: Optional[float] = None
    speed: Optional[float] = None
    is_on_duty: bool
    updated_at: Optional[datetime] = None
    is_stale: bool


class OnDutyRequest(BaseModel):
    is_on_duty: bool


class TravelTimeResponse(BaseModel):
    travel_minutes: int
    distance_meters: int
    is_cached: bool
    calculated_at: datetime


class SlotResponse(BaseModel):
    start_time: datetime
    end_time: datetime
    travel_minutes: Optional[int] = None
    travel_from: Optional[str] = None
    is_tight: bool = False
    warning: Optional[str] = None


class AvailabilitySlotsResponse(BaseModel):
    date: date
    walker_id: UUID
    walker_name: str
    slots: List[SlotResponse]
    travel_buffer_minutes: int


class EngineSlotResponse(BaseModel):
    start: datetime
    end: datetime
    travel_from_previous_minutes: Optional[int] = None
    confidence: str


class WalkerAvailabilityResponse(BaseModel):
    walker_id: UUID
    date: date
    slots: List[EngineSlotResponse]


class RouteStopResponse(BaseModel):
    sequence: int
    booking_id: UUID
    location_id: UUID
    customer_name: str
    address: str
    arrival_time: datetime
    departure_time: datetime
    travel_from_previous_minutes: int
    service_duration_minutes: int


class RouteResponse(BaseModel):
    date: date
    walker_id: UUID
    is_optimized: bool
    stops: List[RouteStopResponse]
    total_travel_minutes: int
    total_distance_meters: int
    savings_minutes: int
