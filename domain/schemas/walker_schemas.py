from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import date, datetime
from uuid import UUID

from domain.enums import CalendarEventType, CalendarSyncStatus, FeedbackType


# =============================================================================
# Walker profiles
# =============================================================================


class SpecializationInput(BaseModel):
    """Unknown specialization names are dropped rather than rejected"""

    specialization: str
    certified: bool = False
    certification_date: Optional[date] = None
    certification_expiry: Optional[date] = None
    notes: Optional[str] = None


class WalkerProfileUpdate(BaseModel):
    bio: Optional[str] = None
    profile_photo_url: Optional[str] = None
    emergency_contact_name: Optional[str] = None
    emergency_contact_phone: Optional[str] = None
    emergency_contact_relationship: Optional[str] = None
    years_experience: Optional[int] = Field(None, ge=0)
    specializations: Optional[List[SpecializationInput]] = Field(
        None, description="When present, replaces the whole set"
    )


class SpecializationResponse(BaseModel):
    id: UUID
    specialization: str
    display_name: str
    certified: bool
    certification_date: Optional[date] = None
    certification_expiry: Optional[date] = None
    notes: Optional[str] = None


class WalkerProfileResponse(BaseModel):
    id: UUID
    user_id: UUID
    bio: Optional[str] = None
    profile_photo_url: Optional[str] = None
    emergency_contact_name: Optional[str] = None
    emergency_contact_phone: Optional[str] = None
    emergency_contact_relationship: Optional[str] = None
    years_experience: int = 0
    specializations: List[SpecializationResponse] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class SpecializationOption(BaseModel):
    value: str
    display_name: str


# =============================================================================
# Calendar events
# =============================================================================


class CalendarEventCreate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    start_time: datetime
    end_time: datetime
    all_day: bool = False
    event_type: CalendarEventType = CalendarEventType.PERSONAL
    color: Optional[str] = None
    is_blocking: bool = True
    recurrence_rule: Optional[str] = None


class CalendarEventUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    all_day: Optional[bool] = None
    color: Optional[str] = None
    is_blocking: Optional[bool] = None


class CalendarEventResponse(BaseModel):
    id: UUID
    user_id: UUID
    title: Optional[str] = None
    description: Optional[str] = None
    start_time: datetime
    end_time: datetime
    all_day: bool
    event_type: CalendarEventType
    sync_status: CalendarSyncStatus
    external_event_id: Optional[str] = None
    recurrence_rule: Optional[str] = None
    color: Optional[str] = None
    is_blocking: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class CalendarEventListResponse(BaseModel):
    events: List[CalendarEventResponse]
    count: int


# =============================================================================
# Feedback
# =============================================================================


class FeedbackRequest(BaseModel):
    feedback_type: FeedbackType
    title: str
    description: str

    @field_validator("title")
    @classmethod
    def title_length(cls, value: str) -> str:
        value = value.strip()
        if len(value) < 5:
            raise ValueError("Title must be at least 5 characters")
        return value

    @field_validator("description")
    @classmethod
    def description_length(cls, value: str) -> str:
        value = value.strip()
        if len(value) < 20:
            raise ValueError("Description must be at least 20 characters")
        return value


class FeedbackResponse(BaseModel):
    success: bool
    issue_url: Optional[str] = None
    issue_number: Optional[int] = None
    message: str
