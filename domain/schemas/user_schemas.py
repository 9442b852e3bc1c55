from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from uuid import UUID


class UserResponse(BaseModel):
    """User as seen by other members of the organization"""

    id: UUID
    organization_id: UUID
    email: str
    first_name: str
    last_name: str
    role: str
    phone: Optional[str] = None
    timezone: Optional[str] = None
    created_at: Optional[datetime] = None


class UserUpdateRequest(BaseModel):
    first_name: Optional[str] = Field(None, min_length=1)
    last_name: Optional[str] = Field(None, min_length=1)
    phone: Optional[str] = None
    timezone: Optional[str] = Field(None, description="IANA zone, e.g. America/Denver")


class WalkerCreateRequest(BaseModel):
    email: str
    password: str
    first_name: str
    last_name: str
    phone: Optional[str] = None
