from pydantic import BaseModel, Field
from typing import Optional
from datetime import date, datetime
from decimal import Decimal
from uuid import UUID


class ServiceCreate(BaseModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    duration_minutes: int = Field(..., gt=0, le=24 * 60)
    base_price_cents: int = Field(..., ge=0)


class ServiceUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    duration_minutes: Optional[int] = Field(None, gt=0, le=24 * 60)
    base_price_cents: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = None


class ServiceResponse(BaseModel):
    id: UUID
    name: str
    description: Optional[str] = None
    duration_minutes: int
    base_price_cents: int
    price_display: str
    is_active: bool


class LocationCreate(BaseModel):
    name: str = Field(..., min_length=1)
    address: str
    city: str
    state: str
    zip_code: str
    latitude: float
    longitude: float
    notes: Optional[str] = None
    is_default: Optional[bool] = None


class LocationUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    notes: Optional[str] = None


class LocationResponse(BaseModel):
    id: UUID
    user_id: UUID
    name: str
    address: str
    city: str
    state: str
    zip_code: str
    latitude: float
    longitude: float
    notes: Optional[str] = None
    is_default: bool

    model_config = {"from_attributes": True}


class PetCreate(BaseModel):
    name: str = Field(..., min_length=1)
    species: str = "dog"
    breed: Optional[str] = None
    date_of_birth: Optional[date] = None
    weight_lbs: Optional[Decimal] = Field(None, gt=0)
    gender: Optional[str] = None
    color: Optional[str] = None
    microchip_id: Optional[str] = None
    is_spayed_neutered: Optional[bool] = None
    vaccination_status: Optional[str] = None
    temperament: Optional[str] = None
    special_needs: Optional[str] = None
    emergency_contact_name: Optional[str] = None
    emergency_contact_phone: Optional[str] = None
    vet_name: Optional[str] = None
    vet_phone: Optional[str] = None
    notes: Optional[str] = None


class PetUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    species: Optional[str] = None
    breed: Optional[str] = None
    date_of_birth: Optional[date] = None
    weight_lbs: Optional[Decimal] = Field(None, gt=0)
    gender: Optional[str] = None
    color: Optional[str] = None
    microchip_id: Optional[str] = None
    is_spayed_neutered: Optional[bool] = None
    vaccination_status: Optional[str] = None
    temperament: Optional[str] = None
    special_needs: Optional[str] = None
    emergency_contact_name: Optional[str] = None
    emergency_contact_phone: Optional[str] = None
    vet_name: Optional[str] = None
    vet_phone: Optional[str] = None
    notes: Optional[str] = None


class PetResponse(BaseModel):
    id: UUID
    owner_id: UUID
    name: str
    species: str
    breed: Optional[str] = None
    date_of_birth: Optional[date] = None
    weight_lbs: Optional[Decimal] = None
    gender: Optional[str] = None
    color: Optional[str] = None
    microchip_id: Optional[str] = None
    is_spayed_neutered: Optional[bool] = None
    vaccination_status: Optional[str] = None
    temperament: Optional[str] = None
    special_needs: Optional[str] = None
    emergency_contact_name: Optional[str] = None
    emergency_contact_phone: Optional[str] = None
    vet_name: Optional[str] = None
    vet_phone: Optional[str] = None
    notes: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
