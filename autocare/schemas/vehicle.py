"""
Pydantic schemas for Vehicle.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from autocare.schemas.customer import CustomerSummary
from autocare.validators import ModelYear, NonBlankText, Vin


class VehicleBase(BaseModel):
    """Base vehicle schema with common fields."""
    customer_id: int = Field(gt=0)
    vin: Vin
    make: NonBlankText = Field(min_length=1, max_length=50)
    model: NonBlankText = Field(min_length=1, max_length=50)
    year: ModelYear


class VehicleCreate(VehicleBase):
    """Schema for creating a vehicle."""
    pass


class VehicleUpdate(BaseModel):
    """Schema for updating a vehicle. ``version`` is checked when supplied."""
    version: Optional[int] = Field(default=None, ge=0)
    customer_id: Optional[int] = Field(default=None, gt=0)
    vin: Optional[Vin] = None
    make: Optional[NonBlankText] = Field(default=None, min_length=1, max_length=50)
    model: Optional[NonBlankText] = Field(default=None, min_length=1, max_length=50)
    year: Optional[ModelYear] = None


class Vehicle(BaseModel):
    """Schema for vehicle responses."""
    id: int
    version: int
    vin: str
    make: str
    model: str
    year: int
    customer: CustomerSummary
    created_at: datetime
    updated_at: Optional[datetime] = None
    created_by: str
    updated_by: str

    model_config = ConfigDict(from_attributes=True)
