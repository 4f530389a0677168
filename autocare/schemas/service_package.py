"""
Pydantic schemas for ServicePackage and subscriptions.
"""
from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from autocare.models.service_package import PackageStatus
from autocare.validators import NonBlankText, SafeText


class ServicePackageBase(BaseModel):
    """Base service package schema with common fields."""
    name: NonBlankText = Field(min_length=1, max_length=100)
    description: Optional[SafeText] = None
    monthly_price: Decimal = Field(gt=Decimal("0"), max_digits=10, decimal_places=2)


class ServicePackageCreate(ServicePackageBase):
    """Schema for creating a service package. New packages start ACTIVE."""
    pass


class ServicePackageUpdate(BaseModel):
    """Schema for updating a service package. ``version`` is checked when supplied."""
    version: Optional[int] = Field(default=None, ge=0)
    name: Optional[NonBlankText] = Field(default=None, min_length=1, max_length=100)
    description: Optional[SafeText] = None
    monthly_price: Optional[Decimal] = Field(default=None, gt=Decimal("0"), max_digits=10, decimal_places=2)


class ServicePackage(BaseModel):
    """Schema for service package responses."""
    id: int
    version: int
    name: str
    description: Optional[str] = None
    monthly_price: Decimal
    status: PackageStatus
    active: bool
    subscriber_count: int
    created_at: datetime
    updated_at: Optional[datetime] = None
    created_by: str
    updated_by: str

    model_config = ConfigDict(from_attributes=True)


class StatusUpdate(BaseModel):
    """Schema for activating or deactivating a package."""
    active: bool


class SubscriptionRequest(BaseModel):
    """Schema for subscribing a customer to a package."""
    customer_id: int = Field(gt=0)


class Subscriber(BaseModel):
    id: int
    name: str
    email: str


class Subscribers(BaseModel):
    """Schema for the subscriber listing of one package."""
    total_count: int
    subscribers: list[Subscriber]
