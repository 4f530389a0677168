"""
Pydantic schemas for Customer.
"""
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from autocare.models.customer import ContactMethod
from autocare.validators import NonBlankText, PastOrPresentDate, SafeText

PHONE_PATTERN = r"^[+]?[0-9\s().-]+$"


class CustomerBase(BaseModel):
    """Base customer schema with common fields."""
    first_name: NonBlankText = Field(min_length=1, max_length=100)
    last_name: NonBlankText = Field(min_length=1, max_length=100)
    email: EmailStr = Field(max_length=255)
    phone: Optional[str] = Field(default=None, max_length=20, pattern=PHONE_PATTERN)

    # Profile fields
    address: Optional[SafeText] = None
    date_of_birth: Optional[PastOrPresentDate] = None
    preferred_contact_method: Optional[ContactMethod] = None


class CustomerCreate(CustomerBase):
    """Schema for creating a customer. The version is always assigned by the server."""
    pass


class CustomerUpdate(BaseModel):
    """
    Schema for updating a customer.

    Only the fields present in the payload are changed. ``version`` must echo
    the value from the last read; ``clear_profile`` removes the profile.
    """
    version: Optional[int] = Field(default=None, ge=0)
    first_name: Optional[NonBlankText] = Field(default=None, min_length=1, max_length=100)
    last_name: Optional[NonBlankText] = Field(default=None, min_length=1, max_length=100)
    email: Optional[EmailStr] = Field(default=None, max_length=255)
    phone: Optional[str] = Field(default=None, max_length=20, pattern=PHONE_PATTERN)
    address: Optional[SafeText] = None
    date_of_birth: Optional[PastOrPresentDate] = None
    preferred_contact_method: Optional[ContactMethod] = None
    clear_profile: bool = False


class Customer(BaseModel):
    """Schema for customer responses, profile fields flattened in."""
    id: int
    version: int
    first_name: str
    last_name: str
    email: str
    phone: Optional[str] = None
    address: Optional[str] = None
    date_of_birth: Optional[date] = None
    preferred_contact_method: Optional[ContactMethod] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    created_by: str
    updated_by: str

    model_config = ConfigDict(from_attributes=True)


class CustomerSummary(BaseModel):
    """Owner details embedded in vehicle responses."""
    id: int
    name: str
    email: str
