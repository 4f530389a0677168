"""
Pydantic schemas for authentication.
"""
from pydantic import BaseModel, Field

from autocare.models.user import UserRole


class LoginRequest(BaseModel):
    """Schema for login request."""
    username: str = Field(min_length=1, max_length=50)
    password: str = Field(min_length=1, max_length=128)


class Token(BaseModel):
    """Schema for a successful login."""
    access_token: str
    token_type: str = "bearer"
    username: str
    role: UserRole
    expires_in: int


class CurrentUser(BaseModel):
    """Identity resolved from a validated bearer token."""
    username: str
    role: UserRole
