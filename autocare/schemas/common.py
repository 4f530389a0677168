"""
Pydantic schemas shared by every resource: pages and error bodies.
"""
from datetime import datetime, timezone
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class Page(BaseModel, Generic[T]):
    """Standard paginated response structure."""
    items: list[T]
    total: int
    page: int
    per_page: int
    pages: int


class ValidationErrorDetail(BaseModel):
    """One rejected field of a request payload."""
    field: Optional[str] = None
    rejected_value: Any = None
    message: str


class ErrorResponse(BaseModel):
    """Body of every error response."""
    error: str
    message: str
    path: str
    status: int
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    correlation_id: Optional[str] = None
    validation_errors: Optional[list[ValidationErrorDetail]] = None
