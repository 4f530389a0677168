"""
Pydantic schemas for request/response validation.
"""
from autocare.schemas.common import ErrorResponse, Page, ValidationErrorDetail
from autocare.schemas.customer import Customer, CustomerCreate, CustomerSummary, CustomerUpdate
from autocare.schemas.vehicle import Vehicle, VehicleCreate, VehicleUpdate
from autocare.schemas.service_package import (
    ServicePackage, ServicePackageCreate, ServicePackageUpdate,
    StatusUpdate, Subscriber, Subscribers, SubscriptionRequest,
)
from autocare.schemas.user import CurrentUser, LoginRequest, Token

__all__ = [
    "ErrorResponse", "Page", "ValidationErrorDetail",
    "Customer", "CustomerCreate", "CustomerSummary", "CustomerUpdate",
    "Vehicle", "VehicleCreate", "VehicleUpdate",
    "ServicePackage", "ServicePackageCreate", "ServicePackageUpdate",
    "StatusUpdate", "Subscriber", "Subscribers", "SubscriptionRequest",
    "CurrentUser", "LoginRequest", "Token",
]
