"""
Plain functions turning ORM rows into response schemas and request schemas
into ORM rows.

Relationships a mapper reads must already be loaded by the caller.
"""
from typing import Optional

from autocare import models, schemas

UNKNOWN_NAME = "Unknown"
PROFILE_FIELDS = ("address", "date_of_birth", "preferred_contact_method")


def full_name(first_name: Optional[str], last_name: Optional[str]) -> str:
    """``"first last"``, whichever half exists, or ``"Unknown"``."""
    first = first_name.strip() if first_name else ""
    last = last_name.strip() if last_name else ""
    if first and last:
        return f"{first} {last}"
    return first or last or UNKNOWN_NAME


# Customers

def has_profile_data(data: dict) -> bool:
    return any(data.get(field) is not None for field in PROFILE_FIELDS)


def customer_from_create(request: schemas.CustomerCreate) -> models.Customer:
    data = request.model_dump()
    customer = models.Customer(
        first_name=data["first_name"],
        last_name=data["last_name"],
        email=data["email"],
        phone=data["phone"],
    )
    if has_profile_data(data):
        customer.profile = profile_from_data(data)
    return customer


def profile_from_data(data: dict) -> models.CustomerProfile:
    return models.CustomerProfile(
        address=data.get("address"),
        date_of_birth=data.get("date_of_birth"),
        preferred_contact_method=data.get("preferred_contact_method") or models.ContactMethod.EMAIL,
    )


def apply_profile_data(profile: models.CustomerProfile, data: dict) -> None:
    for field in PROFILE_FIELDS:
        if data.get(field) is not None:
            setattr(profile, field, data[field])


def customer_to_response(customer: models.Customer) -> schemas.Customer:
    profile = customer.profile
    return schemas.Customer(
        id=customer.id,
        version=customer.version,
        first_name=customer.first_name,
        last_name=customer.last_name,
        email=customer.email,
        phone=customer.phone,
        address=profile.address if profile else None,
        date_of_birth=profile.date_of_birth if profile else None,
        preferred_contact_method=profile.preferred_contact_method if profile else None,
        created_at=customer.created_at,
        updated_at=customer.updated_at,
        created_by=customer.created_by,
        updated_by=customer.updated_by,
    )


def customer_to_summary(customer: models.Customer) -> schemas.CustomerSummary:
    return schemas.CustomerSummary(
        id=customer.id,
        name=full_name(customer.first_name, customer.last_name),
        email=customer.email,
    )


# Vehicles

def vehicle_to_response(vehicle: models.Vehicle) -> schemas.Vehicle:
    return schemas.Vehicle(
        id=vehicle.id,
        version=vehicle.version,
        vin=vehicle.vin,
        make=vehicle.make,
        model=vehicle.model,
        year=vehicle.year,
        customer=customer_to_summary(vehicle.customer),
        created_at=vehicle.created_at,
        updated_at=vehicle.updated_at,
        created_by=vehicle.created_by,
        updated_by=vehicle.updated_by,
    )


# Service packages

def service_package_to_response(service_package: models.ServicePackage) -> schemas.ServicePackage:
    return schemas.ServicePackage(
        id=service_package.id,
        version=service_package.version,
        name=service_package.name,
        description=service_package.description,
        monthly_price=service_package.monthly_price,
        status=service_package.status,
        active=service_package.is_active,
        subscriber_count=len(service_package.subscribers),
        created_at=service_package.created_at,
        updated_at=service_package.updated_at,
        created_by=service_package.created_by,
        updated_by=service_package.updated_by,
    )


def subscriber_from_customer(customer: models.Customer) -> schemas.Subscriber:
    return schemas.Subscriber(
        id=customer.id,
        name=full_name(customer.first_name, customer.last_name),
        email=customer.email,
    )


def subscribers_response(customers) -> schemas.Subscribers:
    subscribers = [subscriber_from_customer(customer) for customer in customers]
    return schemas.Subscribers(total_count=len(subscribers), subscribers=subscribers)


def to_page(items: list, total: int, page: int, per_page: int) -> schemas.Page:
    pages = (total + per_page - 1) // per_page if per_page > 0 else 0
    return schemas.Page(items=items, total=total, page=page, per_page=per_page, pages=pages)
