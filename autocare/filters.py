"""
Vehicle search criteria and the predicates built from them.

Each builder maps one optional criterion onto one SQL predicate, or onto
``true()`` when the criterion is absent, so the composed query is always the
plain conjunction of whatever was supplied.
"""
from dataclasses import dataclass, fields
from typing import Optional

from sqlalchemy import ColumnElement, and_, func, or_, true

from autocare.models import Customer, Vehicle


@dataclass(frozen=True)
class VehicleFilter:
    """All criteria are optional; an empty filter matches every vehicle."""
    customer_id: Optional[int] = None
    vin: Optional[str] = None
    make: Optional[str] = None
    model: Optional[str] = None
    min_year: Optional[int] = None
    max_year: Optional[int] = None
    customer_email: Optional[str] = None
    customer_name: Optional[str] = None

    @classmethod
    def for_customer(cls, customer_id: int) -> "VehicleFilter":
        return cls(customer_id=customer_id)

    def is_empty(self) -> bool:
        return all(_blank(getattr(self, f.name)) for f in fields(self))


def _blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def by_customer_id(customer_id: Optional[int]) -> ColumnElement[bool]:
    if customer_id is None:
        return true()
    return Vehicle.customer_id == customer_id


def by_vin(vin: Optional[str]) -> ColumnElement[bool]:
    """Exact VIN match, ignoring case and surrounding whitespace."""
    if _blank(vin):
        return true()
    return func.upper(Vehicle.vin) == vin.strip().upper()


def by_make(make: Optional[str]) -> ColumnElement[bool]:
    if _blank(make):
        return true()
    return Vehicle.make.icontains(make.strip(), autoescape=True)


def by_model(model: Optional[str]) -> ColumnElement[bool]:
    if _blank(model):
        return true()
    return Vehicle.model.icontains(model.strip(), autoescape=True)


def by_year_range(min_year: Optional[int], max_year: Optional[int]) -> ColumnElement[bool]:
    if min_year is None and max_year is None:
        return true()
    if min_year is not None and max_year is not None:
        return Vehicle.year.between(min_year, max_year)
    if min_year is not None:
        return Vehicle.year >= min_year
    return Vehicle.year <= max_year


def by_customer_email(customer_email: Optional[str]) -> ColumnElement[bool]:
    """Substring of the owner's email. Requires ``Vehicle.customer`` to be joined."""
    if _blank(customer_email):
        return true()
    return Customer.email.icontains(customer_email.strip(), autoescape=True)


def by_customer_name(customer_name: Optional[str]) -> ColumnElement[bool]:
    """Substring of the owner's first or last name. Requires the customer join."""
    if _blank(customer_name):
        return true()
    term = customer_name.strip()
    return or_(
        Customer.first_name.icontains(term, autoescape=True),
        Customer.last_name.icontains(term, autoescape=True),
    )


def vehicle_predicates(vehicle_filter: VehicleFilter) -> list[ColumnElement[bool]]:
    return [
        by_customer_id(vehicle_filter.customer_id),
        by_vin(vehicle_filter.vin),
        by_make(vehicle_filter.make),
        by_model(vehicle_filter.model),
        by_year_range(vehicle_filter.min_year, vehicle_filter.max_year),
        by_customer_email(vehicle_filter.customer_email),
        by_customer_name(vehicle_filter.customer_name),
    ]


def vehicle_criteria(vehicle_filter: VehicleFilter) -> ColumnElement[bool]:
    """AND of every predicate; absent criteria contribute ``true()``."""
    return and_(*vehicle_predicates(vehicle_filter))
