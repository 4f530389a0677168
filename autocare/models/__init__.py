"""
SQLAlchemy database models.
"""
from autocare.models.customer import ContactMethod, Customer, CustomerProfile, customer_service_packages
from autocare.models.vehicle import Vehicle
from autocare.models.service_package import PackageStatus, ServicePackage
from autocare.models.user import User, UserRole

__all__ = [
    "ContactMethod", "Customer", "CustomerProfile", "customer_service_packages",
    "Vehicle",
    "PackageStatus", "ServicePackage",
    "User", "UserRole",
]
