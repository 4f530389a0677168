"""
Service package model for database.
"""
import enum

from sqlalchemy import Column, DateTime, Enum as SQLEnum, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship

from autocare.database import AuditMixin, Base, next_version, utcnow
from autocare.models.customer import customer_service_packages


class PackageStatus(str, enum.Enum):
    """
    Availability of a service package.

    Packages are never physically removed; an INACTIVE package keeps its
    existing subscriptions but is left out of active listings.
    """
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


class ServicePackage(AuditMixin, Base):
    """Service package database model. Two packages are equal when their names are."""

    __tablename__ = "service_packages"

    id = Column(Integer, primary_key=True, index=True)
    version = Column(Integer, nullable=False)
    name = Column(String(100), unique=True, nullable=False, index=True)
    description = Column(Text, nullable=True)
    monthly_price = Column(Numeric(10, 2), nullable=False)
    status = Column(
        SQLEnum(PackageStatus, name="package_status"),
        default=PackageStatus.ACTIVE,
        nullable=False,
    )
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    # Relationships
    subscribers = relationship(
        "Customer",
        secondary=customer_service_packages,
        back_populates="service_packages",
        passive_deletes=True,
    )

    __mapper_args__ = {
        "version_id_col": version,
        "version_id_generator": next_version,
    }

    @property
    def is_active(self) -> bool:
        return self.status == PackageStatus.ACTIVE

    def activate(self) -> None:
        self.status = PackageStatus.ACTIVE

    def deactivate(self) -> None:
        self.status = PackageStatus.INACTIVE

    def __eq__(self, other):
        if self is other:
            return True
        if not isinstance(other, ServicePackage):
            return NotImplemented
        return self.name == other.name

    def __hash__(self):
        # Follows the name, so a package renamed while held in a set or dict
        # key is lost there. Relationship collections are lists and unaffected.
        return hash(self.name)
