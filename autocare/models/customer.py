"""
Customer and customer profile models for database.
"""
import enum

from sqlalchemy import Column, Date, DateTime, Enum as SQLEnum, ForeignKey, Integer, String, Table, Text
from sqlalchemy.orm import relationship

from autocare.database import AuditMixin, Base, next_version, utcnow


class ContactMethod(str, enum.Enum):
    """Preferred contact method enumeration."""
    EMAIL = "EMAIL"
    PHONE = "PHONE"
    SMS = "SMS"


customer_service_packages = Table(
    "customer_service_packages",
    Base.metadata,
    Column("customer_id", Integer, ForeignKey("customers.id", ondelete="CASCADE"), primary_key=True),
    Column("service_package_id", Integer, ForeignKey("service_packages.id", ondelete="CASCADE"), primary_key=True),
)


class Customer(AuditMixin, Base):
    """Customer database model. Owning side of the subscription relationship."""

    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, index=True)
    version = Column(Integer, nullable=False)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    phone = Column(String(20), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    # Relationships
    profile = relationship(
        "CustomerProfile",
        back_populates="customer",
        uselist=False,
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    vehicles = relationship(
        "Vehicle",
        back_populates="customer",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    service_packages = relationship(
        "ServicePackage",
        secondary=customer_service_packages,
        back_populates="subscribers",
        passive_deletes=True,
    )

    __mapper_args__ = {
        "version_id_col": version,
        "version_id_generator": next_version,
    }

    def is_subscribed_to(self, service_package) -> bool:
        return service_package in self.service_packages

    def subscribe_to(self, service_package) -> None:
        """
        Link this customer and ``service_package``.

        This and :meth:`unsubscribe_from` are the only places the
        subscription collections are mutated; ``back_populates`` mirrors the
        change onto ``service_package.subscribers``.
        """
        self.service_packages.append(service_package)

    def unsubscribe_from(self, service_package) -> None:
        self.service_packages.remove(service_package)


class CustomerProfile(Base):
    """Optional profile data owned by exactly one customer."""

    __tablename__ = "customer_profiles"

    id = Column(Integer, primary_key=True, index=True)
    customer_id = Column(
        Integer,
        ForeignKey("customers.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    address = Column(Text, nullable=True)
    date_of_birth = Column(Date, nullable=True)
    preferred_contact_method = Column(
        SQLEnum(ContactMethod, name="contact_method"),
        default=ContactMethod.EMAIL,
        nullable=False,
    )

    # Relationships
    customer = relationship("Customer", back_populates="profile")
