"""
User model for database.
"""
from sqlalchemy import Boolean, Column, DateTime, Enum as SQLEnum, Integer, String
from autocare.database import Base, utcnow
import enum


class UserRole(str, enum.Enum):
    """User role enumeration. ADMIN may write, USER may only read."""
    ADMIN = "ADMIN"
    USER = "USER"


class User(Base):
    """User database model."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(50), unique=True, nullable=False, index=True)
    hashed_password = Column(String, nullable=False)
    role = Column(SQLEnum(UserRole, name="user_role"), default=UserRole.USER, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)
