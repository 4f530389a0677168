"""
Authentication: password hashing, bearer tokens and the FastAPI dependencies
that enforce the role policy.

Reads are open to every authenticated role; writes need ``UserRole.ADMIN``.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional, Protocol

import bcrypt
import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from autocare.config import Settings, get_settings
from autocare.database import get_db
from autocare.exceptions import ForbiddenError, UnauthorizedError
from autocare.models.user import User, UserRole
from autocare.schemas.user import CurrentUser

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


# Passwords

def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, hashed_password: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        return False


# Credential lookup

class UserStore(Protocol):
    """Where credentials come from. Swap the implementation, not the auth code."""

    async def find_by_username(self, username: str) -> Optional[User]:
        ...

    async def validate_credentials(self, username: str, password: str) -> bool:
        ...

    async def get_role(self, username: str) -> Optional[UserRole]:
        ...


class DatabaseUserStore:
    """``UserStore`` backed by the ``users`` table."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_username(self, username: str) -> Optional[User]:
        logger.debug("Looking up user: %s", username)
        result = await self.db.execute(select(User).where(User.username == username))
        user = result.scalar_one_or_none()
        if user is None or not user.is_active:
            return None
        return user

    async def validate_credentials(self, username: str, password: str) -> bool:
        user = await self.find_by_username(username)
        return user is not None and verify_password(password, user.hashed_password)

    async def get_role(self, username: str) -> Optional[UserRole]:
        user = await self.find_by_username(username)
        return user.role if user else None


def get_user_store(db: AsyncSession = Depends(get_db)) -> UserStore:
    return DatabaseUserStore(db)


# Tokens

def create_access_token(
    username: str,
    role: UserRole,
    settings: Optional[Settings] = None,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Sign a token carrying the subject and its role."""
    settings = settings or get_settings()
    now = datetime.now(timezone.utc)
    expires = now + (expires_delta or timedelta(minutes=settings.access_token_expire_minutes))
    payload = {
        "sub": username,
        "role": role.value,
        "iat": now,
        "exp": expires,
    }
    return jwt.encode(payload, settings.secret_key, algorithm=settings.algorithm)


def decode_access_token(token: str, settings: Optional[Settings] = None) -> dict:
    """
    Verify signature and expiry and return the claims.

    Raises:
        UnauthorizedError: If the token is invalid, expired or has no subject.
    """
    settings = settings or get_settings()
    try:
        claims = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.algorithm],
            options={"require": ["exp", "sub"]},
        )
    except jwt.InvalidTokenError as exc:
        logger.debug("Rejected token: %s", exc)
        raise UnauthorizedError.invalid_token() from exc
    if not claims.get("sub"):
        raise UnauthorizedError.invalid_token()
    return claims


# Dependencies

async def get_current_active_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    store: UserStore = Depends(get_user_store),
) -> CurrentUser:
    """Resolve the bearer token to a user that still exists and is active."""
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError.missing_token()

    claims = decode_access_token(credentials.credentials)
    username = claims["sub"]
    role = await store.get_role(username)
    if role is None:
        logger.warning("Token subject %s no longer resolves to an active user", username)
        raise UnauthorizedError.invalid_token()
    return CurrentUser(username=username, role=role)


def require_roles(*allowed_roles: UserRole):
    """Dependency factory rejecting users whose role is not in ``allowed_roles``."""

    async def dependency(current_user: CurrentUser = Depends(get_current_active_user)) -> CurrentUser:
        if current_user.role not in allowed_roles:
            logger.warning("User %s with role %s denied", current_user.username, current_user.role.value)
            raise ForbiddenError("Insufficient permissions for this operation")
        return current_user

    return dependency


require_reader = require_roles(UserRole.ADMIN, UserRole.USER)
require_admin = require_roles(UserRole.ADMIN)
