"""
Login and demo-user seeding.
"""
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from autocare import schemas
from autocare.auth import UserStore, create_access_token, hash_password
from autocare.config import Settings, get_settings
from autocare.exceptions import UnauthorizedError
from autocare.models.user import User, UserRole

logger = logging.getLogger(__name__)

DEMO_USERS = (
    ("admin", "admin123", UserRole.ADMIN),
    ("user", "user123", UserRole.USER),
)


async def authenticate(
    store: UserStore,
    request: schemas.LoginRequest,
    settings: Settings | None = None,
) -> schemas.Token:
    """Check credentials and issue a bearer token."""
    settings = settings or get_settings()
    logger.debug("Authenticating user: %s", request.username)

    if not await store.validate_credentials(request.username, request.password):
        logger.warning("Failed authentication attempt for user: %s", request.username)
        raise UnauthorizedError.invalid_credentials()

    role = await store.get_role(request.username)
    if role is None:
        raise UnauthorizedError.invalid_credentials()

    token = create_access_token(request.username, role, settings=settings)
    logger.info("Successfully authenticated user: %s with role: %s", request.username, role.value)

    return schemas.Token(
        access_token=token,
        username=request.username,
        role=role,
        expires_in=settings.access_token_expire_minutes * 60,
    )


async def seed_demo_users(db: AsyncSession) -> int:
    """Insert the demo accounts that are missing. Returns how many were added."""
    existing = set((await db.execute(select(User.username))).scalars().all())
    added = 0
    for username, password, role in DEMO_USERS:
        if username in existing:
            continue
        db.add(User(username=username, hashed_password=hash_password(password), role=role, is_active=True))
        added += 1
    if added:
        await db.commit()
        logger.info("Seeded %d demo user(s)", added)
    return added
