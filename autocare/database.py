"""
Database engine, session factory and declarative base.
"""
import logging
from datetime import datetime, timezone
from typing import AsyncGenerator

from sqlalchemy import Column, DateTime, String, event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from autocare.config import get_settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    type_annotation_map = {
        datetime: DateTime(timezone=True),
    }


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def next_version(current: int | None) -> int:
    """Row version generator: 0 on insert, +1 on every update."""
    return 0 if current is None else current + 1


SYSTEM_AUDITOR = "SYSTEM"


class AuditMixin:
    """
    Who created and last changed a row.

    The write services stamp these from the authenticated user; writes made
    outside a request are attributed to ``SYSTEM_AUDITOR``.
    """
    created_by = Column(String(100), default=SYSTEM_AUDITOR, nullable=False)
    updated_by = Column(String(100), default=SYSTEM_AUDITOR, nullable=False)

    def stamp_created(self, auditor: str) -> None:
        self.created_by = auditor
        self.updated_by = auditor

    def stamp_updated(self, auditor: str) -> None:
        self.updated_by = auditor
        self.updated_at = utcnow()


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # ON DELETE CASCADE is a no-op in SQLite unless this pragma is on.
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(database_url: str, **kwargs) -> AsyncEngine:
    """Create an async engine, enabling foreign keys on SQLite."""
    engine = create_async_engine(database_url, pool_pre_ping=True, **kwargs)
    if engine.dialect.name == "sqlite":
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def build_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False, autoflush=False)


engine = build_engine(get_settings().database_url)
SessionLocal = build_sessionmaker(engine)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Yield one session per request.

    Anything left uncommitted when the request fails is rolled back, so a
    write either fully applies or leaves no trace.
    """
    async with SessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


async def init_db(bind: AsyncEngine | None = None) -> None:
    """Create all tables that do not exist yet."""
    # Register every model on Base.metadata before create_all
    import autocare.models  # noqa: F401

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database schema ready")
