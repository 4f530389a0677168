"""
Optimistic locking.

Two independent guards protect a versioned row:

* :func:`check_version` rejects a request whose expected version is already
  stale, before anything is written.
* The ``version_id_col`` mapping on each model turns every UPDATE into
  ``... WHERE id = :id AND version = :expected``. A writer that loses a race
  between its read and its write gets a ``StaleDataError`` from the flush,
  which :func:`commit_versioned` translates into the same error.
"""
import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from autocare.exceptions import BadRequestError, OptimisticLockError, VERSION_IS_REQUIRED

logger = logging.getLogger(__name__)


def check_version(entity: str, entity_id, expected: Optional[int], current: int) -> None:
    """Raise unless ``expected`` matches the stored ``current`` version."""
    if expected is None:
        raise BadRequestError(VERSION_IS_REQUIRED)
    if expected != current:
        logger.warning(
            "Optimistic locking conflict for %s ID: %s. Expected version: %s, but current version: %s",
            entity, entity_id, expected, current,
        )
        raise OptimisticLockError(entity, entity_id)


async def commit_versioned(db: AsyncSession, entity: str, entity_id) -> None:
    """Commit, mapping a failed version-guarded UPDATE onto ``OptimisticLockError``."""
    try:
        await db.commit()
    except StaleDataError as exc:
        await db.rollback()
        logger.warning("Optimistic locking failure during save for %s ID: %s (%s)", entity, entity_id, exc)
        raise OptimisticLockError(entity, entity_id) from exc
