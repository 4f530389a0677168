"""
Customer business logic: create, read, versioned update and delete.

Every function takes the request's session. Writes commit before returning;
on any error the caller's session is rolled back, so no partial change is
visible.
"""
import logging

from sqlalchemy import delete, exists, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from autocare import mappers, schemas
from autocare.database import SYSTEM_AUDITOR
from autocare.exceptions import AlreadyExistsError, NotFoundError
from autocare.locking import check_version, commit_versioned
from autocare.models import Customer
from autocare.pagination import PaginationParams, paginate

logger = logging.getLogger(__name__)

CUSTOMER = "Customer"


async def email_exists(db: AsyncSession, email: str) -> bool:
    return (await db.execute(select(exists().where(Customer.email == email)))).scalar()


async def customer_exists(db: AsyncSession, customer_id: int) -> bool:
    return (await db.execute(select(exists().where(Customer.id == customer_id)))).scalar()


async def load_customer(db: AsyncSession, customer_id: int) -> Customer:
    """Load a customer with its profile, or raise ``NotFoundError``."""
    result = await db.execute(
        select(Customer).options(selectinload(Customer.profile)).where(Customer.id == customer_id)
    )
    customer = result.scalar_one_or_none()
    if customer is None:
        raise NotFoundError(CUSTOMER, customer_id)
    return customer


async def create_customer(
    db: AsyncSession,
    request: schemas.CustomerCreate,
    auditor: str = SYSTEM_AUDITOR,
) -> schemas.Customer:
    logger.debug("Creating customer with email: %s", request.email)

    if await email_exists(db, request.email):
        raise AlreadyExistsError(CUSTOMER, "email", request.email)

    customer = mappers.customer_from_create(request)
    customer.stamp_created(auditor)
    if customer.profile is None:
        customer.profile = None  # mark loaded so the response never lazy-loads
    db.add(customer)
    try:
        await db.commit()
    except IntegrityError as exc:
        # Lost a race with another insert of the same email
        await db.rollback()
        raise AlreadyExistsError(CUSTOMER, "email", request.email) from exc

    logger.info("Created customer with ID: %s and email: %s", customer.id, customer.email)
    return mappers.customer_to_response(customer)


async def get_customer(db: AsyncSession, customer_id: int) -> schemas.Customer:
    logger.debug("Fetching customer with ID: %s", customer_id)
    return mappers.customer_to_response(await load_customer(db, customer_id))


async def list_customers(db: AsyncSession, pagination: PaginationParams) -> schemas.Page:
    logger.debug("Fetching customers with pagination: %s", pagination)
    stmt = select(Customer).options(selectinload(Customer.profile)).order_by(Customer.id)
    customers, total = await paginate(db, stmt, pagination)
    return mappers.to_page(
        [mappers.customer_to_response(c) for c in customers],
        total,
        pagination.page,
        pagination.per_page,
    )


async def update_customer(
    db: AsyncSession,
    customer_id: int,
    request: schemas.CustomerUpdate,
    auditor: str = SYSTEM_AUDITOR,
) -> schemas.Customer:
    """
    Apply a partial update guarded by the caller's expected version.

    Raises:
        NotFoundError: No such customer.
        BadRequestError: ``request.version`` is missing.
        OptimisticLockError: The version is stale, checked here or by the
            version-guarded UPDATE.
        AlreadyExistsError: The new email belongs to another customer.
    """
    logger.debug("Updating customer with ID: %s with version: %s", customer_id, request.version)

    customer = await load_customer(db, customer_id)
    check_version(CUSTOMER, customer_id, request.version, customer.version)

    data = request.model_dump(exclude_unset=True, exclude={"version", "clear_profile"})

    new_email = data.get("email")
    if new_email is not None and new_email != customer.email and await email_exists(db, new_email):
        raise AlreadyExistsError(CUSTOMER, "email", new_email)

    for field in ("first_name", "last_name", "email", "phone"):
        if field in data and (data[field] is not None or field == "phone"):
            setattr(customer, field, data[field])

    if request.clear_profile:
        # delete-orphan cascade removes the row
        customer.profile = None
    elif mappers.has_profile_data(data):
        if customer.profile is not None:
            mappers.apply_profile_data(customer.profile, data)
        else:
            customer.profile = mappers.profile_from_data(data)

    # Always touch the row so the version advances even for profile-only changes
    customer.stamp_updated(auditor)
    try:
        await commit_versioned(db, CUSTOMER, customer_id)
    except IntegrityError as exc:
        await db.rollback()
        raise AlreadyExistsError(CUSTOMER, "email", new_email) from exc

    logger.info("Updated customer with ID: %s to version: %s", customer.id, customer.version)
    return mappers.customer_to_response(customer)


async def delete_customer(db: AsyncSession, customer_id: int) -> None:
    """Delete by id. Profile, vehicles and subscriptions go with it."""
    logger.debug("Deleting customer with ID: %s", customer_id)

    result = await db.execute(delete(Customer).where(Customer.id == customer_id))
    if result.rowcount == 0:
        raise NotFoundError(CUSTOMER, customer_id)
    await db.commit()

    logger.info("Deleted customer with ID: %s", customer_id)
