"""
Service package business logic: CRUD, soft delete and subscriptions.
"""
import logging
from typing import Optional

from sqlalchemy import exists, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from autocare import mappers, schemas
from autocare.database import SYSTEM_AUDITOR
from autocare.exceptions import AlreadyExistsError, BadRequestError, NotFoundError
from autocare.locking import check_version, commit_versioned
from autocare.models import Customer, PackageStatus, ServicePackage
from autocare.pagination import PaginationParams, paginate

logger = logging.getLogger(__name__)

SERVICE_PACKAGE = "Service package"
CUSTOMER = "Customer"


async def name_exists(db: AsyncSession, name: str) -> bool:
    """Inactive packages count too: names stay reserved after a soft delete."""
    return (await db.execute(select(exists().where(ServicePackage.name == name)))).scalar()


def name_taken_message(name: str) -> str:
    return f"Service package with name '{name}' already exists"


async def load_service_package(db: AsyncSession, package_id: int) -> ServicePackage:
    """Load a package with its subscribers, or raise ``NotFoundError``."""
    result = await db.execute(
        select(ServicePackage)
        .options(selectinload(ServicePackage.subscribers))
        .where(ServicePackage.id == package_id)
    )
    service_package = result.scalar_one_or_none()
    if service_package is None:
        raise NotFoundError(SERVICE_PACKAGE, package_id)
    return service_package


async def load_customer_with_packages(db: AsyncSession, customer_id: int) -> Customer:
    result = await db.execute(
        select(Customer).options(selectinload(Customer.service_packages)).where(Customer.id == customer_id)
    )
    customer = result.scalar_one_or_none()
    if customer is None:
        raise NotFoundError(CUSTOMER, customer_id)
    return customer


async def create_service_package(
    db: AsyncSession,
    request: schemas.ServicePackageCreate,
    auditor: str = SYSTEM_AUDITOR,
) -> schemas.ServicePackage:
    logger.debug("Creating service package with name: %s", request.name)

    if await name_exists(db, request.name):
        raise AlreadyExistsError(SERVICE_PACKAGE, "name", request.name)

    service_package = ServicePackage(
        name=request.name,
        description=request.description,
        monthly_price=request.monthly_price,
        status=PackageStatus.ACTIVE,
        subscribers=[],
    )
    service_package.stamp_created(auditor)
    db.add(service_package)
    try:
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        raise AlreadyExistsError(SERVICE_PACKAGE, "name", request.name) from exc

    logger.info("Created service package with ID: %s and name: %s", service_package.id, service_package.name)
    return mappers.service_package_to_response(service_package)


async def get_service_package(db: AsyncSession, package_id: int) -> schemas.ServicePackage:
    logger.debug("Fetching service package with ID: %s", package_id)
    return mappers.service_package_to_response(await load_service_package(db, package_id))


async def list_service_packages(
    db: AsyncSession,
    pagination: PaginationParams,
    active: Optional[bool] = None,
) -> schemas.Page:
    """
    List packages. ``active=True`` keeps ACTIVE ones, ``False`` INACTIVE ones,
    ``None`` returns both.
    """
    logger.debug("Fetching service packages with pagination: %s, active filter: %s", pagination, active)

    stmt = select(ServicePackage).options(selectinload(ServicePackage.subscribers))
    if active is not None:
        status = PackageStatus.ACTIVE if active else PackageStatus.INACTIVE
        stmt = stmt.where(ServicePackage.status == status)
    stmt = stmt.order_by(ServicePackage.id)

    packages, total = await paginate(db, stmt, pagination)
    return mappers.to_page(
        [mappers.service_package_to_response(p) for p in packages],
        total,
        pagination.page,
        pagination.per_page,
    )


async def update_service_package(
    db: AsyncSession,
    package_id: int,
    request: schemas.ServicePackageUpdate,
    auditor: str = SYSTEM_AUDITOR,
) -> schemas.ServicePackage:
    """
    Apply a partial update. ``request.version`` is checked when present; the
    version-guarded UPDATE catches concurrent writers either way.
    """
    logger.debug("Updating service package with ID: %s", package_id)

    service_package = await load_service_package(db, package_id)
    if request.version is not None:
        check_version(SERVICE_PACKAGE, package_id, request.version, service_package.version)

    data = request.model_dump(exclude_unset=True, exclude={"version"})

    new_name = data.get("name")
    if new_name is not None and new_name != service_package.name and await name_exists(db, new_name):
        raise BadRequestError(name_taken_message(new_name))

    for field, value in data.items():
        if value is not None or field == "description":
            setattr(service_package, field, value)

    service_package.stamp_updated(auditor)
    try:
        await commit_versioned(db, SERVICE_PACKAGE, package_id)
    except IntegrityError as exc:
        await db.rollback()
        raise BadRequestError(name_taken_message(new_name)) from exc

    logger.info("Updated service package with ID: %s and name: %s", service_package.id, service_package.name)
    return mappers.service_package_to_response(service_package)


async def update_service_package_status(
    db: AsyncSession,
    package_id: int,
    active: bool,
    auditor: str = SYSTEM_AUDITOR,
) -> schemas.ServicePackage:
    """Activate or deactivate (soft delete) a package. Same state is a no-op."""
    logger.debug("Updating service package %s status to active=%s", package_id, active)

    service_package = await load_service_package(db, package_id)
    if service_package.is_active == active:
        logger.warning("Service package %s is already %s", package_id, service_package.status.value)
        return mappers.service_package_to_response(service_package)

    if active:
        service_package.activate()
    else:
        service_package.deactivate()
    service_package.stamp_updated(auditor)
    await commit_versioned(db, SERVICE_PACKAGE, package_id)

    logger.info("Service package %s is now %s", package_id, service_package.status.value)
    return mappers.service_package_to_response(service_package)


async def subscribe(db: AsyncSession, package_id: int, customer_id: int) -> None:
    """
    Subscribe ``customer_id`` to ``package_id``.

    Raises:
        NotFoundError: Either side does not exist.
        BadRequestError: Already subscribed, or the package is inactive.
    """
    logger.debug("Subscribing customer %s to service package %s", customer_id, package_id)

    customer = await load_customer_with_packages(db, customer_id)
    service_package = await load_service_package(db, package_id)

    if customer.is_subscribed_to(service_package):
        raise BadRequestError("Customer is already subscribed to this service package")
    if not service_package.is_active:
        raise BadRequestError("Service package is not active")

    customer.subscribe_to(service_package)
    await db.commit()

    logger.info("Successfully subscribed customer %s to service package %s", customer_id, package_id)


async def unsubscribe(db: AsyncSession, package_id: int, customer_id: int) -> None:
    logger.debug("Unsubscribing customer %s from service package %s", customer_id, package_id)

    customer = await load_customer_with_packages(db, customer_id)
    service_package = await load_service_package(db, package_id)

    if not customer.is_subscribed_to(service_package):
        raise BadRequestError("Customer is not subscribed to this service package")

    customer.unsubscribe_from(service_package)
    await db.commit()

    logger.info("Successfully unsubscribed customer %s from service package %s", customer_id, package_id)


async def list_subscribers(db: AsyncSession, package_id: int) -> schemas.Subscribers:
    logger.debug("Fetching subscribers for service package %s", package_id)

    service_package = await load_service_package(db, package_id)
    subscribers = sorted(service_package.subscribers, key=lambda c: c.id)

    logger.debug("Found %d subscribers for service package %s", len(subscribers), package_id)
    return mappers.subscribers_response(subscribers)
