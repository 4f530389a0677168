"""
Vehicle business logic, including the filtered search.
"""
import logging

from sqlalchemy import delete, exists, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import contains_eager

from autocare import mappers, schemas
from autocare.database import SYSTEM_AUDITOR
from autocare.exceptions import AlreadyExistsError, NotFoundError
from autocare.filters import VehicleFilter, vehicle_criteria
from autocare.locking import check_version, commit_versioned
from autocare.models import Customer, Vehicle
from autocare.pagination import PaginationParams, paginate
from autocare.services.customer_service import load_customer

logger = logging.getLogger(__name__)

VEHICLE = "Vehicle"

SORTABLE_COLUMNS = {
    "id": Vehicle.id,
    "vin": Vehicle.vin,
    "make": Vehicle.make,
    "model": Vehicle.model,
    "year": Vehicle.year,
    "created_at": Vehicle.created_at,
}


async def vin_exists(db: AsyncSession, vin: str) -> bool:
    return (await db.execute(select(exists().where(Vehicle.vin == vin)))).scalar()


def _with_owner():
    """Vehicles joined to their owner, owner and owner profile populated from one query."""
    return (
        select(Vehicle)
        .join(Vehicle.customer)
        .options(contains_eager(Vehicle.customer).selectinload(Customer.profile))
    )


def _order_by(sort_by: str, sort_dir: str):
    column = SORTABLE_COLUMNS.get(sort_by, Vehicle.id)
    primary = column.desc() if sort_dir == "desc" else column.asc()
    # Tie-break on id so pages are stable
    return (primary, Vehicle.id.asc()) if column is not Vehicle.id else (primary,)


async def load_vehicle(db: AsyncSession, vehicle_id: int) -> Vehicle:
    result = await db.execute(_with_owner().where(Vehicle.id == vehicle_id))
    vehicle = result.unique().scalar_one_or_none()
    if vehicle is None:
        raise NotFoundError(VEHICLE, vehicle_id)
    return vehicle


async def create_vehicle(
    db: AsyncSession,
    request: schemas.VehicleCreate,
    auditor: str = SYSTEM_AUDITOR,
) -> schemas.Vehicle:
    logger.debug("Creating vehicle with VIN: %s for customer ID: %s", request.vin, request.customer_id)

    if await vin_exists(db, request.vin):
        raise AlreadyExistsError(VEHICLE, "VIN", request.vin)

    owner = await load_customer(db, request.customer_id)

    vehicle = Vehicle(
        vin=request.vin,
        make=request.make,
        model=request.model,
        year=request.year,
        customer=owner,
    )
    vehicle.stamp_created(auditor)
    db.add(vehicle)
    try:
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        raise AlreadyExistsError(VEHICLE, "VIN", request.vin) from exc

    logger.info("Created vehicle with ID: %s and VIN: %s for customer ID: %s", vehicle.id, vehicle.vin, owner.id)
    return mappers.vehicle_to_response(vehicle)


async def get_vehicle(db: AsyncSession, vehicle_id: int) -> schemas.Vehicle:
    logger.debug("Fetching vehicle with ID: %s", vehicle_id)
    return mappers.vehicle_to_response(await load_vehicle(db, vehicle_id))


async def search_vehicles(
    db: AsyncSession,
    vehicle_filter: VehicleFilter,
    pagination: PaginationParams,
    sort_by: str = "id",
    sort_dir: str = "asc",
) -> schemas.Page:
    """
    One filtered, sorted page of vehicles.

    Every supplied criterion narrows the result; an empty filter lists all
    vehicles. Owners come back in the same query, so building the response
    issues no per-row loads.
    """
    logger.debug("Searching vehicles with filter: %s, pagination: %s", vehicle_filter, pagination)

    criteria = vehicle_criteria(vehicle_filter)
    stmt = _with_owner().where(criteria).order_by(*_order_by(sort_by, sort_dir))
    count_stmt = select(func.count(Vehicle.id)).select_from(Vehicle).join(Vehicle.customer).where(criteria)

    vehicles, total = await paginate(db, stmt, pagination, count_stmt=count_stmt)
    return mappers.to_page(
        [mappers.vehicle_to_response(v) for v in vehicles],
        total,
        pagination.page,
        pagination.per_page,
    )


async def list_vehicles(db: AsyncSession, pagination: PaginationParams) -> schemas.Page:
    return await search_vehicles(db, VehicleFilter(), pagination)


async def update_vehicle(
    db: AsyncSession,
    vehicle_id: int,
    request: schemas.VehicleUpdate,
    auditor: str = SYSTEM_AUDITOR,
) -> schemas.Vehicle:
    """
    Apply a partial update. ``request.version`` is checked when present; the
    version-guarded UPDATE catches concurrent writers either way.
    """
    logger.debug("Updating vehicle with ID: %s", vehicle_id)

    vehicle = await load_vehicle(db, vehicle_id)
    if request.version is not None:
        check_version(VEHICLE, vehicle_id, request.version, vehicle.version)

    data = request.model_dump(exclude_unset=True, exclude={"version"})
    data = {field: value for field, value in data.items() if value is not None}

    new_vin = data.get("vin")
    if new_vin is not None and new_vin != vehicle.vin and await vin_exists(db, new_vin):
        raise AlreadyExistsError(VEHICLE, "VIN", new_vin)

    new_owner_id = data.pop("customer_id", None)
    if new_owner_id is not None and new_owner_id != vehicle.customer_id:
        vehicle.customer = await load_customer(db, new_owner_id)

    for field, value in data.items():
        setattr(vehicle, field, value)

    vehicle.stamp_updated(auditor)
    try:
        await commit_versioned(db, VEHICLE, vehicle_id)
    except IntegrityError as exc:
        await db.rollback()
        raise AlreadyExistsError(VEHICLE, "VIN", new_vin) from exc

    logger.info("Updated vehicle with ID: %s and VIN: %s", vehicle.id, vehicle.vin)
    return mappers.vehicle_to_response(vehicle)


async def delete_vehicle(db: AsyncSession, vehicle_id: int) -> None:
    logger.debug("Deleting vehicle with ID: %s", vehicle_id)

    result = await db.execute(delete(Vehicle).where(Vehicle.id == vehicle_id))
    if result.rowcount == 0:
        raise NotFoundError(VEHICLE, vehicle_id)
    await db.commit()

    logger.info("Deleted vehicle with ID: %s", vehicle_id)
