"""
Vehicle routes.
"""
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from autocare.auth import require_admin, require_reader
from autocare.database import get_db
from autocare.filters import VehicleFilter
from autocare.pagination import PaginationParams, get_pagination
from autocare.schemas.common import Page
from autocare.schemas.user import CurrentUser
from autocare.schemas.vehicle import Vehicle as VehicleSchema, VehicleCreate, VehicleUpdate
from autocare.services import vehicle_service

router = APIRouter(prefix="/vehicles", tags=["vehicles"])

SortField = Literal["id", "vin", "make", "model", "year", "created_at"]


@router.get("/", response_model=Page[VehicleSchema])
async def get_vehicles(
    pagination: PaginationParams = Depends(get_pagination),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_reader),
):
    """
    Get all vehicles with pagination.
    """
    return await vehicle_service.list_vehicles(db, pagination)


@router.get("/search", response_model=Page[VehicleSchema])
async def search_vehicles(
    customer_id: Optional[int] = Query(None, gt=0),
    vin: Optional[str] = Query(None, max_length=17),
    make: Optional[str] = Query(None, max_length=50),
    model: Optional[str] = Query(None, max_length=50),
    min_year: Optional[int] = Query(None, ge=0),
    max_year: Optional[int] = Query(None, ge=0),
    customer_email: Optional[str] = Query(None, max_length=255),
    customer_name: Optional[str] = Query(None, max_length=100),
    sort_by: SortField = "id",
    sort_dir: Literal["asc", "desc"] = "asc",
    pagination: PaginationParams = Depends(get_pagination),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_reader),
):
    """
    Search vehicles. Every supplied parameter narrows the result.
    """
    vehicle_filter = VehicleFilter(
        customer_id=customer_id,
        vin=vin,
        make=make,
        model=model,
        min_year=min_year,
        max_year=max_year,
        customer_email=customer_email,
        customer_name=customer_name,
    )
    return await vehicle_service.search_vehicles(db, vehicle_filter, pagination, sort_by, sort_dir)


@router.get("/{vehicle_id}", response_model=VehicleSchema)
async def get_vehicle(
    vehicle_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_reader),
):
    """
    Get a specific vehicle by ID, owner included.
    """
    return await vehicle_service.get_vehicle(db, vehicle_id)


@router.post("/", response_model=VehicleSchema, status_code=status.HTTP_201_CREATED)
async def create_vehicle(
    vehicle: VehicleCreate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
):
    """
    Create a new vehicle for an existing customer.
    """
    return await vehicle_service.create_vehicle(db, vehicle, current_user.username)


@router.put("/{vehicle_id}", response_model=VehicleSchema)
async def update_vehicle(
    vehicle_id: int,
    vehicle_update: VehicleUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
):
    """
    Update a vehicle.
    """
    return await vehicle_service.update_vehicle(db, vehicle_id, vehicle_update, current_user.username)


@router.delete("/{vehicle_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_vehicle(
    vehicle_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
):
    """
    Delete a vehicle.
    """
    await vehicle_service.delete_vehicle(db, vehicle_id)
    return None
