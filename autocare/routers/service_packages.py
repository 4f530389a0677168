"""
Service package routes.
"""
from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from autocare.auth import require_admin, require_reader
from autocare.database import get_db
from autocare.pagination import PaginationParams, get_pagination
from autocare.schemas.common import Page
from autocare.schemas.service_package import (
    ServicePackage as ServicePackageSchema,
    ServicePackageCreate,
    ServicePackageUpdate,
    StatusUpdate,
    Subscribers,
    SubscriptionRequest,
)
from autocare.schemas.user import CurrentUser
from autocare.services import service_package_service

router = APIRouter(prefix="/service-packages", tags=["service-packages"])


@router.get("/", response_model=Page[ServicePackageSchema])
async def get_service_packages(
    active: Optional[bool] = None,
    pagination: PaginationParams = Depends(get_pagination),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_reader),
):
    """
    Get service packages with pagination and an optional active filter.
    """
    return await service_package_service.list_service_packages(db, pagination, active)


@router.get("/{package_id}", response_model=ServicePackageSchema)
async def get_service_package(
    package_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_reader),
):
    """
    Get a specific service package by ID.
    """
    return await service_package_service.get_service_package(db, package_id)


@router.post("/", response_model=ServicePackageSchema, status_code=status.HTTP_201_CREATED)
async def create_service_package(
    service_package: ServicePackageCreate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
):
    """
    Create a new service package.
    """
    return await service_package_service.create_service_package(db, service_package, current_user.username)


@router.put("/{package_id}", response_model=ServicePackageSchema)
async def update_service_package(
    package_id: int,
    package_update: ServicePackageUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
):
    """
    Update a service package.
    """
    return await service_package_service.update_service_package(
        db, package_id, package_update, current_user.username
    )


@router.patch("/{package_id}/status", response_model=ServicePackageSchema)
async def update_service_package_status(
    package_id: int,
    status_update: StatusUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
):
    """
    Activate or deactivate a service package. Packages are never hard deleted.
    """
    return await service_package_service.update_service_package_status(
        db, package_id, status_update.active, current_user.username
    )


@router.post("/{package_id}/subscribe", status_code=status.HTTP_204_NO_CONTENT)
async def subscribe_customer(
    package_id: int,
    subscription: SubscriptionRequest,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
):
    """
    Subscribe a customer to a service package.
    """
    await service_package_service.subscribe(db, package_id, subscription.customer_id)
    return None


@router.delete("/{package_id}/customers/{customer_id}", status_code=status.HTTP_204_NO_CONTENT)
async def unsubscribe_customer(
    package_id: int,
    customer_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
):
    """
    Unsubscribe a customer from a service package.
    """
    await service_package_service.unsubscribe(db, package_id, customer_id)
    return None


@router.get("/{package_id}/subscribers", response_model=Subscribers)
async def get_subscribers(
    package_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_reader),
):
    """
    List the customers subscribed to a service package.
    """
    return await service_package_service.list_subscribers(db, package_id)
