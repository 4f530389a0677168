"""
Customer routes.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from autocare.auth import require_admin, require_reader
from autocare.database import get_db
from autocare.pagination import PaginationParams, get_pagination
from autocare.schemas.common import Page
from autocare.schemas.customer import Customer as CustomerSchema, CustomerCreate, CustomerUpdate
from autocare.schemas.user import CurrentUser
from autocare.services import customer_service

router = APIRouter(prefix="/customers", tags=["customers"])


@router.get("/", response_model=Page[CustomerSchema])
async def get_customers(
    pagination: PaginationParams = Depends(get_pagination),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_reader),
):
    """
    Get all customers with pagination.
    """
    return await customer_service.list_customers(db, pagination)


@router.get("/{customer_id}", response_model=CustomerSchema)
async def get_customer(
    customer_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_reader),
):
    """
    Get a specific customer by ID, profile included.
    """
    return await customer_service.get_customer(db, customer_id)


@router.post("/", response_model=CustomerSchema, status_code=status.HTTP_201_CREATED)
async def create_customer(
    customer: CustomerCreate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
):
    """
    Create a new customer. The returned version starts at 0.
    """
    return await customer_service.create_customer(db, customer, current_user.username)


@router.put("/{customer_id}", response_model=CustomerSchema)
async def update_customer(
    customer_id: int,
    customer_update: CustomerUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
):
    """
    Update a customer.

    The body must carry the ``version`` from the last read; a stale version
    is rejected with 409.
    """
    return await customer_service.update_customer(db, customer_id, customer_update, current_user.username)


@router.delete("/{customer_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_customer(
    customer_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
):
    """
    Delete a customer together with its profile, vehicles and subscriptions.
    """
    await customer_service.delete_customer(db, customer_id)
    return None
