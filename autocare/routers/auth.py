"""
Authentication routes.
"""
from fastapi import APIRouter, Depends

from autocare.auth import UserStore, get_user_store
from autocare.schemas.user import LoginRequest, Token
from autocare.services import auth_service

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=Token)
async def login(
    request: LoginRequest,
    store: UserStore = Depends(get_user_store),
):
    """
    Exchange a username and password for a bearer token.
    """
    return await auth_service.authenticate(store, request)
