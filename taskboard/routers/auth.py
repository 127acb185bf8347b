"""
Authentication router for registration, login and the current user.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.core.dependencies import get_current_user
from taskboard.db.session import get_db
from taskboard.schemas.user import Actor, LoginRequest, LoginResponse, RegisterRequest, UserRead
from taskboard.services.auth_service import AuthService

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/register", response_model=UserRead, status_code=status.HTTP_201_CREATED)
async def register(
    data: RegisterRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    Create an account.

    New accounts always get the EMPLOYEE role; admins change roles later.
    """
    return await AuthService(db).register(data)


@router.post("/login", response_model=LoginResponse)
async def login(
    credentials: LoginRequest,
    db: AsyncSession = Depends(get_db),
):
    """Authenticate user and return a bearer token."""
    return await AuthService(db).login(credentials)


@router.get("/me", response_model=UserRead)
async def get_current_user_info(
    actor: Actor = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Get information about the currently authenticated user.
    """
    return await AuthService(db).get_user(actor)
