"""
User management router. Every endpoint requires the ADMIN role.
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.core.dependencies import require_admin
from taskboard.db.session import get_db
from taskboard.schemas.user import Actor, PasswordReset, UserCreate, UserRead, UserUpdate
from taskboard.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("", response_model=List[UserRead])
async def list_users(
    db: AsyncSession = Depends(get_db),
    _: Actor = Depends(require_admin),
):
    """List all users, newest first."""
    return await UserService(db).list_users()


@router.post("", response_model=UserRead, status_code=status.HTTP_201_CREATED)
async def create_user(
    data: UserCreate,
    db: AsyncSession = Depends(get_db),
    _: Actor = Depends(require_admin),
):
    """
    Create a new user.

    Supplying assignee_name also creates a linked assignee profile.
    """
    return await UserService(db).create_user(data)


@router.put("/{user_id}", response_model=UserRead)
async def update_user(
    user_id: UUID,
    data: UserUpdate,
    db: AsyncSession = Depends(get_db),
    _: Actor = Depends(require_admin),
):
    """Update a user's name, email or role."""
    return await UserService(db).update_user(user_id, data)


@router.post("/{user_id}/reset-password", response_model=UserRead)
async def reset_password(
    user_id: UUID,
    data: PasswordReset,
    db: AsyncSession = Depends(get_db),
    _: Actor = Depends(require_admin),
):
    return await UserService(db).reset_password(user_id, data)


@router.delete("/{user_id}")
async def delete_user(
    user_id: UUID,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(require_admin),
):
    """Delete a user. Admins cannot delete themselves."""
    await UserService(db).delete_user(actor, user_id)
    return {"success": True, "message": "User deleted successfully"}
