"""
User repository - database operations for User.
"""

from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.core.permissions import DEFAULT_ROLE, Role
from taskboard.core.security import hash_password
from taskboard.models.user import User


class UserRepository:
    """Repository for User database operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, user_id: UUID, populate_existing: bool = False) -> Optional[User]:
        """Get a user by ID. populate_existing re-reads a user already in the session."""
        query = select(User).where(User.id == user_id)
        if populate_existing:
            query = query.execution_options(populate_existing=True)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> Optional[User]:
        """Get a user by email (case-insensitive)."""
        if not email or not email.strip():
            return None
        email_clean = email.strip().lower()
        result = await self.db.execute(
            select(User).where(func.lower(User.email) == email_clean)
        )
        return result.scalar_one_or_none()

    async def create(
        self,
        email: str,
        password: str,
        name: Optional[str] = None,
        role: Role = DEFAULT_ROLE,
        assignee_id: Optional[UUID] = None,
    ) -> User:
        """Create a new user."""
        user = User(
            email=email,
            name=name,
            hashed_password=hash_password(password),
            role=role,
            assignee_id=assignee_id,
        )
        self.db.add(user)
        await self.db.flush()
        return user

    async def list(self) -> List[User]:
        """Get all users, newest first."""
        result = await self.db.execute(
            select(User).order_by(User.created_at.desc())
        )
        return list(result.scalars().all())

    async def update(self, user: User, update_data: Dict[str, Any]) -> User:
        """Update a user's information."""
        # Hash password if it's being updated
        if "password" in update_data:
            update_data["hashed_password"] = hash_password(update_data.pop("password"))

        for field, value in update_data.items():
            setattr(user, field, value)

        await self.db.flush()
        return user

    async def delete(self, user: User) -> None:
        await self.db.delete(user)
        await self.db.flush()
