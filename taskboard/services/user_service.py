"""
User administration service (admin only; the router enforces the role).
"""

import logging
from typing import List
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.errors import Conflict, NotFound, ValidationFailed
from taskboard.models.user import User
from taskboard.repositories.assignee_repository import AssigneeRepository
from taskboard.repositories.user_repository import UserRepository
from taskboard.schemas.user import Actor, PasswordReset, UserCreate, UserUpdate

logger = logging.getLogger(__name__)


class UserService:
    """Service for managing accounts."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.users = UserRepository(db)
        self.assignees = AssigneeRepository(db)

    async def list_users(self) -> List[User]:
        return await self.users.list()

    async def create_user(self, data: UserCreate) -> User:
        """
        Create a user.

        When assignee_name is given an assignee profile is created and linked,
        so the new user can move tasks assigned to that profile.
        """
        if await self.users.get_by_email(data.email):
            raise Conflict("User with this email already exists", {"field": "email"})

        assignee_id = None
        if data.assignee_name and data.assignee_name.strip():
            assignee = await self.assignees.create(
                name=data.assignee_name.strip(),
                email=data.email,
                role=data.assignee_role or data.role.value,
                department=data.assignee_department or "General",
            )
            assignee_id = assignee.id

        user = await self.users.create(
            email=data.email,
            password=data.password,
            name=data.name,
            role=data.role,
            assignee_id=assignee_id,
        )
        user_id = user.id
        await self.db.commit()
        logger.info("Created user %s with role %s", user_id, data.role.value)
        return await self.users.get_by_id(user_id, populate_existing=True)

    async def update_user(self, user_id: UUID, data: UserUpdate) -> User:
        user = await self._get(user_id)
        update_data = data.model_dump(exclude_unset=True, exclude_none=True)

        new_email = update_data.get("email")
        if new_email and new_email != user.email:
            if await self.users.get_by_email(new_email):
                raise Conflict("Email already in use", {"field": "email"})

        await self.users.update(user, update_data)
        await self.db.commit()
        logger.info("Updated user %s fields %s", user_id, sorted(update_data))
        return await self.users.get_by_id(user_id, populate_existing=True)

    async def reset_password(self, user_id: UUID, data: PasswordReset) -> User:
        user = await self._get(user_id)
        await self.users.update(user, {"password": data.password})
        await self.db.commit()
        logger.info("Password reset for user %s", user_id)
        return await self.users.get_by_id(user_id, populate_existing=True)

    async def delete_user(self, actor: Actor, user_id: UUID) -> None:
        """
        Delete a user and their assignee profile.

        Tasks owned by the user or assigned to the profile stay on the board
        with the reference cleared.
        """
        if actor.id == user_id:
            raise ValidationFailed("Cannot delete your own account")

        user = await self._get(user_id)
        assignee_id = user.assignee_id

        await self.users.delete(user)
        if assignee_id is not None:
            await self.assignees.delete(assignee_id)
        await self.db.commit()
        logger.info("Deleted user %s", user_id)

    async def _get(self, user_id: UUID) -> User:
        user = await self.users.get_by_id(user_id)
        if user is None:
            raise NotFound("User not found")
        return user
