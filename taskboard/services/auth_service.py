"""
Authentication service: registration, login and bearer token lookup.
"""

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.core.permissions import DEFAULT_ROLE
from taskboard.core.security import verify_password
from taskboard.core.jwt import create_access_token, decode_access_token
from taskboard.errors import Conflict, Unauthenticated
from taskboard.models.user import User
from taskboard.repositories.user_repository import UserRepository
from taskboard.schemas.user import Actor, LoginRequest, LoginResponse, RegisterRequest, UserRead
from taskboard.utils.time import utc_now

logger = logging.getLogger(__name__)


class AuthService:
    """Service for authentication."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.users = UserRepository(db)

    async def register(self, data: RegisterRequest) -> User:
        """Create an account. Self-registered users always start as employees."""
        if await self.users.get_by_email(data.email):
            raise Conflict("User with this email already exists", {"field": "email"})

        user = await self.users.create(
            email=data.email,
            password=data.password,
            name=data.name,
            role=DEFAULT_ROLE,
        )
        user_id = user.id
        await self.db.commit()
        logger.info("Registered user %s", user_id)
        return await self.users.get_by_id(user_id, populate_existing=True)

    async def authenticate_user(self, email: str, password: str) -> Optional[User]:
        """Return the user when the credentials match."""
        user = await self.users.get_by_email(email)
        if not user or not verify_password(password, user.hashed_password):
            return None
        return user

    async def login(self, credentials: LoginRequest) -> LoginResponse:
        user = await self.authenticate_user(credentials.email, credentials.password)
        if not user:
            logger.warning("Failed login for %s", credentials.email)
            raise Unauthenticated("Invalid email or password")

        user.last_login_at = utc_now()
        user_id = user.id
        await self.db.commit()
        user = await self.users.get_by_id(user_id, populate_existing=True)

        return LoginResponse(
            access_token=create_access_token(user.id),
            user=UserRead.model_validate(user),
        )

    async def authenticate(self, token: Optional[str]) -> Optional[Actor]:
        """
        Resolve a bearer token to the acting user.

        Returns:
            Actor with id, role and linked assignee id, or None when the
            token is missing, invalid, or names a user that no longer exists
        """
        user_id = decode_access_token(token or "")
        if user_id is None:
            return None
        user = await self.users.get_by_id(user_id)
        if user is None:
            return None
        return Actor.model_validate(user)

    async def get_user(self, actor: Actor) -> User:
        user = await self.users.get_by_id(actor.id)
        if user is None:
            raise Unauthenticated("User not found")
        return user
