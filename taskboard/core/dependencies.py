"""
FastAPI dependencies for the application.
"""

from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.core.permissions import Role, parse_role
from taskboard.db.session import get_db
from taskboard.errors import Forbidden, Unauthenticated
from taskboard.schemas.user import Actor
from taskboard.services.auth_service import AuthService

# Security scheme for bearer tokens; missing credentials are reported as 401 below
security = HTTPBearer(auto_error=False)


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> Optional[Actor]:
    """The acting user when a valid bearer token is present, else None."""
    if credentials is None:
        return None
    return await AuthService(db).authenticate(credentials.credentials)


async def get_current_user(
    actor: Optional[Actor] = Depends(get_optional_user),
) -> Actor:
    """
    Get the current authenticated user from the bearer token.

    Raises:
        Unauthenticated: If the token is missing, invalid, or the user is gone
    """
    if actor is None:
        raise Unauthenticated("Authentication required")
    return actor


async def require_admin(actor: Actor = Depends(get_current_user)) -> Actor:
    """Dependency to require admin role."""
    if parse_role(actor.role) is not Role.ADMIN:
        raise Forbidden("Admin access required")
    return actor
