"""
JWT access tokens.

Tokens carry the user id in ``sub`` and expire after
ACCESS_TOKEN_EXPIRE_HOURS. They are signed with SECRET_KEY.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import UUID

import jwt

from taskboard.core.config import settings

logger = logging.getLogger(__name__)


def create_access_token(user_id: UUID, issued_at: Optional[datetime] = None) -> str:
    """
    Create a JWT access token for a user.

    Args:
        user_id: The user's ID
        issued_at: Issue time, defaults to now

    Returns:
        Encoded JWT token string
    """
    issued = issued_at or datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "iat": issued,
        "exp": issued + timedelta(hours=settings.ACCESS_TOKEN_EXPIRE_HOURS),
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> Optional[UUID]:
    """
    Decode and verify a JWT access token.

    Returns:
        The user id, or None when the token is malformed, forged or expired
    """
    if not token:
        return None
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except jwt.PyJWTError as exc:
        logger.debug("Rejected access token: %s", exc)
        return None

    try:
        return UUID(str(payload.get("sub")))
    except ValueError:
        return None
