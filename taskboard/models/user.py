"""
User model.

A login principal with exactly one role.
"""

import uuid
from datetime import datetime
from typing import Optional, TYPE_CHECKING

from sqlalchemy import DateTime, Enum, ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from taskboard.core.permissions import DEFAULT_ROLE, Role
from taskboard.models.base_model import TimestampedModel

if TYPE_CHECKING:
    from taskboard.models.assignee import Assignee


class User(TimestampedModel):
    """
    User table - people who can log in to the board.
    """

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(254), nullable=False, unique=True, index=True)
    name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)

    role: Mapped[Role] = mapped_column(
        Enum(Role, native_enum=False, length=20, values_callable=lambda roles: [r.value for r in roles]),
        nullable=False,
        default=DEFAULT_ROLE,
        server_default=DEFAULT_ROLE.value,
    )

    assignee_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("assignees.id", ondelete="SET NULL"),
        nullable=True,
        unique=True,
    )

    last_login_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    # Relationships
    assignee: Mapped[Optional["Assignee"]] = relationship(
        "Assignee",
        back_populates="user",
        lazy="selectin",
    )
