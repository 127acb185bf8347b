"""
Assignee model.

A person tasks can be assigned to. Distinct from login users; a user may
link to at most one assignee profile.
"""

from typing import List, Optional, TYPE_CHECKING

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from taskboard.models.base_model import TimestampedModel

if TYPE_CHECKING:
    from taskboard.models.task import Task
    from taskboard.models.user import User


class Assignee(TimestampedModel):
    """
    Assignee table - people who can be given tasks.
    """

    __tablename__ = "assignees"

    name: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    email: Mapped[Optional[str]] = mapped_column(String(254), nullable=True)
    role: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    department: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    # Relationships
    tasks: Mapped[List["Task"]] = relationship(
        "Task",
        back_populates="assignee",
        passive_deletes=True,
    )
    user: Mapped[Optional["User"]] = relationship(
        "User",
        back_populates="assignee",
        passive_deletes=True,
    )
