"""
Task and Tag models.

A task occupies exactly one board column (its status). Tags are shared,
deduplicated by exact name, and linked through the task_tags table.
"""

import uuid
from datetime import date
from typing import List, Optional, TYPE_CHECKING

from sqlalchemy import Column, Date, Enum, ForeignKey, String, Table, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from taskboard.core.enums import TaskPriority, TaskStatus
from taskboard.db.base import Base
from taskboard.models.base_model import TimestampedModel

if TYPE_CHECKING:
    from taskboard.models.assignee import Assignee


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


task_tags = Table(
    "task_tags",
    Base.metadata,
    Column("task_id", Uuid(as_uuid=True), ForeignKey("tasks.id", ondelete="CASCADE"), primary_key=True),
    Column("tag_id", Uuid(as_uuid=True), ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True),
)


class Tag(TimestampedModel):
    """
    Tag table - labels shared across tasks.
    """

    __tablename__ = "tags"

    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)


class Task(TimestampedModel):
    """
    Task table - one card on the board.
    """

    __tablename__ = "tasks"

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    priority: Mapped[TaskPriority] = mapped_column(
        Enum(TaskPriority, native_enum=False, length=20, values_callable=_enum_values),
        nullable=False,
        default=TaskPriority.MEDIUM,
    )

    status: Mapped[TaskStatus] = mapped_column(
        Enum(TaskStatus, native_enum=False, length=20, values_callable=_enum_values),
        nullable=False,
        default=TaskStatus.TODO,
        index=True,
    )

    due_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    owner_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    assignee_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("assignees.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    # Relationships
    assignee: Mapped[Optional["Assignee"]] = relationship(
        "Assignee",
        back_populates="tasks",
        lazy="selectin",
    )

    tags: Mapped[List[Tag]] = relationship(
        Tag,
        secondary=task_tags,
        lazy="selectin",
        order_by=Tag.name,
    )

    @property
    def assignee_name(self) -> Optional[str]:
        return self.assignee.name if self.assignee is not None else None

    @property
    def tag_names(self) -> List[str]:
        return [tag.name for tag in self.tags]
