"""
Task Pydantic schemas.
"""

from datetime import date, datetime
from typing import List, Optional
from uuid import UUID

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from taskboard.core.enums import TaskPriority, TaskStatus


class TaskCreate(BaseModel):
    """Schema for creating a new task."""

    title: str
    description: Optional[str] = None
    priority: TaskPriority = TaskPriority.MEDIUM
    status: TaskStatus = TaskStatus.TODO
    # Assignee profile name, resolved on the server
    assignee: Optional[str] = None
    due_date: Optional[date] = None
    tags: List[str] = Field(default_factory=list)


class TaskUpdate(BaseModel):
    """
    Schema for a partial task update.

    Only the fields present in the request are applied. A status that
    differs from the stored one turns the request into a move.
    """

    title: Optional[str] = None
    description: Optional[str] = None
    priority: Optional[TaskPriority] = None
    status: Optional[TaskStatus] = None
    assignee: Optional[str] = None
    due_date: Optional[date] = None
    tags: Optional[List[str]] = None


class TaskMove(BaseModel):
    """Schema for a status-only move (drag and drop)."""

    status: TaskStatus


class TaskRead(BaseModel):
    """Schema for reading task data (API response)."""

    id: UUID
    title: str
    description: Optional[str] = None
    priority: TaskPriority
    status: TaskStatus
    assignee: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("assignee_name", "assignee"),
    )
    assignee_id: Optional[UUID] = None
    owner_id: Optional[UUID] = None
    due_date: Optional[date] = None
    tags: List[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("tag_names", "tags"),
    )
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class TaskDeleted(BaseModel):
    success: bool = True


class TagRead(BaseModel):
    id: UUID
    name: str

    model_config = ConfigDict(from_attributes=True)
