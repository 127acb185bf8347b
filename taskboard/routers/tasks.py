"""
Task router - API endpoints for tasks.
"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.core.dependencies import get_current_user
from taskboard.core.enums import TaskStatus
from taskboard.db.session import get_db
from taskboard.schemas.task import TaskCreate, TaskDeleted, TaskMove, TaskRead, TaskUpdate
from taskboard.schemas.user import Actor
from taskboard.services.task_service import TaskService

router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.get("", response_model=List[TaskRead])
async def list_tasks(
    db: AsyncSession = Depends(get_db),
    status: Optional[TaskStatus] = None,
):
    """
    List all tasks, newest first. No authentication required.

    Filters: status.
    """
    service = TaskService(db)
    return await service.list_tasks(status=status)


@router.get("/{task_id}", response_model=TaskRead)
async def get_task(
    task_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    """Get a task by ID."""
    service = TaskService(db)
    return await service.get_task(task_id)


@router.post("", response_model=TaskRead, status_code=status.HTTP_201_CREATED)
async def create_task(
    data: TaskCreate,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_user),
):
    """Create a new task. Admins and supervisors only."""
    service = TaskService(db)
    return await service.create_task(actor, data)


@router.put("/{task_id}", response_model=TaskRead)
async def update_task(
    task_id: UUID,
    data: TaskUpdate,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_user),
):
    """
    Update a task.

    A changed status is authorised as a move; anything else as an edit.
    """
    service = TaskService(db)
    return await service.update_task(actor, task_id, data)


@router.patch("/{task_id}", response_model=TaskRead)
async def move_task(
    task_id: UUID,
    data: TaskMove,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_user),
):
    """Change only the task status (drag and drop)."""
    service = TaskService(db)
    return await service.move_task(actor, task_id, data.status)


@router.delete("/{task_id}", response_model=TaskDeleted)
async def delete_task(
    task_id: UUID,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_user),
):
    """Delete a task."""
    service = TaskService(db)
    await service.delete_task(actor, task_id)
    return TaskDeleted()
