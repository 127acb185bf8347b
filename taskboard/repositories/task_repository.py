"""
Task repository - database operations for Task.
"""

from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from taskboard.models.task import Tag, Task


class TaskRepository:
    """Repository for Task database operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    def _query(self):
        return select(Task).options(selectinload(Task.assignee), selectinload(Task.tags))

    async def list(self, status: Optional[str] = None) -> List[Task]:
        """List tasks, newest first."""
        query = self._query()
        if status is not None:
            query = query.where(Task.status == status)
        query = query.order_by(Task.created_at.desc())

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_by_id(self, task_id: UUID, for_update: bool = False) -> Optional[Task]:
        """
        Get a task by ID.

        With for_update the row is locked until the transaction ends and the
        stored values are re-read even if the task is already in the session.
        """
        query = self._query().where(Task.id == task_id)
        if for_update:
            query = query.with_for_update(of=Task).execution_options(populate_existing=True)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def create(self, fields: Dict[str, Any], tags: List[Tag]) -> Task:
        """Create a new task with its tag links."""
        task = Task(**fields)
        task.tags = tags
        self.db.add(task)
        await self.db.flush()
        return task

    async def update(self, task: Task, fields: Dict[str, Any]) -> Task:
        """Apply field changes to a loaded task. Unchanged values are skipped."""
        for field, value in fields.items():
            if getattr(task, field) != value:
                setattr(task, field, value)
        await self.db.flush()
        return task

    async def replace_tags(self, task: Task, tags: List[Tag]) -> Task:
        """Drop every tag link of the task and link exactly the given tags."""
        task.tags.clear()
        await self.db.flush()
        task.tags.extend(tags)
        await self.db.flush()
        return task

    async def delete(self, task: Task) -> None:
        await self.db.delete(task)
        await self.db.flush()

    async def reload(self, task_id: UUID) -> Optional[Task]:
        """Re-read a task and its relationships after a write."""
        query = self._query().where(Task.id == task_id).execution_options(populate_existing=True)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()
