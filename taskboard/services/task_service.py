"""
Task business logic service.

Every mutation is authorised against the permission rules before anything is
written, and each call is one unit of work: the task row is re-read under a
row lock, fields and tag links are written, and the session commits once.
"""

import logging
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.core import permissions
from taskboard.core.enums import TaskStatus
from taskboard.core.permissions import Role
from taskboard.errors import Forbidden, NotFound, ValidationFailed
from taskboard.models.task import Tag, Task
from taskboard.repositories.tag_repository import TagRepository
from taskboard.repositories.task_repository import TaskRepository
from taskboard.schemas.task import TaskCreate, TaskUpdate
from taskboard.schemas.user import Actor
from taskboard.services.assignee_service import AssigneeService
from taskboard.utils.time import utc_now

logger = logging.getLogger(__name__)

CREATE_DENIED = "You do not have permission to create tasks"
EDIT_DENIED = "You do not have permission to edit tasks"
DELETE_DENIED = "You do not have permission to delete tasks"
MOVE_DENIED = "You do not have permission to move tasks"
MOVE_NOT_ASSIGNED = "You can only move tasks assigned to you"


def _move_denied_reason(actor: Actor) -> str:
    if permissions.parse_role(actor.role) is Role.EMPLOYEE:
        return MOVE_NOT_ASSIGNED
    return MOVE_DENIED


def _checked_title(title: Optional[str]) -> str:
    """Reject blank titles. Accepted titles are stored exactly as sent."""
    if title is None or not title.strip():
        raise ValidationFailed("Title is required", {"field": "title"})
    return title


class TaskService:
    """Service for task business logic."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.repository = TaskRepository(db)
        self.tags = TagRepository(db)
        self.directory = AssigneeService(db)

    async def list_tasks(self, status: Optional[TaskStatus] = None) -> List[Task]:
        """List tasks, newest first. Read access is universal."""
        return await self.repository.list(status=status)

    async def get_task(self, task_id: UUID) -> Task:
        task = await self.repository.get_by_id(task_id)
        if task is None:
            raise NotFound(f"Task {task_id} not found")
        return task

    async def create_task(self, actor: Actor, data: TaskCreate) -> Task:
        """Create a task owned by the actor."""
        if not permissions.can_create(actor.role):
            logger.warning("Actor %s (%s) denied task create", actor.id, actor.role)
            raise Forbidden(CREATE_DENIED)

        fields = {
            "title": _checked_title(data.title),
            "description": data.description,
            "priority": data.priority,
            "status": data.status,
            "due_date": data.due_date,
            "owner_id": actor.id,
            "assignee_id": await self._resolve_assignee(data.assignee),
        }
        tags = await self._resolve_tags(data.tags)

        task = await self.repository.create(fields, tags)
        task_id = task.id
        await self.db.commit()
        logger.info("Task %s created by %s", task_id, actor.id)
        return await self.repository.reload(task_id)

    async def update_task(self, actor: Actor, task_id: UUID, data: TaskUpdate) -> Task:
        """
        Apply a partial update.

        A status that differs from the stored status makes the whole request
        a move, authorised by the move rule alone, even when other fields
        change in the same request. Otherwise the edit rule applies.
        """
        task = await self._load_for_update(task_id)
        changes = data.model_dump(exclude_unset=True)

        is_move = "status" in changes and changes["status"] is not None and changes["status"] != task.status
        context = actor.context_for(task)
        if is_move:
            if not permissions.can_move(context):
                await self.db.rollback()
                logger.warning("Actor %s (%s) denied move of task %s", actor.id, actor.role, task_id)
                raise Forbidden(_move_denied_reason(actor))
        elif not permissions.can_edit(context):
            await self.db.rollback()
            logger.warning("Actor %s (%s) denied edit of task %s", actor.id, actor.role, task_id)
            raise Forbidden(EDIT_DENIED)

        fields = await self._column_changes(changes)
        await self.repository.update(task, fields)
        if "tags" in changes:
            await self.repository.replace_tags(task, await self._resolve_tags(changes["tags"] or []))
            # Tag links live in task_tags, so the task row is touched by hand
            await self.repository.update(task, {"updated_at": utc_now()})

        await self.db.commit()
        logger.info("Task %s updated by %s (move=%s)", task_id, actor.id, is_move)
        return await self.repository.reload(task_id)

    async def move_task(self, actor: Actor, task_id: UUID, status: TaskStatus) -> Task:
        """
        Change only the status of a task.

        Moving a task to the column it is already in is an authorised no-op:
        nothing is written and updated_at is left alone.
        """
        task = await self._load_for_update(task_id)

        if not permissions.can_move(actor.context_for(task)):
            await self.db.rollback()
            logger.warning("Actor %s (%s) denied move of task %s", actor.id, actor.role, task_id)
            raise Forbidden(_move_denied_reason(actor))

        if task.status == status:
            # Nothing to write, just release the row lock
            await self.db.commit()
            return task

        previous = task.status
        await self.repository.update(task, {"status": status})
        await self.db.commit()
        logger.info("Task %s moved %s -> %s by %s", task_id, previous.value, status.value, actor.id)
        return await self.repository.reload(task_id)

    async def delete_task(self, actor: Actor, task_id: UUID) -> None:
        task = await self._load_for_update(task_id)

        if not permissions.can_delete(actor.context_for(task)):
            await self.db.rollback()
            logger.warning("Actor %s (%s) denied delete of task %s", actor.id, actor.role, task_id)
            raise Forbidden(DELETE_DENIED)

        await self.repository.delete(task)
        await self.db.commit()
        logger.info("Task %s deleted by %s", task_id, actor.id)

    async def _load_for_update(self, task_id: UUID) -> Task:
        task = await self.repository.get_by_id(task_id, for_update=True)
        if task is None:
            await self.db.rollback()
            raise NotFound(f"Task {task_id} not found")
        return task

    async def _column_changes(self, changes: Dict[str, Any]) -> Dict[str, Any]:
        """Translate request fields into column values."""
        fields: Dict[str, Any] = {}
        if "title" in changes:
            fields["title"] = _checked_title(changes["title"])
        if "description" in changes:
            fields["description"] = changes["description"]
        if changes.get("priority") is not None:
            fields["priority"] = changes["priority"]
        if changes.get("status") is not None:
            fields["status"] = changes["status"]
        if "due_date" in changes:
            fields["due_date"] = changes["due_date"]
        if "assignee" in changes:
            fields["assignee_id"] = await self._resolve_assignee(changes["assignee"])
        return fields

    async def _resolve_assignee(self, name: Optional[str]) -> Optional[UUID]:
        """Assignee name to profile id. Unknown or blank names mean unassigned."""
        assignee_id = await self.directory.resolve(name)
        if assignee_id is None and name and name.strip():
            logger.info("No assignee named %r, leaving task unassigned", name)
        return assignee_id

    async def _resolve_tags(self, names: List[str]) -> List[Tag]:
        cleaned = [name for name in names if name and name.strip()]
        return await self.tags.get_or_create_many(cleaned)
