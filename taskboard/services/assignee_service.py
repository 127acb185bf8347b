"""
Assignee directory and tag catalogue lookups.
"""

from typing import List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.models.assignee import Assignee
from taskboard.models.task import Tag
from taskboard.repositories.assignee_repository import AssigneeRepository
from taskboard.repositories.tag_repository import TagRepository


class AssigneeService:
    """Read-only directory used for assignment dropdowns and name resolution."""

    def __init__(self, db: AsyncSession):
        self.repository = AssigneeRepository(db)
        self.tags = TagRepository(db)

    async def list_assignees(self) -> List[Assignee]:
        return await self.repository.list()

    async def resolve(self, name: Optional[str]) -> Optional[UUID]:
        """First assignee id with exactly this name, or None."""
        if not name or not name.strip():
            return None
        assignee = await self.repository.find_first_by_name(name)
        return assignee.id if assignee else None

    async def list_tags(self) -> List[Tag]:
        return await self.tags.list()
