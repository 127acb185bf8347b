"""
Assignee repository - database operations for Assignee.
"""

from typing import List, Optional
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.models.assignee import Assignee


class AssigneeRepository:
    """Repository for Assignee database operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list(self) -> List[Assignee]:
        """List all assignees ordered by name."""
        result = await self.db.execute(select(Assignee).order_by(Assignee.name.asc()))
        return list(result.scalars().all())

    async def get_by_id(self, assignee_id: UUID) -> Optional[Assignee]:
        result = await self.db.execute(select(Assignee).where(Assignee.id == assignee_id))
        return result.scalar_one_or_none()

    async def find_first_by_name(self, name: str) -> Optional[Assignee]:
        """First assignee whose name matches exactly, oldest first."""
        result = await self.db.execute(
            select(Assignee)
            .where(Assignee.name == name)
            .order_by(Assignee.created_at.asc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def create(
        self,
        name: str,
        email: Optional[str] = None,
        role: Optional[str] = None,
        department: Optional[str] = None,
    ) -> Assignee:
        assignee = Assignee(name=name, email=email, role=role, department=department)
        self.db.add(assignee)
        await self.db.flush()
        return assignee

    async def delete(self, assignee_id: UUID) -> None:
        """Delete an assignee; tasks and users referencing it are unlinked by the FK."""
        await self.db.execute(delete(Assignee).where(Assignee.id == assignee_id))
