"""
Tag repository - database operations for Tag.
"""

from typing import Iterable, List

from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.models.task import Tag


class TagRepository:
    """Repository for Tag database operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list(self) -> List[Tag]:
        result = await self.db.execute(select(Tag).order_by(Tag.name.asc()))
        return list(result.scalars().all())

    def _insert(self):
        if self.db.get_bind().dialect.name == "postgresql":
            return postgresql.insert(Tag)
        return sqlite.insert(Tag)

    async def _find(self, names: List[str]) -> dict:
        result = await self.db.execute(select(Tag).where(Tag.name.in_(names)))
        return {tag.name: tag for tag in result.scalars().all()}

    async def get_or_create_many(self, names: Iterable[str]) -> List[Tag]:
        """
        Resolve tag names to Tag rows, creating the missing ones.

        Names match exactly (case-sensitive). Duplicates in the input are
        collapsed, first occurrence wins the position. A name inserted by a
        concurrent request in the meantime is picked up instead of failing
        on the unique constraint.
        """
        wanted = list(dict.fromkeys(names))
        if not wanted:
            return []

        existing = await self._find(wanted)
        missing = [name for name in wanted if name not in existing]
        if missing:
            for name in missing:
                stmt = self._insert().values(name=name).on_conflict_do_nothing(index_elements=["name"])
                await self.db.execute(stmt)
            existing = await self._find(wanted)

        return [existing[name] for name in wanted]
