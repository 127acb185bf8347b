"""
Assignee and tag lookups for the board's forms.
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.db.session import get_db
from taskboard.schemas.assignee import AssigneeRead
from taskboard.schemas.task import TagRead
from taskboard.services.assignee_service import AssigneeService

router = APIRouter(tags=["Directory"])


@router.get("/assignees", response_model=List[AssigneeRead])
async def list_assignees(db: AsyncSession = Depends(get_db)):
    """All assignee profiles ordered by name."""
    return await AssigneeService(db).list_assignees()


@router.get("/tags", response_model=List[TagRead])
async def list_tags(db: AsyncSession = Depends(get_db)):
    """All known tags ordered by name."""
    return await AssigneeService(db).list_tags()
