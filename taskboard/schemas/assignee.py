"""
Assignee Pydantic schemas.
"""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class AssigneeSummary(BaseModel):
    """Assignee fields embedded in user responses."""

    name: str
    department: Optional[str] = None
    role: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class AssigneeRead(AssigneeSummary):
    id: UUID
    email: Optional[str] = None
