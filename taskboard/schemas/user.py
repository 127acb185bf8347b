"""
User Pydantic schemas.
"""

from datetime import datetime
from typing import Annotated, Any, Optional
from uuid import UUID

from pydantic import AfterValidator, BaseModel, ConfigDict, EmailStr, Field

from taskboard.core.permissions import DEFAULT_ROLE, PermissionContext, Role
from taskboard.core.security import password_problems
from taskboard.schemas.assignee import AssigneeSummary


def _normalise_email(value: str) -> str:
    return value.strip().lower()


def _check_password(value: str) -> str:
    problems = password_problems(value)
    if problems:
        raise ValueError("; ".join(problems))
    return value


Email = Annotated[EmailStr, AfterValidator(_normalise_email)]
StrongPassword = Annotated[str, AfterValidator(_check_password)]


class Actor(BaseModel):
    """
    The authenticated principal a request acts as.

    Only the identity, role and linked assignee profile matter for
    permission decisions.
    """

    id: UUID
    role: Role = DEFAULT_ROLE
    assignee_id: Optional[UUID] = None

    model_config = ConfigDict(from_attributes=True, frozen=True)

    def context_for(self, task: Any = None) -> PermissionContext:
        """Build the permission context for this actor and an optional task."""
        return PermissionContext(
            actor_role=self.role,
            actor_id=self.id,
            actor_assignee_id=self.assignee_id,
            task_owner_id=getattr(task, "owner_id", None),
            task_assignee_id=getattr(task, "assignee_id", None),
        )


class RegisterRequest(BaseModel):
    """Schema for self-service registration. New users are employees."""

    email: Email
    password: StrongPassword
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)


class UserCreate(BaseModel):
    """Schema for an admin creating a user, optionally with an assignee profile."""

    email: Email
    name: str = Field(min_length=1, max_length=100)
    password: StrongPassword
    role: Role = DEFAULT_ROLE
    assignee_name: Optional[str] = None
    assignee_department: Optional[str] = None
    assignee_role: Optional[str] = None


class UserUpdate(BaseModel):
    """Schema for updating a user."""

    email: Optional[Email] = None
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    role: Optional[Role] = None


class PasswordReset(BaseModel):
    password: StrongPassword


class UserRead(BaseModel):
    """Schema for reading user data (API response)."""

    id: UUID
    email: str
    name: Optional[str] = None
    role: Role
    assignee_id: Optional[UUID] = None
    assignee: Optional[AssigneeSummary] = None
    last_login_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class LoginRequest(BaseModel):
    """Schema for login request."""

    email: Email
    password: str = Field(min_length=1)


class LoginResponse(BaseModel):
    """Schema for login response."""

    access_token: str
    token_type: str = "bearer"
    user: UserRead
