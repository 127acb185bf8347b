"""
Role-based permission rules for the task board.

Defines roles and the decision functions every other layer consults.

Role capabilities:
- ADMIN: Full access to everything
- SUPERVISOR: Can create, edit, delete, and assign tasks
- EMPLOYEE: Can only move tasks assigned to them
- VIEWER: Read-only access, cannot modify anything

All decisions return booleans and never raise. Anything that is not a
recognised role is denied.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Union


class Role(str, Enum):
    """Standard roles on the board."""
    ADMIN = "ADMIN"
    SUPERVISOR = "SUPERVISOR"
    EMPLOYEE = "EMPLOYEE"
    VIEWER = "VIEWER"


DEFAULT_ROLE = Role.EMPLOYEE

# Roles allowed to manage tasks (create, edit, delete, assign)
MANAGER_ROLES = frozenset({Role.ADMIN, Role.SUPERVISOR})

ROLE_DESCRIPTIONS = {
    Role.ADMIN: "Full access to all tasks and board features",
    Role.SUPERVISOR: "Can create, edit, delete, and assign tasks",
    Role.EMPLOYEE: "Can move tasks assigned to you",
    Role.VIEWER: "Read-only access to the board",
}

RoleLike = Union[Role, str, None]


@dataclass(frozen=True)
class PermissionContext:
    """Everything a task-level decision may look at."""

    actor_role: RoleLike
    actor_id: Optional[Any] = None
    actor_assignee_id: Optional[Any] = None
    task_owner_id: Optional[Any] = None
    task_assignee_id: Optional[Any] = None


def parse_role(role: RoleLike) -> Optional[Role]:
    """
    Normalise a role value.

    Args:
        role: A Role, a role name, or None

    Returns:
        The matching Role, or None when the value is not a known role
    """
    if isinstance(role, Role):
        return role
    if not isinstance(role, str):
        return None
    try:
        return Role(role.strip().upper())
    except ValueError:
        return None


def _is_manager(role: RoleLike) -> bool:
    return parse_role(role) in MANAGER_ROLES


def can_create(role: RoleLike) -> bool:
    """Check if the role can create new tasks."""
    return _is_manager(role)


def can_edit(context: PermissionContext) -> bool:
    """Check if the actor can edit a task. Ownership is not considered."""
    return _is_manager(context.actor_role)


def can_delete(context: PermissionContext) -> bool:
    """Check if the actor can delete a task."""
    return _is_manager(context.actor_role)


def can_assign(role: RoleLike) -> bool:
    """Check if the role can assign tasks to other people."""
    return _is_manager(role)


def can_change_priority(context: PermissionContext) -> bool:
    return _is_manager(context.actor_role)


def can_change_due_date(context: PermissionContext) -> bool:
    return _is_manager(context.actor_role)


def can_manage_tags(context: PermissionContext) -> bool:
    return _is_manager(context.actor_role)


def can_move(context: PermissionContext) -> bool:
    """
    Check if the actor can change a task's status.

    Managers may move any task. An employee may move a task only when their
    linked assignee profile is the task's assignee. Viewers never move.
    """
    role = parse_role(context.actor_role)
    if role in MANAGER_ROLES:
        return True
    if role is Role.EMPLOYEE:
        if context.actor_assignee_id is None or context.task_assignee_id is None:
            return False
        return str(context.actor_assignee_id) == str(context.task_assignee_id)
    return False


def can_view(role: RoleLike) -> bool:
    """Read access is universal."""
    return True


def get_permissions(context: PermissionContext) -> Dict[str, bool]:
    """
    Evaluate every decision for one actor/task pair.

    Returns:
        Mapping of decision name to result, plus the convenience flags
        can_interact and is_read_only used for UI gating
    """
    permissions = {
        "can_create": can_create(context.actor_role),
        "can_edit": can_edit(context),
        "can_delete": can_delete(context),
        "can_assign": can_assign(context.actor_role),
        "can_move": can_move(context),
        "can_view": can_view(context.actor_role),
        "can_change_priority": can_change_priority(context),
        "can_change_due_date": can_change_due_date(context),
        "can_manage_tags": can_manage_tags(context),
    }
    permissions["can_interact"] = permissions["can_edit"] or permissions["can_move"]
    permissions["is_read_only"] = not (
        permissions["can_edit"] or permissions["can_move"] or permissions["can_delete"]
    )
    return permissions


def describe_role(role: RoleLike) -> str:
    """User-facing summary of what a role may do."""
    parsed = parse_role(role)
    if parsed is None:
        return "No permissions"
    return ROLE_DESCRIPTIONS[parsed]
