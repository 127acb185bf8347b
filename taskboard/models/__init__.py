"""
Models package.

Import all models here so they are registered with SQLAlchemy.
"""

from taskboard.models.assignee import Assignee
from taskboard.models.user import User
from taskboard.models.task import Tag, Task, task_tags

# Export all models
__all__ = [
    "Assignee",
    "User",
    "Tag",
    "Task",
    "task_tags",
]
