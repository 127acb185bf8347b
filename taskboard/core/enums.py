"""
Task enumerations shared by the server and the board client.
"""

from enum import Enum


class TaskStatus(str, Enum):
    """Board column a task occupies."""
    TODO = "todo"
    IN_PROGRESS = "in-progress"
    DONE = "done"


class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


# Column order on the board
STATUS_ORDER = (TaskStatus.TODO, TaskStatus.IN_PROGRESS, TaskStatus.DONE)
