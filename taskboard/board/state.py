"""
Board value types: per-task sync states, columns and the colour palette.
"""

from dataclasses import dataclass
from typing import Dict, Union

from taskboard.core.enums import TaskStatus


@dataclass(frozen=True)
class Settled:
    """The local status agrees with the last server answer."""

    status: TaskStatus


@dataclass(frozen=True)
class Pending:
    """A move has been shown locally and sent; the server has not answered yet."""

    from_status: TaskStatus
    to_status: TaskStatus


@dataclass(frozen=True)
class RolledBack:
    """The server refused or failed a move; the board was reloaded from the server."""

    from_status: TaskStatus
    attempted_status: TaskStatus
    reason: str


SyncState = Union[Settled, Pending, RolledBack]


@dataclass(frozen=True)
class BoardColumn:
    id: TaskStatus
    title: str
    description: str


COLUMNS = (
    BoardColumn(TaskStatus.TODO, "TODO", "Tasks to be started"),
    BoardColumn(TaskStatus.IN_PROGRESS, "In Progress", "Tasks being worked on"),
    BoardColumn(TaskStatus.DONE, "Done", "Completed tasks"),
)

COLOR_OPTIONS = (
    "purple",
    "blue",
    "green",
    "yellow",
    "pink",
    "indigo",
    "red",
    "orange",
    "gray",
    "slate",
)

DEFAULT_COLUMN_COLORS: Dict[TaskStatus, str] = {
    TaskStatus.TODO: "purple",
    TaskStatus.IN_PROGRESS: "blue",
    TaskStatus.DONE: "green",
}
