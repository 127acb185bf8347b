"""
Client-side board: tasks grouped by status, optimistic drag-and-drop moves
reconciled against the task store.

The engine owns the board's task list. Only four internal paths change it:
load (replace from the server), speculative apply (drag-over), commit (server
accepted a change or a deletion) and rollback (server refused: reload
everything). Other code reads through tasks_in(), task(), sync_state() and
friends.

A failed move is answered by fetching the whole board again, since other
changes may have landed while the move was in flight. Only when that fetch
also fails is the card put back in its original column locally.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Protocol, Set, Union
from uuid import UUID

from taskboard.board.client import TaskStoreError
from taskboard.board.state import (
    COLOR_OPTIONS,
    COLUMNS,
    DEFAULT_COLUMN_COLORS,
    Pending,
    RolledBack,
    Settled,
    SyncState,
)
from taskboard.core import permissions
from taskboard.core.enums import STATUS_ORDER, TaskStatus
from taskboard.schemas.task import TaskCreate, TaskRead, TaskUpdate
from taskboard.schemas.user import Actor

logger = logging.getLogger(__name__)

TargetId = Union[str, UUID]


class TaskStore(Protocol):
    """What the engine needs from the task store (TaskStoreClient satisfies it)."""

    async def list_tasks(self) -> List[TaskRead]: ...

    async def create_task(self, data: TaskCreate) -> TaskRead: ...

    async def update_task(self, task_id: UUID, data: TaskUpdate) -> TaskRead: ...

    async def move_task(self, task_id: UUID, status: TaskStatus) -> TaskRead: ...

    async def delete_task(self, task_id: UUID) -> None: ...


@dataclass
class _DragSession:
    task_id: UUID
    original_status: TaskStatus


def _column_status(target_id: TargetId) -> Optional[TaskStatus]:
    try:
        return TaskStatus(str(target_id))
    except ValueError:
        return None


def _as_uuid(value: TargetId) -> Optional[UUID]:
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError:
        return None


class BoardReconciliationEngine:
    """Optimistic board state for one signed-in actor."""

    def __init__(self, store: TaskStore, actor: Optional[Actor] = None):
        self.store = store
        self.actor = actor

        self._tasks: List[TaskRead] = []
        self._sync: Dict[UUID, SyncState] = {}
        self._drag: Optional[_DragSession] = None
        self._pending_id: Optional[UUID] = None

        self.last_error: Optional[str] = None
        self.loaded = False

        # Presentation state
        self.minimized_cards: Set[UUID] = set()
        self.minimized_columns: Dict[TaskStatus, bool] = {status: False for status in STATUS_ORDER}
        self.column_colors: Dict[TaskStatus, str] = dict(DEFAULT_COLUMN_COLORS)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @property
    def tasks(self) -> List[TaskRead]:
        return list(self._tasks)

    @property
    def active_task_id(self) -> Optional[UUID]:
        return self._drag.task_id if self._drag else None

    @property
    def has_pending_move(self) -> bool:
        return self._pending_id is not None

    def task(self, task_id: TargetId) -> Optional[TaskRead]:
        wanted = _as_uuid(task_id)
        if wanted is None:
            return None
        for task in self._tasks:
            if task.id == wanted:
                return task
        return None

    def tasks_in(self, status: TaskStatus) -> List[TaskRead]:
        return [task for task in self._tasks if task.status == status]

    def columns(self):
        """(column, tasks) pairs in board order."""
        return [(column, self.tasks_in(column.id)) for column in COLUMNS]

    def stats(self) -> Dict[str, int]:
        counts = {"total": len(self._tasks)}
        for status in STATUS_ORDER:
            counts[status.value] = len(self.tasks_in(status))
        return counts

    def sync_state(self, task_id: TargetId) -> Optional[SyncState]:
        wanted = _as_uuid(task_id)
        return self._sync.get(wanted) if wanted else None

    def permissions_for(self, task_id: Optional[TargetId] = None) -> Dict[str, bool]:
        """Permission flags for UI gating. Signed-out viewers get read-only flags."""
        task = self.task(task_id) if task_id is not None else None
        if self.actor is None:
            return permissions.get_permissions(permissions.PermissionContext(actor_role=None))
        return permissions.get_permissions(self.actor.context_for(task))

    def can_drag(self, task_id: TargetId) -> bool:
        return self.permissions_for(task_id)["can_move"]

    # ------------------------------------------------------------------
    # Loading and reconciliation
    # ------------------------------------------------------------------

    async def load(self) -> List[TaskRead]:
        """Replace the board with the server's task list."""
        try:
            tasks = await self.store.list_tasks()
        except TaskStoreError as exc:
            self.last_error = exc.message
            logger.error("Loading tasks failed: %s", exc.message)
            raise

        rolled_back = {task_id: state for task_id, state in self._sync.items() if isinstance(state, RolledBack)}
        self._tasks = list(tasks)
        self._sync = {task.id: rolled_back.get(task.id, Settled(task.status)) for task in self._tasks}
        self.minimized_cards &= set(self._sync)
        self.loaded = True
        return self.tasks

    def _apply_speculative(self, task_id: UUID, status: TaskStatus) -> None:
        self._tasks = [
            task.model_copy(update={"status": status}) if task.id == task_id else task
            for task in self._tasks
        ]

    def _commit(self, task: TaskRead) -> None:
        replaced = False
        updated = []
        for existing in self._tasks:
            if existing.id == task.id:
                updated.append(task)
                replaced = True
            else:
                updated.append(existing)
        if not replaced:
            updated.append(task)
        self._tasks = updated
        self._sync[task.id] = Settled(task.status)

    def _commit_removal(self, task_id: UUID) -> None:
        self._tasks = [task for task in self._tasks if task.id != task_id]
        self._sync.pop(task_id, None)
        self.minimized_cards.discard(task_id)

    async def _rollback(self, task_id: UUID, from_status: TaskStatus, to_status: TaskStatus, error: TaskStoreError) -> None:
        self.last_error = error.message
        self._sync[task_id] = RolledBack(from_status, to_status, error.message)
        logger.warning("Move of %s to %s failed (%s): %s", task_id, to_status.value, error.code, error.message)
        try:
            await self.load()
        except TaskStoreError:
            # last_error now carries the load failure
            logger.error("Reload after failed move of %s also failed", task_id)
            self._apply_speculative(task_id, from_status)

    # ------------------------------------------------------------------
    # Drag and drop
    # ------------------------------------------------------------------

    def drag_start(self, task_id: TargetId) -> bool:
        """
        Begin a drag gesture.

        Refused while another move is waiting for the server, for unknown
        tasks, and for tasks the actor may not move.
        """
        if self._pending_id is not None or self._drag is not None:
            return False
        task = self.task(task_id)
        if task is None or not self.can_drag(task.id):
            return False

        self._drag = _DragSession(task.id, task.status)
        self._sync[task.id] = Settled(task.status)
        return True

    def _target_status(self, active_id: UUID, target_id: Optional[TargetId]) -> Optional[TaskStatus]:
        if target_id is None:
            return None
        column = _column_status(target_id)
        if column is not None:
            return column
        target = self.task(target_id)
        if target is None or target.id == active_id:
            return None
        return target.status

    def drag_over(self, active_id: TargetId, target_id: Optional[TargetId]) -> Optional[TaskStatus]:
        """Show the dragged card in the hovered column. Local only."""
        drag = self._drag
        if drag is None or drag.task_id != _as_uuid(active_id):
            return None

        # Off every target the card shows where a drop would leave it
        status = self._target_status(drag.task_id, target_id) or drag.original_status
        current = self.task(drag.task_id)
        if current is None:
            return None
        if current.status != status:
            self._apply_speculative(drag.task_id, status)
        return status

    async def drag_end(self, active_id: TargetId, target_id: Optional[TargetId]) -> Optional[SyncState]:
        """
        Finish a drag gesture.

        The drop target decides the final column: a column id, or the column
        of the task dropped on. Anything else cancels the move. A move only
        reaches the server when the final column differs from where the
        drag started.
        """
        drag = self._drag
        if drag is None or drag.task_id != _as_uuid(active_id):
            return None
        self._drag = None

        task_id = drag.task_id
        original = drag.original_status
        final = self._target_status(task_id, target_id) or original

        if final == original:
            # Undo any hover preview
            self._apply_speculative(task_id, original)
            self._sync[task_id] = Settled(original)
            return self._sync[task_id]

        self._apply_speculative(task_id, final)
        self._sync[task_id] = Pending(original, final)
        self._pending_id = task_id
        try:
            saved = await self.store.move_task(task_id, final)
        except TaskStoreError as exc:
            await self._rollback(task_id, original, final, exc)
        else:
            self.last_error = None
            self._commit(saved)
            logger.info("Moved %s %s -> %s", task_id, original.value, final.value)
        finally:
            self._pending_id = None
        return self._sync.get(task_id)

    # ------------------------------------------------------------------
    # Field edits, creation and deletion
    # ------------------------------------------------------------------

    async def create_task(self, data: TaskCreate) -> TaskRead:
        """
        Create a task on the server and add it to the board.

        Errors are recorded in last_error and re-raised so the caller keeps
        the form and its data.
        """
        try:
            task = await self.store.create_task(data)
        except TaskStoreError as exc:
            self.last_error = exc.message
            raise
        self.last_error = None
        self._commit(task)
        return task

    async def update_task(self, task_id: UUID, data: TaskUpdate) -> TaskRead:
        """Send a field update through the update entry point, never the move one."""
        try:
            task = await self.store.update_task(task_id, data)
        except TaskStoreError as exc:
            self.last_error = exc.message
            raise
        self.last_error = None
        self._commit(task)
        return task

    async def delete_task(self, task_id: UUID) -> None:
        try:
            await self.store.delete_task(task_id)
        except TaskStoreError as exc:
            self.last_error = exc.message
            raise
        self.last_error = None
        self._commit_removal(task_id)

    # ------------------------------------------------------------------
    # Presentation state
    # ------------------------------------------------------------------

    def toggle_card(self, task_id: UUID) -> bool:
        """Flip a card between minimized and expanded. Returns True when minimized."""
        if task_id in self.minimized_cards:
            self.minimized_cards.discard(task_id)
            return False
        self.minimized_cards.add(task_id)
        return True

    def toggle_column(self, status: TaskStatus) -> bool:
        """
        Minimize every card in a column, or expand them all if they already are.

        Returns True when the column ends up minimized.
        """
        ids = [task.id for task in self.tasks_in(status)]
        all_minimized = all(task_id in self.minimized_cards for task_id in ids)
        if all_minimized:
            self.minimized_cards.difference_update(ids)
        else:
            self.minimized_cards.update(ids)
        self.minimized_columns[status] = not all_minimized
        return self.minimized_columns[status]

    def set_column_color(self, status: TaskStatus, color: str) -> None:
        if color not in COLOR_OPTIONS:
            raise ValueError(f"Unknown column color {color!r}")
        self.column_colors[TaskStatus(status)] = color
