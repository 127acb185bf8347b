"""Optimistic board engine against an in-memory task store."""

import asyncio
import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional

import pytest

from taskboard.board.client import TaskStoreError
from taskboard.board.engine import BoardReconciliationEngine
from taskboard.board.state import Pending, RolledBack, Settled
from taskboard.core.enums import TaskStatus
from taskboard.core.permissions import Role
from taskboard.schemas.task import TaskCreate, TaskRead, TaskUpdate
from taskboard.schemas.user import Actor


def _task(title: str, status: TaskStatus = TaskStatus.TODO, assignee_id=None) -> TaskRead:
    now = datetime(2026, 10, 1, tzinfo=timezone.utc)
    return TaskRead(
        id=uuid.uuid4(),
        title=title,
        priority="medium",
        status=status,
        assignee_id=assignee_id,
        created_at=now,
        updated_at=now,
    )


class FakeStore:
    """Records calls; move failures are configured per task."""

    def __init__(self, tasks: List[TaskRead]):
        self.tasks: Dict[uuid.UUID, TaskRead] = {task.id: task for task in tasks}
        self.calls: List[tuple] = []
        self.move_errors: Dict[uuid.UUID, TaskStoreError] = {}
        self.fail_create: Optional[TaskStoreError] = None
        self.fail_list: Optional[TaskStoreError] = None
        self.pending_check = None

    async def list_tasks(self):
        self.calls.append(("list",))
        if self.fail_list:
            raise self.fail_list
        return list(self.tasks.values())

    async def create_task(self, data: TaskCreate):
        self.calls.append(("create", data.title))
        if self.fail_create:
            raise self.fail_create
        task = _task(data.title, data.status)
        self.tasks[task.id] = task
        return task

    async def update_task(self, task_id, data: TaskUpdate):
        self.calls.append(("update", task_id))
        task = self.tasks[task_id].model_copy(update=data.model_dump(exclude_unset=True))
        self.tasks[task_id] = task
        return task

    async def move_task(self, task_id, status):
        self.calls.append(("move", task_id, status))
        if self.pending_check:
            self.pending_check()
        if task_id in self.move_errors:
            raise self.move_errors[task_id]
        task = self.tasks[task_id].model_copy(update={"status": status})
        self.tasks[task_id] = task
        return task

    async def delete_task(self, task_id):
        self.calls.append(("delete", task_id))
        self.tasks.pop(task_id)

    def server_calls(self):
        return [call for call in self.calls if call[0] != "list"]


def _admin():
    return Actor(id=uuid.uuid4(), role=Role.ADMIN)


def _loaded(tasks, actor=None):
    store = FakeStore(tasks)
    engine = BoardReconciliationEngine(store, actor or _admin())
    asyncio.run(engine.load())
    return store, engine


@pytest.mark.unit
def test_load_groups_tasks_by_column():
    todo = _task("a")
    done = _task("b", TaskStatus.DONE)
    _, engine = _loaded([todo, done])

    assert [task.id for task in engine.tasks_in(TaskStatus.TODO)] == [todo.id]
    assert [task.id for task in engine.tasks_in(TaskStatus.DONE)] == [done.id]
    assert engine.stats() == {"total": 2, "todo": 1, "in-progress": 0, "done": 1}
    assert engine.sync_state(todo.id) == Settled(TaskStatus.TODO)
    assert [column.title for column, _ in engine.columns()] == ["TODO", "In Progress", "Done"]


@pytest.mark.unit
def test_drop_on_column_commits_move():
    task = _task("a")
    store, engine = _loaded([task])

    assert engine.drag_start(task.id)
    assert engine.drag_over(task.id, "done") == TaskStatus.DONE
    assert engine.task(task.id).status == TaskStatus.DONE
    assert store.server_calls() == []

    state = asyncio.run(engine.drag_end(task.id, "done"))
    assert state == Settled(TaskStatus.DONE)
    assert store.server_calls() == [("move", task.id, TaskStatus.DONE)]
    assert engine.task(task.id).status == TaskStatus.DONE
    assert engine.last_error is None


@pytest.mark.unit
def test_drop_on_task_uses_that_tasks_column():
    task = _task("a")
    other = _task("b", TaskStatus.IN_PROGRESS)
    store, engine = _loaded([task, other])

    engine.drag_start(task.id)
    asyncio.run(engine.drag_end(str(task.id), str(other.id)))

    assert store.server_calls() == [("move", task.id, TaskStatus.IN_PROGRESS)]
    assert engine.task(task.id).status == TaskStatus.IN_PROGRESS


@pytest.mark.unit
def test_hover_then_drop_nowhere_makes_no_call():
    task = _task("a")
    store, engine = _loaded([task])

    engine.drag_start(task.id)
    engine.drag_over(task.id, "done")
    assert engine.task(task.id).status == TaskStatus.DONE

    state = asyncio.run(engine.drag_end(task.id, None))
    assert state == Settled(TaskStatus.TODO)
    assert engine.task(task.id).status == TaskStatus.TODO
    assert store.server_calls() == []
    assert store.tasks[task.id].status == TaskStatus.TODO


@pytest.mark.unit
def test_drop_back_in_original_column_makes_no_call():
    task = _task("a", TaskStatus.IN_PROGRESS)
    store, engine = _loaded([task])

    engine.drag_start(task.id)
    engine.drag_over(task.id, "todo")
    asyncio.run(engine.drag_end(task.id, "in-progress"))

    assert store.server_calls() == []
    assert engine.sync_state(task.id) == Settled(TaskStatus.IN_PROGRESS)


@pytest.mark.unit
def test_drop_on_unknown_target_cancels():
    task = _task("a")
    store, engine = _loaded([task])

    engine.drag_start(task.id)
    asyncio.run(engine.drag_end(task.id, "archive"))
    assert store.server_calls() == []
    assert engine.task(task.id).status == TaskStatus.TODO


@pytest.mark.unit
def test_drag_over_nothing_shows_original_column():
    task = _task("a")
    _, engine = _loaded([task])

    engine.drag_start(task.id)
    engine.drag_over(task.id, "done")
    assert engine.drag_over(task.id, None) == TaskStatus.TODO
    assert engine.task(task.id).status == TaskStatus.TODO


@pytest.mark.unit
def test_forbidden_move_rolls_back_and_surfaces_reason():
    task = _task("not mine")
    store, engine = _loaded([task])
    store.move_errors[task.id] = TaskStoreError(
        "You can only move tasks assigned to you", code="forbidden", status_code=403
    )

    assert engine.drag_start(task.id)
    engine.drag_over(task.id, "done")
    loads_before = store.calls.count(("list",))
    state = asyncio.run(engine.drag_end(task.id, "done"))

    assert isinstance(state, RolledBack)
    assert state.from_status == TaskStatus.TODO
    assert state.attempted_status == TaskStatus.DONE
    assert engine.last_error == "You can only move tasks assigned to you"
    assert store.calls.count(("list",)) == loads_before + 1
    assert engine.task(task.id).status == TaskStatus.TODO


@pytest.mark.unit
def test_network_failure_rolls_back_like_any_other_error():
    task = _task("a")
    store, engine = _loaded([task])
    store.move_errors[task.id] = TaskStoreError("Could not reach the task store: boom")

    engine.drag_start(task.id)
    engine.drag_over(task.id, "done")
    state = asyncio.run(engine.drag_end(task.id, "done"))

    assert isinstance(state, RolledBack)
    assert engine.task(task.id).status == TaskStatus.TODO
    assert engine.last_error.startswith("Could not reach")


@pytest.mark.unit
def test_refetch_picks_up_other_changes():
    task = _task("a")
    store, engine = _loaded([task])
    store.move_errors[task.id] = TaskStoreError("nope", code="forbidden", status_code=403)
    newcomer = _task("added elsewhere", TaskStatus.DONE)
    store.tasks[newcomer.id] = newcomer

    engine.drag_start(task.id)
    asyncio.run(engine.drag_end(task.id, "done"))

    assert engine.task(newcomer.id) is not None
    assert engine.sync_state(newcomer.id) == Settled(TaskStatus.DONE)


@pytest.mark.unit
def test_card_returns_home_when_refetch_also_fails():
    task = _task("a")
    store, engine = _loaded([task])
    store.move_errors[task.id] = TaskStoreError("nope", code="forbidden", status_code=403)
    store.fail_list = TaskStoreError("Could not reach the task store: down")

    engine.drag_start(task.id)
    engine.drag_over(task.id, "done")
    state = asyncio.run(engine.drag_end(task.id, "done"))

    assert isinstance(state, RolledBack)
    assert engine.task(task.id).status == TaskStatus.TODO
    assert engine.last_error == "Could not reach the task store: down"
    assert not engine.has_pending_move


@pytest.mark.unit
def test_move_is_pending_while_in_flight_and_blocks_new_drags():
    first = _task("a")
    second = _task("b")
    store, engine = _loaded([first, second])
    seen = {}

    def check():
        seen["state"] = engine.sync_state(first.id)
        seen["second_drag"] = engine.drag_start(second.id)

    store.pending_check = check
    engine.drag_start(first.id)
    asyncio.run(engine.drag_end(first.id, "done"))

    assert seen["state"] == Pending(TaskStatus.TODO, TaskStatus.DONE)
    assert seen["second_drag"] is False
    assert not engine.has_pending_move
    assert engine.drag_start(second.id)


@pytest.mark.unit
def test_drag_refused_for_unknown_task_and_read_only_actor():
    task = _task("a")
    viewer = Actor(id=uuid.uuid4(), role=Role.VIEWER)
    _, engine = _loaded([task], actor=viewer)

    assert not engine.drag_start(uuid.uuid4())
    assert not engine.drag_start(task.id)
    assert engine.permissions_for(task.id)["is_read_only"] is True

    anonymous = BoardReconciliationEngine(FakeStore([task]))
    asyncio.run(anonymous.load())
    assert not anonymous.can_drag(task.id)


@pytest.mark.unit
def test_employee_can_drag_only_own_task():
    mine = uuid.uuid4()
    own = _task("own", assignee_id=mine)
    other = _task("other", assignee_id=uuid.uuid4())
    employee = Actor(id=uuid.uuid4(), role=Role.EMPLOYEE, assignee_id=mine)
    _, engine = _loaded([own, other], actor=employee)

    assert engine.can_drag(own.id)
    assert not engine.can_drag(other.id)


@pytest.mark.unit
def test_field_edit_uses_update_not_move():
    task = _task("a")
    store, engine = _loaded([task])

    updated = asyncio.run(engine.update_task(task.id, TaskUpdate(title="renamed")))
    assert updated.title == "renamed"
    assert engine.task(task.id).title == "renamed"
    assert store.server_calls() == [("update", task.id)]


@pytest.mark.unit
def test_failed_create_keeps_error_and_raises():
    store, engine = _loaded([])
    store.fail_create = TaskStoreError("You do not have permission to create tasks", code="forbidden", status_code=403)

    with pytest.raises(TaskStoreError):
        asyncio.run(engine.create_task(TaskCreate(title="x")))
    assert engine.last_error == "You do not have permission to create tasks"
    assert engine.tasks == []

    store.fail_create = None
    created = asyncio.run(engine.create_task(TaskCreate(title="x")))
    assert engine.task(created.id) is not None
    assert engine.last_error is None


@pytest.mark.unit
def test_delete_removes_card():
    task = _task("a")
    _, engine = _loaded([task])
    engine.toggle_card(task.id)

    asyncio.run(engine.delete_task(task.id))
    assert engine.tasks == []
    assert engine.sync_state(task.id) is None
    assert task.id not in engine.minimized_cards


@pytest.mark.unit
def test_presentation_state():
    a = _task("a")
    b = _task("b")
    _, engine = _loaded([a, b])

    assert engine.toggle_card(a.id) is True
    assert engine.toggle_card(a.id) is False

    assert engine.toggle_column(TaskStatus.TODO) is True
    assert engine.minimized_cards == {a.id, b.id}
    assert engine.toggle_column(TaskStatus.TODO) is False
    assert engine.minimized_cards == set()

    engine.set_column_color(TaskStatus.DONE, "orange")
    assert engine.column_colors[TaskStatus.DONE] == "orange"
    with pytest.raises(ValueError):
        engine.set_column_color(TaskStatus.DONE, "chartreuse")
