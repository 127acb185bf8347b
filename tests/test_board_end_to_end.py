"""Board engine and drag controller talking to the real API in-process."""

import asyncio
import uuid

import httpx
import pytest

from conftest import TEST_PASSWORD, seed_user
from taskboard.board.client import TaskStoreClient, TaskStoreError
from taskboard.board.drag import DragSessionController, Point, Rect, TargetKind
from taskboard.board.engine import BoardReconciliationEngine
from taskboard.board.state import RolledBack, Settled
from taskboard.core.enums import TaskStatus
from taskboard.core.permissions import Role
from taskboard.schemas.task import TaskCreate, TaskUpdate
from taskboard.schemas.user import Actor


async def _signed_in(app, email, http_client=None):
    if http_client is None:
        client = TaskStoreClient(base_url="http://testserver", transport=httpx.ASGITransport(app=app))
    else:
        client = TaskStoreClient(http_client=http_client)
    user = await client.login(email, TEST_PASSWORD)
    actor = Actor(id=user["id"], role=user["role"], assignee_id=user["assignee_id"])
    return client, BoardReconciliationEngine(client, actor)


@pytest.mark.db
def test_employee_denied_move_reverts_after_refetch(app, session_maker):
    async def main():
        await seed_user(session_maker, "admin@example.com", Role.ADMIN)
        await seed_user(session_maker, "emp@example.com", Role.EMPLOYEE, assignee_name="Erin")
        await seed_user(session_maker, "other@example.com", Role.EMPLOYEE, assignee_name="Omar")

        admin_client, admin_board = await _signed_in(app, "admin@example.com")
        task = await admin_board.create_task(TaskCreate(title="Omar's job", assignee="Omar"))

        client, board = await _signed_in(app, "emp@example.com")
        await board.load()
        # The UI would not offer the drag
        assert not board.drag_start(task.id)

        # Force the gesture through to check server-side enforcement and rollback
        board.actor = Actor(id=board.actor.id, role=Role.ADMIN)
        assert board.drag_start(task.id)
        board.drag_over(task.id, "done")
        state = await board.drag_end(task.id, "done")

        assert isinstance(state, RolledBack)
        assert "assigned to you" in board.last_error
        assert board.task(task.id).status == TaskStatus.TODO

        persisted = await admin_client.list_tasks()
        assert persisted[0].status == TaskStatus.TODO

        await client.aclose()
        await admin_client.aclose()

    asyncio.run(main())


@pytest.mark.db
def test_supervisor_moves_admin_task(app, session_maker):
    async def main():
        await seed_user(session_maker, "admin@example.com", Role.ADMIN)
        await seed_user(session_maker, "sup@example.com", Role.SUPERVISOR)

        admin_client, admin_board = await _signed_in(app, "admin@example.com")
        task = await admin_board.create_task(
            TaskCreate(title="Ship report", status=TaskStatus.TODO, priority="high")
        )

        client, board = await _signed_in(app, "sup@example.com")
        await board.load()
        assert board.drag_start(task.id)
        state = await board.drag_end(task.id, "in-progress")
        assert state == Settled(TaskStatus.IN_PROGRESS)

        tasks = await admin_client.list_tasks()
        assert [(t.id, t.status) for t in tasks] == [(task.id, TaskStatus.IN_PROGRESS)]

        edited = await board.update_task(task.id, TaskUpdate(tags=["urgent"]))
        assert edited.tags == ["urgent"]
        assert edited.status == TaskStatus.IN_PROGRESS

        await client.aclose()
        await admin_client.aclose()

    asyncio.run(main())


@pytest.mark.db
def test_pointer_drag_dropped_outside_makes_no_call(app, session_maker):
    async def main():
        await seed_user(session_maker, "admin@example.com", Role.ADMIN)
        sent = []
        recording = {"on": False}

        async def spy(request: httpx.Request):
            if recording["on"]:
                sent.append((request.method, request.url.path))

        http = httpx.AsyncClient(
            transport=httpx.ASGITransport(app=app),
            base_url="http://testserver",
            event_hooks={"request": [spy]},
        )
        client, board = await _signed_in(app, "admin@example.com", http_client=http)
        task = await board.create_task(TaskCreate(title="Wander"))
        await board.load()

        controller = DragSessionController(board.drag_start, board.drag_over, board.drag_end, activation_distance=5)
        controller.register_target("todo", TargetKind.COLUMN, Rect(0, 0, 100, 400))
        controller.register_target("in-progress", TargetKind.COLUMN, Rect(120, 0, 100, 400))
        controller.register_target("done", TargetKind.COLUMN, Rect(240, 0, 100, 400))
        controller.register_target(task.id, TargetKind.CARD, Rect(10, 10, 80, 40))

        recording["on"] = True

        controller.pointer_down(task.id, Point(20, 20))
        await controller.pointer_move(Point(260, 20))
        # Hovering Done shows the card there without asking the server
        assert board.task(task.id).status == TaskStatus.DONE
        await controller.pointer_up(Point(1000, 1000))

        assert sent == []
        assert board.task(task.id).status == TaskStatus.TODO
        assert board.sync_state(task.id) == Settled(TaskStatus.TODO)

        persisted = await client.list_tasks()
        assert persisted[0].status == TaskStatus.TODO
        await http.aclose()

    asyncio.run(main())


@pytest.mark.db
def test_client_maps_error_payloads(app, session_maker):
    async def main():
        await seed_user(session_maker, "view@example.com", Role.VIEWER)
        client, board = await _signed_in(app, "view@example.com")

        with pytest.raises(TaskStoreError) as exc:
            await board.create_task(TaskCreate(title="Nope"))
        assert exc.value.is_forbidden
        assert exc.value.status_code == 403
        assert board.last_error == "You do not have permission to create tasks"

        with pytest.raises(TaskStoreError) as exc:
            await client.login("view@example.com", "Wrong-pass1")
        assert exc.value.code == "unauthenticated"
        await client.aclose()

    asyncio.run(main())


@pytest.mark.unit
@pytest.mark.parametrize("move_reply", [{"id": "not-a-task"}, "<html>oops</html>"])
def test_malformed_move_reply_rolls_back(move_reply):
    task_id = "5b0e8f53-3d5a-4d0e-9a59-2f5c1e0c9a11"
    stored = {
        "id": task_id,
        "title": "Odd reply",
        "priority": "medium",
        "status": "todo",
        "tags": [],
    }

    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "GET":
            return httpx.Response(200, json=[stored])
        if isinstance(move_reply, str):
            return httpx.Response(200, text=move_reply)
        return httpx.Response(200, json=move_reply)

    async def main():
        client = TaskStoreClient(base_url="http://testserver", transport=httpx.MockTransport(handler))
        board = BoardReconciliationEngine(client, Actor(id=uuid.uuid4(), role=Role.ADMIN))
        await board.load()

        assert board.drag_start(task_id)
        state = await board.drag_end(task_id, "done")

        assert isinstance(state, RolledBack)
        assert not board.has_pending_move
        assert board.task(task_id).status == TaskStatus.TODO
        assert board.last_error.startswith("The task store sent")
        await client.aclose()

    asyncio.run(main())
