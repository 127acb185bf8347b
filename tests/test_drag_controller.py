"""Pointer gestures to board callbacks."""

import asyncio

import pytest

from taskboard.board.drag import (
    DragSessionController,
    DropTarget,
    Point,
    Rect,
    TargetKind,
    closest_target,
    corner_distance,
)

CARD = Rect(10, 10, 80, 40)


class Recorder:
    def __init__(self, allow_start=True):
        self.events = []
        self.allow_start = allow_start

    def start(self, task_id):
        self.events.append(("start", task_id))
        return self.allow_start

    def over(self, task_id, target_id):
        self.events.append(("over", task_id, target_id))

    async def end(self, task_id, target_id):
        self.events.append(("end", task_id, target_id))


def _controller(recorder=None, distance=8):
    recorder = recorder or Recorder()
    controller = DragSessionController(recorder.start, recorder.over, recorder.end, activation_distance=distance)
    controller.register_target("todo", TargetKind.COLUMN, Rect(0, 0, 100, 400))
    controller.register_target("in-progress", TargetKind.COLUMN, Rect(120, 0, 100, 400))
    controller.register_target("done", TargetKind.COLUMN, Rect(240, 0, 100, 400))
    controller.register_target("card-1", TargetKind.CARD, CARD)
    return controller, recorder


@pytest.mark.unit
def test_short_press_is_a_click():
    controller, recorder = _controller()

    async def main():
        controller.pointer_down("card-1", Point(20, 20))
        await controller.pointer_move(Point(23, 24))
        return await controller.pointer_up()

    assert asyncio.run(main()) is None
    assert recorder.events == []


@pytest.mark.unit
def test_drag_across_columns_reports_each_target_once():
    controller, recorder = _controller()

    async def main():
        controller.pointer_down("card-1", Point(20, 20))
        await controller.pointer_move(Point(260, 20))
        await controller.pointer_move(Point(262, 22))
        return await controller.pointer_up()

    dropped = asyncio.run(main())
    assert dropped == "done"
    assert recorder.events == [
        ("start", "card-1"),
        ("over", "card-1", "done"),
        ("end", "card-1", "done"),
    ]


@pytest.mark.unit
def test_drop_away_from_every_target_reports_none():
    controller, recorder = _controller()

    async def main():
        controller.pointer_down("card-1", Point(20, 20))
        await controller.pointer_move(Point(260, 20))
        return await controller.pointer_up(Point(900, 900))

    assert asyncio.run(main()) is None
    assert recorder.events[-1] == ("end", "card-1", None)


@pytest.mark.unit
def test_refused_start_abandons_gesture():
    controller, recorder = _controller(Recorder(allow_start=False))

    async def main():
        controller.pointer_down("card-1", Point(20, 20))
        await controller.pointer_move(Point(200, 20))
        await controller.pointer_up()

    asyncio.run(main())
    assert recorder.events == [("start", "card-1")]
    assert not controller.is_dragging


@pytest.mark.unit
def test_cancel_reports_drop_on_nothing():
    controller, recorder = _controller()

    async def main():
        controller.pointer_down("card-1", Point(20, 20))
        await controller.pointer_move(Point(140, 20))
        await controller.cancel()

    asyncio.run(main())
    assert recorder.events[-1] == ("end", "card-1", None)
    assert controller.active_id is None


@pytest.mark.unit
def test_unknown_card_and_second_press_are_ignored():
    controller, _ = _controller()
    assert not controller.pointer_down("ghost", Point(0, 0))
    assert controller.pointer_down("card-1", Point(20, 20))
    assert not controller.pointer_down("card-1", Point(20, 20))


@pytest.mark.unit
def test_card_beats_column_when_closer():
    dragged = Rect(12, 62, 80, 40)
    targets = [
        DropTarget("todo", TargetKind.COLUMN, Rect(0, 0, 100, 400)),
        DropTarget("card-2", TargetKind.CARD, Rect(10, 60, 80, 40)),
    ]
    assert closest_target(dragged, targets).id == "card-2"


@pytest.mark.unit
def test_ties_go_to_first_registered():
    dragged = Rect(0, 0, 10, 10)
    twin = Rect(0, 0, 10, 10)
    targets = [
        DropTarget("first", TargetKind.COLUMN, twin),
        DropTarget("second", TargetKind.COLUMN, twin),
    ]
    assert corner_distance(dragged, twin) == 0
    assert closest_target(dragged, targets).id == "first"
    assert closest_target(dragged, list(reversed(targets))).id == "second"


@pytest.mark.unit
def test_dragged_card_never_targets_itself():
    targets = [DropTarget("card-1", TargetKind.CARD, CARD)]
    assert closest_target(CARD, targets, exclude="card-1") is None


@pytest.mark.unit
def test_reregistering_keeps_order():
    controller, _ = _controller()
    controller.register_target("todo", TargetKind.COLUMN, Rect(0, 0, 50, 50))
    assert [target.id for target in controller.targets][0] == "todo"
    controller.unregister_target("done")
    assert "done" not in [target.id for target in controller.targets]
