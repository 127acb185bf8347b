"""
Drag session controller: turns pointer events into the board's
drag_start / drag_over / drag_end callbacks.

A press only becomes a drag once the pointer has travelled
activation_distance; shorter gestures are clicks and produce no callbacks.
While dragging, the hovered target is the registered drop target (column or
card) whose corners lie closest to the dragged card's corners.
"""

import inspect
import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, List, Optional, Tuple

from taskboard.core.config import settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Point:
    x: float
    y: float

    def distance_to(self, other: "Point") -> float:
        return math.hypot(self.x - other.x, self.y - other.y)


@dataclass(frozen=True)
class Rect:
    left: float
    top: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def bottom(self) -> float:
        return self.top + self.height

    @property
    def corners(self) -> Tuple[Point, Point, Point, Point]:
        return (
            Point(self.left, self.top),
            Point(self.right, self.top),
            Point(self.left, self.bottom),
            Point(self.right, self.bottom),
        )

    def translated(self, dx: float, dy: float) -> "Rect":
        return Rect(self.left + dx, self.top + dy, self.width, self.height)

    def intersects(self, other: "Rect") -> bool:
        return (
            self.left <= other.right
            and other.left <= self.right
            and self.top <= other.bottom
            and other.top <= self.bottom
        )


class TargetKind(str, Enum):
    COLUMN = "column"
    CARD = "card"


@dataclass(frozen=True)
class DropTarget:
    id: str
    kind: TargetKind
    rect: Rect


def corner_distance(a: Rect, b: Rect) -> float:
    """Sum of distances between matching corners of two rectangles."""
    return sum(p.distance_to(q) for p, q in zip(a.corners, b.corners))


def closest_target(dragged: Rect, targets: List[DropTarget], exclude: Optional[str] = None) -> Optional[DropTarget]:
    """
    Nearest target overlapping the dragged rectangle.

    Targets are compared by corner_distance; equal distances go to the one
    registered first.
    """
    best: Optional[DropTarget] = None
    best_distance = math.inf
    for target in targets:
        if target.id == exclude or not dragged.intersects(target.rect):
            continue
        distance = corner_distance(dragged, target.rect)
        if distance < best_distance:
            best = target
            best_distance = distance
    return best


async def _maybe_await(result: Any) -> Any:
    if inspect.isawaitable(result):
        return await result
    return result


@dataclass
class _Gesture:
    task_id: str
    origin: Point
    rect: Rect
    active: bool = False
    over: Optional[str] = None
    current: Optional[Point] = None


class DragSessionController:
    """One pointer, one gesture at a time."""

    def __init__(
        self,
        on_drag_start: Callable[[str], Any],
        on_drag_over: Callable[[str, Optional[str]], Any],
        on_drag_end: Callable[[str, Optional[str]], Any],
        activation_distance: Optional[float] = None,
    ):
        self.on_drag_start = on_drag_start
        self.on_drag_over = on_drag_over
        self.on_drag_end = on_drag_end
        self.activation_distance = (
            settings.DRAG_ACTIVATION_DISTANCE if activation_distance is None else activation_distance
        )
        self._targets: List[DropTarget] = []
        self._gesture: Optional[_Gesture] = None

    # Targets ----------------------------------------------------------

    @property
    def targets(self) -> List[DropTarget]:
        return list(self._targets)

    def register_target(self, target_id, kind: TargetKind, rect: Rect) -> DropTarget:
        """Add a drop target, or move an existing one to a new rect keeping its order."""
        target = DropTarget(str(target_id), TargetKind(kind), rect)
        for index, existing in enumerate(self._targets):
            if existing.id == target.id:
                self._targets[index] = target
                return target
        self._targets.append(target)
        return target

    def unregister_target(self, target_id) -> None:
        self._targets = [t for t in self._targets if t.id != str(target_id)]

    def set_targets(self, targets: List[DropTarget]) -> None:
        self._targets = list(targets)

    def _rect_of(self, target_id: str) -> Optional[Rect]:
        for target in self._targets:
            if target.id == target_id:
                return target.rect
        return None

    # Gesture ----------------------------------------------------------

    @property
    def is_dragging(self) -> bool:
        return self._gesture is not None and self._gesture.active

    @property
    def active_id(self) -> Optional[str]:
        return self._gesture.task_id if self.is_dragging else None

    @property
    def over_id(self) -> Optional[str]:
        return self._gesture.over if self.is_dragging else None

    def pointer_down(self, task_id, point: Point, rect: Optional[Rect] = None) -> bool:
        """
        Press on a card. Nothing is reported until the pointer moves far enough.

        rect defaults to the card's registered rect; returns False when the
        card is unknown or a gesture is already running.
        """
        if self._gesture is not None:
            return False
        task_id = str(task_id)
        rect = rect or self._rect_of(task_id)
        if rect is None:
            logger.debug("pointer_down on unregistered card %s", task_id)
            return False
        self._gesture = _Gesture(task_id=task_id, origin=point, rect=rect, current=point)
        return True

    def _dragged_rect(self, gesture: _Gesture) -> Rect:
        point = gesture.current or gesture.origin
        return gesture.rect.translated(point.x - gesture.origin.x, point.y - gesture.origin.y)

    async def pointer_move(self, point: Point) -> Optional[str]:
        """
        Track the pointer. Returns the hovered target id while dragging.

        on_drag_over fires only when the hovered target changes.
        """
        gesture = self._gesture
        if gesture is None:
            return None
        gesture.current = point

        if not gesture.active:
            if gesture.origin.distance_to(point) < self.activation_distance:
                return None
            started = await _maybe_await(self.on_drag_start(gesture.task_id))
            if started is False:
                # Refused by the board (pending move, no permission)
                self._gesture = None
                return None
            gesture.active = True

        target = closest_target(self._dragged_rect(gesture), self._targets, exclude=gesture.task_id)
        over = target.id if target else None
        if over != gesture.over:
            gesture.over = over
            await _maybe_await(self.on_drag_over(gesture.task_id, over))
        return over

    async def pointer_up(self, point: Optional[Point] = None) -> Optional[str]:
        """
        Release. Fires on_drag_end with the final target, or None when the card
        was dropped away from every target. A click (never activated) fires nothing.
        """
        gesture = self._gesture
        self._gesture = None
        if gesture is None or not gesture.active:
            return None
        if point is not None:
            gesture.current = point

        target = closest_target(self._dragged_rect(gesture), self._targets, exclude=gesture.task_id)
        dropped = target.id if target else None
        await _maybe_await(self.on_drag_end(gesture.task_id, dropped))
        return dropped

    async def cancel(self) -> None:
        """Abort the gesture (escape key, lost pointer). Reported as a drop on nothing."""
        gesture = self._gesture
        self._gesture = None
        if gesture is not None and gesture.active:
            await _maybe_await(self.on_drag_end(gesture.task_id, None))
