"""Press-and-hold drag reordering of a vertical list.

The engine turns a pointer trajectory into a target index, keeps an
insertion marker on screen while the pointer moves, scrolls the list when
the pointer sits near the top or bottom edge, and reports the new full
ordering on release.

It knows nothing about Flet. Rendering goes through a ``ReorderSurface``
(see ``ui/components/reorder_surface.py``) and results go out through
``DragCallbacks``. Drag state lives in a ``ReorderContext`` that the list
view owns; the engine itself only holds configuration.

Lifecycle of one gesture::

    IDLE -> ARM_PENDING -> DRAGGING -> COMMITTED | CANCELLED -> IDLE

Moving further than the tolerance while ARM_PENDING cancels the gesture,
so a swipe over the list scrolls it instead of grabbing a row. The same happens
when the list itself reports a scroll (``list_scrolled``), for touch
scrolls that the row never sees.
"""
import asyncio
import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, List, Optional, Protocol, Tuple

from config import (
    ARM_DELAY_MS,
    AUTOSCROLL_EDGE_PX,
    AUTOSCROLL_STEP_PX,
    FRAME_INTERVAL_S,
    INTERACTIVE_TARGETS,
    MOVE_TOLERANCE_PX,
    PressTarget,
)
from models.entities import ViewIdentity

logger = logging.getLogger(__name__)


class DragState(Enum):
    IDLE = "idle"
    ARM_PENDING = "arm_pending"
    DRAGGING = "dragging"
    COMMITTED = "committed"
    CANCELLED = "cancelled"


class ReorderSurface(Protocol):
    """What the engine needs from a rendered list.

    Coordinates are viewport coordinates: 0 is the top of the visible part
    of the list. While a row is detached the marker takes its place in the
    layout, so midpoints reflect the list as the user currently sees it.
    """

    def row_ids(self) -> List[str]:
        """Ids of all rows in display order, including a detached one."""
        ...

    def row_midpoints(self, exclude: str) -> List[Tuple[str, float]]:
        """(id, vertical midpoint) of every row except ``exclude``, in order."""
        ...

    def viewport_height(self) -> float:
        ...

    def scroll_by(self, dy: float) -> float:
        """Scroll the list; returns the distance actually scrolled."""
        ...

    def detach(self, row_id: str) -> None:
        ...

    def place_marker(self, index: int) -> None:
        """Show the insertion marker before the ``index``-th remaining row."""
        ...

    def remove_marker(self) -> None:
        ...

    def reinsert(self, row_id: str, index: int) -> None:
        """Put a detached row back so that it ends up at ``index``."""
        ...


ScheduleLater = Callable[[float, Callable[[], None]], Any]


def _loop_call_later(delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
    return asyncio.get_running_loop().call_later(delay, callback)


@dataclass
class DragCallbacks:
    """Hooks the list view wires into the engine. All optional."""
    on_armed: Optional[Callable[[str], None]] = None
    on_moved: Optional[Callable[[float, int], None]] = None
    on_committed: Optional[Callable[[List[str]], None]] = None
    on_cancelled: Optional[Callable[[str], None]] = None


@dataclass
class DragSession:
    """One gesture, from press to release or cancel."""
    row_id: str
    start_x: float
    start_y: float
    original_ids: List[str]
    state: DragState = DragState.ARM_PENDING
    pointer_y: float = 0.0
    marker_index: Optional[int] = None
    scroll_direction: int = 0
    arm_handle: Any = None

    @property
    def original_index(self) -> int:
        return self.original_ids.index(self.row_id)

    @property
    def other_ids(self) -> List[str]:
        return [i for i in self.original_ids if i != self.row_id]

    def ordered_ids(self) -> List[str]:
        """Full ordering if the row were dropped at the marker now."""
        others = self.other_ids
        index = self.original_index if self.marker_index is None else self.marker_index
        index = max(0, min(index, len(others)))
        return others[:index] + [self.row_id] + others[index:]


@dataclass
class ReorderContext:
    """Drag state for one rendered list, owned by the list view.

    At most one session exists per context; a new press replaces the
    current one.
    """
    view: ViewIdentity
    surface: ReorderSurface
    session: Optional[DragSession] = None
    scroll_handle: Any = None

    @property
    def state(self) -> DragState:
        return self.session.state if self.session else DragState.IDLE

    @property
    def is_dragging(self) -> bool:
        return self.state == DragState.DRAGGING


class ReorderEngine:
    """Gesture state machine shared by every row of a list.

    Args:
        callbacks: Hooks for armed / moved / committed / cancelled.
        schedule_later: ``(delay_seconds, callback) -> handle`` where the
            handle has ``cancel()``. Defaults to the running asyncio loop's
            ``call_later``.
    """

    def __init__(
        self,
        callbacks: Optional[DragCallbacks] = None,
        schedule_later: Optional[ScheduleLater] = None,
        arm_delay_ms: int = ARM_DELAY_MS,
        move_tolerance_px: float = MOVE_TOLERANCE_PX,
        edge_px: float = AUTOSCROLL_EDGE_PX,
        scroll_step_px: float = AUTOSCROLL_STEP_PX,
        frame_interval_s: float = FRAME_INTERVAL_S,
    ) -> None:
        self.callbacks = callbacks or DragCallbacks()
        self._schedule_later = schedule_later or _loop_call_later
        self.arm_delay_s = arm_delay_ms / 1000
        self.move_tolerance_px = move_tolerance_px
        self.edge_px = edge_px
        self.scroll_step_px = scroll_step_px
        self.frame_interval_s = frame_interval_s

    # -- entry points --------------------------------------------------------

    def press(
        self,
        ctx: ReorderContext,
        row_id: str,
        x: float,
        y: float,
        target: str = PressTarget.ROW,
    ) -> bool:
        """Pointer went down on a row. Returns True if a session was armed."""
        if target in INTERACTIVE_TARGETS:
            return False

        if ctx.session is not None:
            logger.debug(f"Press on {row_id} supersedes session for {ctx.session.row_id}")
            self._abort(ctx)

        ids = ctx.surface.row_ids()
        if row_id not in ids:
            logger.debug(f"Press on unknown row {row_id} ignored")
            return False

        session = DragSession(row_id=row_id, start_x=x, start_y=y, original_ids=list(ids), pointer_y=y)
        ctx.session = session
        session.arm_handle = self._schedule_later(
            self.arm_delay_s, lambda: self._on_arm_timer(ctx, session)
        )
        return True

    def move(self, ctx: ReorderContext, x: float, y: float) -> None:
        """Pointer moved anywhere while a session exists."""
        session = ctx.session
        if session is None:
            return
        session.pointer_y = y

        if session.state == DragState.ARM_PENDING:
            if math.hypot(x - session.start_x, y - session.start_y) > self.move_tolerance_px:
                logger.debug(f"Moved before arming, releasing {session.row_id}")
                self._abort(ctx)
            return

        if session.state == DragState.DRAGGING:
            self._update_marker(ctx, session)
            if self.callbacks.on_moved:
                self.callbacks.on_moved(y, session.marker_index)
            self._update_autoscroll(ctx, session)

    def release(self, ctx: ReorderContext) -> Optional[List[str]]:
        """Pointer went up. Returns the committed ordering, or None for a no-op."""
        session = ctx.session
        if session is None:
            return None

        if session.state != DragState.DRAGGING:
            # Released before the arm timer fired: a plain tap
            self._cancel_handle(session.arm_handle)
            session.state = DragState.IDLE
            self._end(ctx, session)
            return None

        self._stop_autoscroll(ctx, session)
        new_ids = session.ordered_ids()
        final_index = new_ids.index(session.row_id)
        ctx.surface.remove_marker()
        ctx.surface.reinsert(session.row_id, final_index)
        session.state = DragState.COMMITTED
        self._end(ctx, session)

        if new_ids == session.original_ids:
            logger.debug(f"{session.row_id} dropped where it started")
            return None

        logger.debug(f"{session.row_id} moved {session.original_index} -> {final_index}")
        if self.callbacks.on_committed:
            self.callbacks.on_committed(new_ids)
        return new_ids

    def cancel(self, ctx: ReorderContext) -> None:
        """Pointer-cancel, or the list is about to be re-rendered."""
        if ctx.session is not None:
            self._abort(ctx)

    def list_scrolled(self, ctx: ReorderContext) -> None:
        """The list was scrolled by the user.

        A touch that turns into a scroll never reaches the row again, so a
        pending press is dropped here. An active drag is left alone: only
        the engine scrolls the list while dragging.
        """
        session = ctx.session
        if session is not None and session.state == DragState.ARM_PENDING:
            logger.debug(f"List scrolled, releasing {session.row_id}")
            self._abort(ctx)

    # -- internals -----------------------------------------------------------

    def _on_arm_timer(self, ctx: ReorderContext, session: DragSession) -> None:
        session.arm_handle = None
        if ctx.session is not session or session.state != DragState.ARM_PENDING:
            return
        session.state = DragState.DRAGGING
        session.marker_index = session.original_index
        ctx.surface.detach(session.row_id)
        ctx.surface.place_marker(session.marker_index)
        logger.debug(f"Dragging {session.row_id} from index {session.marker_index}")
        if self.callbacks.on_armed:
            self.callbacks.on_armed(session.row_id)
        self._update_marker(ctx, session)
        self._update_autoscroll(ctx, session)

    def _target_index(self, ctx: ReorderContext, session: DragSession) -> int:
        """Before the first remaining row whose midpoint is below the pointer."""
        midpoints = ctx.surface.row_midpoints(exclude=session.row_id)
        for index, (_, mid_y) in enumerate(midpoints):
            if mid_y > session.pointer_y:
                return index
        return len(midpoints)

    def _update_marker(self, ctx: ReorderContext, session: DragSession) -> None:
        index = self._target_index(ctx, session)
        if index != session.marker_index:
            session.marker_index = index
            ctx.surface.place_marker(index)

    def _update_autoscroll(self, ctx: ReorderContext, session: DragSession) -> None:
        y = session.pointer_y
        if y < self.edge_px:
            session.scroll_direction = -1
        elif y > ctx.surface.viewport_height() - self.edge_px:
            session.scroll_direction = 1
        else:
            session.scroll_direction = 0

        if session.scroll_direction and ctx.scroll_handle is None:
            ctx.scroll_handle = self._schedule_later(
                self.frame_interval_s, lambda: self._scroll_tick(ctx, session)
            )

    def _scroll_tick(self, ctx: ReorderContext, session: DragSession) -> None:
        ctx.scroll_handle = None
        if ctx.session is not session or session.state != DragState.DRAGGING:
            return
        if not session.scroll_direction:
            return
        applied = ctx.surface.scroll_by(session.scroll_direction * self.scroll_step_px)
        if not applied:
            return
        self._update_marker(ctx, session)
        ctx.scroll_handle = self._schedule_later(
            self.frame_interval_s, lambda: self._scroll_tick(ctx, session)
        )

    def _stop_autoscroll(self, ctx: ReorderContext, session: DragSession) -> None:
        session.scroll_direction = 0
        self._cancel_handle(ctx.scroll_handle)
        ctx.scroll_handle = None

    def _abort(self, ctx: ReorderContext) -> None:
        session = ctx.session
        self._cancel_handle(session.arm_handle)
        session.arm_handle = None
        self._stop_autoscroll(ctx, session)
        was_dragging = session.state == DragState.DRAGGING
        if was_dragging:
            ctx.surface.remove_marker()
            ctx.surface.reinsert(session.row_id, session.original_index)
        session.state = DragState.CANCELLED
        self._end(ctx, session)
        if was_dragging and self.callbacks.on_cancelled:
            self.callbacks.on_cancelled(session.row_id)

    def _end(self, ctx: ReorderContext, session: DragSession) -> None:
        if ctx.session is session:
            ctx.session = None

    @staticmethod
    def _cancel_handle(handle: Any) -> None:
        if handle is not None:
            handle.cancel()
