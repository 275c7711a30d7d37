"""Tests for the press-and-hold reorder engine, driven through a fake list."""
from typing import Callable, List, Optional

import pytest

from config import PressTarget, ViewMode
from core import ServiceContainer
from models.entities import ViewIdentity
from services.reorder import DragCallbacks, DragState, ReorderContext, ReorderEngine

ROW = 50


class FakeHandle:
    def __init__(self, delay: float, callback: Callable[[], None]) -> None:
        self.delay = delay
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeScheduler:
    """Collects timers; tests fire them explicitly."""

    def __init__(self) -> None:
        self.handles: List[FakeHandle] = []

    def __call__(self, delay: float, callback: Callable[[], None]) -> FakeHandle:
        handle = FakeHandle(delay, callback)
        self.handles.append(handle)
        return handle

    def pending(self) -> List[FakeHandle]:
        return [h for h in self.handles if not h.cancelled and not h.fired]

    def fire_next(self) -> None:
        handle = self.pending()[0]
        handle.fired = True
        handle.callback()

    def run_until_idle(self, limit: int = 500) -> int:
        fired = 0
        while self.pending() and fired < limit:
            self.fire_next()
            fired += 1
        return fired


class FakeSurface:
    """Fixed-height rows; the marker takes the detached row's slot."""

    def __init__(self, ids: List[str], viewport: float = 200) -> None:
        self.order = list(ids)
        self.detached: Optional[str] = None
        self.marker: Optional[int] = None
        self.offset = 0.0
        self.viewport = viewport
        self.calls: List[tuple] = []

    def _slots(self) -> List[Optional[str]]:
        slots: List[Optional[str]] = [i for i in self.order if i != self.detached]
        if self.marker is not None:
            slots.insert(min(self.marker, len(slots)), None)
        return slots

    def y_of(self, row_id: str) -> float:
        """Viewport y of a row's centre in the current order."""
        return self.order.index(row_id) * ROW + ROW / 2 - self.offset

    def row_ids(self) -> List[str]:
        return list(self.order)

    def row_midpoints(self, exclude: str):
        return [
            (slot, index * ROW + ROW / 2 - self.offset)
            for index, slot in enumerate(self._slots())
            if slot is not None and slot != exclude
        ]

    def viewport_height(self) -> float:
        return self.viewport

    def scroll_by(self, dy: float) -> float:
        max_offset = max(0.0, len(self._slots()) * ROW - self.viewport)
        target = max(0.0, min(self.offset + dy, max_offset))
        applied = target - self.offset
        self.offset = target
        return applied

    def detach(self, row_id: str) -> None:
        self.calls.append(("detach", row_id))
        self.detached = row_id

    def place_marker(self, index: int) -> None:
        self.calls.append(("marker", index))
        self.marker = index

    def remove_marker(self) -> None:
        self.calls.append(("remove_marker",))
        self.marker = None

    def reinsert(self, row_id: str, index: int) -> None:
        self.calls.append(("reinsert", row_id, index))
        others = [i for i in self.order if i != row_id]
        self.order = others[:index] + [row_id] + others[index:]
        self.detached = None


class Recorder:
    def __init__(self) -> None:
        self.armed: List[str] = []
        self.moved: List[tuple] = []
        self.committed: List[List[str]] = []
        self.cancelled: List[str] = []

    def callbacks(self) -> DragCallbacks:
        return DragCallbacks(
            on_armed=self.armed.append,
            on_moved=lambda y, idx: self.moved.append((y, idx)),
            on_committed=self.committed.append,
            on_cancelled=self.cancelled.append,
        )


VIEW = ViewIdentity(ViewMode.LABEL, "home")


@pytest.fixture
def scheduler() -> FakeScheduler:
    return FakeScheduler()


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()


@pytest.fixture
def engine(scheduler: FakeScheduler, recorder: Recorder) -> ReorderEngine:
    return ReorderEngine(recorder.callbacks(), schedule_later=scheduler)


def make_ctx(ids: List[str], viewport: float = 200) -> ReorderContext:
    return ReorderContext(view=VIEW, surface=FakeSurface(ids, viewport))


def arm(engine: ReorderEngine, scheduler: FakeScheduler, ctx: ReorderContext, row_id: str) -> float:
    y = ctx.surface.y_of(row_id)
    assert engine.press(ctx, row_id, 10, y)
    scheduler.fire_next()
    assert ctx.state == DragState.DRAGGING
    return y


# ===========================================================================
# Arming
# ===========================================================================

class TestArming:
    def test_press_schedules_arm_timer(self, engine, scheduler):
        ctx = make_ctx(["a", "b", "c"])
        assert engine.press(ctx, "b", 10, 75)
        assert ctx.state == DragState.ARM_PENDING
        assert scheduler.pending()[0].delay == pytest.approx(0.275)

    def test_timer_detaches_row_and_shows_marker(self, engine, scheduler, recorder):
        ctx = make_ctx(["a", "b", "c"])
        arm(engine, scheduler, ctx, "b")
        assert ctx.surface.calls[:2] == [("detach", "b"), ("marker", 1)]
        assert recorder.armed == ["b"]
        assert ctx.session.marker_index == 1

    def test_quick_tap_is_noop(self, engine, scheduler, recorder):
        ctx = make_ctx(["a", "b", "c"])
        engine.press(ctx, "a", 10, 25)
        assert engine.release(ctx) is None
        assert ctx.state == DragState.IDLE
        assert scheduler.pending() == []
        assert ctx.surface.calls == []
        assert recorder.committed == [] and recorder.cancelled == []

    def test_small_movement_keeps_arming(self, engine, scheduler):
        ctx = make_ctx(["a", "b", "c"])
        engine.press(ctx, "b", 10, 75)
        engine.move(ctx, 13, 79)
        assert ctx.state == DragState.ARM_PENDING

    def test_movement_beyond_tolerance_cancels_arming(self, engine, scheduler, recorder):
        ctx = make_ctx(["a", "b", "c"])
        engine.press(ctx, "b", 10, 75)
        engine.move(ctx, 10, 90)
        assert ctx.session is None
        assert ctx.state == DragState.IDLE
        assert scheduler.pending() == []
        assert ctx.surface.calls == []
        assert recorder.cancelled == []

    @pytest.mark.parametrize("target", [
        PressTarget.CHECKBOX,
        PressTarget.BUTTON,
        PressTarget.TEXTFIELD,
        PressTarget.DROPDOWN,
        PressTarget.OPTION,
        PressTarget.EDITABLE,
    ])
    def test_interactive_target_never_arms(self, engine, scheduler, target):
        ctx = make_ctx(["a", "b"])
        assert engine.press(ctx, "a", 10, 25, target=target) is False
        assert ctx.session is None
        assert scheduler.handles == []

    def test_press_on_unknown_row_ignored(self, engine, scheduler):
        ctx = make_ctx(["a", "b"])
        assert engine.press(ctx, "zz", 10, 25) is False
        assert scheduler.handles == []


# ===========================================================================
# Dragging and committing
# ===========================================================================

class TestDragCommit:
    def test_move_index_two_to_top(self, engine, scheduler, recorder):
        ctx = make_ctx(["a", "b", "c", "d"])
        arm(engine, scheduler, ctx, "c")
        engine.move(ctx, 10, 70)
        assert ctx.session.marker_index == 1
        engine.move(ctx, 10, 20)
        assert ctx.session.marker_index == 0

        result = engine.release(ctx)

        assert result == ["c", "a", "b", "d"]
        assert recorder.committed == [["c", "a", "b", "d"]]
        assert ctx.surface.order == ["c", "a", "b", "d"]
        assert ctx.surface.marker is None and ctx.surface.detached is None
        assert ctx.state == DragState.IDLE

    def test_move_down_to_end(self, engine, scheduler, recorder):
        ctx = make_ctx(["a", "b", "c", "d"], viewport=400)
        arm(engine, scheduler, ctx, "a")
        engine.move(ctx, 10, 190)
        assert engine.release(ctx) == ["b", "c", "d", "a"]

    def test_on_moved_reports_pointer_and_marker(self, engine, scheduler, recorder):
        ctx = make_ctx(["a", "b", "c"], viewport=400)
        arm(engine, scheduler, ctx, "a")
        engine.move(ctx, 10, 110)
        assert recorder.moved[-1] == (110, 1)

    def test_marker_only_redrawn_when_index_changes(self, engine, scheduler):
        ctx = make_ctx(["a", "b", "c"], viewport=400)
        arm(engine, scheduler, ctx, "b")
        before = len(ctx.surface.calls)
        engine.move(ctx, 10, 80)
        engine.move(ctx, 10, 85)
        assert len(ctx.surface.calls) == before

    def test_release_at_same_index_is_noop(self, engine, scheduler, recorder):
        ctx = make_ctx(["a", "b", "c"], viewport=400)
        y = arm(engine, scheduler, ctx, "b")
        engine.move(ctx, 10, y + 5)
        assert engine.release(ctx) is None
        assert recorder.committed == []
        assert ctx.surface.order == ["a", "b", "c"]

    def test_release_without_session_is_noop(self, engine):
        ctx = make_ctx(["a"])
        assert engine.release(ctx) is None

    async def test_five_items_index_two_to_top_is_stored(
        self, services: ServiceContainer, todoist, engine, scheduler, recorder,
    ):
        ids = ["a", "b", "c", "d", "e"]
        for task_id in ids:
            todoist.add_task(task_id, f"task {task_id}", labels=["home"])
        await services.task.load()

        ctx = ReorderContext(view=services.state.view, surface=FakeSurface(ids, viewport=400))
        arm(engine, scheduler, ctx, "c")
        engine.move(ctx, 10, 70)
        engine.move(ctx, 10, 20)
        new_ids = engine.release(ctx)
        await services.task.commit_order(ctx.view, new_ids)

        assert recorder.committed == [["c", "a", "b", "d", "e"]]
        assert await services.orders.get("label:home") == ["c", "a", "b", "d", "e"]
        reloaded = await services.task.load()
        assert [i.id for i in reloaded] == ["c", "a", "b", "d", "e"]


# ===========================================================================
# Cancellation
# ===========================================================================

class TestCancel:
    def test_second_press_cancels_active_drag(self, engine, scheduler, recorder):
        ctx = make_ctx(["a", "b", "c"], viewport=400)
        arm(engine, scheduler, ctx, "a")
        engine.move(ctx, 10, 140)

        assert engine.press(ctx, "c", 10, 125)

        assert recorder.cancelled == ["a"]
        assert ctx.surface.order == ["a", "b", "c"]
        assert ctx.surface.marker is None
        assert ctx.session.row_id == "c"
        assert ctx.state == DragState.ARM_PENDING
        assert recorder.committed == []

    def test_second_press_cancels_pending_arm(self, engine, scheduler, recorder):
        ctx = make_ctx(["a", "b", "c"])
        engine.press(ctx, "a", 10, 25)
        first = scheduler.pending()[0]
        engine.press(ctx, "b", 10, 75)
        assert first.cancelled
        assert ctx.session.row_id == "b"
        assert recorder.cancelled == []

    def test_stale_arm_timer_does_nothing(self, engine, scheduler):
        ctx = make_ctx(["a", "b"])
        engine.press(ctx, "a", 10, 25)
        stale = scheduler.pending()[0]
        engine.release(ctx)
        stale.callback()
        assert ctx.surface.calls == []

    def test_pointer_cancel_restores_original_position(self, engine, scheduler, recorder):
        ctx = make_ctx(["a", "b", "c", "d"])
        arm(engine, scheduler, ctx, "c")
        engine.move(ctx, 10, 20)
        assert ctx.session.marker_index == 0

        engine.cancel(ctx)

        assert ctx.surface.order == ["a", "b", "c", "d"]
        assert ctx.surface.marker is None and ctx.surface.detached is None
        assert recorder.cancelled == ["c"]
        assert recorder.committed == []
        assert ctx.state == DragState.IDLE
        assert scheduler.pending() == []

    def test_cancel_without_session_is_noop(self, engine, recorder):
        ctx = make_ctx(["a"])
        engine.cancel(ctx)
        assert recorder.cancelled == []

    def test_list_scroll_drops_pending_press(self, engine, scheduler, recorder):
        ctx = make_ctx(["a", "b", "c"])
        engine.press(ctx, "b", 10, 75)
        arm_timer = scheduler.pending()[0]

        engine.list_scrolled(ctx)

        assert ctx.state == DragState.IDLE
        assert arm_timer.cancelled
        arm_timer.callback()
        assert ctx.surface.calls == []
        assert recorder.armed == [] and recorder.cancelled == []

    def test_list_scroll_leaves_active_drag(self, engine, scheduler, recorder):
        ctx = make_ctx(["a", "b", "c"], viewport=400)
        arm(engine, scheduler, ctx, "a")
        engine.list_scrolled(ctx)
        assert ctx.state == DragState.DRAGGING
        assert recorder.cancelled == []

    def test_list_scroll_without_session_is_noop(self, engine):
        ctx = make_ctx(["a"])
        engine.list_scrolled(ctx)
        assert ctx.session is None


# ===========================================================================
# Auto-scroll
# ===========================================================================

class TestAutoScroll:
    IDS = [f"r{i}" for i in range(10)]

    def test_scrolls_down_until_end_and_drops_at_bottom(self, engine, scheduler, recorder):
        ctx = make_ctx(self.IDS, viewport=200)
        arm(engine, scheduler, ctx, "r1")
        engine.move(ctx, 10, 190)
        assert ctx.scroll_handle is not None

        scheduler.run_until_idle()

        assert ctx.surface.offset == 300
        assert ctx.scroll_handle is None
        assert ctx.session.marker_index == 9
        result = engine.release(ctx)
        assert result == [i for i in self.IDS if i != "r1"] + ["r1"]

    def test_tick_interval_is_one_frame(self, engine, scheduler):
        ctx = make_ctx(self.IDS, viewport=200)
        arm(engine, scheduler, ctx, "r1")
        engine.move(ctx, 10, 190)
        assert scheduler.pending()[0].delay == pytest.approx(1 / 60)

    def test_scrolls_up_near_top(self, engine, scheduler):
        ctx = make_ctx(self.IDS, viewport=200)
        ctx.surface.offset = 120
        arm(engine, scheduler, ctx, "r4")
        engine.move(ctx, 10, 10)
        scheduler.fire_next()
        assert ctx.surface.offset == 108

    def test_leaving_edge_band_stops_scrolling(self, engine, scheduler):
        ctx = make_ctx(self.IDS, viewport=200)
        arm(engine, scheduler, ctx, "r1")
        engine.move(ctx, 10, 190)
        scheduler.fire_next()
        engine.move(ctx, 10, 100)
        scheduler.run_until_idle()
        assert ctx.surface.offset == 12
        assert ctx.scroll_handle is None

    def test_release_stops_scrolling(self, engine, scheduler):
        ctx = make_ctx(self.IDS, viewport=200)
        arm(engine, scheduler, ctx, "r1")
        engine.move(ctx, 10, 190)
        engine.release(ctx)
        assert scheduler.pending() == []
        assert ctx.surface.offset == 0

    def test_no_scroll_when_list_cannot_move(self, engine, scheduler):
        ctx = make_ctx(["a", "b"], viewport=200)
        arm(engine, scheduler, ctx, "b")
        engine.move(ctx, 10, 10)
        assert scheduler.run_until_idle() == 1
        assert ctx.surface.offset == 0
        assert ctx.scroll_handle is None
