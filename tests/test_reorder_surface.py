"""Tests for the Flet list adapter's scroll bookkeeping."""
from types import SimpleNamespace
from typing import List

import flet as ft
import pytest

from ui.components.reorder_surface import FletReorderSurface


class FakePage:
    def __init__(self) -> None:
        self.tasks: List[tuple] = []

    def run_task(self, fn, *args, **kwargs) -> None:
        self.tasks.append((fn, args, kwargs))


@pytest.fixture
def scrolled() -> List[bool]:
    return []


@pytest.fixture
def surface(scrolled) -> FletReorderSurface:
    s = FletReorderSurface(
        FakePage(), height=200, row_height=50, on_user_scroll=lambda: scrolled.append(True),
    )
    s.set_rows([(f"r{i}", ft.Container(height=50)) for i in range(10)])
    return s


def scroll_event(pixels: float) -> SimpleNamespace:
    return SimpleNamespace(pixels=pixels, viewport_dimension=200)


class TestScrollReporting:
    def test_user_scroll_is_reported(self, surface, scrolled):
        surface._on_scroll(scroll_event(40))
        assert scrolled == [True]
        assert surface.row_midpoints(exclude="r0")[0] == ("r1", 75 - 40)

    def test_engine_scroll_is_not_reported(self, surface, scrolled):
        assert surface.scroll_by(50) == 50
        surface._on_scroll(scroll_event(50))
        assert scrolled == []
        assert len(surface.page.tasks) == 1

    def test_scroll_by_clamps_at_end(self, surface):
        assert surface.scroll_by(1000) == 300
        assert surface.scroll_by(10) == 0
