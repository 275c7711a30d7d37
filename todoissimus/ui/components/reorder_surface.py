"""Flet adapter for the reorder engine.

Rows have a fixed height, so the layout is computed rather than measured.
A detached row stays mounted (collapsed to zero height) so that the
gesture detector that started the drag keeps delivering updates, and the
insertion marker takes over its slot in the layout.
"""
import logging
from typing import Callable, Dict, List, Optional, Tuple

import flet as ft

from config import COLORS, LIST_HEIGHT, ROW_HEIGHT

logger = logging.getLogger(__name__)


class FletReorderSurface:
    """ReorderSurface over an ``ft.ListView`` of fixed-height rows."""

    def __init__(
        self,
        page: ft.Page,
        height: float = LIST_HEIGHT,
        row_height: float = ROW_HEIGHT,
        on_user_scroll: Optional[Callable[[], None]] = None,
    ) -> None:
        self.page = page
        self.on_user_scroll = on_user_scroll
        self.row_height = row_height
        self._viewport = height
        self._offset = 0.0
        self._order: List[str] = []
        self._controls: Dict[str, ft.Control] = {}
        self._detached: Optional[str] = None
        self._marker_index: Optional[int] = None
        self.marker = ft.Container(
            height=row_height,
            border=ft.Border.all(2, COLORS["marker"]),
            border_radius=8,
            bgcolor=ft.Colors.with_opacity(0.08, COLORS["marker"]),
        )
        self.list_view = ft.ListView(
            controls=[],
            spacing=0,
            height=height,
            on_scroll=self._on_scroll,
        )

    # -- population ----------------------------------------------------------

    def set_rows(self, rows: List[Tuple[str, ft.Control]]) -> None:
        """Replace all rows. Any drag must be cancelled before this."""
        self._order = [row_id for row_id, _ in rows]
        self._controls = dict(rows)
        self._detached = None
        self._marker_index = None
        self._render(update=False)

    def _on_scroll(self, e) -> None:
        pixels = float(e.pixels)
        # scroll_by moves _offset before the list reports the new position
        by_user = abs(pixels - self._offset) > 0.5
        self._offset = pixels
        if getattr(e, "viewport_dimension", None):
            self._viewport = float(e.viewport_dimension)
        if by_user and self.on_user_scroll:
            self.on_user_scroll()

    # -- layout --------------------------------------------------------------

    def _slots(self) -> List[Optional[str]]:
        """Visual slots top to bottom; None is the marker."""
        slots: List[Optional[str]] = [i for i in self._order if i != self._detached]
        if self._marker_index is not None:
            slots.insert(max(0, min(self._marker_index, len(slots))), None)
        return slots

    def _content_height(self) -> float:
        return len(self._slots()) * self.row_height

    def _max_offset(self) -> float:
        return max(0.0, self._content_height() - self._viewport)

    def _render(self, update: bool = True) -> None:
        controls = [self.marker if slot is None else self._controls[slot] for slot in self._slots()]
        if self._detached is not None:
            # Keep the dragged row mounted at its old position, at zero height
            index = min(self._order.index(self._detached), len(controls))
            controls.insert(index, self._controls[self._detached])
        self.list_view.controls = controls
        if not update:
            return
        try:
            self.list_view.update()
        except RuntimeError as e:
            # Not on the page yet; the next page.update() draws it
            logger.debug(f"List not mounted: {e}")

    def to_viewport_y(self, row_id: str, local_y: float) -> float:
        """Map a position inside a row to the list's viewport coordinates."""
        top = 0.0
        for control in self.list_view.controls:
            if control is self._controls.get(row_id):
                return top - self._offset + local_y
            top += control.height or 0
        return local_y

    # -- ReorderSurface ------------------------------------------------------

    def row_ids(self) -> List[str]:
        return list(self._order)

    def row_midpoints(self, exclude: str) -> List[Tuple[str, float]]:
        points = []
        for index, slot in enumerate(self._slots()):
            if slot is None or slot == exclude:
                continue
            points.append((slot, index * self.row_height + self.row_height / 2 - self._offset))
        return points

    def viewport_height(self) -> float:
        return self._viewport

    def scroll_by(self, dy: float) -> float:
        target = max(0.0, min(self._offset + dy, self._max_offset()))
        applied = target - self._offset
        if applied:
            self._offset = target
            self.page.run_task(self.list_view.scroll_to, offset=target, duration=0)
        return applied

    def detach(self, row_id: str) -> None:
        self._detached = row_id
        control = self._controls[row_id]
        control.height = 0
        control.opacity = 0

    def place_marker(self, index: int) -> None:
        self._marker_index = index
        self._render()

    def remove_marker(self) -> None:
        self._marker_index = None
        if self._detached is None:
            self._render()

    def reinsert(self, row_id: str, index: int) -> None:
        others = [i for i in self._order if i != row_id]
        index = max(0, min(index, len(others)))
        self._order = others[:index] + [row_id] + others[index:]
        control = self._controls[row_id]
        control.height = self.row_height
        control.opacity = 1
        self._detached = None
        self._render()
