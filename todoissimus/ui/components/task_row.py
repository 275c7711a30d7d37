import flet as ft
from dataclasses import dataclass
from typing import Callable

from config import COLORS, BORDER_RADIUS, BORDER_RADIUS_SM, FONT_SIZE_SM, ROW_HEIGHT
from events import event_bus, AppEvent
from i18n import t
from models.entities import Item
from ui.helpers import local_xy
from ui.presenters.task_presenter import ItemDisplayData


@dataclass
class RowGestureHandlers:
    """Pointer callbacks a row forwards to the list view.

    Positions are local to the row; the list view maps them to list
    coordinates.
    """
    press: Callable[[str, float, float], None]
    move: Callable[[str, float, float], None]
    release: Callable[[], None]


class TaskRow:
    """Single item row.

    The checkbox and buttons sit outside the gesture area, so presses on
    them never start a drag. User actions go to the EventBus; the row is
    the event payload so handlers can undo its visual state on failure.
    """

    def __init__(self, item: Item, display: ItemDisplayData, gestures: RowGestureHandlers) -> None:
        self.item = item
        self.display = display
        self.gestures = gestures
        self.checkbox: ft.Checkbox = None
        self.control: ft.Container = None

    def _on_check(self, e: ft.ControlEvent) -> None:
        if e.control.value:
            self.checkbox.disabled = True
            event_bus.emit(AppEvent.ITEM_COMPLETE_REQUESTED, self)

    def rollback(self) -> None:
        """Completion failed: un-check and re-enable."""
        self.checkbox.value = False
        self.checkbox.disabled = False

    def _on_tap_down(self, e) -> None:
        x, y = local_xy(e)
        self.gestures.press(self.item.id, x, y)

    def _on_move(self, e) -> None:
        x, y = local_xy(e)
        self.gestures.move(self.item.id, x, y)

    def _on_up(self, e) -> None:
        self.gestures.release()

    def _pill(self, text: str) -> ft.Control:
        return ft.Container(
            content=ft.Text(text, size=FONT_SIZE_SM, color=COLORS["white"]),
            bgcolor=COLORS["pill"],
            padding=ft.Padding.symmetric(horizontal=8, vertical=2),
            border_radius=BORDER_RADIUS_SM,
        )

    def _body(self) -> ft.Control:
        meta = []
        if self.display.due_display:
            meta.append(ft.Text(
                self.display.due_display,
                size=FONT_SIZE_SM,
                color=COLORS["danger"] if self.display.is_overdue else COLORS["done_text"],
            ))
        meta.append(ft.Text(
            self.display.priority_label,
            size=FONT_SIZE_SM,
            color=self.display.priority_color,
            weight="bold",
        ))
        meta.extend(self._pill(p) for p in self.display.pills)

        column = ft.Column(
            [
                ft.Text(self.display.content, weight="bold", max_lines=1, overflow=ft.TextOverflow.ELLIPSIS),
                ft.Row(meta, spacing=8, tight=True),
            ],
            spacing=2,
            tight=True,
        )
        return ft.GestureDetector(
            content=ft.Row([ft.Icon(ft.Icons.DRAG_INDICATOR, color=ft.Colors.GREY), column], expand=True),
            on_tap_down=self._on_tap_down,
            on_tap_up=self._on_up,
            on_pan_update=self._on_move,
            on_pan_end=self._on_up,
            on_long_press_move_update=self._on_move,
            on_long_press_end=self._on_up,
            expand=True,
        )

    def build(self) -> ft.Container:
        self.checkbox = ft.Checkbox(value=False, on_change=self._on_check)
        peek_btn = ft.IconButton(
            ft.Icons.NOTES,
            icon_color=COLORS["done_text"],
            tooltip=t("comments"),
            visible=self.display.has_description or self.item.comment_count > 0,
            on_click=lambda e: event_bus.emit(AppEvent.ITEM_PEEK_REQUESTED, self.item),
        )
        open_btn = ft.IconButton(
            ft.Icons.OPEN_IN_NEW,
            icon_color=COLORS["accent"],
            tooltip=t("open_in_todoist"),
            on_click=lambda e: event_bus.emit(AppEvent.ITEM_OPEN_REQUESTED, self.item),
        )
        self.control = ft.Container(
            height=ROW_HEIGHT,
            padding=ft.Padding.symmetric(horizontal=12, vertical=4),
            bgcolor=COLORS["card"],
            border=ft.Border.only(left=ft.BorderSide(3, self.display.priority_color)),
            border_radius=BORDER_RADIUS,
            data=self.item.id,
            content=ft.Row([self.checkbox, self._body(), peek_btn, open_btn]),
        )
        return self.control
