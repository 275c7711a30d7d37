import flet as ft
import logging
from typing import Optional, Tuple

from config import COLORS, SNACK_DURATION_MS

logger = logging.getLogger(__name__)


def accent_btn(text: str, on_click) -> ft.Button:
    return ft.Button(text, on_click=on_click, bgcolor=COLORS["accent"], color=COLORS["white"])


def local_xy(e) -> Tuple[float, float]:
    """Pointer position of a gesture event relative to its control."""
    pos = getattr(e, "local_position", None)
    if pos is not None:
        return pos.x, pos.y
    return e.local_x, e.local_y


class SnackService:
    """Toasts at the bottom of the page; one at a time, the newest wins."""

    def __init__(self, page: ft.Page) -> None:
        self.page = page
        self.snack = ft.SnackBar(content=ft.Text(""), duration=SNACK_DURATION_MS)
        page.overlay.append(self.snack)

    def show(self, message: str, color: Optional[str] = None, update: bool = True) -> None:
        self.snack.content = ft.Text(message, color=COLORS["white"])
        self.snack.bgcolor = color or COLORS["card"]
        self.snack.open = True
        if update:
            self.page.update()

    def success(self, message: str, update: bool = True) -> None:
        self.show(message, COLORS["green"], update=update)

    def error(self, message: str) -> None:
        logger.debug(f"Toast: {message}")
        self.show(message, COLORS["danger"])
