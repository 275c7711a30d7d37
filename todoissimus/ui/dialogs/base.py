"""Dialog utilities - factory functions for consistent dialog styling.

open_dialog() creates modal dialogs with standard layout (title, content, actions).
"""
import flet as ft
from typing import Callable, Tuple, Optional, List


def open_dialog(
    page: ft.Page,
    title: str,
    content: ft.Control,
    make_actions: Callable[[Callable[[], None]], List[ft.Control]],
) -> Tuple[ft.AlertDialog, Callable[[], None]]:
    holder: List[Optional[ft.AlertDialog]] = [None]

    def close(e: Optional[ft.ControlEvent] = None) -> None:
        if holder[0] and holder[0].open:
            page.pop_dialog()

    holder[0] = ft.AlertDialog(
        modal=True,
        title=ft.Text(title),
        content=content,
        actions=make_actions(close),
        actions_alignment=ft.MainAxisAlignment.END,
    )
    page.show_dialog(holder[0])
    return holder[0], close
