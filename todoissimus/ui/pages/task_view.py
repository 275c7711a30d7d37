import flet as ft
import logging
from datetime import date
from typing import Dict, List

from config import (
    COLORS,
    BORDER_RADIUS,
    FONT_SIZE_3XL,
    FONT_SIZE_LG,
    ICON_SIZE_3XL,
    PADDING_4XL,
    SPACING_LG,
    ViewMode,
)
from database import DatabaseError
from events import event_bus, AppEvent
from i18n import t
from models.entities import AppState, ViewIdentity
from services.reorder import DragCallbacks, ReorderContext, ReorderEngine
from services.task_service import TaskService
from services.todoist_client import RemoteMutationError
from ui.components.reorder_surface import FletReorderSurface
from ui.components.task_row import RowGestureHandlers, TaskRow
from ui.helpers import SnackService
from ui.presenters.task_presenter import ItemPresenter

logger = logging.getLogger(__name__)

_TITLE_KEYS = {
    ViewMode.LABEL: "tasks_for_label",
    ViewMode.PROJECT: "tasks_for_project",
    ViewMode.FILTER: "tasks_for_filter",
}


class TasksView:
    """Manually ordered list of the current view's items.

    Owns the ReorderContext of the rendered list for its whole lifetime.
    Rows forward pointer events here; the engine decides what they mean and
    committed orderings are persisted through the task service.
    """

    def __init__(
        self,
        page: ft.Page,
        state: AppState,
        service: TaskService,
        snack: SnackService,
    ) -> None:
        self.page = page
        self.state = state
        self.service = service
        self.snack = snack
        self.rows: Dict[str, TaskRow] = {}
        self.surface = FletReorderSurface(page, on_user_scroll=self._on_list_scrolled)
        self.ctx = ReorderContext(view=state.view, surface=self.surface)
        self.engine = ReorderEngine(DragCallbacks(on_committed=self._on_committed))
        self.gestures = RowGestureHandlers(
            press=self._on_row_press,
            move=self._on_row_move,
            release=self._on_row_release,
        )
        self._build_controls()

    def _build_controls(self) -> None:
        self.title = ft.Text(self._title_text(), size=FONT_SIZE_3XL, weight="bold")
        self.progress = ft.ProgressBar(visible=False, color=COLORS["accent"])

        self.empty_state = ft.Container(
            content=ft.Column(
                [
                    ft.Icon(ft.Icons.CHECK_CIRCLE_OUTLINE, size=ICON_SIZE_3XL, color=COLORS["done_text"]),
                    ft.Text(t("empty_list"), size=FONT_SIZE_LG, color=COLORS["done_text"]),
                ],
                horizontal_alignment=ft.CrossAxisAlignment.CENTER,
                spacing=SPACING_LG,
            ),
            alignment=ft.Alignment.CENTER,
            padding=PADDING_4XL,
            visible=False,
        )

        self.task_input = ft.TextField(
            hint_text=t("add_new_task"),
            border_color=COLORS["border"],
            bgcolor=COLORS["input_bg"],
            expand=True,
            on_submit=self._on_submit,
            border_radius=BORDER_RADIUS,
            prefix_icon=ft.Icons.ADD_TASK,
        )

        self.submit_btn = ft.IconButton(
            icon=ft.Icons.SEND,
            icon_color=COLORS["accent"],
            tooltip=t("add"),
            on_click=self._on_submit,
        )

    def _title_text(self) -> str:
        view = self.state.view
        if not view.is_configured:
            return t("tasks")
        return t(_TITLE_KEYS[view.mode], selector=self._selector_label(view))

    def _selector_label(self, view: ViewIdentity) -> str:
        if view.mode == ViewMode.PROJECT:
            return self.state.project_name(view.selector) or view.selector
        return view.selector

    # -- gestures --------------------------------------------------------------

    def _on_row_press(self, row_id: str, x: float, y: float) -> None:
        self.engine.press(self.ctx, row_id, x, self.surface.to_viewport_y(row_id, y))

    def _on_row_move(self, row_id: str, x: float, y: float) -> None:
        self.engine.move(self.ctx, x, self.surface.to_viewport_y(row_id, y))

    def _on_row_release(self) -> None:
        self.engine.release(self.ctx)

    def _on_list_scrolled(self) -> None:
        self.engine.list_scrolled(self.ctx)

    def cancel_drag(self) -> None:
        """Pointer-cancel: the app lost focus mid-gesture."""
        self.engine.cancel(self.ctx)

    def _on_committed(self, ordered_ids: List[str]) -> None:
        view = self.ctx.view
        self.page.run_task(self._commit, view, ordered_ids)

    async def _commit(self, view: ViewIdentity, ordered_ids: List[str]) -> None:
        try:
            await self.service.commit_order(view, ordered_ids)
        except DatabaseError as e:
            # The list keeps showing the new order; the next load reverts it
            logger.error(f"Saving order for {view.key} failed: {e}")
            self.snack.error(t("order_save_failed", error=str(e)))
            return
        logger.debug(f"Stored new order for {view.key}")

    # -- composer --------------------------------------------------------------

    async def _on_submit(self, e: ft.ControlEvent) -> None:
        content = (self.task_input.value or "").strip()
        if not content:
            return
        if not self.state.view.is_configured:
            self.snack.show(t("needs_configuration"))
            return

        try:
            created = await self.service.create_item(content, self.surface.row_ids())
        except RemoteMutationError as e:
            logger.warning(f"Creating item failed: {e}")
            self.snack.error(t("create_failed", error=str(e)))
            return
        except DatabaseError as e:
            logger.error(f"Storing order after create failed: {e}")
            created = self.state.items[-1]

        self.task_input.value = ""
        event_bus.emit(AppEvent.ITEM_CREATED, created)

    # -- rendering -------------------------------------------------------------

    def set_loading(self, loading: bool) -> None:
        self.progress.visible = loading
        self.page.update()

    def refresh(self) -> None:
        """Re-render rows from the working list. Ends any gesture in progress."""
        self.engine.cancel(self.ctx)
        if self.ctx.view != self.state.view:
            self.ctx = ReorderContext(view=self.state.view, surface=self.surface)

        today = date.today()
        self.rows = {}
        entries = []
        for item in self.state.items:
            display = ItemPresenter.create_display_data(item, self.state.project_name(item.project_id), today)
            row = TaskRow(item, display, self.gestures)
            self.rows[item.id] = row
            entries.append((item.id, row.build()))
        self.surface.set_rows(entries)

        self.title.value = self._title_text()
        self.empty_state.visible = self.state.view.is_configured and not entries
        self.page.update()

    def build(self) -> ft.Column:
        return ft.Column(
            alignment=ft.MainAxisAlignment.START,
            controls=[
                self.title,
                self.progress,
                ft.Row(
                    controls=[self.task_input, self.submit_btn],
                    spacing=SPACING_LG,
                ),
                ft.Divider(height=15, color="transparent"),
                self.empty_state,
                self.surface.list_view,
            ],
        )
