import flet as ft
import logging

from typing import Any, List

logger = logging.getLogger(__name__)

from config import COLORS, FONT_SIZE_XL
from core import ServiceContainer, shutdown
from database import DatabaseError
from events import event_bus, AppEvent, Subscription
from i18n import t
from services.todoist_client import RemoteFetchError
from ui.app_initializer import AppInitializer


class TodoissimusApp:
    """Main application class: one manually ordered Todoist view."""

    def __init__(self, page: ft.Page, services: ServiceContainer) -> None:
        self.page = page
        self.services = services
        self.state = services.state
        self.event_bus = event_bus
        self._subscriptions: List[Subscription] = []

        self._build_components()
        self._subscribe_to_events()

        # Register cleanup on page close
        self.page.on_close = self._on_page_close

        # A gesture cannot survive the app going to the background
        self.page.on_app_lifecycle_state_change = self._on_app_lifecycle_state_change

    def _build_components(self) -> None:
        initializer = AppInitializer(self.page, self.services, self.load)
        c = initializer.initialize()
        self.snack = c.snack
        self.tasks_view = c.tasks_view
        self.settings_panel = c.settings_panel
        self.task_dialogs = c.task_dialogs
        self.task_handler = c.task_handler

    def _subscribe_to_events(self) -> None:
        """Subscribe to application events and track subscriptions for cleanup."""
        for event, handler in (
            (AppEvent.SETTINGS_CHANGED, self._on_settings_changed),
            (AppEvent.ITEMS_LOADED, self._on_refresh_ui),
            (AppEvent.ITEM_CREATED, self._on_refresh_ui),
            (AppEvent.ITEM_COMPLETED, self._on_refresh_ui),
            (AppEvent.LOAD_FAILED, self._on_load_failed),
        ):
            self._subscriptions.append(self.event_bus.subscribe(event, handler))
        # Item requests (ITEM_*_REQUESTED) are handled by TaskActionHandler

    def _unsubscribe_all(self) -> None:
        for subscription in self._subscriptions:
            subscription.unsubscribe()
        self._subscriptions.clear()

    def _on_page_close(self, e: ft.ControlEvent) -> None:
        self._cleanup()

    def _on_app_lifecycle_state_change(self, e: ft.AppLifecycleStateChangeEvent) -> None:
        if e.state in (ft.AppLifecycleState.HIDE, ft.AppLifecycleState.INACTIVE, ft.AppLifecycleState.PAUSE):
            self.tasks_view.cancel_drag()

    def _cleanup(self) -> None:
        """Clean up all resources."""
        self._unsubscribe_all()
        self.tasks_view.cancel_drag()
        if self.task_handler:
            self.task_handler.cleanup()

        async def close_db() -> None:
            try:
                await shutdown()
            except DatabaseError as e:
                logger.warning(f"Error closing database on cleanup: {e}")

        try:
            self.page.run_task(close_db)
        except RuntimeError as e:
            # Page may be closing or event loop unavailable - expected during shutdown
            logger.debug(f"Could not schedule cleanup (page closing): {e}")

    # -- events ----------------------------------------------------------------

    def _on_refresh_ui(self, data: Any = None) -> None:
        self.tasks_view.refresh()

    def _on_load_failed(self, error: Any) -> None:
        self.settings_panel.open()
        self.snack.error(t("load_failed", error=str(error)))

    def _on_settings_changed(self, view: Any) -> None:
        self.services.task.use_token(self.state.token)
        self.page.title = t("app_title")
        self.refresh_btn.tooltip = t("refresh")
        self.settings_btn.tooltip = t("settings")
        self.page.update()

    # -- loading ---------------------------------------------------------------

    async def load(self) -> None:
        """Fetch the configured view; on failure show why and open settings."""
        if self.state.needs_configuration:
            self.settings_panel.open()
            self.tasks_view.refresh()
            self.snack.show(t("needs_configuration"))
            return

        self.tasks_view.cancel_drag()
        self.tasks_view.set_loading(True)
        try:
            items = await self.services.task.load()
        except RemoteFetchError as e:
            logger.warning(f"Loading {self.state.selected_view.key} failed: {e}")
            self.state.last_error = str(e)
            event_bus.emit(AppEvent.LOAD_FAILED, e)
            return
        except DatabaseError as e:
            logger.error(f"Reading stored order failed: {e}")
            self.snack.error(t("load_failed", error=str(e)))
            return
        finally:
            self.tasks_view.set_loading(False)

        event_bus.emit(AppEvent.ITEMS_LOADED, items)

    def _on_refresh_click(self, e: ft.ControlEvent) -> None:
        self.page.run_task(self.load)

    def _on_settings_click(self, e: ft.ControlEvent) -> None:
        self.settings_panel.toggle()
        self.page.update()

    # -- layout ----------------------------------------------------------------

    def _build_header(self) -> ft.Row:
        self.refresh_btn = ft.IconButton(
            icon=ft.Icons.REFRESH,
            icon_color=COLORS["accent"],
            tooltip=t("refresh"),
            on_click=self._on_refresh_click,
        )
        self.settings_btn = ft.IconButton(
            icon=ft.Icons.SETTINGS,
            icon_color=COLORS["accent"],
            tooltip=t("settings"),
            on_click=self._on_settings_click,
        )
        return ft.Row(
            controls=[
                ft.Text(t("app_title"), size=FONT_SIZE_XL, weight="bold", color=COLORS["accent"]),
                ft.Container(expand=True),
                self.refresh_btn,
                self.settings_btn,
            ]
        )

    def build_layout(self) -> None:
        """Assemble the layout, add it to the page and start the first load."""
        self.page.title = t("app_title")
        main_area = ft.Container(
            expand=True,
            bgcolor=COLORS["bg"],
            alignment=ft.Alignment(-1, -1),
            padding=ft.Padding.only(left=20, right=20, top=20, bottom=20),
            content=ft.Column(
                alignment=ft.MainAxisAlignment.START,
                controls=[
                    self._build_header(),
                    self.settings_panel.build(),
                    ft.Divider(height=10, color="transparent"),
                    self.tasks_view.build(),
                ],
                expand=True,
            ),
        )
        self.page.add(main_area)
        self.page.run_task(self.load)


def create_app(page: ft.Page, services: ServiceContainer) -> TodoissimusApp:
    """Factory function to create the application."""
    app = TodoissimusApp(page, services)
    app.build_layout()
    return app
