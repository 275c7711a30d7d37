import flet as ft
from typing import Callable, Optional

from core import ServiceContainer
from services.external_open import ExternalOpener
from ui.components.settings_panel import SettingsPanel
from ui.dialogs import TaskDialogs
from ui.handlers.task_action_handler import TaskActionHandler
from ui.helpers import SnackService
from ui.pages.task_view import TasksView


class AppComponents:
    """Container for initialized UI components."""

    def __init__(self) -> None:
        self.snack: Optional[SnackService] = None
        self.tasks_view: Optional[TasksView] = None
        self.settings_panel: Optional[SettingsPanel] = None
        self.task_dialogs: Optional[TaskDialogs] = None
        self.opener: Optional[ExternalOpener] = None
        self.task_handler: Optional[TaskActionHandler] = None


class AppInitializer:
    """Handles page setup and component wiring."""

    def __init__(
        self,
        page: ft.Page,
        services: ServiceContainer,
        on_load: Callable,
    ) -> None:
        self.page = page
        self.services = services
        self.on_load = on_load
        self.components = AppComponents()

    def initialize(self) -> AppComponents:
        """Initialize all UI components and return them."""
        self._setup_page()
        self.components.snack = SnackService(self.page)
        self._init_ui_components()
        self._init_task_handler()
        return self.components

    def _setup_page(self) -> None:
        self.page.theme_mode = ft.ThemeMode.DARK
        self.page.padding = 0

    def _init_ui_components(self) -> None:
        svc = self.services
        snack = self.components.snack

        self.components.tasks_view = TasksView(self.page, svc.state, svc.task, snack)
        self.components.settings_panel = SettingsPanel(
            self.page, svc.state, svc.settings, snack, on_load=self.on_load,
        )
        self.components.task_dialogs = TaskDialogs(self.page, svc.task, snack)
        # Item urls point at the web app; Flet hands them to the OS
        self.components.opener = ExternalOpener(self.page.launch_url)

    def _init_task_handler(self) -> None:
        """TaskActionHandler subscribes to ITEM_*_REQUESTED events emitted by rows."""
        self.components.task_handler = TaskActionHandler(
            page=self.page,
            service=self.services.task,
            task_dialogs=self.components.task_dialogs,
            opener=self.components.opener,
            snack=self.components.snack,
        )
