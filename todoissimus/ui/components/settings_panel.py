import flet as ft
import logging
from typing import Awaitable, Callable

from config import COLORS, BORDER_RADIUS, FONT_SIZE_LG, PADDING_XL, SETTINGS_WIDTH, ViewMode
from database import DatabaseError
from i18n import t, get_language, LANGUAGES
from models.entities import AppState, ViewIdentity
from services.settings_service import SettingsService
from ui.helpers import accent_btn, SnackService

logger = logging.getLogger(__name__)


class SettingsPanel:
    """Token and view configuration, shown above the list.

    Opens by itself when no view is configured or a fetch failed.
    """

    def __init__(
        self,
        page: ft.Page,
        state: AppState,
        settings: SettingsService,
        snack: SnackService,
        on_load: Callable[[], Awaitable[None]],
    ) -> None:
        self.page = page
        self.state = state
        self.settings = settings
        self.snack = snack
        self.on_load = on_load
        self._build_controls()

    def _build_controls(self) -> None:
        self.token_field = ft.TextField(
            label=t("token"),
            hint_text=t("token_hint"),
            value=self.state.token,
            password=True,
            can_reveal_password=True,
            border_color=COLORS["border"],
            bgcolor=COLORS["input_bg"],
            border_radius=BORDER_RADIUS,
        )
        self.mode_dd = ft.Dropdown(
            label=t("view_mode"),
            value=self.state.selected_view.mode.value,
            options=[
                ft.DropdownOption(key=ViewMode.LABEL.value, text=t("mode_label")),
                ft.DropdownOption(key=ViewMode.PROJECT.value, text=t("mode_project")),
                ft.DropdownOption(key=ViewMode.FILTER.value, text=t("mode_filter")),
            ],
            border_color=COLORS["border"],
            bgcolor=COLORS["input_bg"],
            border_radius=BORDER_RADIUS,
        )
        self.lang_dd = ft.Dropdown(
            label=t("language"),
            value=get_language(),
            options=[ft.DropdownOption(key=code, text=info["name"]) for code, info in LANGUAGES.items()],
            border_color=COLORS["border"],
            bgcolor=COLORS["input_bg"],
            border_radius=BORDER_RADIUS,
        )
        self.selector_field = ft.TextField(
            label=t("selector"),
            value=self.state.selected_view.selector,
            border_color=COLORS["border"],
            bgcolor=COLORS["input_bg"],
            border_radius=BORDER_RADIUS,
            on_submit=self._on_load_click,
        )
        self.container = ft.Container(
            width=SETTINGS_WIDTH,
            padding=PADDING_XL,
            bgcolor=COLORS["card"],
            border_radius=BORDER_RADIUS,
            visible=False,
            content=ft.Column(
                [
                    ft.Text(t("settings"), weight="bold", size=FONT_SIZE_LG),
                    self.token_field,
                    self.mode_dd,
                    self.selector_field,
                    self.lang_dd,
                    ft.Row(
                        [
                            ft.TextButton(t("save"), on_click=self._on_save_click),
                            accent_btn(t("load_list"), self._on_load_click),
                        ],
                        alignment=ft.MainAxisAlignment.END,
                    ),
                ],
                tight=True,
                spacing=10,
            ),
        )

    @property
    def is_open(self) -> bool:
        return self.container.visible

    def open(self) -> None:
        self.token_field.value = self.state.token
        self.mode_dd.value = self.state.selected_view.mode.value
        self.selector_field.value = self.state.selected_view.selector
        self.container.visible = True

    def close(self) -> None:
        self.container.visible = False

    def toggle(self) -> None:
        if self.is_open:
            self.close()
        else:
            self.open()

    def _view_from_fields(self) -> ViewIdentity:
        return ViewIdentity.from_strings(self.mode_dd.value, self.selector_field.value)

    async def _save(self) -> bool:
        try:
            if self.lang_dd.value and self.lang_dd.value != self.state.language:
                await self.settings.set_language(self.lang_dd.value)
            await self.settings.save(self.token_field.value or "", self._view_from_fields())
        except DatabaseError as e:
            logger.error(f"Saving settings failed: {e}")
            self.snack.error(str(e))
            return False
        return True

    async def _on_save_click(self, e: ft.ControlEvent) -> None:
        if await self._save():
            self.snack.show(t("settings_saved"))

    async def _on_load_click(self, e: ft.ControlEvent) -> None:
        if not await self._save():
            return
        if not self.state.selected_view.is_configured:
            self.snack.show(t("needs_configuration"))
            return
        self.close()
        await self.on_load()

    def build(self) -> ft.Container:
        return self.container
