from database import db
from events import event_bus, AppEvent
from i18n import set_language
from models.entities import AppState, ViewIdentity

_DEFAULTS = {
    "token": "",
    "view_mode": None,
    "view_selector": "",
    "language": "en",
}


class SettingsService:
    """Token, view selection and language, persisted in the settings table."""

    def __init__(self, state: AppState) -> None:
        self.state = state

    async def load(self) -> None:
        """Read persisted settings into the state."""
        values = await db.get_settings(_DEFAULTS)
        self.state.token = values["token"] or ""
        self.state.selected_view = ViewIdentity.from_strings(values["view_mode"], values["view_selector"] or "")
        self.state.language = values["language"] or "en"
        set_language(self.state.language)

    async def save(self, token: str, view: ViewIdentity) -> None:
        """Persist token and view selection, then notify listeners.

        The list on screen keeps its view until the next load succeeds.
        """
        self.state.token = token.strip()
        self.state.selected_view = ViewIdentity(view.mode, view.selector.strip())
        await db.set_settings({
            "token": self.state.token,
            "view_mode": self.state.selected_view.mode.value,
            "view_selector": self.state.selected_view.selector,
        })
        event_bus.emit(AppEvent.SETTINGS_CHANGED, self.state.selected_view)

    async def set_language(self, lang: str) -> None:
        self.state.language = lang
        set_language(lang)
        await db.set_setting("language", lang)
