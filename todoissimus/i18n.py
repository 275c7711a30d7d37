"""Internationalization module - provides t("key") for translated strings.

All user-facing text goes through t("key") (English / German).
Add new translations to _TRANSLATIONS with both "en" and "de" values.
"""
from typing import Dict

_current_language: str = "en"

LANGUAGES: Dict[str, Dict[str, str]] = {
    "en": {"name": "English", "code": "EN"},
    "de": {"name": "Deutsch", "code": "DE"},
}

_TRANSLATIONS: Dict[str, Dict[str, str]] = {
    "app_title": {"en": "Todoissimus", "de": "Todoissimus"},
    "tasks": {"en": "Tasks", "de": "Aufgaben"},
    "tasks_for_label": {"en": "Tasks for label: {selector}", "de": "Aufgaben für Label: {selector}"},
    "tasks_for_project": {"en": "Tasks in project: {selector}", "de": "Aufgaben im Projekt: {selector}"},
    "tasks_for_filter": {"en": "Tasks for filter: {selector}", "de": "Aufgaben für Filter: {selector}"},

    # Settings panel
    "settings": {"en": "Settings", "de": "Einstellungen"},
    "token": {"en": "Todoist API token", "de": "Todoist-API-Token"},
    "token_hint": {
        "en": "Leave empty to use the local proxy",
        "de": "Leer lassen, um den lokalen Proxy zu nutzen",
    },
    "view_mode": {"en": "Show tasks by", "de": "Aufgaben anzeigen nach"},
    "mode_label": {"en": "Label", "de": "Label"},
    "mode_project": {"en": "Project", "de": "Projekt"},
    "mode_filter": {"en": "Filter", "de": "Filter"},
    "selector": {"en": "Label, project id or filter", "de": "Label, Projekt-ID oder Filter"},
    "save": {"en": "Save", "de": "Speichern"},
    "load_list": {"en": "Load list", "de": "Liste laden"},
    "language": {"en": "Language", "de": "Sprache"},
    "refresh": {"en": "Refresh", "de": "Aktualisieren"},
    "settings_saved": {"en": "Settings saved.", "de": "Einstellungen gespeichert."},
    "needs_configuration": {
        "en": "Choose a label, project or filter to get started.",
        "de": "Wähle ein Label, Projekt oder einen Filter, um zu starten.",
    },

    # List
    "add_new_task": {"en": "New task", "de": "Neue Aufgabe"},
    "add": {"en": "Add", "de": "Hinzufügen"},
    "empty_list": {"en": "Nothing to do here.", "de": "Hier gibt es nichts zu tun."},
    "open_in_todoist": {"en": "Open in Todoist", "de": "In Todoist öffnen"},
    "has_description": {"en": "Description", "de": "Beschreibung"},
    "comments_count": {"en": "{count} comments", "de": "{count} Kommentare"},
    "no_description": {"en": "No description.", "de": "Keine Beschreibung."},
    "no_comments": {"en": "No comments.", "de": "Keine Kommentare."},
    "comments": {"en": "Comments", "de": "Kommentare"},
    "close": {"en": "Close", "de": "Schließen"},

    # Feedback
    "load_failed": {"en": "Could not load tasks: {error}", "de": "Aufgaben konnten nicht geladen werden: {error}"},
    "complete_failed": {"en": "Could not close task: {error}", "de": "Aufgabe konnte nicht erledigt werden: {error}"},
    "create_failed": {"en": "Could not add task: {error}", "de": "Aufgabe konnte nicht angelegt werden: {error}"},
    "comments_failed": {"en": "Could not load comments: {error}", "de": "Kommentare konnten nicht geladen werden: {error}"},
    "order_save_failed": {"en": "Could not save order: {error}", "de": "Reihenfolge konnte nicht gespeichert werden: {error}"},
    "task_completed": {"en": "'{content}' done", "de": "'{content}' erledigt"},
}


def get_language() -> str:
    """Get the current language code."""
    return _current_language


def set_language(lang: str) -> None:
    """Set the current language. Unknown codes are ignored."""
    global _current_language
    if lang in LANGUAGES:
        _current_language = lang


def t(key: str, **kwargs: str) -> str:
    """Get translated string for the given key.

    Falls back to English, then to the key itself. Keyword arguments fill
    ``{name}`` placeholders.
    """
    translations = _TRANSLATIONS.get(key)
    if translations is None:
        return key
    text = translations.get(_current_language) or translations.get("en") or key
    return text.format(**kwargs) if kwargs else text
