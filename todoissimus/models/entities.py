from dataclasses import dataclass, field
from datetime import date
from typing import Optional, List, Dict, Any

from config import ViewMode


@dataclass(frozen=True)
class ViewIdentity:
    """Which subset of tasks is shown, and which persisted order applies."""
    mode: ViewMode
    selector: str

    @property
    def key(self) -> str:
        """Opaque store key, e.g. ``label:Einkauf``."""
        return f"{self.mode.value}:{self.selector}"

    @property
    def is_configured(self) -> bool:
        return bool(self.selector.strip())

    def query_params(self) -> Dict[str, str]:
        """Query string for GET /tasks."""
        if self.mode == ViewMode.LABEL:
            return {"label": self.selector}
        if self.mode == ViewMode.PROJECT:
            return {"project_id": self.selector}
        return {"filter": self.selector}

    @classmethod
    def from_strings(cls, mode: Optional[str], selector: Optional[str]) -> "ViewIdentity":
        try:
            view_mode = ViewMode(mode or ViewMode.LABEL.value)
        except ValueError:
            view_mode = ViewMode.LABEL
        return cls(view_mode, (selector or "").strip())


@dataclass
class Due:
    date: Optional[date]
    string: str = ""
    is_recurring: bool = False
    datetime: Optional[str] = None

    @classmethod
    def from_api(cls, d: Optional[Dict[str, Any]]) -> Optional["Due"]:
        if not d:
            return None
        raw_date = d.get("date")
        try:
            parsed = date.fromisoformat(raw_date[:10]) if raw_date else None
        except ValueError:
            parsed = None
        return cls(
            date=parsed,
            string=d.get("string") or "",
            is_recurring=bool(d.get("is_recurring", False)),
            datetime=d.get("datetime"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date.isoformat() if self.date else None,
            "string": self.string,
            "is_recurring": self.is_recurring,
            "datetime": self.datetime,
        }


@dataclass
class Item:
    """A Todoist task as far as this app cares about it."""
    id: str
    content: str
    description: str = ""
    due: Optional[Due] = None
    priority: int = 1
    project_id: Optional[str] = None
    labels: List[str] = field(default_factory=list)
    comment_count: int = 0
    url: Optional[str] = None

    @classmethod
    def from_api(cls, d: Dict[str, Any]) -> "Item":
        try:
            priority = int(d.get("priority") or 1)
        except (TypeError, ValueError):
            priority = 1
        project_id = d.get("project_id")
        return cls(
            id=str(d["id"]),
            content=d.get("content") or "",
            description=d.get("description") or "",
            due=Due.from_api(d.get("due")),
            priority=priority,
            project_id=str(project_id) if project_id is not None else None,
            labels=list(d.get("labels") or []),
            comment_count=int(d.get("comment_count") or 0),
            url=d.get("url"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "content": self.content,
            "description": self.description,
            "due": self.due.to_dict() if self.due else None,
            "priority": self.priority,
            "project_id": self.project_id,
            "labels": list(self.labels),
            "comment_count": self.comment_count,
            "url": self.url,
        }


@dataclass
class Comment:
    id: str
    content: str
    posted_at: Optional[str] = None

    @classmethod
    def from_api(cls, d: Dict[str, Any]) -> "Comment":
        return cls(id=str(d["id"]), content=d.get("content") or "", posted_at=d.get("posted_at"))


@dataclass
class AppState:
    items: List[Item] = field(default_factory=list)
    projects: Dict[str, str] = field(default_factory=dict)
    # The view whose items are in `items`; only a successful load changes it
    view: ViewIdentity = field(default_factory=lambda: ViewIdentity(ViewMode.LABEL, ""))
    # The view chosen in settings, fetched by the next load
    selected_view: ViewIdentity = field(default_factory=lambda: ViewIdentity(ViewMode.LABEL, ""))
    token: str = ""
    language: str = "en"
    is_loading: bool = False
    last_error: Optional[str] = None

    @property
    def needs_configuration(self) -> bool:
        """Nothing can be fetched until a view selector is set."""
        return not self.selected_view.is_configured

    def get_item_by_id(self, item_id: Optional[str]) -> Optional[Item]:
        if item_id is None:
            return None
        for item in self.items:
            if item.id == str(item_id):
                return item
        return None

    def project_name(self, project_id: Optional[str]) -> Optional[str]:
        if project_id is None:
            return None
        return self.projects.get(project_id)
