from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional

from config import API_TO_UI_PRIORITY, PRIORITY_COLORS
from i18n import t
from models.entities import Due, Item


@dataclass
class ItemDisplayData:
    """Computed display data for a row, separating logic from presentation."""
    content: str
    due_display: str
    is_overdue: bool
    ui_priority: int
    priority_label: str
    priority_color: str
    pills: List[str] = field(default_factory=list)
    has_description: bool = False


class ItemPresenter:
    """Computes display values for items without rendering."""

    @staticmethod
    def ui_priority(api_priority: int) -> int:
        """API 4 (most urgent) is shown as P1, API 1 as P4."""
        return API_TO_UI_PRIORITY.get(api_priority, 4)

    @staticmethod
    def due_text(due: Optional[Due]) -> str:
        """Todoist's own phrasing when there is one, otherwise the ISO date."""
        if due is None:
            return ""
        if due.string:
            return due.string
        return due.date.isoformat() if due.date else ""

    @staticmethod
    def is_overdue(due: Optional[Due], today: Optional[date] = None) -> bool:
        if due is None or due.date is None:
            return False
        return due.date < (today or date.today())

    @staticmethod
    def pills(item: Item, project_name: Optional[str]) -> List[str]:
        pills = []
        if project_name:
            pills.append(project_name)
        if item.description.strip():
            pills.append(t("has_description"))
        if item.comment_count:
            pills.append(t("comments_count", count=str(item.comment_count)))
        return pills

    @classmethod
    def create_display_data(
        cls,
        item: Item,
        project_name: Optional[str] = None,
        today: Optional[date] = None,
    ) -> ItemDisplayData:
        prio = cls.ui_priority(item.priority)
        return ItemDisplayData(
            content=item.content,
            due_display=cls.due_text(item.due),
            is_overdue=cls.is_overdue(item.due, today),
            ui_priority=prio,
            priority_label=f"P{prio}",
            priority_color=PRIORITY_COLORS[prio],
            pills=cls.pills(item, project_name),
            has_description=bool(item.description.strip()),
        )
