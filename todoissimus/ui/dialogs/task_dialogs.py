import flet as ft
import logging
from typing import List

from config import COLORS, DIALOG_WIDTH_MD, FONT_SIZE_MD, FONT_SIZE_SM
from i18n import t
from models.entities import Comment, Item
from services.task_service import TaskService
from services.todoist_client import RemoteFetchError
from ui.helpers import SnackService
from ui.dialogs.base import open_dialog

logger = logging.getLogger(__name__)


class TaskDialogs:
    def __init__(
        self,
        page: ft.Page,
        service: TaskService,
        snack: SnackService,
    ) -> None:
        self.page = page
        self.service = service
        self.snack = snack

    def peek(self, item: Item) -> None:
        """Show description and comments of an item.

        The dialog opens immediately; comments are filled in once loaded.
        """
        comments_col = ft.Column([ft.ProgressRing(width=16, height=16)], spacing=8, tight=True)

        content = ft.Container(
            width=DIALOG_WIDTH_MD,
            content=ft.Column(
                [
                    ft.Markdown(
                        value=item.description or f"*{t('no_description')}*",
                        selectable=True,
                        extension_set=ft.MarkdownExtensionSet.GITHUB_WEB,
                    ),
                    ft.Divider(),
                    ft.Text(t("comments"), weight="bold", size=FONT_SIZE_MD),
                    comments_col,
                ],
                tight=True,
                spacing=8,
                scroll=ft.ScrollMode.AUTO,
            ),
        )

        _, close = open_dialog(
            self.page,
            item.content,
            content,
            lambda c: [ft.TextButton(t("close"), on_click=c)],
        )

        async def load() -> None:
            try:
                comments = await self.service.load_comments(item)
            except RemoteFetchError as e:
                logger.warning(f"Comments for {item.id} failed: {e}")
                close()
                self.snack.error(t("comments_failed", error=str(e)))
                return
            comments_col.controls = self._comment_controls(comments)
            self.page.update()

        self.page.run_task(load)

    @staticmethod
    def _comment_controls(comments: List[Comment]) -> List[ft.Control]:
        if not comments:
            return [ft.Text(t("no_comments"), color=COLORS["done_text"], size=FONT_SIZE_MD)]
        controls = []
        for comment in comments:
            controls.append(ft.Column(
                [
                    ft.Text(comment.posted_at or "", size=FONT_SIZE_SM, color=COLORS["done_text"]),
                    ft.Markdown(value=comment.content, selectable=True),
                ],
                spacing=2,
                tight=True,
            ))
        return controls
