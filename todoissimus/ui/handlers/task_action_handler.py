"""Task action handler - handles item events from the EventBus.

The flow is:
    TaskRow -> EventBus -> TaskActionHandler -> TaskService

Remote and storage failures are caught here and turned into a toast plus
whatever visual rollback the row needs.
"""
import flet as ft
import logging
from typing import List

from database import DatabaseError
from events import event_bus, AppEvent, Subscription
from i18n import t
from models.entities import Item
from services.external_open import ExternalOpener
from services.task_service import TaskService
from services.todoist_client import RemoteMutationError
from ui.components.task_row import TaskRow
from ui.dialogs import TaskDialogs
from ui.helpers import SnackService

logger = logging.getLogger(__name__)


class TaskActionHandler:
    """Subscribes to ITEM_*_REQUESTED events and dispatches to services/dialogs."""

    def __init__(
        self,
        page: ft.Page,
        service: TaskService,
        task_dialogs: TaskDialogs,
        opener: ExternalOpener,
        snack: SnackService,
    ) -> None:
        self._page = page
        self._service = service
        self._task_dialogs = task_dialogs
        self._opener = opener
        self._snack = snack
        self._subscriptions: List[Subscription] = []
        self._subscribe()

    def _subscribe(self) -> None:
        self._subscriptions.append(
            event_bus.subscribe(AppEvent.ITEM_COMPLETE_REQUESTED, self._on_complete)
        )
        self._subscriptions.append(
            event_bus.subscribe(AppEvent.ITEM_OPEN_REQUESTED, self._on_open)
        )
        self._subscriptions.append(
            event_bus.subscribe(AppEvent.ITEM_PEEK_REQUESTED, self._on_peek)
        )

    def cleanup(self) -> None:
        """Unsubscribe from all events."""
        for subscription in self._subscriptions:
            subscription.unsubscribe()
        self._subscriptions.clear()

    # --- Event handlers ---

    def _on_complete(self, row: TaskRow) -> None:
        async def _complete() -> None:
            await self.complete(row)
        self._page.run_task(_complete)

    async def complete(self, row: TaskRow) -> None:
        """Close the row's item; on failure the checkbox is un-checked again."""
        item = row.item
        try:
            await self._service.complete_item(item)
        except RemoteMutationError as e:
            logger.warning(f"Completing {item.id} failed: {e}")
            row.rollback()
            self._snack.error(t("complete_failed", error=str(e)))
            return
        except DatabaseError as e:
            # Closed remotely; only the stored order kept a stale id
            logger.error(f"Pruning {item.id} from stored order failed: {e}")

        # The list refresh triggered by ITEM_COMPLETED updates the page
        self._snack.success(t("task_completed", content=item.content), update=False)
        event_bus.emit(AppEvent.ITEM_COMPLETED, item)

    def _on_open(self, item: Item) -> None:
        async def _open() -> None:
            attempted = await self._opener.open_externally(item)
            logger.debug(f"Opened {item.id} via {attempted[-1]}")
        self._page.run_task(_open)

    def _on_peek(self, item: Item) -> None:
        self._task_dialogs.peek(item)
