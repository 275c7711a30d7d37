import logging
from typing import Any, Dict, List, Optional

from config import ViewMode
from models.entities import AppState, Comment, Item, ViewIdentity
from services.order_store import OrderStore
from services.ordering import append, ids_of, prune, reconcile
from services.todoist_client import RemoteFetchError, TodoistClient

logger = logging.getLogger(__name__)


class TaskService:
    """Service for the items of the current view.

    Combines the remote source with the persisted manual order. Remote
    failures are raised to the caller (RemoteFetchError / RemoteMutationError)
    with local state left as it was before the call.

    All data operations are async.
    """

    def __init__(self, state: AppState, client: TodoistClient, store: OrderStore) -> None:
        self.state = state
        self.client = client
        self.store = store

    def use_token(self, token: str) -> None:
        """Switch between direct API access and the proxy."""
        self.client.token = token

    async def load(self, view: Optional[ViewIdentity] = None) -> List[Item]:
        """Fetch the view's items and put them in manual order.

        Raises:
            RemoteFetchError: The item fetch failed. State and store untouched.
        """
        view = view or self.state.selected_view
        self.state.is_loading = True
        try:
            remote = await self.client.fetch_items(view)
        finally:
            self.state.is_loading = False

        stored = await self.store.get(view.key)
        self.state.view = view
        self.state.items = reconcile(remote, stored)
        self.state.last_error = None
        logger.info(f"Loaded {len(remote)} items for {view.key} ({len(stored)} stored ids)")

        await self._refresh_projects()
        return self.state.items

    async def _refresh_projects(self) -> None:
        """Project names are decoration only; failures keep the old names."""
        try:
            self.state.projects = await self.client.fetch_projects()
        except RemoteFetchError as e:
            logger.warning(f"Could not load project names: {e}")

    async def complete_item(self, item: Item) -> None:
        """Close an item remotely, then drop it from the list and the stored order.

        Raises:
            RemoteMutationError: Nothing was changed locally.
        """
        await self.client.close_item(item.id)
        view_key = self.state.view.key
        self.state.items = [i for i in self.state.items if i.id != item.id]
        order = await self.store.get(view_key)
        await self.store.set(view_key, prune(order, item.id))

    def build_create_payload(self, content: str) -> Dict[str, Any]:
        """New items land in the current view: tagged with its label or put in its project."""
        payload: Dict[str, Any] = {"content": content}
        view = self.state.view
        if view.mode == ViewMode.LABEL and view.selector:
            payload["labels"] = [view.selector]
        elif view.mode == ViewMode.PROJECT and view.selector:
            payload["project_id"] = view.selector
        return payload

    async def create_item(self, content: str, on_screen_ids: Optional[List[str]] = None) -> Item:
        """Create an item and append it to the end of the manual order.

        Args:
            content: Task text.
            on_screen_ids: Ids in display order; defaults to the working list.

        Raises:
            RemoteMutationError: Nothing was changed locally.
        """
        created = await self.client.create_item(self.build_create_payload(content))
        ids = on_screen_ids if on_screen_ids is not None else ids_of(self.state.items)
        self.state.items.append(created)
        await self.store.set(self.state.view.key, append(ids, created.id))
        return created

    async def commit_order(self, view: ViewIdentity, ordered_ids: List[str]) -> None:
        """Persist a full ordering after a drag and mirror it in the working list."""
        await self.store.set(view.key, ordered_ids)
        if view == self.state.view:
            self.state.items = reconcile(self.state.items, ordered_ids)

    async def load_comments(self, item: Item) -> List[Comment]:
        if item.comment_count == 0:
            return []
        return await self.client.fetch_comments(item.id)
