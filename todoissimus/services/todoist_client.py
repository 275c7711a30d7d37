"""Thin async client for the Todoist REST API (v2).

With a personal token it talks to Todoist directly; without one it goes
through the local proxy (``server.py``), which adds the server-side token.
"""
import logging
from typing import Any, Dict, List, Optional

import httpx

from config import API_BASE_URL, PROXY_BASE_URL, REQUEST_TIMEOUT_SECONDS
from models.entities import Comment, Item, ViewIdentity

logger = logging.getLogger(__name__)


class RemoteError(Exception):
    """A Todoist request failed (transport error or non-2xx status)."""

    def __init__(self, message: str, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.status = status


class RemoteFetchError(RemoteError):
    """Reading items, projects or comments failed."""


class RemoteMutationError(RemoteError):
    """Closing, creating or updating an item failed."""


class TodoistClient:
    """Async Todoist client over httpx.

    Args:
        token: Personal API token. Empty means "use the proxy".
        transport: Optional httpx transport, e.g. ``httpx.MockTransport`` in tests.
    """

    def __init__(
        self,
        token: str = "",
        api_base: str = API_BASE_URL,
        proxy_base: str = PROXY_BASE_URL,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
    ) -> None:
        self.token = token
        self._api_base = api_base.rstrip("/")
        self._proxy_base = proxy_base.rstrip("/")
        self._transport = transport
        self._timeout = timeout

    @property
    def using_proxy(self) -> bool:
        return not self.token

    @property
    def base_url(self) -> str:
        return self._proxy_base if self.using_proxy else self._api_base

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if not self.using_proxy:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def _request(
        self,
        method: str,
        path: str,
        error_cls: type,
        params: Optional[Dict[str, str]] = None,
        body: Optional[Dict[str, Any]] = None,
    ) -> Any:
        url = f"{self.base_url}{path}"
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                resp = await client.request(
                    method,
                    url,
                    params=params,
                    json=body,
                    headers=self._headers(),
                )
        except httpx.HTTPError as e:
            logger.warning(f"API {method} {path} failed: {e}")
            raise error_cls(f"API {method} {path} failed: {e}") from e

        if resp.is_error:
            text = resp.text
            logger.warning(f"API {method} {path} failed {resp.status_code}: {text}")
            raise error_cls(f"API {method} {path} failed {resp.status_code}: {text}", resp.status_code)

        if resp.status_code == 204 or not resp.content:
            return None
        if "application/json" in resp.headers.get("content-type", ""):
            return resp.json()
        return resp.text

    # -- reads ---------------------------------------------------------------

    async def fetch_items(self, view: ViewIdentity) -> List[Item]:
        """Active tasks of a view, in the order Todoist returns them."""
        data = await self._request("GET", "/tasks", RemoteFetchError, params=view.query_params())
        if not isinstance(data, list):
            raise RemoteFetchError(f"Unexpected response for {view.key}: {data!r}")
        return [Item.from_api(d) for d in data]

    async def fetch_projects(self) -> Dict[str, str]:
        """Project id -> name."""
        data = await self._request("GET", "/projects", RemoteFetchError)
        if data is None:
            return {}
        if not isinstance(data, list) or not all(isinstance(p, dict) and "id" in p for p in data):
            raise RemoteFetchError(f"Unexpected response for projects: {data!r}")
        return {str(p["id"]): p.get("name", "") for p in data}

    async def fetch_comments(self, task_id: str) -> List[Comment]:
        data = await self._request("GET", "/comments", RemoteFetchError, params={"task_id": task_id})
        if data is None:
            return []
        if not isinstance(data, list):
            raise RemoteFetchError(f"Unexpected response for comments of {task_id}: {data!r}")
        return [Comment.from_api(c) for c in data]

    # -- writes --------------------------------------------------------------

    async def close_item(self, item_id: str) -> None:
        await self._request("POST", f"/tasks/{item_id}/close", RemoteMutationError)

    async def create_item(self, payload: Dict[str, Any]) -> Item:
        data = await self._request("POST", "/tasks", RemoteMutationError, body=payload)
        if not isinstance(data, dict):
            raise RemoteMutationError(f"Unexpected response creating task: {data!r}")
        return Item.from_api(data)

    async def update_item(self, item_id: str, payload: Dict[str, Any]) -> Optional[Item]:
        """Update a task; REST v2 uses POST, older deployments accept PATCH."""
        try:
            data = await self._request("POST", f"/tasks/{item_id}", RemoteMutationError, body=payload)
        except RemoteMutationError:
            logger.info(f"POST update of {item_id} failed, retrying with PATCH")
            data = await self._request("PATCH", f"/tasks/{item_id}", RemoteMutationError, body=payload)
        return Item.from_api(data) if isinstance(data, dict) else None
