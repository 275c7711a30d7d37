"""Shared fixtures for Todoissimus tests."""
import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import httpx
import pytest
import pytest_asyncio

from config import ViewMode
from core import ServiceContainer, bootstrap
from database import configure_db_path, db
from events import AppEvent, event_bus
from models.entities import ViewIdentity


class FakeTodoist:
    """In-memory stand-in for the Todoist REST API, served via httpx.MockTransport."""

    def __init__(self) -> None:
        self.tasks: List[Dict[str, Any]] = []
        self.projects: List[Dict[str, Any]] = [{"id": "p1", "name": "Inbox"}]
        self.comments: Dict[str, List[Dict[str, Any]]] = {}
        self.requests: List[httpx.Request] = []
        self.fail: Dict[str, int] = {}
        self._next_id = 1000

    def add_task(self, task_id: str, content: str, **fields: Any) -> Dict[str, Any]:
        task = {"id": task_id, "content": content, "labels": [], "priority": 1, **fields}
        self.tasks.append(task)
        return task

    def fail_route(self, method: str, suffix: str, status: int = 500) -> None:
        self.fail[f"{method} {suffix}"] = status

    def _failure(self, request: httpx.Request) -> Optional[int]:
        for key, status in self.fail.items():
            method, suffix = key.split(" ", 1)
            if request.method == method and request.url.path.endswith(suffix):
                return status
        return None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        status = self._failure(request)
        if status is not None:
            return httpx.Response(status, text="boom")

        path = request.url.path
        if request.method == "GET" and path.endswith("/tasks"):
            label = request.url.params.get("label")
            tasks = [t for t in self.tasks if label is None or label in t["labels"]]
            return httpx.Response(200, json=tasks)
        if request.method == "GET" and path.endswith("/projects"):
            return httpx.Response(200, json=self.projects)
        if request.method == "GET" and path.endswith("/comments"):
            task_id = request.url.params.get("task_id")
            return httpx.Response(200, json=self.comments.get(task_id, []))
        if request.method == "POST" and path.endswith("/close"):
            task_id = path.split("/")[-2]
            self.tasks = [t for t in self.tasks if t["id"] != task_id]
            return httpx.Response(204)
        if request.method == "POST" and path.endswith("/tasks"):
            body = json.loads(request.content)
            self._next_id += 1
            task = self.add_task(str(self._next_id), body["content"], **{
                k: v for k, v in body.items() if k != "content"
            })
            return httpx.Response(200, json=task)
        return httpx.Response(404, text="not found")

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


class EventCollector:
    """Subscribe to events and record them for assertions."""

    def __init__(self, *events: AppEvent):
        self.received: list[tuple[AppEvent, object]] = []
        self._subs = []
        for ev in events:
            sub = event_bus.subscribe(ev, lambda data, _ev=ev: self.received.append((_ev, data)))
            self._subs.append(sub)

    def count(self, event: AppEvent) -> int:
        return sum(1 for ev, _ in self.received if ev == event)

    def cleanup(self):
        for sub in self._subs:
            sub.unsubscribe()


async def _reset_db() -> None:
    await db.close()
    db._initialized = False
    db._init_lock = None
    db._conn_lock = None


@pytest.fixture
def todoist() -> FakeTodoist:
    return FakeTodoist()


@pytest_asyncio.fixture
async def fresh_db():
    """Empty in-memory database; the db singleton is reset around the test."""
    await _reset_db()
    event_bus.clear()
    configure_db_path(Path(":memory:"))
    await db.init_db()

    yield db

    await _reset_db()
    event_bus.clear()


@pytest_asyncio.fixture
async def services(fresh_db, todoist: FakeTodoist) -> ServiceContainer:
    """Provide a ServiceContainer whose Todoist client talks to ``todoist``.

    The current view is the label ``home``.
    """
    svc = await bootstrap(transport=todoist.transport)
    svc.state.view = svc.state.selected_view = ViewIdentity(ViewMode.LABEL, "home")
    yield svc
