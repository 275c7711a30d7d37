"""Headless bootstrap for Todoissimus services.

Initializes the service layer without any Flet dependency, suitable for
scripts and testing.

Usage:
    from core import bootstrap, shutdown

    svc = await bootstrap(db_path=Path("my.db"))
    items = await svc.task.load()
    await shutdown()
"""
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import httpx

from database import db, configure_db_path
from models.entities import AppState
from services.order_store import OrderStore
from services.settings_service import SettingsService
from services.task_service import TaskService
from services.todoist_client import TodoistClient


@dataclass
class ServiceContainer:
    """Container holding all initialized services."""
    state: AppState
    task: TaskService
    settings: SettingsService
    orders: OrderStore
    client: TodoistClient


async def bootstrap(
    db_path: Optional[Path] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> ServiceContainer:
    """Open the database, load settings and wire the services.

    Args:
        db_path: Custom database path. Uses ``config.DB_PATH`` if None.
        transport: httpx transport for the Todoist client (tests).
    """
    if db_path is not None:
        configure_db_path(db_path)

    await db.init_db()

    state = AppState()
    settings = SettingsService(state)
    await settings.load()

    client = TodoistClient(token=state.token, transport=transport)
    orders = OrderStore()
    task = TaskService(state, client, orders)

    return ServiceContainer(
        state=state,
        task=task,
        settings=settings,
        orders=orders,
        client=client,
    )


async def shutdown() -> None:
    """Clean up resources (close database connection)."""
    await db.close()
