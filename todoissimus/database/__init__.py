"""Async SQLite storage for settings and per-view item orders.

``db`` is the shared instance; import ``DatabaseError`` from here as well.
Point the package at another file with ``configure_db_path`` before the
first query (tests use ``:memory:``).
"""
from pathlib import Path

from config import DB_PATH as _DEFAULT_DB_PATH

DB_PATH: Path = _DEFAULT_DB_PATH

from database.helpers import DatabaseError  # noqa: E402
from database.core import DatabaseCore  # noqa: E402
from database.orders import OrdersMixin  # noqa: E402


class Database(DatabaseCore, OrdersMixin):
    pass


def configure_db_path(path: Path) -> None:
    """Use ``path`` for the database file.

    Raises:
        RuntimeError: A connection to the previous path is already open.
    """
    global DB_PATH
    if db._conn is not None:
        raise RuntimeError(f"Database already open at {DB_PATH}; close it before switching to {path}")
    DB_PATH = path


db = Database()
