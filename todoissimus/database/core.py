import aiosqlite
import asyncio
import json
import sqlite3
import logging
import threading
from contextlib import asynccontextmanager
from typing import Optional, Any, AsyncIterator, Dict

import database as _pkg
from database.helpers import DatabaseError

logger = logging.getLogger(__name__)

_SCHEMA = """
    CREATE TABLE IF NOT EXISTS settings (key TEXT PRIMARY KEY, value TEXT NOT NULL);
    CREATE TABLE IF NOT EXISTS item_orders (
        view_key TEXT PRIMARY KEY,
        ids TEXT NOT NULL DEFAULT '[]',
        updated_at TEXT
    );
"""


class DatabaseCore:
    """Process-wide SQLite handle.

    One connection, opened on first use, shared by every caller. Statements
    run one at a time under ``_conn_lock``; ``init_db`` is idempotent.
    Settings values are stored as JSON text.
    """
    _instance: Optional["DatabaseCore"] = None
    _instance_lock = threading.Lock()

    def __new__(cls) -> "DatabaseCore":
        with cls._instance_lock:
            if cls._instance is None:
                inst = super().__new__(cls)
                inst._initialized = False
                inst._init_lock = None
                inst._conn = None
                inst._conn_lock = None
                cls._instance = inst
        return cls._instance

    def _lock(self, name: str) -> asyncio.Lock:
        # Locks are created lazily so they bind to the running loop
        lock = getattr(self, name)
        if lock is None:
            lock = asyncio.Lock()
            setattr(self, name, lock)
        return lock

    async def _open(self) -> aiosqlite.Connection:
        path = _pkg.DB_PATH
        try:
            conn = await aiosqlite.connect(path)
            conn.row_factory = aiosqlite.Row
            await conn.execute("PRAGMA journal_mode=WAL")
            await conn.execute("PRAGMA busy_timeout=5000")
        except (sqlite3.Error, OSError) as e:
            raise DatabaseError(f"Cannot open order database {path}: {e}") from e
        logger.info(f"Opened database {path}")
        return conn

    @asynccontextmanager
    async def _get_connection(self) -> AsyncIterator[aiosqlite.Connection]:
        async with self._lock("_conn_lock"):
            if self._conn is None:
                self._conn = await self._open()
            yield self._conn

    async def close(self) -> None:
        conn, self._conn = self._conn, None
        if conn is None:
            return
        try:
            await conn.close()
        except (sqlite3.Error, OSError) as e:
            logger.warning(f"Closing database failed: {e}")

    async def init_db(self) -> None:
        """Create the tables on first call; later calls return immediately."""
        async with self._lock("_init_lock"):
            if self._initialized:
                return
            try:
                async with self._get_connection() as conn:
                    await conn.executescript(_SCHEMA)
                    await self._add_missing_columns(conn)
                    await conn.commit()
            except sqlite3.Error as e:
                logger.error(f"Schema setup failed: {e}")
                raise DatabaseError(f"Failed to initialize schema: {e}") from e
            self._initialized = True

    async def _add_missing_columns(self, conn: aiosqlite.Connection) -> None:
        # Order tables written before updated_at existed
        async with conn.execute("PRAGMA table_info(item_orders)") as cursor:
            cols = {r[1] async for r in cursor}
        if "updated_at" not in cols:
            await conn.execute("ALTER TABLE item_orders ADD COLUMN updated_at TEXT")

    # -- settings ------------------------------------------------------------

    async def get_settings(self, defaults: Dict[str, Any]) -> Dict[str, Any]:
        """Read several settings at once.

        Keys missing from the table, or holding unreadable JSON, come back
        with their default.

        Raises:
            DatabaseError: The query itself failed.
        """
        if not defaults:
            return {}
        marks = ",".join("?" for _ in defaults)
        try:
            async with self._get_connection() as conn:
                async with conn.execute(
                    f"SELECT key, value FROM settings WHERE key IN ({marks})",
                    tuple(defaults),
                ) as cursor:
                    rows = await cursor.fetchall()
        except sqlite3.Error as e:
            logger.error(f"Reading settings failed: {e}")
            raise DatabaseError(f"Failed to read settings: {e}") from e

        values = dict(defaults)
        for row in rows:
            try:
                values[row["key"]] = json.loads(row["value"])
            except ValueError:
                logger.warning(f"Setting {row['key']} is not valid JSON, using default")
        return values

    async def get_setting(self, key: str, default: Any = None) -> Any:
        return (await self.get_settings({key: default}))[key]

    async def set_settings(self, values: Dict[str, Any]) -> None:
        """Write several settings in one transaction."""
        try:
            rows = [(key, json.dumps(value)) for key, value in values.items()]
            async with self._get_connection() as conn:
                await conn.executemany(
                    "INSERT OR REPLACE INTO settings (key, value) VALUES (?, ?)", rows
                )
                await conn.commit()
        except (sqlite3.Error, TypeError, ValueError) as e:
            logger.error(f"Saving settings {sorted(values)} failed: {e}")
            raise DatabaseError(f"Failed to save settings: {e}") from e

    async def set_setting(self, key: str, value: Any) -> None:
        await self.set_settings({key: value})
