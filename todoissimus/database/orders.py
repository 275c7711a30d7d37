import sqlite3
import logging
from datetime import datetime
from typing import List

from database.helpers import DatabaseError, _decode_order, _encode_order

logger = logging.getLogger(__name__)


class OrdersMixin:
    """Per-view manual ordering, one row per view key."""

    async def get_order(self, view_key: str) -> List[str]:
        """Stored order for a view, or [] when none was saved."""
        try:
            async with self._get_connection() as conn:
                async with conn.execute(
                    "SELECT ids FROM item_orders WHERE view_key = ?",
                    (view_key,)
                ) as cursor:
                    row = await cursor.fetchone()
        except sqlite3.Error as e:
            logger.error(f"Error loading order for '{view_key}': {e}")
            raise DatabaseError(f"Failed to load order: {e}") from e
        return _decode_order(row["ids"], view_key) if row else []

    async def set_order(self, view_key: str, ids: List[str]) -> None:
        """Replace the whole stored order for a view."""
        try:
            async with self._get_connection() as conn:
                await conn.execute(
                    "INSERT OR REPLACE INTO item_orders (view_key, ids, updated_at) VALUES (?, ?, ?)",
                    (view_key, _encode_order(ids), datetime.now().isoformat())
                )
                await conn.commit()
        except (sqlite3.Error, TypeError) as e:
            logger.error(f"Error saving order for '{view_key}': {e}")
            raise DatabaseError(f"Failed to save order: {e}") from e

    async def delete_order(self, view_key: str) -> None:
        try:
            async with self._get_connection() as conn:
                await conn.execute("DELETE FROM item_orders WHERE view_key = ?", (view_key,))
                await conn.commit()
        except sqlite3.Error as e:
            logger.error(f"Error deleting order for '{view_key}': {e}")
            raise DatabaseError(f"Failed to delete order: {e}") from e

