from typing import List

from database import db
from services.ordering import dedupe


class OrderStore:
    """Persisted manual order per view key.

    Each write replaces the whole entry for the key, so the stored list is
    always a consistent snapshot of what was on screen.
    """

    async def get(self, view_key: str) -> List[str]:
        return await db.get_order(view_key)

    async def set(self, view_key: str, ids: List[str]) -> None:
        await db.set_order(view_key, dedupe(ids))

    async def clear(self, view_key: str) -> None:
        await db.delete_order(view_key)
