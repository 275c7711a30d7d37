import json
import logging
from typing import Any, List

logger = logging.getLogger(__name__)


class DatabaseError(Exception):
    """Custom exception for database operations."""
    pass


def _decode_order(raw: Any, view_key: str) -> List[str]:
    """Parse a stored order column into a list of string ids.

    A row that does not hold a JSON list reads as an empty order so a
    damaged entry only costs the manual ordering of that one view.
    """
    try:
        ids = json.loads(raw) if raw else []
    except (TypeError, ValueError):
        logger.warning(f"Discarding unreadable order for '{view_key}'")
        return []
    if not isinstance(ids, list):
        logger.warning(f"Discarding non-list order for '{view_key}'")
        return []
    return [str(i) for i in ids]


def _encode_order(ids: List[str]) -> str:
    return json.dumps([str(i) for i in ids])
