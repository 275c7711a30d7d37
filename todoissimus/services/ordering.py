"""Merging the remote item set with a locally persisted manual order.

All functions are pure and never raise; they are safe to call from UI
callbacks without error handling.
"""
from typing import Dict, Iterable, List, Sequence

from models.entities import Item


def ids_of(items: Iterable[Item]) -> List[str]:
    return [item.id for item in items]


def reconcile(remote_items: Sequence[Item], stored_order: Sequence[str]) -> List[Item]:
    """Order remote items by the stored order, unknown items last.

    Items named in ``stored_order`` come first, in that order; ids that are
    not among the remote items are skipped. Remaining remote items follow in
    the order the remote source returned them. Every remote item appears
    exactly once. With no stored order the remote order is kept as is.
    """
    if not stored_order:
        return list(remote_items)

    lookup: Dict[str, Item] = {item.id: item for item in remote_items}
    result: List[Item] = []
    for item_id in stored_order:
        item = lookup.pop(str(item_id), None)
        if item is not None:
            result.append(item)

    # dicts keep insertion order, so leftovers are still in remote order
    result.extend(lookup.values())
    return result


def dedupe(order: Iterable[str]) -> List[str]:
    """Drop repeated ids, keeping the first occurrence."""
    seen = set()
    result = []
    for item_id in order:
        key = str(item_id)
        if key not in seen:
            seen.add(key)
            result.append(key)
    return result


def prune(order: Iterable[str], item_id: str) -> List[str]:
    """Remove one id without disturbing the others."""
    target = str(item_id)
    return [i for i in order if str(i) != target]


def append(order: Iterable[str], item_id: str) -> List[str]:
    """Add an id at the end unless it is already present."""
    result = dedupe(order)
    if str(item_id) not in result:
        result.append(str(item_id))
    return result

