"""
Helpers shared by the catalog services (stages, statuses, tasks).

Validation helpers append human-readable messages to a list so a service can
report every violation of one request in a single ValidationError.
"""

import logging
from collections import Counter
from typing import Iterable, List, Mapping, Optional, Sequence

from selection_pipeline.db.store import DataStore
from selection_pipeline.errors import NotFoundError, ValidationError
from selection_pipeline.schemas.common import SortOrderUpdate

logger = logging.getLogger(__name__)

# Catalog order: sort_order, ties broken by creation time
CATALOG_ORDER = ["sort_order", "created_at"]


def check_text(
    errors: List[str],
    value: Optional[str],
    label: str,
    max_length: int,
    required: bool = False,
) -> None:
    if value is None or not value.strip():
        if required:
            errors.append(f"{label} is required")
        return
    if len(value) > max_length:
        errors.append(f"{label} must be at most {max_length} characters")


def check_range(
    errors: List[str],
    value: Optional[int],
    label: str,
    minimum: int,
    maximum: Optional[int] = None,
) -> None:
    if value is None:
        return
    if value < minimum or (maximum is not None and value > maximum):
        if maximum is None:
            errors.append(f"{label} must be at least {minimum}")
        else:
            errors.append(f"{label} must be between {minimum} and {maximum}")


def raise_if_invalid(errors: Sequence[str]) -> None:
    if errors:
        raise ValidationError(errors)


def next_sort_order(rows: Iterable[Mapping]) -> int:
    """Return one past the highest sort_order; an empty collection starts at 1."""
    return max((row["sort_order"] for row in rows), default=0) + 1


def drop_unset(changes: Mapping) -> dict:
    """Drop explicit nulls from a partial update."""
    return {key: value for key, value in changes.items() if value is not None}


async def reorder(
    store: DataStore,
    collection: str,
    items: Sequence[SortOrderUpdate],
    bump_version: bool = False,
) -> None:
    """
    Apply a batch of (id, sort_order) pairs atomically.

    An id may appear only once in a batch. Every id is checked before
    anything is written; the first unknown id is reported as NotFoundError.
    The updates then run in one transaction. With bump_version the rows'
    config_version is incremented as well.
    """
    errors: List[str] = []
    for item in items:
        check_range(errors, item.sort_order, "sort_order", 0)
    for item_id, count in Counter(item.id for item in items).items():
        if count > 1:
            errors.append(f"duplicate id in reorder batch: {item_id}")
    raise_if_invalid(errors)

    current = {}
    for item in items:
        row = await store.get_one(collection, item.id)
        if row is None:
            raise NotFoundError(collection, item.id)
        current[item.id] = row

    async with store.transaction():
        for item in items:
            changes = {"sort_order": item.sort_order}
            if bump_version:
                changes["config_version"] = current[item.id]["config_version"] + 1
            await store.update(collection, item.id, changes)

    logger.info("Reordered %d rows in %s", len(items), collection)
