"""
Due-Set Selector - which items to show next.

An item is due when it has never been reviewed, or when the next_due of
its latest review is at or before `now`. Soft-deleted items are never due.

Ordering policy (fixed):
1. Reviewed items that are due, by next_due ascending (most overdue first);
   ties broken by created_at, then id.
2. Never-reviewed items, oldest created first; ties broken by id.

So a review that is five days overdue comes before a new item, however old
the new item is.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Optional

from recall.fsrs.records import LearningItem, ReviewRecord


@dataclass(frozen=True)
class DueSet:
    """A capped, ordered batch of due items plus the true due count."""
    items: list[LearningItem] = field(default_factory=list)
    total_due: int = 0

    @property
    def remaining(self) -> int:
        """Due items not included in this batch."""
        return self.total_due - len(self.items)


def is_due(
    item: LearningItem,
    latest_review: Optional[ReviewRecord],
    now: datetime
) -> bool:
    """True if the item should be reviewed at `now`."""
    if item.is_deleted:
        return False
    if latest_review is None:
        return True
    return latest_review.next_due <= now


def select_due(
    entries: Iterable[tuple[LearningItem, Optional[ReviewRecord]]],
    now: datetime,
    limit: int
) -> DueSet:
    """
    Select the ordered batch of due items.

    Args:
        entries: (item, latest non-deleted review or None) pairs
        now: Current time
        limit: Maximum number of items to return (>= 0)

    Returns:
        DueSet with at most `limit` items and the count of all due items

    Raises:
        ValueError: If limit is negative
    """
    if limit < 0:
        raise ValueError(f"limit must be >= 0, got {limit}")

    overdue: list[tuple[LearningItem, ReviewRecord]] = []
    new_items: list[LearningItem] = []

    for item, latest in entries:
        if not is_due(item, latest, now):
            continue
        if latest is None:
            new_items.append(item)
        else:
            overdue.append((item, latest))

    overdue.sort(key=lambda pair: (pair[1].next_due, pair[0].created_at, pair[0].id))
    new_items.sort(key=lambda item: (item.created_at, item.id))

    ordered = [item for item, _ in overdue] + new_items

    return DueSet(items=ordered[:limit], total_due=len(ordered))
