"""
Value types exchanged with the record store and the session controller.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from recall.fsrs.errors import InvalidHistory
from recall.fsrs.memory_state import MemoryState


@dataclass(frozen=True)
class LearningItem:
    """An atomic fact to be memorized (front/back pair)."""
    id: str
    front: str
    back: str
    created_at: datetime
    deleted_at: Optional[datetime] = None
    user_id: Optional[str] = None
    source: str = "manual"  # "manual" or "ai"

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None


@dataclass(frozen=True)
class ReviewRecord:
    """
    Immutable fact: one graded review of one item.

    rating is the raw user score (1-5); next_due is the due date computed
    when the review was recorded.
    """
    id: str
    item_id: str
    rating: int
    reviewed_at: datetime
    next_due: datetime
    deleted_at: Optional[datetime] = None
    user_id: Optional[str] = None

    def __post_init__(self):
        if self.next_due < self.reviewed_at:
            raise InvalidHistory(
                f"Review {self.id}: next_due {self.next_due.isoformat()} "
                f"precedes reviewed_at {self.reviewed_at.isoformat()}",
                record_id=self.id
            )

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None


@dataclass(frozen=True)
class MemorySnapshot:
    """
    Cached fold result for one item.

    Valid only while last_review_id is the id of the item's newest
    non-deleted review and review_count is the length of that history.
    """
    state: MemoryState
    last_review_id: str
    review_count: int

    def matches(self, history) -> bool:
        """True if this snapshot was computed from exactly this history."""
        return (
            len(history) == self.review_count
            and bool(history)
            and history[-1].id == self.last_review_id
        )
