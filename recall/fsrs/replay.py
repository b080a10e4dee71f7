"""
History Replayer - rebuild MemoryState from review history.

The review log is the source of truth; MemoryState is a fold of the
scheduler over it. Snapshots (MemorySnapshot) are only a cache of that
fold and are accepted when they provably match the history.

The history handed in is assumed to be already filtered (no soft-deleted
records) and ordered by reviewed_at. It is validated, never repaired.
"""

from __future__ import annotations

from typing import Optional, Sequence

import structlog

from recall.fsrs.config import DEFAULT_PARAMETERS, SchedulerParameters
from recall.fsrs.errors import InvalidHistory
from recall.fsrs.memory_state import MemoryState
from recall.fsrs.ratings import map_rating
from recall.fsrs.records import MemorySnapshot, ReviewRecord
from recall.fsrs.scheduler import schedule

logger = structlog.get_logger(__name__)


def validate_history(
    history: Sequence[ReviewRecord],
    item_id: Optional[str] = None
) -> None:
    """
    Check that a history is chronologically ordered and internally consistent.

    Raises:
        InvalidHistory: On a reviewed_at that goes backwards, a record with
            next_due < reviewed_at, or a record belonging to another item
    """
    previous: Optional[ReviewRecord] = None
    for record in history:
        if item_id is not None and record.item_id != item_id:
            raise InvalidHistory(
                f"Review {record.id} belongs to item {record.item_id}, not {item_id}",
                record_id=record.id
            )
        if record.next_due < record.reviewed_at:
            raise InvalidHistory(
                f"Review {record.id} has next_due before reviewed_at",
                record_id=record.id
            )
        if previous is not None and record.reviewed_at < previous.reviewed_at:
            raise InvalidHistory(
                f"Review {record.id} at {record.reviewed_at.isoformat()} precedes "
                f"review {previous.id} at {previous.reviewed_at.isoformat()}",
                record_id=record.id
            )
        previous = record


def replay(
    history: Sequence[ReviewRecord],
    params: SchedulerParameters = DEFAULT_PARAMETERS
) -> Optional[MemoryState]:
    """
    Fold the scheduler over an ordered review history.

    Each stored user score is mapped through the rating table and fed to
    schedule() at its reviewed_at. The next_due values computed along the
    way are discarded; only the final state is returned. Fuzzing only ever
    moves next_due, so the fold runs without it.

    Args:
        history: Non-deleted reviews, ordered by reviewed_at ascending
        params: Scheduler parameters

    Returns:
        Final MemoryState, or None for an empty history (new item)

    Raises:
        InvalidHistory: If the history is out of order or inconsistent
        InvalidRating: If a stored score is outside the rating domain
    """
    validate_history(history)

    fold_params = params.override(fuzz_enabled=False) if params.fuzz_enabled else params

    state: Optional[MemoryState] = None
    for record in history:
        grade = map_rating(record.rating)
        state, _ = schedule(state, grade.rating, record.reviewed_at, fold_params)

    return state


def resolve_state(
    history: Sequence[ReviewRecord],
    snapshot: Optional[MemorySnapshot] = None,
    params: SchedulerParameters = DEFAULT_PARAMETERS
) -> Optional[MemoryState]:
    """
    Current MemoryState for a history, using a snapshot when it is current.

    Returns the same value as replay(history): a snapshot is only used when
    it was computed from exactly this history; a stale one is ignored.
    """
    if snapshot is not None:
        if snapshot.matches(history):
            return snapshot.state
        logger.debug(
            "memory_snapshot_stale",
            last_review_id=snapshot.last_review_id,
            review_count=snapshot.review_count,
            history_length=len(history),
        )

    return replay(history, params)
