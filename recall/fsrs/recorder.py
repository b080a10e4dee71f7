"""
Review Recorder - one review transaction, no I/O.

Main workflow:
1. Validate the user score (InvalidRating)
2. Validate the prior history (InvalidHistory)
3. Load prior state from a current snapshot, or replay the history
4. Run the scheduler
5. Return a new immutable ReviewRecord (the caller persists it)

Nothing is mutated in place, so a failure at any step leaves nothing to
roll back.

Precondition: at most one review is recorded for a given (account, item)
at a time. The result is computed from a snapshot of prior history; two
concurrent calls against the same stale history would both succeed and
one schedule would be lost. Callers must serialize per item (lock,
single-writer queue, or optimistic version check) before calling in.
"""

from __future__ import annotations

import random
import uuid
from datetime import datetime
from typing import NamedTuple, Optional, Sequence

import structlog

from recall.fsrs.config import DEFAULT_PARAMETERS, SchedulerParameters
from recall.fsrs.errors import InvalidHistory
from recall.fsrs.memory_state import MemoryState
from recall.fsrs.ratings import map_rating
from recall.fsrs.records import MemorySnapshot, ReviewRecord
from recall.fsrs.replay import resolve_state, validate_history
from recall.fsrs.scheduler import schedule

logger = structlog.get_logger(__name__)


class ReviewOutcome(NamedTuple):
    """The new review record and the memory state it leads to."""
    record: ReviewRecord
    state: MemoryState

    def snapshot(self, review_count: int) -> MemorySnapshot:
        """Snapshot for a history of `review_count` records ending in this one."""
        return MemorySnapshot(
            state=self.state,
            last_review_id=self.record.id,
            review_count=review_count
        )


def apply_review(
    item_id: str,
    prior_history: Sequence[ReviewRecord],
    rating: int,
    now: datetime,
    *,
    snapshot: Optional[MemorySnapshot] = None,
    params: SchedulerParameters = DEFAULT_PARAMETERS,
    rng: Optional[random.Random] = None,
    review_id: Optional[str] = None,
    user_id: Optional[str] = None
) -> ReviewOutcome:
    """
    Record one review and return the record together with the new state.

    Args:
        item_id: Item being reviewed
        prior_history: Its non-deleted reviews, reviewed_at ascending
        rating: User score (1-5)
        now: Review timestamp
        snapshot: Optional cached state; used only if it matches the history
        params: Scheduler parameters
        rng: Random source for interval fuzzing
        review_id: Id for the new record (uuid4 if omitted)
        user_id: Owner, copied onto the record

    Returns:
        ReviewOutcome(record, state)

    Raises:
        InvalidRating: If rating is outside the domain
        InvalidHistory: If the history is inconsistent or `now` precedes it
    """
    grade = map_rating(rating)

    validate_history(prior_history, item_id)
    if prior_history and now < prior_history[-1].reviewed_at:
        last = prior_history[-1]
        raise InvalidHistory(
            f"Review at {now.isoformat()} precedes review {last.id} "
            f"at {last.reviewed_at.isoformat()}",
            record_id=last.id
        )

    prior_state = resolve_state(prior_history, snapshot, params)
    new_state, next_due = schedule(prior_state, grade.rating, now, params, rng)

    record = ReviewRecord(
        id=review_id or str(uuid.uuid4()),
        item_id=item_id,
        rating=grade.score,
        reviewed_at=now,
        next_due=next_due,
        user_id=user_id
    )

    logger.info(
        "review_recorded",
        item_id=item_id,
        review_id=record.id,
        score=grade.score,
        rating=grade.rating.name,
        stability=round(new_state.stability, 4),
        difficulty=round(new_state.difficulty, 4),
        next_due=next_due.isoformat(),
    )

    return ReviewOutcome(record=record, state=new_state)


def record_review(
    item_id: str,
    prior_history: Sequence[ReviewRecord],
    rating: int,
    now: datetime,
    *,
    snapshot: Optional[MemorySnapshot] = None,
    params: SchedulerParameters = DEFAULT_PARAMETERS,
    rng: Optional[random.Random] = None,
    review_id: Optional[str] = None,
    user_id: Optional[str] = None
) -> ReviewRecord:
    """
    Record one review; see apply_review() for arguments and errors.
    """
    outcome = apply_review(
        item_id,
        prior_history,
        rating,
        now,
        snapshot=snapshot,
        params=params,
        rng=rng,
        review_id=review_id,
        user_id=user_id
    )
    return outcome.record
