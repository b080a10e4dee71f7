"""
Learning session controller.

Sits between an interactive front end and the scheduling engine:
- next_batch() asks the due-set selector what to show next
- submit() records one rating, serialized per (user, item), and persists
  the review together with a refreshed memory snapshot

All persistence and ownership checks happen here; the engine itself only
computes.
"""

from __future__ import annotations

import random
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Iterable, Iterator, Optional

import structlog

from recall import fsrs
from recall.fsrs import database
from recall.fsrs.clock import Clock, SystemClock
from recall.fsrs.config import DEFAULT_PARAMETERS, SchedulerParameters
from recall.fsrs.records import LearningItem, ReviewRecord

logger = structlog.get_logger(__name__)


DEFAULT_BATCH_SIZE = 20


@dataclass(frozen=True)
class SessionBatch:
    """
    The items to present next, plus how many are due in total.
    """
    items: list[LearningItem] = field(default_factory=list)
    total_due: int = 0

    @property
    def remaining(self) -> int:
        return self.total_due - len(self.items)


class _ItemLocks:
    """
    One lock per (user, item); reviews of the same item never overlap.

    A lock lives only while some thread holds or waits on it.
    """

    def __init__(self):
        self._guard = threading.Lock()
        # key -> [lock, number of threads holding or waiting]
        self._locks: dict[tuple[str, str], list] = {}

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)

    @contextmanager
    def hold(self, user_id: str, item_id: str) -> Iterator[None]:
        key = (user_id, item_id)
        with self._guard:
            entry = self._locks.get(key)
            if entry is None:
                entry = [threading.Lock(), 0]
                self._locks[key] = entry
            entry[1] += 1

        try:
            with entry[0]:
                yield
        finally:
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[key]


# Shared across controllers in this process
_ITEM_LOCKS = _ItemLocks()


class SessionController:
    """
    Learning session for one user.

    Serializes submit() per item within this process. Multi-process
    deployments need an equivalent guard in the store (e.g. an optimistic
    check on the latest review id).
    """

    def __init__(
        self,
        user_id: str,
        clock: Optional[Clock] = None,
        params: SchedulerParameters = DEFAULT_PARAMETERS,
        rng: Optional[random.Random] = None
    ):
        self.user_id = user_id
        self.clock = clock or SystemClock()
        self.params = params
        self.rng = rng

    def next_batch(self, limit: int = DEFAULT_BATCH_SIZE) -> SessionBatch:
        """
        Due items for this user, overdue reviews first, then new items.
        """
        now = self.clock.now()
        candidates = database.load_due_candidates(self.user_id)
        due = fsrs.select_due(candidates, now, limit)

        logger.info(
            "session_batch_built",
            user_id=self.user_id,
            batch_size=len(due.items),
            total_due=due.total_due,
        )

        return SessionBatch(items=due.items, total_due=due.total_due)

    def submit(self, item_id: str, score: int) -> ReviewRecord:
        """
        Record one rating for one item and persist it.

        Raises:
            InvalidRating: If score is outside 1-5
            LookupError: If the item does not exist, is deleted, or belongs
                to another user
            InvalidHistory: If stored history is inconsistent
        """
        # Fail fast before taking the lock or touching the store
        fsrs.map_rating(score)

        with _ITEM_LOCKS.hold(self.user_id, item_id):
            item = database.get_item(self.user_id, item_id)
            if item is None or item.is_deleted:
                raise LookupError(f"No active item {item_id} for user {self.user_id}")

            history = database.load_history(self.user_id, item_id)
            snapshot = database.load_snapshot(self.user_id, item_id)

            outcome = fsrs.apply_review(
                item_id,
                history,
                score,
                self.clock.now(),
                snapshot=snapshot,
                params=self.params,
                rng=self.rng,
                user_id=self.user_id
            )

            database.save_review(
                self.user_id,
                outcome.record,
                snapshot=outcome.snapshot(review_count=len(history) + 1)
            )

        return outcome.record

    def submit_many(self, responses: Iterable[tuple[str, int]]) -> list[ReviewRecord]:
        """
        Record a batch of (item_id, score) responses in order.

        Every score is validated before anything is stored, so an invalid
        score rejects the whole batch.
        """
        responses = list(responses)
        for _, score in responses:
            fsrs.map_rating(score)

        return [self.submit(item_id, score) for item_id, score in responses]
