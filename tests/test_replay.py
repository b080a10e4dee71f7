from datetime import timedelta

import pytest

from recall.fsrs.config import build_parameters
from recall.fsrs.errors import InvalidHistory, InvalidRating
from recall.fsrs.memory_state import MemoryState
from recall.fsrs.ratings import map_rating
from recall.fsrs.records import MemorySnapshot, ReviewRecord
from recall.fsrs.replay import replay, resolve_state, validate_history
from recall.fsrs.scheduler import schedule


REVIEWS = [(0, 4), (3, 4), (10, 2), (11, 3), (15, 5), (40, 4)]


def test_empty_history_is_new_item():
    assert replay([]) is None


def test_replay_equals_manual_fold(now, build_history):
    history = build_history("item-1", now, REVIEWS)

    state = None
    for record in history:
        state, _ = schedule(state, map_rating(record.rating).rating, record.reviewed_at)

    assert replay(history) == state


def test_replay_final_state_tracks_last_review(now, build_history):
    history = build_history("item-1", now, REVIEWS)
    state = replay(history)
    assert state.last_reviewed == history[-1].reviewed_at


def test_replay_ignores_fuzz(now, build_history):
    """Fuzz only moves next_due, so the replayed state is unaffected."""
    history = build_history("item-1", now, REVIEWS)
    fuzzed = build_parameters(fuzz_enabled=True)
    assert replay(history, fuzzed) == replay(history)


def test_out_of_order_history_rejected(now, build_history):
    history = build_history("item-1", now, [(0, 4), (5, 4)])
    with pytest.raises(InvalidHistory) as exc_info:
        replay(list(reversed(history)))
    assert exc_info.value.record_id == history[0].id


def test_equal_timestamps_are_allowed(now):
    first = ReviewRecord(id="r1", item_id="item-1", rating=3, reviewed_at=now, next_due=now + timedelta(days=1))
    second = ReviewRecord(id="r2", item_id="item-1", rating=4, reviewed_at=now, next_due=now + timedelta(days=3))
    assert replay([first, second]) is not None


def test_next_due_before_reviewed_at_rejected(now):
    with pytest.raises(InvalidHistory):
        ReviewRecord(id="bad", item_id="item-1", rating=4, reviewed_at=now, next_due=now - timedelta(days=1))


def test_history_for_other_item_rejected(now, build_history):
    history = build_history("item-1", now, [(0, 4)])
    with pytest.raises(InvalidHistory):
        validate_history(history, item_id="item-2")


def test_stored_rating_outside_domain_rejected(now):
    record = ReviewRecord(id="r1", item_id="item-1", rating=9, reviewed_at=now, next_due=now + timedelta(days=1))
    with pytest.raises(InvalidRating):
        replay([record])


# ---- Snapshot cache ----

def test_matching_snapshot_is_used(now, build_history):
    history = build_history("item-1", now, REVIEWS)
    cached_state = MemoryState(difficulty=2.0, stability=99.0, last_reviewed=history[-1].reviewed_at)
    snapshot = MemorySnapshot(state=cached_state, last_review_id=history[-1].id, review_count=len(history))

    assert resolve_state(history, snapshot) is cached_state


def test_stale_snapshot_falls_back_to_replay(now, build_history):
    history = build_history("item-1", now, REVIEWS)
    bogus = MemoryState(difficulty=2.0, stability=99.0, last_reviewed=now)

    wrong_id = MemorySnapshot(state=bogus, last_review_id=history[-2].id, review_count=len(history))
    wrong_count = MemorySnapshot(state=bogus, last_review_id=history[-1].id, review_count=len(history) + 1)

    assert resolve_state(history, wrong_id) == replay(history)
    assert resolve_state(history, wrong_count) == replay(history)


def test_snapshot_never_matches_empty_history(now):
    bogus = MemoryState(difficulty=2.0, stability=99.0, last_reviewed=now)
    snapshot = MemorySnapshot(state=bogus, last_review_id="r1", review_count=0)
    assert resolve_state([], snapshot) is None
