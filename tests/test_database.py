from datetime import timedelta

import pytest

from recall.fsrs import database
from recall.fsrs.recorder import apply_review
from recall.fsrs.records import MemorySnapshot
from recall.fsrs.replay import replay


USER = "user-1"
OTHER_USER = "user-2"


def _review_and_save(item_id, at, score, user_id=USER):
    history = database.load_history(user_id, item_id)
    outcome = apply_review(item_id, history, score, at, user_id=user_id)
    database.save_review(user_id, outcome.record, snapshot=outcome.snapshot(len(history) + 1))
    return outcome.record


# ---- Connection ----

def test_missing_database_url(monkeypatch):
    monkeypatch.setattr(database, "load_dotenv", lambda *args, **kwargs: False)
    monkeypatch.delenv("DATABASE_URL", raising=False)
    with pytest.raises(ValueError):
        database.get_database_url()


def test_test_mode_switches_database(monkeypatch):
    monkeypatch.setattr(database, "load_dotenv", lambda *args, **kwargs: False)
    monkeypatch.setenv("DATABASE_URL", "postgresql://u:p@localhost:5432/recall_db")
    monkeypatch.setenv("TEST_MODE", "true")
    assert database.get_database_url().endswith("/test_recall_db")

    monkeypatch.setenv("TEST_MODE", "false")
    assert database.get_database_url().endswith("/recall_db")


def test_init_db_is_idempotent(tmp_db):
    database.init_db()
    database.init_db()


# ---- Items ----

def test_add_and_get_item(tmp_db, now):
    item = database.add_item(USER, "hond", "dog", created_at=now, item_id="item-1")
    assert item.id == "item-1"
    assert item.source == "manual"

    loaded = database.get_item(USER, "item-1")
    assert loaded == item
    assert loaded.created_at == now


def test_items_are_scoped_to_owner(tmp_db, now):
    database.add_item(USER, "kat", "cat", created_at=now, item_id="item-1")
    assert database.get_item(OTHER_USER, "item-1") is None


def test_unknown_source_rejected(tmp_db):
    with pytest.raises(ValueError):
        database.add_item(USER, "a", "b", source="import")


def test_soft_delete_item(tmp_db, now):
    database.add_item(USER, "huis", "house", created_at=now, item_id="item-1")
    assert database.soft_delete_item(USER, "item-1", at=now)
    assert not database.soft_delete_item(USER, "item-1", at=now)
    assert database.get_item(USER, "item-1").is_deleted


# ---- Reviews ----

def test_history_round_trip(tmp_db, now):
    database.add_item(USER, "boek", "book", created_at=now, item_id="item-1")
    first = _review_and_save("item-1", now, 4)
    second = _review_and_save("item-1", now + timedelta(days=3), 3)

    history = database.load_history(USER, "item-1")
    assert [r.id for r in history] == [first.id, second.id]
    assert history[1].next_due == second.next_due
    assert history[1].user_id == USER
    assert database.latest_review(USER, "item-1") == history[-1]


def test_history_is_scoped_to_owner(tmp_db, now):
    database.add_item(USER, "boek", "book", created_at=now, item_id="item-1")
    _review_and_save("item-1", now, 4)
    assert database.load_history(OTHER_USER, "item-1") == []


def test_soft_delete_review_keeps_other_schedules(tmp_db, now):
    database.add_item(USER, "fiets", "bicycle", created_at=now, item_id="item-1")
    first = _review_and_save("item-1", now, 4)
    second = _review_and_save("item-1", now + timedelta(days=3), 1)
    third = _review_and_save("item-1", now + timedelta(days=4), 4)

    assert database.soft_delete_review(USER, second.id, at=now + timedelta(days=5))
    assert not database.soft_delete_review(USER, second.id)

    history = database.load_history(USER, "item-1")
    assert [r.id for r in history] == [first.id, third.id]
    assert history[1].next_due == third.next_due
    assert database.load_snapshot(USER, "item-1") is None


def test_recent_reviews_newest_first(tmp_db, now):
    database.add_item(USER, "a", "b", created_at=now, item_id="item-1")
    records = [_review_and_save("item-1", now + timedelta(days=d), 4) for d in (0, 3, 12)]
    recent = database.get_recent_reviews(USER, limit=2)
    assert [r.id for r in recent] == [records[2].id, records[1].id]


def test_due_candidates_pair_items_with_latest_review(tmp_db, now):
    database.add_item(USER, "a", "1", created_at=now, item_id="reviewed")
    database.add_item(USER, "b", "2", created_at=now, item_id="fresh")
    database.add_item(USER, "c", "3", created_at=now, item_id="gone")
    database.add_item(OTHER_USER, "d", "4", created_at=now, item_id="foreign")
    _review_and_save("reviewed", now, 4)
    latest = _review_and_save("reviewed", now + timedelta(days=3), 4)
    database.soft_delete_item(USER, "gone", at=now)

    candidates = dict(
        (item.id, review) for item, review in database.load_due_candidates(USER)
    )
    assert set(candidates) == {"reviewed", "fresh"}
    assert candidates["reviewed"].id == latest.id
    assert candidates["fresh"] is None
    assert database.list_reviewed_item_ids(USER) == ["reviewed"]


def test_review_rows_for_analytics(tmp_db, now):
    database.add_item(USER, "a", "b", created_at=now, item_id="item-1")
    record = _review_and_save("item-1", now, 2)
    rows = database.load_review_rows(USER)
    assert rows == [{
        "review_id": record.id,
        "item_id": "item-1",
        "rating": 2,
        "reviewed_at": now,
        "next_due": record.next_due,
    }]


# ---- Snapshots ----

def test_saved_snapshot_matches_replay(tmp_db, now):
    database.add_item(USER, "a", "b", created_at=now, item_id="item-1")
    _review_and_save("item-1", now, 4)
    _review_and_save("item-1", now + timedelta(days=3), 5)

    history = database.load_history(USER, "item-1")
    snapshot = database.load_snapshot(USER, "item-1")
    assert snapshot.matches(history)
    assert snapshot.state.stability == pytest.approx(replay(history).stability)
    assert snapshot.state.difficulty == pytest.approx(replay(history).difficulty)
    assert snapshot.state.last_reviewed == history[-1].reviewed_at


def test_save_snapshot_replaces_existing(tmp_db, now):
    database.add_item(USER, "a", "b", created_at=now, item_id="item-1")
    record = _review_and_save("item-1", now, 4)
    state = database.load_snapshot(USER, "item-1").state

    replacement = MemorySnapshot(state=state, last_review_id=record.id, review_count=7)
    database.save_snapshot(USER, "item-1", replacement)
    assert database.load_snapshot(USER, "item-1").review_count == 7

    database.delete_snapshot(USER, "item-1")
    assert database.load_snapshot(USER, "item-1") is None


def test_equal_timestamps_keep_save_order(tmp_db, now):
    database.add_item(USER, "a", "b", created_at=now, item_id="item-1")
    first = apply_review("item-1", [], 4, now, review_id="r-z", user_id=USER)
    database.save_review(USER, first.record)
    second = apply_review("item-1", [first.record], 2, now, review_id="r-a", user_id=USER)
    database.save_review(USER, second.record)

    history = database.load_history(USER, "item-1")
    assert [r.id for r in history] == ["r-z", "r-a"]
    assert database.latest_review(USER, "item-1").id == "r-a"
    assert [r.id for r in database.get_recent_reviews(USER)] == ["r-a", "r-z"]
    assert replay(history) == second.state
