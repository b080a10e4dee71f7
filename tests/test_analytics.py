from datetime import timedelta

import pandas as pd
import pytest

from recall.analytics import build_review_dashboard
from recall.analytics.metrics import (
    build_day_index,
    daily_review_counts,
    due_forecast,
    retention_rate,
    reviews_frame,
    tier_counts,
)
from recall.fsrs import database
from recall.fsrs.recorder import apply_review


def _rows(now):
    return [
        {"review_id": "r1", "item_id": "a", "rating": 4, "reviewed_at": now,
         "next_due": now + timedelta(days=3)},
        {"review_id": "r2", "item_id": "b", "rating": 1, "reviewed_at": now,
         "next_due": now + timedelta(days=1)},
        {"review_id": "r3", "item_id": "a", "rating": 5, "reviewed_at": now + timedelta(days=3),
         "next_due": now + timedelta(days=20)},
        {"review_id": "r4", "item_id": "b", "rating": 2, "reviewed_at": now + timedelta(days=3),
         "next_due": now + timedelta(days=4)},
    ]


def test_reviews_frame_adds_tier_and_day(now):
    df = reviews_frame(_rows(now))
    assert list(df["tier"]) == ["GOOD", "AGAIN", "EASY", "AGAIN"]
    assert df["day_utc"].iloc[0] == pd.Timestamp("2024-01-10", tz="UTC")


def test_empty_frame():
    df = reviews_frame([])
    assert df.empty
    assert retention_rate(df) is None
    assert tier_counts(df) == {"AGAIN": 0, "HARD": 0, "GOOD": 0, "EASY": 0}
    assert daily_review_counts(df, build_day_index(df)).empty


def test_daily_counts_zero_filled(now):
    df = reviews_frame(_rows(now))
    counts = daily_review_counts(df, build_day_index(df))
    assert list(counts) == [2, 0, 0, 2]


def test_retention_and_tiers(now):
    df = reviews_frame(_rows(now))
    assert retention_rate(df) == pytest.approx(0.5)
    assert tier_counts(df) == {"AGAIN": 2, "HARD": 0, "GOOD": 1, "EASY": 1}


def test_due_forecast(now):
    due = [
        now - timedelta(days=2),
        now + timedelta(hours=1),
        now + timedelta(days=1),
        now + timedelta(days=1, hours=3),
        now + timedelta(days=30),
    ]
    forecast = due_forecast(due, now, days=3)
    assert list(forecast) == [2, 2, 0]
    assert forecast.index.name == "day_offset"


def test_due_forecast_empty_and_invalid(now):
    assert list(due_forecast([], now, days=2)) == [0, 0]
    with pytest.raises(ValueError):
        due_forecast([], now, days=0)


def test_review_dashboard(tmp_db, now):
    user = "user-1"
    for item_id in ("a", "b", "c"):
        database.add_item(user, item_id, item_id.upper(), created_at=now - timedelta(days=1), item_id=item_id)

    for item_id, score in (("a", 4), ("b", 1)):
        outcome = apply_review(item_id, [], score, now, user_id=user)
        database.save_review(user, outcome.record, snapshot=outcome.snapshot(1))

    dashboard = build_review_dashboard(user, now + timedelta(days=1), days=5)

    assert dashboard.total_reviews == 2
    assert dashboard.reviewed_items == 2
    assert dashboard.new_items == 1
    # b (due after one day) and the new item c
    assert dashboard.due_now == 2
    assert dashboard.retention == pytest.approx(0.5)
    assert list(dashboard.due_forecast) == [1, 0, 1, 0, 0]
