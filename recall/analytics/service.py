"""
Service layer for building review dashboards.
"""

from __future__ import annotations

from datetime import datetime

from recall.analytics.metrics import (
    build_day_index,
    daily_review_counts,
    due_forecast,
    retention_rate,
    reviews_frame,
    tier_counts,
)
from recall.analytics.types import ReviewDashboard
from recall.fsrs import database
from recall.fsrs.due_set import select_due


def build_review_dashboard(user_id: str, now: datetime, days: int = 7) -> ReviewDashboard:
    """
    Build dashboard metrics for one user at `now`.
    """
    reviews_df = reviews_frame(database.load_review_rows(user_id))
    day_index = build_day_index(reviews_df)

    candidates = database.load_due_candidates(user_id)
    scheduled = [latest.next_due for _, latest in candidates if latest is not None]
    due = select_due(candidates, now, limit=0)

    return ReviewDashboard(
        total_reviews=int(len(reviews_df)),
        reviewed_items=len(scheduled),
        new_items=len(candidates) - len(scheduled),
        due_now=due.total_due,
        retention=retention_rate(reviews_df),
        tier_counts=tier_counts(reviews_df),
        daily_reviews=daily_review_counts(reviews_df, day_index),
        due_forecast=due_forecast(scheduled, now, days),
    )
