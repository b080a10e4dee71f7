"""
Metric computations for review dashboards.
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional

import pandas as pd

from recall.fsrs.constants import Rating
from recall.fsrs.ratings import RATING_TABLE


REVIEW_COLUMNS = ["review_id", "item_id", "rating", "reviewed_at", "next_due"]


def _utc_timestamp(value: datetime) -> pd.Timestamp:
    ts = pd.Timestamp(value)
    if ts.tzinfo is None:
        return ts.tz_localize("UTC")
    return ts.tz_convert("UTC")


def reviews_frame(rows: list[dict]) -> pd.DataFrame:
    """
    Build the review DataFrame used by every metric.

    Adds `tier` (internal rating name) and `day_utc` (review day).
    """
    if not rows:
        empty = pd.DataFrame(columns=REVIEW_COLUMNS + ["tier", "day_utc"])
        return empty

    df = pd.DataFrame(rows, columns=REVIEW_COLUMNS)
    df["reviewed_at"] = pd.to_datetime(df["reviewed_at"], utc=True)
    df["next_due"] = pd.to_datetime(df["next_due"], utc=True)
    df["tier"] = df["rating"].map(lambda score: RATING_TABLE[int(score)].name)
    df["day_utc"] = df["reviewed_at"].dt.floor("D")
    return df


def build_day_index(reviews_df: pd.DataFrame) -> pd.DatetimeIndex:
    """
    Build a dense UTC day index spanning the review range.
    """
    if reviews_df.empty:
        return pd.DatetimeIndex([], tz="UTC")
    start = reviews_df["day_utc"].min()
    end = reviews_df["day_utc"].max()
    return pd.date_range(start=start, end=end, freq="D", tz="UTC")


def daily_review_counts(reviews_df: pd.DataFrame, day_index: pd.DatetimeIndex) -> pd.Series:
    """
    Number of reviews per UTC day, zero-filled over day_index.
    """
    if reviews_df.empty or len(day_index) == 0:
        return pd.Series(dtype="int64")
    counts = reviews_df.groupby("day_utc").size()
    return counts.reindex(day_index, fill_value=0).astype("int64")


def retention_rate(reviews_df: pd.DataFrame) -> Optional[float]:
    """
    Share of reviews that were not a failed recall (tier != AGAIN).

    None when there are no reviews.
    """
    if reviews_df.empty:
        return None
    recalled = (reviews_df["tier"] != Rating.AGAIN.name).sum()
    return float(recalled) / float(len(reviews_df))


def tier_counts(reviews_df: pd.DataFrame) -> dict[str, int]:
    """
    Review count per internal tier (every tier present, zero if unused).
    """
    names = [rating.name for rating in Rating]
    if reviews_df.empty:
        return {name: 0 for name in names}
    counts = reviews_df["tier"].value_counts()
    return {name: int(counts.get(name, 0)) for name in names}


def due_forecast(
    next_due_times: Iterable[datetime],
    now: datetime,
    days: int = 7
) -> pd.Series:
    """
    Scheduled reviews per day for the coming `days` days.

    Index is the day offset from today (0 = today). Reviews already
    overdue count toward today; reviews beyond the horizon are dropped.
    """
    if days <= 0:
        raise ValueError(f"days must be positive, got {days}")

    index = pd.RangeIndex(days, name="day_offset")
    due_list = list(next_due_times)
    if not due_list:
        return pd.Series(0, index=index, dtype="int64")

    due_days = pd.to_datetime(pd.Series(due_list), utc=True).dt.floor("D")
    today = _utc_timestamp(now).floor("D")

    offsets = (due_days - today).dt.days.clip(lower=0)
    counts = offsets[offsets < days].value_counts()
    return counts.reindex(index, fill_value=0).astype("int64")
