"""
Typed containers for analytics outputs.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import pandas as pd


@dataclass
class ReviewDashboard:
    total_reviews: int
    reviewed_items: int
    new_items: int
    due_now: int
    retention: Optional[float]
    tier_counts: dict[str, int]
    daily_reviews: pd.Series
    due_forecast: pd.Series
