"""
Memory State - per-item learned state and retrievability.

Key concepts:
- Stability (S): days until retrievability decays to the target threshold
- Difficulty (D): how hard the item is to retain (bounded scale, 1-10 by default)
- Retrievability (R): probability of successful recall at time t

A brand-new item has no MemoryState at all (None); it is due immediately.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime

SECONDS_PER_DAY = 86400.0


@dataclass(frozen=True)
class MemoryState:
    """
    Learned state of one (account, item) pair.

    Derived by folding the item's review history through the scheduler;
    never mutated in place.
    """
    difficulty: float
    stability: float  # days
    last_reviewed: datetime

    def __post_init__(self):
        if not self.difficulty > 0:
            raise ValueError(f"difficulty must be positive, got {self.difficulty}")
        if not self.stability > 0:
            raise ValueError(f"stability must be positive, got {self.stability}")


def elapsed_days(since: datetime, now: datetime) -> float:
    """
    Fractional days between two timestamps (negative if now < since).
    """
    return (now - since).total_seconds() / SECONDS_PER_DAY


def calculate_retrievability(
    stability: float,
    days_elapsed: float,
    target_retention: float
) -> float:
    """
    Calculate retrievability using exponential decay.

    Formula: R = target ** (Δt / S)

    The curve is anchored so that R equals the target retention exactly
    when Δt equals the stability, which is what makes stability a
    "days until threshold" quantity.

    Args:
        stability: Current stability in days
        days_elapsed: Time since last review in days
        target_retention: Target retrievability threshold (e.g. 0.9)

    Returns:
        Retrievability in (0, 1]
    """
    if days_elapsed <= 0:
        return 1.0

    # R = exp(ln(target) * Δt / S)
    return math.exp(math.log(target_retention) * days_elapsed / stability)
