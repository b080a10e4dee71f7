"""
Scheduler - core scheduling algorithm.

Pure scheduling and state updates (no database calls, no clock reads).

Workflow for one review:
1. New item -> seed stability/difficulty from the rating
2. Known item -> compute retrievability from elapsed time and stability
3. Update difficulty and stability
4. Convert the new stability into a clamped (optionally fuzzed) interval
5. Return (new state, next_due)

Everything the function depends on is passed in: the prior state, the
rating, "now", the parameter block, and (only when fuzzing is enabled) a
random source owned by the caller.
"""

from __future__ import annotations

import random
from datetime import datetime, timedelta
from typing import Optional

from recall.fsrs import updates
from recall.fsrs.config import DEFAULT_PARAMETERS, SchedulerParameters
from recall.fsrs.constants import Rating
from recall.fsrs.errors import ConfigurationError, InvalidHistory
from recall.fsrs.memory_state import MemoryState, calculate_retrievability, elapsed_days


def retrievability_at(
    state: MemoryState,
    now: datetime,
    params: SchedulerParameters = DEFAULT_PARAMETERS
) -> float:
    """
    Estimated recall probability for a known item at `now`.
    """
    days = elapsed_days(state.last_reviewed, now)
    return calculate_retrievability(state.stability, days, params.target_retention)


def next_interval(
    stability: float,
    params: SchedulerParameters = DEFAULT_PARAMETERS,
    rng: Optional[random.Random] = None
) -> int:
    """
    Convert stability into a whole number of days until the next review.

    Under the forgetting curve R = target ** (Δt / S), retrievability
    reaches the target exactly after S days, so S is the raw interval.
    It is then fuzzed (if enabled), rounded and clamped to
    [min_interval_days, max_interval_days].

    Args:
        stability: New stability in days
        params: Scheduler parameters
        rng: Random source, required when params.fuzz_enabled

    Returns:
        Interval in days

    Raises:
        ConfigurationError: If fuzzing is enabled but no rng is supplied
    """
    days = stability

    if params.fuzz_enabled:
        if rng is None:
            raise ConfigurationError("fuzz_enabled requires an injected random source")
        if days >= params.fuzz_min_days:
            days *= rng.uniform(1.0 - params.fuzz_factor, 1.0 + params.fuzz_factor)

    interval = int(round(days))

    return max(params.min_interval_days, min(params.max_interval_days, interval))


def schedule(
    state: Optional[MemoryState],
    rating: Rating,
    now: datetime,
    params: SchedulerParameters = DEFAULT_PARAMETERS,
    rng: Optional[random.Random] = None
) -> tuple[MemoryState, datetime]:
    """
    Process one review and return the new memory state and next due date.

    Args:
        state: Prior MemoryState, or None for a never-reviewed item
        rating: Internal rating for this review
        now: Review timestamp
        params: Scheduler parameters
        rng: Random source for interval fuzzing (only used if enabled)

    Returns:
        (new_state, next_due)

    Raises:
        InvalidHistory: If `now` precedes the state's last review
        ConfigurationError: If fuzzing is enabled without an rng
    """
    rating = Rating(rating)

    if state is None:
        new_stability, new_difficulty = updates.initial_memory(rating, params)
    else:
        if now < state.last_reviewed:
            raise InvalidHistory(
                f"Review at {now.isoformat()} precedes last review "
                f"at {state.last_reviewed.isoformat()}"
            )

        retrievability = retrievability_at(state, now, params)
        new_stability, new_difficulty = updates.apply_update(
            stability=state.stability,
            difficulty=state.difficulty,
            retrievability=retrievability,
            rating=rating,
            params=params
        )

    new_state = MemoryState(
        difficulty=new_difficulty,
        stability=new_stability,
        last_reviewed=now
    )

    interval_days = next_interval(new_stability, params, rng)
    next_due = now + timedelta(days=interval_days)

    return new_state, next_due
