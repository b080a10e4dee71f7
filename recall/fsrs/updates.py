"""
Memory Updates - stability and difficulty formulas.

Key principles:
- Spaced, effortful success produces the largest stability gains
- Harder items gain stability more slowly
- Reviewing something still well remembered (high R) yields smaller gains
- Failures shrink stability, more so when recall was expected (high R)
- Difficulty reflects learning efficiency, not forgetting speed

All functions are pure; clamping to the configured bounds happens here so
long review histories can never run away.
"""

from __future__ import annotations

import math

from recall.fsrs.config import SchedulerParameters
from recall.fsrs.constants import Rating


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def difficulty_factor(difficulty: float, params: SchedulerParameters) -> float:
    """f(D) = 1 / (1 + penalty * (D - D_min)); 1.0 for the easiest items."""
    return 1.0 / (1.0 + params.difficulty_penalty * (difficulty - params.difficulty_min))


def update_stability_on_success(
    stability: float,
    difficulty: float,
    retrievability: float,
    rating: Rating,
    params: SchedulerParameters
) -> float:
    """
    Update stability after successful retrieval (Hard/Good/Easy).

    Formula:
        growth = k * gain(rating) * f(D) * S^(-decay) * (exp(w * (1 - R)) - 1)
        S_new = S * (1 + growth)

    Where:
        - gain(rating) increases HARD < GOOD < EASY
        - f(D) shrinks as difficulty rises
        - (exp(w * (1 - R)) - 1) is zero at R = 1 and grows as R falls

    growth is never negative, so stability never decreases on success
    (short of the upper clamp).

    Args:
        stability: Current stability (S)
        difficulty: Current difficulty (D)
        retrievability: Retrievability at review time (R)
        rating: HARD, GOOD or EASY
        params: Scheduler parameters

    Returns:
        New stability value
    """
    if rating == Rating.AGAIN:
        raise ValueError("Use update_stability_on_failure for AGAIN")

    spacing_reward = math.exp(params.retrievability_weight * (1.0 - retrievability)) - 1.0
    growth = (
        params.growth_rate
        * params.base_gain[rating]
        * difficulty_factor(difficulty, params)
        * stability ** (-params.stability_decay)
        * spacing_reward
    )

    new_stability = stability * (1.0 + growth)

    return clamp(new_stability, params.stability_min, params.stability_max)


def update_stability_on_failure(
    stability: float,
    retrievability: float,
    params: SchedulerParameters
) -> float:
    """
    Update stability after failed retrieval (Again).

    Formula:
        S_new = max(S_min, S * lapse * (1 - w_lapse * R))

    Failures are penalized more strongly when recall was expected (high R).
    With lapse in (0, 1) the result is strictly below S unless S is
    already at the floor.
    """
    new_stability = (
        stability
        * params.lapse_factor
        * (1.0 - params.lapse_retrievability_weight * retrievability)
    )

    return clamp(new_stability, params.stability_min, params.stability_max)


def update_difficulty(
    difficulty: float,
    retrievability: float,
    rating: Rating,
    params: SchedulerParameters
) -> float:
    """
    Update difficulty based on retrieval outcome.

    Formula:
        D_new = clip(D + eta * u(rating) * (floor + (1 - floor) * surprise))

    Where:
        - surprise = R on failure, (1 - R) on success
        - u(rating) = direction and size of the change
        - floor keeps unsurprising outcomes from being ignored entirely

    Failure always raises difficulty (until D_max); Good/Easy lower it.
    """
    if rating == Rating.AGAIN:
        # Failure was more surprising if R was high
        surprise = retrievability
    else:
        # Success was more surprising if R was low
        surprise = 1.0 - retrievability

    weight = params.surprise_floor + (1.0 - params.surprise_floor) * surprise
    delta_d = params.difficulty_rate * params.difficulty_direction[rating] * weight

    return clamp(difficulty + delta_d, params.difficulty_min, params.difficulty_max)


def initial_memory(rating: Rating, params: SchedulerParameters) -> tuple[float, float]:
    """
    Seed (stability, difficulty) for an item's first review.
    """
    return params.initial_stability[rating], params.initial_difficulty[rating]


def apply_update(
    stability: float,
    difficulty: float,
    retrievability: float,
    rating: Rating,
    params: SchedulerParameters
) -> tuple[float, float]:
    """
    Apply update rules to get new (stability, difficulty).

    Stability uses the difficulty from before this review.
    """
    if rating == Rating.AGAIN:
        new_stability = update_stability_on_failure(stability, retrievability, params)
    else:
        new_stability = update_stability_on_success(
            stability, difficulty, retrievability, rating, params
        )

    new_difficulty = update_difficulty(difficulty, retrievability, rating, params)

    return new_stability, new_difficulty
