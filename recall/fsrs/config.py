"""
Scheduler Configuration

A single named, overridable parameter block for the scheduling algorithm.

Every tunable value (target retention, interval bounds, seed tables,
state bounds, growth/lapse coefficients, fuzzing) lives on
SchedulerParameters. Invariants are checked once, when the block is built;
a violation raises ConfigurationError rather than surfacing per call.

Usage:
    params = build_parameters(target_retention=0.85, fuzz_enabled=True)
    params = parameters_from_env()   # reads RECALL_* variables and .env
"""

from __future__ import annotations

import os
from types import MappingProxyType
from typing import Any, Mapping, Optional

import structlog
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from recall.fsrs import constants
from recall.fsrs.constants import Rating
from recall.fsrs.errors import ConfigurationError

logger = structlog.get_logger(__name__)


ENV_PREFIX = "RECALL_"

# Environment variables understood by parameters_from_env (suffix -> field)
ENV_FIELDS = {
    "TARGET_RETENTION": "target_retention",
    "MIN_INTERVAL_DAYS": "min_interval_days",
    "MAX_INTERVAL_DAYS": "max_interval_days",
    "FUZZ_ENABLED": "fuzz_enabled",
    "FUZZ_FACTOR": "fuzz_factor",
}


class SchedulerParameters(BaseModel):
    """
    Tunable parameters of the scheduler.

    Construction validates every invariant at once and reports a
    violation as ConfigurationError. The rating tables are read-only
    mappings, so a built block cannot drift afterwards.
    """
    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    def __init__(self, **data: Any):
        try:
            super().__init__(**data)
        except ValidationError as exc:
            logger.warning("scheduler_config_invalid", errors=exc.error_count())
            raise ConfigurationError(f"Invalid scheduler parameters: {exc}") from exc

    # Forgetting curve
    target_retention: float = constants.TARGET_RETENTION

    # Interval bounds (days)
    min_interval_days: int = constants.MIN_INTERVAL_DAYS
    max_interval_days: int = constants.MAX_INTERVAL_DAYS

    # Seeds for the first review of a new item
    initial_stability: dict[Rating, float] = Field(
        default_factory=lambda: dict(constants.INITIAL_STABILITY)
    )
    initial_difficulty: dict[Rating, float] = Field(
        default_factory=lambda: dict(constants.INITIAL_DIFFICULTY)
    )

    # State bounds
    difficulty_min: float = constants.D_MIN
    difficulty_max: float = constants.D_MAX
    stability_min: float = constants.S_MIN
    stability_max: float = constants.S_MAX

    # Stability growth on success
    growth_rate: float = constants.GROWTH_RATE
    stability_decay: float = constants.STABILITY_DECAY
    retrievability_weight: float = constants.RETRIEVABILITY_WEIGHT
    difficulty_penalty: float = constants.DIFFICULTY_PENALTY
    base_gain: dict[Rating, float] = Field(
        default_factory=lambda: dict(constants.BASE_GAIN)
    )

    # Stability lapse on failure
    lapse_factor: float = constants.LAPSE_FACTOR
    lapse_retrievability_weight: float = constants.LAPSE_RETRIEVABILITY_WEIGHT

    # Difficulty update
    difficulty_rate: float = constants.DIFFICULTY_RATE
    surprise_floor: float = constants.SURPRISE_FLOOR
    difficulty_direction: dict[Rating, float] = Field(
        default_factory=lambda: dict(constants.U_RATING)
    )

    # Interval fuzzing
    fuzz_enabled: bool = constants.FUZZ_ENABLED
    fuzz_factor: float = constants.FUZZ_FACTOR
    fuzz_min_days: float = constants.FUZZ_MIN_DAYS

    @field_validator("initial_stability", "initial_difficulty", "difficulty_direction")
    @classmethod
    def _covers_every_rating(cls, table: dict[Rating, float]) -> Mapping[Rating, float]:
        missing = set(Rating) - set(table)
        if missing:
            names = ", ".join(sorted(r.name for r in missing))
            raise ValueError(f"table is missing ratings: {names}")
        return MappingProxyType(dict(table))

    @field_validator("base_gain")
    @classmethod
    def _gain_is_increasing(cls, table: dict[Rating, float]) -> Mapping[Rating, float]:
        successes = [Rating.HARD, Rating.GOOD, Rating.EASY]
        missing = [r.name for r in successes if r not in table]
        if missing:
            raise ValueError(f"base_gain is missing ratings: {', '.join(missing)}")
        gains = [table[r] for r in successes]
        if gains[0] <= 0:
            raise ValueError("base_gain values must be positive")
        if not gains[0] < gains[1] < gains[2]:
            raise ValueError("base_gain must increase HARD < GOOD < EASY")
        return MappingProxyType(dict(table))

    @model_validator(mode="after")
    def _check_invariants(self) -> "SchedulerParameters":
        if not 0.0 < self.target_retention < 1.0:
            raise ValueError("target_retention must be in (0, 1)")

        if self.min_interval_days < 1:
            raise ValueError("min_interval_days must be at least 1")
        if self.max_interval_days < self.min_interval_days:
            raise ValueError("max_interval_days must be >= min_interval_days")

        if not 0.0 < self.difficulty_min <= self.difficulty_max:
            raise ValueError("difficulty bounds must satisfy 0 < min <= max")
        if not 0.0 < self.stability_min <= self.stability_max:
            raise ValueError("stability bounds must satisfy 0 < min <= max")

        for rating in Rating:
            s = self.initial_stability[rating]
            d = self.initial_difficulty[rating]
            if not self.stability_min <= s <= self.stability_max:
                raise ValueError(f"initial_stability[{rating.name}] outside stability bounds")
            if not self.difficulty_min <= d <= self.difficulty_max:
                raise ValueError(f"initial_difficulty[{rating.name}] outside difficulty bounds")

        ordered = sorted(Rating)
        for lower, higher in zip(ordered, ordered[1:]):
            if self.initial_stability[higher] < self.initial_stability[lower]:
                raise ValueError("initial_stability must not decrease with rating")
            if self.initial_difficulty[higher] > self.initial_difficulty[lower]:
                raise ValueError("initial_difficulty must not increase with rating")

        if self.growth_rate <= 0:
            raise ValueError("growth_rate must be positive")
        if self.stability_decay < 0:
            raise ValueError("stability_decay must be >= 0")
        if self.retrievability_weight <= 0:
            raise ValueError("retrievability_weight must be positive")
        if self.difficulty_penalty < 0:
            raise ValueError("difficulty_penalty must be >= 0")

        if not 0.0 < self.lapse_factor < 1.0:
            raise ValueError("lapse_factor must be in (0, 1)")
        if not 0.0 <= self.lapse_retrievability_weight < 1.0:
            raise ValueError("lapse_retrievability_weight must be in [0, 1)")

        if self.difficulty_rate < 0:
            raise ValueError("difficulty_rate must be >= 0")
        if not 0.0 <= self.surprise_floor <= 1.0:
            raise ValueError("surprise_floor must be in [0, 1]")
        if self.difficulty_direction[Rating.AGAIN] <= 0:
            raise ValueError("difficulty_direction[AGAIN] must be positive")

        if not 0.0 <= self.fuzz_factor < 0.5:
            raise ValueError("fuzz_factor must be in [0, 0.5)")
        if self.fuzz_min_days < 0:
            raise ValueError("fuzz_min_days must be >= 0")

        return self

    def override(self, **changes: Any) -> "SchedulerParameters":
        """Return a validated copy with the given fields replaced."""
        values = {}
        for name in type(self).model_fields:
            value = getattr(self, name)
            values[name] = dict(value) if isinstance(value, Mapping) else value
        values.update(changes)
        return SchedulerParameters(**values)


def build_parameters(**overrides: Any) -> SchedulerParameters:
    """
    Build a validated parameter block.

    Args:
        **overrides: Field values replacing the defaults

    Returns:
        SchedulerParameters

    Raises:
        ConfigurationError: If any value violates the block's invariants
    """
    return SchedulerParameters(**overrides)


def parameters_from_env(
    prefix: str = ENV_PREFIX,
    dotenv_path: Optional[str] = None,
    **overrides: Any
) -> SchedulerParameters:
    """
    Build parameters from RECALL_* environment variables.

    A .env file is loaded first (existing environment variables win).
    Explicit keyword overrides win over the environment.
    """
    load_dotenv(dotenv_path)

    values: dict[str, Any] = {}
    for suffix, field_name in ENV_FIELDS.items():
        raw = os.getenv(prefix + suffix)
        if raw is not None and raw.strip() != "":
            values[field_name] = raw.strip()
    values.update(overrides)

    params = build_parameters(**values)
    logger.info(
        "scheduler_config_loaded",
        target_retention=params.target_retention,
        max_interval_days=params.max_interval_days,
        fuzz_enabled=params.fuzz_enabled,
    )
    return params


DEFAULT_PARAMETERS = SchedulerParameters()
