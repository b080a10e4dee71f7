"""
FSRS-style spaced-repetition scheduling engine.

This package implements the scheduling core:
- Memory model: difficulty, stability, last review; R = target ** (Δt / S)
- Rating mapper: fixed 1-5 score table onto AGAIN/HARD/GOOD/EASY
- Scheduler: pure (state, rating, now) -> (state, next_due)
- History replayer: MemoryState as a fold over the review log
- Due-set selector: ordered, capped batch of due items
- Review recorder: one review transaction, no I/O

Quick start:
    from recall import fsrs

    # Record a review (algorithm only, caller persists the record)
    record = fsrs.record_review(item_id, history, 4, now)

    # Pick the next batch
    due = fsrs.select_due(candidates, now, limit=20)

The database module is the store adapter used by the session controller;
it is not imported here so the algorithm can be used without SQLAlchemy
configuration.
"""

# Core algorithm
from recall.fsrs.scheduler import schedule, next_interval, retrievability_at
from recall.fsrs.replay import replay, resolve_state, validate_history
from recall.fsrs.due_set import DueSet, is_due, select_due
from recall.fsrs.recorder import ReviewOutcome, apply_review, record_review

# Ratings
from recall.fsrs.constants import Rating
from recall.fsrs.ratings import RATING_TABLE, Grade, map_rating

# Configuration
from recall.fsrs.config import (
    DEFAULT_PARAMETERS,
    SchedulerParameters,
    build_parameters,
    parameters_from_env,
)

# Errors
from recall.fsrs.errors import (
    ConfigurationError,
    InvalidHistory,
    InvalidRating,
    SchedulingError,
)

# Data types
from recall.fsrs.memory_state import MemoryState, calculate_retrievability
from recall.fsrs.records import LearningItem, MemorySnapshot, ReviewRecord

# Clock
from recall.fsrs.clock import Clock, FixedClock, SystemClock


__all__ = [
    # Core algorithm
    "schedule",
    "next_interval",
    "retrievability_at",
    "replay",
    "resolve_state",
    "validate_history",
    "DueSet",
    "is_due",
    "select_due",
    "ReviewOutcome",
    "apply_review",
    "record_review",

    # Ratings
    "Rating",
    "RATING_TABLE",
    "Grade",
    "map_rating",

    # Configuration
    "DEFAULT_PARAMETERS",
    "SchedulerParameters",
    "build_parameters",
    "parameters_from_env",

    # Errors
    "ConfigurationError",
    "InvalidHistory",
    "InvalidRating",
    "SchedulingError",

    # Data types
    "MemoryState",
    "calculate_retrievability",
    "LearningItem",
    "MemorySnapshot",
    "ReviewRecord",

    # Clock
    "Clock",
    "FixedClock",
    "SystemClock",
]
