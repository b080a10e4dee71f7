"""
Error taxonomy for the scheduling engine.

None of these are retried inside the engine: every computation is
deterministic, so the caller has to fix the input or the configuration.
"""

from __future__ import annotations

from typing import Optional


class SchedulingError(Exception):
    """Base class for all scheduling engine errors."""


class InvalidRating(SchedulingError, ValueError):
    """A user score outside the defined rating domain."""

    def __init__(self, score: object, message: Optional[str] = None):
        self.score = score
        super().__init__(message or f"Invalid rating: {score!r}")


class InvalidHistory(SchedulingError, ValueError):
    """Review history is out of order or violates next_due >= reviewed_at."""

    def __init__(self, message: str, record_id: Optional[str] = None):
        self.record_id = record_id
        super().__init__(message)


class ConfigurationError(SchedulingError):
    """A parameter block violates its own invariants."""
