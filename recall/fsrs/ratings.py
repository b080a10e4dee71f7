"""
Rating Mapper - user scores to internal rating tiers.

Users grade a review on a 1-5 scale; the scheduler works with four tiers
(AGAIN, HARD, GOOD, EASY). The translation is a fixed table, not an
interpolation:

    score  meaning                               tier
    -----  ------------------------------------  -----
      1    blackout, nothing recalled            AGAIN
      2    wrong, but familiar once shown        AGAIN
      3    recalled with serious effort          HARD
      4    recalled after hesitation             GOOD
      5    perfect, fast recall                  EASY

Scores 1 and 2 both count as a failed recall. The Grade returned by
map_rating keeps the raw score alongside its tier, so the five grades stay
distinct and the score is what gets stored on the review record.
"""

from __future__ import annotations

from typing import NamedTuple

from recall.fsrs.constants import MAX_USER_SCORE, MIN_USER_SCORE, Rating
from recall.fsrs.errors import InvalidRating


RATING_TABLE: dict[int, Rating] = {
    1: Rating.AGAIN,
    2: Rating.AGAIN,
    3: Rating.HARD,
    4: Rating.GOOD,
    5: Rating.EASY,
}


class Grade(NamedTuple):
    """A validated user score and the internal tier it maps to."""
    score: int
    rating: Rating

    @property
    def is_failure(self) -> bool:
        return self.rating == Rating.AGAIN


def map_rating(user_score: int) -> Grade:
    """
    Map a user-facing score onto the internal rating taxonomy.

    Args:
        user_score: Integer score in [1, 5]

    Returns:
        Grade(score, rating)

    Raises:
        InvalidRating: If the score is not an integer in the domain
    """
    # bool is an int subclass; True/False are not scores
    if isinstance(user_score, bool) or not isinstance(user_score, int):
        raise InvalidRating(user_score, f"Rating must be an integer, got {user_score!r}")

    if not MIN_USER_SCORE <= user_score <= MAX_USER_SCORE:
        raise InvalidRating(
            user_score,
            f"Rating {user_score} outside [{MIN_USER_SCORE}, {MAX_USER_SCORE}]"
        )

    return Grade(score=user_score, rating=RATING_TABLE[user_score])
