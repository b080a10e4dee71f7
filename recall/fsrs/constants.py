"""
Scheduler Constants and Default Parameters

Default values for every tunable parameter of the scheduling algorithm.
These are only defaults: the live values always travel in a
SchedulerParameters block (see config.py), never as module globals.
"""

from enum import IntEnum


# ---- Internal Ratings ----

class Rating(IntEnum):
    """Internal recall-quality tier, ordered from failure to fluent recall."""
    AGAIN = 1   # Retrieval failed
    HARD = 2    # Retrieved with high effort
    GOOD = 3    # Retrieved normally
    EASY = 4    # Retrieved fluently


# ---- User Score Domain ----

MIN_USER_SCORE = 1
MAX_USER_SCORE = 5


# ---- Forgetting Curve ----

TARGET_RETENTION = 0.90  # Schedule so that R is ~90% at the next review


# ---- Interval Bounds (days) ----

MIN_INTERVAL_DAYS = 1
MAX_INTERVAL_DAYS = 36500  # 100 years


# ---- State Bounds ----

D_MIN = 1.0        # Minimum difficulty
D_MAX = 10.0       # Maximum difficulty
S_MIN = 0.01       # Minimum stability (days)
S_MAX = 36500.0    # Maximum stability (days)


# ---- Initial State Seeds (first review of a new item) ----

INITIAL_STABILITY = {
    Rating.AGAIN: 0.4,
    Rating.HARD: 1.2,
    Rating.GOOD: 3.2,
    Rating.EASY: 15.7,
}

INITIAL_DIFFICULTY = {
    Rating.AGAIN: 8.0,
    Rating.HARD: 6.5,
    Rating.GOOD: 5.0,
    Rating.EASY: 3.0,
}


# ---- Stability Growth (successful recall) ----

GROWTH_RATE = 8.5              # Overall stability learning rate
STABILITY_DECAY = 0.2          # Large stabilities grow proportionally slower
RETRIEVABILITY_WEIGHT = 3.0    # Reward for recalling at low retrievability
DIFFICULTY_PENALTY = 0.15      # f(D) = 1 / (1 + penalty * (D - 1))

BASE_GAIN = {
    Rating.HARD: 0.4,
    Rating.GOOD: 1.0,
    Rating.EASY: 1.8,
}


# ---- Stability Lapse (failed recall) ----

LAPSE_FACTOR = 0.5                 # Multiplicative penalty on AGAIN
LAPSE_RETRIEVABILITY_WEIGHT = 0.4  # Extra penalty when recall was expected


# ---- Difficulty Update ----

DIFFICULTY_RATE = 0.8   # Difficulty adaptation rate
SURPRISE_FLOOR = 0.25   # Minimum share of the update applied for unsurprising outcomes

U_RATING = {
    Rating.AGAIN: +1.0,   # Failure increases difficulty
    Rating.HARD: +0.35,   # Hard success slightly increases difficulty
    Rating.GOOD: -0.20,   # Normal success slightly decreases difficulty
    Rating.EASY: -0.60,   # Easy success significantly decreases difficulty
}


# ---- Interval Fuzzing ----

FUZZ_ENABLED = False
FUZZ_FACTOR = 0.05     # +/- 5%
FUZZ_MIN_DAYS = 3.0    # Shorter intervals are never fuzzed
