"""
FSRS Constants and Parameters

All configurable parameters for the memory model in one place.
The weight vector is a fixed external configuration; it can be replaced
wholesale but is never trained here.
"""

from enum import IntEnum


# ---- Ratings ----

class Rating(IntEnum):
    """Learner's self-reported recall quality for one review."""
    FORGOT = 1  # Retrieval failed
    HARD = 2    # Retrieved with high effort
    EASY = 3    # Retrieved fluently


# ---- Default Weights ----
# w[0..2]: initial stability by rating, w[4..5]: initial difficulty,
# w[6..7]: difficulty update, w[8..11]: stability after a lapse,
# w[12..14]: stability after a success. w[3], w[15], w[16] are unused.

DEFAULT_WEIGHTS = (
    0.5701, 1.4436, 4.1386, 10.9355, 5.1443, 1.2006, 0.8627, 0.0782,
    1.4202, 0.2116, 1.9889, 0.0029, 0.8719, 0.5249, 0.1278, 0.3561, 2.5016,
)
WEIGHT_COUNT = 17


# ---- Bounds ----

S_MIN = 0.1              # Minimum stability (days)
S_MAX = 365.0            # Maximum stability (days)
D_MIN = 0.1              # Minimum difficulty after a subsequent review
D_MAX = 10.0             # Maximum difficulty
D_INITIAL_MIN = 1.0      # Minimum difficulty after the first review
INTERVAL_MIN_DAYS = 1
INTERVAL_MAX_DAYS = 365


# ---- Rating Factors ----
# Applied both to stability growth and to interval length on success

RATING_FACTOR = {
    Rating.HARD: 0.8,
    Rating.EASY: 1.2,
}


# ---- Stage Thresholds ----
# (minimum stability in days, stage), checked from the top down

STAGE_THRESHOLDS = (
    (30.0, 4),  # Mastered
    (7.0, 3),   # Long term
    (3.0, 2),   # Medium term
    (1.0, 1),   # Short term
)
STAGE_LEARNING = 0
STAGE_MASTERED = 4
