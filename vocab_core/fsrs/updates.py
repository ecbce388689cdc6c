"""
Memory Model Updates

Implements the first-review seed and the difficulty, stability and interval
updates for subsequent reviews.

Key principles:
- The first review seeds stability directly from the weight vector
- Subsequent updates read the PRE-update difficulty when computing stability
- All values are clamped into their valid ranges; NaN is passed through so
  that invalid inputs stay visible (pow/exp yield NaN or inf, never raise)
"""

from __future__ import annotations
import math
from typing import Sequence

from vocab_core.fsrs.constants import (
    Rating,
    S_MIN,
    S_MAX,
    D_MIN,
    D_MAX,
    D_INITIAL_MIN,
    INTERVAL_MIN_DAYS,
    INTERVAL_MAX_DAYS,
    RATING_FACTOR,
)


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values (2.5 -> 3)."""
    return math.floor(value + 0.5)


def clamp(value: float, lower: float, upper: float) -> float:
    """Clamp into [lower, upper], letting NaN through unchanged."""
    return min(max(value, lower), upper)


def safe_pow(base: float, exponent: float) -> float:
    """math.pow that yields NaN outside its domain and inf on overflow."""
    try:
        return math.pow(base, exponent)
    except ValueError:
        return math.nan
    except OverflowError:
        return math.inf


def safe_exp(value: float) -> float:
    """math.exp that yields inf on overflow."""
    try:
        return math.exp(value)
    except OverflowError:
        return math.inf


def initial_stability(w: Sequence[float], rating: Rating) -> float:
    """
    Stability after the first review: w[0] FORGOT, w[1] HARD, w[2] EASY.
    """
    return clamp(w[int(rating) - 1], S_MIN, S_MAX)


def initial_difficulty(w: Sequence[float], rating: Rating) -> float:
    """
    Difficulty after the first review.

    Formula:
        D0 = w[4] - w[5] * (rating - 3), clipped to [1, 10]
    """
    return clamp(w[4] - w[5] * (int(rating) - 3), D_INITIAL_MIN, D_MAX)


def first_review_interval(stability: float) -> int:
    """Interval after the first review: round(S), at least one day."""
    return max(INTERVAL_MIN_DAYS, round_half_up(stability))


def update_difficulty(w: Sequence[float], difficulty: float, rating: Rating) -> float:
    """
    Update difficulty on a subsequent review.

    Formula:
        D_tmp = D - w[6] * (rating - 3)
        D_new = D_tmp * exp(w[7] * (1 - D_tmp)), clipped to [0.1, 10]

    EASY leaves D_tmp unchanged, HARD and FORGOT push it up.
    """
    shifted = difficulty - w[6] * (int(rating) - 3)
    return clamp(shifted * safe_exp(w[7] * (1 - shifted)), D_MIN, D_MAX)


def stability_after_lapse(w: Sequence[float], stability: float, difficulty: float) -> float:
    """
    Stability after a FORGOT rating.

    Formula:
        S_new = w[8] * D^w[9] * S^w[10] * exp((1 - S) * w[11])
    """
    return (
        w[8]
        * safe_pow(difficulty, w[9])
        * safe_pow(stability, w[10])
        * safe_exp((1 - stability) * w[11])
    )


def stability_after_recall(
    w: Sequence[float],
    stability: float,
    difficulty: float,
    rating: Rating
) -> float:
    """
    Stability after a HARD or EASY rating.

    Formula:
        S_new = S * (1 + exp(w[12]) * (11 - D) * S^w[13]
                     * (exp((1 - S) * w[14]) - 1) * factor)

    Where factor = 0.8 for HARD and 1.2 for EASY.
    """
    if rating == Rating.FORGOT:
        raise ValueError("Use stability_after_lapse for FORGOT ratings")

    factor = RATING_FACTOR[rating]
    growth = (
        safe_exp(w[12])
        * (11 - difficulty)
        * safe_pow(stability, w[13])
        * (safe_exp((1 - stability) * w[14]) - 1)
        * factor
    )
    return stability * (1 + growth)


def update_stability(
    w: Sequence[float],
    stability: float,
    difficulty: float,
    rating: Rating
) -> float:
    """
    Update stability on a subsequent review, clipped to [0.1, 365].

    `difficulty` must be the difficulty BEFORE this review's update.
    """
    if rating == Rating.FORGOT:
        new_stability = stability_after_lapse(w, stability, difficulty)
    else:
        new_stability = stability_after_recall(w, stability, difficulty, rating)
    return clamp(new_stability, S_MIN, S_MAX)


def next_interval(stability: float, rating: Rating) -> int:
    """
    Interval in days after a subsequent review.

    FORGOT -> 1, HARD -> round(S * 0.8), EASY -> round(S * 1.2),
    clipped to [1, 365].

    A day count cannot hold NaN, so a NaN stability raises ValueError
    for HARD and EASY instead of being rounded to some interval.
    """
    if rating == Rating.FORGOT:
        interval = INTERVAL_MIN_DAYS
    elif math.isnan(stability):
        raise ValueError("Cannot derive an interval from NaN stability")
    else:
        interval = max(INTERVAL_MIN_DAYS, round_half_up(stability * RATING_FACTOR[rating]))
    return min(interval, INTERVAL_MAX_DAYS)
