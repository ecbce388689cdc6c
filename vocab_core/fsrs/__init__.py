"""
FSRS - Free Spaced Repetition Scheduler

Memory model for the vocabulary scheduling engine.

This package implements a continuous memory-state model with:
- Difficulty (D), Stability (S) and derived Retrievability (R)
- A fixed, replaceable 17-element weight vector
- Immutable card states: every review returns a new CardState
- A 0-4 stage derived from stability

Quick start:
    from vocab_core import fsrs

    model = fsrs.MemoryModel()
    state = model.rate(None, fsrs.Rating.EASY)
    fsrs.is_due(state, now)
"""

# Core algorithm
from vocab_core.fsrs.memory_model import MemoryModel, ReviewResult

# Constants and parameters
from vocab_core.fsrs.constants import (
    Rating,
    DEFAULT_WEIGHTS,
    WEIGHT_COUNT,
    S_MIN,
    S_MAX,
    D_MIN,
    D_MAX,
    INTERVAL_MIN_DAYS,
    INTERVAL_MAX_DAYS,
    STAGE_MASTERED,
)

# Memory state
from vocab_core.fsrs.memory_state import (
    CardState,
    ReviewEvent,
    calculate_retrievability,
    coerce_timestamp,
    days_since_last_review,
    is_due,
    stage_for_stability,
)


__all__ = [
    # Core algorithm
    "MemoryModel",
    "ReviewResult",

    # Enums
    "Rating",

    # Memory state
    "CardState",
    "ReviewEvent",
    "calculate_retrievability",
    "coerce_timestamp",
    "days_since_last_review",
    "is_due",
    "stage_for_stability",

    # Parameters
    "DEFAULT_WEIGHTS",
    "WEIGHT_COUNT",
    "S_MIN",
    "S_MAX",
    "D_MIN",
    "D_MAX",
    "INTERVAL_MIN_DAYS",
    "INTERVAL_MAX_DAYS",
    "STAGE_MASTERED",
]
