"""
Memory Model - FSRS Algorithm Logic

Pure scheduling and state updates (no I/O, no mutation).

Main workflow:
1. Decide whether this is the card's first review
2. Compute new difficulty, stability and interval
3. Append one ReviewEvent
4. Return a brand-new CardState

This module handles ONLY the algorithm logic.
Validation of cards and ratings happens in the scheduler.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
import math
from typing import Optional, Sequence

from vocab_core.errors import InvalidWeightsError
from vocab_core.fsrs import updates
from vocab_core.fsrs.constants import DEFAULT_WEIGHTS, Rating, WEIGHT_COUNT
from vocab_core.fsrs.memory_state import CardState, ReviewEvent, is_due


@dataclass(frozen=True)
class ReviewResult:
    """Outcome of the formulas for one review, before it is applied to a state."""
    interval_days: int
    difficulty: float
    stability: float


class MemoryModel:
    """
    Continuous memory-state model parametrised by a fixed 17-weight vector.
    """

    def __init__(self, weights: Optional[Sequence[float]] = None):
        w = tuple(float(x) for x in (weights if weights is not None else DEFAULT_WEIGHTS))
        if len(w) != WEIGHT_COUNT:
            raise InvalidWeightsError(f"Expected {WEIGHT_COUNT} weights, got {len(w)}")
        if not all(math.isfinite(x) for x in w):
            raise InvalidWeightsError("Weights must be finite numbers")
        self.weights = w

    def next_review(self, state: CardState, rating: Rating) -> ReviewResult:
        """
        Calculate the next interval, difficulty and stability.

        The stability update reads the pre-update difficulty.
        """
        w = self.weights
        if state.is_first_review:
            stability = updates.initial_stability(w, rating)
            return ReviewResult(
                interval_days=updates.first_review_interval(stability),
                difficulty=updates.initial_difficulty(w, rating),
                stability=stability,
            )

        new_difficulty = updates.update_difficulty(w, state.difficulty, rating)
        new_stability = updates.update_stability(w, state.stability, state.difficulty, rating)
        return ReviewResult(
            interval_days=updates.next_interval(new_stability, rating),
            difficulty=new_difficulty,
            stability=new_stability,
        )

    def rate(
        self,
        state: Optional[CardState],
        rating: Rating,
        now: Optional[datetime] = None
    ) -> CardState:
        """
        Apply one review and return the next state.

        Args:
            state: Current state (None for a card never seen before)
            rating: Learner's rating
            now: Review timestamp (defaults to now, UTC)

        Returns:
            A new CardState; `state` is left untouched
        """
        if now is None:
            now = datetime.now(timezone.utc)
        current = state if state is not None else CardState()
        result = self.next_review(current, rating)

        event = ReviewEvent(
            timestamp=now,
            rating=rating,
            interval_days=result.interval_days,
            difficulty=result.difficulty,
            stability=result.stability,
        )

        first_learned = current.first_learned_timestamp
        if first_learned is None and rating != Rating.FORGOT:
            first_learned = now

        return CardState(
            difficulty=result.difficulty,
            stability=result.stability,
            reviews=current.reviews + (event,),
            last_review_timestamp=now,
            due_timestamp=now + timedelta(days=result.interval_days),
            first_learned_timestamp=first_learned,
        )

    @staticmethod
    def is_due(state: Optional[CardState], now: Optional[datetime] = None) -> bool:
        """True if the card is new or its due timestamp has passed."""
        return is_due(state, now if now is not None else datetime.now(timezone.utc))
