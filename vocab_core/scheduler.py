"""
Review scheduler for single cards and card collections.

Wraps the memory model and is the validation boundary of the engine:
- Rejects cards without an identity key and ratings outside 1-3
- Repairs stored states that are missing fields (schema drift)
- Classifies cards as new / due for the session builders

The scheduler never swaps in a different scoring rule on error; errors are
raised to the caller.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
import logging
from typing import Iterable, Mapping, Optional, Sequence

from vocab_core.card import Card
from vocab_core.errors import InvalidCardError, InvalidRatingError, MalformedStateError
from vocab_core.fsrs import CardState, MemoryModel, Rating, is_due
from vocab_core.fsrs.constants import STAGE_LEARNING

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReviewOutcome:
    """Result of processing one review."""
    card: Card
    is_new_card: bool  # True if the card had never been reviewed before


def is_new(state: Optional[CardState]) -> bool:
    """
    A card is new if it has no state or is still at the learning stage.

    This is the single definition of "new" used across the engine.
    """
    return state is None or state.stage == STAGE_LEARNING


def validate_rating(rating: object) -> Rating:
    """
    Convert a rating to `Rating`.

    Raises:
        InvalidRatingError: for anything other than 1, 2 or 3
    """
    if isinstance(rating, bool) or not isinstance(rating, int):
        raise InvalidRatingError(rating)
    try:
        return Rating(rating)
    except ValueError:
        raise InvalidRatingError(rating) from None


def validate_card(card: object) -> Card:
    """
    Ensure `card` carries its identity key.

    Raises:
        InvalidCardError: if the card or its key is missing
    """
    if not isinstance(card, Card):
        raise InvalidCardError(f"Expected a Card, got {type(card).__name__}")
    if not isinstance(card.key, str) or not card.key.strip():
        raise InvalidCardError("Card has no identity key")
    return card


class ReviewScheduler:
    """
    Collection-level orchestration over the memory model.
    """

    def __init__(self, weights: Optional[Sequence[float]] = None, model: Optional[MemoryModel] = None):
        self.model = model if model is not None else MemoryModel(weights)

    def initialize_card(self, card: Card) -> Card:
        """
        Ensure the card carries a valid CardState.

        - No state: attach a zero-valued CardState
        - Raw stored data: parse it, repairing missing fields with defaults
        - Already a CardState: returned unchanged

        Raises:
            InvalidCardError: if the card has no identity key
        """
        validate_card(card)
        if isinstance(card.state, CardState):
            return card
        return card.with_state(self._load_state(card.key, card.state))

    def process_review(
        self,
        card: Card,
        rating: object,
        now: Optional[datetime] = None
    ) -> ReviewOutcome:
        """
        Apply a review to a card.

        Args:
            card: Card being reviewed (state may be missing or raw)
            rating: 1 (FORGOT), 2 (HARD) or 3 (EASY)
            now: Review timestamp (defaults to now, UTC)

        Returns:
            ReviewOutcome with the updated card and whether it was new

        Raises:
            InvalidCardError: if the card has no identity key
            InvalidRatingError: if the rating is not 1-3
        """
        card = self.initialize_card(card)
        checked = validate_rating(rating)

        state: CardState = card.state
        is_new_card = state.last_review_timestamp is None
        new_state = self.model.rate(state, checked, now)

        logger.debug(
            "Reviewed %s rating=%s stability=%.4f difficulty=%.4f stage=%d",
            card.key, checked.name, new_state.stability, new_state.difficulty, new_state.stage,
        )
        return ReviewOutcome(card=card.with_state(new_state), is_new_card=is_new_card)

    def get_due_cards(self, cards: Iterable[Card], now: Optional[datetime] = None) -> list[Card]:
        """
        Filter cards that are due for review, preserving input order.

        Uninitialized cards are always due.
        """
        if now is None:
            now = datetime.now(timezone.utc)
        return [card for card in cards if is_due(self.state_of(card), now)]

    def is_new_card(self, card: Card) -> bool:
        """Apply `is_new` to the card's (initialized) state."""
        return is_new(self.state_of(card))

    def state_of(self, card: Card) -> CardState:
        """The card's state, parsed if necessary, without validating identity."""
        if isinstance(card.state, CardState):
            return card.state
        return self._load_state(card.key, card.state)

    def _load_state(self, key: object, raw: Optional[Mapping]) -> CardState:
        if not raw:
            return CardState()
        if not isinstance(raw, Mapping):
            logger.warning("Discarding unreadable state for %r: %r", key, raw)
            return CardState()
        try:
            return CardState.from_dict(raw)
        except MalformedStateError as exc:
            logger.warning("Repairing state for %r: %s", key, exc)
            return CardState.repaired(raw)
