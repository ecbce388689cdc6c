import logging
from datetime import timedelta

import pytest

from vocab_core import (
    Card,
    CardState,
    InvalidCardError,
    InvalidRatingError,
    Rating,
    ReviewScheduler,
    is_new,
)


def test_initialize_attaches_zero_state(scheduler, card_factory):
    card = scheduler.initialize_card(card_factory("kitab"))

    assert card.state == CardState()
    assert scheduler.is_new_card(card)


def test_initialize_is_idempotent(scheduler, card_factory):
    card = scheduler.initialize_card(card_factory("kitab"))
    assert scheduler.initialize_card(card) is card


def test_initialize_parses_stored_state(scheduler, card_factory):
    raw = {"difficulty": 5.0, "stability": 8.0, "reviews": [], "dueDate": "2024-03-20T00:00:00Z"}

    card = scheduler.initialize_card(card_factory("kitab", state=raw))

    assert isinstance(card.state, CardState)
    assert card.state.stage == 3
    assert not scheduler.is_new_card(card)


def test_initialize_repairs_malformed_state(scheduler, card_factory, caplog):
    with caplog.at_level(logging.WARNING, logger="vocab_core.scheduler"):
        card = scheduler.initialize_card(card_factory("kitab", state={"stability": 2.0}))

    assert card.state.stability == 2.0
    assert card.state.difficulty == 0.0
    assert card.state.reviews == ()
    assert "Repairing state" in caplog.text


@pytest.mark.parametrize("key", ["", "   ", None])
def test_card_without_key_rejected(scheduler, key, now):
    with pytest.raises(InvalidCardError):
        scheduler.process_review(Card(key=key), Rating.EASY, now)


@pytest.mark.parametrize("rating", [0, 4, -1, "3", 2.0, True, None])
def test_invalid_rating_rejected(scheduler, card_factory, rating, now):
    card = card_factory("kitab")

    with pytest.raises(InvalidRatingError) as exc_info:
        scheduler.process_review(card, rating, now)

    assert exc_info.value.rating == rating
    assert card.state is None


def test_process_review_returns_new_card(scheduler, card_factory, now):
    card = card_factory("kitab")

    outcome = scheduler.process_review(card, 3, now)

    assert outcome.is_new_card
    assert outcome.card.key == "kitab"
    assert outcome.card.definitions == card.definitions
    assert outcome.card.state.reviews[-1].rating == Rating.EASY
    assert card.state is None


def test_second_review_is_not_new(scheduler, card_factory, now):
    first = scheduler.process_review(card_factory("kitab"), Rating.FORGOT, now)

    second = scheduler.process_review(first.card, Rating.HARD, now + timedelta(days=1))

    assert not second.is_new_card
    assert len(second.card.state.reviews) == 2


def test_get_due_cards_keeps_input_order(scheduler, card_factory, state_factory, now):
    cards = [
        card_factory("a", state=state_factory(4.0, now + timedelta(days=2))),
        card_factory("b"),
        card_factory("c", state=state_factory(4.0, now - timedelta(days=3))),
        card_factory("d", state=state_factory(4.0, now)),
    ]

    due = scheduler.get_due_cards(cards, now)

    assert [c.key for c in due] == ["b", "c", "d"]


def test_is_new():
    assert is_new(None)
    assert is_new(CardState())
    # Reviewed but still below one day of stability
    assert is_new(CardState(stability=0.5701, reviews=()))
    assert not is_new(CardState(stability=1.4436))


def test_custom_weights_flow_to_model(card_factory, now):
    weights = [0.5701, 1.4436, 2.0] + [1.0] * 14
    scheduler = ReviewScheduler(weights)

    outcome = scheduler.process_review(card_factory("kitab"), Rating.EASY, now)

    assert outcome.card.state.stability == 2.0
