"""
Pool utilities for session builders.

These helpers partition cards into pools and order them, without
enforcing a quota policy.
"""

from __future__ import annotations
from datetime import datetime, timezone
import random
from typing import Iterable

from vocab_core.card import Card
from vocab_core.fsrs import is_due
from vocab_core.scheduler import ReviewScheduler, is_new
from vocab_core.session_builders.pool_types import StudyPools


_EARLIEST = datetime.min.replace(tzinfo=timezone.utc)


def partition_cards(
    cards: Iterable[Card],
    scheduler: ReviewScheduler,
    now: datetime
) -> StudyPools:
    """
    Split cards into due-review, new and not-due pools.

    - new: no history or still at stage 0
    - due_review: has history and is due (sorted earliest due first)
    - not_due: has history and is not yet due
    """
    pools = StudyPools()
    for card in cards:
        state = scheduler.state_of(card)
        if is_new(state):
            pools.add(card, "new")
        elif is_due(state, now):
            pools.add(card, "due_review")
        else:
            pools.add(card, "not_due")

    pools.due_review = sort_by_due(pools.due_review, scheduler)
    return pools


def sort_by_due(cards: list[Card], scheduler: ReviewScheduler) -> list[Card]:
    """
    Sort cards ascending by due timestamp.

    Cards without a due timestamp sort first; ties keep input order.
    """
    return sorted(cards, key=lambda c: scheduler.state_of(c).due_timestamp or _EARLIEST)


def deck_grouped_shuffle(cards: list[Card], rng: random.Random) -> list[Card]:
    """
    Shuffle by drawing a random collection, then a random deck in it, then a
    random card in that deck, until every card has been drawn once.

    Cards listed under several decks are drawn only once.
    """
    collections: dict[str, dict[str, list[Card]]] = {}
    for card in cards:
        definitions = card.definitions or ()
        groups = [(d.collection, d.deck) for d in definitions] or [("", "")]
        for collection, deck in groups:
            collections.setdefault(collection, {}).setdefault(deck, []).append(card)

    shuffled: list[Card] = []
    picked: set[str] = set()
    remaining = len({card.key for card in cards})

    while remaining > 0 and collections:
        collection = rng.choice(list(collections))
        decks = collections[collection]
        deck = rng.choice(list(decks))
        words = decks[deck]

        card = words.pop(rng.randrange(len(words)))
        if not words:
            del decks[deck]
            if not decks:
                del collections[collection]

        if card.key in picked:
            continue
        shuffled.append(card)
        picked.add(card.key)
        remaining -= 1

    return shuffled
