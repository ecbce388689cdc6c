from datetime import date, datetime, timedelta, timezone
import random

import pytest

from vocab_core import Card, CardState, Definition, Rating, ReviewEvent, ReviewScheduler


NOW = datetime(2024, 3, 15, 9, 0, tzinfo=timezone.utc)


def make_card(key, source_deck="Basics//Nouns", state=None):
    return Card(key=key, definitions=(Definition(meaning=key.upper(), source_deck=source_deck),), state=state)


def reviewed_state(stability, due, difficulty=5.0):
    """A state with one past review, due at `due`."""
    last = due - timedelta(days=max(1, round(stability)))
    event = ReviewEvent(timestamp=last, rating=Rating.EASY, interval_days=1, difficulty=difficulty, stability=stability)
    return CardState(
        difficulty=difficulty,
        stability=stability,
        reviews=(event,),
        last_review_timestamp=last,
        due_timestamp=due,
        first_learned_timestamp=last,
    )


class InMemoryStore:
    """Records everything the session hands to storage."""

    def __init__(self):
        self.saved = {}
        self.save_card_calls = 0
        self.bulk_saves = []
        self.checkpoints = {}
        self.cleared = []

    def save_card(self, card):
        self.save_card_calls += 1
        self.saved[card.key] = card

    def save_cards(self, cards):
        self.bulk_saves.append(list(cards))
        for card in cards:
            self.saved[card.key] = card

    def save_checkpoint(self, scope, checkpoint):
        self.checkpoints[scope] = checkpoint

    def clear_checkpoint(self, scope):
        self.checkpoints.pop(scope, None)
        self.cleared.append(scope)


class MistakeList:
    def __init__(self):
        self.words = []

    def add_word(self, key):
        self.words.append(key)


class FakeClock:
    """Monotonic seconds that only move when told to."""

    def __init__(self, start=1000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class FakeToday:
    def __init__(self, start=date(2024, 3, 15)):
        self.value = start

    def __call__(self):
        return self.value

    def advance(self, days=1):
        self.value += timedelta(days=days)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def scheduler():
    return ReviewScheduler()


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def mistakes():
    return MistakeList()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def today():
    return FakeToday()


@pytest.fixture
def card_factory():
    """Builds a card with one definition in `source_deck`."""
    return make_card


@pytest.fixture
def state_factory():
    """Builds a previously reviewed state due at a given time."""
    return reviewed_state
