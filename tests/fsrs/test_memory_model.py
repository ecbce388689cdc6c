import math
import random
from datetime import timedelta

import pytest

from vocab_core.errors import InvalidWeightsError
from vocab_core.fsrs import (
    CardState,
    DEFAULT_WEIGHTS,
    MemoryModel,
    Rating,
    ReviewEvent,
    calculate_retrievability,
)
from vocab_core.fsrs.updates import clamp, next_interval, round_half_up, safe_exp, safe_pow


@pytest.fixture
def model():
    return MemoryModel()


@pytest.fixture
def seen_state(now):
    """A card first rated FORGOT, one day ago, with D = 6.123."""
    last = now - timedelta(days=1)
    event = ReviewEvent(timestamp=last, rating=Rating.FORGOT, interval_days=1, difficulty=6.123, stability=0.5701)
    return CardState(
        difficulty=6.123,
        stability=0.5701,
        reviews=(event,),
        last_review_timestamp=last,
        due_timestamp=now,
    )


# ---- First review ----

def test_first_review_easy(model, now):
    state = model.rate(None, Rating.EASY, now)

    assert state.stability == pytest.approx(4.1386)
    assert state.difficulty == pytest.approx(5.1443)
    assert state.reviews[-1].interval_days == 4
    assert state.due_timestamp == now + timedelta(days=4)
    assert state.last_review_timestamp == now
    assert state.stage == 2
    assert state.first_learned_timestamp == now


def test_first_review_forgot(model, now):
    state = model.rate(None, Rating.FORGOT, now)

    assert state.stability == pytest.approx(0.5701)
    # D0 = 5.1443 - 1.2006 * (1 - 3)
    assert state.difficulty == pytest.approx(7.5455)
    assert state.reviews[-1].interval_days == 1
    assert state.stage == 0
    assert state.first_learned_timestamp is None


def test_first_review_hard(model, now):
    state = model.rate(CardState(), Rating.HARD, now)

    assert state.stability == pytest.approx(1.4436)
    assert state.difficulty == pytest.approx(6.3449)
    assert state.reviews[-1].interval_days == 1
    assert state.stage == 1


def test_first_review_is_deterministic(model, now):
    assert model.rate(None, Rating.HARD, now) == model.rate(CardState(), Rating.HARD, now)


def test_first_review_ignores_leftover_difficulty(model, now):
    # stability 0 means "never reviewed", whatever else is stored
    leftover = CardState(difficulty=9.0, stability=0.0)
    assert model.rate(leftover, Rating.EASY, now).difficulty == pytest.approx(5.1443)


# ---- Subsequent reviews ----

def test_subsequent_hard_review(model, seen_state, now):
    w = DEFAULT_WEIGHTS
    s, d = 0.5701, 6.123

    expected_s = s * (
        1 + math.exp(w[12]) * (11 - d) * s ** w[13] * (math.exp((1 - s) * w[14]) - 1) * 0.8
    )
    shifted = d + w[6]
    expected_d = shifted * math.exp(w[7] * (1 - shifted))

    state = model.rate(seen_state, Rating.HARD, now)

    assert state.stability == pytest.approx(expected_s)
    assert state.stability == pytest.approx(0.7938, abs=1e-3)
    assert state.difficulty == pytest.approx(expected_d)
    assert state.difficulty == pytest.approx(4.3745, abs=1e-3)
    assert state.reviews[-1].interval_days == max(1, round_half_up(expected_s * 0.8))
    assert state.reviews[-1].interval_days == 1


def test_stability_uses_pre_update_difficulty(model, seen_state, now):
    w = DEFAULT_WEIGHTS
    s = seen_state.stability
    expected = w[8] * seen_state.difficulty ** w[9] * s ** w[10] * math.exp((1 - s) * w[11])

    state = model.rate(seen_state, Rating.FORGOT, now)

    assert state.stability == pytest.approx(expected)
    assert state.reviews[-1].interval_days == 1


def test_review_appends_one_event_and_leaves_input_untouched(model, seen_state, now):
    before = seen_state.reviews

    state = model.rate(seen_state, Rating.EASY, now)

    assert seen_state.reviews == before
    assert len(state.reviews) == len(before) + 1
    assert state.reviews[:-1] == before
    assert state.reviews[-1].rating == Rating.EASY
    assert state.reviews[-1].timestamp == now


def test_first_learned_is_kept(model, now):
    state = model.rate(None, Rating.EASY, now)
    later = now + timedelta(days=4)

    state = model.rate(state, Rating.FORGOT, later)

    assert state.first_learned_timestamp == now


def test_first_learned_set_on_first_success_after_forgot(model, now):
    state = model.rate(None, Rating.FORGOT, now)
    later = now + timedelta(days=1)

    state = model.rate(state, Rating.HARD, later)

    assert state.first_learned_timestamp == later


@pytest.mark.parametrize("stability,difficulty", [
    (0.0, 0.0),
    (0.3, 2.0),
    (0.5701, 6.123),
    (1.05, 0.1),
    (4.1386, 5.1443),
    (30.0, 1.0),
])
def test_intervals_ordered_by_rating(model, now, stability, difficulty):
    state = CardState(
        difficulty=difficulty,
        stability=stability,
        last_review_timestamp=None if stability == 0 else now - timedelta(days=1),
    )

    intervals = {r: model.next_review(state, r).interval_days for r in Rating}

    assert intervals[Rating.EASY] >= intervals[Rating.HARD] >= intervals[Rating.FORGOT]
    assert intervals[Rating.FORGOT] == 1


def test_values_stay_in_bounds(model, now):
    rng = random.Random(7)
    state = None
    when = now

    for _ in range(200):
        state = model.rate(state, rng.choice(list(Rating)), when)
        event = state.reviews[-1]

        assert 0.1 <= state.stability <= 365
        assert 0.1 <= state.difficulty <= 10
        assert 1 <= event.interval_days <= 365
        assert state.due_timestamp == when + timedelta(days=event.interval_days)
        when = state.due_timestamp


# ---- Weights ----

def test_custom_weights_replace_defaults(now):
    weights = list(DEFAULT_WEIGHTS)
    weights[2] = 8.0

    state = MemoryModel(weights).rate(None, Rating.EASY, now)

    assert state.stability == 8.0
    assert state.reviews[-1].interval_days == 8


@pytest.mark.parametrize("weights", [
    DEFAULT_WEIGHTS[:16],
    DEFAULT_WEIGHTS + (1.0,),
    DEFAULT_WEIGHTS[:16] + (float("nan"),),
    DEFAULT_WEIGHTS[:16] + (float("inf"),),
])
def test_invalid_weights_rejected(weights):
    with pytest.raises(InvalidWeightsError):
        MemoryModel(weights)


# ---- Helpers ----

def test_round_half_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(3.5) == 4
    assert round_half_up(0.49) == 0
    assert round_half_up(4.1386) == 4


def test_clamp_passes_nan_through():
    assert clamp(12.0, 0.1, 10.0) == 10.0
    assert clamp(-1.0, 0.1, 10.0) == 0.1
    assert math.isnan(clamp(float("nan"), 0.1, 10.0))


def test_pow_and_exp_yield_nan_or_inf_instead_of_raising():
    assert math.isnan(safe_pow(-1.0, 0.2116))
    assert safe_pow(1e200, 2.0) == math.inf
    assert safe_pow(4.0, 0.5) == 2.0
    assert safe_exp(1000.0) == math.inf
    assert math.isnan(safe_exp(float("nan")))


def test_negative_difficulty_gives_nan_stability(model, now):
    broken = CardState(
        difficulty=-1.0,
        stability=2.0,
        last_review_timestamp=now - timedelta(days=1),
        due_timestamp=now,
    )

    state = model.rate(broken, Rating.FORGOT, now)

    assert math.isnan(state.stability)
    assert state.reviews[-1].interval_days == 1


def test_nan_stability_has_no_interval():
    assert next_interval(float("nan"), Rating.FORGOT) == 1
    with pytest.raises(ValueError):
        next_interval(float("nan"), Rating.EASY)


def test_retrievability():
    assert calculate_retrievability(4.0, 0) == 1.0
    # After S days recall probability is about 90%
    assert calculate_retrievability(4.0, 4.0) == pytest.approx(0.9)
    assert calculate_retrievability(4.0, 10.0) < calculate_retrievability(4.0, 5.0)
