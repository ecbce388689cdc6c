"""
Engine settings.

Values come from the process environment (optionally a `.env` file) and fall
back to the defaults below. Callers may also build EngineSettings directly.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import os
from typing import Mapping, Optional

from dotenv import load_dotenv

from vocab_core.errors import InvalidWeightsError
from vocab_core.fsrs.constants import DEFAULT_WEIGHTS, WEIGHT_COUNT


# ---- Defaults ----
MAX_REVIEW_WORDS_PER_SESSION = 30
DAILY_NEW_WORDS_QUOTA = 10
MASTERY_STREAK = 3                  # Consecutive EASY ratings that retire a card for the session
EASY_REINSERT_WINDOW = (3, 5)       # Slots ahead for an EASY card that is not yet retired
FAIL_REINSERT_WINDOW = (1, 2)       # Slots ahead for a HARD/FORGOT card (resurfaces sooner)
MISTAKE_THRESHOLD = 4               # FORGOT count in one session that flags a card as a mistake
STATS_CACHE_TTL_SECONDS = 300.0
STATS_CACHE_SIZE = 50


@dataclass(frozen=True)
class EngineSettings:
    """Configuration for the scheduler and the session queue policy."""
    max_review_words: int = MAX_REVIEW_WORDS_PER_SESSION
    daily_new_words: int = DAILY_NEW_WORDS_QUOTA
    mastery_streak: int = MASTERY_STREAK
    easy_reinsert_window: tuple[int, int] = EASY_REINSERT_WINDOW
    fail_reinsert_window: tuple[int, int] = FAIL_REINSERT_WINDOW
    mistake_threshold: int = MISTAKE_THRESHOLD
    stats_cache_ttl: float = STATS_CACHE_TTL_SECONDS
    stats_cache_size: int = STATS_CACHE_SIZE
    weights: tuple[float, ...] = field(default=DEFAULT_WEIGHTS)

    def __post_init__(self):
        if self.max_review_words < 0 or self.daily_new_words < 0:
            raise ValueError("Session quotas must not be negative")
        if self.mastery_streak < 1:
            raise ValueError("mastery_streak must be at least 1")
        for name in ("easy_reinsert_window", "fail_reinsert_window"):
            lo, hi = getattr(self, name)
            if lo < 0 or hi < lo:
                raise ValueError(f"{name} must satisfy 0 <= lo <= hi, got {(lo, hi)}")
        if len(self.weights) != WEIGHT_COUNT:
            raise InvalidWeightsError(f"Expected {WEIGHT_COUNT} weights, got {len(self.weights)}")


def load_settings(environ: Optional[Mapping[str, str]] = None, use_dotenv: bool = True) -> EngineSettings:
    """
    Build settings from environment variables.

    Variables:
        SRS_MAX_REVIEW_WORDS, SRS_DAILY_NEW_WORDS, SRS_MASTERY_STREAK,
        SRS_EASY_REINSERT_WINDOW ("lo,hi"), SRS_FAIL_REINSERT_WINDOW ("lo,hi"),
        SRS_MISTAKE_THRESHOLD, SRS_STATS_CACHE_TTL, SRS_STATS_CACHE_SIZE,
        SRS_WEIGHTS (17 comma-separated floats)

    Raises:
        ValueError: if a variable cannot be parsed
        InvalidWeightsError: if SRS_WEIGHTS does not hold 17 numbers
    """
    if environ is None:
        if use_dotenv:
            load_dotenv()
        environ = os.environ

    return EngineSettings(
        max_review_words=_int(environ, "SRS_MAX_REVIEW_WORDS", MAX_REVIEW_WORDS_PER_SESSION),
        daily_new_words=_int(environ, "SRS_DAILY_NEW_WORDS", DAILY_NEW_WORDS_QUOTA),
        mastery_streak=_int(environ, "SRS_MASTERY_STREAK", MASTERY_STREAK),
        easy_reinsert_window=_window(environ, "SRS_EASY_REINSERT_WINDOW", EASY_REINSERT_WINDOW),
        fail_reinsert_window=_window(environ, "SRS_FAIL_REINSERT_WINDOW", FAIL_REINSERT_WINDOW),
        mistake_threshold=_int(environ, "SRS_MISTAKE_THRESHOLD", MISTAKE_THRESHOLD),
        stats_cache_ttl=_float(environ, "SRS_STATS_CACHE_TTL", STATS_CACHE_TTL_SECONDS),
        stats_cache_size=_int(environ, "SRS_STATS_CACHE_SIZE", STATS_CACHE_SIZE),
        weights=_weights(environ),
    )


def _int(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def _float(environ: Mapping[str, str], name: str, default: float) -> float:
    raw = environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


def _window(environ: Mapping[str, str], name: str, default: tuple[int, int]) -> tuple[int, int]:
    raw = environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        lo, hi = (int(part) for part in raw.split(","))
    except ValueError:
        raise ValueError(f"{name} must look like 'lo,hi', got {raw!r}") from None
    return lo, hi


def _weights(environ: Mapping[str, str]) -> tuple[float, ...]:
    raw = environ.get("SRS_WEIGHTS")
    if raw is None or not raw.strip():
        return DEFAULT_WEIGHTS
    try:
        weights = tuple(float(part) for part in raw.split(","))
    except ValueError:
        raise ValueError(f"SRS_WEIGHTS must be comma-separated numbers, got {raw!r}") from None
    if len(weights) != WEIGHT_COUNT:
        raise InvalidWeightsError(f"SRS_WEIGHTS needs {WEIGHT_COUNT} values, got {len(weights)}")
    return weights
