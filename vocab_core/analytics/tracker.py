"""
Learning statistics tracker.

Tracks learning streak, daily progress, total words learned and session
counts. The learned-today count per scope feeds the daily new-word quota.
State is exported as a plain dict; callers persist it.
"""

from __future__ import annotations
from dataclasses import replace
from datetime import date
import logging
from typing import Callable, Iterable, Optional

from vocab_core.card import Card
from vocab_core.fsrs import CardState

logger = logging.getLogger(__name__)


class LearningStatsTracker:
    """
    Session-independent learning counters with a daily rollover.

    Args:
        today: Callable returning the learner's local date
        saved: Previously exported state (see `to_dict`)
    """

    def __init__(self, today: Callable[[], date] = date.today, saved: Optional[dict] = None):
        self._today = today
        self.total_words_learned = 0
        self.total_sessions = 0
        self.today_words = 0
        self.today_date: Optional[date] = None
        self.streak_days = 0
        self.last_study_date: Optional[date] = None
        self.learned_today: dict[str, int] = {}

        if saved:
            self._restore(saved)
        self.check_and_reset_daily()

    # ---- Daily bookkeeping ----

    def check_and_reset_daily(self) -> None:
        """Clear today's counters when the date has changed."""
        today = self._today()
        if self.today_date != today:
            self.today_words = 0
            self.today_date = today
            self.learned_today.clear()

    def _update_streak(self) -> None:
        today = self._today()
        last = self.last_study_date
        if last is None:
            self.streak_days = 1
        elif last != today:
            gap = (today - last).days
            if gap == 1:
                self.streak_days += 1
            elif gap > 1:
                self.streak_days = 1
        self.last_study_date = today

    # ---- Events ----

    def on_session_start(self) -> None:
        self.check_and_reset_daily()
        self._update_streak()

    def on_session_complete(self) -> None:
        self.total_sessions += 1

    def track_word_learned(self, scope: str) -> None:
        """Count one card learned for the first time, in `scope`."""
        self.check_and_reset_daily()
        self.today_words += 1
        self.total_words_learned += 1
        self.learned_today[scope] = self.learned_today.get(scope, 0) + 1
        self._update_streak()
        logger.debug("Learned word in %s (%d today)", scope, self.learned_today[scope])

    # ---- Queries ----

    def today_learned(self, scope: str) -> int:
        self.check_and_reset_daily()
        return self.learned_today.get(scope, 0)

    def total_today_learned(self) -> int:
        self.check_and_reset_daily()
        return sum(self.learned_today.values())

    # ---- Export / reset ----

    def to_dict(self) -> dict:
        return {
            "total_words_learned": self.total_words_learned,
            "total_sessions": self.total_sessions,
            "today_words": self.today_words,
            "today_date": _iso(self.today_date),
            "streak_days": self.streak_days,
            "last_study_date": _iso(self.last_study_date),
            "learned_today": dict(self.learned_today),
        }

    def _restore(self, saved: dict) -> None:
        self.total_words_learned = int(saved.get("total_words_learned", 0))
        self.total_sessions = int(saved.get("total_sessions", 0))
        self.today_words = int(saved.get("today_words", 0))
        self.today_date = _parse_date(saved.get("today_date"))
        self.streak_days = int(saved.get("streak_days", 0))
        self.last_study_date = _parse_date(saved.get("last_study_date"))
        self.learned_today = {str(k): int(v) for k, v in (saved.get("learned_today") or {}).items()}

    def reset(self, cards: Iterable[Card] = ()) -> list[Card]:
        """
        Clear all statistics.

        Returns:
            Copies of the cards whose first-learned timestamp was set, with it
            cleared. The caller persists them.
        """
        self.total_words_learned = 0
        self.total_sessions = 0
        self.today_words = 0
        self.today_date = self._today()
        self.streak_days = 0
        self.last_study_date = None
        self.learned_today = {}

        cleared = []
        for card in cards:
            state = card.state
            if isinstance(state, CardState) and state.first_learned_timestamp is not None:
                cleared.append(card.with_state(replace(state, first_learned_timestamp=None)))
        logger.info("Statistics reset; cleared first-learned date on %d cards", len(cleared))
        return cleared


def _iso(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _parse_date(value: Optional[str]) -> Optional[date]:
    return date.fromisoformat(value) if value else None
