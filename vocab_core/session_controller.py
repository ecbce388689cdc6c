"""
Study session lifecycle: the per-card loop over a planned queue.

A session walks an ordered queue of card keys:
- EASY builds an in-session streak; at `mastery_streak` the card is retired
  for the session, otherwise it is re-inserted a few slots ahead
- HARD/FORGOT reset the streak and re-insert the card nearer the front
- Back-navigation is a separate history stack and never rates or persists
- When the queue empties, every card state is persisted and the resumption
  checkpoint is cleared

Storage is an external collaborator: the session hands it updated cards and
checkpoints but never loads anything itself.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
import logging
import random
from typing import Callable, Optional, Protocol, Sequence

from vocab_core.analytics.tracker import LearningStatsTracker
from vocab_core.card import Card
from vocab_core.config import EngineSettings
from vocab_core.fsrs import Rating, STAGE_MASTERED
from vocab_core.scheduler import ReviewScheduler
from vocab_core.schemas import SessionCheckpoint

logger = logging.getLogger(__name__)


class CardStore(Protocol):
    """Output collaborator receiving card states and checkpoints."""

    def save_card(self, card: Card) -> None: ...

    def save_cards(self, cards: list[Card]) -> None: ...

    def save_checkpoint(self, scope: str, checkpoint: SessionCheckpoint) -> None: ...

    def clear_checkpoint(self, scope: str) -> None: ...


class MistakeNotebook(Protocol):
    """Collects cards the learner keeps forgetting."""

    def add_word(self, key: str) -> None: ...


class SessionStatus(str, Enum):
    IDLE = "idle"
    ACTIVE = "active"
    STOPPED = "stopped"
    COMPLETED = "completed"


@dataclass(frozen=True)
class RatingOutcome:
    """What one rating did to the session."""
    card: Card
    rating: Rating
    is_new_card: bool
    streak: int
    retired: bool
    learned: bool
    reinsert_position: Optional[int] = None


@dataclass(frozen=True)
class SessionResult:
    completed_count: int
    total: int
    all_mastered: bool


class StudySession:
    """
    In-memory study session over a planned queue.

    Args:
        scheduler: Review scheduler used for every rating
        settings: Streak length, re-insert windows and mistake threshold
        store: Output collaborator for card states and checkpoints
        tracker: Learning statistics (learned-today, sessions)
        mistakes: Optional mistake notebook
        rng: Source of re-insert positions
        clock: Callable returning the current aware datetime
    """

    def __init__(
        self,
        scheduler: ReviewScheduler,
        settings: Optional[EngineSettings] = None,
        store: Optional[CardStore] = None,
        tracker: Optional[LearningStatsTracker] = None,
        mistakes: Optional[MistakeNotebook] = None,
        rng: Optional[random.Random] = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc)
    ):
        self.scheduler = scheduler
        self.settings = settings if settings is not None else EngineSettings()
        self.store = store
        self.tracker = tracker
        self.mistakes = mistakes
        self.rng = rng if rng is not None else random.Random()
        self.clock = clock
        self.reset_state()

    def reset_state(self) -> None:
        self.status = SessionStatus.IDLE
        self.scope = ""
        self.cards: dict[str, Card] = {}
        self.queue: list[str] = []
        self.history: list[str] = []
        self.current_key: Optional[str] = None
        self.is_reviewing_history = False
        self.completed_count = 0
        self.total = 0
        self.result: Optional[SessionResult] = None
        self._streaks: Counter[str] = Counter()
        self._forgot_counts: Counter[str] = Counter()
        self._introduced: set[str] = set()
        self._learned: set[str] = set()

    # ---- Lifecycle ----

    def start(
        self,
        scope: str,
        queue: Sequence[Card],
        cards: Sequence[Card] = (),
        checkpoint: Optional[SessionCheckpoint] = None
    ) -> Optional[Card]:
        """
        Start (or resume) a session and show the first card.

        Args:
            scope: Name of the studied scope (deck, collection or "global")
            queue: Planned queue, in study order
            cards: Full card list of the scope; queue cards are added if missing
            checkpoint: Saved queue to resume instead of `queue`

        Returns:
            The first card, or None if there is nothing to study
        """
        self.reset_state()
        self.status = SessionStatus.ACTIVE
        self.scope = scope

        for card in list(cards) + list(queue):
            initialized = self.scheduler.initialize_card(card)
            self.cards.setdefault(initialized.key, initialized)

        if checkpoint is not None:
            self._restore(checkpoint)
        else:
            self.queue = [card.key for card in queue]
            self.total = len(self.queue)

        if self.tracker is not None:
            self.tracker.on_session_start()

        logger.info("Session started for %s: %d cards queued", scope, len(self.queue))
        return self.show_next()

    def _restore(self, checkpoint: SessionCheckpoint) -> None:
        dropped = [key for key in checkpoint.queue if key not in self.cards]
        if dropped:
            logger.warning("Dropping %d checkpoint keys with no matching card: %s", len(dropped), dropped)
        self.queue = [key for key in checkpoint.queue if key in self.cards]
        self.completed_count = checkpoint.completed_count
        self.total = max(checkpoint.total, len(self.queue))
        self._introduced = {key for key in checkpoint.introduced if key in self.cards}
        self._streaks = Counter({key: n for key, n in checkpoint.streaks.items() if key in self.cards})
        logger.info("Restored session for %s at %d/%d", self.scope, self.completed_count, self.total)

    def stop(self) -> None:
        """Stop early, persisting states and keeping the checkpoint for resumption."""
        if self.status != SessionStatus.ACTIVE:
            return
        self._save_checkpoint()
        if self.store is not None:
            self.store.save_cards(list(self.cards.values()))
        self.status = SessionStatus.STOPPED
        logger.info("Session stopped for %s at %d/%d", self.scope, self.completed_count, self.total)

    def _complete(self) -> None:
        self.current_key = None
        self.status = SessionStatus.COMPLETED
        all_mastered = all(
            self.scheduler.state_of(card).stage >= STAGE_MASTERED for card in self.cards.values()
        )
        self.result = SessionResult(self.completed_count, self.total, all_mastered)

        if self.tracker is not None:
            self.tracker.on_session_complete()
        if self.store is not None:
            self.store.save_cards(list(self.cards.values()))
            self.store.clear_checkpoint(self.scope)
        logger.info("Session completed for %s: %d/%d", self.scope, self.completed_count, self.total)

    # ---- Navigation ----

    @property
    def current(self) -> Optional[Card]:
        return self.cards.get(self.current_key) if self.current_key is not None else None

    @property
    def can_go_back(self) -> bool:
        return bool(self.history)

    def show_next(self) -> Optional[Card]:
        """Advance to the next queued card, completing the session when empty."""
        if self.status != SessionStatus.ACTIVE:
            return None
        self.is_reviewing_history = False
        if self.current_key is not None:
            self.history.append(self.current_key)

        if not self.queue:
            self._complete()
            return None

        self.current_key = self.queue.pop(0)
        self._save_checkpoint()
        return self.current

    def show_previous(self) -> Optional[Card]:
        """
        Step back to the previously shown card.

        The current card returns to the front of the queue. Nothing is rated
        or persisted.
        """
        if self.status != SessionStatus.ACTIVE or not self.history:
            return None
        if self.current_key is not None:
            self.queue.insert(0, self.current_key)
        self.current_key = self.history.pop()
        self.is_reviewing_history = True
        return self.current

    # ---- Rating ----

    def rate(self, rating: object, now: Optional[datetime] = None) -> Optional[RatingOutcome]:
        """
        Rate the current card and advance.

        Ratings are ignored while reviewing history or when no card is shown.
        Scheduler errors propagate; the card and queue are then left unchanged.
        """
        if self.status != SessionStatus.ACTIVE or self.current_key is None:
            return None
        if self.is_reviewing_history:
            logger.debug("Ignoring rating while reviewing history")
            return None

        key = self.current_key
        review = self.scheduler.process_review(self.cards[key], rating, now or self.clock())
        checked = review.card.state.reviews[-1].rating

        self.cards[key] = review.card
        if self.store is not None:
            self.store.save_card(review.card)
        if review.is_new_card:
            self._introduced.add(key)

        if checked == Rating.FORGOT:
            self._track_mistake(key)

        retired = learned = False
        position = None
        if checked == Rating.EASY:
            self._streaks[key] += 1
            if self._streaks[key] >= self.settings.mastery_streak:
                retired = True
                learned = self._retire(key)
            else:
                position = self._reinsert(key, self.settings.easy_reinsert_window)
        else:
            self._streaks[key] = 0
            position = self._reinsert(key, self.settings.fail_reinsert_window)

        outcome = RatingOutcome(
            card=review.card,
            rating=checked,
            is_new_card=review.is_new_card,
            streak=self._streaks[key],
            retired=retired,
            learned=learned,
            reinsert_position=position,
        )
        self.show_next()
        return outcome

    def _retire(self, key: str) -> bool:
        self.completed_count += 1
        if key not in self._introduced or key in self._learned:
            return False
        self._learned.add(key)
        if self.tracker is not None:
            self.tracker.track_word_learned(self.scope)
        return True

    def _reinsert(self, key: str, window: tuple[int, int]) -> int:
        lo, hi = window
        position = min(len(self.queue), self.rng.randint(lo, hi))
        self.queue.insert(position, key)
        logger.debug("Re-inserted %s at %d (streak %d)", key, position, self._streaks[key])
        return position

    def _track_mistake(self, key: str) -> None:
        self._forgot_counts[key] += 1
        if self._forgot_counts[key] == self.settings.mistake_threshold and self.mistakes is not None:
            logger.info("%s forgotten %d times this session; adding to mistakes", key, self._forgot_counts[key])
            self.mistakes.add_word(key)

    # ---- State export ----

    def progress(self) -> tuple[int, int]:
        return self.completed_count, self.total

    def checkpoint(self) -> SessionCheckpoint:
        """Resumable queue (current card first) with in-session streaks."""
        keys = ([self.current_key] if self.current_key is not None else []) + list(self.queue)
        return SessionCheckpoint(
            queue=keys,
            completed_count=self.completed_count,
            total=self.total,
            introduced=sorted(self._introduced),
            streaks={key: n for key, n in self._streaks.items() if n},
            saved_at=self.clock(),
        )

    def _save_checkpoint(self) -> None:
        if self.store is not None and self.status == SessionStatus.ACTIVE:
            self.store.save_checkpoint(self.scope, self.checkpoint())
