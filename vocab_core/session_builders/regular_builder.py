"""
Regular Study - Quota-Bounded Session Creation

Creates study sessions from three pools:
1. Due review: cards with history whose due timestamp has passed
2. New: cards never learned (no state or stage 0)
3. Not due: cards with history that are not yet due

Session Logic:
- Take due reviews, earliest due first, up to max_review_words
- Top up with shuffled new cards, bounded by the remaining daily new-word
  quota and by the session capacity left after reviews
- If there are no new cards, top up from not-due cards instead, without a
  daily quota
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime, timezone
import logging
import math
import random
from typing import Iterable, Optional, Sequence

from vocab_core.analytics.tracker import LearningStatsTracker
from vocab_core.cache import TTLCache
from vocab_core.card import Card, DECK_SEPARATOR, Definition
from vocab_core.config import EngineSettings
from vocab_core.fsrs import STAGE_MASTERED, is_due
from vocab_core.scheduler import ReviewScheduler, is_new
from vocab_core.session_builders.pool_types import QueuePlan, StudyPools
from vocab_core.session_builders.pool_utils import deck_grouped_shuffle, partition_cards

logger = logging.getLogger(__name__)

GLOBAL_SCOPE = "global"


@dataclass(frozen=True)
class DeckProgress:
    """Progress counts for one collection (or any group of cards)."""
    name: str
    review: int
    new: int
    mastered: int

    @property
    def due_count(self) -> int:
        return self.review + self.new


class RegularStudyPlanner:
    """
    Builds quota-bounded study queues and per-collection progress statistics.

    The stats cache is owned by the caller and passed in, so expiry is
    controlled by the cache's clock.
    """

    def __init__(
        self,
        scheduler: Optional[ReviewScheduler] = None,
        settings: Optional[EngineSettings] = None,
        stats_cache: Optional[TTLCache[DeckProgress]] = None,
        rng: Optional[random.Random] = None,
        tracker: Optional[LearningStatsTracker] = None
    ):
        self.settings = settings if settings is not None else EngineSettings()
        self.scheduler = scheduler if scheduler is not None else ReviewScheduler(self.settings.weights)
        self.stats_cache = stats_cache if stats_cache is not None else TTLCache(
            ttl_seconds=self.settings.stats_cache_ttl,
            max_size=self.settings.stats_cache_size,
        )
        self.rng = rng if rng is not None else random.Random()
        self.tracker = tracker

    # ---- Scope selection ----

    @staticmethod
    def select_scope_cards(cards: Sequence[Card], scopes: Iterable[str] = (GLOBAL_SCOPE,)) -> list[Card]:
        """
        Select cards belonging to any of the scopes.

        Scopes:
            "global"                      -> every card
            "collection:<name>"           -> cards with a definition under "<name>//"
            "deck:<collection>//<deck>"   -> cards with a definition in the deck

        Returns the union in input order, without duplicates.
        """
        scopes = list(scopes)
        if GLOBAL_SCOPE in scopes:
            return list(cards)

        collections = set()
        decks = set()
        for scope in scopes:
            kind, _, name = scope.partition(":")
            if kind == "collection":
                collections.add(name)
            elif kind == "deck":
                decks.add(name)
            else:
                raise ValueError(f"Unknown scope {scope!r}")

        selected = []
        seen = set()
        for card in cards:
            if card.key in seen:
                continue
            if any(_in_collection(d, collections) or d.source_deck in decks for d in card.definitions):
                selected.append(card)
                seen.add(card.key)
        return selected

    # ---- Queue composition ----

    def prepare_pools(self, cards: Iterable[Card], now: Optional[datetime] = None) -> StudyPools:
        """Initialize every card and partition it into study pools."""
        if now is None:
            now = datetime.now(timezone.utc)
        initialized = [self.scheduler.initialize_card(card) for card in cards]
        return partition_cards(initialized, self.scheduler, now)

    def build_queue(
        self,
        cards: Iterable[Card],
        learned_today: Optional[int] = None,
        now: Optional[datetime] = None,
        scope: str = GLOBAL_SCOPE
    ) -> QueuePlan:
        """
        Compose the session queue.

            review_queue  = due_review[:R]
            new_quota     = max(0, N - learned_today)   (inf if no new cards)
            remaining_cap = max(0, R - len(review_queue))
            new_count     = min(len(shuffled), new_quota, remaining_cap)
            queue         = review_queue + shuffled[:new_count]

        Args:
            cards: Cards in scope (state may be missing or raw)
            learned_today: New cards already learned today in this scope
                (defaults to the tracker's count for `scope`, else 0)
            now: Current time (defaults to now, UTC)
            scope: Scope name the tracker counts learned cards under
        """
        if learned_today is None:
            learned_today = self.tracker.today_learned(scope) if self.tracker is not None else 0

        max_review = self.settings.max_review_words
        pools = self.prepare_pools(cards, now)

        review_queue = pools.due_review[:max_review]
        shuffled = deck_grouped_shuffle(pools.shuffle_source, self.rng)

        if pools.is_learning_new:
            new_quota = max(0, self.settings.daily_new_words - learned_today)
        else:
            new_quota = math.inf
        remaining_capacity = max(0, max_review - len(review_queue))
        new_count = int(min(len(shuffled), new_quota, remaining_capacity))

        plan = QueuePlan(
            queue=review_queue + shuffled[:new_count],
            pools=pools,
            review_count=len(review_queue),
            new_count=new_count,
            new_quota=new_quota,
        )
        logger.info(
            "Planned queue: %d review + %d %s (due=%d new=%d not_due=%d)",
            plan.review_count, plan.new_count,
            "new" if pools.is_learning_new else "browse",
            len(pools.due_review), len(pools.new), len(pools.not_due),
        )
        return plan

    # ---- Progress statistics ----

    def deck_progress_stats(self, cards: Sequence[Card], now: Optional[datetime] = None, name: str = "") -> DeckProgress:
        """Count due, new and mastered cards."""
        if now is None:
            now = datetime.now(timezone.utc)
        states = [self.scheduler.state_of(card) for card in cards]
        return DeckProgress(
            name=name,
            review=sum(1 for s in states if is_due(s, now)),
            new=sum(1 for s in states if is_new(s)),
            mastered=sum(1 for s in states if s.stage >= STAGE_MASTERED),
        )

    def all_decks_progress_stats(self, cards: Sequence[Card], now: Optional[datetime] = None) -> list[DeckProgress]:
        """
        Progress counts per collection, served from the stats cache when fresh.
        """
        grouped: dict[str, dict[str, Card]] = {}
        for card in cards:
            for definition in card.definitions:
                grouped.setdefault(definition.collection, {})[card.key] = card

        stats = []
        for collection, members in grouped.items():
            cached = self.stats_cache.get(collection)
            if cached is not None:
                stats.append(cached)
                continue
            progress = self.deck_progress_stats(list(members.values()), now, name=collection)
            self.stats_cache.put(collection, progress)
            stats.append(progress)
        return stats

    def invalidate_stats(self, collection: Optional[str] = None) -> None:
        """Drop cached stats for one collection, or all of them."""
        self.stats_cache.evict(collection)

    @staticmethod
    def collections_and_decks(cards: Iterable[Card]) -> dict[str, list[str]]:
        """Sorted mapping of collection name to its sorted deck names."""
        collections: dict[str, set[str]] = {}
        for card in cards:
            for definition in card.definitions:
                decks = collections.setdefault(definition.collection, set())
                if DECK_SEPARATOR in definition.source_deck and definition.deck:
                    decks.add(definition.deck)
        return {name: sorted(collections[name]) for name in sorted(collections)}


def _in_collection(definition: Definition, collections: set[str]) -> bool:
    """Only `<collection>//<deck>` sources belong to a collection scope."""
    return any(definition.source_deck.startswith(name + DECK_SEPARATOR) for name in collections)
