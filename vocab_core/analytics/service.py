"""
Service layer to assemble learning summaries.
"""

from __future__ import annotations
from typing import Sequence

from vocab_core.analytics.metrics import (
    build_day_index,
    compute_daily_reviews,
    compute_rating_counts,
    compute_retention_rate,
    compute_stage_distribution,
)
from vocab_core.analytics.queries import card_snapshots_frame, review_events_frame
from vocab_core.analytics.tracker import LearningStatsTracker
from vocab_core.analytics.types import LearningSummary
from vocab_core.card import Card


def build_summary(cards: Sequence[Card], tracker: LearningStatsTracker) -> LearningSummary:
    """
    Build the vocabulary and study summary for a set of cards.

    Cards should be initialized by the scheduler first; raw states count as new.
    """
    events_df = review_events_frame(cards)
    snapshots_df = card_snapshots_frame(cards)
    day_index = build_day_index(events_df)
    collections = {d.collection for card in cards for d in card.definitions}

    tracker.check_and_reset_daily()
    return LearningSummary(
        total_cards=len(cards),
        total_collections=len(collections),
        stage_distribution=compute_stage_distribution(snapshots_df),
        rating_counts=compute_rating_counts(events_df),
        retention_rate=compute_retention_rate(events_df),
        daily_reviews=compute_daily_reviews(events_df, day_index),
        total_sessions=tracker.total_sessions,
        today_words=tracker.today_words,
        total_words_learned=tracker.total_words_learned,
        streak_days=tracker.streak_days,
        last_study_date=tracker.last_study_date.isoformat() if tracker.last_study_date else None,
    )
