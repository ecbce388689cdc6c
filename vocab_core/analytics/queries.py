"""
Data-loading helpers for analytics.

Flatten card states into dataframes. No storage access: the caller supplies
the cards.
"""

from __future__ import annotations
from typing import Iterable

import pandas as pd

from vocab_core.card import Card
from vocab_core.fsrs import CardState


EVENT_COLUMNS = ["key", "timestamp", "rating", "interval_days", "difficulty", "stability", "day_utc"]
SNAPSHOT_COLUMNS = ["key", "stability", "difficulty", "stage", "review_count"]


def review_events_frame(cards: Iterable[Card]) -> pd.DataFrame:
    """
    One row per review event across all initialized cards, oldest first.
    """
    rows = [
        {
            "key": card.key,
            "timestamp": event.timestamp,
            "rating": int(event.rating),
            "interval_days": event.interval_days,
            "difficulty": event.difficulty,
            "stability": event.stability,
        }
        for card in cards
        if isinstance(card.state, CardState)
        for event in card.state.reviews
    ]
    if not rows:
        return pd.DataFrame(columns=EVENT_COLUMNS)

    df = pd.DataFrame(rows)
    df["timestamp"] = pd.to_datetime(df["timestamp"], utc=True)
    df["day_utc"] = df["timestamp"].dt.floor("D")
    return df.sort_values("timestamp").reset_index(drop=True)


def card_snapshots_frame(cards: Iterable[Card]) -> pd.DataFrame:
    """
    Current state per card. Cards without a parsed state count as new.
    """
    rows = []
    for card in cards:
        state = card.state if isinstance(card.state, CardState) else CardState()
        rows.append({
            "key": card.key,
            "stability": state.stability,
            "difficulty": state.difficulty,
            "stage": state.stage,
            "review_count": len(state.reviews),
        })
    if not rows:
        return pd.DataFrame(columns=SNAPSHOT_COLUMNS)
    return pd.DataFrame(rows)
