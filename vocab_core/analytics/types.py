"""
Types for learning summaries.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import pandas as pd


@dataclass(frozen=True)
class LearningSummary:
    """
    Precomputed vocabulary and study statistics.
    """
    total_cards: int
    total_collections: int
    stage_distribution: dict[str, int]
    rating_counts: dict[str, int]
    retention_rate: float
    daily_reviews: pd.Series
    total_sessions: int
    today_words: int
    total_words_learned: int
    streak_days: int
    last_study_date: Optional[str]
