"""
Metric computations for learning summaries.
"""

from __future__ import annotations

import pandas as pd

from vocab_core.fsrs import Rating, STAGE_MASTERED


STAGE_BUCKETS = ["new", "learning", "mastered"]


def build_day_index(events_df: pd.DataFrame) -> pd.DatetimeIndex:
    """
    Build a dense UTC day index spanning the event range.
    """
    if events_df.empty:
        return pd.DatetimeIndex([], tz="UTC")
    start = events_df["day_utc"].min()
    end = events_df["day_utc"].max()
    return pd.date_range(start=start, end=end, freq="D")


def compute_rating_counts(events_df: pd.DataFrame) -> dict[str, int]:
    """
    Number of reviews per rating name (FORGOT/HARD/EASY), zeros included.
    """
    counts = {rating.name: 0 for rating in Rating}
    if events_df.empty:
        return counts
    for value, count in events_df["rating"].value_counts().items():
        counts[Rating(int(value)).name] = int(count)
    return counts


def compute_daily_reviews(events_df: pd.DataFrame, day_index: pd.DatetimeIndex) -> pd.Series:
    """
    Reviews per UTC day, zero-filled across the day index.
    """
    if events_df.empty or len(day_index) == 0:
        return pd.Series(dtype="int64")
    daily = events_df.groupby("day_utc").size()
    return daily.reindex(day_index, fill_value=0).astype("int64")


def compute_retention_rate(events_df: pd.DataFrame) -> float:
    """
    Share of reviews that were not FORGOT (0.0 when there are none).
    """
    if events_df.empty:
        return 0.0
    return float((events_df["rating"] != int(Rating.FORGOT)).mean())


def compute_stage_distribution(snapshots_df: pd.DataFrame) -> dict[str, int]:
    """
    Cards per bucket: stage 0 is new, stage 4 is mastered, the rest learning.
    """
    if snapshots_df.empty:
        return {bucket: 0 for bucket in STAGE_BUCKETS}
    stages = snapshots_df["stage"]
    return {
        "new": int((stages == 0).sum()),
        "learning": int(((stages > 0) & (stages < STAGE_MASTERED)).sum()),
        "mastered": int((stages >= STAGE_MASTERED).sum()),
    }
