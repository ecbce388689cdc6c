"""
Analytics package exports.
"""

from vocab_core.analytics.service import build_summary
from vocab_core.analytics.tracker import LearningStatsTracker
from vocab_core.analytics.types import LearningSummary

__all__ = [
    "build_summary",
    "LearningStatsTracker",
    "LearningSummary",
]
