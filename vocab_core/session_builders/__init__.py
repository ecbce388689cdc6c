"""Session builder modules for quota-bounded study queues."""

from vocab_core.session_builders.pool_types import QueuePlan, StudyPools
from vocab_core.session_builders.pool_utils import (
    deck_grouped_shuffle,
    partition_cards,
    sort_by_due,
)
from vocab_core.session_builders.regular_builder import (
    DeckProgress,
    GLOBAL_SCOPE,
    RegularStudyPlanner,
)

__all__ = [
    "QueuePlan",
    "StudyPools",
    "deck_grouped_shuffle",
    "partition_cards",
    "sort_by_due",
    "DeckProgress",
    "GLOBAL_SCOPE",
    "RegularStudyPlanner",
]
