"""
Vocabulary scheduling engine.

Decides how difficult each card is, when it should be reviewed next and
whether it is due, and turns due/new cards into quota-bounded study sessions.

Layers, leaves first:
- vocab_core.fsrs: memory model (difficulty, stability, interval)
- vocab_core.scheduler: card initialization, review processing, due selection
- vocab_core.session_builders / vocab_core.session_controller: session queue policy
"""

from vocab_core.card import Card, Definition
from vocab_core.config import EngineSettings, load_settings
from vocab_core.errors import (
    InvalidCardError,
    InvalidRatingError,
    InvalidWeightsError,
    MalformedStateError,
    SchedulerError,
)
from vocab_core.fsrs import CardState, MemoryModel, Rating, ReviewEvent
from vocab_core.scheduler import ReviewOutcome, ReviewScheduler, is_new

__all__ = [
    "Card",
    "Definition",
    "EngineSettings",
    "load_settings",
    "InvalidCardError",
    "InvalidRatingError",
    "InvalidWeightsError",
    "MalformedStateError",
    "SchedulerError",
    "CardState",
    "MemoryModel",
    "Rating",
    "ReviewEvent",
    "ReviewOutcome",
    "ReviewScheduler",
    "is_new",
]
