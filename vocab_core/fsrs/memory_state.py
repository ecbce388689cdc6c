"""
Memory State - Card State, Review History and Derived Quantities

Defines the value objects the memory model reads and produces.

Key concepts:
- Stability (S): days until retrievability decays to ~90%
- Difficulty (D): intrinsic hardness of the card (0.1-10 scale)
- Retrievability (R): probability of successful recall at time t
- Stage: coarse 0-4 bucket derived from stability, never stored independently

States are immutable. Every review produces a new CardState.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from vocab_core.errors import MalformedStateError
from vocab_core.fsrs.constants import Rating, STAGE_LEARNING, STAGE_THRESHOLDS


@dataclass(frozen=True)
class ReviewEvent:
    """One entry of a card's append-only review history."""
    timestamp: datetime
    rating: Rating
    interval_days: int
    difficulty: Optional[float] = None  # Legacy events may lack the resulting D/S
    stability: Optional[float] = None

    def to_dict(self) -> dict:
        return {
            "timestamp": self.timestamp.isoformat(),
            "rating": int(self.rating),
            "interval_days": self.interval_days,
            "difficulty": self.difficulty,
            "stability": self.stability,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ReviewEvent":
        return cls(
            timestamp=coerce_timestamp(data["timestamp"]),
            rating=Rating(int(data["rating"])),
            interval_days=int(data.get("interval_days", data.get("interval", 0))),
            difficulty=_optional_float(data.get("difficulty")),
            stability=_optional_float(data.get("stability")),
        )


@dataclass(frozen=True)
class CardState:
    """
    Memory state for a single card.

    A zero-valued state (stability == 0, no reviews) means "never reviewed".
    `due_timestamp` is None for new cards, which makes them due immediately.
    """
    difficulty: float = 0.0
    stability: float = 0.0
    reviews: tuple[ReviewEvent, ...] = field(default_factory=tuple)
    last_review_timestamp: Optional[datetime] = None
    due_timestamp: Optional[datetime] = None
    first_learned_timestamp: Optional[datetime] = None

    @property
    def stage(self) -> int:
        """Stage is a pure function of stability."""
        return stage_for_stability(self.stability)

    @property
    def is_first_review(self) -> bool:
        return self.stability == 0 or self.last_review_timestamp is None

    def to_dict(self) -> dict:
        """Serialize to plain types. Callers own the storage format."""
        return {
            "difficulty": self.difficulty,
            "stability": self.stability,
            "reviews": [event.to_dict() for event in self.reviews],
            "last_review_timestamp": _isoformat(self.last_review_timestamp),
            "due_timestamp": _isoformat(self.due_timestamp),
            "first_learned_timestamp": _isoformat(self.first_learned_timestamp),
            "stage": self.stage,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CardState":
        """
        Build a state from stored data.

        Accepts both snake_case keys and the legacy camelCase keys
        (lastReview, dueDate, firstLearnedDate).

        Raises:
            MalformedStateError: if numeric fields or the review history
                are missing or unreadable
        """
        values, missing = _read_fields(data)
        if missing:
            raise MalformedStateError(missing, dict(data))
        return cls(**values)

    @classmethod
    def repaired(cls, data: Mapping[str, Any]) -> "CardState":
        """
        Build a state from partial data, filling defaults for unreadable fields.

        Used for states stored before a schema change.
        """
        values, _ = _read_fields(data)
        return cls(**values)


def stage_for_stability(stability: float) -> int:
    """
    Map stability to a 0-4 stage.

    stability >= 30 -> 4, >= 7 -> 3, >= 3 -> 2, >= 1 -> 1, else 0.
    """
    for threshold, stage in STAGE_THRESHOLDS:
        if stability >= threshold:
            return stage
    return STAGE_LEARNING


def is_due(state: Optional[CardState], now: datetime) -> bool:
    """
    True if the card has no due timestamp or the due timestamp has passed.
    """
    if state is None or state.due_timestamp is None:
        return True
    return now >= state.due_timestamp


def calculate_retrievability(stability: float, elapsed_days: float) -> float:
    """
    Calculate retrievability with the FSRS power forgetting curve.

    Formula: R = (1 + t / (9 * S)) ^ -1

    Immediately after a review R = 1.0; after S days R is about 0.9.
    """
    if elapsed_days <= 0:
        return 1.0
    return (1 + elapsed_days / (9 * stability)) ** -1


def days_since_last_review(state: CardState, now: datetime) -> float:
    """Days elapsed since the last review (0 if never reviewed)."""
    if state.last_review_timestamp is None:
        return 0.0
    delta = now - state.last_review_timestamp
    return delta.total_seconds() / 86400.0


def coerce_timestamp(value: Any) -> datetime:
    """
    Convert a stored timestamp to an aware UTC datetime.

    Accepts datetime (naive values are UTC), ISO-8601 strings and epoch
    milliseconds.
    """
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, bool):
        raise ValueError(f"Not a timestamp: {value!r}")
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)
    if isinstance(value, str):
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    raise ValueError(f"Not a timestamp: {value!r}")


# ---- Helpers ----

_ALIASES = {
    "last_review_timestamp": ("last_review_timestamp", "lastReview"),
    "due_timestamp": ("due_timestamp", "dueDate"),
    "first_learned_timestamp": ("first_learned_timestamp", "firstLearnedDate"),
}


def _read_fields(data: Mapping[str, Any]) -> tuple[dict, list[str]]:
    values: dict[str, Any] = {}
    missing: list[str] = []

    for name in ("difficulty", "stability"):
        number = _optional_float(data.get(name))
        if number is None:
            missing.append(name)
            number = 0.0
        values[name] = number

    raw_reviews = data.get("reviews")
    try:
        values["reviews"] = tuple(ReviewEvent.from_dict(r) for r in raw_reviews)
    except (TypeError, KeyError, ValueError):
        missing.append("reviews")
        values["reviews"] = ()

    for name, keys in _ALIASES.items():
        raw = next((data[k] for k in keys if data.get(k) is not None), None)
        if raw is None:
            values[name] = None
            continue
        try:
            values[name] = coerce_timestamp(raw)
        except (TypeError, ValueError):
            missing.append(name)
            values[name] = None

    # last_review_timestamp is None iff the history is empty
    if values["last_review_timestamp"] is None and values["reviews"]:
        values["last_review_timestamp"] = values["reviews"][-1].timestamp

    return values, missing


def _optional_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None
