"""
Typed pool models shared across session builders.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Literal, Union

from vocab_core.card import Card


PoolStatus = Literal["due_review", "new", "not_due"]


@dataclass
class StudyPools:
    """
    Partition of a scope's cards at session start.

    `due_review` is kept sorted by due timestamp, earliest first.
    """
    due_review: list[Card] = field(default_factory=list)
    new: list[Card] = field(default_factory=list)
    not_due: list[Card] = field(default_factory=list)

    @property
    def is_learning_new(self) -> bool:
        return bool(self.new)

    @property
    def shuffle_source(self) -> list[Card]:
        """New cards if any exist, otherwise upcoming cards for free browsing."""
        return self.new if self.new else self.not_due

    def add(self, card: Card, target: PoolStatus) -> None:
        getattr(self, target).append(card)


@dataclass(frozen=True)
class QueuePlan:
    """
    An ordered session queue and how it was composed.

    `new_quota` is infinite when the shuffle source is the not-due pool.
    """
    queue: list[Card]
    pools: StudyPools
    review_count: int
    new_count: int
    new_quota: Union[int, float]

    @property
    def is_empty(self) -> bool:
        return not self.queue
