"""
Error types raised by the scheduling engine.
"""

from __future__ import annotations


class SchedulerError(Exception):
    """Base class for all engine errors."""


class InvalidCardError(SchedulerError, ValueError):
    """A card lacks its identity key and cannot be scheduled."""


class InvalidRatingError(SchedulerError, ValueError):
    """A rating outside FORGOT/HARD/EASY (1/2/3)."""

    def __init__(self, rating: object):
        super().__init__(f"Invalid rating {rating!r}; expected 1 (FORGOT), 2 (HARD) or 3 (EASY)")
        self.rating = rating


class InvalidWeightsError(SchedulerError, ValueError):
    """The memory model weight vector has the wrong shape or non-finite values."""


class MalformedStateError(SchedulerError):
    """
    A stored card state is missing expected fields.

    Recoverable: the scheduler repairs the state with defaults instead of
    failing the session.
    """

    def __init__(self, missing_fields: list[str], data: dict | None = None):
        super().__init__(f"Card state missing fields: {', '.join(missing_fields)}")
        self.missing_fields = missing_fields
        self.data = data or {}
