"""
Card - one learnable item with its memory state.

A card is identified by its `key` (the headword). Definitions are content the
engine never reads beyond their source deck, which is used for scope
selection and deck statistics.
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from typing import Any, Mapping, Optional, Union

from vocab_core.fsrs.memory_state import CardState


DECK_SEPARATOR = "//"


@dataclass(frozen=True)
class Definition:
    """A meaning of the card, tagged with the deck it was imported from."""
    meaning: str
    source_deck: str = ""  # "<collection>//<deck>"
    explanation: str = ""

    @property
    def collection(self) -> str:
        return self.source_deck.split(DECK_SEPARATOR, 1)[0]

    @property
    def deck(self) -> str:
        parts = self.source_deck.split(DECK_SEPARATOR, 1)
        return parts[1] if len(parts) > 1 else ""


@dataclass(frozen=True)
class Card:
    """
    A learnable item.

    `state` is either a CardState, raw stored data awaiting initialization,
    or None for a card never seen before.
    """
    key: str
    definitions: tuple[Definition, ...] = field(default_factory=tuple)
    state: Optional[Union[CardState, Mapping[str, Any]]] = None

    def with_state(self, state: CardState) -> "Card":
        """Return a copy of this card carrying `state`."""
        return replace(self, state=state)

    def to_dict(self) -> dict:
        state = self.state.to_dict() if isinstance(self.state, CardState) else self.state
        return {
            "key": self.key,
            "definitions": [
                {"meaning": d.meaning, "source_deck": d.source_deck, "explanation": d.explanation}
                for d in self.definitions
            ],
            "state": state,
        }
