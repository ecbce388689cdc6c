"""
Pydantic models for the JSON boundary of the engine.

These models define the shape of card lists handed in by storage and of the
session checkpoint handed back for crash/interrupt recovery. Card state
stays a loose dict here; the scheduler validates and repairs it.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from vocab_core.card import Card, Definition


class DefinitionRecord(BaseModel):
    """One meaning of a card as stored."""
    model_config = ConfigDict(populate_by_name=True)

    meaning: str = Field("", validation_alias=AliasChoices("meaning", "chinese"))
    source_deck: str = Field("", validation_alias=AliasChoices("source_deck", "sourceDeck"))
    explanation: str = ""


class CardRecord(BaseModel):
    """A card as stored: identity key, definitions and raw state."""
    model_config = ConfigDict(populate_by_name=True)

    key: str = Field(..., min_length=1, validation_alias=AliasChoices("key", "arabic"))
    definitions: list[DefinitionRecord] = Field(default_factory=list)
    state: Optional[dict[str, Any]] = Field(None, validation_alias=AliasChoices("state", "progress"))

    def to_card(self) -> Card:
        return Card(
            key=self.key,
            definitions=tuple(
                Definition(meaning=d.meaning, source_deck=d.source_deck, explanation=d.explanation)
                for d in self.definitions
            ),
            state=self.state,
        )


class SessionCheckpoint(BaseModel):
    """Resumable session queue: card keys only, never full state."""
    queue: list[str] = Field(default_factory=list)
    completed_count: int = Field(0, ge=0)
    total: int = Field(0, ge=0)
    introduced: list[str] = Field(default_factory=list)  # Keys first reviewed this session
    streaks: dict[str, int] = Field(default_factory=dict)
    saved_at: Optional[datetime] = None


def load_cards(records: list[dict[str, Any]]) -> list[Card]:
    """Validate a JSON card list and convert it to cards."""
    return [CardRecord.model_validate(record).to_card() for record in records]
