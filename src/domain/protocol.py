"""Shared protocols and enums for replay analysis."""

from __future__ import annotations

from enum import Enum
from typing import Protocol, runtime_checkable


class Outcome(str, Enum):
    """Match outcome from the subject's perspective."""

    VICTORY = "Victory"
    DEFEAT = "Defeat"
    DRAW = "Draw"

    @property
    def score(self) -> float:
        """Elo actual score for this outcome."""
        if self is Outcome.VICTORY:
            return 1.0
        if self is Outcome.DEFEAT:
            return 0.0
        return 0.5


class GameMode(str, Enum):
    """Which replay shape an analysis run focuses on."""

    ONE_V_ONE = "1v1"
    TWO_V_TWO = "2v2"


DivisionId = int | str


@runtime_checkable
class DeckDecoder(Protocol):
    """External deck-code decoder: returns the division id encoded in a deck code."""

    def __call__(self, deck_code: str) -> DivisionId | None: ...


__all__ = [
    "DeckDecoder",
    "DivisionId",
    "GameMode",
    "Outcome",
]
