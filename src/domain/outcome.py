"""Map raw result codes onto match outcomes."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from domain.protocol import Outcome

# Observed result codes; they shift between game versions, so keep them here.
DEFAULT_WIN_CODES: tuple[str, ...] = ("4", "5", "6")
DEFAULT_LOSS_CODES: tuple[str, ...] = ("2",)


@dataclass(frozen=True)
class OutcomeClassifier:
    """Total classifier from raw result code to Victory / Defeat / Draw."""

    win_codes: frozenset[str] = frozenset(DEFAULT_WIN_CODES)
    loss_codes: frozenset[str] = frozenset(DEFAULT_LOSS_CODES)

    @classmethod
    def from_codes(cls, win_codes: Iterable[str], loss_codes: Iterable[str]) -> OutcomeClassifier:
        wins = frozenset(str(code).strip() for code in win_codes)
        losses = frozenset(str(code).strip() for code in loss_codes)
        overlap = wins & losses
        if overlap:
            raise ValueError(f"Result codes cannot be both win and loss: {sorted(overlap)}")
        return cls(win_codes=wins, loss_codes=losses)

    def classify(self, raw_code: str | None) -> Outcome:
        if raw_code is None:
            return Outcome.DRAW
        code = str(raw_code).strip()
        if code in self.win_codes:
            return Outcome.VICTORY
        if code in self.loss_codes:
            return Outcome.DEFEAT
        return Outcome.DRAW


_DEFAULT_CLASSIFIER = OutcomeClassifier()


def classify_outcome(raw_code: str | None) -> Outcome:
    """Classify with the default code tables."""
    return _DEFAULT_CLASSIFIER.classify(raw_code)


__all__ = [
    "DEFAULT_LOSS_CODES",
    "DEFAULT_WIN_CODES",
    "OutcomeClassifier",
    "classify_outcome",
]
