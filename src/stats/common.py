"""Shared aggregation primitives."""

from __future__ import annotations

from collections.abc import Hashable, Iterable, Mapping
from dataclasses import dataclass
from math import exp
from typing import TypeVar

from domain.common import CommonReplayData
from domain.protocol import Outcome

# Games at which the confidence factor reaches 1 - 1/e.
CONFIDENCE_GAMES = 5.0

K = TypeVar("K", bound=Hashable)
R = TypeVar("R", bound=CommonReplayData)


def calculate_win_rate(victories: int, games: int) -> float:
    """Victories as a percentage of games, 0 for no games."""
    return 0.0 if games == 0 else (victories / games) * 100.0


def weighted_score(win_rate: float, games: int) -> float:
    """Win rate discounted by sample size, for ranking rather than display.

    Holding the win rate fixed the score strictly increases with games and
    approaches the raw win rate, so 100% over one game ranks below 60% over
    thirty.
    """
    if games <= 0:
        return 0.0
    return win_rate * (1.0 - exp(-games / CONFIDENCE_GAMES))


@dataclass(frozen=True)
class AggregatedStat:
    games: int = 0
    victories: int = 0

    @property
    def win_rate(self) -> float:
        return calculate_win_rate(self.victories, self.games)

    @property
    def weighted_score(self) -> float:
        return weighted_score(self.win_rate, self.games)

    def add(self, outcome: Outcome) -> AggregatedStat:
        return AggregatedStat(
            games=self.games + 1,
            victories=self.victories + (1 if outcome is Outcome.VICTORY else 0),
        )


@dataclass(frozen=True, order=True)
class TeamKey:
    """Order-independent key for an unordered pair."""

    first: str
    second: str

    @classmethod
    def of(cls, a: str, b: str) -> TeamKey:
        return cls(a, b) if a <= b else cls(b, a)

    def __str__(self) -> str:
        return f"{self.first}|{self.second}"


def require_replays(replays: Iterable[R] | None) -> list[R]:
    """Materialize an input collection; ``None`` is a caller bug, not empty data."""
    if replays is None:
        raise TypeError("replays must be a collection, not None")
    return list(replays)


def chronological(replays: Iterable[R]) -> list[R]:
    """Oldest first; replays sharing a timestamp keep their input order."""
    return sorted(replays, key=lambda replay: replay.created_at)


def accumulate(pairs: Iterable[tuple[K, Outcome]]) -> dict[K, AggregatedStat]:
    stats: dict[K, AggregatedStat] = {}
    for key, outcome in pairs:
        stats[key] = stats.get(key, AggregatedStat()).add(outcome)
    return stats


def rank_by_weighted_score(stats: Mapping[K, AggregatedStat]) -> list[tuple[K, AggregatedStat]]:
    """Strongest first; equal scores fall back to more games, then key order."""
    return sorted(
        stats.items(),
        key=lambda item: (-item[1].weighted_score, -item[1].games, str(item[0])),
    )


__all__ = [
    "CONFIDENCE_GAMES",
    "AggregatedStat",
    "TeamKey",
    "accumulate",
    "calculate_win_rate",
    "chronological",
    "rank_by_weighted_score",
    "require_replays",
    "weighted_score",
]
