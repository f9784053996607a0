"""Totals, streaks, durations and rank history over a replay collection."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, date, datetime, tzinfo

from domain.common import CommonReplayData, Replay1v1, parse_int
from domain.protocol import Outcome
from stats.common import calculate_win_rate, chronological, require_replays


@dataclass(frozen=True)
class Totals:
    games: int = 0
    wins: int = 0
    losses: int = 0
    draws: int = 0

    @property
    def win_rate(self) -> float:
        return calculate_win_rate(self.wins, self.games)


@dataclass(frozen=True)
class Streaks:
    longest_win_streak: int = 0
    longest_loss_streak: int = 0


@dataclass(frozen=True)
class RankPoint:
    created_at: datetime
    rank: int


@dataclass(frozen=True)
class DailyRecap:
    day: date
    games_played: int = 0
    wins: int = 0
    losses: int = 0
    draws: int = 0
    time_spent: int = 0
    elo_change: float = 0.0

    @property
    def win_rate(self) -> int:
        """Rounded percentage, 0 when nothing was played."""
        if self.games_played == 0:
            return 0
        return round(self.wins / self.games_played * 100)


def totals(replays: Iterable[CommonReplayData] | None) -> Totals:
    rows = require_replays(replays)
    outcomes = Counter(replay.outcome for replay in rows)
    return Totals(
        games=len(rows),
        wins=outcomes[Outcome.VICTORY],
        losses=outcomes[Outcome.DEFEAT],
        draws=outcomes[Outcome.DRAW],
    )


def streaks(replays: Iterable[CommonReplayData] | None) -> Streaks:
    """Longest win and loss runs, scanning oldest to newest.

    A draw is neither a win nor a loss, so it ends both runs.
    """
    longest_win = longest_loss = 0
    current_win = current_loss = 0

    for replay in chronological(require_replays(replays)):
        if replay.outcome is Outcome.VICTORY:
            current_win += 1
            current_loss = 0
        elif replay.outcome is Outcome.DEFEAT:
            current_loss += 1
            current_win = 0
        else:
            current_win = current_loss = 0
        longest_win = max(longest_win, current_win)
        longest_loss = max(longest_loss, current_loss)

    return Streaks(longest_win_streak=longest_win, longest_loss_streak=longest_loss)


def average_duration(replays: Iterable[CommonReplayData] | None) -> float:
    rows = require_replays(replays)
    if not rows:
        return 0.0
    return sum(replay.duration for replay in rows) / len(rows)


def rank_history(replays: Iterable[CommonReplayData] | None) -> list[RankPoint]:
    """Subject rank per match, oldest first, skipping ranks that are not positive integers."""
    points: list[RankPoint] = []
    for replay in chronological(require_replays(replays)):
        rank = parse_int(replay.rank)
        if rank is None or rank <= 0:
            continue
        points.append(RankPoint(created_at=replay.created_at, rank=rank))
    return points


def total_elo_change(replays: Iterable[Replay1v1] | None) -> float:
    return round(sum(replay.elo_change for replay in require_replays(replays)), 2)


def most_frequent_opponent_divisions(replays: Iterable[Replay1v1] | None) -> list[tuple[str, int]]:
    counts = Counter(
        replay.opponent_division for replay in require_replays(replays) if replay.opponent_division
    )
    return sorted(counts.items(), key=lambda item: (-item[1], item[0]))


def recap_day(day: str | None = None, *, now: datetime | None = None) -> date:
    """Parse a ``YYYY-MM-DD`` day, defaulting to the current UTC date."""
    if day is None:
        return (now or datetime.now(UTC)).astimezone(UTC).date()
    return date.fromisoformat(day.strip())


def daily_recap(
    replays: Iterable[CommonReplayData] | None,
    day: date,
    tz: tzinfo | None = None,
) -> DailyRecap:
    """Summary of the matches played on one calendar day in ``tz`` (UTC when omitted)."""
    todays = [
        replay
        for replay in require_replays(replays)
        if (replay.created_at.astimezone(tz) if tz is not None else replay.created_at).date() == day
    ]
    summary = totals(todays)
    return DailyRecap(
        day=day,
        games_played=summary.games,
        wins=summary.wins,
        losses=summary.losses,
        draws=summary.draws,
        time_spent=sum(replay.duration for replay in todays),
        elo_change=round(
            sum(replay.elo_change for replay in todays if isinstance(replay, Replay1v1)), 2
        ),
    )


__all__ = [
    "DailyRecap",
    "RankPoint",
    "Streaks",
    "Totals",
    "average_duration",
    "daily_recap",
    "most_frequent_opponent_divisions",
    "rank_history",
    "recap_day",
    "streaks",
    "total_elo_change",
    "totals",
]
