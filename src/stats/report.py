"""Assemble the full statistics view for 1v1 and 2v2 replay sets."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from domain.common import Replay1v1, Replay2v2
from stats.breakdowns import (
    Breakdown,
    ally_division_win_rates,
    ally_win_rates,
    division_win_rates,
    enemy_team_division_win_rates,
    enemy_team_win_rates,
    map_win_rates,
    opponent_division_win_rates,
)
from stats.buckets import (
    DEFAULT_DURATION_BUCKETS,
    DEFAULT_RANK_BUCKETS,
    BucketSpec,
    win_rate_by_duration,
    win_rate_by_opponent_rank,
)
from stats.common import AggregatedStat, TeamKey, require_replays
from stats.summary import (
    RankPoint,
    Streaks,
    Totals,
    average_duration,
    most_frequent_opponent_divisions,
    rank_history,
    streaks,
    total_elo_change,
    totals,
)


@dataclass(frozen=True)
class CommonStatistics:
    totals: Totals
    streaks: Streaks
    average_duration: float
    division_win_rates: Breakdown
    map_win_rates: Breakdown
    duration_win_rates: Breakdown
    rank_history: list[RankPoint]


@dataclass(frozen=True)
class Statistics1v1(CommonStatistics):
    opponent_division_win_rates: Breakdown
    most_frequent_opponent_divisions: list[tuple[str, int]]
    opponent_rank_win_rates: Breakdown
    elo_change: float


@dataclass(frozen=True)
class Statistics2v2(CommonStatistics):
    ally_win_rates: Breakdown
    ally_division_win_rates: list[tuple[tuple[str, str], AggregatedStat]]
    enemy_team_win_rates: list[tuple[TeamKey, AggregatedStat]]
    enemy_team_division_win_rates: list[tuple[TeamKey, AggregatedStat]]


def build_statistics_1v1(
    replays: Iterable[Replay1v1] | None,
    *,
    rank_buckets: BucketSpec = DEFAULT_RANK_BUCKETS,
    duration_buckets: BucketSpec = DEFAULT_DURATION_BUCKETS,
) -> Statistics1v1:
    rows = require_replays(replays)
    return Statistics1v1(
        totals=totals(rows),
        streaks=streaks(rows),
        average_duration=average_duration(rows),
        division_win_rates=division_win_rates(rows),
        map_win_rates=map_win_rates(rows),
        duration_win_rates=win_rate_by_duration(rows, duration_buckets),
        rank_history=rank_history(rows),
        opponent_division_win_rates=opponent_division_win_rates(rows),
        most_frequent_opponent_divisions=most_frequent_opponent_divisions(rows),
        opponent_rank_win_rates=win_rate_by_opponent_rank(rows, rank_buckets),
        elo_change=total_elo_change(rows),
    )


def build_statistics_2v2(
    replays: Iterable[Replay2v2] | None,
    *,
    duration_buckets: BucketSpec = DEFAULT_DURATION_BUCKETS,
) -> Statistics2v2:
    rows = require_replays(replays)
    return Statistics2v2(
        totals=totals(rows),
        streaks=streaks(rows),
        average_duration=average_duration(rows),
        division_win_rates=division_win_rates(rows),
        map_win_rates=map_win_rates(rows),
        duration_win_rates=win_rate_by_duration(rows, duration_buckets),
        rank_history=rank_history(rows),
        ally_win_rates=ally_win_rates(rows),
        ally_division_win_rates=ally_division_win_rates(rows),
        enemy_team_win_rates=enemy_team_win_rates(rows),
        enemy_team_division_win_rates=enemy_team_division_win_rates(rows),
    )


__all__ = [
    "CommonStatistics",
    "Statistics1v1",
    "Statistics2v2",
    "build_statistics_1v1",
    "build_statistics_2v2",
]
