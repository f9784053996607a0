"""Aggregations over normalized replays."""

from stats.common import AggregatedStat, TeamKey, calculate_win_rate, weighted_score
from stats.report import (
    Statistics1v1,
    Statistics2v2,
    build_statistics_1v1,
    build_statistics_2v2,
)

__all__ = [
    "AggregatedStat",
    "Statistics1v1",
    "Statistics2v2",
    "TeamKey",
    "build_statistics_1v1",
    "build_statistics_2v2",
    "calculate_win_rate",
    "weighted_score",
]
