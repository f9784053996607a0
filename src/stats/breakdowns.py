"""Win rates grouped by division, map and (for 2v2) team pairing."""

from __future__ import annotations

from collections.abc import Iterable

from domain.common import CommonReplayData, Replay1v1, Replay2v2
from stats.common import (
    AggregatedStat,
    TeamKey,
    accumulate,
    rank_by_weighted_score,
    require_replays,
)

Breakdown = list[tuple[str, AggregatedStat]]


def division_win_rates(replays: Iterable[CommonReplayData] | None) -> Breakdown:
    rows = require_replays(replays)
    return rank_by_weighted_score(
        accumulate((replay.division, replay.outcome) for replay in rows if replay.division)
    )


def map_win_rates(replays: Iterable[CommonReplayData] | None) -> Breakdown:
    rows = require_replays(replays)
    return rank_by_weighted_score(
        accumulate((replay.map_name, replay.outcome) for replay in rows if replay.map_name)
    )


def opponent_division_win_rates(replays: Iterable[Replay1v1] | None) -> Breakdown:
    rows = require_replays(replays)
    return rank_by_weighted_score(
        accumulate(
            (replay.opponent_division, replay.outcome) for replay in rows if replay.opponent_division
        )
    )


def ally_win_rates(replays: Iterable[Replay2v2] | None) -> Breakdown:
    rows = require_replays(replays)
    return rank_by_weighted_score(accumulate((replay.ally.user_id, replay.outcome) for replay in rows))


def ally_division_win_rates(
    replays: Iterable[Replay2v2] | None,
) -> list[tuple[tuple[str, str], AggregatedStat]]:
    """Keyed by (subject division, ally division); the subject side is fixed so no sorting."""
    rows = require_replays(replays)
    return rank_by_weighted_score(
        accumulate(((replay.division, replay.ally.division), replay.outcome) for replay in rows)
    )


def enemy_team_win_rates(replays: Iterable[Replay2v2] | None) -> list[tuple[TeamKey, AggregatedStat]]:
    """Win rate against each enemy pair, whichever slot each member occupied."""
    rows = require_replays(replays)
    return rank_by_weighted_score(
        accumulate(
            (TeamKey.of(replay.enemies[0].user_id, replay.enemies[1].user_id), replay.outcome)
            for replay in rows
        )
    )


def enemy_team_division_win_rates(
    replays: Iterable[Replay2v2] | None,
) -> list[tuple[TeamKey, AggregatedStat]]:
    rows = require_replays(replays)
    return rank_by_weighted_score(
        accumulate(
            (TeamKey.of(replay.enemies[0].division, replay.enemies[1].division), replay.outcome)
            for replay in rows
        )
    )


__all__ = [
    "Breakdown",
    "ally_division_win_rates",
    "ally_win_rates",
    "division_win_rates",
    "enemy_team_division_win_rates",
    "enemy_team_win_rates",
    "map_win_rates",
    "opponent_division_win_rates",
]
