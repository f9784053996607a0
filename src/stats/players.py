"""Group replays by opponent (1v1) or enemy pair (2v2)."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from domain.aliases import IdentityAliasMap
from domain.common import Replay1v1, Replay2v2
from stats.common import AggregatedStat, TeamKey, accumulate, chronological, require_replays


@dataclass(frozen=True)
class OpponentSummary:
    """Every 1v1 replay against one opponent, oldest first."""

    user_id: str
    replays: tuple[Replay1v1, ...]
    stat: AggregatedStat

    @property
    def ranks(self) -> list[str]:
        return [replay.opponent_rank for replay in self.replays if replay.opponent_rank]

    @property
    def last_played(self) -> Replay1v1:
        return self.replays[-1]


@dataclass(frozen=True)
class EnemyTeamSummary:
    """Every 2v2 replay against one enemy pair, oldest first."""

    key: TeamKey
    replays: tuple[Replay2v2, ...]
    stat: AggregatedStat


def group_by_opponent(replays: Iterable[Replay1v1] | None) -> list[OpponentSummary]:
    """Opponents ordered by games played, most first."""
    grouped: dict[str, list[Replay1v1]] = {}
    for replay in chronological(require_replays(replays)):
        grouped.setdefault(replay.opponent_id, []).append(replay)

    summaries = [
        OpponentSummary(
            user_id=user_id,
            replays=tuple(history),
            stat=accumulate((user_id, replay.outcome) for replay in history)[user_id],
        )
        for user_id, history in grouped.items()
    ]
    return sorted(summaries, key=lambda summary: (-summary.stat.games, summary.user_id))


def group_by_enemy_team(replays: Iterable[Replay2v2] | None) -> list[EnemyTeamSummary]:
    grouped: dict[TeamKey, list[Replay2v2]] = {}
    for replay in chronological(require_replays(replays)):
        key = TeamKey.of(replay.enemies[0].user_id, replay.enemies[1].user_id)
        grouped.setdefault(key, []).append(replay)

    summaries = [
        EnemyTeamSummary(
            key=key,
            replays=tuple(history),
            stat=accumulate((key, replay.outcome) for replay in history)[key],
        )
        for key, history in grouped.items()
    ]
    return sorted(summaries, key=lambda summary: (-summary.stat.games, summary.key))


def search_opponents(
    summaries: Iterable[OpponentSummary],
    alias_map: IdentityAliasMap,
    query: str,
) -> list[OpponentSummary]:
    """Opponents with any known alias containing ``query``; an empty query keeps all."""
    normalized = alias_map.normalize(query.strip())
    if not normalized:
        return list(summaries)
    return [summary for summary in summaries if alias_map.matches(summary.user_id, normalized)]


def search_enemy_teams(
    summaries: Iterable[EnemyTeamSummary],
    alias_map: IdentityAliasMap,
    query: str,
) -> list[EnemyTeamSummary]:
    normalized = alias_map.normalize(query.strip())
    if not normalized:
        return list(summaries)
    return [
        summary
        for summary in summaries
        if alias_map.matches(summary.key.first, normalized)
        or alias_map.matches(summary.key.second, normalized)
    ]


__all__ = [
    "EnemyTeamSummary",
    "OpponentSummary",
    "group_by_enemy_team",
    "group_by_opponent",
    "search_enemy_teams",
    "search_opponents",
]
