"""Tests for grouped win rates and pairing keys."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from domain.common import EnemyRecord, Replay1v1, Replay2v2, TeammateRecord
from domain.protocol import Outcome
from stats.breakdowns import (
    ally_division_win_rates,
    ally_win_rates,
    division_win_rates,
    enemy_team_division_win_rates,
    enemy_team_win_rates,
    map_win_rates,
    opponent_division_win_rates,
)
from stats.common import AggregatedStat, TeamKey, calculate_win_rate, weighted_score
from stats.report import build_statistics_2v2

START = datetime(2024, 5, 1, tzinfo=UTC)


def _replay_1v1(index: int, outcome: Outcome, division: str, map_name: str, opponent_division: str):
    return Replay1v1(
        created_at=START + timedelta(hours=index),
        file_name=f"{index}.rpl3",
        file_path="",
        session_id=None,
        user_id="42",
        name="Me",
        rank="",
        division=division,
        deck_code="",
        duration=0,
        map_name=map_name,
        outcome=outcome,
        opponent_id=f"opp-{index}",
        opponent_name="",
        opponent_division=opponent_division,
        opponent_rank="",
        opponent_deck_code="",
    )


def _enemy(user_id: str, division: str) -> EnemyRecord:
    return EnemyRecord(user_id=user_id, name=user_id, division=division, rank="", deck_code="")


def _replay_2v2(
    index: int,
    outcome: Outcome,
    ally: str,
    enemies: tuple[tuple[str, str], tuple[str, str]],
    division: str = "Armored",
    ally_division: str = "Airborne",
    rank: str = "",
) -> Replay2v2:
    return Replay2v2(
        created_at=START + timedelta(hours=index),
        file_name=f"{index}.rpl3",
        file_path="",
        session_id=None,
        user_id="42",
        name="Me",
        rank=rank,
        division=division,
        deck_code="",
        duration=0,
        map_name="Plateau",
        outcome=outcome,
        ally=TeammateRecord(user_id=ally, name=ally, division=ally_division, rank="", deck_code=""),
        enemies=(_enemy(*enemies[0]), _enemy(*enemies[1])),
    )


def test_team_key_is_symmetric() -> None:
    assert TeamKey.of("B", "A") == TeamKey.of("A", "B")
    assert str(TeamKey.of("B", "A")) == "A|B"


def test_win_rate_and_weighted_score_edges() -> None:
    assert calculate_win_rate(0, 0) == pytest.approx(0.0)
    assert calculate_win_rate(3, 4) == pytest.approx(75.0)
    assert weighted_score(100.0, 0) == pytest.approx(0.0)


def test_weighted_score_increases_with_games() -> None:
    scores = [weighted_score(60.0, games) for games in range(1, 40)]
    assert all(later > earlier for earlier, later in zip(scores, scores[1:]))
    assert scores[-1] < 60.0


def test_large_sample_outranks_lucky_single_game() -> None:
    replays = [_replay_1v1(0, Outcome.VICTORY, "Lucky", "Plateau", "X")]
    replays += [
        _replay_1v1(index, Outcome.VICTORY if index % 5 < 3 else Outcome.DEFEAT, "Steady", "Plateau", "X")
        for index in range(1, 31)
    ]
    ranked = division_win_rates(replays)

    assert [key for key, _ in ranked] == ["Steady", "Lucky"]
    assert ranked[0][1] == AggregatedStat(games=30, victories=18)


def test_map_and_opponent_division_breakdowns() -> None:
    replays = [
        _replay_1v1(0, Outcome.VICTORY, "Armored", "Plateau", "Guards"),
        _replay_1v1(1, Outcome.DEFEAT, "Armored", "Gangjin", "Guards"),
        _replay_1v1(2, Outcome.VICTORY, "Armored", "Plateau", "Motorized"),
    ]
    maps = dict(map_win_rates(replays))
    opponents = dict(opponent_division_win_rates(replays))

    assert maps["Plateau"] == AggregatedStat(games=2, victories=2)
    assert maps["Gangjin"] == AggregatedStat(games=1, victories=0)
    assert opponents["Guards"].win_rate == pytest.approx(50.0)


def test_enemy_team_ignores_slot_order() -> None:
    replays = [
        _replay_2v2(0, Outcome.VICTORY, "11", (("A", "Guards"), ("B", "Motorized"))),
        _replay_2v2(1, Outcome.DEFEAT, "11", (("B", "Motorized"), ("A", "Guards"))),
        _replay_2v2(2, Outcome.VICTORY, "12", (("C", "Guards"), ("A", "Guards"))),
    ]
    teams = dict(enemy_team_win_rates(replays))
    team_divisions = dict(enemy_team_division_win_rates(replays))

    assert teams[TeamKey("A", "B")] == AggregatedStat(games=2, victories=1)
    assert teams[TeamKey("A", "C")] == AggregatedStat(games=1, victories=1)
    assert team_divisions[TeamKey("Guards", "Motorized")].games == 2
    assert team_divisions[TeamKey("Guards", "Guards")].games == 1


def test_ally_breakdowns() -> None:
    replays = [
        _replay_2v2(0, Outcome.VICTORY, "11", (("A", "X"), ("B", "Y"))),
        _replay_2v2(1, Outcome.VICTORY, "11", (("A", "X"), ("B", "Y")), ally_division="Guards"),
        _replay_2v2(2, Outcome.DEFEAT, "12", (("A", "X"), ("B", "Y"))),
    ]
    allies = dict(ally_win_rates(replays))
    ally_divisions = dict(ally_division_win_rates(replays))

    assert allies["11"] == AggregatedStat(games=2, victories=2)
    assert allies["12"] == AggregatedStat(games=1, victories=0)
    assert ally_divisions[("Armored", "Airborne")] == AggregatedStat(games=2, victories=1)
    assert ally_divisions[("Armored", "Guards")] == AggregatedStat(games=1, victories=1)


def test_breakdowns_do_not_mutate_input() -> None:
    replays = [_replay_1v1(1, Outcome.VICTORY, "B", "M", "X"), _replay_1v1(0, Outcome.DEFEAT, "A", "M", "X")]
    snapshot = list(replays)
    division_win_rates(replays)
    assert replays == snapshot


def test_two_v_two_report_includes_rank_history() -> None:
    replays = [
        _replay_2v2(1, Outcome.DEFEAT, "11", (("A", "X"), ("B", "Y")), rank="95"),
        _replay_2v2(0, Outcome.VICTORY, "11", (("A", "X"), ("B", "Y")), rank="100"),
        _replay_2v2(2, Outcome.VICTORY, "11", (("A", "X"), ("B", "Y"))),
    ]
    report = build_statistics_2v2(replays)

    assert [point.rank for point in report.rank_history] == [100, 95]
    assert report.totals.games == 3
