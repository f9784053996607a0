"""CSV export of normalized replays."""

from __future__ import annotations

import csv
import logging
from collections.abc import Iterable
from pathlib import Path

from domain.common import Replay1v1, Replay2v2

log = logging.getLogger(__name__)

CSV_COLUMNS_1V1 = [
    "createdAt",
    "enemyName",
    "enemyId",
    "map",
    "result",
    "myDivision",
    "enemyDivision",
    "myRank",
    "enemyRank",
    "durationSeconds",
    "predictedEloChange",
    "matchId",
    "replayPath",
]

CSV_COLUMNS_2V2 = [
    "createdAt",
    "allyName",
    "allyId",
    "allyDivision",
    "enemy1Name",
    "enemy1Id",
    "enemy1Division",
    "enemy2Name",
    "enemy2Id",
    "enemy2Division",
    "map",
    "result",
    "myDivision",
    "durationSeconds",
    "matchId",
    "replayPath",
]


def _row_1v1(replay: Replay1v1) -> dict[str, str]:
    return {
        "createdAt": replay.created_at.isoformat(),
        "enemyName": replay.opponent_name,
        "enemyId": replay.opponent_id,
        "map": replay.map_name,
        "result": replay.outcome.value,
        "myDivision": replay.division,
        "enemyDivision": replay.opponent_division,
        "myRank": replay.rank,
        "enemyRank": replay.opponent_rank,
        "durationSeconds": str(replay.duration),
        "predictedEloChange": f"{replay.elo_change:.2f}",
        "matchId": replay.session_id or "",
        "replayPath": replay.file_path,
    }


def _row_2v2(replay: Replay2v2) -> dict[str, str]:
    first, second = replay.enemies
    return {
        "createdAt": replay.created_at.isoformat(),
        "allyName": replay.ally.name,
        "allyId": replay.ally.user_id,
        "allyDivision": replay.ally.division,
        "enemy1Name": first.name,
        "enemy1Id": first.user_id,
        "enemy1Division": first.division,
        "enemy2Name": second.name,
        "enemy2Id": second.user_id,
        "enemy2Division": second.division,
        "map": replay.map_name,
        "result": replay.outcome.value,
        "myDivision": replay.division,
        "durationSeconds": str(replay.duration),
        "matchId": replay.session_id or "",
        "replayPath": replay.file_path,
    }


def write_replays_1v1_csv(replays: Iterable[Replay1v1], output_path: Path) -> int:
    """Write 1v1 replays newest first; returns the number of rows written."""
    return _write_csv(
        output_path,
        CSV_COLUMNS_1V1,
        [_row_1v1(replay) for replay in _newest_first(replays)],
    )


def write_replays_2v2_csv(replays: Iterable[Replay2v2], output_path: Path) -> int:
    return _write_csv(
        output_path,
        CSV_COLUMNS_2V2,
        [_row_2v2(replay) for replay in _newest_first(replays)],
    )


def _newest_first(replays):
    return sorted(replays, key=lambda replay: replay.created_at, reverse=True)


def _write_csv(output_path: Path, columns: list[str], rows: list[dict[str, str]]) -> int:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with output_path.open("w", encoding="utf-8", newline="") as file:
        writer = csv.DictWriter(file, fieldnames=columns)
        writer.writeheader()
        writer.writerows(rows)
    log.info("Wrote %d rows to %s", len(rows), output_path)
    return len(rows)


__all__ = [
    "CSV_COLUMNS_1V1",
    "CSV_COLUMNS_2V2",
    "write_replays_1v1_csv",
    "write_replays_2v2_csv",
]
