"""Tests for record loading, reference tables and CSV export."""

from __future__ import annotations

import csv
import json
from datetime import UTC, datetime
from pathlib import Path

import pytest

from domain.common import Replay1v1
from domain.protocol import Outcome
from repositories.export import CSV_COLUMNS_1V1, write_replays_1v1_csv
from repositories.reference_repository import load_reference_tables
from repositories.replay_repository import load_records, parse_record


def _raw_record(created_at: str = "2024-05-01T20:00:00Z", **warno_overrides) -> dict:
    warno = {
        "game": {"Map": "_2x2_Plateau", "UniqueSessionId": "abc-123"},
        "localPlayerEugenId": "42",
        "localPlayerKey": "player_1",
        "playerCount": "2",
        "players": {
            "player_1": {
                "PlayerUserId": 42,
                "PlayerName": "Me",
                "PlayerRank": "120",
                "PlayerDeckContent": "deck-1",
                "PlayerAlliance": "0",
                "PlayerElo": "1500",
            },
            "player_2": {
                "PlayerUserId": "7",
                "PlayerName": "Rival",
                "PlayerRank": "80",
                "PlayerDeckContent": "deck-3",
                "PlayerAlliance": "1",
                "PlayerElo": "1480",
            },
        },
        "result": {"Duration": "1260", "Victory": "5"},
    }
    warno.update(warno_overrides)
    return {"fileName": "replay.rpl3", "filePath": "/replays/replay.rpl3", "createdAt": created_at, "warno": warno}


def test_parse_record_reads_cached_layout(tmp_path: Path) -> None:
    record = parse_record(_raw_record(), tmp_path / "replay.json")

    assert record.created_at == datetime(2024, 5, 1, 20, 0, tzinfo=UTC)
    assert record.file_name == "replay.rpl3"
    assert record.file_path == "/replays/replay.rpl3"
    assert record.participant_count == 2
    assert record.subject_key == "player_1"
    assert record.subject_user_id == "42"
    assert record.session_id == "abc-123"
    assert record.map_id == "_2x2_Plateau"
    assert record.duration == "1260"
    assert record.outcome_code == "5"
    subject = record.subject()
    assert subject is not None
    assert subject.user_id == "42"
    assert subject.rating == "1500"
    assert [key for key, _ in record.others()] == ["player_2"]


def test_subject_key_falls_back_to_local_user_id(tmp_path: Path) -> None:
    raw = _raw_record(localPlayerKey="")
    raw["warno"]["localPlayerEugenId"] = "7"

    record = parse_record(raw, tmp_path / "replay.json")

    assert record.subject_key == "player_2"


@pytest.mark.parametrize(
    ("raw", "message"),
    [
        ([], "must be a JSON object"),
        ({"createdAt": "2024-05-01T20:00:00Z"}, "missing 'warno'"),
        ({"warno": {}}, "missing 'createdAt'"),
        ({"createdAt": "yesterday", "warno": {}}, "invalid 'createdAt'"),
        (_raw_record(game=["_2x2_Plateau"]), "'warno.game' must be an object"),
        (_raw_record(result="5"), "'warno.result' must be an object"),
        (_raw_record(players=["player_1"]), "'warno.players' must be an object"),
    ],
)
def test_parse_record_rejects_malformed_documents(tmp_path: Path, raw, message: str) -> None:
    with pytest.raises(ValueError, match=message):
        parse_record(raw, tmp_path / "bad.json")


def test_load_records_skips_bad_files_and_sorts(tmp_path: Path) -> None:
    (tmp_path / "b.json").write_text(json.dumps(_raw_record("2024-05-02T10:00:00Z")))
    (tmp_path / "a.json").write_text(json.dumps(_raw_record("2024-05-03T10:00:00Z")))
    (tmp_path / "broken.json").write_text("{not json")
    (tmp_path / "notes.txt").write_text("ignored")

    records = load_records([tmp_path])

    assert [record.created_at.day for record in records] == [2, 3]


@pytest.mark.parametrize("section", [{"game": ["_2x2_Plateau"]}, {"result": "5"}])
def test_load_records_skips_records_with_wrong_section_types(tmp_path: Path, section: dict) -> None:
    (tmp_path / "a_bad.json").write_text(json.dumps(_raw_record(**section)))
    good = _raw_record()
    good["fileName"] = "good.rpl3"
    (tmp_path / "b_good.json").write_text(json.dumps(good))

    records = load_records([tmp_path])

    assert [record.file_name for record in records] == ["good.rpl3"]


def test_load_records_requires_directories(tmp_path: Path) -> None:
    with pytest.raises(NotADirectoryError):
        load_records([tmp_path / "missing"])


def test_reference_tables(tmp_path: Path) -> None:
    (tmp_path / "maps.json").write_text(json.dumps({"_2x2_Plateau": "Plateau"}))
    (tmp_path / "divisions.json").write_text(
        json.dumps([{"id": 1, "name": "Armored", "alliance": "NATO"}])
    )

    tables = load_reference_tables(tmp_path)

    assert tables.map_resolver().resolve("_2x2_Plateau") == "Plateau"
    assert tables.division_resolver(lambda code: 1).resolve_alliance("deck") == "NATO"


def test_reference_tables_reject_bad_shapes(tmp_path: Path) -> None:
    (tmp_path / "divisions.json").write_text(json.dumps({"id": 1}))
    with pytest.raises(ValueError, match="expected a list"):
        load_reference_tables(tmp_path)


def test_export_1v1_csv(tmp_path: Path) -> None:
    replay = Replay1v1(
        created_at=datetime(2024, 5, 1, 20, 0, tzinfo=UTC),
        file_name="replay.rpl3",
        file_path="/replays/replay.rpl3",
        session_id="abc-123",
        user_id="42",
        name="Me",
        rank="120",
        division="Armored",
        deck_code="",
        duration=1260,
        map_name="Plateau",
        outcome=Outcome.VICTORY,
        opponent_id="7",
        opponent_name="Rival, the",
        opponent_division="Motorized",
        opponent_rank="80",
        opponent_deck_code="",
        elo_change=10.37,
    )
    output_path = tmp_path / "out" / "replays_1v1.csv"

    assert write_replays_1v1_csv([replay], output_path) == 1

    with output_path.open(newline="", encoding="utf-8") as file:
        rows = list(csv.DictReader(file))
    assert list(rows[0]) == CSV_COLUMNS_1V1
    assert rows[0]["enemyName"] == "Rival, the"
    assert rows[0]["result"] == "Victory"
    assert rows[0]["predictedEloChange"] == "10.37"
    assert rows[0]["matchId"] == "abc-123"
