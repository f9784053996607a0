"""Read cached match records (one JSON document per replay) from disk."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Iterator, Mapping
from datetime import datetime
from pathlib import Path
from typing import Any

from domain.common import ParticipantFields, RawMatchRecord, as_utc, parse_int

log = logging.getLogger(__name__)

RECORD_SUFFIX = ".json"


def iter_record_files(directories: Iterable[Path]) -> Iterator[Path]:
    """Yield record files of each directory, sorted by name within a directory."""
    for directory in directories:
        if not directory.is_dir():
            raise NotADirectoryError(f"Replay directory not found: {directory}")
        log.info("Scanning directory: %s", directory)
        for path in sorted(directory.iterdir()):
            if path.is_file() and path.suffix.lower() == RECORD_SUFFIX:
                yield path


def load_records(directories: Iterable[Path]) -> list[RawMatchRecord]:
    """Load every readable record, oldest first.

    Files that cannot be read or parsed are logged and skipped.
    """
    records: list[RawMatchRecord] = []
    for path in iter_record_files(directories):
        try:
            with path.open("r", encoding="utf-8") as file:
                raw = json.load(file)
            records.append(parse_record(raw, path))
        except (OSError, json.JSONDecodeError, ValueError) as exc:
            log.warning("Skipping record %s: %s", path, exc)
    records.sort(key=lambda record: record.created_at)
    log.info("Loaded %d records", len(records))
    return records


def parse_record(raw: Any, file_path: Path) -> RawMatchRecord:
    """Build a ``RawMatchRecord`` from one cached JSON document."""
    if not isinstance(raw, Mapping):
        raise ValueError(f"{file_path}: record must be a JSON object")
    game_data = raw.get("warno")
    if not isinstance(game_data, Mapping):
        raise ValueError(f"{file_path}: missing 'warno' section")

    created_at = _parse_created_at(raw.get("createdAt"), file_path)
    players_raw = game_data.get("players") or {}
    if not isinstance(players_raw, Mapping):
        raise ValueError(f"{file_path}: 'warno.players' must be an object")

    participants = {
        str(key): _parse_participant(value)
        for key, value in players_raw.items()
        if isinstance(value, Mapping)
    }
    subject_user_id = _text(game_data.get("localPlayerEugenId")) or None
    subject_key = _text(game_data.get("localPlayerKey")) or _key_of(participants, subject_user_id)

    game = game_data.get("game") or {}
    if not isinstance(game, Mapping):
        raise ValueError(f"{file_path}: 'warno.game' must be an object")
    result = game_data.get("result") or {}
    if not isinstance(result, Mapping):
        raise ValueError(f"{file_path}: 'warno.result' must be an object")
    participant_count = parse_int(game_data.get("playerCount"))

    return RawMatchRecord(
        created_at=created_at,
        file_name=_text(raw.get("fileName")) or file_path.name,
        file_path=_text(raw.get("filePath")) or str(file_path),
        participant_count=len(participants) if participant_count is None else participant_count,
        subject_key=subject_key,
        subject_user_id=subject_user_id,
        participants=participants,
        session_id=_text(game.get("UniqueSessionId")) or None,
        map_id=_text(game.get("Map")),
        duration=_text(result.get("Duration")) or None,
        outcome_code=_text(result.get("Victory")) or None,
    )


def _parse_created_at(value: Any, file_path: Path) -> datetime:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"{file_path}: missing 'createdAt'")
    try:
        return as_utc(datetime.fromisoformat(value.strip()))
    except ValueError as exc:
        raise ValueError(f"{file_path}: invalid 'createdAt' {value!r}") from exc


def _parse_participant(raw: Mapping[str, Any]) -> ParticipantFields:
    return ParticipantFields(
        user_id=_text(raw.get("PlayerUserId")),
        name=_text(raw.get("PlayerName")),
        rank=_text(raw.get("PlayerRank")),
        deck_code=_text(raw.get("PlayerDeckContent")),
        rating=_text(raw.get("PlayerElo")) or None,
    )


def _key_of(participants: Mapping[str, ParticipantFields], user_id: str | None) -> str | None:
    if not user_id:
        return None
    for key, participant in sorted(participants.items()):
        if participant.user_id == user_id:
            return key
    return None


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


__all__ = ["RECORD_SUFFIX", "iter_record_files", "load_records", "parse_record"]
