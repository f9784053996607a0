"""Load the static map and division tables."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from domain.divisions import DivisionInfo, DivisionResolver, MapResolver
from domain.protocol import DeckDecoder

MAPS_FILE = "maps.json"
DIVISIONS_FILE = "divisions.json"


@dataclass(frozen=True)
class ReferenceTables:
    maps: dict[str, str]
    divisions: tuple[DivisionInfo, ...]

    def map_resolver(self) -> MapResolver:
        return MapResolver(self.maps)

    def division_resolver(self, decoder: DeckDecoder | None = None) -> DivisionResolver:
        return DivisionResolver(self.divisions, decoder)


def empty_reference_tables() -> ReferenceTables:
    return ReferenceTables(maps={}, divisions=())


def load_reference_tables(reference_dir: Path) -> ReferenceTables:
    """Read ``maps.json`` and ``divisions.json``; either file may be absent."""
    if not reference_dir.is_dir():
        raise NotADirectoryError(f"Reference directory not found: {reference_dir}")

    maps_path = reference_dir / MAPS_FILE
    divisions_path = reference_dir / DIVISIONS_FILE
    maps = _parse_maps(_read_json(maps_path), maps_path) if maps_path.exists() else {}
    divisions = (
        _parse_divisions(_read_json(divisions_path), divisions_path)
        if divisions_path.exists()
        else ()
    )
    return ReferenceTables(maps=maps, divisions=divisions)


def _read_json(file_path: Path) -> Any:
    with file_path.open("r", encoding="utf-8") as file:
        try:
            return json.load(file)
        except json.JSONDecodeError as exc:
            raise ValueError(f"{file_path}: invalid JSON ({exc})") from exc


def _parse_maps(raw: Any, file_path: Path) -> dict[str, str]:
    if not isinstance(raw, dict):
        raise ValueError(f"{file_path}: expected an object of map id -> name")
    return {str(key): str(value) for key, value in raw.items()}


def _parse_divisions(raw: Any, file_path: Path) -> tuple[DivisionInfo, ...]:
    if not isinstance(raw, list):
        raise ValueError(f"{file_path}: expected a list of divisions")

    divisions: list[DivisionInfo] = []
    for index, entry in enumerate(raw):
        if not isinstance(entry, dict) or "id" not in entry:
            raise ValueError(f"{file_path}: divisions[{index}] must be an object with an 'id'")
        divisions.append(
            DivisionInfo(
                id=entry["id"],
                name=str(entry.get("name", "")),
                alliance=str(entry.get("alliance", "")),
            )
        )
    return tuple(divisions)


__all__ = [
    "DIVISIONS_FILE",
    "MAPS_FILE",
    "ReferenceTables",
    "empty_reference_tables",
    "load_reference_tables",
]
