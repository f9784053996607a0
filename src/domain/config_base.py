"""Shared config-loading utilities."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, date, datetime, time
from pathlib import Path
from typing import Any, TypeVar
import tomllib


@dataclass(frozen=True)
class BaseConfig:
    """Metadata shared by every TOML-backed config."""

    file_path: Path | None

    def as_config_json(self) -> dict[str, Any]:
        raise NotImplementedError


T = TypeVar("T", bound=BaseConfig)


def load_config_file(file_path: Path, parser: Callable[[dict[str, Any], Path], T]) -> T:
    """Read one TOML file and hand the raw table to ``parser``."""
    if not file_path.exists():
        raise FileNotFoundError(f"Config file not found: {file_path}")
    if file_path.is_dir():
        raise IsADirectoryError(f"Config path is a directory: {file_path}")

    with file_path.open("rb") as file:
        try:
            raw = tomllib.load(file)
        except tomllib.TOMLDecodeError as exc:
            raise ValueError(f"{file_path}: invalid TOML ({exc})") from exc
    return parser(raw, file_path)


def get_table(raw: dict[str, Any], section: str, *, file_path: Path) -> dict[str, Any]:
    value = raw.get(section, {})
    if not isinstance(value, dict):
        raise ValueError(f"{file_path}: [{section}] must be a table")
    return value


def get_bool(table: dict[str, Any], key: str, default: bool, *, file_path: Path, label: str) -> bool:
    value = table.get(key, default)
    if not isinstance(value, bool):
        raise ValueError(f"{file_path}: {label} must be true or false")
    return value


def get_int(table: dict[str, Any], key: str, default: int, *, file_path: Path, label: str) -> int:
    value = table.get(key, default)
    # bool is an int subclass; reject it explicitly.
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{file_path}: {label} must be an integer")
    return value


def get_float(table: dict[str, Any], key: str, default: float, *, file_path: Path, label: str) -> float:
    value = table.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise ValueError(f"{file_path}: {label} must be a number")
    return float(value)


def parse_datetime_value(value: Any, *, file_path: Path, key: str) -> datetime | None:
    """Accept TOML dates/datetimes or ISO-8601 strings; naive values are UTC."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time.min)
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.strip())
        except ValueError as exc:
            raise ValueError(f"{file_path}: {key} is not an ISO-8601 date: {value!r}") from exc
    else:
        raise ValueError(f"{file_path}: {key} must be a date, got {type(value).__name__}")

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


__all__ = [
    "BaseConfig",
    "get_bool",
    "get_float",
    "get_int",
    "get_table",
    "load_config_file",
    "parse_datetime_value",
]
