"""Load analysis settings from a TOML file."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from pathlib import Path
from typing import Any

from domain.config_base import (
    BaseConfig,
    get_bool,
    get_int,
    get_table,
    load_config_file,
    parse_datetime_value,
)
from domain.normalizer import NormalizeOptions
from domain.outcome import DEFAULT_LOSS_CODES, DEFAULT_WIN_CODES, OutcomeClassifier
from domain.protocol import GameMode
from elo.config import as_config_json as elo_config_json
from elo.config import parse_elo_parameters
from elo.estimator import EloEstimatorParameters
from stats.buckets import DEFAULT_DURATION_BUCKETS, DEFAULT_RANK_BUCKETS, BucketSpec


@dataclass(frozen=True)
class AnalysisSettings(BaseConfig):
    """Everything read before an analysis pass."""

    tracked_ids: frozenset[str] = field(default_factory=frozenset)
    start_date: datetime | None = None
    end_date: datetime | None = None
    sharing_disabled: bool = False
    game_mode: GameMode = GameMode.ONE_V_ONE
    outcomes: OutcomeClassifier = field(default_factory=OutcomeClassifier)
    elo: EloEstimatorParameters = field(default_factory=EloEstimatorParameters)
    rank_buckets: BucketSpec = DEFAULT_RANK_BUCKETS
    duration_buckets: BucketSpec = DEFAULT_DURATION_BUCKETS

    def normalize_options(self) -> NormalizeOptions:
        return NormalizeOptions(
            tracked_ids=self.tracked_ids,
            start_date=self.start_date,
            end_date=self.end_date,
        )

    def as_config_json(self) -> dict[str, Any]:
        return {
            "tracked_ids": sorted(self.tracked_ids),
            "start_date": None if self.start_date is None else self.start_date.isoformat(),
            "end_date": None if self.end_date is None else self.end_date.isoformat(),
            "sharing_disabled": self.sharing_disabled,
            "game_mode": self.game_mode.value,
            "win_codes": sorted(self.outcomes.win_codes),
            "loss_codes": sorted(self.outcomes.loss_codes),
            "elo": elo_config_json(self.elo),
            "rank_buckets": self.rank_buckets.as_config_json(),
            "duration_buckets": self.duration_buckets.as_config_json(),
        }


def default_settings() -> AnalysisSettings:
    return AnalysisSettings(file_path=None)


def load_settings(file_path: Path) -> AnalysisSettings:
    """Load and validate one settings TOML file."""
    return load_config_file(file_path, _parse_settings)


def _parse_settings(raw: dict[str, Any], file_path: Path) -> AnalysisSettings:
    analysis_raw = get_table(raw, "analysis", file_path=file_path)
    outcome_raw = get_table(raw, "outcome", file_path=file_path)
    elo_raw = get_table(raw, "elo", file_path=file_path)
    buckets_raw = get_table(raw, "buckets", file_path=file_path)

    tracked_raw = analysis_raw.get("tracked_ids", [])
    if not isinstance(tracked_raw, list):
        raise ValueError(f"{file_path}: [analysis].tracked_ids must be a list")
    tracked_ids = frozenset(str(value).strip() for value in tracked_raw if str(value).strip())

    start_date = parse_datetime_value(
        analysis_raw.get("start_date"), file_path=file_path, key="[analysis].start_date"
    )
    end_date = parse_datetime_value(
        analysis_raw.get("end_date"), file_path=file_path, key="[analysis].end_date"
    )
    if start_date is not None and end_date is not None and end_date < start_date:
        raise ValueError(f"{file_path}: [analysis].end_date must not be before start_date")

    sharing_disabled = get_bool(
        analysis_raw,
        "sharing_disabled",
        False,
        file_path=file_path,
        label="[analysis].sharing_disabled",
    )

    game_mode_value = analysis_raw.get("game_mode", GameMode.ONE_V_ONE.value)
    try:
        game_mode = GameMode(game_mode_value)
    except ValueError as exc:
        available = ", ".join(mode.value for mode in GameMode)
        raise ValueError(
            f"{file_path}: [analysis].game_mode must be one of {available}, got {game_mode_value!r}"
        ) from exc

    win_codes = outcome_raw.get("win_codes", list(DEFAULT_WIN_CODES))
    loss_codes = outcome_raw.get("loss_codes", list(DEFAULT_LOSS_CODES))
    for key, codes in (("win_codes", win_codes), ("loss_codes", loss_codes)):
        if not isinstance(codes, list):
            raise ValueError(f"{file_path}: [outcome].{key} must be a list")
    try:
        outcomes = OutcomeClassifier.from_codes(win_codes, loss_codes)
    except ValueError as exc:
        raise ValueError(f"{file_path}: [outcome] {exc}") from exc

    rank_buckets = replace(
        DEFAULT_RANK_BUCKETS,
        width=_bucket_int(buckets_raw, "rank_width", DEFAULT_RANK_BUCKETS.width, file_path),
        limit=_bucket_int(buckets_raw, "rank_limit", DEFAULT_RANK_BUCKETS.limit, file_path),
    )
    duration_buckets = replace(
        DEFAULT_DURATION_BUCKETS,
        width=_bucket_int(
            buckets_raw, "duration_width_minutes", DEFAULT_DURATION_BUCKETS.width, file_path
        ),
        limit=_bucket_int(
            buckets_raw, "duration_limit_minutes", DEFAULT_DURATION_BUCKETS.limit, file_path
        ),
    )
    _validate_buckets(file_path=file_path, name="rank", spec=rank_buckets)
    _validate_buckets(file_path=file_path, name="duration", spec=duration_buckets)

    return AnalysisSettings(
        file_path=file_path,
        tracked_ids=tracked_ids,
        start_date=start_date,
        end_date=end_date,
        sharing_disabled=sharing_disabled,
        game_mode=game_mode,
        outcomes=outcomes,
        elo=parse_elo_parameters(elo_raw, file_path),
        rank_buckets=rank_buckets,
        duration_buckets=duration_buckets,
    )


def _bucket_int(buckets_raw: dict[str, Any], key: str, default: int, file_path: Path) -> int:
    return get_int(buckets_raw, key, default, file_path=file_path, label=f"[buckets].{key}")


def _validate_buckets(*, file_path: Path, name: str, spec: BucketSpec) -> None:
    if spec.width <= 0:
        raise ValueError(f"{file_path}: [buckets].{name} width must be > 0")
    if spec.limit <= 0:
        raise ValueError(f"{file_path}: [buckets].{name} limit must be > 0")
    if spec.limit % spec.width != 0:
        raise ValueError(f"{file_path}: [buckets].{name} limit must be a multiple of the width")


__all__ = ["AnalysisSettings", "default_settings", "load_settings"]
