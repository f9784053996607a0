"""Parse the ``[elo]`` settings section."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from domain.config_base import get_float
from elo.estimator import (
    DEFAULT_K_FACTOR_THRESHOLDS,
    EloEstimatorParameters,
    KFactorThreshold,
)


def parse_elo_parameters(elo_raw: dict[str, Any], file_path: Path) -> EloEstimatorParameters:
    scale_factor = get_float(
        elo_raw, "scale_factor", 400.0, file_path=file_path, label="[elo].scale_factor"
    )

    thresholds_raw = elo_raw.get("k_factors")
    if thresholds_raw is None:
        thresholds = DEFAULT_K_FACTOR_THRESHOLDS
    else:
        if not isinstance(thresholds_raw, list):
            raise ValueError(f"{file_path}: [elo].k_factors must be an array of tables")
        thresholds = tuple(
            KFactorThreshold(
                min_gap=get_float(
                    entry, "min_gap", 0.0, file_path=file_path, label="[[elo.k_factors]].min_gap"
                ),
                k_factor=get_float(entry, "k", 0.0, file_path=file_path, label="[[elo.k_factors]].k"),
            )
            for entry in _require_tables(thresholds_raw, file_path)
        )

    parameters = EloEstimatorParameters(
        scale_factor=scale_factor,
        k_factor_thresholds=thresholds,
    )
    _validate_parameters(file_path=file_path, parameters=parameters)
    return parameters


def as_config_json(parameters: EloEstimatorParameters) -> dict[str, Any]:
    return {
        "scale_factor": parameters.scale_factor,
        "k_factors": [
            {"min_gap": threshold.min_gap, "k": threshold.k_factor}
            for threshold in parameters.k_factor_thresholds
        ],
    }


def _require_tables(entries: list[Any], file_path: Path) -> list[dict[str, Any]]:
    for entry in entries:
        if not isinstance(entry, dict) or "k" not in entry:
            raise ValueError(f"{file_path}: every [[elo.k_factors]] entry needs a k value")
    return entries


def _validate_parameters(*, file_path: Path, parameters: EloEstimatorParameters) -> None:
    if parameters.scale_factor <= 0.0:
        raise ValueError(f"{file_path}: [elo].scale_factor must be > 0")

    thresholds = parameters.k_factor_thresholds
    if not thresholds:
        raise ValueError(f"{file_path}: [elo].k_factors must not be empty")
    if thresholds[0].min_gap != 0.0:
        raise ValueError(f"{file_path}: [elo].k_factors must start at min_gap = 0")
    for previous, current in zip(thresholds, thresholds[1:]):
        if current.min_gap <= previous.min_gap:
            raise ValueError(f"{file_path}: [elo].k_factors min_gap values must be ascending")
    for threshold in thresholds:
        if threshold.k_factor <= 0.0:
            raise ValueError(f"{file_path}: [elo].k_factors k must be > 0")
