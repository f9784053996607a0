"""Elo estimation modules."""

from elo.estimator import (
    DEFAULT_K_FACTOR_THRESHOLDS,
    EloEstimator,
    EloEstimatorParameters,
    KFactorThreshold,
    calculate_expected_score,
    estimate_delta,
    select_k_factor,
)

__all__ = [
    "DEFAULT_K_FACTOR_THRESHOLDS",
    "EloEstimator",
    "EloEstimatorParameters",
    "KFactorThreshold",
    "calculate_expected_score",
    "estimate_delta",
    "select_k_factor",
]
