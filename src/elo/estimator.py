"""Approximate Elo change for a single ranked match.

The ladder's real rating update runs server-side and is not published.
This reproduces its observed behaviour closely enough for display: a
standard logistic expected score with a K-factor that grows with the
rating gap between the two players. Treat the result as an estimate.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from domain.protocol import Outcome


@dataclass(frozen=True)
class KFactorThreshold:
    min_gap: float
    k_factor: float


DEFAULT_K_FACTOR_THRESHOLDS: tuple[KFactorThreshold, ...] = (
    KFactorThreshold(min_gap=0.0, k_factor=22.0),
    KFactorThreshold(min_gap=40.0, k_factor=25.0),
    KFactorThreshold(min_gap=100.0, k_factor=26.0),
)

VALID_SCORES = (0.0, 0.5, 1.0)


@dataclass(frozen=True)
class EloEstimatorParameters:
    scale_factor: float = 400.0
    k_factor_thresholds: tuple[KFactorThreshold, ...] = DEFAULT_K_FACTOR_THRESHOLDS


def calculate_expected_score(rating: float, opponent_rating: float, scale_factor: float) -> float:
    """Compute the Elo expected score for one side."""
    return 1.0 / (1.0 + 10.0 ** ((opponent_rating - rating) / scale_factor))


def select_k_factor(rating_gap: float, thresholds: Sequence[KFactorThreshold]) -> float:
    """Walk thresholds in ascending order; the last one the gap reaches wins."""
    if not thresholds:
        raise ValueError("At least one K-factor threshold is required")
    gap = abs(rating_gap)
    k_factor = thresholds[0].k_factor
    for threshold in thresholds:
        if gap >= threshold.min_gap:
            k_factor = threshold.k_factor
    return k_factor


def estimate_delta(
    subject_rating: float,
    opponent_rating: float,
    score: float,
    params: EloEstimatorParameters | None = None,
) -> float:
    """Estimated rating change for the subject, rounded to two decimals.

    ``score`` is 1 for a win, 0.5 for a draw and 0 for a loss.
    """
    if score not in VALID_SCORES:
        raise ValueError(f"score must be one of {VALID_SCORES}, got {score}")
    params = params or EloEstimatorParameters()

    k_factor = select_k_factor(subject_rating - opponent_rating, params.k_factor_thresholds)
    expected = calculate_expected_score(
        rating=subject_rating,
        opponent_rating=opponent_rating,
        scale_factor=params.scale_factor,
    )
    return round(k_factor * (score - expected), 2)


class EloEstimator:
    """Stateless estimator bound to one parameter set."""

    def __init__(self, params: EloEstimatorParameters | None = None) -> None:
        self.params = params or EloEstimatorParameters()

    def estimate(
        self,
        subject_rating: int | None,
        opponent_rating: int | None,
        outcome: Outcome,
    ) -> float:
        """Delta for a normalized outcome; 0.0 when either rating is unknown."""
        if subject_rating is None or opponent_rating is None:
            return 0.0
        return estimate_delta(subject_rating, opponent_rating, outcome.score, self.params)


__all__ = [
    "DEFAULT_K_FACTOR_THRESHOLDS",
    "EloEstimator",
    "EloEstimatorParameters",
    "KFactorThreshold",
    "calculate_expected_score",
    "estimate_delta",
    "select_k_factor",
]
