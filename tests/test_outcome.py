"""Tests for result-code classification."""

from __future__ import annotations

import pytest

from domain.outcome import (
    DEFAULT_LOSS_CODES,
    DEFAULT_WIN_CODES,
    OutcomeClassifier,
    classify_outcome,
)
from domain.protocol import Outcome


@pytest.mark.parametrize("code", DEFAULT_WIN_CODES)
def test_win_codes_classify_as_victory(code: str) -> None:
    assert classify_outcome(code) is Outcome.VICTORY


@pytest.mark.parametrize("code", DEFAULT_LOSS_CODES)
def test_loss_codes_classify_as_defeat(code: str) -> None:
    assert classify_outcome(code) is Outcome.DEFEAT


@pytest.mark.parametrize("code", [None, "", "0", "3", "99", "victory"])
def test_unknown_or_missing_codes_are_draws(code: str | None) -> None:
    assert classify_outcome(code) is Outcome.DRAW


def test_classification_is_idempotent_and_ignores_whitespace() -> None:
    assert classify_outcome(" 5 ") is Outcome.VICTORY
    assert [classify_outcome("2") for _ in range(3)] == [Outcome.DEFEAT] * 3


def test_custom_codes_replace_defaults() -> None:
    classifier = OutcomeClassifier.from_codes(["1"], ["4"])
    assert classifier.classify("1") is Outcome.VICTORY
    assert classifier.classify("4") is Outcome.DEFEAT
    assert classifier.classify("5") is Outcome.DRAW


def test_overlapping_codes_raise_error() -> None:
    with pytest.raises(ValueError, match="both win and loss"):
        OutcomeClassifier.from_codes(["4", "5"], ["5"])


def test_outcome_scores() -> None:
    assert Outcome.VICTORY.score == pytest.approx(1.0)
    assert Outcome.DRAW.score == pytest.approx(0.5)
    assert Outcome.DEFEAT.score == pytest.approx(0.0)
