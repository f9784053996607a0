"""Tests for TOML-based analysis settings loading."""

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

import pytest

from domain.protocol import GameMode, Outcome
from domain.settings import default_settings, load_settings
from elo.estimator import DEFAULT_K_FACTOR_THRESHOLDS


def test_load_full_settings_file(tmp_path: Path) -> None:
    config_path = tmp_path / "settings.toml"
    config_path.write_text(
        """
[analysis]
tracked_ids = ["42", 43]
start_date = 2024-03-01
end_date = "2024-06-30T23:59:59+02:00"
sharing_disabled = true
game_mode = "2v2"

[outcome]
win_codes = ["4", "5"]
loss_codes = ["2", "3"]

[elo]
scale_factor = 420.0

[[elo.k_factors]]
min_gap = 0
k = 20

[[elo.k_factors]]
min_gap = 50
k = 30

[buckets]
rank_width = 100
rank_limit = 1000
duration_width_minutes = 15
duration_limit_minutes = 45
""".strip()
    )

    settings = load_settings(config_path)

    assert settings.file_path == config_path
    assert settings.tracked_ids == frozenset({"42", "43"})
    assert settings.start_date == datetime(2024, 3, 1, tzinfo=UTC)
    assert settings.end_date == datetime(2024, 6, 30, 21, 59, 59, tzinfo=UTC)
    assert settings.sharing_disabled is True
    assert settings.game_mode is GameMode.TWO_V_TWO
    assert settings.outcomes.classify("3") is Outcome.DEFEAT
    assert settings.outcomes.classify("6") is Outcome.DRAW
    assert settings.elo.scale_factor == pytest.approx(420.0)
    assert [threshold.k_factor for threshold in settings.elo.k_factor_thresholds] == [20.0, 30.0]
    assert settings.rank_buckets.width == 100
    assert settings.rank_buckets.closed_upper is True
    assert settings.duration_buckets.label(3) == "45m+"

    options = settings.normalize_options()
    assert options.tracked_ids == settings.tracked_ids
    assert options.start_date == settings.start_date

    exported = settings.as_config_json()
    assert exported["tracked_ids"] == ["42", "43"]
    assert exported["elo"]["k_factors"][1] == {"min_gap": 50.0, "k": 30.0}


def test_empty_file_gives_defaults(tmp_path: Path) -> None:
    config_path = tmp_path / "settings.toml"
    config_path.write_text("")

    settings = load_settings(config_path)
    defaults = default_settings()

    assert settings.tracked_ids == frozenset()
    assert settings.start_date is None
    assert settings.game_mode is GameMode.ONE_V_ONE
    assert settings.elo.k_factor_thresholds == DEFAULT_K_FACTOR_THRESHOLDS
    assert settings.rank_buckets == defaults.rank_buckets
    assert settings.duration_buckets == defaults.duration_buckets


def test_missing_file_raises_error(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_settings(tmp_path / "missing.toml")


def test_directory_path_raises_error(tmp_path: Path) -> None:
    with pytest.raises(IsADirectoryError):
        load_settings(tmp_path)


@pytest.mark.parametrize(
    ("body", "message"),
    [
        ("[analysis\n", "invalid TOML"),
        ('[analysis]\ntracked_ids = "42"', "tracked_ids must be a list"),
        ('[analysis]\nstart_date = "yesterday"', "not an ISO-8601 date"),
        ("[analysis]\nstart_date = 2024-05-01\nend_date = 2024-04-01", "end_date must not be before"),
        ('[analysis]\ngame_mode = "3v3"', "game_mode must be one of"),
        ('[outcome]\nwin_codes = ["4"]\nloss_codes = ["4"]', "both win and loss"),
        ("[elo]\nscale_factor = 0", "scale_factor must be > 0"),
        ("[[elo.k_factors]]\nmin_gap = 10\nk = 20", "must start at min_gap = 0"),
        (
            "[[elo.k_factors]]\nmin_gap = 0\nk = 20\n[[elo.k_factors]]\nmin_gap = 0\nk = 25",
            "must be ascending",
        ),
        ("[[elo.k_factors]]\nmin_gap = 0\nk = -1", "k must be > 0"),
        ("[[elo.k_factors]]\nmin_gap = 0", "needs a k value"),
        ("[buckets]\nrank_width = 0", "width must be > 0"),
        ("[buckets]\nduration_width_minutes = 15", "multiple of the width"),
    ],
)
def test_invalid_settings_raise_value_error(tmp_path: Path, body: str, message: str) -> None:
    config_path = tmp_path / "settings.toml"
    config_path.write_text(body)

    with pytest.raises(ValueError, match=message):
        load_settings(config_path)


@pytest.mark.parametrize(
    ("body", "message"),
    [
        ("analysis = 3", r"\[analysis\] must be a table"),
        ('buckets = "wide"', r"\[buckets\] must be a table"),
        ('[analysis]\nsharing_disabled = "false"', r"\[analysis\].sharing_disabled must be true or false"),
        ("[analysis]\ngame_mode = 2", "game_mode must be one of"),
        ('[outcome]\nwin_codes = "4"', r"\[outcome\].win_codes must be a list"),
        ('[buckets]\nrank_width = "wide"', r"\[buckets\].rank_width must be an integer"),
        ("[buckets]\nrank_limit = 500.5", r"\[buckets\].rank_limit must be an integer"),
        ("[buckets]\nduration_limit_minutes = true", r"\[buckets\].duration_limit_minutes must be an integer"),
        ('[elo]\nscale_factor = "big"', r"\[elo\].scale_factor must be a number"),
        ('[[elo.k_factors]]\nmin_gap = 0\nk = "high"', r"\[\[elo.k_factors\]\].k must be a number"),
        ('[[elo.k_factors]]\nmin_gap = "none"\nk = 20', r"\[\[elo.k_factors\]\].min_gap must be a number"),
    ],
)
def test_wrongly_typed_values_name_the_file(tmp_path: Path, body: str, message: str) -> None:
    config_path = tmp_path / "settings.toml"
    config_path.write_text(body)

    with pytest.raises(ValueError, match=message) as exc_info:
        load_settings(config_path)
    assert str(exc_info.value).startswith(str(config_path))


def test_sharing_disabled_false_is_kept(tmp_path: Path) -> None:
    config_path = tmp_path / "settings.toml"
    config_path.write_text("[analysis]\nsharing_disabled = false")

    assert load_settings(config_path).sharing_disabled is False
