#!/usr/bin/env python3
"""Analyze cached replay records: summaries, opponents, daily recap and CSV export."""

from __future__ import annotations

import importlib
import json
import sys
from pathlib import Path
from typing import Annotated

import typer

ROOT_DIR = Path(__file__).resolve().parents[1]
SRC_DIR = ROOT_DIR / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from domain.aliases import IdentityAliasMap
from domain.common import RemoteIdentity
from domain.normalizer import ReplayNormalizer
from domain.pipeline import AnalysisSummary, run_analysis_pass
from domain.protocol import DeckDecoder, GameMode
from domain.settings import AnalysisSettings, default_settings, load_settings
from elo.estimator import EloEstimator
from repositories.export import write_replays_1v1_csv, write_replays_2v2_csv
from repositories.reference_repository import empty_reference_tables, load_reference_tables
from repositories.replay_repository import load_records
from stats.breakdowns import Breakdown
from stats.players import group_by_enemy_team, group_by_opponent, search_enemy_teams, search_opponents
from stats.report import build_statistics_1v1, build_statistics_2v2
from stats.summary import daily_recap, recap_day

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="Replay analysis commands.",
)

DirectoriesArgument = Annotated[
    list[Path],
    typer.Argument(help="Directories holding cached replay records (*.json)."),
]
SettingsOption = Annotated[
    Path | None,
    typer.Option("--settings", help="Optional settings TOML file."),
]
ReferenceDirOption = Annotated[
    Path | None,
    typer.Option("--reference-dir", help="Directory with maps.json and divisions.json."),
]
DeckDecoderOption = Annotated[
    str | None,
    typer.Option(
        "--deck-decoder",
        help="Importable deck decoder as 'module:function'. Without one, divisions are Unknown.",
    ),
]


def _load_settings(settings_path: Path | None) -> AnalysisSettings:
    if settings_path is None:
        return default_settings()
    try:
        return load_settings(settings_path)
    except (FileNotFoundError, IsADirectoryError, ValueError) as exc:
        raise typer.BadParameter(str(exc), param_hint="--settings") from exc


def _import_decoder(target: str | None) -> DeckDecoder | None:
    if target is None:
        return None
    module_name, _, attribute = target.partition(":")
    if not module_name or not attribute:
        raise typer.BadParameter("expected 'module:function'", param_hint="--deck-decoder")
    try:
        decoder = getattr(importlib.import_module(module_name), attribute)
    except (ImportError, AttributeError) as exc:
        raise typer.BadParameter(f"cannot import {target}: {exc}", param_hint="--deck-decoder") from exc
    if not callable(decoder):
        raise typer.BadParameter(f"{target} is not callable", param_hint="--deck-decoder")
    return decoder


def run_pass(
    *,
    directories: list[Path],
    settings: AnalysisSettings,
    reference_dir: Path | None,
    deck_decoder: str | None,
) -> AnalysisSummary:
    """Load records and run one analysis pass under ``settings``."""
    try:
        tables = empty_reference_tables() if reference_dir is None else load_reference_tables(reference_dir)
    except (NotADirectoryError, ValueError) as exc:
        raise typer.BadParameter(str(exc), param_hint="--reference-dir") from exc
    try:
        records = load_records(directories)
    except NotADirectoryError as exc:
        raise typer.BadParameter(str(exc), param_hint="directories") from exc

    normalizer = ReplayNormalizer(
        divisions=tables.division_resolver(_import_decoder(deck_decoder)),
        maps=tables.map_resolver(),
        outcomes=settings.outcomes,
        elo=EloEstimator(settings.elo),
        alias_map=IdentityAliasMap(),
        options=settings.normalize_options(),
    )
    typer.echo(
        f"loaded_records={len(records)} "
        f"divisions={len(tables.divisions)} "
        f"maps={len(tables.maps)} "
        f"tracked_ids={len(settings.tracked_ids)}"
    )
    return run_analysis_pass(records, normalizer=normalizer, echo=typer.echo)


def _render_breakdown(title: str, rows: Breakdown, limit: int) -> None:
    typer.echo(f"{title}:")
    if not rows:
        typer.echo("  (none)")
        return
    for key, stat in rows[:limit]:
        typer.echo(
            f"  {str(key):<32} games={stat.games:4d} wins={stat.victories:4d} "
            f"win_rate={stat.win_rate:6.2f} weighted={stat.weighted_score:6.2f}"
        )


@app.command()
def summary(
    directories: DirectoriesArgument,
    settings_path: SettingsOption = None,
    reference_dir: ReferenceDirOption = None,
    deck_decoder: DeckDecoderOption = None,
    game_mode: Annotated[
        GameMode | None,
        typer.Option("--game-mode", help="Game mode to summarize. Defaults to the settings value."),
    ] = None,
    top_n: Annotated[
        int,
        typer.Option("--top-n", help="Rows to print per breakdown."),
    ] = 10,
) -> None:
    """Print totals, streaks and win-rate breakdowns for one game mode."""
    if top_n <= 0:
        raise typer.BadParameter("--top-n must be greater than 0")

    settings = _load_settings(settings_path)
    result = run_pass(
        directories=directories,
        settings=settings,
        reference_dir=reference_dir,
        deck_decoder=deck_decoder,
    )
    mode = game_mode or settings.game_mode

    if mode is GameMode.ONE_V_ONE:
        stats_1v1 = build_statistics_1v1(
            result.replays_1v1,
            rank_buckets=settings.rank_buckets,
            duration_buckets=settings.duration_buckets,
        )
        common = stats_1v1
    else:
        stats_2v2 = build_statistics_2v2(
            result.replays_2v2,
            duration_buckets=settings.duration_buckets,
        )
        common = stats_2v2

    totals = common.totals
    typer.echo(
        f"game_mode={mode.value} games={totals.games} wins={totals.wins} "
        f"losses={totals.losses} draws={totals.draws} win_rate={totals.win_rate:.2f} "
        f"longest_win_streak={common.streaks.longest_win_streak} "
        f"longest_loss_streak={common.streaks.longest_loss_streak} "
        f"average_duration={common.average_duration:.0f}s"
    )
    _render_breakdown("divisions", common.division_win_rates, top_n)
    _render_breakdown("maps", common.map_win_rates, top_n)
    _render_breakdown("duration", common.duration_win_rates, top_n)
    if common.rank_history:
        latest = common.rank_history[-1]
        typer.echo(f"latest_rank={latest.rank} at={latest.created_at.isoformat()}")

    if mode is GameMode.ONE_V_ONE:
        typer.echo(f"estimated_elo_change={stats_1v1.elo_change:+.2f}")
        _render_breakdown("opponent divisions", stats_1v1.opponent_division_win_rates, top_n)
        _render_breakdown("opponent rank", stats_1v1.opponent_rank_win_rates, top_n)
    else:
        alias_map = result.alias_map
        ally_rows = [(alias_map.common_name_of(key), stat) for key, stat in stats_2v2.ally_win_rates]
        enemy_rows = [
            (f"{alias_map.common_name_of(key.first)} & {alias_map.common_name_of(key.second)}", stat)
            for key, stat in stats_2v2.enemy_team_win_rates
        ]
        _render_breakdown("allies", ally_rows, top_n)
        _render_breakdown("ally divisions", stats_2v2.ally_division_win_rates, top_n)
        _render_breakdown("enemy teams", enemy_rows, top_n)
        _render_breakdown("enemy team divisions", stats_2v2.enemy_team_division_win_rates, top_n)


@app.command()
def players(
    directories: DirectoriesArgument,
    query: Annotated[
        str,
        typer.Option("--query", help="Match any known display name, Cyrillic look-alikes included."),
    ] = "",
    identities: Annotated[
        Path | None,
        typer.Option(
            "--identities",
            help="JSON list of {userId, usernames, ranks} from a remote lookup, merged as observations.",
        ),
    ] = None,
    settings_path: SettingsOption = None,
    reference_dir: ReferenceDirOption = None,
    deck_decoder: DeckDecoderOption = None,
    top_n: Annotated[
        int,
        typer.Option("--top-n", help="Number of opponents or teams to print."),
    ] = 20,
) -> None:
    """List opponents (1v1) and enemy teams (2v2), most played first."""
    if top_n <= 0:
        raise typer.BadParameter("--top-n must be greater than 0")

    settings = _load_settings(settings_path)
    result = run_pass(
        directories=directories,
        settings=settings,
        reference_dir=reference_dir,
        deck_decoder=deck_decoder,
    )
    alias_map = result.alias_map
    if identities is not None:
        if settings.sharing_disabled:
            typer.echo("sharing disabled in settings; ignoring --identities")
        else:
            alias_map.observe_remote(_read_identities(identities))

    opponents = search_opponents(group_by_opponent(result.replays_1v1), alias_map, query)
    typer.echo(f"opponents={len(opponents)} query={query!r}")
    for index, opponent in enumerate(opponents[:top_n], start=1):
        names = ", ".join(alias_map.names_of(opponent.user_id)[1:4])
        typer.echo(
            f"{index:2d}. {alias_map.common_name_of(opponent.user_id):<24} id={opponent.user_id} "
            f"games={opponent.stat.games:3d} win_rate={opponent.stat.win_rate:6.2f} "
            f"last_played={opponent.last_played.created_at:%Y-%m-%d}"
            + (f" aka={names}" if names else "")
        )

    teams = search_enemy_teams(group_by_enemy_team(result.replays_2v2), alias_map, query)
    typer.echo(f"enemy_teams={len(teams)}")
    for index, team in enumerate(teams[:top_n], start=1):
        typer.echo(
            f"{index:2d}. {alias_map.common_name_of(team.key.first)} & "
            f"{alias_map.common_name_of(team.key.second)} "
            f"games={team.stat.games:3d} win_rate={team.stat.win_rate:6.2f}"
        )


@app.command()
def recap(
    directories: DirectoriesArgument,
    day: Annotated[
        str | None,
        typer.Option("--day", help="Calendar day as YYYY-MM-DD (UTC). Defaults to the current UTC date."),
    ] = None,
    settings_path: SettingsOption = None,
    reference_dir: ReferenceDirOption = None,
    deck_decoder: DeckDecoderOption = None,
) -> None:
    """Print the 1v1 and 2v2 recap for one day."""
    try:
        target_day = recap_day(day)
    except ValueError as exc:
        raise typer.BadParameter("--day must be YYYY-MM-DD") from exc

    settings = _load_settings(settings_path)
    result = run_pass(
        directories=directories,
        settings=settings,
        reference_dir=reference_dir,
        deck_decoder=deck_decoder,
    )
    for mode, replays in ((GameMode.ONE_V_ONE, result.replays_1v1), (GameMode.TWO_V_TWO, result.replays_2v2)):
        daily = daily_recap(replays, target_day)
        typer.echo(
            f"day={daily.day.isoformat()} game_mode={mode.value} games={daily.games_played} "
            f"wins={daily.wins} losses={daily.losses} draws={daily.draws} "
            f"win_rate={daily.win_rate}% time_spent={daily.time_spent // 60}m "
            f"elo_change={daily.elo_change:+.2f}"
        )


@app.command()
def export(
    directories: DirectoriesArgument,
    output_dir: Annotated[
        Path,
        typer.Option("--output-dir", help="Directory for replays_1v1.csv and replays_2v2.csv."),
    ] = Path("."),
    settings_path: SettingsOption = None,
    reference_dir: ReferenceDirOption = None,
    deck_decoder: DeckDecoderOption = None,
) -> None:
    """Write accepted replays to CSV, newest first."""
    settings = _load_settings(settings_path)
    result = run_pass(
        directories=directories,
        settings=settings,
        reference_dir=reference_dir,
        deck_decoder=deck_decoder,
    )
    rows_1v1 = write_replays_1v1_csv(result.replays_1v1, output_dir / "replays_1v1.csv")
    rows_2v2 = write_replays_2v2_csv(result.replays_2v2, output_dir / "replays_2v2.csv")
    typer.echo(f"exported rows_1v1={rows_1v1} rows_2v2={rows_2v2} output_dir={output_dir}")


def _read_identities(file_path: Path) -> list[RemoteIdentity]:
    try:
        raw = json.loads(file_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise typer.BadParameter(f"cannot read {file_path}: {exc}", param_hint="--identities") from exc
    if not isinstance(raw, list):
        raise typer.BadParameter(f"{file_path} must hold a JSON list", param_hint="--identities")
    return [
        RemoteIdentity(
            user_id=str(entry.get("userId", "")),
            usernames=tuple(str(name) for name in entry.get("usernames") or ()),
            ranks=tuple(str(rank) for rank in entry.get("ranks") or ()),
        )
        for entry in raw
        if isinstance(entry, dict) and entry.get("userId")
    ]


if __name__ == "__main__":
    app()
