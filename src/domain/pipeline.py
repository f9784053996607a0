"""One ordered analysis pass over raw match records."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass

from domain.aliases import IdentityAliasMap
from domain.common import RawMatchRecord, Replay1v1, Replay2v2
from domain.normalizer import RejectReason, ReplayNormalizer
from stats.common import chronological


@dataclass(frozen=True)
class AnalysisSummary:
    """Accepted replays plus bookkeeping for one pass."""

    replays_1v1: list[Replay1v1]
    replays_2v2: list[Replay2v2]
    alias_map: IdentityAliasMap
    players_seen: dict[str, str]
    processed_records: int
    rejections: dict[RejectReason, int]

    @property
    def rejected_records(self) -> int:
        return sum(self.rejections.values())


def run_analysis_pass(
    records: Iterable[RawMatchRecord],
    *,
    normalizer: ReplayNormalizer,
    progress_every: int = 1_000,
    echo: Callable[[str], None] | None = None,
) -> AnalysisSummary:
    """Normalize every record in order and split the result by game mode."""
    if progress_every <= 0:
        raise ValueError("progress_every must be greater than 0")

    replays_1v1: list[Replay1v1] = []
    replays_2v2: list[Replay2v2] = []
    processed = 0

    for processed, record in enumerate(records, start=1):
        replay = normalizer.normalize(record)
        if isinstance(replay, Replay1v1):
            replays_1v1.append(replay)
        elif isinstance(replay, Replay2v2):
            replays_2v2.append(replay)

        if echo is not None and processed % progress_every == 0:
            echo(
                f"processed_records={processed} "
                f"accepted_1v1={len(replays_1v1)} "
                f"accepted_2v2={len(replays_2v2)}"
            )

    rejections = normalizer.rejections()
    if echo is not None:
        echo(
            "completed "
            f"processed_records={processed} "
            f"accepted_1v1={len(replays_1v1)} "
            f"accepted_2v2={len(replays_2v2)} "
            f"rejected={sum(rejections.values())} "
            f"players_seen={len(normalizer.players_seen())}"
        )

    return AnalysisSummary(
        replays_1v1=chronological(replays_1v1),
        replays_2v2=chronological(replays_2v2),
        alias_map=normalizer.alias_map,
        players_seen=normalizer.players_seen(),
        processed_records=processed,
        rejections=rejections,
    )


__all__ = ["AnalysisSummary", "run_analysis_pass"]
