"""Fixed-width numeric buckets with one open-ended tail bucket."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from math import ceil, floor
from typing import Any

from domain.common import CommonReplayData, Replay1v1, parse_int
from domain.protocol import Outcome
from stats.common import AggregatedStat, require_replays


@dataclass(frozen=True)
class BucketSpec:
    """``limit // width`` closed buckets followed by ``"<limit>+"``.

    With ``closed_upper`` buckets are ``(lo, hi]`` and labelled ``1-50``,
    which suits ranks starting at 1. Otherwise they are ``[lo, hi)`` and
    labelled ``0-10m``.
    """

    width: int
    limit: int
    unit: str = ""
    closed_upper: bool = False

    @property
    def bucket_count(self) -> int:
        return self.limit // self.width

    def index_of(self, value: float) -> int | None:
        if self.closed_upper:
            if value < 1:
                return None
            index = ceil(value / self.width) - 1
        else:
            if value < 0:
                return None
            index = floor(value / self.width)
        return min(index, self.bucket_count)

    def label(self, index: int) -> str:
        if index >= self.bucket_count:
            tail = self.limit + 1 if self.closed_upper else self.limit
            return f"{tail}{self.unit}+"
        lower = index * self.width
        upper = lower + self.width
        if self.closed_upper:
            return f"{lower + 1}-{upper}{self.unit}"
        return f"{lower}-{upper}{self.unit}"

    def labels(self) -> list[str]:
        return [self.label(index) for index in range(self.bucket_count + 1)]

    def as_config_json(self) -> dict[str, Any]:
        return {"width": self.width, "limit": self.limit}


DEFAULT_RANK_BUCKETS = BucketSpec(width=50, limit=500, closed_upper=True)
DEFAULT_DURATION_BUCKETS = BucketSpec(width=10, limit=40, unit="m")


def bucketed_win_rates(
    values: Iterable[tuple[float | None, Outcome]],
    spec: BucketSpec,
) -> list[tuple[str, AggregatedStat]]:
    """Accumulate outcomes per bucket; populated buckets in ascending order."""
    stats: dict[int, AggregatedStat] = {}
    for value, outcome in values:
        if value is None:
            continue
        index = spec.index_of(value)
        if index is None:
            continue
        stats[index] = stats.get(index, AggregatedStat()).add(outcome)
    return [(spec.label(index), stats[index]) for index in sorted(stats)]


def win_rate_by_opponent_rank(
    replays: Iterable[Replay1v1] | None,
    spec: BucketSpec = DEFAULT_RANK_BUCKETS,
) -> list[tuple[str, AggregatedStat]]:
    rows = require_replays(replays)
    return bucketed_win_rates(
        ((_positive(parse_int(replay.opponent_rank)), replay.outcome) for replay in rows),
        spec,
    )


def win_rate_by_duration(
    replays: Iterable[CommonReplayData] | None,
    spec: BucketSpec = DEFAULT_DURATION_BUCKETS,
) -> list[tuple[str, AggregatedStat]]:
    rows = require_replays(replays)
    return bucketed_win_rates(
        ((replay.duration / 60.0, replay.outcome) for replay in rows),
        spec,
    )


def _positive(value: int | None) -> int | None:
    return value if value is not None and value > 0 else None


__all__ = [
    "DEFAULT_DURATION_BUCKETS",
    "DEFAULT_RANK_BUCKETS",
    "BucketSpec",
    "bucketed_win_rates",
    "win_rate_by_duration",
    "win_rate_by_opponent_rank",
]
