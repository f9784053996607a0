"""Shared types for raw match records and normalized replays."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from math import isfinite

from domain.protocol import Outcome

UNKNOWN = "Unknown"


def as_utc(value: datetime) -> datetime:
    """Return an aware UTC datetime; naive values are taken to be UTC already."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def parse_int(value: object) -> int | None:
    """Parse an integer out of a raw field, truncating decimals toward zero.

    Returns None when the value is absent, non-numeric or not finite.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if isfinite(value) else None
    text = str(value).strip()
    if not text:
        return None
    try:
        return int(text)
    except ValueError:
        pass
    try:
        number = float(text)
    except ValueError:
        return None
    return int(number) if isfinite(number) else None


@dataclass(frozen=True)
class ParticipantFields:
    """Raw per-participant fields of one match record."""

    user_id: str
    name: str = ""
    rank: str = ""
    deck_code: str = ""
    rating: str | None = None


@dataclass(frozen=True)
class RawMatchRecord:
    """One match record as produced by the game client, keyed by participant key."""

    created_at: datetime
    file_name: str
    participant_count: int
    subject_key: str | None
    participants: Mapping[str, ParticipantFields]
    file_path: str = ""
    session_id: str | None = None
    subject_user_id: str | None = None
    map_id: str = ""
    duration: str | None = None
    outcome_code: str | None = None

    def subject(self) -> ParticipantFields | None:
        if not self.subject_key:
            return None
        return self.participants.get(self.subject_key)

    def others(self) -> list[tuple[str, ParticipantFields]]:
        """Participants other than the subject, in key order."""
        return [
            (key, participant)
            for key, participant in sorted(self.participants.items())
            if key != self.subject_key
        ]


@dataclass(frozen=True)
class CommonReplayData:
    """Fields shared by every normalized replay."""

    created_at: datetime
    file_name: str
    file_path: str
    session_id: str | None
    user_id: str
    name: str
    rank: str
    division: str
    deck_code: str
    duration: int
    map_name: str
    outcome: Outcome

    @property
    def is_victory(self) -> bool:
        return self.outcome is Outcome.VICTORY


@dataclass(frozen=True, kw_only=True)
class Replay1v1(CommonReplayData):
    """A normalized one-versus-one replay."""

    opponent_id: str
    opponent_name: str
    opponent_division: str
    opponent_rank: str
    opponent_deck_code: str
    opponent_rating: int | None = None
    rating: int | None = None
    elo_change: float = 0.0

    def __post_init__(self) -> None:
        if self.opponent_id == self.user_id:
            raise ValueError(
                f"file={self.file_name} has identical subject and opponent ({self.user_id})"
            )


@dataclass(frozen=True)
class TeammateRecord:
    """The subject's partner in a two-versus-two replay."""

    user_id: str
    name: str
    division: str
    rank: str
    deck_code: str


@dataclass(frozen=True)
class EnemyRecord:
    """One member of the opposing pair in a two-versus-two replay."""

    user_id: str
    name: str
    division: str
    rank: str
    deck_code: str


@dataclass(frozen=True, kw_only=True)
class Replay2v2(CommonReplayData):
    """A normalized two-versus-two replay."""

    ally: TeammateRecord
    enemies: tuple[EnemyRecord, EnemyRecord]

    def __post_init__(self) -> None:
        if len(self.enemies) != 2:
            raise ValueError(
                f"file={self.file_name} must have exactly 2 enemies, got {len(self.enemies)}"
            )


@dataclass(frozen=True)
class RemoteIdentity:
    """Identity observation returned by a remote lookup service."""

    user_id: str
    usernames: tuple[str, ...] = ()
    ranks: tuple[str, ...] = ()


Replay = Replay1v1 | Replay2v2


__all__ = [
    "UNKNOWN",
    "CommonReplayData",
    "EnemyRecord",
    "ParticipantFields",
    "RawMatchRecord",
    "RemoteIdentity",
    "Replay",
    "Replay1v1",
    "Replay2v2",
    "TeammateRecord",
    "as_utc",
    "parse_int",
]
