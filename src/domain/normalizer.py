"""Turn raw match records into 1v1 / 2v2 replay entities."""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field, fields
from datetime import datetime
from enum import Enum

from domain.aliases import IdentityAliasMap
from domain.common import (
    CommonReplayData,
    EnemyRecord,
    ParticipantFields,
    RawMatchRecord,
    Replay,
    Replay1v1,
    Replay2v2,
    TeammateRecord,
    as_utc,
    parse_int,
)
from domain.divisions import DivisionResolver, MapResolver, same_alliance
from domain.outcome import OutcomeClassifier
from elo.estimator import EloEstimator

log = logging.getLogger(__name__)


class RejectReason(str, Enum):
    """Why a record was left out of the analysis set."""

    NO_SUBJECT = "no_subject"
    UNTRACKED_SUBJECT = "untracked_subject"
    BEFORE_START_DATE = "before_start_date"
    AFTER_END_DATE = "after_end_date"
    NO_OPPONENT = "no_opponent"
    SELF_OPPONENT = "self_opponent"
    TEAM_SPLIT = "team_split"
    UNSUPPORTED_PLAYER_COUNT = "unsupported_player_count"


@dataclass(frozen=True)
class NormalizeOptions:
    """Scope of one analysis run."""

    tracked_ids: frozenset[str] = field(default_factory=frozenset)
    start_date: datetime | None = None
    end_date: datetime | None = None


class ReplayNormalizer:
    """Stateful record normalizer.

    Each accepted participant sighting is counted into the alias map, so a
    single normalizer instance should see the records of one pass in order.
    """

    def __init__(
        self,
        *,
        divisions: DivisionResolver,
        maps: MapResolver,
        outcomes: OutcomeClassifier | None = None,
        elo: EloEstimator | None = None,
        alias_map: IdentityAliasMap | None = None,
        options: NormalizeOptions | None = None,
    ) -> None:
        self.divisions = divisions
        self.maps = maps
        self.outcomes = outcomes or OutcomeClassifier()
        self.elo = elo or EloEstimator()
        self.alias_map = alias_map if alias_map is not None else IdentityAliasMap()
        self.options = options or NormalizeOptions()
        self._start_date = None if self.options.start_date is None else as_utc(self.options.start_date)
        self._end_date = None if self.options.end_date is None else as_utc(self.options.end_date)
        self._players_seen: dict[str, str] = {}
        self._rejections: Counter[RejectReason] = Counter()

    def players_seen(self) -> dict[str, str]:
        """Distinct user id -> first display name observed by this normalizer."""
        return dict(self._players_seen)

    def rejections(self) -> dict[RejectReason, int]:
        return dict(self._rejections)

    def normalize(self, record: RawMatchRecord) -> Replay | None:
        subject = record.subject()
        if subject is None or not subject.user_id:
            return self._reject(record, RejectReason.NO_SUBJECT)

        tracked_ids = self.options.tracked_ids
        if tracked_ids and subject.user_id not in tracked_ids:
            return self._reject(record, RejectReason.UNTRACKED_SUBJECT)

        created_at = as_utc(record.created_at)
        if self._start_date is not None and created_at < self._start_date:
            return self._reject(record, RejectReason.BEFORE_START_DATE)
        if self._end_date is not None and created_at > self._end_date:
            return self._reject(record, RejectReason.AFTER_END_DATE)

        self._observe(subject)
        common = self._common_data(record, subject, created_at)

        if record.participant_count == 2:
            return self._normalize_1v1(record, subject, common)
        if record.participant_count == 4:
            return self._normalize_2v2(record, subject, common)
        return self._reject(record, RejectReason.UNSUPPORTED_PLAYER_COUNT)

    def _normalize_1v1(
        self,
        record: RawMatchRecord,
        subject: ParticipantFields,
        common: CommonReplayData,
    ) -> Replay1v1 | None:
        others = record.others()
        if len(others) != 1:
            return self._reject(record, RejectReason.NO_OPPONENT)
        _, opponent = others[0]
        if not opponent.user_id:
            return self._reject(record, RejectReason.NO_OPPONENT)
        if opponent.user_id == subject.user_id:
            return self._reject(record, RejectReason.SELF_OPPONENT)

        self._observe(opponent)

        rating = parse_int(subject.rating)
        opponent_rating = parse_int(opponent.rating)
        elo_change = self.elo.estimate(rating, opponent_rating, common.outcome)

        return Replay1v1(
            **_common_kwargs(common),
            opponent_id=opponent.user_id,
            opponent_name=opponent.name,
            opponent_division=self.divisions.resolve_division(opponent.deck_code),
            opponent_rank=opponent.rank,
            opponent_deck_code=opponent.deck_code,
            opponent_rating=opponent_rating,
            rating=rating,
            elo_change=elo_change,
        )

    def _normalize_2v2(
        self,
        record: RawMatchRecord,
        subject: ParticipantFields,
        common: CommonReplayData,
    ) -> Replay2v2 | None:
        subject_alliance = self.divisions.resolve_alliance(subject.deck_code)

        allies: list[ParticipantFields] = []
        enemies: list[ParticipantFields] = []
        for _, participant in record.others():
            alliance = self.divisions.resolve_alliance(participant.deck_code)
            if same_alliance(subject_alliance, alliance):
                allies.append(participant)
            else:
                enemies.append(participant)

        if len(allies) != 1 or len(enemies) != 2:
            return self._reject(record, RejectReason.TEAM_SPLIT)

        for participant in (*allies, *enemies):
            self._observe(participant)

        ally = allies[0]
        return Replay2v2(
            **_common_kwargs(common),
            ally=TeammateRecord(
                user_id=ally.user_id,
                name=ally.name,
                division=self.divisions.resolve_division(ally.deck_code),
                rank=ally.rank,
                deck_code=ally.deck_code,
            ),
            enemies=(self._enemy(enemies[0]), self._enemy(enemies[1])),
        )

    def _enemy(self, participant: ParticipantFields) -> EnemyRecord:
        return EnemyRecord(
            user_id=participant.user_id,
            name=participant.name,
            division=self.divisions.resolve_division(participant.deck_code),
            rank=participant.rank,
            deck_code=participant.deck_code,
        )

    def _common_data(
        self,
        record: RawMatchRecord,
        subject: ParticipantFields,
        created_at: datetime,
    ) -> CommonReplayData:
        duration = parse_int(record.duration)
        return CommonReplayData(
            created_at=created_at,
            file_name=record.file_name,
            file_path=record.file_path,
            session_id=record.session_id,
            user_id=subject.user_id,
            name=subject.name,
            rank=subject.rank,
            division=self.divisions.resolve_division(subject.deck_code),
            deck_code=subject.deck_code,
            duration=max(duration or 0, 0),
            map_name=self.maps.resolve(record.map_id),
            outcome=self.outcomes.classify(record.outcome_code),
        )

    def _observe(self, participant: ParticipantFields) -> None:
        if not participant.user_id:
            return
        self.alias_map.increment(participant.user_id, participant.name)
        if participant.name:
            self._players_seen.setdefault(participant.user_id, participant.name)

    def _reject(self, record: RawMatchRecord, reason: RejectReason) -> None:
        self._rejections[reason] += 1
        log.debug("Rejected %s: %s", record.file_name, reason.value)
        return None


def _common_kwargs(common: CommonReplayData) -> dict[str, object]:
    return {item.name: getattr(common, item.name) for item in fields(CommonReplayData)}


__all__ = [
    "NormalizeOptions",
    "RejectReason",
    "ReplayNormalizer",
]
