"""Division, alliance and map name resolution over injected reference tables."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from types import MappingProxyType

from domain.common import UNKNOWN
from domain.protocol import DeckDecoder, DivisionId

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class DivisionInfo:
    """One row of the static division table."""

    id: DivisionId
    name: str
    alliance: str


class DivisionResolver:
    """Resolve deck codes to division names and alliance tags.

    Decoding is delegated to an external decoder. Any failure along the way
    (empty code, decoder error, id missing from the table) resolves to
    ``"Unknown"`` instead of raising.
    """

    def __init__(
        self,
        divisions: Iterable[DivisionInfo],
        decoder: DeckDecoder | None = None,
    ) -> None:
        self._divisions: Mapping[str, DivisionInfo] = MappingProxyType(
            {str(division.id): division for division in divisions}
        )
        self._decoder = decoder

    @property
    def division_count(self) -> int:
        return len(self._divisions)

    def lookup(self, deck_code: str | None) -> DivisionInfo | None:
        if not deck_code or self._decoder is None:
            return None
        try:
            division_id = self._decoder(deck_code)
        except Exception as exc:  # external decoder, any failure means "unknown"
            log.debug("Failed to decode deck code %r: %s", deck_code, exc)
            return None
        if division_id is None:
            return None
        return self._divisions.get(str(division_id))

    def resolve_division(self, deck_code: str | None) -> str:
        division = self.lookup(deck_code)
        if division is None or not division.name:
            return UNKNOWN
        return division.name

    def resolve_alliance(self, deck_code: str | None) -> str:
        division = self.lookup(deck_code)
        if division is None or not division.alliance:
            return UNKNOWN
        return division.alliance


def same_alliance(first: str, second: str) -> bool:
    """Alliance equality where an unknown tag never matches, not even another unknown."""
    if first == UNKNOWN or second == UNKNOWN:
        return False
    return first == second


class MapResolver:
    """Resolve raw map identifiers to display names, echoing unknown ids."""

    def __init__(self, map_names: Mapping[str, str]) -> None:
        self._map_names: Mapping[str, str] = MappingProxyType(dict(map_names))

    def resolve(self, map_id: str | None) -> str:
        if not map_id:
            return UNKNOWN
        return self._map_names.get(map_id) or map_id


__all__ = [
    "DivisionInfo",
    "DivisionResolver",
    "MapResolver",
    "same_alliance",
]
