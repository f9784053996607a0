"""Frequency-weighted display-name aliases per participant id."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence

from domain.common import UNKNOWN, RemoteIdentity

# Lossy look-alike tables, one entry per script. Add scripts as new entries.
TRANSLITERATION_TABLES: dict[str, dict[str, str]] = {
    "cyrillic": {
        "а": "a",
        "б": "b",
        "в": "b",
        "г": "r",
        "д": "a",
        "е": "e",
        "ё": "e",
        "ж": "x",
        "з": "3",
        "и": "n",
        "й": "n",
        "к": "k",
        "л": "n",
        "м": "m",
        "н": "h",
        "о": "o",
        "п": "n",
        "р": "p",
        "с": "c",
        "т": "t",
        "у": "y",
        "ф": "o",
        "х": "x",
        "ц": "u",
        "ч": "y",
        "ш": "w",
        "щ": "w",
        "ы": "b",
        "э": "e",
        "ю": "o",
        "я": "r",
    },
    "greek": {
        "α": "a",
        "β": "b",
        "ε": "e",
        "η": "n",
        "ι": "i",
        "κ": "k",
        "ν": "v",
        "ο": "o",
        "ρ": "p",
        "τ": "t",
        "υ": "u",
        "χ": "x",
        "ω": "w",
    },
}

DEFAULT_SCRIPTS: tuple[str, ...] = ("cyrillic",)


def build_transliteration(scripts: Sequence[str] = DEFAULT_SCRIPTS) -> dict[int, str]:
    table: dict[int, str] = {}
    for script in scripts:
        try:
            mapping = TRANSLITERATION_TABLES[script]
        except KeyError as exc:
            available = ", ".join(sorted(TRANSLITERATION_TABLES))
            raise ValueError(f"Unknown script '{script}'. Choose from: {available}.") from exc
        table.update({ord(char): latin for char, latin in mapping.items()})
    return table


_DEFAULT_TABLE = build_transliteration()


def transliterate(text: str, table: Mapping[int, str] | None = None) -> str:
    """Replace non-Latin characters with their Latin look-alikes."""
    return text.translate(_DEFAULT_TABLE if table is None else table)


def normalize_query(text: str, table: Mapping[int, str] | None = None) -> str:
    """Case-fold then transliterate, the form ``IdentityAliasMap.matches`` expects."""
    return transliterate(text.casefold(), table)


class IdentityAliasMap:
    """Per-id multiset of display names.

    Counts only ever grow. ``common_name_of`` picks the most frequent name;
    ties go to the name seen first for that id.
    """

    def __init__(self, scripts: Sequence[str] = DEFAULT_SCRIPTS) -> None:
        self._names: dict[str, dict[str, int]] = {}
        self._table = build_transliteration(scripts)

    def __contains__(self, user_id: object) -> bool:
        return user_id in self._names

    def __len__(self) -> int:
        return len(self._names)

    def increment(self, user_id: str, name: str) -> None:
        if not name:
            return
        counts = self._names.setdefault(user_id, {})
        counts[name] = counts.get(name, 0) + 1

    def counts_of(self, user_id: str) -> dict[str, int]:
        """Snapshot of name counts for one id, in first-seen order."""
        return dict(self._names.get(user_id, {}))

    def names_of(self, user_id: str) -> list[str]:
        counts = self._names.get(user_id, {})
        # sorted() is stable, so equal counts keep first-seen order.
        return [name for name, _ in sorted(counts.items(), key=lambda item: -item[1])]

    def common_name_of(self, user_id: str) -> str:
        names = self.names_of(user_id)
        return names[0] if names else UNKNOWN

    def matches(self, user_id: str, normalized_query: str) -> bool:
        return any(
            normalized_query in transliterate(name.casefold(), self._table)
            for name in self._names.get(user_id, {})
        )

    def normalize(self, text: str) -> str:
        """Normalize a raw query with this map's transliteration scripts."""
        return normalize_query(text, self._table)

    def search(self, query: str) -> list[str]:
        """Ids with any known name matching a raw (not yet normalized) query."""
        normalized = self.normalize(query)
        return [user_id for user_id in self._names if self.matches(user_id, normalized)]

    def known_ids(self) -> list[str]:
        return list(self._names)

    def observe_remote(self, identities: Iterable[RemoteIdentity]) -> None:
        """Fold remote lookups in as ordinary observations."""
        for identity in identities:
            for username in identity.usernames:
                self.increment(identity.user_id, username)

    def merge(self, other: IdentityAliasMap) -> None:
        """Add another map's counts into this one.

        Names already known here keep their position; names new to an id are
        appended in the other map's first-seen order.
        """
        for user_id, counts in other._names.items():
            target = self._names.setdefault(user_id, {})
            for name, count in counts.items():
                target[name] = target.get(name, 0) + count


__all__ = [
    "DEFAULT_SCRIPTS",
    "TRANSLITERATION_TABLES",
    "IdentityAliasMap",
    "build_transliteration",
    "normalize_query",
    "transliterate",
]
