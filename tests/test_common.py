"""Tests for raw-field helpers and record types."""

from __future__ import annotations

from dataclasses import fields

import pytest

from domain.common import ParticipantFields, parse_int


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("1260", 1260),
        (" 1260 ", 1260),
        ("1260.5", 1260),
        ("-30.9", -30),
        (1480.7, 1480),
        (42, 42),
        ("", None),
        (None, None),
        (True, None),
        ("abc", None),
        ("nan", None),
        ("inf", None),
        (float("inf"), None),
    ],
)
def test_parse_int_truncates_decimals(value: object, expected: int | None) -> None:
    assert parse_int(value) == expected


def test_participant_fields_carry_only_used_raw_fields() -> None:
    assert [item.name for item in fields(ParticipantFields)] == [
        "user_id",
        "name",
        "rank",
        "deck_code",
        "rating",
    ]
