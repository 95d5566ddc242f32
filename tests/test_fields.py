from __future__ import annotations

import math
from datetime import date, datetime

import pytest

from portal_tables.fields import (
    fold_text,
    get_field,
    normalize_status,
    parse_datetime,
    parse_day,
    parse_number,
    parse_timestamp,
)


def test_get_field_resolves_nested_paths_without_raising() -> None:
    record = {"client": {"name": "Acme", "owner": None}, "client.code": "flat"}

    assert get_field(record, "client.name") == "Acme"
    assert get_field(record, "client.code") == "flat"
    assert get_field(record, "client.owner.email") is None
    assert get_field(record, "missing.deep.path") is None
    assert get_field(record, "") is None
    assert get_field(None, "client") is None


def test_fold_text_is_case_and_accent_insensitive() -> None:
    assert fold_text("José PÉREZ") == "jose perez"
    assert fold_text(None) == ""
    assert fold_text(42) == "42"


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("In_Progress", "in-progress"),
        (" in-progress ", "in-progress"),
        ("ON_HOLD", "on-hold"),
        ("", None),
        (None, None),
    ],
)
def test_normalize_status(raw, expected) -> None:
    assert normalize_status(raw) == expected


def test_parse_datetime_accepts_iso_epoch_and_dates() -> None:
    assert parse_datetime("2024-01-31T23:59:59Z") == datetime(2024, 1, 31, 23, 59, 59)
    assert parse_datetime("2024-01-31T20:00:00-03:00") == datetime(2024, 1, 31, 23, 0, 0)
    assert parse_datetime(0) == datetime(1970, 1, 1)
    assert parse_datetime(date(2024, 2, 1)) == datetime(2024, 2, 1)
    assert parse_datetime("not a date") is None
    assert parse_datetime(True) is None


def test_parse_timestamp_uses_negative_infinity_for_missing() -> None:
    assert parse_timestamp(None) == -math.inf
    assert parse_timestamp("garbage") == -math.inf
    assert parse_timestamp("1970-01-01T00:00:10Z") == 10.0


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("$5,000", 5000.0),
        ("-12.5 USD", -12.5),
        (7, 7.0),
        ("n/a", -math.inf),
        (None, -math.inf),
        (False, -math.inf),
    ],
)
def test_parse_number_is_permissive(raw, expected) -> None:
    assert parse_number(raw) == expected


def test_parse_day() -> None:
    assert parse_day("2024-01-31") == date(2024, 1, 31)
    assert parse_day("31/01/2024") is None
    assert parse_day(None) is None
