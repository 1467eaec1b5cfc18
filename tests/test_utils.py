"""Tests for form value parsing helpers."""
from datetime import date

import pytest

from app.library.utils import MAX_ID, date_or_raw, parse_date, parse_id


def test_parse_id_accepts_plain_ascii_digits():
    assert parse_id("42") == 42
    assert parse_id(" 7 ") == 7
    assert parse_id(str(MAX_ID)) == MAX_ID


@pytest.mark.parametrize("raw", [None, "", "x", "²", "٣", "-1", "0", "1.5", str(MAX_ID + 1), "9" * 25])
def test_parse_id_rejects_non_keys(raw):
    assert parse_id(raw) is None


def test_parse_date_iso_and_timestamp():
    assert parse_date("1973-06-06") == date(1973, 6, 6)
    assert parse_date("2020-01-01T10:30:00") == date(2020, 1, 1)
    assert parse_date("  ") is None


@pytest.mark.parametrize("raw", ["2020-01-01Tgarbage", "31/12/2030", "yesterday", "2020-02-30"])
def test_parse_date_rejects_malformed(raw):
    with pytest.raises(ValueError):
        parse_date(raw)


def test_date_or_raw_keeps_unparsable_text():
    assert date_or_raw("2031-03-04") == date(2031, 3, 4)
    assert date_or_raw(" 31/12/2030 ") == "31/12/2030"
    assert date_or_raw("") is None
