from __future__ import annotations

import re
from datetime import date, datetime

_ASCII_ALNUM = re.compile(r"^[0-9A-Za-z]+$")
_ASCII_DIGITS = re.compile(r"^[0-9]+$")

# Primary keys are 32-bit INTEGER columns on Postgres.
MAX_ID = 2**31 - 1


def clean(value: str | None) -> str:
    """Trim a raw form value; missing fields become ''."""
    return (value or "").strip()


def is_alphanumeric(value: str) -> bool:
    return bool(_ASCII_ALNUM.match(value))


def parse_date(s: str | None) -> date | None:
    """Parse an ISO-8601 date (YYYY-MM-DD). Blank input is None; bad input raises ValueError."""
    s = clean(s)
    if not s:
        return None
    if "T" in s:
        # full timestamp; only the calendar date is stored
        return datetime.fromisoformat(s).date()
    return date.fromisoformat(s)


def format_date_med(value: date | None) -> str:
    """Medium date format, e.g. 'Jun 6, 1973'. None renders as ''."""
    if value is None:
        return ""
    return f"{value:%b} {value.day}, {value.year}"


def parse_id(raw: str | None) -> int | None:
    """Form/query id to int. Anything that cannot be a stored primary key is None."""
    raw = clean(raw)
    if not _ASCII_DIGITS.match(raw):
        return None
    return valid_id(int(raw))


def valid_id(value: int) -> int | None:
    return value if 0 < value <= MAX_ID else None


def date_or_raw(s: str | None) -> date | str | None:
    """Parsed date for re-rendering a form, or the submitted text when it does not parse."""
    try:
        return parse_date(s)
    except ValueError:
        return clean(s)
