"""
Lenient parsing of the date and amount columns found in flat files.

Both parsers are total: a value that cannot be parsed is replaced by a
documented default instead of failing the record.
"""
from __future__ import annotations

import re
from datetime import date, datetime, time

DATE_FORMAT = "%Y-%m-%d"

# Placeholder for dates that could not be read. Downstream code tells real
# dates from missing ones by comparing against this value.
SENTINEL_DATE = date(1900, 1, 1)

DEFAULT_AMOUNT = 0.0

_NON_DATE_CHARS = re.compile(r"[^\d-]+")
_AMOUNT = re.compile(
    r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|[+-]?(?:inf|infinity|nan)",
    re.IGNORECASE,
)


def clean_date_text(text: str | None) -> str:
    """
    Remove every character that is not a digit or a dash.

    "2021-05-03 " becomes "2021-05-03", but "2021/05/03!!" becomes
    "20210503", which no longer matches DATE_FORMAT.
    """
    if text is None:
        return ""
    return _NON_DATE_CHARS.sub("", text)


def parse_date(
    text: str | None,
    fmt: str = DATE_FORMAT,
    default: date = SENTINEL_DATE,
) -> date:
    """
    Clean a loosely formatted date and parse it.

    Args:
        text: Raw date text
        fmt: Expected strptime format after cleaning
        default: Value returned when parsing fails

    Returns:
        The parsed date, or `default`
    """
    cleaned = clean_date_text(text)
    try:
        return datetime.strptime(cleaned, fmt).date()
    except ValueError:
        return default


def parse_amount(text: str | None, default: float = DEFAULT_AMOUNT) -> float:
    """
    Parse a decimal amount, falling back to `default`.

    Only plain decimals are accepted ("12", "-1.5", ".5", "1e3", "inf");
    surrounding whitespace, digit separators and thousands commas are not.
    """
    if text is None or not _AMOUNT.fullmatch(text):
        return default
    return float(text)


def at_midnight(value: date | datetime) -> datetime:
    """Combine a calendar date with a zero time of day."""
    if isinstance(value, datetime):
        value = value.date()
    return datetime.combine(value, time())
