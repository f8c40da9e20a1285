from __future__ import annotations

import re
from datetime import date
from typing import Optional

_MONTHS = {
    "january": 1,
    "jan": 1,
    "february": 2,
    "feb": 2,
    "march": 3,
    "mar": 3,
    "april": 4,
    "apr": 4,
    "may": 5,
    "june": 6,
    "jun": 6,
    "july": 7,
    "jul": 7,
    "august": 8,
    "aug": 8,
    "september": 9,
    "sept": 9,
    "sep": 9,
    "october": 10,
    "oct": 10,
    "november": 11,
    "nov": 11,
    "december": 12,
    "dec": 12,
}
_MONTH = r"(?P<month>" + "|".join(sorted(_MONTHS, key=len, reverse=True)) + r")\.?"
_ORDINAL = r"(?:st|nd|rd|th)?"

_ISO_RE = re.compile(r"(?<!\d)(?P<year>\d{4})[-/.](?P<month>\d{1,2})[-/.](?P<day>\d{1,2})(?!\d)")
_NUMERIC_RE = re.compile(r"(?<!\d)(?P<first>\d{1,2})(?P<sep>[-/.])(?P<second>\d{1,2})(?P=sep)(?P<year>\d{4}|\d{2})(?!\d)")
_MONTH_DAY_YEAR_RE = re.compile(
    r"\b" + _MONTH + r"\s+(?P<day>\d{1,2})" + _ORDINAL + r",?\s+(?P<year>\d{4})(?!\d)", re.IGNORECASE
)
_DAY_MONTH_YEAR_RE = re.compile(
    r"(?<!\d)(?P<day>\d{1,2})" + _ORDINAL + r"\s+(?:of\s+)?" + _MONTH + r",?\s+(?P<year>\d{4})(?!\d)",
    re.IGNORECASE,
)
_MONTH_YEAR_RE = re.compile(r"\b" + _MONTH + r",?\s+(?P<year>\d{4})(?!\d)", re.IGNORECASE)


def _build(year: int, month: int, day: int) -> Optional[date]:
    try:
        return date(year, month, day)
    except ValueError:
        return None


def _expand_year(value: str) -> int:
    year = int(value)
    return year + 2000 if len(value) == 2 else year


def _from_iso(match: re.Match) -> Optional[date]:
    return _build(int(match["year"]), int(match["month"]), int(match["day"]))


def _from_numeric(match: re.Match) -> Optional[date]:
    first, second = int(match["first"]), int(match["second"])
    year = _expand_year(match["year"])
    # Dotted dates are day-first; slashes and dashes are month-first unless
    # the leading number cannot be a month.
    if match["sep"] == "." or first > 12:
        return _build(year, second, first)
    return _build(year, first, second)


def _from_month_name(match: re.Match) -> Optional[date]:
    month = _MONTHS[match["month"].lower()]
    day = int(match.groupdict().get("day") or 1)
    return _build(int(match["year"]), month, day)


_PATTERNS = (
    (_ISO_RE, _from_iso),
    (_NUMERIC_RE, _from_numeric),
    (_MONTH_DAY_YEAR_RE, _from_month_name),
    (_DAY_MONTH_YEAR_RE, _from_month_name),
    (_MONTH_YEAR_RE, _from_month_name),
)


def parse_date(text: str) -> Optional[date]:
    if not text:
        return None
    for pattern, builder in _PATTERNS:
        match = pattern.search(text)
        if match is None:
            continue
        parsed = builder(match)
        if parsed is not None:
            return parsed
    return None


def parse_date_from_form(text: str) -> Optional[str]:
    """Parse a free-text date answer into ``YYYY-MM-DD``, or ``None``."""
    parsed = parse_date(text)
    return parsed.isoformat() if parsed else None
