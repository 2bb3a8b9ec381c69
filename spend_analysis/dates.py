"""Free-form date parsing for statement exports.

:func:`parse_date` never raises: an unparsable value yields ``None`` and the
row normalizer treats that as a row-level rejection. A value must name a
full calendar date; partial values such as ``"15"`` or ``"Jan"`` are not
completed from the current date.
"""

from __future__ import annotations

import datetime as dt
import re

from dateutil import parser as date_parser

_US_SLASH_RE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{2}|\d{4})$")
_ISO_LIKE_RE = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})$")


# dateutil fills missing fields from ``default``; parsing against two defaults
# that differ in every field exposes a partial date.
_DEFAULTS = (dt.datetime(2000, 1, 1), dt.datetime(2001, 2, 2))


def _parse_free_form(s: str) -> dt.date | None:
    try:
        first, second = (date_parser.parse(s, default=d).date() for d in _DEFAULTS)
    except (ValueError, OverflowError):
        return None
    if first != second:
        return None
    return first


def _parse_us_slash(s: str) -> dt.date | None:
    m = _US_SLASH_RE.match(s)
    if not m:
        return None
    mm, dd, yy = m.groups()
    year = 2000 + int(yy) if len(yy) == 2 else int(yy)
    try:
        return dt.date(year, int(mm), int(dd))
    except ValueError:
        return None


def _parse_iso_like(s: str) -> dt.date | None:
    m = _ISO_LIKE_RE.match(s)
    if not m:
        return None
    yyyy, mm, dd = m.groups()
    try:
        return dt.date(int(yyyy), int(mm), int(dd))
    except ValueError:
        return None


_PARSERS = (_parse_free_form, _parse_us_slash, _parse_iso_like)


def parse_date(value: str | None) -> dt.date | None:
    """Parse ``value`` into a calendar date, or return ``None``.

    Candidates are tried in priority order and the first valid date wins:

    1. generic free-form parse (month-first for ambiguous numeric dates);
    2. ``M/D/YY`` or ``M/D/YYYY`` (two-digit years map to 2000+YY);
    3. ``YYYY-M-D``.
    """

    if value is None:
        return None
    s = str(value).strip()
    if not s:
        return None
    for parse in _PARSERS:
        d = parse(s)
        if d is not None:
            return d
    return None


__all__ = ["parse_date"]
