"""Flexible date resolution for Thai/Gregorian spreadsheet dates.

Sheets mix ``DD/MM/YYYY`` with ISO-ish ``YYYY-MM-DD``, write years in either
the Gregorian or the Buddhist Era (BE = CE + 543) and often drop the century.
Everything here shares one year rule (:func:`expand_year`):

- years below 100 pivot at 40: ``0..40`` -> ``20xx``, ``41..99`` -> ``25xx`` (BE)
- any year above 2400 is BE and is shifted back by 543

:func:`resolve_date` never raises; unusable input resolves to "now". Callers
that must distinguish "no date" check the raw cell before calling.
"""

from __future__ import annotations

import re
from datetime import date, datetime, time

BE_OFFSET = 543
_PIVOT = 40
_BE_THRESHOLD = 2400

_LEADING_INT_RE = re.compile(r"\s*([+-]?\d+)")
_LABEL_DATE_RE = re.compile(r"(?<!\d)(\d{1,2})[/.\-](\d{1,2})[/.\-](\d{2,4})(?!\d)")


def expand_year(year: int) -> int:
    """Apply the 2-digit pivot and the Buddhist-era shift to ``year``."""

    if 0 <= year < 100:
        year += 2500 if year > _PIVOT else 2000
    if year > _BE_THRESHOLD:
        year -= BE_OFFSET
    return year


def _leading_int(value: str) -> int | None:
    m = _LEADING_INT_RE.match(value)
    if not m:
        return None
    try:
        return int(m.group(1))
    except ValueError:  # digit run past the interpreter's int-conversion limit
        return None


def _make_date(year: int | None, month: int | None, day: int | None) -> date | None:
    if year is None or month is None or day is None:
        return None
    try:
        return date(expand_year(year), month, day)
    except (ValueError, OverflowError):
        return None


def _parse_date_part(raw: str) -> date | None:
    s = raw.strip()
    if "/" in s:
        parts = s.split("/")
        if len(parts) != 3:
            return None
        d, m, y = (_leading_int(p) for p in parts)
        return _make_date(y, m, d)
    if "-" in s:
        parts = s.split("-")
        if len(parts) != 3:
            return None
        a, b, c = (_leading_int(p) for p in parts)
        # ISO-like first, then day-month-year.
        return _make_date(a, b, c) or _make_date(c, b, a)
    return None


def _parse_time_part(raw: str | None) -> time:
    if not raw:
        return time(0, 0)
    parts = raw.strip().split(":")
    if len(parts) < 2:
        return time(0, 0)
    hour = _leading_int(parts[0]) or 0
    minute = _leading_int(parts[1]) or 0
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        return time(0, 0)
    return time(hour, minute)


def resolve_date(
    date_str: str | None,
    time_str: str | None = None,
    *,
    now: datetime | None = None,
) -> datetime:
    """Resolve a date cell (and optional ``HH:MM`` time cell) to a datetime.

    ``/`` means day/month/year. ``-`` is tried as year-month-day first and
    falls back to day-month-year when that is not a real calendar date.
    Empty or impossible dates (e.g. ``31/04/2026``) give ``now``, defaulting
    to the current instant.
    """

    parsed = _parse_date_part(date_str) if date_str else None
    if parsed is None:
        return now if now is not None else datetime.now()
    return datetime.combine(parsed, _parse_time_part(time_str))


def scan_label_date(label: str | None) -> date | None:
    """Find the first day-month-year date embedded anywhere in ``label``.

    Separators may be ``/``, ``-`` or ``.`` (``"Shop 25/12/2568"``,
    ``"batch 1.2.69"``). Returns ``None`` when no such substring exists or it
    is not a real calendar date.
    """

    if not label:
        return None
    m = _LABEL_DATE_RE.search(label)
    if not m:
        return None
    day, month, year = (int(g) for g in m.groups())
    return _make_date(year, month, day)


def format_display_date(value: datetime | date) -> str:
    """Render ``value`` as ``DD/MM/YYYY`` using the Buddhist-era year."""

    return f"{value.day:02d}/{value.month:02d}/{value.year + BE_OFFSET}"


__all__ = [
    "BE_OFFSET",
    "expand_year",
    "format_display_date",
    "resolve_date",
    "scan_label_date",
]
