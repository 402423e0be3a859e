"""Amount cleaning for hand-typed spreadsheet cells."""

from __future__ import annotations

import math
import re
import unicodedata

# Currency words that show up next to numbers in Thai sheets.
_CURRENCY_WORDS = ("บาท", "THB")
_STRIP_CHARS = frozenset(',"\'')
_LEADING_NUMBER_RE = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


def _is_noise(ch: str) -> bool:
    return ch in _STRIP_CHARS or ch.isspace() or unicodedata.category(ch) == "Sc"


def normalize_amount(raw: str | None) -> float:
    """Return the numeric value of ``raw``, or ``0.0`` when there is none.

    Currency glyphs, thousands separators, quotes and whitespace are removed
    and the leading decimal number of what remains is parsed (``"1,250.50 บาท"``
    gives ``1250.5``). Empty, non-numeric and non-finite inputs give ``0.0``.
    """

    if not raw:
        return 0.0
    s = str(raw)
    for word in _CURRENCY_WORDS:
        s = s.replace(word, "")
    s = "".join(ch for ch in s if not _is_noise(ch))
    m = _LEADING_NUMBER_RE.match(s)
    if not m:
        return 0.0
    try:
        value = float(m.group(0))
    except ValueError:  # pragma: no cover - the regex only admits float syntax
        return 0.0
    if not math.isfinite(value):
        return 0.0
    return value


__all__ = ["normalize_amount"]
