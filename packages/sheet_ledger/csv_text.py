"""Lenient comma-delimited text parser for spreadsheet exports.

Unlike :mod:`csv`, this parser trims every cell, discards carriage returns
everywhere (including inside quotes) and drops rows made only of empty cells,
which is what hand-maintained sheets need: trailing blank lines and stray
padding disappear while quoted commas, quotes and newlines survive.
"""

from __future__ import annotations

_QUOTE = '"'


def _flush_row(rows: list[list[str]], row: list[str]) -> None:
    if any(cell != "" for cell in row):
        rows.append(row)


def parse_csv(text: str) -> list[list[str]]:
    """Split ``text`` into rows of trimmed string cells.

    Rules:
    - ``""`` inside a quoted field yields one literal quote.
    - Any other quote toggles the quoted state and is not emitted.
    - Unquoted ``,`` ends a cell; unquoted ``\\n`` ends a cell and the row.
    - ``\\r`` is always dropped.
    - Rows whose cells are all empty are dropped.

    Never raises; empty input gives an empty list.
    """

    rows: list[list[str]] = []
    row: list[str] = []
    buf: list[str] = []
    in_quotes = False

    i = 0
    n = len(text)
    while i < n:
        ch = text[i]
        if ch == _QUOTE:
            if in_quotes and i + 1 < n and text[i + 1] == _QUOTE:
                buf.append(_QUOTE)
                i += 1
            else:
                in_quotes = not in_quotes
        elif ch == "," and not in_quotes:
            row.append("".join(buf).strip())
            buf = []
        elif ch == "\n" and not in_quotes:
            row.append("".join(buf).strip())
            _flush_row(rows, row)
            row = []
            buf = []
        elif ch == "\r":
            pass
        else:
            buf.append(ch)
        i += 1

    # Trailing row without a final newline.
    if buf or row:
        row.append("".join(buf).strip())
        _flush_row(rows, row)

    return rows


__all__ = ["parse_csv"]
