"""Build :class:`~sheet_ledger.models.TransactionRecord` rows for one source.

Mapping rules per data row:

- rows with fewer than two cells are ignored
- ``amount`` goes through :func:`~sheet_ledger.amounts.normalize_amount`
- a row with an empty date cell and a zero amount carries nothing and is
  skipped
- when the source label itself contains a date (e.g. a tab named
  ``"25/12/2568"``) that date applies to every row, otherwise each row's own
  date/time cells are resolved
- a short receiver/category cell is the category and the note describes the
  row; a long one is folded into the description instead
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from .amounts import normalize_amount
from .csv_text import parse_csv
from .dates import format_display_date, resolve_date, scan_label_date
from .logging_setup import get_logger
from .models import UNCATEGORIZED, UNSPECIFIED, Role, RoleMap, TransactionRecord
from .roles import infer_roles

# Receiver/category cells shorter than this are treated as a category name.
SHORT_CATEGORY_MAX_LEN = 20
DESCRIPTION_SEPARATOR = " - "

_logger = get_logger("sheet_ledger.records")


def record_id(source_index: int, row_index: int) -> str:
    return f"sheet-{source_index}-row-{row_index}"


def _category_and_description(receiver: str, note: str) -> tuple[str, str]:
    if receiver and len(receiver) < SHORT_CATEGORY_MAX_LEN:
        category, description = receiver, note
    else:
        category = note
        if receiver and note:
            description = f"{receiver}{DESCRIPTION_SEPARATOR}{note}"
        else:
            description = receiver or note
    return category or UNCATEGORIZED, description or UNSPECIFIED


def build_records(
    rows: Sequence[Sequence[str]],
    role_map: RoleMap,
    *,
    source_index: int,
    source_label: str = "",
    start_row: int = 1,
) -> list[TransactionRecord]:
    """Convert data ``rows`` (header excluded) into transaction records.

    ``start_row`` is the position of ``rows[0]`` in the original parsed rows;
    it only feeds record ids so they stay stable against the sheet layout.
    """

    label_date = scan_label_date(source_label)
    label_instant = datetime.combine(label_date, datetime.min.time()) if label_date else None
    if label_instant is not None:
        _logger.info(
            "Source %d label %r carries a date; using %s for every row",
            source_index,
            source_label,
            label_instant.date().isoformat(),
        )

    out: list[TransactionRecord] = []
    skipped = 0
    for offset, row in enumerate(rows):
        if len(row) < 2:
            skipped += 1
            continue

        date_cell = role_map.cell(row, Role.DATE)
        amount = normalize_amount(role_map.cell(row, Role.AMOUNT) or "0")
        if not date_cell and amount == 0:
            skipped += 1
            continue

        if label_instant is not None:
            occurred_at = label_instant
        else:
            occurred_at = resolve_date(date_cell, role_map.cell(row, Role.TIME))

        category, description = _category_and_description(
            role_map.cell(row, Role.CATEGORY), role_map.cell(row, Role.NOTE)
        )

        out.append(
            TransactionRecord(
                id=record_id(source_index, start_row + offset),
                occurred_at=occurred_at,
                display_date=format_display_date(occurred_at),
                category=category,
                amount=amount,
                description=description,
                source_index=source_index,
                source_label=source_label,
            )
        )

    if skipped:
        _logger.debug("Source %d: skipped %d row(s) without usable data", source_index, skipped)
    return out


def records_from_csv(
    text: str, *, source_index: int, source_label: str = ""
) -> list[TransactionRecord]:
    """Run the full parsing core over one CSV payload.

    The first parsed row is the header; the second (when present) is used for
    content sniffing.
    """

    rows = parse_csv(text)
    if not rows:
        return []
    header, data = rows[0], rows[1:]
    role_map = infer_roles(header, data[0] if data else None)
    return build_records(data, role_map, source_index=source_index, source_label=source_label)


__all__ = [
    "DESCRIPTION_SEPARATOR",
    "SHORT_CATEGORY_MAX_LEN",
    "build_records",
    "record_id",
    "records_from_csv",
]
