"""Caller-facing orchestration for the ``sheet_ledger`` package.

The parsing core never substitutes demo content; that decision belongs to the
application. :func:`load_transactions` packages the usual policy:

- no usable sheet configured → placeholder records, no notice
- sheets configured but nothing ingested → placeholder records plus a notice
- otherwise → the real records, newest first
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from .ingest import ingest_sheets
from .logging_setup import get_logger
from .models import SheetConfig, TransactionRecord
from .placeholder import placeholder_records
from .sources import Fetcher

EMPTY_RESULT_NOTICE = "เชื่อมต่อได้แต่ไม่พบข้อมูลในลิงก์ที่ระบุ (แสดงข้อมูลตัวอย่างแทน)"

_logger = get_logger("sheet_ledger.api")


@dataclass(frozen=True, slots=True)
class IngestOutcome:
    records: list[TransactionRecord]
    using_placeholder: bool
    notice: str | None = None


def load_transactions(
    sheets: Sequence[SheetConfig],
    *,
    fetch: Fetcher | None = None,
    concurrency: int | None = None,
) -> IngestOutcome:
    """Ingest ``sheets`` and fall back to placeholder data when nothing comes back."""

    if not any(s.url.strip() for s in sheets):
        return IngestOutcome(records=placeholder_records(), using_placeholder=True)

    records = ingest_sheets(sheets, fetch=fetch, concurrency=concurrency)
    if records:
        return IngestOutcome(records=records, using_placeholder=False)

    _logger.warning("No transactions from %d sheet(s); showing placeholder data", len(sheets))
    return IngestOutcome(
        records=placeholder_records(), using_placeholder=True, notice=EMPTY_RESULT_NOTICE
    )


__all__ = ["EMPTY_RESULT_NOTICE", "IngestOutcome", "load_transactions"]
