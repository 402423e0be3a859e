"""Concurrent ingestion of several sheets into one sorted record list."""

from __future__ import annotations

import os
from collections.abc import Sequence

from .logging_setup import get_logger
from .models import SheetConfig, TransactionRecord
from .pmap import p_map
from .sources import Fetcher, load_source

_CONCURRENCY_ENV = "SHEET_LEDGER_INGEST_CONCURRENCY"
_DEFAULT_MAX_WORKERS = 8
_MAX_WORKERS_CAP = 32

_logger = get_logger("sheet_ledger.ingest")


def _resolve_concurrency(n_sources: int) -> int:
    """Worker count for ``n_sources``: env override when valid, else ``min(8, n)``."""

    env_val = os.getenv(_CONCURRENCY_ENV)
    try:
        requested = int(env_val) if env_val else None
    except ValueError:
        requested = None
    if requested is not None and requested > 0:
        return max(1, min(requested, n_sources, _MAX_WORKERS_CAP))
    return max(1, min(_DEFAULT_MAX_WORKERS, n_sources))


def merge_records(batches: Sequence[Sequence[TransactionRecord]]) -> list[TransactionRecord]:
    """Concatenate per-source batches and sort newest first."""

    merged = [rec for batch in batches for rec in batch]
    merged.sort(key=lambda r: r.occurred_at, reverse=True)
    return merged


def ingest_sheets(
    sheets: Sequence[SheetConfig],
    *,
    fetch: Fetcher | None = None,
    concurrency: int | None = None,
) -> list[TransactionRecord]:
    """Fetch and parse every sheet in parallel and merge the results.

    ``source_index`` on each record is the sheet's position in ``sheets``.
    Sheets with a blank reference contribute nothing. A source that fails for
    any reason contributes an empty batch; no exception escapes for
    per-source problems.
    """

    jobs = [(idx, sheet) for idx, sheet in enumerate(sheets) if sheet.url.strip()]
    if not jobs:
        return []

    workers = concurrency if concurrency is not None else _resolve_concurrency(len(jobs))

    def _load(job: tuple[int, SheetConfig]) -> list[TransactionRecord]:
        idx, sheet = job
        return load_source(sheet, idx, fetch=fetch)

    def _on_error(job: tuple[int, SheetConfig], exc: Exception) -> list[TransactionRecord]:
        _logger.error("Source %d: pipeline failed: %s", job[0], exc)
        return []

    batches = p_map(jobs, _load, concurrency=workers, on_error=_on_error)
    merged = merge_records(batches)
    _logger.info("Ingested %d transaction(s) from %d source(s)", len(merged), len(jobs))
    return merged


__all__ = ["ingest_sheets", "merge_records"]
