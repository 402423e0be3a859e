"""Pytest configuration for test isolation.

The settings service writes a local JSON file under ``./.sheet_ledger`` by
default and enables the database store whenever ``DATABASE_URL`` is set. To
keep tests hermetic each test gets its own ``SHEET_LEDGER_HOME``, runs with
``DATABASE_URL`` cleared, and leaves no shared SQLAlchemy engine behind.
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def _isolate_settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    home = tmp_path / "sheet_ledger_home"
    home.mkdir(parents=True, exist_ok=True)
    monkeypatch.setenv("SHEET_LEDGER_HOME", os.fspath(home))
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.delenv("SHEET_LEDGER_INGEST_CONCURRENCY", raising=False)
    yield
    from db.client import dispose_engine
    from sheet_ledger.logging_setup import reset_logging

    dispose_engine()
    reset_logging()
