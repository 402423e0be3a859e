"""DB helpers for tests: bootstrap a temporary SQLite settings database."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from db.client import engine_for, session_scope
from db.models.settings import SlSetting
from sqlalchemy import inspect


def bootstrap_sqlite_db(db_file: Path) -> str:
    """Create a SQLite database file with the settings schema and return its URL.

    A file-backed database lets separate SQLAlchemy connections share state
    (in-memory SQLite is per-connection).
    """

    url = f"sqlite+pysqlite:///{db_file}"
    db_file.parent.mkdir(parents=True, exist_ok=True)
    engine = engine_for(database_url=url)
    tables = set(inspect(engine).get_table_names())
    assert SlSetting.__tablename__ in tables, f"settings table missing; have {sorted(tables)}"
    return url


def read_setting(database_url: str, key: str) -> Any | None:
    with session_scope(database_url=database_url) as session:
        row = session.get(SlSetting, key)
        return None if row is None else row.value
