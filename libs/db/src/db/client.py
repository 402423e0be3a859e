"""Session helpers for the synced settings database.

Callers name a database explicitly (``database_url=``) or fall back to
``DATABASE_URL``. One engine is kept per URL, so a CLI ``--database-url``
override and the environment default can coexist in one process. The
``sl_settings`` table is created the first time a URL is bound.

    from db.client import session_scope

    with session_scope(database_url=url) as s:
        s.get(SlSetting, "sheet_urls")
"""

from __future__ import annotations

import os
import threading
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from .models.settings import Base

_lock = threading.Lock()
_bound: dict[str, tuple[Engine, sessionmaker[Session]]] = {}


def _resolve_url(override: str | None) -> str:
    url = override or os.getenv("DATABASE_URL")
    if not url:
        raise RuntimeError("No database URL given and DATABASE_URL is not set")
    return url


def _bind(url: str) -> tuple[Engine, sessionmaker[Session]]:
    with _lock:
        pair = _bound.get(url)
        if pair is None:
            engine = create_engine(url, pool_pre_ping=True)
            Base.metadata.create_all(bind=engine)
            pair = (engine, sessionmaker(bind=engine, expire_on_commit=False))
            _bound[url] = pair
        return pair


def engine_for(*, database_url: str | None = None) -> Engine:
    """Return the engine bound to ``database_url`` (schema already created)."""

    engine, _ = _bind(_resolve_url(database_url))
    return engine


@contextmanager
def session_scope(*, database_url: str | None = None) -> Iterator[Session]:
    """Yield a session that commits on success and rolls back on error."""

    _, maker = _bind(_resolve_url(database_url))
    session = maker()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def dispose_engine() -> None:
    """Close every bound engine and forget it."""

    with _lock:
        engines = [engine for engine, _ in _bound.values()]
        _bound.clear()
    for engine in engines:
        engine.dispose()


__all__ = ["dispose_engine", "engine_for", "session_scope"]
