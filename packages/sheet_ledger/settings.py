"""Synced application settings: sheet list, logo URL and store identity.

Settings are plain JSON values behind a small key-value capability
(:class:`KeyValueStore`). Two stores exist:

- :class:`DatabaseKeyValueStore`: the shared ("remote") store, a row per key
  in ``sl_settings`` owned by the workspace ``db`` library;
- :class:`LocalFileKeyValueStore`: a JSON file on this machine, used as a
  backup and as the fallback when the remote store is missing or empty.

:class:`SettingsService` reads with the precedence remote, then local, then a
built-in default, and writes local first, then remote. Remote failures are
logged and never raised so an unreachable database degrades to local-only.

Local directory: ``./.sheet_ledger`` by default, override with
``SHEET_LEDGER_HOME``.
"""

from __future__ import annotations

import json
import os
import time
from collections.abc import Sequence
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Protocol

from pydantic import ValidationError

from .logging_setup import get_logger
from .models import SheetConfig, StoreInfo

SHEETS_KEY = "sheet_urls"
LOGO_KEY = "logo_url"
STORE_INFO_KEY = "store_info"

DEFAULT_SHEET_URL = (
    "https://docs.google.com/spreadsheets/d/1ZJ01yx27FMzBDKdXAF3e1Gy9s6HokAC4FsO6BESzi_w/edit#gid=0"
)
DEFAULT_SHEET_NAME = "ข้อมูลตัวอย่าง (Main)"

_HOME_ENV = "SHEET_LEDGER_HOME"
_SETTINGS_FILE = "settings.json"

_logger = get_logger("sheet_ledger.settings")


def _now_ms() -> int:
    return int(time.time() * 1000)


class KeyValueStore(Protocol):
    def get(self, key: str) -> Any | None: ...

    def set(self, key: str, value: Any) -> None: ...


# ----------------------------------------------------------------------------
# Stores
# ----------------------------------------------------------------------------


def settings_home() -> Path:
    """Return the local settings directory (``SHEET_LEDGER_HOME`` or ``./.sheet_ledger``)."""

    root = os.getenv(_HOME_ENV)
    if root and root.strip():
        return Path(root).expanduser().resolve()
    return (Path.cwd() / ".sheet_ledger").resolve()


class LocalFileKeyValueStore:
    """All keys in one JSON object on disk; writes go through ``.tmp`` + ``os.replace``."""

    def __init__(self, path: Path | None = None) -> None:
        self.path = path or settings_home() / _SETTINGS_FILE

    def _read_all(self) -> dict[str, Any]:
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        except (OSError, json.JSONDecodeError) as e:
            _logger.warning("Ignoring unreadable settings file %s: %s", self.path, e)
            return {}
        return data if isinstance(data, dict) else {}

    def get(self, key: str) -> Any | None:
        return self._read_all().get(key)

    def set(self, key: str, value: Any) -> None:
        data = self._read_all()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        with tmp.open("w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
        os.replace(tmp, self.path)


class DatabaseKeyValueStore:
    """Key-value rows in the shared ``sl_settings`` table."""

    def __init__(self, *, database_url: str | None = None) -> None:
        self.database_url = database_url

    def get(self, key: str) -> Any | None:
        from db.client import session_scope
        from db.models.settings import SlSetting

        with session_scope(database_url=self.database_url) as session:
            row = session.get(SlSetting, key)
            return None if row is None else row.value

    def set(self, key: str, value: Any) -> None:
        from db.client import session_scope
        from db.models.settings import SlSetting

        with session_scope(database_url=self.database_url) as session:
            row = session.get(SlSetting, key)
            now = datetime.now(UTC)
            if row is None:
                session.add(SlSetting(key=key, value=value, updated_at=now))
            else:
                row.value = value
                row.updated_at = now


# ----------------------------------------------------------------------------
# Payload normalization
# ----------------------------------------------------------------------------


def normalize_sheets(data: Any) -> list[SheetConfig]:
    """Coerce a stored sheet list into :class:`SheetConfig` objects.

    Older payloads are a bare list of URL strings; those get generated names
    (``"Sheet 1"``, ...). Missing ``last_modified`` values are stamped with the
    current time. Entries that fail validation are dropped.
    """

    if not isinstance(data, list) or not data:
        return []
    now = _now_ms()
    out: list[SheetConfig] = []
    for i, item in enumerate(data):
        if isinstance(item, str):
            out.append(SheetConfig(url=item, name=f"Sheet {i + 1}", last_modified=now))
            continue
        try:
            sheet = SheetConfig.model_validate(item)
        except ValidationError as e:
            _logger.warning("Dropping invalid sheet entry %r: %s", item, e.errors()[0]["msg"])
            continue
        if sheet.last_modified is None:
            sheet = sheet.model_copy(update={"last_modified": now})
        out.append(sheet)
    return out


def default_sheets() -> list[SheetConfig]:
    return [SheetConfig(url=DEFAULT_SHEET_URL, name=DEFAULT_SHEET_NAME, last_modified=_now_ms())]


# ----------------------------------------------------------------------------
# Service
# ----------------------------------------------------------------------------


class SettingsService:
    """Read/write settings with remote → local → default precedence."""

    def __init__(
        self, *, remote: KeyValueStore | None = None, local: KeyValueStore | None = None
    ) -> None:
        self.remote = remote
        self.local = local if local is not None else LocalFileKeyValueStore()

    @property
    def remote_connected(self) -> bool:
        return self.remote is not None

    def _remote_get(self, key: str) -> Any | None:
        if self.remote is None:
            return None
        try:
            return self.remote.get(key)
        except Exception as e:  # noqa: BLE001 - remote is optional
            _logger.warning("Remote settings read failed for %r: %s", key, e)
            return None

    def _save(self, key: str, value: Any) -> bool:
        """Write locally, then remotely. Returns whether the remote write succeeded."""

        self.local.set(key, value)
        if self.remote is None:
            return False
        try:
            self.remote.set(key, value)
        except Exception as e:  # noqa: BLE001 - remote is optional
            _logger.warning("Remote settings write failed for %r: %s", key, e)
            return False
        return True

    # ---- Sheets --------------------------------------------------------------

    def load_sheets(self) -> list[SheetConfig]:
        remote = normalize_sheets(self._remote_get(SHEETS_KEY))
        if remote:
            return remote
        local = normalize_sheets(self.local.get(SHEETS_KEY))
        if local:
            return local
        return default_sheets()

    def save_sheets(self, sheets: Sequence[SheetConfig]) -> bool:
        return self._save(SHEETS_KEY, [s.to_store() for s in sheets])

    # ---- Logo ----------------------------------------------------------------

    def load_logo_url(self) -> str | None:
        remote = self._remote_get(LOGO_KEY)
        if isinstance(remote, str) and remote.strip():
            # Keep a local copy so the logo survives the remote going away.
            self.local.set(LOGO_KEY, remote)
            return remote
        local = self.local.get(LOGO_KEY)
        if isinstance(local, str) and local.strip():
            return local
        return None

    def save_logo_url(self, url: str) -> bool:
        return self._save(LOGO_KEY, url.strip())

    # ---- Store identity ------------------------------------------------------

    def load_store_info(self) -> StoreInfo:
        for value in (self._remote_get(STORE_INFO_KEY), self.local.get(STORE_INFO_KEY)):
            if not isinstance(value, dict):
                continue
            try:
                return StoreInfo.model_validate(value)
            except ValidationError as e:
                _logger.warning("Ignoring invalid store info %r: %s", value, e.errors()[0]["msg"])
        return StoreInfo()

    def save_store_info(self, info: StoreInfo) -> bool:
        return self._save(STORE_INFO_KEY, info.model_dump())


def build_settings_service(*, database_url: str | None = None) -> SettingsService:
    """Wire a service for the current environment.

    The remote store is enabled only when a database URL is provided or
    ``DATABASE_URL`` is set.
    """

    url = database_url or os.getenv("DATABASE_URL")
    remote = DatabaseKeyValueStore(database_url=url) if url else None
    return SettingsService(remote=remote)


__all__ = [
    "DEFAULT_SHEET_NAME",
    "DEFAULT_SHEET_URL",
    "LOGO_KEY",
    "SHEETS_KEY",
    "STORE_INFO_KEY",
    "DatabaseKeyValueStore",
    "KeyValueStore",
    "LocalFileKeyValueStore",
    "SettingsService",
    "build_settings_service",
    "default_sheets",
    "normalize_sheets",
    "settings_home",
]
