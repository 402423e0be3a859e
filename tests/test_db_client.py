from pathlib import Path

import pytest
from db.client import dispose_engine, engine_for, session_scope
from db.models.settings import SlSetting

from tests.helpers.db import bootstrap_sqlite_db, read_setting


def test_two_databases_can_be_used_side_by_side(tmp_path: Path):
    first = bootstrap_sqlite_db(tmp_path / "a.sqlite")
    second = bootstrap_sqlite_db(tmp_path / "b.sqlite")

    with session_scope(database_url=first) as s:
        s.add(SlSetting(key="logo_url", value="https://a/logo.png"))
    with session_scope(database_url=second) as s:
        s.add(SlSetting(key="logo_url", value="https://b/logo.png"))

    assert read_setting(first, "logo_url") == "https://a/logo.png"
    assert read_setting(second, "logo_url") == "https://b/logo.png"
    assert engine_for(database_url=first) is not engine_for(database_url=second)


def test_failed_scope_rolls_back(tmp_path: Path):
    url = bootstrap_sqlite_db(tmp_path / "settings.sqlite")
    with pytest.raises(RuntimeError, match="boom"):
        with session_scope(database_url=url) as s:
            s.add(SlSetting(key="store_info", value={"name": "x"}))
            s.flush()
            raise RuntimeError("boom")
    assert read_setting(url, "store_info") is None


def test_environment_url_is_the_fallback(tmp_path: Path, monkeypatch):
    url = bootstrap_sqlite_db(tmp_path / "settings.sqlite")
    monkeypatch.setenv("DATABASE_URL", url)
    with session_scope() as s:
        s.add(SlSetting(key="sheet_urls", value=[]))
    assert read_setting(url, "sheet_urls") == []


def test_missing_url_is_a_configuration_error():
    with pytest.raises(RuntimeError, match="DATABASE_URL"):
        engine_for()


def test_dispose_rebinds_on_next_use(tmp_path: Path):
    url = bootstrap_sqlite_db(tmp_path / "settings.sqlite")
    before = engine_for(database_url=url)
    dispose_engine()
    assert engine_for(database_url=url) is not before
