import io
import urllib.error
from urllib.parse import parse_qs, urlsplit

import pytest

import sheet_ledger.sources as sources_mod
from sheet_ledger import SheetConfig, SourceFetchError, fetch_text, load_source, resolve_csv_url

DOC_ID = "1ZJ01yx27FMzBDKdXAF3e1Gy9s6HokAC4FsO6BESzi_w"
EXPORT = f"https://docs.google.com/spreadsheets/d/{DOC_ID}/export?format=csv"


# ---- Reference resolution ----------------------------------------------------


def test_standard_edit_link_with_fragment_gid():
    ref = f"https://docs.google.com/spreadsheets/d/{DOC_ID}/edit#gid=0"
    assert resolve_csv_url(ref) == f"{EXPORT}&gid=0"


def test_standard_link_without_gid():
    ref = f"https://docs.google.com/spreadsheets/d/{DOC_ID}/edit?usp=sharing"
    assert resolve_csv_url(ref) == EXPORT


def test_explicit_gid_wins_over_embedded_one():
    ref = f"https://docs.google.com/spreadsheets/d/{DOC_ID}/edit#gid=0"
    assert resolve_csv_url(ref, gid="987") == f"{EXPORT}&gid=987"


def test_bare_identifier():
    assert resolve_csv_url(DOC_ID) == EXPORT
    assert resolve_csv_url(f"  {DOC_ID}  ", gid=5) == f"{EXPORT}&gid=5"


def test_published_link_requests_csv_and_keeps_gid():
    ref = "https://docs.google.com/spreadsheets/d/e/2PACX-1vAbC_def/pubhtml?gid=123&single=true"
    url = resolve_csv_url(ref)
    parts = urlsplit(url)
    assert parts.path == "/spreadsheets/d/e/2PACX-1vAbC_def/pub"
    assert parse_qs(parts.query) == {"gid": ["123"], "single": ["true"], "output": ["csv"]}


def test_published_link_output_is_replaced_and_gid_appended():
    ref = "https://docs.google.com/spreadsheets/d/e/2PACX-key/pub?output=html"
    url = resolve_csv_url(ref, gid="7")
    assert parse_qs(urlsplit(url).query) == {"gid": ["7"], "output": ["csv"]}


@pytest.mark.parametrize(
    "ref",
    ["", "   ", None, "short-id", "https://example.com/some/file.csv", "not a/valid id at all"],
)
def test_unrecognized_references(ref):
    assert resolve_csv_url(ref) is None


# ---- Retrieval ---------------------------------------------------------------


class _FakeResponse(io.BytesIO):
    def __init__(self, body: bytes, status: int = 200) -> None:
        super().__init__(body)
        self.status = status


def test_fetch_text_decodes_utf8_with_bom(monkeypatch):
    seen = {}

    def fake_urlopen(req, **kwargs):
        seen["url"] = req.full_url
        return _FakeResponse("\ufeffวันที่,จำนวน\n".encode())

    monkeypatch.setattr(sources_mod.urllib.request, "urlopen", fake_urlopen)
    assert fetch_text(EXPORT) == "วันที่,จำนวน\n"
    assert seen["url"] == EXPORT


def test_fetch_text_wraps_http_errors(monkeypatch):
    def fake_urlopen(req, **kwargs):
        raise urllib.error.HTTPError(req.full_url, 404, "Not Found", None, None)

    monkeypatch.setattr(sources_mod.urllib.request, "urlopen", fake_urlopen)
    with pytest.raises(SourceFetchError, match="404"):
        fetch_text(EXPORT)


def test_fetch_text_rejects_non_success_status(monkeypatch):
    monkeypatch.setattr(
        sources_mod.urllib.request, "urlopen", lambda req, **kw: _FakeResponse(b"", status=304)
    )
    with pytest.raises(SourceFetchError, match="304"):
        fetch_text(EXPORT)


# ---- Per-source pipeline -----------------------------------------------------


CSV = "Date,Receiver,Amount,Note\n09/01/2569,Market,100,veg\n"


def test_load_source_parses_fetched_text():
    calls = []

    def fetch(url):
        calls.append(url)
        return CSV

    records = load_source(SheetConfig(url=DOC_ID, name="Main"), 3, fetch=fetch)
    assert calls == [EXPORT]
    assert [(r.id, r.amount, r.source_label) for r in records] == [("sheet-3-row-1", 100.0, "Main")]


def test_load_source_unresolvable_reference_is_empty():
    def fetch(url):  # pragma: no cover - must not be called
        raise AssertionError("fetch should not run")

    assert load_source(SheetConfig(url="nope"), 0, fetch=fetch) == []


def test_load_source_fetch_failure_is_empty():
    def fetch(url):
        raise SourceFetchError("boom")

    assert load_source(SheetConfig(url=DOC_ID), 0, fetch=fetch) == []


def test_load_source_empty_payload_is_empty():
    assert load_source(SheetConfig(url=DOC_ID), 0, fetch=lambda url: "\n\n") == []
