import textwrap
import threading
from datetime import datetime

from sheet_ledger import SheetConfig, ingest_sheets, merge_records
from sheet_ledger.ingest import _resolve_concurrency

ID_A = "A" * 24
ID_B = "B" * 24
ID_C = "C" * 24


def _csv(s: str) -> str:
    return textwrap.dedent(s).lstrip("\n")


PAYLOADS = {
    ID_A: _csv(
        """
        Date,Time,Receiver,Amount,Note
        01/01/2569,09:00,Cafe,60,latte
        03/01/2569,09:00,Cafe,65,mocha
        """
    ),
    ID_B: _csv(
        """
        Date,Receiver,Amount
        02/01/2569,Never,999
        """
    ),
    ID_C: _csv(
        """
        Date,Time,Receiver,Amount,Note
        02/01/2569,18:30,Market,420,dinner
        """
    ),
}


def _fake_fetch(failing: set[str] = frozenset()):
    calls: list[str] = []
    lock = threading.Lock()

    def fetch(url: str) -> str:
        doc_id = url.split("/d/")[1].split("/")[0]
        with lock:
            calls.append(doc_id)
        if doc_id in failing:
            raise ConnectionError(f"cannot reach {doc_id}")
        return PAYLOADS[doc_id]

    fetch.calls = calls
    return fetch


def _sheets(*ids: str) -> list[SheetConfig]:
    return [SheetConfig(url=i, name=f"Sheet {n + 1}") for n, i in enumerate(ids)]


def test_failing_source_is_isolated():
    fetch = _fake_fetch(failing={ID_B})
    records = ingest_sheets(_sheets(ID_A, ID_B, ID_C), fetch=fetch)

    assert sorted(fetch.calls) == sorted([ID_A, ID_B, ID_C])
    assert {r.source_index for r in records} == {0, 2}
    assert all(r.category != "Never" for r in records)
    assert len(records) == 3


def test_merged_records_are_newest_first():
    records = ingest_sheets(_sheets(ID_A, ID_C), fetch=_fake_fetch())
    assert [r.occurred_at for r in records] == [
        datetime(2026, 1, 3, 9, 0),
        datetime(2026, 1, 2, 18, 30),
        datetime(2026, 1, 1, 9, 0),
    ]
    assert [r.description for r in records] == ["mocha", "dinner", "latte"]


def test_ids_are_unique_across_sources():
    # Same payload twice: only the source index tells the rows apart.
    records = ingest_sheets(_sheets(ID_A, ID_A), fetch=_fake_fetch())
    ids = [r.id for r in records]
    assert len(ids) == 4
    assert len(set(ids)) == 4


def test_blank_references_keep_positions_of_the_rest():
    sheets = [SheetConfig(url="  "), SheetConfig(url=ID_C, name="Night")]
    records = ingest_sheets(sheets, fetch=_fake_fetch())
    assert [(r.source_index, r.source_label) for r in records] == [(1, "Night")]


def test_unresolvable_reference_contributes_nothing():
    records = ingest_sheets(
        [SheetConfig(url="not a sheet"), SheetConfig(url=ID_C)], fetch=_fake_fetch()
    )
    assert [r.source_index for r in records] == [1]


def test_no_sources_means_no_records():
    assert ingest_sheets([]) == []
    assert ingest_sheets([SheetConfig(url="")]) == []


def test_all_sources_failing_yields_empty_result():
    fetch = _fake_fetch(failing={ID_A, ID_C})
    assert ingest_sheets(_sheets(ID_A, ID_C), fetch=fetch, concurrency=1) == []


def test_merge_records_sorts_across_batches():
    records = ingest_sheets(_sheets(ID_A), fetch=_fake_fetch())
    merged = merge_records([records[1:], records[:1]])
    assert [r.id for r in merged] == [r.id for r in records]


def test_concurrency_defaults_and_env_override(monkeypatch):
    assert _resolve_concurrency(3) == 3
    assert _resolve_concurrency(50) == 8

    monkeypatch.setenv("SHEET_LEDGER_INGEST_CONCURRENCY", "2")
    assert _resolve_concurrency(5) == 2

    monkeypatch.setenv("SHEET_LEDGER_INGEST_CONCURRENCY", "100")
    assert _resolve_concurrency(50) == 32

    monkeypatch.setenv("SHEET_LEDGER_INGEST_CONCURRENCY", "oops")
    assert _resolve_concurrency(5) == 5


def test_malformed_date_row_keeps_rest_of_source():
    payload = "Date,Amount\n01/01/99999999999999999999,10\n02/01/2569,20\n"
    records = ingest_sheets([SheetConfig(url=ID_A)], fetch=lambda url: payload)
    assert sorted(r.amount for r in records) == [10.0, 20.0]
