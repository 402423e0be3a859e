from datetime import datetime

from sheet_ledger import SheetConfig, load_transactions
from sheet_ledger.api import EMPTY_RESULT_NOTICE
from sheet_ledger.placeholder import PLACEHOLDER_SOURCE_INDEX, placeholder_records

DOC_ID = "1ZJ01yx27FMzBDKdXAF3e1Gy9s6HokAC4FsO6BESzi_w"


def test_placeholder_set_is_deterministic_and_newest_first():
    records = placeholder_records()
    assert len(records) == 14
    assert [r.id for r in records] == [f"tx-{i}" for i in range(14)]
    assert records[0].occurred_at == datetime(2026, 1, 9)
    assert records[-1].display_date == "04/01/2569"
    assert all(r.source_index == PLACEHOLDER_SOURCE_INDEX for r in records)
    assert records == placeholder_records()
    instants = [r.occurred_at for r in records]
    assert instants == sorted(instants, reverse=True)


def test_no_configured_sheets_uses_placeholder_silently():
    outcome = load_transactions([SheetConfig(url=" ")])
    assert outcome.using_placeholder
    assert outcome.notice is None
    assert outcome.records == placeholder_records()


def test_empty_ingest_uses_placeholder_with_notice():
    outcome = load_transactions([SheetConfig(url=DOC_ID)], fetch=lambda url: "Date,Amount\n")
    assert outcome.using_placeholder
    assert outcome.notice == EMPTY_RESULT_NOTICE
    assert len(outcome.records) == 14


def test_real_records_are_returned_as_is():
    payload = "Date,Amount,Note\n09/01/2569,120,ice\n"
    outcome = load_transactions([SheetConfig(url=DOC_ID, name="Main")], fetch=lambda url: payload)
    assert not outcome.using_placeholder
    assert outcome.notice is None
    assert [(r.id, r.amount, r.description) for r in outcome.records] == [
        ("sheet-0-row-1", 120.0, "ice")
    ]
