import pytest

from sheet_ledger import Resolution, Role, infer_roles
from sheet_ledger.roles import DEFAULT_POSITIONS, looks_like_amount, looks_like_date


def test_keyword_match_wins_over_contradicting_content():
    # The data row would sniff the other way round; headers must still win.
    role_map = infer_roles(["Amount", "Date"], ["09/01/2026", "100"])
    assert role_map.index(Role.AMOUNT) == 0
    assert role_map.index(Role.DATE) == 1
    assert role_map.resolution(Role.AMOUNT) is Resolution.KEYWORD
    assert role_map.resolution(Role.DATE) is Resolution.KEYWORD


def test_sniff_fallback_when_headers_are_meaningless():
    role_map = infer_roles(["A", "B", "C", "D"], ["x", "09/01/2026", "y", "150"])
    assert role_map.index(Role.DATE) == 1
    assert role_map.index(Role.AMOUNT) == 3
    assert role_map.resolution(Role.DATE) is Resolution.SNIFF
    assert role_map.resolution(Role.AMOUNT) is Resolution.SNIFF


def test_thai_headers():
    header = ["ลำดับ", "วันที่", "เวลา", "ผู้รับ", "จำนวนเงิน", "บันทึก"]
    role_map = infer_roles(header, None)
    assert {r: role_map.index(r) for r in Role} == {
        Role.DATE: 1,
        Role.TIME: 2,
        Role.CATEGORY: 3,
        Role.AMOUNT: 4,
        Role.NOTE: 5,
    }
    assert all(role_map.resolution(r) is Resolution.KEYWORD for r in Role)


def test_keyword_match_is_case_insensitive_and_first_column_wins():
    role_map = infer_roles(["TRANSFER DATE", "Posting date", "AMOUNT (THB)"])
    assert role_map.index(Role.DATE) == 0
    assert role_map.index(Role.AMOUNT) == 2


def test_pure_digits_are_not_sniffed_as_date():
    role_map = infer_roles(["A", "B", "C"], ["20260109", "2026-01-09", "99"])
    assert role_map.index(Role.DATE) == 1
    assert role_map.index(Role.AMOUNT) == 0


def test_sniff_keeps_keyword_resolution():
    role_map = infer_roles(["X", "Date", "Y"], ["01/01/2020", "garbage", "1,500.00"])
    assert role_map.index(Role.DATE) == 1
    assert role_map.resolution(Role.DATE) is Resolution.KEYWORD
    assert role_map.index(Role.AMOUNT) == 2
    assert role_map.resolution(Role.AMOUNT) is Resolution.SNIFF


def test_no_data_row_means_positional_defaults():
    role_map = infer_roles(["foo", "bar"])
    for role, idx in DEFAULT_POSITIONS.items():
        assert role_map.index(role) == idx
        assert role_map.resolution(role) is Resolution.DEFAULT


def test_default_indices_are_total_even_for_short_rows():
    role_map = infer_roles([], ["only", "two"])
    assert role_map.cell(["only", "two"], Role.NOTE) == ""
    assert role_map.index(Role.NOTE) == 6


@pytest.mark.parametrize("cell", ["09/01/2026", "9-1-69", "2026-01-09", "2026/1/9"])
def test_date_shapes(cell):
    assert looks_like_date(cell)


@pytest.mark.parametrize("cell", ["20260109", "150", "1/2", "abc", ""])
def test_not_date_shapes(cell):
    assert not looks_like_date(cell)


@pytest.mark.parametrize("cell", ["150", "1,500.00", "-20", "฿1,200", "3.5"])
def test_amount_shapes(cell):
    assert looks_like_amount(cell)


@pytest.mark.parametrize("cell", ["", "abc", "1,50", "09/01/2026", "12:30"])
def test_not_amount_shapes(cell):
    assert not looks_like_amount(cell)


def test_keywords_match_substrings_and_leftmost_column_wins():
    role_map = infer_roles(["Statement no", "Subtotal", "Amount", "Payment date"])
    assert role_map.index(Role.AMOUNT) == 1
    assert role_map.index(Role.DATE) == 3
    assert role_map.resolution(Role.AMOUNT) is Resolution.KEYWORD
