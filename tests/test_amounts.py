import pytest

from sheet_ledger import normalize_amount


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("1,250.50", 1250.5),
        ("฿1,200", 1200.0),
        ('"3,000"', 3000.0),
        ("  45 ", 45.0),
        ("1 234", 1234.0),
        ("-75.25", -75.25),
        ("$ 9.99", 9.99),
        ("500 บาท", 500.0),
        ("THB 80", 80.0),
        ("12abc", 12.0),
    ],
)
def test_cleans_formatting(raw, expected):
    assert normalize_amount(raw) == pytest.approx(expected)


@pytest.mark.parametrize(
    "raw",
    [
        "",
        "฿",
        "$€",
        "n/a",
        "abc",
        "--",
        ".",
        "inf",
        "nan",
        "1e999",
        None,
        "9" * 5000,
        "1e" + "9" * 5000,
    ],
)
def test_garbage_is_zero_and_never_raises(raw):
    assert normalize_amount(raw) == 0.0
