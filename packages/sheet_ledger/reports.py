"""Aggregations over ingested records for dashboards and summaries.

All grouping uses the Gregorian ``occurred_at`` instant; labels are rendered
in the Buddhist era for display only.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Literal

from .dates import BE_OFFSET
from .models import UNCATEGORIZED, SheetConfig, TransactionRecord

type TrendView = Literal["daily", "monthly", "yearly"]

THAI_MONTHS_SHORT: tuple[str, ...] = (
    "ม.ค.",
    "ก.พ.",
    "มี.ค.",
    "เม.ย.",
    "พ.ค.",
    "มิ.ย.",
    "ก.ค.",
    "ส.ค.",
    "ก.ย.",
    "ต.ค.",
    "พ.ย.",
    "ธ.ค.",
)


@dataclass(frozen=True, slots=True)
class CategoryTotal:
    name: str
    value: float


@dataclass(frozen=True, slots=True)
class TrendPoint:
    key: str
    label: str
    amount: float
    period_start: datetime


@dataclass(frozen=True, slots=True)
class SheetSummary:
    index: int
    name: str
    url: str
    total: float
    count: int

    @property
    def has_match(self) -> bool:
        return self.count > 0


def total_amount(records: Iterable[TransactionRecord]) -> float:
    return sum(r.amount for r in records)


def category_totals(records: Iterable[TransactionRecord]) -> list[CategoryTotal]:
    """Sum amounts per category, largest first."""

    sums: dict[str, float] = defaultdict(float)
    for r in records:
        sums[r.category or UNCATEGORIZED] += r.amount
    return sorted(
        (CategoryTotal(name, value) for name, value in sums.items()),
        key=lambda c: c.value,
        reverse=True,
    )


def date_key(value: datetime, view: TrendView) -> str:
    """Stable grouping key for ``value`` at the given granularity."""

    if view == "daily":
        return f"{value.year}-{value.month:02d}-{value.day:02d}"
    if view == "monthly":
        return f"{value.year}-{value.month:02d}"
    if view == "yearly":
        return f"{value.year}"
    raise ValueError(f"unknown trend view: {view!r}")


def _period(value: datetime, view: TrendView) -> tuple[datetime, str]:
    be_year = value.year + BE_OFFSET
    if view == "daily":
        start = datetime(value.year, value.month, value.day)
        return start, f"{value.day:02d}/{value.month:02d}/{str(be_year)[-2:]}"
    if view == "monthly":
        start = datetime(value.year, value.month, 1)
        return start, f"{THAI_MONTHS_SHORT[value.month - 1]} {str(be_year)[-2:]}"
    start = datetime(value.year, 1, 1)
    return start, str(be_year)


def trend(records: Iterable[TransactionRecord], view: TrendView = "daily") -> list[TrendPoint]:
    """Total amount per day/month/year, oldest period first."""

    buckets: dict[str, list] = {}
    for r in records:
        key = date_key(r.occurred_at, view)
        if key not in buckets:
            start, label = _period(r.occurred_at, view)
            buckets[key] = [label, 0.0, start]
        buckets[key][1] += r.amount
    points = [
        TrendPoint(key=k, label=label, amount=amount, period_start=start)
        for k, (label, amount, start) in buckets.items()
    ]
    points.sort(key=lambda p: p.period_start)
    return points


def filter_records(
    records: Iterable[TransactionRecord],
    *,
    source_index: int | None = None,
    category: str | None = None,
    date_key_value: str | None = None,
    view: TrendView = "daily",
) -> list[TransactionRecord]:
    """Keep records matching every given filter (``None`` means "any")."""

    out: list[TransactionRecord] = []
    for r in records:
        if source_index is not None and r.source_index != source_index:
            continue
        if category is not None and (r.category or UNCATEGORIZED) != category:
            continue
        if date_key_value is not None and date_key(r.occurred_at, view) != date_key_value:
            continue
        out.append(r)
    return out


def sheet_summaries(
    sheets: Sequence[SheetConfig],
    records: Sequence[TransactionRecord],
    *,
    category: str | None = None,
    date_key_value: str | None = None,
    view: TrendView = "daily",
) -> list[SheetSummary]:
    """Per-sheet totals under the active category/period filters."""

    out: list[SheetSummary] = []
    for idx, sheet in enumerate(sheets):
        matching = filter_records(
            records,
            source_index=idx,
            category=category,
            date_key_value=date_key_value,
            view=view,
        )
        out.append(
            SheetSummary(
                index=idx,
                name=sheet.name,
                url=sheet.url,
                total=total_amount(matching),
                count=len(matching),
            )
        )
    return out


__all__ = [
    "THAI_MONTHS_SHORT",
    "CategoryTotal",
    "SheetSummary",
    "TrendPoint",
    "TrendView",
    "category_totals",
    "date_key",
    "filter_records",
    "sheet_summaries",
    "total_amount",
    "trend",
]
