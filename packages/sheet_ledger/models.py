"""Data models for ``sheet_ledger``.

Two families live here:

- Ingestion types (``Role``, ``Resolution``, ``RoleMap``, ``TransactionRecord``)
  are plain frozen dataclasses/enums. They are produced by the parsing core and
  never mutated afterwards.
- Settings DTOs (``SheetConfig``, ``StoreInfo``) are pydantic models because
  they cross the boundary to the key-value settings stores and must tolerate
  loosely shaped payloads written by older versions of the app.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# Sentinels for fields that must never be empty.
UNCATEGORIZED = "อื่นๆ (Others)"
UNSPECIFIED = "ไม่ระบุรายละเอียด"


# ---------------------------------------------------------------------------
# Column roles
# ---------------------------------------------------------------------------


class Role(StrEnum):
    """Semantic meaning of a spreadsheet column."""

    DATE = "date"
    TIME = "time"
    AMOUNT = "amount"
    NOTE = "note"
    CATEGORY = "category"


class Resolution(StrEnum):
    """Which inference tier assigned a column to a role."""

    KEYWORD = "keyword"
    SNIFF = "sniff"
    DEFAULT = "default"


@dataclass(frozen=True, slots=True)
class RoleAssignment:
    index: int
    resolution: Resolution


@dataclass(frozen=True, slots=True)
class RoleMap:
    """Total mapping from every :class:`Role` to a zero-based column index.

    An index may be out of range for a particular (short) row; :meth:`cell`
    reads such cells as the empty string.
    """

    assignments: Mapping[Role, RoleAssignment]

    def __post_init__(self) -> None:
        missing = [r.value for r in Role if r not in self.assignments]
        if missing:
            raise ValueError(f"RoleMap is missing roles: {', '.join(missing)}")

    def index(self, role: Role) -> int:
        return self.assignments[role].index

    def resolution(self, role: Role) -> Resolution:
        return self.assignments[role].resolution

    def cell(self, row: Sequence[str], role: Role) -> str:
        idx = self.index(role)
        if 0 <= idx < len(row):
            return row[idx]
        return ""


# ---------------------------------------------------------------------------
# Canonical output record
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class TransactionRecord:
    """A single normalized transaction.

    ``occurred_at`` is the canonical, sortable instant (Gregorian, naive local
    time). ``display_date`` is the Buddhist-era ``DD/MM/YYYY`` rendering of the
    same instant and is meant for people only; never sort or group by it.
    """

    id: str
    occurred_at: datetime
    display_date: str
    category: str
    amount: float
    description: str
    source_index: int
    source_label: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "occurred_at": self.occurred_at.isoformat(),
            "display_date": self.display_date,
            "category": self.category,
            "amount": self.amount,
            "description": self.description,
            "source_index": self.source_index,
            "source_label": self.source_label,
        }


# ---------------------------------------------------------------------------
# Settings DTOs
# ---------------------------------------------------------------------------


class SheetConfig(BaseModel):
    """A configured spreadsheet source: a reference plus a display name.

    ``last_modified`` is epoch milliseconds, matching what the hosted settings
    store has always held (stored under the camelCase ``lastModified`` key).
    """

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    url: str
    name: str = ""
    last_modified: int | None = Field(default=None, alias="lastModified")

    def to_store(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class StoreInfo(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = ""
    branch: str = ""


__all__ = [
    "UNCATEGORIZED",
    "UNSPECIFIED",
    "Role",
    "Resolution",
    "RoleAssignment",
    "RoleMap",
    "TransactionRecord",
    "SheetConfig",
    "StoreInfo",
]
