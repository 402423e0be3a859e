"""Column role inference for header-optional spreadsheets.

Roles are resolved per source in three tiers, each tagged on the result:

1. ``keyword``: header text contains a known Thai/English keyword for the
   role (case-insensitive); the first matching column wins.
2. ``sniff``: only when ``date`` or ``amount`` is still unresolved and a first
   data row exists, the shape of that row's cells decides. Keyword results
   are never overwritten.
3. ``default``: fixed positions for sheets with no usable header at all.

The result is always total, see :class:`~sheet_ledger.models.RoleMap`.
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence

from .logging_setup import get_logger
from .models import Resolution, Role, RoleAssignment, RoleMap

# Substring match on the lowered header, so "Subtotal" and "Total (THB)" both
# read as amount. Within a role the left-most matching column wins; roles are
# matched independently, so one column may satisfy two roles.
ROLE_KEYWORDS: Mapping[Role, tuple[str, ...]] = {
    Role.AMOUNT: ("amount", "amt", "total", "price", "จำนวน", "ยอด", "ราคา"),
    Role.DATE: ("date", "วันที่", "วันเดือนปี"),
    Role.TIME: ("time", "เวลา"),
    Role.NOTE: ("note", "memo", "remark", "บันทึก", "หมายเหตุ"),
    Role.CATEGORY: ("receiver", "payee", "category", "ผู้รับ", "หมวด", "ประเภท"),
}

DEFAULT_POSITIONS: Mapping[Role, int] = {
    Role.CATEGORY: 2,
    Role.AMOUNT: 3,
    Role.DATE: 4,
    Role.TIME: 5,
    Role.NOTE: 6,
}

# d/m/y (or d-m-y) and y/m/d; a separator is mandatory so bare numbers never
# read as dates.
_DATE_SHAPE_RE = re.compile(r"^(?:\d{1,2}[/-]\d{1,2}[/-]\d{2,4}|\d{4}[/-]\d{1,2}[/-]\d{1,2})$")
_AMOUNT_SHAPE_RE = re.compile(r"^[+-]?\s*[฿$€£¥]?\s*(?:\d{1,3}(?:,\d{3})+|\d+)(?:\.\d+)?$")

_logger = get_logger("sheet_ledger.roles")


def _match_keywords(header: Sequence[str]) -> dict[Role, int]:
    lowered = [str(h or "").strip().lower() for h in header]
    found: dict[Role, int] = {}
    for role, keywords in ROLE_KEYWORDS.items():
        for idx, text in enumerate(lowered):
            if text and any(k in text for k in keywords):
                found[role] = idx
                break
    return found


def looks_like_date(cell: str) -> bool:
    return bool(_DATE_SHAPE_RE.match(cell.strip()))


def looks_like_amount(cell: str) -> bool:
    return bool(_AMOUNT_SHAPE_RE.match(cell.strip()))


def _sniff(first_row: Sequence[str], resolved: Mapping[Role, int]) -> dict[Role, int]:
    found: dict[Role, int] = {}
    if Role.DATE not in resolved:
        for idx, cell in enumerate(first_row):
            if looks_like_date(cell):
                found[Role.DATE] = idx
                break
    if Role.AMOUNT not in resolved:
        date_idx = found.get(Role.DATE, resolved.get(Role.DATE))
        for idx, cell in enumerate(first_row):
            if idx == date_idx:
                continue
            if looks_like_amount(cell):
                found[Role.AMOUNT] = idx
                break
    return found


def infer_roles(header: Sequence[str], first_row: Sequence[str] | None = None) -> RoleMap:
    """Resolve every :class:`Role` to a column index for one source."""

    assignments: dict[Role, RoleAssignment] = {
        role: RoleAssignment(idx, Resolution.KEYWORD)
        for role, idx in _match_keywords(header).items()
    }

    needs_sniff = Role.DATE not in assignments or Role.AMOUNT not in assignments
    if needs_sniff and first_row:
        resolved = {role: a.index for role, a in assignments.items()}
        for role, idx in _sniff(first_row, resolved).items():
            assignments[role] = RoleAssignment(idx, Resolution.SNIFF)

    for role, idx in DEFAULT_POSITIONS.items():
        assignments.setdefault(role, RoleAssignment(idx, Resolution.DEFAULT))

    role_map = RoleMap(assignments)
    _logger.debug(
        "Inferred roles: %s",
        ", ".join(
            f"{r.value}={role_map.index(r)}({role_map.resolution(r).value})" for r in Role
        ),
    )
    return role_map


__all__ = [
    "DEFAULT_POSITIONS",
    "ROLE_KEYWORDS",
    "infer_roles",
    "looks_like_amount",
    "looks_like_date",
]
