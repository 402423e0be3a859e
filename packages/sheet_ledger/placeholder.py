"""Deterministic demo transactions shown when no sheet yields any data."""

from __future__ import annotations

from .dates import resolve_date
from .models import TransactionRecord

PLACEHOLDER_SOURCE_INDEX = -1
PLACEHOLDER_LABEL = "ข้อมูลตัวอย่าง"

# (BE display date, category, amount, description)
_ROWS: tuple[tuple[str, str, float, str], ...] = (
    ("09/01/2569", "วัตถุดิบ (Raw Materials)", 5400, "ซื้อผักและเนื้อสัตว์ตลาดเช้า"),
    ("09/01/2569", "ค่าแรง (Wages)", 1200, "ค่าแรงพนักงานพาร์ทไทม์"),
    ("09/01/2569", "บรรจุภัณฑ์ (Packaging)", 850, "ถุงพลาสติกและกล่องข้าว"),
    ("08/01/2569", "วัตถุดิบ (Raw Materials)", 4200, "ซื้อของสดเพิ่ม"),
    ("08/01/2569", "สาธารณูปโภค (Utilities)", 3500, "ค่าแก๊สหุงต้ม"),
    ("07/01/2569", "วัตถุดิบ (Raw Materials)", 6100, "สต็อกของแห้งประจำสัปดาห์"),
    ("07/01/2569", "ค่าขนส่ง (Logistics)", 300, "ค่าส่ง GrabExpress"),
    ("07/01/2569", "ค่าแรง (Wages)", 1200, "ค่าแรงพนักงานพาร์ทไทม์"),
    ("06/01/2569", "ซ่อมบำรุง (Maintenance)", 1500, "ซ่อมท่อน้ำซิงค์ล้างจาน"),
    ("06/01/2569", "วัตถุดิบ (Raw Materials)", 2200, "ซื้อไข่ไก่และข้าวสาร"),
    ("05/01/2569", "วัตถุดิบ (Raw Materials)", 4800, "ซื้อผักสด"),
    ("05/01/2569", "การตลาด (Marketing)", 1000, "ยิงโฆษณา Facebook"),
    ("04/01/2569", "ค่าเช่า (Rent)", 15000, "ค่าเช่าที่ประจำเดือน"),
    ("04/01/2569", "เบ็ดเตล็ด (Misc)", 500, "อุปกรณ์ทำความสะอาด"),
)


def placeholder_records() -> list[TransactionRecord]:
    """Return the demo set, newest first (ids ``tx-0`` .. ``tx-13``)."""

    return [
        TransactionRecord(
            id=f"tx-{i}",
            occurred_at=resolve_date(display),
            display_date=display,
            category=category,
            amount=float(amount),
            description=description,
            source_index=PLACEHOLDER_SOURCE_INDEX,
            source_label=PLACEHOLDER_LABEL,
        )
        for i, (display, category, amount, description) in enumerate(_ROWS)
    ]


__all__ = ["PLACEHOLDER_LABEL", "PLACEHOLDER_SOURCE_INDEX", "placeholder_records"]
