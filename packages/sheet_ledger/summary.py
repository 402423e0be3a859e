"""AI-written spending summary via the OpenAI Responses API.

Public API:
    - :func:`summarize_spending`

The summary is a convenience for the store owner, not part of ingestion, so
every failure (missing key, network, SDK shape) is logged and replaced by a
fixed fallback message. No client is created at import time.
"""

from __future__ import annotations

import json
import os
from collections.abc import Sequence
from typing import Any

from openai import OpenAI

from .logging_setup import get_logger
from .models import TransactionRecord
from .reports import category_totals, total_amount

_MODEL_ENV = "SHEET_LEDGER_SUMMARY_MODEL"
_DEFAULT_MODEL = "gpt-5"
_SAMPLE_SIZE = 20

NO_ANALYSIS_MESSAGE = "ไม่สามารถวิเคราะห์ข้อมูลได้ในขณะนี้"
ERROR_MESSAGE = "เกิดข้อผิดพลาดในการเชื่อมต่อกับ AI (Error connecting to AI Analysis)."

INSTRUCTIONS = (
    "Act as a financial analyst for a retail store owner in Thailand. "
    "Analyze the expense data you are given and answer in Thai (ภาษาไทย). "
    "Provide: 1. a summary of the spending habits; 2. the biggest cost drivers; "
    "3. anomalies or unusual spending, if any are obvious in the sample; "
    "4. two or three actionable tips to reduce costs based on these categories. "
    "Keep the tone professional yet encouraging for a small business owner and "
    "format the answer with clear headings and bullet points."
)

_logger = get_logger("sheet_ledger.summary")


def build_user_input(records: Sequence[TransactionRecord]) -> str:
    """Render the data context block sent alongside :data:`INSTRUCTIONS`."""

    totals = [{"name": c.name, "value": c.value} for c in category_totals(records)]
    sample = [r.to_dict() for r in records[:_SAMPLE_SIZE]]
    return (
        f"Total Spending: {total_amount(records):,.2f} THB\n"
        f"Top Categories: {json.dumps(totals, ensure_ascii=False)}\n"
        f"Recent Transactions Sample: {json.dumps(sample, ensure_ascii=False)}"
    )


def _response_text(resp: Any) -> str | None:
    text = getattr(resp, "output_text", None)
    if isinstance(text, str) and text.strip():
        return text
    return None


def summarize_spending(
    records: Sequence[TransactionRecord],
    *,
    client: Any | None = None,
    model: str | None = None,
) -> str:
    """Ask the model for a Thai-language spending analysis of ``records``.

    ``records`` should be newest first, as returned by ingestion; only the
    first 20 are sent as a sample.
    """

    try:
        api = client if client is not None else OpenAI()
        resp = api.responses.create(
            model=model or os.getenv(_MODEL_ENV) or _DEFAULT_MODEL,
            instructions=INSTRUCTIONS,
            input=build_user_input(records),
        )
    except Exception as e:  # noqa: BLE001 - summary is best-effort
        _logger.error("Spending summary failed: %s", e)
        return ERROR_MESSAGE
    return _response_text(resp) or NO_ANALYSIS_MESSAGE


__all__ = ["ERROR_MESSAGE", "INSTRUCTIONS", "NO_ANALYSIS_MESSAGE", "summarize_spending"]
