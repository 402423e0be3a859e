"""Public interface for the ``sheet_ledger`` package.

Re-exports only; no runtime logic lives here.
"""

from .amounts import normalize_amount
from .api import IngestOutcome, load_transactions
from .csv_text import parse_csv
from .dates import format_display_date, resolve_date, scan_label_date
from .ingest import ingest_sheets, merge_records
from .models import (
    UNCATEGORIZED,
    UNSPECIFIED,
    Resolution,
    Role,
    RoleMap,
    SheetConfig,
    StoreInfo,
    TransactionRecord,
)
from .records import build_records, records_from_csv
from .roles import infer_roles
from .sources import SourceFetchError, fetch_text, load_source, resolve_csv_url

__all__ = [
    # Core
    "parse_csv",
    "normalize_amount",
    "resolve_date",
    "scan_label_date",
    "format_display_date",
    "infer_roles",
    "build_records",
    "records_from_csv",
    # Sources / ingestion
    "resolve_csv_url",
    "fetch_text",
    "load_source",
    "ingest_sheets",
    "merge_records",
    "load_transactions",
    "SourceFetchError",
    # Models
    "IngestOutcome",
    "Resolution",
    "Role",
    "RoleMap",
    "SheetConfig",
    "StoreInfo",
    "TransactionRecord",
    "UNCATEGORIZED",
    "UNSPECIFIED",
]
