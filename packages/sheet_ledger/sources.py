"""Sheet references to CSV endpoints, retrieval, and the per-source pipeline.

Accepted references:

- a standard editable Google Sheets link
  (``https://docs.google.com/spreadsheets/d/<id>/edit#gid=<tab>``), rewritten
  to the ``/export?format=csv`` endpoint;
- a "published to web" link (``.../spreadsheets/d/e/<key>/pubhtml?gid=<tab>``),
  rewritten to ``/pub`` with ``output=csv``;
- a bare document id (no slashes, at least :data:`MIN_BARE_ID_LENGTH` chars).

Anything else is unresolvable. :func:`load_source` turns every per-source
problem (bad reference, network error, empty payload) into an empty result
plus a log line so sibling sources are never affected.
"""

from __future__ import annotations

import re
import urllib.error
import urllib.request
from collections.abc import Callable
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from .logging_setup import get_logger
from .models import SheetConfig, TransactionRecord
from .records import records_from_csv

EXPORT_URL_TEMPLATE = "https://docs.google.com/spreadsheets/d/{doc_id}/export?format=csv"
MIN_BARE_ID_LENGTH = 20

_DOC_ID_RE = re.compile(r"/d/([a-zA-Z0-9_-]+)")
_GID_RE = re.compile(r"[#&?]gid=([0-9]+)")
_BARE_ID_RE = re.compile(r"^[a-zA-Z0-9_-]+$")
_PUBLISHED_PATH_RE = re.compile(r"/pub(?:html)?/?$")

type Fetcher = Callable[[str], str]

_logger = get_logger("sheet_ledger.sources")


class SourceFetchError(RuntimeError):
    """Raised when a CSV endpoint cannot be read."""


# ---------------------------------------------------------------------------
# Reference resolution
# ---------------------------------------------------------------------------


def _published_csv_url(ref: str, gid: str | None) -> str:
    parts = urlsplit(ref)
    path = _PUBLISHED_PATH_RE.sub("/pub", parts.path)
    query = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k != "output"]
    if not any(k == "gid" for k, _ in query):
        frag = _GID_RE.search("#" + parts.fragment) if parts.fragment else None
        tab = gid or (frag.group(1) if frag else None)
        if tab:
            query.append(("gid", tab))
    query.append(("output", "csv"))
    return urlunsplit((parts.scheme, parts.netloc, path, urlencode(query), ""))


def resolve_csv_url(ref: str | None, gid: str | int | None = None) -> str | None:
    """Return the CSV endpoint for ``ref`` or ``None`` when it is unrecognized.

    ``gid`` selects a sheet tab; when given it takes precedence over a tab
    embedded in a standard link.
    """

    if not ref or not ref.strip():
        return None
    ref = ref.strip()
    tab = str(gid).strip() if gid is not None and str(gid).strip() else None

    parts = urlsplit(ref)
    if parts.scheme and _PUBLISHED_PATH_RE.search(parts.path):
        return _published_csv_url(ref, tab)

    m = _DOC_ID_RE.search(ref)
    if m:
        doc_id = m.group(1)
        if tab is None:
            g = _GID_RE.search(ref)
            tab = g.group(1) if g else None
    elif "/" not in ref and len(ref) >= MIN_BARE_ID_LENGTH and _BARE_ID_RE.match(ref):
        doc_id = ref
    else:
        return None

    url = EXPORT_URL_TEMPLATE.format(doc_id=doc_id)
    if tab:
        url += f"&gid={tab}"
    return url


# ---------------------------------------------------------------------------
# Retrieval
# ---------------------------------------------------------------------------


def fetch_text(url: str, *, timeout: float | None = None) -> str:
    """GET ``url`` and return the body as text.

    Raises :class:`SourceFetchError` on network errors and non-success
    responses.
    """

    req = urllib.request.Request(url, method="GET")
    req.add_header("Accept", "text/csv")
    try:
        if timeout is None:
            resp_cm = urllib.request.urlopen(req)
        else:
            resp_cm = urllib.request.urlopen(req, timeout=timeout)
        with resp_cm as resp:
            status = getattr(resp, "status", 200)
            if not 200 <= status < 300:
                raise SourceFetchError(f"GET {url} returned status {status}")
            body = resp.read()
    except urllib.error.HTTPError as e:
        raise SourceFetchError(f"GET {url} failed: {e.code} {e.reason}") from e
    except urllib.error.URLError as e:
        raise SourceFetchError(f"GET {url} failed: {e.reason}") from e
    return body.decode("utf-8-sig", errors="replace")


# ---------------------------------------------------------------------------
# Per-source pipeline
# ---------------------------------------------------------------------------


def load_source(
    sheet: SheetConfig,
    source_index: int,
    *,
    gid: str | None = None,
    fetch: Fetcher | None = None,
) -> list[TransactionRecord]:
    """Resolve, fetch and parse one configured sheet.

    Returns an empty list (and logs why) when the reference cannot be
    resolved, the fetch fails, or the payload has no rows.
    """

    url = resolve_csv_url(sheet.url, gid)
    if url is None:
        _logger.warning("Source %d: unrecognized sheet reference %r", source_index, sheet.url)
        return []

    fetcher = fetch or fetch_text
    try:
        text = fetcher(url)
    except Exception as e:  # noqa: BLE001 - one source must never sink the rest
        _logger.warning("Source %d: failed to fetch %s: %s", source_index, url, e)
        return []

    records = records_from_csv(text, source_index=source_index, source_label=sheet.name)
    if not records:
        _logger.info("Source %d (%s): no transactions found", source_index, sheet.name or url)
    else:
        _logger.info(
            "Source %d (%s): %d transaction(s)", source_index, sheet.name or url, len(records)
        )
    return records


__all__ = [
    "EXPORT_URL_TEMPLATE",
    "MIN_BARE_ID_LENGTH",
    "Fetcher",
    "SourceFetchError",
    "fetch_text",
    "load_source",
    "resolve_csv_url",
]
