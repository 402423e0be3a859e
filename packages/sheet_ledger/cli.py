# ruff: noqa: I001
"""CLI for the ``sheet_ledger`` package.

Command handlers (``cmd_*``) hold the logic and return a process exit code;
the Typer commands below are thin wrappers. Environment variables (notably
``DATABASE_URL`` and ``OPENAI_API_KEY``) are loaded from a local ``.env`` via
``python-dotenv`` in the root callback, which also configures logging.

Sheet references can be given as arguments; otherwise the configured sheet
list from the settings service is used.
"""

from __future__ import annotations

import json
import sys
from collections.abc import Sequence
from enum import Enum
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table
from typer.models import OptionInfo

from .logging_setup import configure_logging
from .models import SheetConfig, StoreInfo, TransactionRecord
from .settings import SettingsService, build_settings_service

app = typer.Typer(help="Normalize spreadsheet transaction exports.", no_args_is_help=False)
sheets_app = typer.Typer(help="Manage the configured sheet list.")
store_app = typer.Typer(help="Manage store identity and logo.")
app.add_typer(sheets_app, name="sheets")
app.add_typer(store_app, name="store")

console = Console()


class TrendViewChoice(str, Enum):
    daily = "daily"
    monthly = "monthly"
    yearly = "yearly"


# ---- Small module-level helpers ----------------------------------------------


def _settings(ctx: typer.Context | None) -> SettingsService:
    database_url = None
    if ctx is not None and isinstance(ctx.obj, dict):
        database_url = ctx.obj.get("database_url")
    return build_settings_service(database_url=database_url)


def _sheets_from_refs(refs: Sequence[str] | None, ctx: typer.Context) -> list[SheetConfig]:
    """Ad-hoc references from the command line, else the configured sheet list."""

    if refs:
        return [SheetConfig(url=r, name=f"Sheet {i + 1}") for i, r in enumerate(refs)]
    return _settings(ctx).load_sheets()


def _print_records(records: Sequence[TransactionRecord], *, as_json: bool) -> None:
    if as_json:
        for r in records:
            typer.echo(json.dumps(r.to_dict(), ensure_ascii=False))
        return
    table = Table(title=f"{len(records)} transaction(s)")
    table.add_column("Date")
    table.add_column("Category")
    table.add_column("Description")
    table.add_column("Amount", justify="right")
    table.add_column("Source")
    for r in records:
        table.add_row(
            r.display_date,
            r.category,
            r.description,
            f"{r.amount:,.2f}",
            r.source_label or str(r.source_index),
        )
    console.print(table)


# ---- Command handlers ---------------------------------------------------------


def cmd_ingest(
    sheets: Sequence[SheetConfig], *, as_json: bool = False, limit: int | None = None
) -> int:
    """Ingest ``sheets`` and print the merged records (newest first)."""

    from .api import load_transactions

    outcome = load_transactions(sheets)
    if outcome.notice:
        print(f"Notice: {outcome.notice}", file=sys.stderr)
    elif outcome.using_placeholder:
        print("Notice: no sheets configured; showing placeholder data", file=sys.stderr)
    records = outcome.records[:limit] if limit else outcome.records
    _print_records(records, as_json=as_json)
    return 0


def cmd_parse_file(
    csv_path: str, *, label: str = "", source_index: int = 0, as_json: bool = False
) -> int:
    """Run the parsing core over a local CSV file."""

    from .ingest import merge_records
    from .records import records_from_csv

    try:
        with open(csv_path, encoding="utf-8-sig", newline="") as f:
            text = f.read()
    except FileNotFoundError:
        print(f"Error: File not found: {csv_path}", file=sys.stderr)
        return 1
    except PermissionError:
        print(f"Error: Permission denied: {csv_path}", file=sys.stderr)
        return 1
    except UnicodeDecodeError as e:
        print(f"Error: '{csv_path}' is not UTF-8 text: {e}", file=sys.stderr)
        return 1

    records = merge_records([records_from_csv(text, source_index=source_index, source_label=label)])
    _print_records(records, as_json=as_json)
    return 0


def cmd_resolve_url(ref: str, *, gid: str | None = None) -> int:
    from .sources import resolve_csv_url

    url = resolve_csv_url(ref, gid)
    if url is None:
        print(f"Error: unrecognized sheet reference: {ref!r}", file=sys.stderr)
        return 1
    typer.echo(url)
    return 0


def cmd_report(sheets: Sequence[SheetConfig], *, view: str = "monthly") -> int:
    """Print category totals and the spending trend."""

    from .api import load_transactions
    from .reports import category_totals, sheet_summaries, total_amount, trend

    outcome = load_transactions(sheets)
    if outcome.notice:
        print(f"Notice: {outcome.notice}", file=sys.stderr)
    records = outcome.records

    console.print(f"Total: {total_amount(records):,.2f} THB ({len(records)} transaction(s))")

    cats = Table(title="By category")
    cats.add_column("Category")
    cats.add_column("Amount", justify="right")
    for c in category_totals(records):
        cats.add_row(c.name, f"{c.value:,.2f}")
    console.print(cats)

    points = Table(title=f"Trend ({view})")
    points.add_column("Period")
    points.add_column("Amount", justify="right")
    for p in trend(records, view):  # type: ignore[arg-type]
        points.add_row(p.label, f"{p.amount:,.2f}")
    console.print(points)

    if not outcome.using_placeholder:
        per_sheet = Table(title="By sheet")
        per_sheet.add_column("#", justify="right")
        per_sheet.add_column("Sheet")
        per_sheet.add_column("Count", justify="right")
        per_sheet.add_column("Amount", justify="right")
        for s in sheet_summaries(sheets, records):
            per_sheet.add_row(str(s.index), s.name or s.url, str(s.count), f"{s.total:,.2f}")
        console.print(per_sheet)
    return 0


def cmd_summarize(sheets: Sequence[SheetConfig]) -> int:
    """Print an AI-written spending analysis of the ingested records."""

    import os

    from .api import load_transactions
    from .summary import summarize_spending

    if not os.getenv("OPENAI_API_KEY"):
        print("Error: OPENAI_API_KEY is not set in the environment.", file=sys.stderr)
        return 1

    outcome = load_transactions(sheets)
    if outcome.notice:
        print(f"Notice: {outcome.notice}", file=sys.stderr)
    text = summarize_spending(outcome.records)
    console.print(Panel(Markdown(text), title="Spending Summary", border_style="green"))
    return 0


def cmd_sheets_list(service: SettingsService) -> int:
    sheets = service.load_sheets()
    for idx, s in enumerate(sheets):
        typer.echo(f"{idx}\t{s.name}\t{s.url}")
    return 0


def cmd_sheets_add(service: SettingsService, url: str, *, name: str | None = None) -> int:
    import time

    from .sources import resolve_csv_url

    if resolve_csv_url(url) is None:
        print(f"Error: unrecognized sheet reference: {url!r}", file=sys.stderr)
        return 1
    sheets = service.load_sheets()
    final_name = (name or "").strip() or f"Sheet {len(sheets) + 1}"
    now_ms = int(time.time() * 1000)
    sheets.append(SheetConfig(url=url.strip(), name=final_name, last_modified=now_ms))
    synced = service.save_sheets(sheets)
    sync_note = "yes" if synced else "no"
    typer.echo(f"Added {final_name!r} ({len(sheets)} sheet(s); remote sync: {sync_note})")
    return 0


def cmd_sheets_remove(service: SettingsService, index: int) -> int:
    sheets = service.load_sheets()
    if not 0 <= index < len(sheets):
        print(f"Error: no sheet at index {index} (have {len(sheets)})", file=sys.stderr)
        return 1
    removed = sheets.pop(index)
    service.save_sheets(sheets)
    typer.echo(f"Removed {removed.name or removed.url!r}")
    return 0


def cmd_store_show(service: SettingsService) -> int:
    info = service.load_store_info()
    typer.echo(f"name\t{info.name}")
    typer.echo(f"branch\t{info.branch}")
    typer.echo(f"logo\t{service.load_logo_url() or ''}")
    return 0


# ---- Typer commands -----------------------------------------------------------

# Module-level option object to satisfy ruff B008 (no calls in parameter
# defaults).
CSV_PATH_OPTION: OptionInfo = typer.Option(
    ...,
    "--csv-path",
    help="Path to a CSV export to parse",
    dir_okay=False,
    file_okay=True,
    exists=False,  # the handler reports missing files itself
)

RefsArgument = Annotated[
    list[str] | None,
    typer.Argument(help="Sheet URLs or ids; defaults to the configured sheet list."),
]


@app.command("ingest")
def ingest_cmd(
    ctx: typer.Context,
    refs: RefsArgument = None,
    *,
    as_json: bool = typer.Option(False, "--json", help="Emit one JSON object per line."),
    limit: int | None = typer.Option(None, help="Print at most N records."),
) -> None:
    sheets = _sheets_from_refs(refs, ctx)
    raise typer.Exit(cmd_ingest(sheets, as_json=as_json, limit=limit))


@app.command("parse-file")
def parse_file_cmd(
    csv_path: Annotated[Path, CSV_PATH_OPTION],
    *,
    label: str = typer.Option("", help="Source label; a date inside it overrides row dates."),
    source_index: int = typer.Option(0, help="Source index embedded in record ids."),
    as_json: bool = typer.Option(False, "--json", help="Emit one JSON object per line."),
) -> None:
    raise typer.Exit(
        cmd_parse_file(str(csv_path), label=label, source_index=source_index, as_json=as_json)
    )


@app.command("resolve-url")
def resolve_url_cmd(
    ref: str,
    *,
    gid: str | None = typer.Option(None, help="Sheet tab id to append."),
) -> None:
    raise typer.Exit(cmd_resolve_url(ref, gid=gid))


@app.command("report")
def report_cmd(
    ctx: typer.Context,
    refs: RefsArgument = None,
    *,
    view: TrendViewChoice = typer.Option(TrendViewChoice.monthly, help="Trend granularity."),
) -> None:
    sheets = _sheets_from_refs(refs, ctx)
    raise typer.Exit(cmd_report(sheets, view=view.value))


@app.command("summarize")
def summarize_cmd(ctx: typer.Context, refs: RefsArgument = None) -> None:
    sheets = _sheets_from_refs(refs, ctx)
    raise typer.Exit(cmd_summarize(sheets))


@sheets_app.command("list")
def sheets_list_cmd(ctx: typer.Context) -> None:
    raise typer.Exit(cmd_sheets_list(_settings(ctx)))


@sheets_app.command("add")
def sheets_add_cmd(
    ctx: typer.Context,
    url: str,
    *,
    name: str | None = typer.Option(None, help="Display name (defaults to 'Sheet N')."),
) -> None:
    raise typer.Exit(cmd_sheets_add(_settings(ctx), url, name=name))


@sheets_app.command("remove")
def sheets_remove_cmd(ctx: typer.Context, index: int) -> None:
    raise typer.Exit(cmd_sheets_remove(_settings(ctx), index))


@store_app.command("show")
def store_show_cmd(ctx: typer.Context) -> None:
    raise typer.Exit(cmd_store_show(_settings(ctx)))


@store_app.command("set-logo")
def store_set_logo_cmd(ctx: typer.Context, url: str) -> None:
    _settings(ctx).save_logo_url(url)
    typer.echo("Logo updated")


@store_app.command("set-info")
def store_set_info_cmd(
    ctx: typer.Context,
    *,
    name: str = typer.Option(..., help="Store name."),
    branch: str = typer.Option("", help="Branch name."),
) -> None:
    _settings(ctx).save_store_info(StoreInfo(name=name, branch=branch))
    typer.echo("Store info updated")


@app.callback(invoke_without_command=True)
def _root(
    ctx: typer.Context,
    *,
    database_url: str | None = typer.Option(
        None, help="Override DATABASE_URL for the synced settings store."
    ),
    log_level: str | None = typer.Option(
        None, help="Log level (defaults to SHEET_LEDGER_LOG_LEVEL or INFO)."
    ),
) -> None:
    """Root command.

    Loads ``.env`` from the current working directory without overriding
    variables that are already set, then configures logging.
    """

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    configure_logging(log_level, use_rich=sys.stderr.isatty())
    ctx.obj = {"database_url": database_url}

    if ctx.invoked_subcommand is None:
        typer.echo("No subcommand provided. Use --help to see available commands.")
        raise typer.Exit(1)


if __name__ == "__main__":  # pragma: no cover
    app()
