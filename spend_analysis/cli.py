"""CLI for the ``spend_analysis`` package.

Command handlers (``cmd_summary``, ``cmd_transactions``) return process exit
codes and print errors to stderr; the Typer commands below wrap them.
Environment variables (``SPEND_ANALYSIS_CONFIG``,
``SPEND_ANALYSIS_LOG_LEVEL``) may come from a local ``.env``, loaded with
``python-dotenv`` before any command runs. Business logic lives in
``spend_analysis.api`` and related modules.
"""

from __future__ import annotations

import json
import sys
from decimal import Decimal
from pathlib import Path
from typing import Annotated, Any

import typer
from dotenv import load_dotenv
from typer.models import OptionInfo

from .config import ConfigError, DashboardConfig, load_config
from .dates import parse_date
from .logging_setup import LogFormat, configure_logging
from .models import DashboardView, DateRange, TransactionRecord

# ---- Small module-level helpers used by CLI commands -------------------------


def _money(value: Decimal | None) -> str:
    if value is None:
        return "-"
    return f"{value:,.2f}"


def _record_to_dict(r: TransactionRecord) -> dict[str, Any]:
    return {
        "date": r.date.isoformat(),
        "description": r.description,
        "raw_description": r.raw_description,
        "amount": str(r.amount),
        "raw_category": r.raw_category,
        "bucket": r.bucket,
    }


def _view_to_dict(view: DashboardView, *, rows_total: int, rows_rejected: int) -> dict[str, Any]:
    kpis = view.kpis
    return {
        "rows_total": rows_total,
        "rows_rejected": rows_rejected,
        "kpis": {
            "total": str(kpis.total),
            "count": kpis.count,
            "average_abs": str(kpis.average_abs),
            "top_merchant": kpis.top_merchant,
            "top_merchant_total": (
                str(kpis.top_merchant_total) if kpis.top_merchant_total is not None else None
            ),
        },
        "time_series": {
            "granularity": view.time_series.granularity.value,
            "points": [[k, str(v)] for k, v in view.time_series.points()],
        },
        "categories": [[e.label, str(e.total)] for e in view.categories.entries],
        "merchants": [
            {
                "merchant": e.label,
                "total": str(e.total),
                "category": view.merchants.dominant_categories.get(e.label),
            }
            for e in view.merchants.entries
        ],
        "refund_matches": [
            {"charge": _record_to_dict(m.charge), "refund": _record_to_dict(m.refund)}
            for m in view.refund_matches
        ],
    }


def _print_summary(view: DashboardView, *, rows_total: int, rows_rejected: int) -> None:
    kpis = view.kpis
    print(f"Rows read: {rows_total} ({rows_rejected} rejected)")
    print(f"Transactions: {kpis.count}")
    print(f"Total: {_money(kpis.total)}")
    print(f"Average (abs): {_money(kpis.average_abs)}")
    if kpis.top_merchant is not None:
        print(f"Top merchant: {kpis.top_merchant} ({_money(kpis.top_merchant_total)})")

    ts = view.time_series
    print(f"\nSpend over time ({ts.granularity.value}):")
    for label, amount in ts.points():
        print(f"  {label}  {_money(amount):>12}")

    print("\nBy category:")
    total = view.categories.total
    for e in view.categories.entries:
        share = float(e.total / total) * 100 if total else 0.0
        print(f"  {e.label:<24} {_money(e.total):>12}  {share:5.1f}%")

    print("\nTop merchants:")
    for e in view.merchants.entries:
        bucket = view.merchants.dominant_categories.get(e.label, "")
        print(f"  {e.label:<24} {_money(e.total):>12}  {bucket}")

    if view.refund_matches:
        print(f"\nCancelled charge/refund pairs: {len(view.refund_matches)}")


def _resolve_config(config_path: Path | None, top_n: int | None) -> DashboardConfig:
    config = load_config(config_path)
    if top_n is not None:
        config = config.model_copy(update={"top_n": top_n})
    return config


def _resolve_range(from_date: str | None, to_date: str | None) -> DateRange:
    start = end = None
    if from_date:
        start = parse_date(from_date)
        if start is None:
            raise ValueError(f"invalid --from date: {from_date!r}")
    if to_date:
        end = parse_date(to_date)
        if end is None:
            raise ValueError(f"invalid --to date: {to_date!r}")
    return DateRange(start=start, end=end)


def _load_view(
    csv_path: Path,
    *,
    config: DashboardConfig,
    from_date: str | None,
    to_date: str | None,
    category: str | None,
    merchant: str | None,
) -> tuple[DashboardView, int, int] | None:
    """Ingest ``csv_path`` and apply the selection; ``None`` after reporting an error."""

    from .api import build_dashboard, ingest_csv_file
    from .session import select

    try:
        date_range = _resolve_range(from_date, to_date)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return None

    result = ingest_csv_file(csv_path, config)
    if result.error is not None:
        print(f"Error: {result.error.message}", file=sys.stderr)
        return None

    session = select(result.session, date_range=date_range, category=category, merchant=merchant)
    if category and session.category is None:
        print(f"Warning: category {category!r} not found; showing all categories", file=sys.stderr)
    if merchant and session.merchant is None:
        print(f"Warning: merchant {merchant!r} not found; showing all merchants", file=sys.stderr)
    return build_dashboard(session, config), result.rows_total, result.rows_rejected


def cmd_summary(
    csv_path: Path,
    *,
    from_date: str | None = None,
    to_date: str | None = None,
    category: str | None = None,
    merchant: str | None = None,
    top_n: int | None = None,
    config_path: Path | None = None,
    as_json: bool = False,
) -> int:
    """Print KPIs and chart data for a CSV export. Returns an exit code."""

    try:
        config = _resolve_config(config_path, top_n)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    loaded = _load_view(
        csv_path,
        config=config,
        from_date=from_date,
        to_date=to_date,
        category=category,
        merchant=merchant,
    )
    if loaded is None:
        return 1
    view, rows_total, rows_rejected = loaded

    if as_json:
        payload = _view_to_dict(view, rows_total=rows_total, rows_rejected=rows_rejected)
        print(json.dumps(payload, indent=2, ensure_ascii=False))
    else:
        _print_summary(view, rows_total=rows_total, rows_rejected=rows_rejected)
    return 0


def cmd_transactions(
    csv_path: Path,
    *,
    from_date: str | None = None,
    to_date: str | None = None,
    category: str | None = None,
    merchant: str | None = None,
    config_path: Path | None = None,
    as_json: bool = False,
) -> int:
    """Print the normalized, filtered records of a CSV export. Returns an exit code."""

    try:
        config = _resolve_config(config_path, None)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    loaded = _load_view(
        csv_path,
        config=config,
        from_date=from_date,
        to_date=to_date,
        category=category,
        merchant=merchant,
    )
    if loaded is None:
        return 1
    view = loaded[0]

    if as_json:
        print(json.dumps([_record_to_dict(r) for r in view.records], indent=2, ensure_ascii=False))
        return 0
    for r in view.records:
        print(f"{r.date.isoformat()}  {_money(r.amount):>12}  {r.description:<28} {r.bucket}")
    return 0


# ---- Typer-based console interface -------------------------------------------


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help="Summarize spending from a transactions CSV (dates, amounts, merchants, categories).",
)


# Module-level option object to satisfy ruff B008 (no calls in parameter
# defaults). Typer will inspect this when used as a default value below.
CSV_PATH_OPTION: OptionInfo = typer.Option(
    ...,  # required
    "--csv-path",
    help="Path to a transactions CSV with a header row",
    dir_okay=False,
    file_okay=True,
    exists=False,  # allow non-existent here; the handler will report nice errors
)


@app.command("summary")
def summary_cmd(
    csv_path: Annotated[Path, CSV_PATH_OPTION],
    *,
    from_date: str | None = typer.Option(None, "--from", help="First date to include."),
    to_date: str | None = typer.Option(None, "--to", help="Last date to include."),
    category: str | None = typer.Option(None, help="Only this category bucket."),
    merchant: str | None = typer.Option(None, help="Only this (canonical) merchant."),
    top_n: int | None = typer.Option(None, min=1, help="Number of merchants to list."),
    config_path: Path | None = typer.Option(
        None, "--config", help="JSON config file (falls back to SPEND_ANALYSIS_CONFIG)."
    ),
    as_json: bool = typer.Option(False, "--json", help="Emit JSON instead of text."),
) -> None:
    """KPIs, spend over time, category shares and top merchants."""

    code = cmd_summary(
        csv_path,
        from_date=from_date,
        to_date=to_date,
        category=category,
        merchant=merchant,
        top_n=top_n,
        config_path=config_path,
        as_json=as_json,
    )
    raise typer.Exit(code)


@app.command("transactions")
def transactions_cmd(
    csv_path: Annotated[Path, CSV_PATH_OPTION],
    *,
    from_date: str | None = typer.Option(None, "--from", help="First date to include."),
    to_date: str | None = typer.Option(None, "--to", help="Last date to include."),
    category: str | None = typer.Option(None, help="Only this category bucket."),
    merchant: str | None = typer.Option(None, help="Only this (canonical) merchant."),
    config_path: Path | None = typer.Option(
        None, "--config", help="JSON config file (falls back to SPEND_ANALYSIS_CONFIG)."
    ),
    as_json: bool = typer.Option(False, "--json", help="Emit JSON instead of text."),
) -> None:
    """List normalized transactions in date order."""

    code = cmd_transactions(
        csv_path,
        from_date=from_date,
        to_date=to_date,
        category=category,
        merchant=merchant,
        config_path=config_path,
        as_json=as_json,
    )
    raise typer.Exit(code)


@app.callback(invoke_without_command=True)
def _root(
    ctx: typer.Context,
    *,
    log_level: str | None = typer.Option(
        None, "--log-level", help="DEBUG, INFO, WARNING or ERROR (overrides -v and env)."
    ),
    verbose: int = typer.Option(0, "--verbose", "-v", count=True, help="Log at DEBUG level."),
    log_format: LogFormat = typer.Option(
        LogFormat.TEXT, "--log-format", case_sensitive=False, help="Log line format on stderr."
    ),
) -> None:
    """Root command.

    Loads ``.env`` from the current working directory (without overriding any
    already-set environment variables) and configures package logging from
    the options above.
    """

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)

    # Central logging setup so child loggers inherit configuration
    try:
        configure_logging(log_level, verbose=verbose, log_format=log_format)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        raise typer.Exit(1) from e

    if ctx.invoked_subcommand is None:
        typer.echo("No subcommand provided. Use --help to see available commands.")
        raise typer.Exit(1)


if __name__ == "__main__":  # pragma: no cover
    # Running as a module: `python -m spend_analysis.cli`
    app()
