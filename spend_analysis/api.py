"""Public API and orchestration for the ``spend_analysis`` package.

Two entry points cover the dashboard lifecycle:

- :func:`ingest` (and the CSV conveniences :func:`ingest_csv_text` /
  :func:`ingest_csv_file`) turns raw rows into a :class:`DashboardSession`.
  Row-level problems are counted, batch-level problems come back as an
  :class:`~spend_analysis.models.IngestError` on the result. Nothing raises
  for bad input data.
- :func:`build_dashboard` filters a session and derives every chart and KPI
  for one render.
"""

from __future__ import annotations

import csv
from collections.abc import Iterable
from dataclasses import dataclass
from os import PathLike

from .aggregates import (
    build_category_breakdown,
    build_merchant_breakdown,
    category_options,
    compute_kpis,
    merchant_options,
)
from .categorization import Categorizer
from .config import DashboardConfig
from .ingest import read_csv_file, read_csv_rows, skip_leading
from .logging_setup import get_logger
from .models import DashboardView, IngestError, IngestErrorKind, RawRow
from .normalizers import normalize_rows
from .reconcile import split_refund_aware
from .session import DashboardSession, replace_records
from .timeseries import build_time_series

_logger = get_logger("spend_analysis.api")

NO_ROWS_MESSAGE = "No rows found in the CSV."
NO_VALID_ROWS_MESSAGE = "No valid rows after parsing. Check the column mapping."


@dataclass(frozen=True, slots=True)
class IngestResult:
    """Outcome of one ingestion.

    On failure ``session`` is the caller's previous session (or an empty one)
    and ``error`` says why; a partial record set is never installed.
    """

    session: DashboardSession
    rows_total: int
    rows_rejected: int
    error: IngestError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _failed(
    previous: DashboardSession | None,
    kind: IngestErrorKind,
    message: str,
    *,
    rows_total: int = 0,
    rows_rejected: int = 0,
) -> IngestResult:
    _logger.warning("ingestion failed (%s): %s", kind.value, message)
    return IngestResult(
        session=previous if previous is not None else DashboardSession(),
        rows_total=rows_total,
        rows_rejected=rows_rejected,
        error=IngestError(kind=kind, message=message),
    )


def ingest(
    rows: Iterable[RawRow],
    config: DashboardConfig | None = None,
    previous: DashboardSession | None = None,
    *,
    categorizer: Categorizer | None = None,
) -> IngestResult:
    """Normalize ``rows`` into a fresh session.

    The first ``config.ignore_rows`` rows are skipped before normalization.
    When ``previous`` is given, its category and merchant selections carry
    over if they still name labels in the new data; the date range always
    resets to the full range.
    """

    config = config or DashboardConfig()
    raw = skip_leading(rows, config.ignore_rows)
    if not raw:
        return _failed(previous, IngestErrorKind.EMPTY_BATCH, NO_ROWS_MESSAGE)

    result = normalize_rows(raw, config, categorizer=categorizer)
    if not result.records:
        return _failed(
            previous,
            IngestErrorKind.EMPTY_BATCH,
            NO_VALID_ROWS_MESSAGE,
            rows_total=len(raw),
            rows_rejected=result.rejected,
        )

    session = replace_records(previous or DashboardSession(), result.records)
    return IngestResult(session=session, rows_total=len(raw), rows_rejected=result.rejected)


def ingest_csv_text(
    text: str,
    config: DashboardConfig | None = None,
    previous: DashboardSession | None = None,
    *,
    categorizer: Categorizer | None = None,
) -> IngestResult:
    """Parse CSV ``text`` (header row first) and :func:`ingest` its rows."""

    try:
        rows = read_csv_rows(text)
    except csv.Error as exc:
        return _failed(previous, IngestErrorKind.MALFORMED_INPUT, f"Failed to parse CSV: {exc}")
    return ingest(rows, config, previous, categorizer=categorizer)


def ingest_csv_file(
    path: str | PathLike[str],
    config: DashboardConfig | None = None,
    previous: DashboardSession | None = None,
    *,
    categorizer: Categorizer | None = None,
) -> IngestResult:
    """Read a UTF-8 CSV file and :func:`ingest` its rows."""

    try:
        rows = read_csv_file(path)
    except (OSError, UnicodeDecodeError, csv.Error) as exc:
        return _failed(previous, IngestErrorKind.MALFORMED_INPUT, f"Failed to parse CSV: {exc}")
    return ingest(rows, config, previous, categorizer=categorizer)


def build_dashboard(
    session: DashboardSession,
    config: DashboardConfig | None = None,
) -> DashboardView:
    """Filter ``session`` and compute every view of the dashboard.

    KPIs use all filtered records. The time series, category and merchant
    breakdowns use the refund-cancelled aggregation view.
    """

    config = config or DashboardConfig()
    filtered = session.filtered()
    split = split_refund_aware(filtered)
    charted = split.for_aggregation
    return DashboardView(
        records=tuple(filtered),
        kpis=compute_kpis(split.for_totals),
        time_series=build_time_series(charted, config.time_series),
        categories=build_category_breakdown(charted, config.category_pie),
        merchants=build_merchant_breakdown(charted, config.top_n),
        category_options=tuple(category_options(session.records)),
        merchant_options=tuple(merchant_options(session.records, session.category)),
        refund_matches=split.matches,
    )


__all__ = [
    "NO_ROWS_MESSAGE",
    "NO_VALID_ROWS_MESSAGE",
    "IngestResult",
    "build_dashboard",
    "ingest",
    "ingest_csv_file",
    "ingest_csv_text",
]
