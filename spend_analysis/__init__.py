"""Public interface for the ``spend_analysis`` package.

This module exposes the package's API functions and public models/types as the
stable import surface. There is no runtime logic here, only symbol re-exports.
"""

from .aggregates import (
    build_category_breakdown,
    build_merchant_breakdown,
    compute_kpis,
)
from .api import (
    IngestResult,
    build_dashboard,
    ingest,
    ingest_csv_file,
    ingest_csv_text,
)
from .categorization import Categorizer, categorize
from .config import ConfigError, DashboardConfig, load_config
from .dates import parse_date
from .merchants import clean_description
from .models import (
    AggregateEntry,
    CategoryBreakdown,
    DashboardView,
    DateRange,
    Granularity,
    IngestError,
    IngestErrorKind,
    Kpis,
    MerchantBreakdown,
    RefundMatch,
    RefundSplit,
    TimeSeries,
    TransactionRecord,
    Transactions,
)
from .normalizers import normalize_row, normalize_rows
from .reconcile import identify_refunds, split_refund_aware
from .session import DashboardSession, filter_records, select
from .timeseries import build_time_series

__all__ = [
    # API
    "build_dashboard",
    "ingest",
    "ingest_csv_file",
    "ingest_csv_text",
    "IngestResult",
    # Pipeline stages
    "parse_date",
    "clean_description",
    "categorize",
    "Categorizer",
    "normalize_row",
    "normalize_rows",
    "split_refund_aware",
    "identify_refunds",
    "build_time_series",
    "build_category_breakdown",
    "build_merchant_breakdown",
    "compute_kpis",
    # Session
    "DashboardSession",
    "filter_records",
    "select",
    # Configuration
    "DashboardConfig",
    "ConfigError",
    "load_config",
    # Models / types
    "TransactionRecord",
    "Transactions",
    "AggregateEntry",
    "TimeSeries",
    "Granularity",
    "CategoryBreakdown",
    "MerchantBreakdown",
    "RefundMatch",
    "RefundSplit",
    "Kpis",
    "DateRange",
    "DashboardView",
    "IngestError",
    "IngestErrorKind",
]
