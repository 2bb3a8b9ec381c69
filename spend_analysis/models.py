"""Data models and type aliases for ``spend_analysis``.

Records and aggregate results are frozen ``dataclass`` / ``NamedTuple`` values.
Every pipeline stage allocates fresh outputs; nothing here is mutated after
construction.
"""

from __future__ import annotations

import datetime as dt
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from decimal import Decimal
from enum import StrEnum
from typing import Any, NamedTuple

# ---------------------------------------------------------------------------
# Sentinels
# ---------------------------------------------------------------------------

NO_DESCRIPTION = "(No Description)"
UNCATEGORIZED = "(Uncategorized)"


# ---------------------------------------------------------------------------
# Core record and collections
# ---------------------------------------------------------------------------

# One raw row of a tabular export: column name -> cell text (or blank/None).
type RawRow = Mapping[str, Any]


@dataclass(frozen=True, slots=True)
class TransactionRecord:
    """A validated transaction produced by the row normalizer.

    Attributes
    ----------
    date:
        Calendar date of the transaction; time of day is not tracked.
    description:
        Canonical merchant label (never empty).
    raw_description:
        Description text as it appeared in the export, trimmed.
    amount:
        Signed amount. Positive values are spend, negative values are credits
        or refunds (after the configured sign policy).
    raw_category:
        Category text from the export, or ``"(Uncategorized)"``.
    bucket:
        Taxonomy label assigned by the categorizer.
    """

    date: dt.date
    description: str
    raw_description: str
    amount: Decimal
    raw_category: str
    bucket: str


type Transactions = Sequence[TransactionRecord]
"""An ordered sequence of records, ascending by date."""


class AggregateEntry(NamedTuple):
    """A ``(label, total)`` pair emitted by the aggregators."""

    label: str
    total: Decimal


class RefundMatch(NamedTuple):
    """A charge and the refund that cancelled it in the aggregation view."""

    charge: TransactionRecord
    refund: TransactionRecord


# ---------------------------------------------------------------------------
# Aggregate results
# ---------------------------------------------------------------------------


class Granularity(StrEnum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    NONE = "none"


@dataclass(frozen=True, slots=True)
class TimeSeries:
    """Gap-filled series of bucket totals.

    ``labels`` and ``amounts`` are parallel: one entry per calendar bucket in
    range, including buckets without transactions (zero-filled).
    """

    granularity: Granularity
    labels: tuple[str, ...] = ()
    amounts: tuple[Decimal, ...] = ()

    def __post_init__(self) -> None:
        if len(self.labels) != len(self.amounts):
            raise ValueError("TimeSeries labels and amounts must have equal length")

    def points(self) -> list[AggregateEntry]:
        return [AggregateEntry(k, v) for k, v in zip(self.labels, self.amounts, strict=True)]


@dataclass(frozen=True, slots=True)
class CategoryBreakdown:
    """Category totals sorted descending with the long tail folded into one entry.

    ``total`` is the sum of all positive amounts considered, which equals the
    sum of ``amounts``.
    """

    entries: tuple[AggregateEntry, ...]
    total: Decimal

    @property
    def labels(self) -> list[str]:
        return [e.label for e in self.entries]

    @property
    def amounts(self) -> list[Decimal]:
        return [e.total for e in self.entries]


@dataclass(frozen=True, slots=True)
class MerchantBreakdown:
    """Top-N merchants with the dominant bucket of each."""

    entries: tuple[AggregateEntry, ...]
    dominant_categories: Mapping[str, str] = field(default_factory=dict)

    @property
    def labels(self) -> list[str]:
        return [e.label for e in self.entries]

    @property
    def amounts(self) -> list[Decimal]:
        return [e.total for e in self.entries]


@dataclass(frozen=True, slots=True)
class RefundSplit:
    """The two views derived by refund reconciliation.

    Attributes
    ----------
    for_aggregation:
        Positive records that were not cancelled by an equal-amount refund.
    for_totals:
        The full input, used for KPI totals.
    matches:
        Charge/refund pairs that cancelled each other.
    """

    for_aggregation: tuple[TransactionRecord, ...]
    for_totals: tuple[TransactionRecord, ...]
    matches: tuple[RefundMatch, ...] = ()


@dataclass(frozen=True, slots=True)
class Kpis:
    total: Decimal
    count: int
    average_abs: Decimal
    top_merchant: str | None = None
    top_merchant_total: Decimal | None = None


@dataclass(frozen=True, slots=True)
class DateRange:
    """Inclusive date window; an open end is unbounded."""

    start: dt.date | None = None
    end: dt.date | None = None

    def __post_init__(self) -> None:
        if self.start is not None and self.end is not None and self.start > self.end:
            raise ValueError(f"DateRange start {self.start} is after end {self.end}")

    def contains(self, day: dt.date) -> bool:
        if self.start is not None and day < self.start:
            return False
        if self.end is not None and day > self.end:
            return False
        return True

    @classmethod
    def spanning(cls, records: Iterable[TransactionRecord]) -> DateRange:
        """Return the tightest range covering ``records`` (unbounded when empty)."""

        days = [r.date for r in records]
        if not days:
            return cls()
        return cls(start=min(days), end=max(days))


@dataclass(frozen=True, slots=True)
class DashboardView:
    """Everything one render of the dashboard needs.

    Charts are computed from the refund-cancelled aggregation view while
    ``kpis`` covers every filtered record. Option lists come from the full
    record set so a selection can always be widened again.
    """

    records: tuple[TransactionRecord, ...]
    kpis: Kpis
    time_series: TimeSeries
    categories: CategoryBreakdown
    merchants: MerchantBreakdown
    category_options: tuple[str, ...] = ()
    merchant_options: tuple[str, ...] = ()
    refund_matches: tuple[RefundMatch, ...] = ()


# ---------------------------------------------------------------------------
# Ingestion outcome
# ---------------------------------------------------------------------------


class IngestErrorKind(StrEnum):
    EMPTY_BATCH = "empty_batch"
    MALFORMED_INPUT = "malformed_input"


@dataclass(frozen=True, slots=True)
class IngestError:
    """User-visible, non-fatal ingestion failure."""

    kind: IngestErrorKind
    message: str


__all__ = [
    "NO_DESCRIPTION",
    "UNCATEGORIZED",
    "AggregateEntry",
    "CategoryBreakdown",
    "DashboardView",
    "DateRange",
    "Granularity",
    "IngestError",
    "IngestErrorKind",
    "Kpis",
    "MerchantBreakdown",
    "RawRow",
    "RefundMatch",
    "RefundSplit",
    "TimeSeries",
    "TransactionRecord",
    "Transactions",
]
