"""Explicit dashboard state: the record set plus the active selection.

A :class:`DashboardSession` replaces ambient "current dataset" and "current
filter" globals. Sessions are immutable; every operation returns a new one.
Selections that no longer name an existing label are dropped rather than
left dangling.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field, replace

from .aggregates import category_options, merchant_options
from .models import DateRange, TransactionRecord


@dataclass(frozen=True, slots=True)
class DashboardSession:
    records: tuple[TransactionRecord, ...] = ()
    date_range: DateRange = field(default_factory=DateRange)
    category: str | None = None
    merchant: str | None = None

    def filtered(self) -> list[TransactionRecord]:
        """Records matching the active selection, in date order."""

        return filter_records(
            self.records,
            date_range=self.date_range,
            category=self.category,
            merchant=self.merchant,
        )

    @property
    def is_empty(self) -> bool:
        return not self.records


def filter_records(
    records: Sequence[TransactionRecord],
    *,
    date_range: DateRange | None = None,
    category: str | None = None,
    merchant: str | None = None,
) -> list[TransactionRecord]:
    """Order-preserving subset of ``records`` (date bounds are inclusive)."""

    out: list[TransactionRecord] = []
    for r in records:
        if date_range is not None and not date_range.contains(r.date):
            continue
        if category and r.bucket != category:
            continue
        if merchant and r.description != merchant:
            continue
        out.append(r)
    return out


def resolve_selection(
    records: Sequence[TransactionRecord],
    category: str | None,
    merchant: str | None,
) -> tuple[str | None, str | None]:
    """Drop a category or merchant selection that does not exist in ``records``.

    The merchant is checked against the merchants of the resolved category.
    """

    if category and category not in category_options(records):
        category = None
    if merchant and merchant not in merchant_options(records, category):
        merchant = None
    return category or None, merchant or None


def select(
    session: DashboardSession,
    *,
    date_range: DateRange | None = None,
    category: str | None = None,
    merchant: str | None = None,
) -> DashboardSession:
    """Return ``session`` with a new selection; ``None`` means "all"."""

    category, merchant = resolve_selection(session.records, category, merchant)
    return replace(
        session,
        date_range=date_range or DateRange(),
        category=category,
        merchant=merchant,
    )


def replace_records(
    session: DashboardSession,
    records: Sequence[TransactionRecord],
) -> DashboardSession:
    """Swap in a freshly ingested record set.

    The date range resets to the full range; category and merchant
    selections survive only when they still resolve in the new data.
    """

    category, merchant = resolve_selection(records, session.category, session.merchant)
    return DashboardSession(records=tuple(records), category=category, merchant=merchant)


__all__ = [
    "DashboardSession",
    "filter_records",
    "replace_records",
    "resolve_selection",
    "select",
]
