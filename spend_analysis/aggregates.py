"""Ranked aggregates: category shares, top merchants, KPIs and selection options.

All functions are read-only over their input and return fresh values. Sorting
is stable, so equal totals keep first-encountered order.
"""

from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal

from .config import CategoryPieConfig
from .models import (
    AggregateEntry,
    CategoryBreakdown,
    Kpis,
    MerchantBreakdown,
    TransactionRecord,
)

_ZERO = Decimal("0")


def _sorted_desc(sums: dict[str, Decimal]) -> list[AggregateEntry]:
    # sorted(reverse=True) keeps insertion order for ties.
    entries = [AggregateEntry(k, v) for k, v in sums.items()]
    return sorted(entries, key=lambda e: e.total, reverse=True)


def build_category_breakdown(
    records: Sequence[TransactionRecord],
    config: CategoryPieConfig | None = None,
) -> CategoryBreakdown:
    """Sum positive amounts per bucket and fold small or excess slices into "Other".

    A bucket whose share of the total is below ``min_share`` always goes to
    the rollup. Of the remaining buckets, at most ``max_slices - 1`` are kept
    and the rest join the rollup too. The rollup entry comes last and only
    when its sum is positive.
    """

    config = config or CategoryPieConfig()
    min_share = max(0.0, min(1.0, config.min_share))
    max_slices = max(3, config.max_slices)
    other_label = config.other_label

    by_bucket: dict[str, Decimal] = {}
    total = _ZERO
    for r in records:
        if r.amount <= 0:
            continue
        by_bucket[r.bucket] = by_bucket.get(r.bucket, _ZERO) + r.amount
        total += r.amount

    kept: list[AggregateEntry] = []
    other_sum = _ZERO
    for entry in _sorted_desc(by_bucket):
        share = float(entry.total / total) if total else 0.0
        # A real bucket carrying the rollup label is merged to keep labels unique.
        if share < min_share or entry.label == other_label:
            other_sum += entry.total
        else:
            kept.append(entry)

    if len(kept) > max_slices - 1:
        other_sum += sum((e.total for e in kept[max_slices - 1 :]), _ZERO)
        kept = kept[: max_slices - 1]

    if other_sum > 0:
        kept.append(AggregateEntry(other_label, other_sum))
    return CategoryBreakdown(entries=tuple(kept), total=total)


def dominant_category(records: Sequence[TransactionRecord]) -> str | None:
    """Bucket with the largest summed amount; the first-seen bucket wins ties."""

    sums: dict[str, Decimal] = {}
    for r in records:
        sums[r.bucket] = sums.get(r.bucket, _ZERO) + r.amount
    best: str | None = None
    for bucket, value in sums.items():
        if best is None or value > sums[best]:
            best = bucket
    return best


def build_merchant_breakdown(
    records: Sequence[TransactionRecord],
    top_n: int = 10,
) -> MerchantBreakdown:
    """Top ``top_n`` merchants by summed amount, with each one's dominant bucket."""

    by_merchant: dict[str, Decimal] = {}
    rows_by_merchant: dict[str, list[TransactionRecord]] = {}
    for r in records:
        by_merchant[r.description] = by_merchant.get(r.description, _ZERO) + r.amount
        rows_by_merchant.setdefault(r.description, []).append(r)

    top = tuple(_sorted_desc(by_merchant)[: max(0, top_n)])
    dominant: dict[str, str] = {}
    for entry in top:
        bucket = dominant_category(rows_by_merchant[entry.label])
        if bucket is not None:
            dominant[entry.label] = bucket
    return MerchantBreakdown(entries=top, dominant_categories=dominant)


def compute_kpis(records: Sequence[TransactionRecord]) -> Kpis:
    """Headline numbers over the full (totals) view."""

    if not records:
        return Kpis(total=_ZERO, count=0, average_abs=_ZERO)

    total = sum((r.amount for r in records), _ZERO)
    average_abs = sum((abs(r.amount) for r in records), _ZERO) / len(records)

    by_merchant: dict[str, Decimal] = {}
    for r in records:
        by_merchant[r.description] = by_merchant.get(r.description, _ZERO) + r.amount
    top = _sorted_desc(by_merchant)[0]
    return Kpis(
        total=total,
        count=len(records),
        average_abs=average_abs,
        top_merchant=top.label,
        top_merchant_total=top.total,
    )


def category_options(records: Sequence[TransactionRecord]) -> list[str]:
    return sorted({r.bucket for r in records})


def merchant_options(
    records: Sequence[TransactionRecord],
    category: str | None = None,
) -> list[str]:
    """Distinct merchant labels, restricted to ``category`` when given."""

    return sorted({r.description for r in records if not category or r.bucket == category})


__all__ = [
    "build_category_breakdown",
    "build_merchant_breakdown",
    "category_options",
    "compute_kpis",
    "dominant_category",
    "merchant_options",
]
