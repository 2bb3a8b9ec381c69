"""Adaptive time bucketing.

The granularity follows the date span of the input:

- span <= ``daily_max_span_days`` (60): one bucket per calendar day;
- span <= ``weekly_max_span_days`` (180): Monday-start weeks;
- otherwise: calendar months.

Every bucket between the first and last record is emitted, zero-filled when
empty. Input must be sorted ascending by date.
"""

from __future__ import annotations

import datetime as dt
from collections import defaultdict
from collections.abc import Callable, Sequence
from decimal import Decimal

from .config import TimeSeriesConfig
from .models import Granularity, TimeSeries, TransactionRecord

_ZERO = Decimal("0")
_ONE_DAY = dt.timedelta(days=1)
_ONE_WEEK = dt.timedelta(days=7)


def span_days(records: Sequence[TransactionRecord]) -> int:
    """Days between first and last record, at least 1 (0 when empty)."""

    if not records:
        return 0
    return max(1, (records[-1].date - records[0].date).days)


def choose_granularity(span: int, config: TimeSeriesConfig) -> Granularity:
    if span <= 0:
        return Granularity.NONE
    if span <= config.daily_max_span_days:
        return Granularity.DAILY
    if span <= config.weekly_max_span_days:
        return Granularity.WEEKLY
    return Granularity.MONTHLY


def week_start(day: dt.date) -> dt.date:
    """Monday on or before ``day``."""

    return day - dt.timedelta(days=day.weekday())


def month_label(day: dt.date) -> str:
    return f"{day.year:04d}-{day.month:02d}"


def _next_month(day: dt.date) -> dt.date:
    if day.month == 12:
        return dt.date(day.year + 1, 1, 1)
    return dt.date(day.year, day.month + 1, 1)


def _sum_by(
    records: Sequence[TransactionRecord],
    key: Callable[[dt.date], str],
    *,
    positive_only: bool = False,
) -> dict[str, Decimal]:
    sums: dict[str, Decimal] = defaultdict(lambda: _ZERO)
    for r in records:
        if positive_only and r.amount <= 0:
            continue
        sums[key(r.date)] += r.amount
    return sums


def _daily(records: Sequence[TransactionRecord], positive_only: bool) -> TimeSeries:
    first, last = records[0].date, records[-1].date
    sums = _sum_by(records, dt.date.isoformat, positive_only=positive_only)
    labels: list[str] = []
    amounts: list[Decimal] = []
    day = first
    while day <= last:
        k = day.isoformat()
        labels.append(k)
        amounts.append(sums.get(k, _ZERO))
        day += _ONE_DAY
    return TimeSeries(Granularity.DAILY, tuple(labels), tuple(amounts))


def _weekly(records: Sequence[TransactionRecord]) -> TimeSeries:
    last = records[-1].date
    sums = _sum_by(records, lambda d: week_start(d).isoformat())
    labels: list[str] = []
    amounts: list[Decimal] = []
    week = week_start(records[0].date)
    while week <= last:
        k = week.isoformat()
        labels.append(k)
        amounts.append(sums.get(k, _ZERO))
        week += _ONE_WEEK
    return TimeSeries(Granularity.WEEKLY, tuple(labels), tuple(amounts))


def _monthly(records: Sequence[TransactionRecord]) -> TimeSeries:
    first, last = records[0].date, records[-1].date
    sums = _sum_by(records, month_label)
    labels: list[str] = []
    amounts: list[Decimal] = []
    month = first.replace(day=1)
    end = last.replace(day=1)
    while month <= end:
        k = month_label(month)
        labels.append(k)
        amounts.append(sums.get(k, _ZERO))
        month = _next_month(month)
    return TimeSeries(Granularity.MONTHLY, tuple(labels), tuple(amounts))


def build_time_series(
    records: Sequence[TransactionRecord],
    config: TimeSeriesConfig | None = None,
) -> TimeSeries:
    """Bucket date-sorted ``records`` into a gap-filled series.

    Daily buckets sum positive amounts only unless
    ``config.daily_positive_only`` is False; weekly and monthly buckets sum
    every amount.
    """

    config = config or TimeSeriesConfig()
    granularity = choose_granularity(span_days(records), config)
    if granularity is Granularity.DAILY:
        return _daily(records, config.daily_positive_only)
    if granularity is Granularity.WEEKLY:
        return _weekly(records)
    if granularity is Granularity.MONTHLY:
        return _monthly(records)
    return TimeSeries(Granularity.NONE)


__all__ = [
    "build_time_series",
    "choose_granularity",
    "month_label",
    "span_days",
    "week_start",
]
