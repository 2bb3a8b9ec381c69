import datetime as dt
from decimal import Decimal

import pytest

from spend_analysis.config import TimeSeriesConfig
from spend_analysis.models import Granularity, TransactionRecord
from spend_analysis.timeseries import (
    build_time_series,
    choose_granularity,
    span_days,
    week_start,
)


def _mk(day: dt.date, amount: str) -> TransactionRecord:
    return TransactionRecord(
        date=day,
        description="Shop",
        raw_description="Shop",
        amount=Decimal(amount),
        raw_category="(Uncategorized)",
        bucket="Other",
    )


def test_empty_input_yields_empty_series():
    ts = build_time_series([])
    assert ts.granularity is Granularity.NONE
    assert ts.labels == ()
    assert ts.amounts == ()


def test_single_record_is_one_daily_bucket():
    ts = build_time_series([_mk(dt.date(2024, 5, 5), "3.00")])
    assert ts.granularity is Granularity.DAILY
    assert ts.labels == ("2024-05-05",)
    assert ts.amounts == (Decimal("3.00"),)


def test_59_day_span_is_daily_and_gap_filled():
    first, last = dt.date(2024, 1, 1), dt.date(2024, 2, 29)
    records = [_mk(first, "10.00"), _mk(dt.date(2024, 1, 10), "5.00"), _mk(last, "2.50")]
    assert span_days(records) == 59

    ts = build_time_series(records)
    assert ts.granularity is Granularity.DAILY
    assert len(ts.labels) == 60
    assert ts.labels[0] == "2024-01-01"
    assert ts.labels[-1] == "2024-02-29"
    assert ts.amounts[1] == Decimal("0")
    assert sum(ts.amounts) == Decimal("17.50")


def test_daily_buckets_skip_credits_unless_configured():
    records = [_mk(dt.date(2024, 1, 1), "10.00"), _mk(dt.date(2024, 1, 1), "-4.00")]
    assert build_time_series(records).amounts == (Decimal("10.00"),)

    config = TimeSeriesConfig(daily_positive_only=False)
    assert build_time_series(records, config).amounts == (Decimal("6.00"),)


def test_weekly_buckets_start_on_monday():
    # 2024-01-03 is a Wednesday; 2024-04-01 is a Monday.
    records = [
        _mk(dt.date(2024, 1, 3), "10.00"),
        _mk(dt.date(2024, 1, 7), "-4.00"),
        _mk(dt.date(2024, 4, 1), "1.00"),
    ]
    ts = build_time_series(records)

    assert ts.granularity is Granularity.WEEKLY
    assert ts.labels[0] == "2024-01-01"
    assert ts.labels[-1] == "2024-04-01"
    assert len(ts.labels) == 14
    assert all(dt.date.fromisoformat(k).weekday() == 0 for k in ts.labels)
    # Weekly buckets net credits against spend.
    assert ts.amounts[0] == Decimal("6.00")


def test_200_day_span_is_monthly_and_zero_filled():
    records = [_mk(dt.date(2024, 1, 15), "100.00"), _mk(dt.date(2024, 8, 2), "50.00")]
    assert span_days(records) == 200

    ts = build_time_series(records)
    assert ts.granularity is Granularity.MONTHLY
    assert ts.labels == (
        "2024-01",
        "2024-02",
        "2024-03",
        "2024-04",
        "2024-05",
        "2024-06",
        "2024-07",
        "2024-08",
    )
    assert ts.amounts[0] == Decimal("100.00")
    assert ts.amounts[-1] == Decimal("50.00")
    assert all(a == 0 for a in ts.amounts[1:-1])


def test_monthly_series_crosses_year_boundary():
    records = [_mk(dt.date(2023, 11, 20), "1.00"), _mk(dt.date(2024, 6, 1), "1.00")]
    ts = build_time_series(records)
    assert ts.labels[:3] == ("2023-11", "2023-12", "2024-01")


@pytest.mark.parametrize(
    ("span", "expected"),
    [
        (0, Granularity.NONE),
        (1, Granularity.DAILY),
        (60, Granularity.DAILY),
        (61, Granularity.WEEKLY),
        (180, Granularity.WEEKLY),
        (181, Granularity.MONTHLY),
    ],
)
def test_choose_granularity_default_thresholds(span, expected):
    assert choose_granularity(span, TimeSeriesConfig()) is expected


def test_daily_threshold_is_configurable():
    config = TimeSeriesConfig(daily_max_span_days=45)
    assert choose_granularity(45, config) is Granularity.DAILY
    assert choose_granularity(46, config) is Granularity.WEEKLY


def test_week_start():
    assert week_start(dt.date(2024, 1, 7)) == dt.date(2024, 1, 1)
    assert week_start(dt.date(2024, 1, 8)) == dt.date(2024, 1, 8)
