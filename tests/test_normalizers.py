import datetime as dt
from decimal import Decimal

import pytest

from spend_analysis.config import ColumnMapping, DashboardConfig
from spend_analysis.models import UNCATEGORIZED
from spend_analysis.normalizers import normalize_row, normalize_rows, parse_amount


def _row(
    date="01/15/2024",
    desc="STARBUCKS STORE 12345 SEATTLE WA",
    amount="4.50",
    category="Restaurant-Bar & Café",
):
    return {"Date": date, "Description": desc, "Amount": amount, "Category": category}


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("4.50", Decimal("4.50")),
        ("$1,234.50", Decimal("1234.50")),
        ("-12.00", Decimal("-12.00")),
        (" USD 7 ", Decimal("7")),
        # Parentheses are not a sign convention here; only "-" is.
        ("(50.00)", Decimal("50.00")),
    ],
)
def test_parse_amount_strips_currency_noise(raw, expected):
    assert parse_amount(raw) == expected


@pytest.mark.parametrize("raw", [None, "", "abc", "1.2.3", "--5"])
def test_parse_amount_rejects_non_numeric(raw):
    with pytest.raises(ValueError):
        parse_amount(raw)


def test_normalize_row_builds_record():
    rec = normalize_row(_row(), DashboardConfig())
    assert rec is not None
    assert rec.date == dt.date(2024, 1, 15)
    assert rec.description == "Starbucks"
    assert rec.raw_description == "STARBUCKS STORE 12345 SEATTLE WA"
    assert rec.amount == Decimal("4.50")
    assert rec.raw_category == "Restaurant-Bar & Café"
    assert rec.bucket == "Restaurants"


@pytest.mark.parametrize(
    "row",
    [
        _row(date="not a date"),
        _row(date=""),
        _row(amount="n/a"),
        _row(amount=""),
        {"Description": "no date or amount"},
    ],
)
def test_normalize_row_rejects_bad_date_or_amount(row):
    assert normalize_row(row, DashboardConfig()) is None


def test_missing_category_uses_sentinel_and_other_bucket():
    rec = normalize_row(_row(category=""), DashboardConfig())
    assert rec is not None
    assert rec.raw_category == UNCATEGORIZED
    assert rec.bucket == "Other"


def test_categorize_from_description_when_category_is_uninformative():
    config = DashboardConfig(categorize_from_description=True)
    rec = normalize_row(_row(desc="WHOLE FOODS MARKET #10", category=""), config)
    assert rec is not None
    assert rec.bucket == "Groceries"
    # Off by default.
    rec_default = normalize_row(_row(desc="WHOLE FOODS MARKET #10", category=""), DashboardConfig())
    assert rec_default is not None
    assert rec_default.bucket == "Other"


def test_sign_policy_flip_and_abs():
    flipped = normalize_row(_row(amount="-20.00"), DashboardConfig(flip_signs=True))
    assert flipped is not None and flipped.amount == Decimal("20.00")

    config = DashboardConfig(flip_signs=True, abs_amounts=True)
    absolute = normalize_row(_row(amount="20.00"), config)
    assert absolute is not None and absolute.amount == Decimal("20.00")


def test_custom_column_mapping_without_category():
    config = DashboardConfig(
        columns=ColumnMapping(date="Posted", desc="Payee", amount="Amt", category=None)
    )
    rec = normalize_row({"Posted": "2024-03-01", "Payee": "Netflix.com", "Amt": "15.99"}, config)
    assert rec is not None
    assert rec.raw_category == UNCATEGORIZED
    assert rec.amount == Decimal("15.99")


def test_normalize_rows_counts_rejects_and_sorts_by_date():
    rows = [
        _row(date="2024-01-03", desc="C"),
        _row(date="garbage", desc="bad date"),
        _row(date="2024-01-01", desc="A"),
        _row(date="2024-01-03", desc="D"),
        _row(amount="", desc="bad amount"),
        _row(date="2024-01-02", desc="B"),
    ]
    result = normalize_rows(rows, DashboardConfig())

    assert result.rejected == 2
    assert len(result.records) == len(rows) - 2
    # Ascending by date, stable for equal dates.
    assert [r.raw_description for r in result.records] == ["A", "B", "C", "D"]


def test_normalize_rows_does_not_mutate_input():
    rows = [_row()]
    snapshot = [dict(r) for r in rows]
    normalize_rows(rows, DashboardConfig())
    assert rows == snapshot
