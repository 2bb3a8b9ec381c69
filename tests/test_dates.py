import datetime as dt

import pytest

from spend_analysis.config import DashboardConfig
from spend_analysis.dates import parse_date
from spend_analysis.normalizers import normalize_row


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("2024-01-15", dt.date(2024, 1, 15)),
        ("2024-1-5", dt.date(2024, 1, 5)),
        ("01/15/2024", dt.date(2024, 1, 15)),
        ("1/5/24", dt.date(2024, 1, 5)),
        ("Jan 5, 2024", dt.date(2024, 1, 5)),
        ("  03/02/2025  ", dt.date(2025, 3, 2)),
    ],
)
def test_parse_date_accepts_common_export_formats(raw, expected):
    assert parse_date(raw) == expected


def test_ambiguous_numeric_dates_are_month_first():
    assert parse_date("02/03/2024") == dt.date(2024, 2, 3)


@pytest.mark.parametrize("raw", [None, "", "   ", "not a date", "2024-02-30", "13/45/2024"])
def test_parse_date_returns_none_instead_of_raising(raw):
    assert parse_date(raw) is None


@pytest.mark.parametrize("raw", ["15", "2024", "Jan", "Jan 5", "March 2024", "5/2024"])
def test_partial_dates_are_not_completed_from_today(raw):
    assert parse_date(raw) is None


def test_row_with_day_only_date_is_rejected():
    row = {"Date": "15", "Description": "Corner Store", "Amount": "9.99", "Category": ""}
    assert normalize_row(row, DashboardConfig()) is None
