"""Raw row → :class:`~spend_analysis.models.TransactionRecord` normalization.

Each raw row is validated on its own. A row whose date or amount cannot be
parsed is rejected locally (:class:`RowRejected`); the rest of the batch is
unaffected. Surviving records are returned in ascending date order, stable
for equal dates.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from .categorization import OTHER, Categorizer, categorize
from .config import DashboardConfig
from .dates import parse_date
from .logging_setup import get_logger
from .merchants import clean_description
from .models import UNCATEGORIZED, RawRow, TransactionRecord

_AMOUNT_NOISE_RE = re.compile(r"[^0-9.\-]")

_logger = get_logger("spend_analysis.normalizers")


class RowRejected(ValueError):
    """A single raw row failed date or amount parsing."""


@dataclass(frozen=True, slots=True)
class NormalizationResult:
    records: tuple[TransactionRecord, ...]
    rejected: int


def _cell(row: RawRow, column: str | None) -> str:
    if not column:
        return ""
    value = row.get(column)
    if value is None:
        return ""
    return str(value).strip()


def parse_amount(raw: str | None) -> Decimal:
    """Parse an amount cell after dropping everything but digits, ``.`` and ``-``.

    Currency symbols, thousands separators and spaces disappear
    (``"$1,234.50"`` → ``Decimal("1234.50")``). Raises ``ValueError`` when
    nothing numeric remains or the remainder is not a decimal number.
    """

    s = _AMOUNT_NOISE_RE.sub("", raw or "")
    if not s:
        raise ValueError(f"amount is empty: {raw!r}")
    try:
        return Decimal(s)
    except InvalidOperation as exc:
        raise ValueError(f"invalid amount: {raw!r}") from exc


def _build_record(
    row: RawRow,
    config: DashboardConfig,
    categorizer: Categorizer | None,
) -> TransactionRecord:
    cols = config.columns

    day = parse_date(_cell(row, cols.date))
    if day is None:
        raise RowRejected(f"unparsable date: {_cell(row, cols.date)!r}")

    try:
        amount = parse_amount(_cell(row, cols.amount))
    except ValueError as exc:
        raise RowRejected(str(exc)) from exc
    if config.flip_signs:
        amount = -amount
    if config.abs_amounts:
        amount = abs(amount)

    raw_category = _cell(row, cols.category) or UNCATEGORIZED
    raw_description = _cell(row, cols.desc)

    classify = categorizer.categorize if categorizer is not None else categorize
    bucket = classify(raw_category)
    if bucket == OTHER and config.categorize_from_description and raw_description:
        bucket = classify(raw_description)

    return TransactionRecord(
        date=day,
        description=clean_description(raw_description),
        raw_description=raw_description,
        amount=amount,
        raw_category=raw_category,
        bucket=bucket,
    )


def normalize_row(
    row: RawRow,
    config: DashboardConfig,
    *,
    categorizer: Categorizer | None = None,
) -> TransactionRecord | None:
    """Normalize one raw row, returning ``None`` when the row is rejected."""

    try:
        return _build_record(row, config, categorizer)
    except RowRejected:
        return None


def normalize_rows(
    rows: Iterable[RawRow],
    config: DashboardConfig,
    *,
    categorizer: Categorizer | None = None,
) -> NormalizationResult:
    """Normalize a batch of raw rows and sort survivors ascending by date."""

    records: list[TransactionRecord] = []
    rejected = 0
    for pos, row in enumerate(rows):
        try:
            records.append(_build_record(row, config, categorizer))
        except RowRejected as exc:
            rejected += 1
            _logger.debug("row %d rejected: %s", pos, exc)

    # list.sort is stable: equal dates keep input order.
    records.sort(key=lambda r: r.date)
    _logger.info("normalized %d rows (%d rejected)", len(records), rejected)
    return NormalizationResult(records=tuple(records), rejected=rejected)


__all__ = [
    "NormalizationResult",
    "RowRejected",
    "normalize_row",
    "normalize_rows",
    "parse_amount",
]
