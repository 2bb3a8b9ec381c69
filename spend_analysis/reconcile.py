"""Refund-aware split of a record set.

Statements often carry a charge and its later refund as two rows with exactly
opposite amounts. For charts these pairs should cancel; for KPI totals every
row counts. :func:`split_refund_aware` derives both views.

Matching is by rounded absolute amount only, not by merchant or date. Two
unrelated rows that happen to share an amount will cancel each other; this is
an accepted limitation of the approach.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Sequence
from decimal import ROUND_HALF_UP, Decimal

from .logging_setup import get_logger
from .models import RefundMatch, RefundSplit, TransactionRecord

_CENT = Decimal("0.01")

_logger = get_logger("spend_analysis.reconcile")


def _amount_key(amount: Decimal) -> Decimal:
    return abs(amount).quantize(_CENT, rounding=ROUND_HALF_UP)


def split_refund_aware(records: Sequence[TransactionRecord]) -> RefundSplit:
    """Partition ``records`` into aggregation and totals views.

    - Every record with a negative amount adds its rounded absolute amount
      to a pool of available refunds.
    - Scanning in order, a positive record whose amount is still available
      in the pool consumes one refund and is left out of the aggregation view;
      it is paired with the earliest unconsumed refund of that amount.
    - Records with amount <= 0 never enter the aggregation view.
    - The totals view is ``records`` unchanged.
    """

    available: dict[Decimal, deque[TransactionRecord]] = {}
    for r in records:
        if r.amount < 0:
            available.setdefault(_amount_key(r.amount), deque()).append(r)

    kept: list[TransactionRecord] = []
    matches: list[RefundMatch] = []
    for r in records:
        if r.amount <= 0:
            continue
        refunds = available.get(_amount_key(r.amount))
        if refunds:
            matches.append(RefundMatch(charge=r, refund=refunds.popleft()))
            continue
        kept.append(r)

    if matches:
        _logger.debug("cancelled %d charge/refund pairs", len(matches))
    return RefundSplit(
        for_aggregation=tuple(kept),
        for_totals=tuple(records),
        matches=tuple(matches),
    )


def identify_refunds(records: Sequence[TransactionRecord]) -> list[RefundMatch]:
    """Return the charge/refund pairs that :func:`split_refund_aware` cancels."""

    return list(split_refund_aware(records).matches)


__all__ = ["identify_refunds", "split_refund_aware"]
