"""Summary statistics over ledger rows."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any

from tallysheet.domain.ledger_row import COL_TOTAL, cell_text


@dataclass(frozen=True)
class LedgerStats:
    """Receipt count and summed totals."""

    receipt_count: int
    total_amount: Decimal
    skipped_totals: int = 0


def summarize(rows: Sequence[Sequence[Any]]) -> LedgerStats:
    """
    Count receipts and sum the Total column.

    The header row is skipped. Totals that are not decimal numbers are left
    out of the sum and counted in ``skipped_totals``.
    """
    data_rows = rows[1:]
    amount = Decimal("0")
    skipped = 0
    for row in data_rows:
        text = cell_text(row[COL_TOTAL]).strip() if len(row) > COL_TOTAL else ""
        try:
            value = Decimal(text)
        except InvalidOperation:
            skipped += 1
            continue
        if not value.is_finite():
            skipped += 1
            continue
        amount += value
    return LedgerStats(receipt_count=len(data_rows), total_amount=amount, skipped_totals=skipped)
