"""Duplicate receipt detection over stored ledger rows.

A candidate receipt duplicates a stored row when merchant, date and total
all match:

- merchant: case-insensitive, whitespace-trimmed equality
- date: trimmed text equality against the raw date column
- total: trimmed text equality against the raw total column
  (or decimal equality under ``TotalPolicy.NUMERIC``)

Rows written before the raw columns existed are compared against the
display columns instead. The scan is linear and returns the first
(lowest-indexed) matching row.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any

from tallysheet.domain.ledger_row import LedgerRow, decode_row, has_raw_columns
from tallysheet.domain.receipt import ReceiptRecord

# Sheet rows are 1-based and row 1 is the header.
FIRST_DATA_ROW = 2


class TotalPolicy(str, Enum):
    """How stored and submitted totals are compared."""

    TEXT = "text"
    NUMERIC = "numeric"


@dataclass(frozen=True)
class DuplicateMatch:
    """A stored row that matches a candidate receipt."""

    row_index: int
    row: LedgerRow


@dataclass(frozen=True)
class Comparison:
    """Field pairs examined for one stored row, reported to observers."""

    row_index: int
    stored_merchant: str
    candidate_merchant: str
    stored_date: str
    candidate_date: str
    stored_total: str
    candidate_total: str
    matched: bool


def stored_date(row: LedgerRow) -> str:
    """Date text used for matching: the raw column on current tables, else the display column."""
    return row.raw_date if row.raw_date is not None else row.date


def stored_total(row: LedgerRow) -> str:
    """Total text used for matching: the raw column on current tables, else the display column."""
    return row.raw_total if row.raw_total is not None else row.total


def _as_decimal(text: str) -> Decimal | None:
    try:
        value = Decimal(text)
    except InvalidOperation:
        return None
    return value if value.is_finite() else None


def totals_match(stored: str, candidate: str, policy: TotalPolicy = TotalPolicy.TEXT) -> bool:
    """Compare two trimmed total strings under the given policy."""
    stored = stored.strip()
    candidate = candidate.strip()
    if policy is TotalPolicy.NUMERIC:
        stored_number = _as_decimal(stored)
        candidate_number = _as_decimal(candidate)
        if stored_number is not None and candidate_number is not None:
            return stored_number == candidate_number
    return stored == candidate


def compare_row(
    row: LedgerRow,
    row_index: int,
    candidate: ReceiptRecord,
    policy: TotalPolicy = TotalPolicy.TEXT,
) -> Comparison:
    """Evaluate the three match predicates for one stored row."""
    candidate_merchant = candidate.merchant_name or ""
    candidate_date = candidate.date or ""
    candidate_total = candidate.total or ""
    row_date = stored_date(row)
    row_total = stored_total(row)

    merchant_match = row.merchant.strip().lower() == candidate_merchant.strip().lower()
    date_match = row_date.strip() == candidate_date.strip()
    total_match = totals_match(row_total, candidate_total, policy)

    return Comparison(
        row_index=row_index,
        stored_merchant=row.merchant,
        candidate_merchant=candidate_merchant,
        stored_date=row_date,
        candidate_date=candidate_date,
        stored_total=row_total,
        candidate_total=candidate_total,
        matched=merchant_match and date_match and total_match,
    )


def find_duplicate(
    rows: Sequence[Sequence[Any]],
    candidate: ReceiptRecord,
    policy: TotalPolicy = TotalPolicy.TEXT,
    observer: Callable[[Comparison], None] | None = None,
) -> DuplicateMatch | None:
    """
    Find the first stored row matching a candidate receipt.

    Args:
        rows: Every row of the table, header included (row 1).
        candidate: The submitted receipt.
        policy: Total comparison policy.
        observer: Optional callback receiving each Comparison as it is made.

    Returns:
        The lowest-indexed matching row, or None. Tables with no data rows
        never match.
    """
    if len(rows) <= 1:
        return None

    raw_columns = has_raw_columns(rows[0])
    for offset, cells in enumerate(rows[1:]):
        row_index = offset + FIRST_DATA_ROW
        row = decode_row(cells, raw_columns=raw_columns)
        comparison = compare_row(row, row_index, candidate, policy)
        if observer is not None:
            observer(comparison)
        if comparison.matched:
            return DuplicateMatch(row_index=row_index, row=row)

    return None
