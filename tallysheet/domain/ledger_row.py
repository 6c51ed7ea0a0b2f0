"""Ledger table schema and row construction.

The ledger has one header row followed by one row per accepted receipt.
Two schemas exist: the legacy 9-column layout and the current 11-column
layout, which adds untouched copies of the submitted date and total
(``Raw Date`` / ``Raw Total``). Storage backends may reformat the display
columns (a spreadsheet turning "2024-01-01" into a date cell, "10.00" into
10), so duplicate matching reads the raw columns whenever they are present.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from tallysheet.domain.receipt import ReceiptItem, ReceiptRecord

LEGACY_HEADER: tuple[str, ...] = (
    "Date",
    "Time",
    "Merchant",
    "Total",
    "Currency",
    "Tax",
    "Item Count",
    "Items (Description x Qty @ Price)",
    "Timestamp",
)
HEADER: tuple[str, ...] = (*LEGACY_HEADER, "Raw Date", "Raw Total")

# Zero-based column positions shared by both schemas.
COL_DATE = 0
COL_TIME = 1
COL_MERCHANT = 2
COL_TOTAL = 3
COL_CURRENCY = 4
COL_TAX = 5
COL_ITEM_COUNT = 6
COL_ITEMS = 7
COL_TIMESTAMP = 8
COL_RAW_DATE = 9
COL_RAW_TOTAL = 10

DEFAULT_MERCHANT = "Unknown"
DEFAULT_TOTAL = "0.00"
DEFAULT_CURRENCY = "USD"
DEFAULT_TAX = "0.00"
NO_ITEMS = "No items"


@dataclass(frozen=True)
class LedgerRow:
    """One persisted receipt row."""

    date: str
    time: str
    merchant: str
    total: str
    currency: str
    tax: str
    item_count: int
    items_text: str
    timestamp: str
    raw_date: str | None = None
    raw_total: str | None = None

    def to_values(self, width: int = len(HEADER)) -> list[Any]:
        """Return cell values in column order, truncated to the table width."""
        values: list[Any] = [
            self.date,
            self.time,
            self.merchant,
            self.total,
            self.currency,
            self.tax,
            self.item_count,
            self.items_text,
            self.timestamp,
            self.raw_date if self.raw_date is not None else "",
            self.raw_total if self.raw_total is not None else "",
        ]
        return values[:width]


def cell_text(value: Any) -> str:
    """Render a stored cell as text; empty cells become ''."""
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        # Spreadsheets hand back whole numbers as floats.
        return str(int(value))
    return str(value)


def format_items(items: Sequence[ReceiptItem], currency: str) -> str:
    """
    Render items as a single human-readable cell.

    Example: "Coffee x1 @ USD 3.50; Bagel x2 @ USD 2.00"
    """
    if not items:
        return NO_ITEMS
    return "; ".join(f"{item.description} x{item.quantity} @ {currency} {item.price}" for item in items)


def iso_timestamp(moment: datetime) -> str:
    """Format a write time as ISO-8601 UTC with milliseconds, e.g. 2024-01-01T12:00:00.000Z."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def build_row(record: ReceiptRecord, written_at: datetime) -> LedgerRow:
    """Apply storage defaults and derive the computed columns for a new receipt."""
    currency = record.currency or DEFAULT_CURRENCY
    return LedgerRow(
        date=record.date or "",
        time=record.time or "",
        merchant=record.merchant_name or DEFAULT_MERCHANT,
        total=record.total or DEFAULT_TOTAL,
        currency=currency,
        tax=record.tax or DEFAULT_TAX,
        item_count=len(record.items),
        items_text=format_items(record.items, currency),
        timestamp=iso_timestamp(written_at),
        raw_date=record.date if record.date is not None else "",
        raw_total=record.total if record.total is not None else "",
    )


def _cell(row: Sequence[Any], index: int) -> Any:
    return row[index] if index < len(row) else None


def _int_cell(value: Any) -> int:
    try:
        return int(float(cell_text(value) or 0))
    except (ValueError, OverflowError):
        return 0


def decode_row(row: Sequence[Any], *, raw_columns: bool = True) -> LedgerRow:
    """
    Decode stored cells into a LedgerRow.

    Short rows are padded with empty cells. With ``raw_columns`` (the table
    header has the raw columns) ``raw_date``/``raw_total`` are the stored
    text, empty included; otherwise the row predates them and both are None.
    """
    return LedgerRow(
        date=cell_text(_cell(row, COL_DATE)),
        time=cell_text(_cell(row, COL_TIME)),
        merchant=cell_text(_cell(row, COL_MERCHANT)),
        total=cell_text(_cell(row, COL_TOTAL)),
        currency=cell_text(_cell(row, COL_CURRENCY)),
        tax=cell_text(_cell(row, COL_TAX)),
        item_count=_int_cell(_cell(row, COL_ITEM_COUNT)),
        items_text=cell_text(_cell(row, COL_ITEMS)),
        timestamp=cell_text(_cell(row, COL_TIMESTAMP)),
        raw_date=cell_text(_cell(row, COL_RAW_DATE)) if raw_columns else None,
        raw_total=cell_text(_cell(row, COL_RAW_TOTAL)) if raw_columns else None,
    )


def has_raw_columns(header: Sequence[Any]) -> bool:
    """True if a header row uses the current schema with raw-text columns."""
    return len(header) >= len(HEADER) and [cell_text(c) for c in header[: len(HEADER)]] == list(HEADER)
