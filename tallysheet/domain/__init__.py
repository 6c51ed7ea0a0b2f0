"""Core domain models for tallysheet.

This module provides the pure receipt/ledger logic:
- ReceiptRecord, ReceiptItem: submitted receipt models
- LedgerRow: persisted row model and table schema
- find_duplicate: duplicate receipt detection

Usage:
    from tallysheet.domain import ReceiptRecord, find_duplicate
"""

from tallysheet.domain.duplicates import DuplicateMatch, TotalPolicy, find_duplicate
from tallysheet.domain.ledger_row import HEADER, LEGACY_HEADER, LedgerRow, build_row
from tallysheet.domain.receipt import ReceiptItem, ReceiptRecord

__all__ = [
    "DuplicateMatch",
    "TotalPolicy",
    "find_duplicate",
    "HEADER",
    "LEGACY_HEADER",
    "LedgerRow",
    "build_row",
    "ReceiptItem",
    "ReceiptRecord",
]
