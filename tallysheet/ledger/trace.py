"""Optional diagnostic table of duplicate-check decisions.

Each comparison made while checking a receipt is appended as one row. The
table is only for troubleshooting: nothing in tallysheet reads it back.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone

from tallysheet.domain.duplicates import Comparison
from tallysheet.domain.ledger_row import iso_timestamp
from tallysheet.domain.receipt import ReceiptRecord
from tallysheet.ledger.store import TabularStore

TRACE_HEADER: tuple[str, ...] = (
    "Timestamp",
    "Outcome",
    "Stored Merchant",
    "Candidate Merchant",
    "Stored Date",
    "Candidate Date",
    "Stored Total",
    "Candidate Total",
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DecisionTrace:
    """Append-only writer for the diagnostic table."""

    def __init__(self, store: TabularStore, clock: Callable[[], datetime] = _utcnow) -> None:
        self.store = store
        self.clock = clock

    def _append(self, values: list[str]) -> None:
        if self.store.row_count() == 0:
            self.store.append_row(list(TRACE_HEADER))
        self.store.append_row(values)

    def record_comparison(self, comparison: Comparison) -> None:
        outcome = "match" if comparison.matched else "mismatch"
        self._append(
            [
                iso_timestamp(self.clock()),
                outcome,
                comparison.stored_merchant,
                comparison.candidate_merchant,
                comparison.stored_date,
                comparison.candidate_date,
                comparison.stored_total,
                comparison.candidate_total,
            ]
        )

    def record_forced(self, candidate: ReceiptRecord) -> None:
        self._append(
            [
                iso_timestamp(self.clock()),
                "forced",
                "",
                candidate.merchant_name or "",
                "",
                candidate.date or "",
                "",
                candidate.total or "",
            ]
        )
