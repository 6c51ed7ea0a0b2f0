"""Privileged append access to the receipt ledger."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone

from tallysheet.domain.duplicates import Comparison, TotalPolicy, find_duplicate
from tallysheet.domain.ledger_row import HEADER, LEGACY_HEADER, build_row, has_raw_columns
from tallysheet.domain.receipt import ReceiptRecord
from tallysheet.ledger.store import TabularStore
from tallysheet.ledger.trace import DecisionTrace
from tallysheet.runtime import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ExistingReceipt:
    """Summary of the stored row a duplicate refers to."""

    merchant: str
    date: str
    total: str
    currency: str


@dataclass(frozen=True)
class Accepted:
    """The receipt was appended as row ``row_index``."""

    row_index: int


@dataclass(frozen=True)
class Duplicate:
    """The receipt matches stored row ``row_index``; nothing was written."""

    row_index: int
    existing: ExistingReceipt


@dataclass(frozen=True)
class Failure:
    """The submission failed; no receipt row was written."""

    error: str


SubmitResult = Accepted | Duplicate | Failure


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class LedgerWriter:
    """
    Append receipts to a ledger store, refusing duplicates.

    Check-then-append is not atomic: two concurrent submissions of the same
    receipt can both pass the duplicate check and both be appended.
    """

    def __init__(
        self,
        store: TabularStore,
        *,
        policy: TotalPolicy = TotalPolicy.TEXT,
        clock: Callable[[], datetime] = _utcnow,
        trace: DecisionTrace | None = None,
    ) -> None:
        self.store = store
        self.policy = policy
        self.clock = clock
        self.trace = trace

    def _ensure_header(self) -> None:
        if self.store.row_count() == 0:
            self.store.append_row(list(HEADER))
            logger.info("Initialized empty ledger with header row")

    def _observe(self, comparison: Comparison) -> None:
        if self.trace is None:
            return
        try:
            self.trace.record_comparison(comparison)
        except Exception as e:
            logger.warning(f"Failed to record duplicate-check trace: {e}")

    def _trace_forced(self, record: ReceiptRecord) -> None:
        if self.trace is None:
            return
        try:
            self.trace.record_forced(record)
        except Exception as e:
            logger.warning(f"Failed to record duplicate-check trace: {e}")

    def submit(self, record: ReceiptRecord) -> SubmitResult:
        """
        Record a receipt unless it duplicates an existing row.

        Returns:
            Duplicate if a matching row exists and ``record.force`` is unset,
            Accepted with the new row index otherwise, or Failure if the
            store raised.
        """
        try:
            self._ensure_header()
            rows = self.store.read_all_rows()

            if record.force:
                self._trace_forced(record)
            else:
                match = find_duplicate(rows, record, self.policy, observer=self._observe)
                if match is not None:
                    existing = ExistingReceipt(
                        merchant=match.row.merchant,
                        date=match.row.date,
                        total=match.row.total,
                        currency=match.row.currency,
                    )
                    logger.info(
                        "Duplicate receipt: %s on %s for %s matches row %d",
                        record.merchant_name,
                        record.date,
                        record.total,
                        match.row_index,
                    )
                    return Duplicate(row_index=match.row_index, existing=existing)

            width = len(HEADER) if has_raw_columns(rows[0]) else len(LEGACY_HEADER)
            row = build_row(record, self.clock())
            self.store.append_row(row.to_values(width))
            row_index = self.store.row_count()
            logger.info("Saved receipt from %s as row %d", row.merchant, row_index)
            return Accepted(row_index=row_index)
        except Exception as e:
            logger.exception("Failed to save receipt")
            return Failure(error=str(e) or type(e).__name__)
