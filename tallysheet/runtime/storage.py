"""Construct ledger stores and writers from settings."""

from __future__ import annotations

from functools import lru_cache

from tallysheet.ledger.csv_store import CsvStore
from tallysheet.ledger.store import MemoryStore, TabularStore
from tallysheet.ledger.trace import DecisionTrace
from tallysheet.ledger.writer import LedgerWriter
from tallysheet.ledger.xlsx_store import XlsxStore
from tallysheet.runtime.logging import get_logger
from tallysheet.runtime.settings import Settings, get_settings

logger = get_logger(__name__)

RECEIPTS_SHEET = "Receipts"
DEBUG_LOG_SHEET = "Debug Log"


def open_ledger_store(settings: Settings) -> TabularStore:
    """Return the main receipt table for the configured backend."""
    if settings.backend == "xlsx":
        return XlsxStore(settings.workbook, sheet_name=RECEIPTS_SHEET)
    if settings.backend == "memory":
        return MemoryStore()
    return CsvStore(settings.receipts_csv)


def open_trace_store(settings: Settings) -> TabularStore:
    """Return the diagnostic decision table for the configured backend."""
    if settings.backend == "xlsx":
        return XlsxStore(settings.workbook, sheet_name=DEBUG_LOG_SHEET)
    if settings.backend == "memory":
        return MemoryStore()
    return CsvStore(settings.debug_log_csv)


def create_ledger_writer(settings: Settings) -> LedgerWriter:
    """Build a LedgerWriter wired to the configured store and trace."""
    trace = DecisionTrace(open_trace_store(settings)) if settings.trace else None
    logger.debug(
        "Ledger backend=%s data_dir=%s total_policy=%s trace=%s",
        settings.backend,
        settings.data_dir,
        settings.total_policy.value,
        settings.trace,
    )
    return LedgerWriter(open_ledger_store(settings), policy=settings.total_policy, trace=trace)


@lru_cache(maxsize=1)
def get_ledger_writer() -> LedgerWriter:
    """Return the process-wide writer for the current settings."""
    return create_ledger_writer(get_settings())


def reset_ledger_writer() -> None:
    """Drop the cached writer, e.g. after settings change."""
    get_ledger_writer.cache_clear()
