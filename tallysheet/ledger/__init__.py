"""Centralized storage access for the receipt ledger."""

from tallysheet.ledger.migrate import MigrationReport, migrate
from tallysheet.ledger.store import MemoryStore, TabularStore
from tallysheet.ledger.writer import Accepted, Duplicate, Failure, LedgerWriter, SubmitResult

__all__ = [
    "MigrationReport",
    "migrate",
    "MemoryStore",
    "TabularStore",
    "Accepted",
    "Duplicate",
    "Failure",
    "LedgerWriter",
    "SubmitResult",
]
