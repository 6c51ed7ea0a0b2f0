"""One-shot backfill of the raw-text columns.

Ledgers created before ``Raw Date``/``Raw Total`` existed have a 9-column
header and rows without raw values. ``migrate`` copies the display
Date/Total cells into the empty raw cells of such a ledger, then upgrades
the header. A ledger whose header already has the raw columns is never
touched, so the migration can be re-run safely.
"""

from __future__ import annotations

from dataclasses import dataclass

from tallysheet.domain.ledger_row import (
    COL_DATE,
    COL_RAW_DATE,
    COL_RAW_TOTAL,
    COL_TOTAL,
    HEADER,
    cell_text,
    has_raw_columns,
)
from tallysheet.ledger.store import TabularStore
from tallysheet.runtime import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class MigrationReport:
    """What a migration run changed."""

    header_upgraded: bool
    rows_scanned: int
    rows_backfilled: int


def migrate(store: TabularStore) -> MigrationReport:
    """Upgrade a legacy ledger to the raw-column schema, backfilling every data row."""
    rows = store.read_all_rows()
    if not rows:
        logger.info("Ledger is empty; nothing to migrate")
        return MigrationReport(header_upgraded=False, rows_scanned=0, rows_backfilled=0)

    if has_raw_columns(rows[0]):
        # Raw cells of a current ledger hold submitted text, even when empty.
        logger.info("Ledger already has raw columns; nothing to migrate")
        return MigrationReport(header_upgraded=False, rows_scanned=len(rows) - 1, rows_backfilled=0)

    backfilled = 0
    for offset, row in enumerate(rows[1:]):
        original = list(row) + [""] * (len(HEADER) - len(row))
        values = list(original)
        if not cell_text(values[COL_RAW_DATE]):
            values[COL_RAW_DATE] = cell_text(values[COL_DATE])
        if not cell_text(values[COL_RAW_TOTAL]):
            values[COL_RAW_TOTAL] = cell_text(values[COL_TOTAL])
        if [cell_text(v) for v in values] == [cell_text(v) for v in original]:
            continue
        store.update_row(offset + 2, values)
        backfilled += 1

    # Header last: an interrupted run still looks legacy and is simply re-run.
    store.update_row(1, list(HEADER))
    logger.info("Upgraded ledger header to %d columns", len(HEADER))
    logger.info("Backfilled raw columns for %d of %d rows", backfilled, len(rows) - 1)
    return MigrationReport(header_upgraded=True, rows_scanned=len(rows) - 1, rows_backfilled=backfilled)
