"""Row-oriented table storage used by the ledger.

A store is an ordered list of rows (row 1 first). The ledger writer only
reads all rows, appends a row and asks for the row count; ``update_row`` is
reserved for the one-shot raw-column migration.
"""

from __future__ import annotations

import threading
from collections.abc import Sequence
from typing import Any, Protocol

from tallysheet.errors import StorageError


class TabularStore(Protocol):
    """Minimal storage contract required by the ledger."""

    def read_all_rows(self) -> list[list[Any]]:
        """Return a copy of every row, header included."""
        ...

    def append_row(self, values: Sequence[Any]) -> None:
        """Append one row after the last existing row."""
        ...

    def row_count(self) -> int:
        """Return the number of rows, header included."""
        ...

    def update_row(self, row_index: int, values: Sequence[Any]) -> None:
        """Replace the 1-based row ``row_index`` with ``values``."""
        ...


class MemoryStore:
    """In-process store, used for tests and the ``memory`` backend."""

    def __init__(self, rows: Sequence[Sequence[Any]] | None = None) -> None:
        self._rows: list[list[Any]] = [list(row) for row in rows or []]
        self._lock = threading.Lock()

    def read_all_rows(self) -> list[list[Any]]:
        with self._lock:
            return [list(row) for row in self._rows]

    def append_row(self, values: Sequence[Any]) -> None:
        with self._lock:
            self._rows.append(list(values))

    def row_count(self) -> int:
        with self._lock:
            return len(self._rows)

    def update_row(self, row_index: int, values: Sequence[Any]) -> None:
        with self._lock:
            if row_index < 1 or row_index > len(self._rows):
                raise StorageError(f"Row {row_index} does not exist (table has {len(self._rows)} rows)")
            self._rows[row_index - 1] = list(values)
