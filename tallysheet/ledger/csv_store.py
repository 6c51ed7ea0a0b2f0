"""CSV file backed table store."""

from __future__ import annotations

import csv
import os
import threading
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from tallysheet.errors import StorageError
from tallysheet.runtime import get_logger

logger = get_logger(__name__)


class CsvStore:
    """
    A table stored as one CSV file.

    Every cell reads back as text. A missing file is an empty table; the
    file and its parent directory are created on first append.
    """

    encoding = "utf-8"

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()

    def _read(self) -> list[list[Any]]:
        if not self.path.exists():
            return []
        try:
            with open(self.path, newline="", encoding=self.encoding) as handle:
                return [list(row) for row in csv.reader(handle)]
        except (OSError, csv.Error) as exc:
            raise StorageError(f"Cannot read {self.path}: {exc}") from exc

    def read_all_rows(self) -> list[list[Any]]:
        with self._lock:
            return self._read()

    def row_count(self) -> int:
        with self._lock:
            return len(self._read())

    def append_row(self, values: Sequence[Any]) -> None:
        with self._lock:
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                with open(self.path, "a", newline="", encoding=self.encoding) as handle:
                    csv.writer(handle).writerow(values)
            except (OSError, csv.Error) as exc:
                raise StorageError(f"Cannot append to {self.path}: {exc}") from exc
        logger.debug("Appended row to %s", self.path)

    def update_row(self, row_index: int, values: Sequence[Any]) -> None:
        with self._lock:
            rows = self._read()
            if row_index < 1 or row_index > len(rows):
                raise StorageError(f"Row {row_index} does not exist in {self.path} ({len(rows)} rows)")
            rows[row_index - 1] = list(values)
            tmp_path = self.path.with_name(f"{self.path.name}.tmp")
            try:
                with open(tmp_path, "w", newline="", encoding=self.encoding) as handle:
                    csv.writer(handle).writerows(rows)
                os.replace(tmp_path, self.path)
            except (OSError, csv.Error) as exc:
                raise StorageError(f"Cannot rewrite {self.path}: {exc}") from exc
        logger.debug("Rewrote row %d of %s", row_index, self.path)
