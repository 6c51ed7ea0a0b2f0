"""Spreadsheet (xlsx worksheet) backed table store."""

from __future__ import annotations

import threading
import warnings
import zipfile
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from openpyxl import Workbook, load_workbook
from openpyxl.utils.exceptions import InvalidFileException
from openpyxl.worksheet.worksheet import Worksheet

from tallysheet.errors import StorageError
from tallysheet.runtime import get_logger

logger = get_logger(__name__)

# Several stores may share one workbook (one per worksheet).
_workbook_locks: dict[Path, threading.Lock] = {}
_registry_lock = threading.Lock()


def _lock_for(path: Path) -> threading.Lock:
    key = path.resolve()
    with _registry_lock:
        if key not in _workbook_locks:
            _workbook_locks[key] = threading.Lock()
        return _workbook_locks[key]


def _trim(row: Sequence[Any]) -> list[Any]:
    values = list(row)
    while values and values[-1] is None:
        values.pop()
    return values


class XlsxStore:
    """
    A table stored as one worksheet of an .xlsx workbook.

    The workbook is opened for every operation and saved after every write,
    so other tools may keep the file open between requests. Cells may read
    back as numbers or dates if the workbook was edited in a spreadsheet
    application.
    """

    def __init__(self, path: Path | str, sheet_name: str = "Receipts") -> None:
        self.path = Path(path)
        self.sheet_name = sheet_name
        self._lock = _lock_for(self.path)

    # -----------------
    # Workbook access
    # -----------------
    def _open(self) -> Workbook:
        if not self.path.exists():
            workbook = Workbook()
            workbook.active.title = self.sheet_name
            return workbook
        try:
            with warnings.catch_warnings():
                warnings.filterwarnings("ignore", message=".*invalid dependency definitions.*")
                return load_workbook(self.path)
        except (OSError, zipfile.BadZipFile, InvalidFileException, KeyError, ValueError) as exc:
            raise StorageError(f"Cannot open workbook {self.path}: {exc}") from exc

    def _sheet(self, workbook: Workbook) -> Worksheet:
        if self.sheet_name in workbook.sheetnames:
            return workbook[self.sheet_name]
        return workbook.create_sheet(self.sheet_name)

    def _save(self, workbook: Workbook) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            workbook.save(self.path)
        except OSError as exc:
            raise StorageError(f"Cannot save workbook {self.path}: {exc}") from exc

    @staticmethod
    def _rows(sheet: Worksheet) -> list[list[Any]]:
        rows = [_trim(row) for row in sheet.iter_rows(values_only=True)]
        while rows and not rows[-1]:
            rows.pop()
        return rows

    @staticmethod
    def _write(sheet: Worksheet, row_index: int, values: Sequence[Any], clear_to: int = 0) -> None:
        for column, value in enumerate(values, start=1):
            sheet.cell(row=row_index, column=column, value=value)
        for column in range(len(values) + 1, clear_to + 1):
            sheet.cell(row=row_index, column=column, value=None)

    # -----------------
    # Public API
    # -----------------
    def read_all_rows(self) -> list[list[Any]]:
        with self._lock:
            return self._rows(self._sheet(self._open()))

    def row_count(self) -> int:
        return len(self.read_all_rows())

    def append_row(self, values: Sequence[Any]) -> None:
        with self._lock:
            workbook = self._open()
            sheet = self._sheet(workbook)
            next_row = len(self._rows(sheet)) + 1
            self._write(sheet, next_row, values)
            self._save(workbook)
        logger.debug("Appended row %d to %s[%s]", next_row, self.path, self.sheet_name)

    def update_row(self, row_index: int, values: Sequence[Any]) -> None:
        with self._lock:
            workbook = self._open()
            sheet = self._sheet(workbook)
            existing = self._rows(sheet)
            if row_index < 1 or row_index > len(existing):
                raise StorageError(
                    f"Row {row_index} does not exist in {self.path}[{self.sheet_name}] ({len(existing)} rows)"
                )
            self._write(sheet, row_index, values, clear_to=len(existing[row_index - 1]))
            self._save(workbook)
        logger.debug("Rewrote row %d of %s[%s]", row_index, self.path, self.sheet_name)
