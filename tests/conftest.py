"""Shared pytest fixtures for tallysheet tests."""

from __future__ import annotations

from collections.abc import Iterator
from datetime import datetime, timezone
from pathlib import Path

import pytest

from tallysheet.ledger.store import MemoryStore
from tallysheet.ledger.writer import LedgerWriter
from tallysheet.runtime import reset_settings
from tallysheet.runtime.storage import reset_ledger_writer

FIXED_NOW = datetime(2024, 1, 2, 3, 4, 5, 678000, tzinfo=timezone.utc)


def fixed_clock() -> datetime:
    return FIXED_NOW


@pytest.fixture(autouse=True)
def _isolate_settings(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Iterator[None]:
    """Keep tests independent of the caller's config file and environment."""
    for name in ("TALLYSHEET_BACKEND", "TALLYSHEET_DATA_DIR", "TALLYSHEET_TOTAL_POLICY", "TALLYSHEET_TRACE"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("TALLYSHEET_CONFIG", str(tmp_path / "missing.toml"))
    reset_settings()
    reset_ledger_writer()
    yield
    reset_settings()
    reset_ledger_writer()


@pytest.fixture()
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture()
def writer(store: MemoryStore) -> LedgerWriter:
    return LedgerWriter(store, clock=fixed_clock)
