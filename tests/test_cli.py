"""Tests for CLI dispatch and command handlers."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import httpx
import pytest

from tallysheet.cli.main import build_parser, main
from tallysheet.domain.ledger_row import LEGACY_HEADER
from tallysheet.ledger.csv_store import CsvStore


def _legacy_ledger(data_dir: Path) -> CsvStore:
    store = CsvStore(data_dir / "receipts.csv")
    store.append_row(list(LEGACY_HEADER))
    store.append_row(["2024-01-01", "", "Acme", "10.00", "USD", "0.00", "0", "No items", "2024-01-01T00:00:00.000Z"])
    store.append_row(["2024-01-02", "", "Bakery", "4.25", "USD", "0.00", "0", "No items", "2024-01-02T00:00:00.000Z"])
    return store


def test_no_command_prints_help(capsys: pytest.CaptureFixture[str]) -> None:
    assert main([]) == 1
    assert "Receipt ledger utilities" in capsys.readouterr().out


def test_parser_defaults() -> None:
    args = build_parser().parse_args(["submit", "receipt.json"])

    assert args.url == "http://localhost:8080/receipts"
    assert args.force is False


def test_stats_command(monkeypatch: pytest.MonkeyPatch, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    monkeypatch.setenv("TALLYSHEET_DATA_DIR", str(tmp_path))
    _legacy_ledger(tmp_path)

    assert main(["stats"]) == 0

    out = capsys.readouterr().out
    assert "Total receipts: 2" in out
    assert "Total amount: 14.25" in out


def test_stats_command_on_empty_ledger(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setenv("TALLYSHEET_DATA_DIR", str(tmp_path))

    assert main(["stats"]) == 0
    assert "No receipts found" in capsys.readouterr().out


def test_migrate_command(monkeypatch: pytest.MonkeyPatch, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    monkeypatch.setenv("TALLYSHEET_DATA_DIR", str(tmp_path))
    store = _legacy_ledger(tmp_path)

    assert main(["migrate"]) == 0

    out = capsys.readouterr().out
    assert "Header upgraded" in out
    assert "Rows backfilled: 2" in out
    assert store.read_all_rows()[1][9:] == ["2024-01-01", "10.00"]


class _FakeResponse:
    def __init__(self, body: dict[str, Any], status_code: int = 200) -> None:
        self._body = body
        self.status_code = status_code
        self.text = json.dumps(body)

    def json(self) -> dict[str, Any]:
        return self._body


def _receipt_file(tmp_path: Path) -> Path:
    path = tmp_path / "receipt.json"
    path.write_text(json.dumps({"merchantName": "Acme", "date": "2024-01-01", "total": "10.00"}))
    return path


def test_submit_command_posts_receipt(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    sent: dict[str, Any] = {}

    def fake_post(url: str, json: dict[str, Any], timeout: float) -> _FakeResponse:
        sent.update(url=url, payload=json)
        return _FakeResponse({"success": True, "message": "Receipt saved successfully", "row": 5})

    monkeypatch.setattr(httpx, "post", fake_post)

    assert main(["submit", str(_receipt_file(tmp_path)), "--force", "--url", "http://ledger/receipts"]) == 0
    assert sent["url"] == "http://ledger/receipts"
    assert sent["payload"]["force"] is True
    assert "Receipt saved successfully (row 5)" in capsys.readouterr().out


def test_submit_command_reports_duplicate(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    def fake_post(url: str, json: dict[str, Any], timeout: float) -> _FakeResponse:
        return _FakeResponse({"isDuplicate": True, "row": 2, "message": "Duplicate found: Acme"})

    monkeypatch.setattr(httpx, "post", fake_post)

    assert main(["submit", str(_receipt_file(tmp_path))]) == 2


def test_submit_command_when_server_is_down(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    def fake_post(url: str, json: dict[str, Any], timeout: float) -> _FakeResponse:
        raise httpx.ConnectError("connection refused")

    monkeypatch.setattr(httpx, "post", fake_post)

    assert main(["submit", str(_receipt_file(tmp_path))]) == 1


def test_submit_command_missing_file(tmp_path: Path) -> None:
    assert main(["submit", str(tmp_path / "missing.json")]) == 1
