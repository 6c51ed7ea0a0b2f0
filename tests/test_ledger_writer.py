"""Tests for ledger.writer submit behavior."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from tallysheet.domain.duplicates import TotalPolicy
from tallysheet.domain.ledger_row import HEADER, LEGACY_HEADER
from tallysheet.domain.receipt import ReceiptItem, ReceiptRecord
from tallysheet.errors import StorageError
from tallysheet.ledger.store import MemoryStore
from tallysheet.ledger.trace import TRACE_HEADER, DecisionTrace
from tallysheet.ledger.writer import Accepted, Duplicate, Failure, LedgerWriter


def _receipt(**overrides: Any) -> ReceiptRecord:
    fields: dict[str, Any] = {"merchant_name": "Acme", "date": "2024-01-01", "total": "10.00"}
    fields.update(overrides)
    return ReceiptRecord(**fields)


class _BrokenStore(MemoryStore):
    def append_row(self, values: Sequence[Any]) -> None:
        raise StorageError("sheet is read-only")


def test_first_write_creates_header_then_row(store: MemoryStore, writer: LedgerWriter) -> None:
    result = writer.submit(_receipt())

    assert result == Accepted(row_index=2)
    rows = store.read_all_rows()
    assert rows[0] == list(HEADER)
    assert len(rows) == 2


def test_same_receipt_twice_is_accepted_then_duplicate(store: MemoryStore, writer: LedgerWriter) -> None:
    first = writer.submit(_receipt())
    second = writer.submit(_receipt())

    assert isinstance(first, Accepted)
    assert isinstance(second, Duplicate)
    assert second.row_index == first.row_index
    assert second.existing.merchant == "Acme"
    assert second.existing.date == "2024-01-01"
    assert second.existing.total == "10.00"
    assert second.existing.currency == "USD"
    assert store.row_count() == 2


def test_receipt_without_total_is_duplicate_of_itself(store: MemoryStore, writer: LedgerWriter) -> None:
    record = ReceiptRecord(merchant_name="Acme", date="2024-01-01")

    first = writer.submit(record)
    second = writer.submit(record)

    assert first == Accepted(row_index=2)
    assert isinstance(second, Duplicate)
    assert second.row_index == 2
    assert second.existing.total == "0.00"
    assert store.row_count() == 2


def test_force_twice_appends_two_rows(store: MemoryStore, writer: LedgerWriter) -> None:
    first = writer.submit(_receipt(force=True))
    second = writer.submit(_receipt(force=True))

    assert first == Accepted(row_index=2)
    assert second == Accepted(row_index=3)
    assert store.row_count() == 3


def test_changing_only_total_is_not_a_duplicate(writer: LedgerWriter) -> None:
    writer.submit(_receipt(total="10.00"))

    assert isinstance(writer.submit(_receipt(total="10.00")), Duplicate)
    assert writer.submit(_receipt(total="10.01")) == Accepted(row_index=3)


def test_duplicate_references_first_matching_row(writer: LedgerWriter) -> None:
    for _ in range(3):
        assert isinstance(writer.submit(_receipt(force=True)), Accepted)

    result = writer.submit(_receipt())

    assert isinstance(result, Duplicate)
    assert result.row_index == 2


def test_matching_ignores_merchant_case_and_padding(store: MemoryStore, writer: LedgerWriter) -> None:
    writer.submit(_receipt(merchant_name="  acme "))

    result = writer.submit(_receipt(merchant_name="Acme"))

    assert isinstance(result, Duplicate)
    assert result.existing.merchant == "  acme "


def test_row_without_items(store: MemoryStore, writer: LedgerWriter) -> None:
    writer.submit(ReceiptRecord(merchant_name="Acme"))

    row = store.read_all_rows()[1]
    assert row == [
        "",
        "",
        "Acme",
        "0.00",
        "USD",
        "0.00",
        0,
        "No items",
        "2024-01-02T03:04:05.678Z",
        "",
        "",
    ]


def test_row_with_one_item(store: MemoryStore, writer: LedgerWriter) -> None:
    record = _receipt(
        currency="USD",
        items=(ReceiptItem(description="Coffee", quantity="1", price="3.50"),),
    )
    writer.submit(record)

    row = store.read_all_rows()[1]
    assert row[6] == 1
    assert row[7] == "Coffee x1 @ USD 3.50"
    assert row[9] == "2024-01-01"
    assert row[10] == "10.00"


def test_legacy_header_gets_nine_column_rows() -> None:
    store = MemoryStore([list(LEGACY_HEADER)])
    writer = LedgerWriter(store)

    assert writer.submit(_receipt()) == Accepted(row_index=2)
    assert len(store.read_all_rows()[1]) == len(LEGACY_HEADER)


def test_header_only_store_never_reports_duplicate() -> None:
    store = MemoryStore([list(HEADER)])
    writer = LedgerWriter(store)

    assert writer.submit(ReceiptRecord()) == Accepted(row_index=2)


def test_numeric_policy_treats_equal_amounts_as_duplicates() -> None:
    store = MemoryStore()
    text_writer = LedgerWriter(store)
    numeric_writer = LedgerWriter(store, policy=TotalPolicy.NUMERIC)
    text_writer.submit(_receipt(total="10.0"))

    assert isinstance(text_writer.submit(_receipt(total="10.00")), Accepted)
    assert isinstance(numeric_writer.submit(_receipt(total="10.00")), Duplicate)


def test_store_failure_is_reported_without_writing_a_row() -> None:
    store = _BrokenStore([list(HEADER)])
    writer = LedgerWriter(store)

    result = writer.submit(_receipt())

    assert result == Failure(error="sheet is read-only")
    assert store.row_count() == 1


def test_trace_records_each_comparison() -> None:
    store = MemoryStore()
    trace_store = MemoryStore()
    writer = LedgerWriter(store, trace=DecisionTrace(trace_store))
    writer.submit(_receipt(merchant_name="Other"))
    writer.submit(_receipt())

    writer.submit(_receipt())

    rows = trace_store.read_all_rows()
    assert rows[0] == list(TRACE_HEADER)
    outcomes = [row[1] for row in rows[1:]]
    # second submit: one mismatch; third submit: mismatch, then match
    assert outcomes == ["mismatch", "mismatch", "match"]
    assert rows[-1][2:] == ["Acme", "Acme", "2024-01-01", "2024-01-01", "10.00", "10.00"]


def test_trace_records_forced_submissions() -> None:
    trace_store = MemoryStore()
    writer = LedgerWriter(MemoryStore(), trace=DecisionTrace(trace_store))

    writer.submit(_receipt(force=True))

    assert [row[1] for row in trace_store.read_all_rows()[1:]] == ["forced"]


def test_trace_failure_does_not_change_result() -> None:
    writer = LedgerWriter(MemoryStore(), trace=DecisionTrace(_BrokenStore()))
    writer.submit(_receipt(force=True))

    assert isinstance(writer.submit(_receipt()), Duplicate)
