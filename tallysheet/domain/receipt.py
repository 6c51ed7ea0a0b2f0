"""Data models for submitted receipts."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from tallysheet.errors import ValidationError


@dataclass(frozen=True)
class ReceiptItem:
    """A single line item on a receipt."""

    description: str = ""
    quantity: str = "1"
    price: str = ""


@dataclass(frozen=True)
class ReceiptRecord:
    """
    A receipt as supplied by the caller.

    Text fields keep the caller's raw text. ``None`` means the field was
    absent; storage defaults are applied later when the ledger row is built.
    """

    merchant_name: str | None = None
    date: str | None = None
    time: str | None = None
    total: str | None = None
    currency: str | None = None
    tax: str | None = None
    items: tuple[ReceiptItem, ...] = field(default_factory=tuple)
    force: bool = False

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> ReceiptRecord:
        """Build a record from a decoded JSON object using the wire field names."""
        if not isinstance(payload, Mapping):
            raise ValidationError(f"Receipt payload must be an object, got {type(payload).__name__}")

        raw_items = payload.get("items")
        if raw_items is None:
            raw_items = []
        if not isinstance(raw_items, list):
            raise ValidationError(f"'items' must be a list, got {type(raw_items).__name__}")

        force = payload.get("force", False)
        if force is None:
            force = False
        if not isinstance(force, bool):
            raise ValidationError(f"'force' must be a boolean, got {type(force).__name__}")

        return cls(
            merchant_name=_text_field(payload, "merchantName"),
            date=_text_field(payload, "date"),
            time=_text_field(payload, "time"),
            total=_text_field(payload, "total"),
            currency=_text_field(payload, "currency"),
            tax=_text_field(payload, "tax"),
            items=tuple(_parse_item(raw, index) for index, raw in enumerate(raw_items)),
            force=force,
        )


def _as_text(value: Any, name: str) -> str | None:
    if value is None:
        return None
    if isinstance(value, bool):
        # bool is an int subclass; reject it before the number branch.
        raise ValidationError(f"'{name}' must be text or a number, got a boolean")
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)):
        return str(value)
    raise ValidationError(f"'{name}' must be text or a number, got {type(value).__name__}")


def _text_field(payload: Mapping[str, Any], name: str) -> str | None:
    return _as_text(payload.get(name), name)


def _parse_item(raw: Any, index: int) -> ReceiptItem:
    if not isinstance(raw, Mapping):
        raise ValidationError(f"items[{index}] must be an object, got {type(raw).__name__}")
    description = _as_text(raw.get("description"), f"items[{index}].description")
    quantity = _as_text(raw.get("quantity"), f"items[{index}].quantity")
    price = _as_text(raw.get("price"), f"items[{index}].price")
    return ReceiptItem(
        description=description if description is not None else "",
        quantity=quantity if quantity is not None else "1",
        price=price if price is not None else "",
    )
