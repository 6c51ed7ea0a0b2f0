"""Append-only receipt ledger with duplicate detection."""

__version__ = "0.1.0"
