"""Ledger command handlers used by the unified CLI."""

import argparse
import json
import sys
from pathlib import Path

import httpx

from tallysheet.errors import LedgerError
from tallysheet.runtime import get_logger, get_settings

logger = get_logger(__name__)


def cmd_serve(args: argparse.Namespace) -> None:
    """Start the FastAPI server for receiving receipts."""
    import uvicorn

    from tallysheet.runtime import server

    settings = get_settings()
    print(f"Starting receipt ledger on {args.host}:{args.port}")
    print(f"Backend: {settings.backend} ({settings.data_dir})")
    print(f"Submit endpoints: http://{args.host}:{args.port}/ | /receipts")
    print("Press Ctrl+C to stop")

    uvicorn.run(server.app, host=args.host, port=args.port)


def cmd_submit(args: argparse.Namespace) -> None:
    """POST a receipt JSON file to a running server and report the outcome."""
    path = Path(args.json_file)
    if not path.exists():
        print(f"Error: file not found: {path}")
        sys.exit(1)

    try:
        payload = json.loads(path.read_text())
    except json.JSONDecodeError as e:
        print(f"Error: {path} is not valid JSON: {e}")
        sys.exit(1)
    if not isinstance(payload, dict):
        print(f"Error: {path} must contain a JSON object")
        sys.exit(1)
    if args.force:
        payload["force"] = True

    try:
        response = httpx.post(args.url, json=payload, timeout=30.0)
    except httpx.RequestError as e:
        logger.error(f"Receipt ledger unavailable: {e}")
        print(f"Receipt ledger unavailable: {e}")
        sys.exit(1)

    try:
        body = response.json()
    except ValueError:
        print(f"Unexpected response ({response.status_code}): {response.text}")
        sys.exit(1)

    if body.get("isDuplicate"):
        print(body.get("message", "Duplicate receipt"))
        print("Re-run with --force to save it anyway.")
        sys.exit(2)
    if body.get("success"):
        print(f"{body.get('message')} (row {body.get('row')})")
        return

    print(f"Error: {body.get('error', 'unknown error')}")
    sys.exit(1)


def cmd_migrate(args: argparse.Namespace) -> None:
    """Backfill the raw date/total columns of the configured ledger."""
    from tallysheet.ledger.migrate import migrate
    from tallysheet.runtime.storage import open_ledger_store

    try:
        report = migrate(open_ledger_store(get_settings()))
    except LedgerError as e:
        logger.error("Migration failed: %s", e)
        print(f"Migration failed: {e}")
        sys.exit(1)

    if report.header_upgraded:
        print("Header upgraded to include Raw Date / Raw Total.")
    print(f"Rows scanned: {report.rows_scanned}")
    print(f"Rows backfilled: {report.rows_backfilled}")


def cmd_stats(args: argparse.Namespace) -> None:
    """Print receipt count and total amount."""
    from tallysheet.domain.stats import summarize
    from tallysheet.runtime.storage import open_ledger_store

    try:
        rows = open_ledger_store(get_settings()).read_all_rows()
    except LedgerError as e:
        print(f"Cannot read ledger: {e}")
        sys.exit(1)

    stats = summarize(rows)
    if stats.receipt_count == 0:
        print("No receipts found")
        return

    print(f"Total receipts: {stats.receipt_count}")
    print(f"Total amount: {stats.total_amount:.2f}")
    if stats.skipped_totals:
        print(f"Skipped non-numeric totals: {stats.skipped_totals}")
