#!/usr/bin/env python3

import argparse
import logging
from collections.abc import Callable, Sequence


def _coerce_exit_code(code: object) -> int:
    if code is None:
        return 0
    if isinstance(code, int):
        return code
    return 1


def _run_command(command: Callable[[argparse.Namespace], None], args: argparse.Namespace) -> int:
    """
    Run a command handler that may call sys.exit().

    This keeps process termination centralized in this module's entrypoint.
    """
    try:
        command(args)
    except SystemExit as exc:
        return _coerce_exit_code(exc.code)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tally",
        description="Receipt ledger utilities",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands:
  serve [--host] [--port]            Start the receipt ledger server
  submit <json_file> [--url] [--force]
                                     Send a receipt to a running server
  migrate                            Backfill raw date/total columns
  stats                              Show receipt count and total amount

Configuration:
  tallysheet.toml [ledger] table, or TALLYSHEET_BACKEND, TALLYSHEET_DATA_DIR,
  TALLYSHEET_TOTAL_POLICY, TALLYSHEET_TRACE environment variables.
  TALLYSHEET_LOG_LEVEL sets the log level (default: INFO).
""",
    )

    parser.add_argument("-v", "--verbose", action="store_true", help="Show debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    serve_parser = subparsers.add_parser("serve", help="Start the receipt ledger server")
    serve_parser.add_argument("--host", default="0.0.0.0", help="Host to bind to (default: 0.0.0.0)")
    serve_parser.add_argument("--port", type=int, default=8080, help="Port to bind to (default: 8080)")

    submit_parser = subparsers.add_parser("submit", help="Send a receipt JSON file to a running server")
    submit_parser.add_argument("json_file", help="Path to a receipt JSON object")
    submit_parser.add_argument(
        "--url", default="http://localhost:8080/receipts", help="Server URL (default: http://localhost:8080/receipts)"
    )
    submit_parser.add_argument("--force", action="store_true", help="Save even if a duplicate exists")

    subparsers.add_parser("migrate", help="Backfill raw date/total columns in the ledger")
    subparsers.add_parser("stats", help="Show receipt count and total amount")

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        from tallysheet.runtime import set_log_level

        set_log_level(logging.DEBUG)

    if args.command is None:
        parser.print_help()
        return 1

    if args.command == "serve":
        from tallysheet.cli.ledger import cmd_serve

        return _run_command(cmd_serve, args)
    elif args.command == "submit":
        from tallysheet.cli.ledger import cmd_submit

        return _run_command(cmd_submit, args)
    elif args.command == "migrate":
        from tallysheet.cli.ledger import cmd_migrate

        return _run_command(cmd_migrate, args)
    elif args.command == "stats":
        from tallysheet.cli.ledger import cmd_stats

        return _run_command(cmd_stats, args)

    return 1


if __name__ == "__main__":
    raise SystemExit(main())
