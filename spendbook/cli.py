"""
Command-line runner for Spendbook reports and exports.

This module handles configuration loading, logging setup and the report
commands (summary, transactions, export).
"""

import argparse
import logging
import sys
from datetime import date
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from spendbook.config import (
    DEFAULT_TRAILING_MONTHS,
    EXPORT_FORMATS,
    LOG_FILE,
    LOG_FORMAT,
    PROJECT_ROOT,
    STORE_BACKENDS,
    ensure_directories,
    get_log_dir,
    get_log_level,
)
from spendbook.db import FinanceRepository, create_repository
from spendbook.errors import SpendbookError
from spendbook.services import DateParser, ExportFormat

logger = logging.getLogger(__name__)


def configure_logging(log_to_file: bool = True):
    """Configure root logging with a file and a stderr handler."""
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_to_file:
        ensure_directories()
        handlers.append(logging.FileHandler(get_log_dir() / LOG_FILE))

    logging.basicConfig(level=get_log_level(), format=LOG_FORMAT, handlers=handlers)


def load_environment(env_path: Optional[Path] = None):
    """Load a .env file if it exists."""
    env_path = env_path or PROJECT_ROOT / ".env"
    if env_path.exists():
        load_dotenv(env_path)
        logger.info(f"Loaded environment from {env_path}")
    else:
        logger.debug(f".env file not found at {env_path}")


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="spendbook", description="Personal finance reports and exports"
    )
    parser.add_argument("--db", type=Path, help="Path to the SQLite database file")
    parser.add_argument(
        "--store", choices=STORE_BACKENDS, help="Storage backend (default: sqlite)"
    )
    parser.add_argument(
        "--no-log-file", action="store_true", help="Log to stderr only"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    summary = subparsers.add_parser("summary", help="Show expense rollups")
    summary.add_argument(
        "--months",
        type=int,
        default=DEFAULT_TRAILING_MONTHS,
        help="Number of trailing months to show",
    )

    listing = subparsers.add_parser("transactions", help="List transactions")
    listing.add_argument("--start", help="Start date (YYYY-MM-DD, inclusive)")
    listing.add_argument("--end", help="End date (YYYY-MM-DD, inclusive)")
    listing.add_argument("--limit", type=int, help="Maximum rows to show")

    export = subparsers.add_parser("export", help="Export transactions to a file")
    export.add_argument("--format", choices=EXPORT_FORMATS, default="csv")
    export.add_argument("--start", help="Start date (YYYY-MM-DD, inclusive)")
    export.add_argument("--end", help="End date (YYYY-MM-DD, inclusive)")
    export.add_argument(
        "--output", type=Path, help="Output file (default: generated name)"
    )

    args = parser.parse_args(argv)
    ranged = args.command in ("transactions", "export")
    if ranged and bool(args.start) != bool(args.end):
        parser.error("--start and --end must be given together")
    return args


def _print_rollup(title: str, rows):
    print(title)
    print("-" * 40)
    if not rows:
        print("  (no data)")
    for row in rows:
        print(f"  {row.key:<24} {row.total:>12,.2f}  ({row.count})")
    print()


def cmd_summary(repo: FinanceRepository, args: argparse.Namespace) -> int:
    summary = repo.queries.summary()
    print(f"Total spent: {summary['total']:,.2f} across {summary['count']} transactions")
    print(f"This month:  {repo.queries.current_month_total():,.2f}")
    print()
    _print_rollup("By category", repo.category_rollup())
    _print_rollup("By month", repo.monthly_rollup(last=args.months))
    _print_rollup("By bank account", repo.bank_rollup())
    return 0


def cmd_transactions(repo: FinanceRepository, args: argparse.Namespace) -> int:
    if args.start and args.end:
        transactions = repo.filter_by_date_range(args.start, args.end)
    else:
        transactions = repo.transactions.list()

    if args.limit is not None:
        transactions = transactions[: args.limit]

    for txn in transactions:
        print(
            f"{txn.transaction_date:%Y-%m-%d}  {txn.bank_account.account_name:<16} "
            f"{txn.expense_category.name:<20} {txn.amount:>12,.2f}  "
            f"{txn.description or ''}"
        )
    print(f"\n{len(transactions)} transaction(s)")
    return 0


def cmd_export(repo: FinanceRepository, args: argparse.Namespace) -> int:
    export_format = ExportFormat(args.format)
    service = repo.exports

    if export_format == ExportFormat.XLSX:
        buffer = service.export_to_xlsx(args.start, args.end)
    else:
        buffer = service.export_to_csv(args.start, args.end)

    output = args.output
    if output is None:
        start_date: Optional[date] = None
        end_date: Optional[date] = None
        if args.start and args.end:
            start_date = DateParser.parse(args.start, "start_date").date()
            end_date = DateParser.parse(args.end, "end_date").date()
        output = Path(service.get_filename(export_format, start_date, end_date))

    output.write_bytes(buffer.getvalue())
    logger.info(f"Wrote {export_format.value} export to {output}")
    print(f"Exported to {output}")
    return 0


COMMANDS = {
    "summary": cmd_summary,
    "transactions": cmd_transactions,
    "export": cmd_export,
}


def main(argv: Optional[list[str]] = None) -> int:
    """Run the command line interface."""
    args = parse_args(argv)
    load_environment()
    configure_logging(log_to_file=not args.no_log_file)

    try:
        repo = create_repository(backend=args.store, db_path=args.db)
    except (SpendbookError, ValueError) as e:
        logger.error(f"Failed to open store: {e}", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1

    try:
        return COMMANDS[args.command](repo, args)
    except SpendbookError as e:
        logger.error(f"Command {args.command} failed: {e}", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        repo.close()


if __name__ == "__main__":
    sys.exit(main())
